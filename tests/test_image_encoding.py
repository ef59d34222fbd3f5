"""Tests for JPEG encoding and the size-budget loop."""

import io

import pytest
from PIL import Image

from archivist.config.models import ImageSettings
from archivist.images import (
    ImagePipeline,
    encode_jpeg,
    parse_data_uri,
    scale_to_fit,
    shrink_to_budget,
)
from archivist.images.encoding import to_data_uri


def _noise(size: int) -> Image.Image:
    return Image.effect_noise((size, size), 100).convert("RGB")


def test_scale_to_fit_preserves_aspect_ratio() -> None:
    scaled = scale_to_fit(Image.new("RGB", (1600, 1000)), 800)

    assert scaled.size == (800, 500)


def test_scale_to_fit_leaves_small_images_alone() -> None:
    bitmap = Image.new("RGB", (300, 200))

    assert scale_to_fit(bitmap, 800) is bitmap


def test_encode_jpeg_produces_jpeg() -> None:
    data = encode_jpeg(Image.new("RGB", (10, 10), "red"), 0.82)

    assert data[:2] == b"\xff\xd8"
    with Image.open(io.BytesIO(data)) as decoded:
        assert decoded.format == "JPEG"


def test_data_uri_round_trip() -> None:
    uri = to_data_uri(b"\x00\x01binary")

    assert uri.startswith("data:image/jpeg;base64,")
    assert parse_data_uri(uri) == ("image/jpeg", b"\x00\x01binary")


@pytest.mark.parametrize(
    "uri", ["https://img.example/a.jpg", "data:image/png;base64,***", "", "data:text/plain,hi"]
)
def test_parse_data_uri_rejects_invalid_input(uri: str) -> None:
    with pytest.raises(ValueError):
        parse_data_uri(uri)


def test_small_image_fits_without_reduction() -> None:
    settings = ImageSettings()

    result = shrink_to_budget(Image.new("RGB", (400, 300), "navy"), 42_000, settings)

    assert result.iterations == 0
    assert result.within_budget
    assert result.quality == pytest.approx(0.82)
    assert result.encoded_length <= 42_000


def test_noise_image_reduction_terminates() -> None:
    settings = ImageSettings()

    result = shrink_to_budget(_noise(800), settings.max_encoded_chars, settings)

    assert 0 < result.iterations <= settings.max_iterations
    assert result.quality == pytest.approx(settings.min_quality)
    assert result.within_budget or max(result.width, result.height) == settings.min_dimension
    assert result.within_budget == (result.encoded_length <= settings.max_encoded_chars)


def test_quality_is_lowered_before_dimensions() -> None:
    settings = ImageSettings(max_iterations=2)

    result = shrink_to_budget(_noise(600), settings.max_encoded_chars, settings)

    assert result.iterations == 2
    assert (result.width, result.height) == (600, 600)
    assert result.quality == pytest.approx(0.66)
    assert not result.within_budget


def test_iteration_cap_is_respected() -> None:
    settings = ImageSettings(max_iterations=0)

    result = shrink_to_budget(_noise(600), 1_000, settings)

    assert result.iterations == 0
    assert not result.within_budget


def test_pathological_image_resolves_within_cap() -> None:
    settings = ImageSettings()
    huge = Image.effect_noise((10_000, 10_000), 100)

    result = ImagePipeline(settings).encode(huge)

    assert result.iterations <= 30
    assert max(result.width, result.height) <= settings.max_dimension
