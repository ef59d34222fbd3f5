"""JPEG encoding and the size-budget reduction loop."""

from __future__ import annotations

import base64
import binascii
import io
import re
from dataclasses import dataclass

from PIL import Image

from archivist.config.models import ImageSettings

JPEG_MIME = "image/jpeg"
_DATA_URI = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]+)*?);base64,(?P<data>.*)$",
    re.S,
)


@dataclass(slots=True)
class EncodedImage:
    """Result of encoding a bitmap.

    Attributes:
        data: Encoded JPEG bytes.
        width: Pixel width of the encoded image.
        height: Pixel height of the encoded image.
        quality: JPEG quality used, between 0 and 1.
        iterations: Number of re-encodes performed after the first encode.
        within_budget: Whether the data URI fits the character budget.
    """

    data: bytes
    width: int
    height: int
    quality: float
    iterations: int = 0
    within_budget: bool = True

    @property
    def data_uri(self) -> str:
        return to_data_uri(self.data)

    @property
    def encoded_length(self) -> int:
        return len(self.data_uri)


def to_data_uri(data: bytes, mime_type: str = JPEG_MIME) -> str:
    """Return ``data`` as a base64 ``data:`` URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def parse_data_uri(uri: str) -> tuple[str, bytes]:
    """Split a base64 ``data:`` URI into its MIME type and bytes.

    Raises:
        ValueError: If ``uri`` is not a base64 data URI.
    """
    match = _DATA_URI.match(uri or "")
    if match is None:
        raise ValueError("Not a base64 data URI.")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc
    return match.group("mime") or "application/octet-stream", data


def encode_jpeg(bitmap: Image.Image, quality: float) -> bytes:
    """Encode ``bitmap`` as JPEG at ``quality`` (0-1)."""
    buffer = io.BytesIO()
    level = max(1, min(95, round(quality * 100)))
    bitmap.save(buffer, format="JPEG", quality=level, optimize=True)
    return buffer.getvalue()


def scale_to_fit(bitmap: Image.Image, max_dimension: int) -> Image.Image:
    """Downscale so neither side exceeds ``max_dimension``; smaller images are kept."""
    width, height = bitmap.size
    scale = min(1.0, max_dimension / max(width, height))
    if scale >= 1.0:
        return bitmap
    size = (max(1, round(width * scale)), max(1, round(height * scale)))
    return bitmap.resize(size, Image.Resampling.LANCZOS)


def _encoded_chars(data: bytes) -> int:
    # Length of the data URI without building it.
    return len(f"data:{JPEG_MIME};base64,") + 4 * ((len(data) + 2) // 3)


def shrink_to_budget(bitmap: Image.Image, budget: int, settings: ImageSettings) -> EncodedImage:
    """Encode ``bitmap`` so its data URI fits in ``budget`` characters if possible.

    Quality is lowered by ``quality_step`` until ``min_quality``; after that the
    pixel dimensions shrink by ``shrink_factor`` until the longer side reaches
    ``min_dimension``. Every step re-encodes. The loop stops when the payload
    fits, after ``max_iterations`` re-encodes, or when neither quality nor size
    can go lower.
    """
    source = bitmap
    width, height = source.size
    longest = max(width, height)
    quality = settings.initial_quality
    current = source
    data = encode_jpeg(current, quality)
    iterations = 0

    while _encoded_chars(data) > budget and iterations < settings.max_iterations:
        if quality > settings.min_quality:
            quality = max(settings.min_quality, round(quality - settings.quality_step, 4))
        else:
            current_longest = max(current.size)
            target = max(settings.min_dimension, int(current_longest * settings.shrink_factor))
            if target >= current_longest:
                break
            scale = target / longest
            size = (max(1, round(width * scale)), max(1, round(height * scale)))
            current = source.resize(size, Image.Resampling.LANCZOS)
        data = encode_jpeg(current, quality)
        iterations += 1

    return EncodedImage(
        data=data,
        width=current.size[0],
        height=current.size[1],
        quality=quality,
        iterations=iterations,
        within_budget=_encoded_chars(data) <= budget,
    )


__all__ = [
    "EncodedImage",
    "JPEG_MIME",
    "encode_jpeg",
    "parse_data_uri",
    "scale_to_fit",
    "shrink_to_budget",
    "to_data_uri",
]
