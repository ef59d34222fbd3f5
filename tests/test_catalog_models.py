"""Tests for archive object and image models."""

import pytest

from archivist.catalog import (
    ArchiveImage,
    ArchiveObject,
    ImageState,
    generate_object_id,
    load_sample_objects,
    parse_json_list,
    validate_object,
)
from archivist.catalog.errors import InvalidObjectError


def test_parse_json_list_degrades_to_empty_list() -> None:
    assert parse_json_list('["a", "b"]') == ["a", "b"]
    assert parse_json_list("") == []
    assert parse_json_list(None) == []
    assert parse_json_list("[not json") == []
    assert parse_json_list('{"url": "x"}') == []
    assert parse_json_list(["already", "a", "list"]) == ["already", "a", "list"]


def test_object_accepts_sheet_cells() -> None:
    obj = ArchiveObject.model_validate(
        {
            "id": 1700000000000,
            "title": "Stair Newel Post",
            "from": "Original to building",
            "keywords": '["stairs", "oak"]',
            "parts": "",
            "images": '[{"url": "https://img.example/1.jpg", "isPrimary": true}, {"caption": "x"}]',
            "objectNumber": 42,
            "measurements": None,
            "createdAt": "",
        }
    )

    assert obj.id == "1700000000000"
    assert obj.origin == "Original to building"
    assert obj.keywords == ["stairs", "oak"]
    assert obj.parts == []
    assert [image.url for image in obj.images] == ["https://img.example/1.jpg"]
    assert obj.object_number == "42"
    assert obj.measurements == ""
    assert obj.created_at is None


def test_object_malformed_array_cell_reads_as_empty() -> None:
    obj = ArchiveObject.model_validate({"id": "7", "title": "Lamp", "keywords": "[oops"})

    assert obj.keywords == []


def test_image_state_follows_wire_flag() -> None:
    local = ArchiveImage.model_validate({"url": "data:image/jpeg;base64,AAAA", "isLocal": True})
    remote = ArchiveImage.model_validate({"url": "https://img.example/a.jpg", "isLocal": False})
    unflagged = ArchiveImage.model_validate({"url": "https://img.example/b.jpg"})

    assert local.state is ImageState.LOCAL
    assert local.is_local
    assert remote.state is ImageState.REMOTE
    assert unflagged.state is ImageState.REMOTE
    assert local.to_payload() == {
        "url": "data:image/jpeg;base64,AAAA",
        "caption": "",
        "isPrimary": False,
        "isLocal": True,
    }


def test_to_payload_uses_column_names() -> None:
    obj = ArchiveObject(id="9", title="Tile", origin="Kiln", object_type="Tile", keywords=["clay"])

    payload = obj.to_payload()

    assert payload["from"] == "Kiln"
    assert payload["objectType"] == "Tile"
    assert payload["keywords"] == ["clay"]
    assert payload["images"] == []
    assert "origin" not in payload
    assert ArchiveObject.model_validate(payload) == obj


def test_primary_image_falls_back_to_first() -> None:
    obj = ArchiveObject(
        id="1",
        title="Beam",
        images=[ArchiveImage(url="https://a"), ArchiveImage(url="https://b")],
    )

    assert obj.primary_image is not None
    assert obj.primary_image.url == "https://a"
    assert ArchiveObject(id="2", title="Empty").primary_image is None


def test_generate_object_id_is_strictly_increasing() -> None:
    ids = [int(generate_object_id()) for _ in range(50)]

    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)


def test_validate_object_requires_title() -> None:
    with pytest.raises(InvalidObjectError):
        validate_object(ArchiveObject(title="   "))

    validate_object(ArchiveObject(title="Hinge"))


def test_sample_objects_load() -> None:
    samples = load_sample_objects()

    assert [obj.id for obj in samples] == ["1", "2", "3", "4", "5", "6"]
    assert all(obj.title for obj in samples)
    assert samples[0].primary_image is not None
    samples[0].title = "Changed"
    assert load_sample_objects()[0].title == "Original Redwood Ceiling Beam"
