"""Tests for the sheet row codec and the in-process sheet endpoint."""

import json
from pathlib import Path

import httpx
import pytest

from archivist.remote import (
    HEADERS,
    SheetTable,
    SheetTransport,
    decode_objects,
    decode_row,
    encode_row,
)


def test_headers_start_with_id() -> None:
    assert HEADERS[0] == "id"
    assert "from" in HEADERS
    assert HEADERS[-2:] == ("createdAt", "updatedAt")


def test_encode_row_serializes_array_cells() -> None:
    row = encode_row({"id": "1", "title": "Beam", "keywords": ["oak"], "images": None})

    assert len(row) == len(HEADERS)
    assert row[HEADERS.index("keywords")] == '["oak"]'
    assert row[HEADERS.index("images")] == "[]"
    assert row[HEADERS.index("parts")] == "[]"
    assert row[HEADERS.index("maker")] == ""


def test_decode_row_tolerates_short_and_malformed_rows() -> None:
    row = ["5", "Hinge", "", "not json"]

    record = decode_row(row)

    assert record["id"] == "5"
    assert record["images"] == []
    assert record["keywords"] == []
    assert record["updatedAt"] == ""


def test_decode_objects_skips_rows_without_id() -> None:
    objects = decode_objects(
        [
            {"id": "", "title": "Orphan"},
            {"title": "No id"},
            "garbage",
            {"id": "3", "title": "Blueprint", "keywords": '["plans"]'},
        ]
    )

    assert [obj.id for obj in objects] == ["3"]
    assert objects[0].keywords == ["plans"]


def test_sheet_table_crud() -> None:
    table = SheetTable()

    created = table.create({"title": "Sideboard", "keywords": ["oak"]})
    assert created["id"]
    assert created["createdAt"] == created["updatedAt"]

    updated = table.update({**created, "title": "Oak Sideboard"})
    assert updated["createdAt"] == created["createdAt"]
    assert [record["title"] for record in table.get_all()] == ["Oak Sideboard"]

    assert table.delete(created["id"]) == {"deleted": True, "id": created["id"]}
    assert table.delete(created["id"]) == {
        "deleted": False,
        "id": created["id"],
        "error": "Not found",
    }
    assert table.get_all() == []


def test_sheet_table_update_unknown_id_creates_row() -> None:
    table = SheetTable()

    table.update({"id": "77", "title": "Late arrival"})

    assert [record["id"] for record in table.get_all()] == ["77"]


def test_sheet_table_persists_and_reorders_columns(tmp_path: Path) -> None:
    path = tmp_path / "sheet.json"
    SheetTable(path).create({"id": "1", "title": "Beam", "keywords": ["redwood"]})

    reloaded = SheetTable(path)
    assert reloaded.get_all()[0]["keywords"] == ["redwood"]

    legacy = tmp_path / "legacy.json"
    legacy.write_text(
        json.dumps({"headers": ["title", "id"], "rows": [["Lantern", "2"], ["Nameless", ""]]}),
        encoding="utf-8",
    )
    records = SheetTable(legacy).get_all()
    assert [(record["id"], record["title"]) for record in records] == [("2", "Lantern")]


def test_upload_image_writes_file(tmp_path: Path) -> None:
    table = SheetTable(image_dir=tmp_path / "images")

    result = table.upload_image({"filename": "hinge.jpg", "data": "aGVsbG8="})

    assert result["name"] == "hinge.jpg"
    assert result["url"].startswith("file://")
    assert table.uploads[result["id"]] == b"hello"

    with pytest.raises(ValueError):
        table.upload_image({"filename": "empty.jpg"})
    with pytest.raises(ValueError):
        table.upload_image({"filename": "bad.jpg", "data": "***"})


def test_transport_wraps_actions_in_envelopes() -> None:
    transport = SheetTransport(SheetTable())
    client = httpx.Client(transport=transport)

    created = client.post(
        "http://sheet/exec", json={"action": "create", "object": {"id": "1", "title": "Beam"}}
    ).json()
    listed = client.get("http://sheet/exec", params={"action": "getAll"}).json()
    unknown = client.post("http://sheet/exec", json={"action": "explode"}).json()
    failed_upload = client.post("http://sheet/exec", json={"action": "uploadImage"}).json()

    assert created["success"] is True
    assert created["result"]["id"] == "1"
    assert listed == {"success": True, "objects": listed["objects"]}
    assert [record["id"] for record in listed["objects"]] == ["1"]
    assert unknown == {"success": False, "error": "Unknown action"}
    assert failed_upload["success"] is False
    assert "Missing image data" in failed_upload["error"]
    assert [entry["method"] for entry in transport.requests] == ["POST", "GET", "POST", "POST"]
