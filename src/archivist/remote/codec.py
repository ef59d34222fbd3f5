"""Spreadsheet row layout and cell encoding for the remote store."""

from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Mapping, Sequence

from pydantic import ValidationError

from archivist.catalog.models import ARRAY_FIELDS, ArchiveObject, parse_json_list

LOGGER = logging.getLogger(__name__)

HEADERS: tuple[str, ...] = (
    "id",
    "title",
    "aboutText",
    "images",
    "from",
    "designer",
    "maker",
    "makerRole",
    "portfolioTitle",
    "mediumMaterials",
    "measurements",
    "keywords",
    "collection",
    "objectType",
    "objectNumber",
    "accessionDate",
    "controllingInstitution",
    "collectionType",
    "classification",
    "physicalCharacteristics",
    "cataloguedDate",
    "cataloguer",
    "relatedAcquisitionRecord",
    "acquisitionNotes",
    "parts",
    "createdAt",
    "updatedAt",
)


def encode_row(record: Mapping[str, Any], headers: Sequence[str] = HEADERS) -> list[Any]:
    """Lay out ``record`` as a row; array fields become JSON text cells."""
    row: list[Any] = []
    for header in headers:
        value = record.get(header)
        if header in ARRAY_FIELDS:
            row.append(json.dumps(value or []))
        else:
            row.append(value if value else "")
    return row


def decode_row(row: Sequence[Any], headers: Sequence[str] = HEADERS) -> dict[str, Any]:
    """Map a row back to a record, parsing JSON array cells leniently."""
    record: dict[str, Any] = {}
    for index, header in enumerate(headers):
        value = row[index] if index < len(row) else ""
        record[header] = parse_json_list(value) if header in ARRAY_FIELDS else value
    return record


def decode_objects(records: Iterable[Any]) -> list[ArchiveObject]:
    """Validate remote records, skipping rows without an id or with bad data."""
    objects: list[ArchiveObject] = []
    for record in records or []:
        if not isinstance(record, Mapping) or not record.get("id"):
            continue
        try:
            objects.append(ArchiveObject.model_validate(dict(record)))
        except ValidationError as exc:
            LOGGER.warning("Skipping malformed record %r: %s", record.get("id"), exc)
    return objects


__all__ = ["HEADERS", "decode_objects", "decode_row", "encode_row"]
