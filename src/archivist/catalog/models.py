"""Archive object and image models."""

from __future__ import annotations

import json
import threading
import time
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

ARRAY_FIELDS = ("images", "keywords", "parts")


class ImageState(str, Enum):
    """Where the bytes behind an image currently live."""

    LOCAL = "local"
    REMOTE = "remote"


def parse_json_list(value: Any) -> list:
    """Return ``value`` as a list, decoding JSON-encoded cells.

    Spreadsheet cells carry arrays as JSON strings. Blank cells, malformed JSON
    and non-list payloads all degrade to an empty list.
    """
    if value is None or value == "":
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError:
            return []
        return decoded if isinstance(decoded, list) else []
    return []


class ArchiveImage(BaseModel):
    """Image attached to an archive object.

    Attributes:
        url: Remote URL, or a ``data:`` URI while the image is local.
        caption: Free-text caption.
        is_primary: Whether this image represents the object in listings.
        state: ``LOCAL`` while the bytes have not been accepted by the remote store.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    url: str
    caption: str = ""
    is_primary: bool = Field(default=False, alias="isPrimary")
    state: ImageState = ImageState.REMOTE

    @model_validator(mode="before")
    @classmethod
    def _state_from_flag(cls, data: Any) -> Any:
        if isinstance(data, dict) and "state" not in data:
            flag = data.get("isLocal", data.get("is_local"))
            if flag is not None:
                data = dict(data)
                data["state"] = ImageState.LOCAL if flag else ImageState.REMOTE
        return data

    @field_validator("caption", mode="before")
    @classmethod
    def _blank_caption(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_local(self) -> bool:
        return self.state is ImageState.LOCAL

    def to_payload(self) -> dict[str, Any]:
        """Return the wire representation used by the remote store and caches."""
        return {
            "url": self.url,
            "caption": self.caption,
            "isPrimary": self.is_primary,
            "isLocal": self.is_local,
        }


class ArchiveObject(BaseModel):
    """A catalogued physical item with descriptive metadata and images.

    Field aliases follow the spreadsheet column names; ``from`` is exposed as
    ``origin`` because it is a Python keyword.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = ""
    title: str = ""
    about_text: str = Field(default="", alias="aboutText")
    images: List[ArchiveImage] = Field(default_factory=list)
    origin: str = Field(default="", alias="from")
    designer: str = ""
    maker: str = ""
    maker_role: str = Field(default="", alias="makerRole")
    portfolio_title: str = Field(default="", alias="portfolioTitle")
    medium_materials: str = Field(default="", alias="mediumMaterials")
    measurements: str = ""
    keywords: List[str] = Field(default_factory=list)
    collection: str = ""
    object_type: str = Field(default="", alias="objectType")
    object_number: str = Field(default="", alias="objectNumber")
    accession_date: str = Field(default="", alias="accessionDate")
    controlling_institution: str = Field(default="", alias="controllingInstitution")
    collection_type: str = Field(default="", alias="collectionType")
    classification: str = ""
    physical_characteristics: str = Field(default="", alias="physicalCharacteristics")
    catalogued_date: str = Field(default="", alias="cataloguedDate")
    cataloguer: str = ""
    related_acquisition_record: str = Field(default="", alias="relatedAcquisitionRecord")
    acquisition_notes: str = Field(default="", alias="acquisitionNotes")
    parts: List[str] = Field(default_factory=list)
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("keywords", "parts", mode="before")
    @classmethod
    def _decode_array_cell(cls, value: Any) -> list:
        return parse_json_list(value)

    @field_validator("images", mode="before")
    @classmethod
    def _decode_images(cls, value: Any) -> list:
        kept = []
        for item in parse_json_list(value):
            if isinstance(item, ArchiveImage):
                kept.append(item)
            elif isinstance(item, dict) and isinstance(item.get("url"), str) and item["url"]:
                kept.append(item)
        return kept

    @field_validator("keywords", "parts", mode="after")
    @classmethod
    def _stringify_items(cls, value: list[Any]) -> list[str]:
        return [str(item) for item in value if item not in (None, "")]

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _blank_timestamp(cls, value: Any) -> Any:
        if value in (None, ""):
            return None
        return str(value)

    @model_validator(mode="before")
    @classmethod
    def _coerce_cells(cls, data: Any) -> Any:
        # Sheets hand back numbers for numeric-looking cells and "" for blanks.
        if not isinstance(data, dict):
            return data
        coerced = dict(data)
        for key, value in data.items():
            if key in ARRAY_FIELDS or key in {"createdAt", "updatedAt", "created_at", "updated_at"}:
                continue
            if value is None:
                coerced[key] = ""
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                coerced[key] = str(int(value)) if float(value).is_integer() else str(value)
        return coerced

    @property
    def primary_image(self) -> Optional[ArchiveImage]:
        """Return the primary image, falling back to the first one."""
        for image in self.images:
            if image.is_primary:
                return image
        return self.images[0] if self.images else None

    @property
    def local_images(self) -> list[ArchiveImage]:
        return [image for image in self.images if image.is_local]

    def to_payload(self) -> dict[str, Any]:
        """Return the camelCase wire representation of the object."""
        payload = self.model_dump(mode="json", by_alias=True, exclude={"images"})
        payload["images"] = [image.to_payload() for image in self.images]
        return payload


_id_lock = threading.Lock()
_last_id = 0


def generate_object_id() -> str:
    """Return a millisecond-timestamp id, strictly increasing within the process."""
    global _last_id
    with _id_lock:
        candidate = max(int(time.time() * 1000), _last_id + 1)
        _last_id = candidate
    return str(candidate)


__all__ = [
    "ARRAY_FIELDS",
    "ArchiveImage",
    "ArchiveObject",
    "ImageState",
    "generate_object_id",
    "parse_json_list",
]
