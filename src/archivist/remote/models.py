"""Remote store payload models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UploadResult(BaseModel):
    """Result of an ``uploadImage`` action.

    Attributes:
        id: Identifier of the stored file.
        url: Publicly viewable link to the file.
        name: Stored file name.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    url: str
    name: str = ""


__all__ = ["UploadResult"]
