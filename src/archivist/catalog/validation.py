"""Validation applied to archive objects before any network call."""

from __future__ import annotations

from .errors import InvalidObjectError
from .models import ArchiveObject


def validate_object(obj: ArchiveObject) -> None:
    """Reject objects that must not reach the remote store.

    Raises:
        InvalidObjectError: If the title is blank.
    """
    if not obj.title.strip():
        raise InvalidObjectError("Title is required.")
