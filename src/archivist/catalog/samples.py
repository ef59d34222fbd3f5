"""Bundled sample collection used when the remote store is unavailable."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources

from .models import ArchiveObject

_SAMPLE_RESOURCE = "sample_objects.json"


@lru_cache(maxsize=1)
def _sample_payload() -> tuple[dict, ...]:
    text = resources.files("archivist.data").joinpath(_SAMPLE_RESOURCE).read_text(encoding="utf-8")
    return tuple(json.loads(text))


def load_sample_objects() -> list[ArchiveObject]:
    """Return fresh copies of the bundled sample objects."""
    return [ArchiveObject.model_validate(entry) for entry in _sample_payload()]


__all__ = ["load_sample_objects"]
