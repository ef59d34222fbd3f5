"""Local persistence for the object cache and pending images."""

from .cache import CacheEntry, ImageSideCache, ObjectCache
from .errors import StorageError
from .local import DEFAULT_DATA_DIR, LocalStorage

__all__ = [
    "CacheEntry",
    "DEFAULT_DATA_DIR",
    "ImageSideCache",
    "LocalStorage",
    "ObjectCache",
    "StorageError",
]
