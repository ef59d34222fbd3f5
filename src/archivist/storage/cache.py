"""Object-list cache and the side-cache of images pending remote sync."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping

from pydantic import ValidationError

from archivist.catalog.images import normalize_primary, strip_local_images
from archivist.catalog.models import ArchiveImage, ArchiveObject
from archivist.config.models import StorageSettings

from .local import LocalStorage

LOGGER = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(slots=True)
class CacheEntry:
    """Snapshot of the object list.

    Attributes:
        objects: Objects as last written.
        updated_at: Epoch milliseconds of the write.
    """

    objects: list[ArchiveObject] = field(default_factory=list)
    updated_at: int = 0

    def is_fresh(self, now_ms: int, ttl_seconds: float) -> bool:
        """Return True when the snapshot is younger than ``ttl_seconds``."""
        return now_ms - self.updated_at < ttl_seconds * 1000


class ObjectCache:
    """Read-through cache of the object list with a freshness window.

    Args:
        storage: Key/value storage holding the snapshot.
        settings: Storage settings naming the key, TTL and image policy.
        clock: Millisecond clock, injectable for tests.
    """

    def __init__(
        self,
        storage: LocalStorage,
        settings: StorageSettings,
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._storage = storage
        self._settings = settings
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._settings.cache_ttl_seconds

    def now_ms(self) -> int:
        return self._clock()

    def read(self) -> CacheEntry | None:
        """Return the cached snapshot, or ``None`` when missing or corrupt."""
        raw = self._storage.get(self._settings.objects_key)
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Ignoring corrupt object cache: %s", exc)
            return None
        if not isinstance(payload, dict) or not isinstance(payload.get("objects"), list):
            LOGGER.warning("Ignoring object cache with unexpected shape.")
            return None

        objects = []
        for record in payload["objects"]:
            try:
                objects.append(ArchiveObject.model_validate(record))
            except ValidationError as exc:
                LOGGER.debug("Skipping cached object that failed validation: %s", exc)
        updated_at = payload.get("updatedAt")
        if not isinstance(updated_at, (int, float)) or isinstance(updated_at, bool):
            updated_at = 0
        return CacheEntry(objects=objects, updated_at=int(updated_at))

    def write(self, objects: Iterable[ArchiveObject]) -> CacheEntry:
        """Persist ``objects``, dropping local images unless full images are stored."""
        kept = list(objects)
        if not self._settings.store_full_images_remotely:
            kept = [strip_local_images(obj) for obj in kept]
        entry = CacheEntry(objects=kept, updated_at=self._clock())
        payload = {
            "objects": [obj.to_payload() for obj in entry.objects],
            "updatedAt": entry.updated_at,
        }
        self._storage.set(self._settings.objects_key, json.dumps(payload))
        return entry

    def clear(self) -> None:
        self._storage.remove(self._settings.objects_key)


class ImageSideCache:
    """Map of object id to images that have not reached the remote store."""

    def __init__(self, storage: LocalStorage, settings: StorageSettings) -> None:
        self._storage = storage
        self._key = settings.local_images_key

    def read(self) -> dict[str, list[ArchiveImage]]:
        """Return the pending image map; corrupt data reads as empty."""
        raw = self._storage.get(self._key)
        if raw is None:
            return {}
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            LOGGER.warning("Ignoring corrupt local image cache: %s", exc)
            return {}
        if not isinstance(payload, dict):
            return {}

        pending: dict[str, list[ArchiveImage]] = {}
        for object_id, entries in payload.items():
            if not isinstance(entries, list):
                continue
            images = []
            for entry in entries:
                try:
                    images.append(ArchiveImage.model_validate(entry))
                except ValidationError:
                    LOGGER.debug("Skipping malformed cached image for %s", object_id)
            if images:
                pending[str(object_id)] = images
        return pending

    def write(self, pending: Mapping[str, Iterable[ArchiveImage]]) -> None:
        payload: dict[str, Any] = {}
        for object_id, images in pending.items():
            entries = [image.to_payload() for image in images]
            if entries:
                payload[object_id] = entries
        self._storage.set(self._key, json.dumps(payload))

    def put(self, object_id: str, images: Iterable[ArchiveImage]) -> None:
        """Record the still-local ``images`` for ``object_id``; none removes the entry."""
        local = [image for image in images if image.is_local]
        pending = self.read()
        if local:
            pending[object_id] = local
        elif pending.pop(object_id, None) is None:
            return
        self.write(pending)

    def discard(self, object_id: str) -> None:
        """Drop any pending images for ``object_id``."""
        pending = self.read()
        if pending.pop(object_id, None) is not None:
            self.write(pending)

    def merge(self, objects: Iterable[ArchiveObject]) -> list[ArchiveObject]:
        """Append pending images to their objects and renormalize the primary image.

        Images whose URL is already on the object are not appended again, so
        merging twice gives the same result as merging once. A pending image
        keeps its primary flag only when none of the object's own images is
        primary.
        """
        pending = self.read()
        merged = []
        for obj in objects:
            images = list(obj.images)
            known = {image.url for image in images}
            has_primary = any(image.is_primary for image in images)
            for image in pending.get(obj.id, []):
                if image.url in known:
                    continue
                if has_primary and image.is_primary:
                    image = image.model_copy(update={"is_primary": False})
                images.append(image)
                known.add(image.url)
            normalized = normalize_primary(images)
            if normalized != obj.images:
                obj = obj.model_copy(update={"images": normalized})
            merged.append(obj)
        return merged


__all__ = ["CacheEntry", "ImageSideCache", "ObjectCache"]
