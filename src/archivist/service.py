"""Archive controller coordinating the remote store, caches and image pipeline."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from archivist.catalog import (
    ArchiveImage,
    ArchiveObject,
    ImageState,
    ObjectNotFoundError,
    add_image,
    generate_object_id,
    normalize_primary,
    strip_local_images,
    validate_object,
)
from archivist.config import ArchivistConfig
from archivist.images import ImagePipeline, parse_data_uri
from archivist.images.pipeline import FormatConverter
from archivist.remote import RemoteStore, RemoteStoreError, build_remote_store
from archivist.storage import ImageSideCache, LocalStorage, ObjectCache

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class LoadResult:
    """Objects shown after a load.

    Attributes:
        objects: Objects available immediately.
        from_cache: Whether the objects came from the local cache.
        fresh: Whether the cached snapshot was inside the freshness window.
        refreshing: Whether a background refresh was started.
    """

    objects: list[ArchiveObject]
    from_cache: bool
    fresh: bool
    refreshing: bool


@dataclass(slots=True)
class SaveResult:
    """Outcome of saving an object.

    Attributes:
        object: Saved object, local images included.
        warnings: Non-fatal problems such as failed image uploads.
        created: Whether the object was created rather than updated.
    """

    object: ArchiveObject
    warnings: list[str] = field(default_factory=list)
    created: bool = False


@dataclass(slots=True)
class DeleteResult:
    """Outcome of a delete request.

    Attributes:
        object_id: Identifier that was targeted.
        confirmed: Whether the confirmation callback approved the delete.
        remote_deleted: Whether the remote store confirmed the removal.
        removed: Whether the object was present locally before removal.
    """

    object_id: str
    confirmed: bool
    remote_deleted: bool = False
    removed: bool = False


def _timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ArchiveService:
    """Load, save and delete archive objects while keeping local state in sync.

    The in-memory object list is the view the caller displays. It is shared
    with one background refresh thread, so every replacement of the list and
    the matching cache write happen under ``_lock``.
    """

    def __init__(
        self,
        config: ArchivistConfig,
        *,
        remote: RemoteStore,
        object_cache: ObjectCache,
        side_cache: ImageSideCache,
        pipeline: ImagePipeline,
    ) -> None:
        """Initialize the service.

        Args:
            config: Loaded Archivist configuration.
            remote: Remote store adapter.
            object_cache: Cache of the object list.
            side_cache: Cache of images that have not reached the remote store.
            pipeline: Image ingestion pipeline.
        """

        self._config = config
        self._remote = remote
        self._object_cache = object_cache
        self._side_cache = side_cache
        self._pipeline = pipeline
        self._lock = threading.RLock()
        self._objects: list[ArchiveObject] = []
        self._loaded = False
        self._refresh_thread: Optional[threading.Thread] = None

    @classmethod
    def from_config(
        cls,
        config: ArchivistConfig,
        *,
        converter: Optional[FormatConverter] = None,
    ) -> "ArchiveService":
        """Build a service and its collaborators from ``config``.

        Args:
            config: Loaded Archivist configuration.
            converter: Optional HEIC/HEIF converter handed to the image pipeline.

        Returns:
            ArchiveService: Service wired to the configured storage and endpoint.
        """

        storage = LocalStorage(Path(config.storage.data_dir))
        remote = build_remote_store(config.remote)
        return cls(
            config,
            remote=remote,
            object_cache=ObjectCache(storage, config.storage),
            side_cache=ImageSideCache(storage, config.storage),
            pipeline=ImagePipeline(config.images, remote=remote, converter=converter),
        )

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #

    @property
    def remote(self) -> RemoteStore:
        return self._remote

    @property
    def objects(self) -> list[ArchiveObject]:
        """Return a snapshot of the in-memory object list."""
        with self._lock:
            return list(self._objects)

    def get(self, object_id: str) -> ArchiveObject:
        """Return the loaded object with ``object_id``.

        Raises:
            ObjectNotFoundError: If no loaded object has that id.
        """
        for obj in self.objects:
            if obj.id == object_id:
                return obj
        raise ObjectNotFoundError(f"No object with id {object_id!r}.")

    def load(self, *, background: bool = True) -> LoadResult:
        """Show cached objects immediately and revalidate against the remote store.

        With a cached snapshot the refresh runs on a worker thread when
        ``background`` is True, otherwise before returning. Without a snapshot
        the remote fetch always runs in the foreground.

        Args:
            background: Whether the refresh after a cache hit runs on a worker thread.

        Returns:
            LoadResult: Objects to display and how they were obtained.
        """

        entry = self._object_cache.read()
        if entry is None:
            objects = self.refresh()
            return LoadResult(objects=objects, from_cache=False, fresh=True, refreshing=False)

        merged = self._side_cache.merge(entry.objects)
        with self._lock:
            self._objects = merged
            self._loaded = True
        fresh = entry.is_fresh(self._object_cache.now_ms(), self._object_cache.ttl_seconds)
        LOGGER.debug("Loaded %d cached objects (fresh=%s).", len(merged), fresh)

        if background:
            self._start_refresh()
        else:
            self.refresh()
        return LoadResult(objects=merged, from_cache=True, fresh=fresh, refreshing=background)

    def refresh(self) -> list[ArchiveObject]:
        """Fetch from the remote store, merge pending images and overwrite the cache."""
        fetched = self._remote.fetch_all()
        merged = self._side_cache.merge(fetched)
        with self._lock:
            self._objects = merged
            self._loaded = True
            self._object_cache.write(merged)
        LOGGER.info("Refreshed %d objects from the remote store.", len(merged))
        return list(merged)

    def wait_for_refresh(self, timeout: Optional[float] = None) -> bool:
        """Join the background refresh; True when no refresh is still running."""
        thread = self._refresh_thread
        if thread is None:
            return True
        thread.join(timeout)
        return not thread.is_alive()

    def save(self, obj: ArchiveObject, *, is_new: Optional[bool] = None) -> SaveResult:
        """Validate, upload pending images where enabled, and persist ``obj``.

        Args:
            obj: Object to save.
            is_new: Whether to create rather than update; defaults to True when
                ``obj`` has no id.

        Returns:
            SaveResult: Stored object plus any image upload warnings.

        Raises:
            InvalidObjectError: If the object fails validation.
        """

        validate_object(obj)
        created = (not obj.id) if is_new is None else is_new
        stamp = _timestamp()
        updates: dict[str, object] = {"updated_at": stamp}
        if not obj.id:
            updates["id"] = generate_object_id()
        if created and not obj.created_at:
            updates["created_at"] = stamp
        candidate = obj.model_copy(update=updates)

        warnings: list[str] = []
        images = list(candidate.images)
        if self._config.remote.batch_upload_on_save and candidate.local_images:
            images = self._upload_pending(candidate.id, images, warnings)
        full = candidate.model_copy(update={"images": normalize_primary(images)})

        outgoing = full
        if not self._config.storage.store_full_images_remotely:
            outgoing = strip_local_images(full)
        saved = self._remote.create(outgoing) if created else self._remote.update(outgoing)
        stored = self._restore_local_images(saved, outgoing, full)

        with self._lock:
            if not self._loaded:
                self._objects = self._cached_objects()
                self._loaded = True
            replaced = False
            objects = []
            for existing in self._objects:
                if existing.id == stored.id:
                    objects.append(stored)
                    replaced = True
                else:
                    objects.append(existing)
            if not replaced:
                objects.append(stored)
            self._objects = objects
            self._object_cache.write(objects)
        if outgoing.local_images:
            self._side_cache.discard(stored.id)
        else:
            self._side_cache.put(stored.id, stored.images)

        for warning in warnings:
            LOGGER.warning(warning)
        return SaveResult(object=stored, warnings=warnings, created=created)

    def delete(self, object_id: str, confirm: Callable[[str], bool]) -> DeleteResult:
        """Delete ``object_id`` after ``confirm`` approves it.

        The object leaves the in-memory list and the cache even when the remote
        store does not confirm the removal.
        """

        if not confirm(object_id):
            return DeleteResult(object_id=object_id, confirmed=False)

        remote_deleted = self._remote.delete(object_id) if self._remote.configured else False
        with self._lock:
            base = self._objects if self._loaded else self._cached_objects()
            remaining = [obj for obj in base if obj.id != object_id]
            removed = len(remaining) != len(base)
            self._objects = remaining
            self._loaded = True
            self._object_cache.write(remaining)
        self._side_cache.discard(object_id)
        return DeleteResult(
            object_id=object_id,
            confirmed=True,
            remote_deleted=remote_deleted,
            removed=removed,
        )

    def attach_image(
        self,
        obj: ArchiveObject,
        data: bytes,
        filename: str,
        *,
        caption: str = "",
        mime_type: Optional[str] = None,
    ) -> ArchiveObject:
        """Run ``data`` through the image pipeline and append it to ``obj``.

        Raises:
            ImageDecodeError: If the file cannot be decoded.
        """
        image = self._pipeline.ingest(data, filename, caption=caption, mime_type=mime_type)
        return obj.model_copy(update={"images": add_image(obj.images, image)})

    def close(self) -> None:
        self.wait_for_refresh()
        self._remote.close()

    def __enter__(self) -> "ArchiveService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _start_refresh(self) -> None:
        with self._lock:
            if self._refresh_thread is not None and self._refresh_thread.is_alive():
                return
            thread = threading.Thread(
                target=self._refresh_in_background,
                name="archivist-refresh",
                daemon=True,
            )
            self._refresh_thread = thread
        thread.start()

    def _refresh_in_background(self) -> None:
        try:
            self.refresh()
        except Exception:  # pragma: no cover - logged for visibility
            LOGGER.exception("Background refresh failed; keeping cached objects.")

    def _cached_objects(self) -> list[ArchiveObject]:
        entry = self._object_cache.read()
        return self._side_cache.merge(entry.objects) if entry is not None else []

    def _upload_pending(
        self,
        object_id: str,
        images: list[ArchiveImage],
        warnings: list[str],
    ) -> list[ArchiveImage]:
        uploaded = []
        for position, image in enumerate(images, start=1):
            if image.state is not ImageState.LOCAL:
                uploaded.append(image)
                continue
            try:
                mime_type, data = parse_data_uri(image.url)
                result = self._remote.upload_image(
                    filename=f"{object_id}-{position}.jpg",
                    mime_type=mime_type,
                    data=data,
                )
            except (ValueError, RemoteStoreError) as exc:
                warnings.append(f"Image {position} was kept locally: {exc}")
                uploaded.append(image)
                continue
            promoted = image.model_copy(update={"url": result.url, "state": ImageState.REMOTE})
            uploaded.append(promoted)
        return uploaded

    @staticmethod
    def _restore_local_images(
        saved: ArchiveObject,
        outgoing: ArchiveObject,
        full: ArchiveObject,
    ) -> ArchiveObject:
        # The remote copy never carries withheld local images; put them back in
        # their original order when the remote images came back unchanged.
        if not full.local_images or saved.images == full.images:
            return saved
        if [image.url for image in saved.images] == [image.url for image in outgoing.images]:
            return saved.model_copy(update={"images": full.images})
        known = {image.url for image in saved.images}
        extra = [image for image in full.local_images if image.url not in known]
        return saved.model_copy(update={"images": normalize_primary([*saved.images, *extra])})


__all__ = ["ArchiveService", "DeleteResult", "LoadResult", "SaveResult"]
