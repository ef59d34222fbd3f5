"""HTTP adapter for the spreadsheet-backed remote store."""

from __future__ import annotations

import base64
import logging
from typing import Any, Callable, Mapping, Optional

import httpx

from archivist.catalog.models import ArchiveObject, generate_object_id
from archivist.catalog.samples import load_sample_objects
from archivist.config.models import RemoteSettings

from .codec import decode_objects
from .errors import RemoteStoreError, UploadUnavailableError
from .models import UploadResult

LOGGER = logging.getLogger(__name__)


class RemoteStore:
    """Talk to the remote endpoint, degrading to local fallbacks on failure.

    ``fetch_all``, ``create``, ``update`` and ``delete`` never raise for
    transport or protocol errors; they log and return a fallback instead.
    ``upload_image`` raises so callers can keep the image local.

    Args:
        settings: Remote endpoint configuration.
        transport: Optional ``httpx`` transport, used to serve a local sheet.
        samples: Loader for the objects returned when the store is unavailable.
    """

    def __init__(
        self,
        settings: RemoteSettings,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        samples: Callable[[], list[ArchiveObject]] = load_sample_objects,
    ) -> None:
        self._settings = settings
        self._samples = samples
        self._client = httpx.Client(
            timeout=settings.timeout_seconds,
            follow_redirects=True,
            transport=transport,
        )

    @property
    def settings(self) -> RemoteSettings:
        return self._settings

    @property
    def configured(self) -> bool:
        """Return True when an endpoint URL is set."""
        return bool(self._settings.endpoint_url)

    @property
    def uploads_enabled(self) -> bool:
        return self.configured and self._settings.upload_images

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RemoteStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------ #
    # Operations                                                         #
    # ------------------------------------------------------------------ #

    def fetch_all(self) -> list[ArchiveObject]:
        """Return every object, or the bundled samples when unavailable."""
        if not self.configured:
            return self._samples()
        try:
            response = self._client.get(self._url, params={"action": "getAll"})
            payload = self._unwrap(response)
        except (httpx.HTTPError, RemoteStoreError) as exc:
            LOGGER.warning("Falling back to sample objects; fetch failed: %s", exc)
            return self._samples()
        return decode_objects(payload.get("objects") or [])

    def create(self, obj: ArchiveObject) -> ArchiveObject:
        """Create ``obj`` remotely; on failure return it unsaved."""
        return self._write("create", obj)

    def update(self, obj: ArchiveObject) -> ArchiveObject:
        """Update ``obj`` remotely; on failure return it unsaved."""
        return self._write("update", obj)

    def delete(self, object_id: str) -> bool:
        """Delete ``object_id``; False means the removal was not confirmed."""
        if not self.configured:
            return True
        try:
            result = self._post({"action": "delete", "id": object_id})
        except (httpx.HTTPError, RemoteStoreError) as exc:
            LOGGER.warning("Remote delete of %s failed: %s", object_id, exc)
            return False
        if isinstance(result, Mapping):
            if not result.get("deleted"):
                LOGGER.warning(
                    "Remote store did not delete %s: %s", object_id, result.get("error", "unknown")
                )
            return bool(result.get("deleted"))
        return bool(result)

    def upload_image(self, *, filename: str, mime_type: str, data: bytes) -> UploadResult:
        """Upload image bytes and return the stored file's public link.

        Raises:
            UploadUnavailableError: If uploads are disabled or no endpoint is set.
            RemoteStoreError: If the request fails or the endpoint rejects it.
        """
        if not self.uploads_enabled:
            raise UploadUnavailableError("Image uploads are disabled or no endpoint is configured.")
        body = {
            "action": "uploadImage",
            "filename": filename,
            "mimeType": mime_type,
            "data": base64.b64encode(data).decode("ascii"),
        }
        try:
            result = self._post(body)
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"Image upload failed: {exc}") from exc
        if not isinstance(result, Mapping):
            raise RemoteStoreError("Image upload returned no file details.")
        try:
            return UploadResult.model_validate(result)
        except ValueError as exc:
            raise RemoteStoreError(f"Image upload returned an invalid result: {exc}") from exc

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    @property
    def _url(self) -> str:
        return str(self._settings.endpoint_url)

    def _write(self, action: str, obj: ArchiveObject) -> ArchiveObject:
        fallback = obj if obj.id else obj.model_copy(update={"id": generate_object_id()})
        if not self.configured:
            return fallback
        try:
            result = self._post({"action": action, "object": obj.to_payload()})
        except (httpx.HTTPError, RemoteStoreError) as exc:
            LOGGER.warning(
                "Remote %s of %r failed; keeping unsaved copy: %s", action, obj.title, exc
            )
            return fallback
        if not isinstance(result, Mapping):
            LOGGER.warning("Remote %s returned no object; keeping unsaved copy.", action)
            return fallback
        try:
            return ArchiveObject.model_validate(dict(result))
        except ValueError as exc:
            LOGGER.warning("Remote %s returned a malformed object: %s", action, exc)
            return fallback

    def _post(self, body: Mapping[str, Any]) -> Any:
        response = self._client.post(self._url, json=dict(body))
        return self._unwrap(response).get("result")

    def _unwrap(self, response: httpx.Response) -> dict[str, Any]:
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise RemoteStoreError(f"Endpoint returned a non-JSON body: {exc}") from exc
        if not isinstance(payload, dict):
            raise RemoteStoreError("Endpoint returned an unexpected payload.")
        if not payload.get("success"):
            raise RemoteStoreError(str(payload.get("error") or "Endpoint reported failure."))
        return payload


__all__ = ["RemoteStore"]
