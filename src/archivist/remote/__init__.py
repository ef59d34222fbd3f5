"""Remote store adapter and the in-process sheet endpoint."""

from __future__ import annotations

from pathlib import Path

from archivist.config.models import RemoteSettings

from .client import RemoteStore
from .codec import HEADERS, decode_objects, decode_row, encode_row
from .errors import RemoteStoreError, UploadUnavailableError
from .models import UploadResult
from .sheet import SheetTable, SheetTransport

LOCAL_SHEET_URL = "http://local-sheet/exec"


def build_remote_store(settings: RemoteSettings) -> RemoteStore:
    """Return a store for ``settings``, serving ``sheet_path`` in-process when set."""
    if settings.sheet_path and not settings.endpoint_url:
        sheet_path = Path(settings.sheet_path).expanduser()
        table = SheetTable(sheet_path, image_dir=sheet_path.parent / "images")
        return RemoteStore(
            settings.model_copy(update={"endpoint_url": LOCAL_SHEET_URL}),
            transport=SheetTransport(table),
        )
    return RemoteStore(settings)


__all__ = [
    "HEADERS",
    "LOCAL_SHEET_URL",
    "RemoteStore",
    "RemoteStoreError",
    "SheetTable",
    "SheetTransport",
    "UploadResult",
    "UploadUnavailableError",
    "build_remote_store",
    "decode_objects",
    "decode_row",
    "encode_row",
]
