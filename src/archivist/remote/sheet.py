"""In-process implementation of the spreadsheet web app endpoint.

The deployed endpoint is a scripting web app in front of a spreadsheet. This
module reproduces its actions over an in-memory table so the client can run
against a local sheet file, and so tests can exercise the real HTTP adapter
through an ``httpx`` transport.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import httpx

from archivist.catalog.models import generate_object_id

from .codec import HEADERS, decode_row, encode_row

LOGGER = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = "https://drive.google.com/uc"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SheetTable:
    """Rows of archive objects laid out under ``HEADERS``.

    Args:
        path: Optional JSON file the table is loaded from and saved to after
            every mutation.
        image_dir: Optional directory where uploaded images are written.
        image_base_url: Base of the public link returned for uploads when no
            image directory is configured.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        *,
        image_dir: Optional[Path] = None,
        image_base_url: str = DEFAULT_IMAGE_BASE_URL,
    ) -> None:
        self._path = path
        self._image_dir = image_dir
        self._image_base_url = image_base_url
        self.rows: list[list[Any]] = []
        self.uploads: dict[str, bytes] = {}
        if path is not None and path.exists():
            self._load()

    # ------------------------------------------------------------------ #
    # Actions                                                            #
    # ------------------------------------------------------------------ #

    def get_all(self) -> list[dict[str, Any]]:
        """Return every row with an id as a record."""
        records = (decode_row(row) for row in self.rows)
        return [record for record in records if record.get("id")]

    def create(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Append ``record`` as a new row, assigning an id and timestamps."""
        created = dict(record)
        if not created.get("id"):
            created["id"] = generate_object_id()
        now = _now_iso()
        created["createdAt"] = created.get("createdAt") or now
        created["updatedAt"] = now
        self.rows.append(encode_row(created))
        self._persist()
        return created

    def update(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Replace the row matching ``record['id']``; unknown ids are created."""
        index = self._find(record.get("id"))
        if index is None:
            return self.create(record)
        updated = dict(record)
        updated["updatedAt"] = _now_iso()
        self.rows[index] = encode_row(updated)
        self._persist()
        return updated

    def delete(self, object_id: Any) -> dict[str, Any]:
        """Remove the row with ``object_id``."""
        index = self._find(object_id)
        if index is None:
            return {"deleted": False, "id": object_id, "error": "Not found"}
        del self.rows[index]
        self._persist()
        return {"deleted": True, "id": object_id}

    def upload_image(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Store a base64 payload and return ``{id, url, name}``.

        Raises:
            ValueError: If the payload is missing or is not valid base64.
        """
        encoded = data.get("data") if data else None
        if not encoded:
            raise ValueError("Missing image data")
        try:
            raw = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError(f"Failed to decode image data: {exc}") from exc

        file_id = uuid.uuid4().hex
        name = str(data.get("filename") or "image")
        self.uploads[file_id] = raw
        if self._image_dir is not None:
            self._image_dir.mkdir(parents=True, exist_ok=True)
            target = self._image_dir / f"{file_id}-{Path(name).name}"
            target.write_bytes(raw)
            url = target.resolve().as_uri()
        else:
            url = f"{self._image_base_url}?export=view&id={file_id}"
        LOGGER.debug("Stored upload %s (%d bytes) as %s", name, len(raw), file_id)
        return {"id": file_id, "url": url, "name": name}

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #

    def _find(self, object_id: Any) -> Optional[int]:
        if object_id in (None, ""):
            return None
        wanted = str(object_id)
        for index, row in enumerate(self.rows):
            if row and str(row[0]) == wanted:
                return index
        return None

    def _load(self) -> None:
        assert self._path is not None
        payload = json.loads(self._path.read_text(encoding="utf-8") or "{}")
        headers = payload.get("headers") or list(HEADERS)
        rows = payload.get("rows") or []
        if list(headers) == list(HEADERS):
            self.rows = [list(row) for row in rows]
        else:
            self.rows = [encode_row(decode_row(row, headers)) for row in rows]

    def _persist(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"headers": list(HEADERS), "rows": self.rows}
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


class SheetTransport(httpx.BaseTransport):
    """Serve the endpoint's GET/POST protocol from a :class:`SheetTable`."""

    def __init__(self, table: SheetTable) -> None:
        self.table = table
        self.requests: list[dict[str, Any]] = []

    def handle_get(self, params: Mapping[str, str]) -> dict[str, Any]:
        """Answer ``?action=getAll``."""
        if params.get("action") == "getAll":
            return {"success": True, "objects": self.table.get_all()}
        return {"success": False, "error": "Unknown action"}

    def handle_post(self, body: Mapping[str, Any]) -> dict[str, Any]:
        """Dispatch a POSTed action and wrap the outcome in an envelope."""
        action = body.get("action")
        try:
            if action == "create":
                result: Any = self.table.create(body.get("object") or {})
            elif action == "update":
                result = self.table.update(body.get("object") or {})
            elif action == "delete":
                result = self.table.delete(body.get("id"))
            elif action == "uploadImage":
                result = self.table.upload_image(body)
            else:
                return {"success": False, "error": "Unknown action"}
        except ValueError as exc:
            return {"success": False, "error": f"Error: {exc}"}
        return {"success": True, "result": result}

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            payload = self.handle_get(dict(request.url.params))
            self.requests.append({"method": "GET", "params": dict(request.url.params)})
        elif request.method == "POST":
            try:
                body = json.loads(request.content or b"{}")
            except json.JSONDecodeError as exc:
                payload = {"success": False, "error": f"SyntaxError: {exc}"}
                body = None
            else:
                payload = self.handle_post(body)
            self.requests.append({"method": "POST", "body": body})
        else:
            return httpx.Response(405, request=request)
        return httpx.Response(200, json=payload, request=request)


__all__ = ["DEFAULT_IMAGE_BASE_URL", "SheetTable", "SheetTransport"]
