"""File-backed key/value storage for cached catalog data."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from .errors import StorageError

DEFAULT_DATA_DIR = Path("~/.archivist")
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class LocalStorage:
    """Persist string values under keys, one ``<key>.json`` file per key."""

    def __init__(self, base_dir: Path | None = None) -> None:
        """Initialize the storage rooted at ``base_dir``.

        Args:
            base_dir: Directory holding the documents; defaults to ``~/.archivist``.
        """
        self._base_dir = (base_dir or DEFAULT_DATA_DIR).expanduser()

    @property
    def base_dir(self) -> Path:
        """Return the directory that stores documents.

        Returns:
            Path: Directory containing one file per key.
        """
        return self._base_dir

    def path_for(self, key: str) -> Path:
        """Return the file backing ``key``.

        Args:
            key: Storage key made of letters, digits, ``.``, ``_`` or ``-``.

        Returns:
            Path: Location of the document for the key.

        Raises:
            StorageError: If the key contains other characters.
        """
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self._base_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        """Return the stored text for ``key`` or ``None`` when absent or unreadable.

        Args:
            key: Storage key to read.

        Returns:
            Optional[str]: Stored document text.
        """
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous document.

        Args:
            key: Storage key to write.
            value: Document text.

        Raises:
            StorageError: If the document cannot be written.
        """
        path = self.path_for(key)
        temp_path = path.with_suffix(".json.tmp")
        try:
            self._base_dir.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(value, encoding="utf-8")
            temp_path.replace(path)
        except OSError as exc:
            raise StorageError(f"Unable to write {path}: {exc}") from exc

    def remove(self, key: str) -> None:
        """Delete the document for ``key`` if present.

        Args:
            key: Storage key to remove.
        """
        self.path_for(key).unlink(missing_ok=True)


__all__ = ["DEFAULT_DATA_DIR", "LocalStorage"]
