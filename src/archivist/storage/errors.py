"""Local storage errors."""


class StorageError(Exception):
    """Raised when a local storage document cannot be written or removed."""
