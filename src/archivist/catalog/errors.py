"""Catalog errors."""


class CatalogError(Exception):
    """Base exception for catalog operations."""


class InvalidObjectError(CatalogError):
    """Raised when an archive object fails validation before it is saved."""


class ObjectNotFoundError(CatalogError):
    """Raised when no object with the requested id is loaded."""
