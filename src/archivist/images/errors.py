"""Image ingestion errors."""


class ImageDecodeError(Exception):
    """Raised when an input file is empty, unsupported or cannot be decoded."""
