"""Remote store errors."""


class RemoteStoreError(Exception):
    """Raised when the remote endpoint fails or rejects a request."""


class UploadUnavailableError(RemoteStoreError):
    """Raised when image uploads are disabled or no endpoint is configured."""
