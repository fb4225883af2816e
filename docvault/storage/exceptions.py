class StorageError(Exception):
    """Raised when a blob cannot be written, read, or removed."""


class BlobNotFoundError(StorageError):
    """Raised when no blob exists for the requested key."""
