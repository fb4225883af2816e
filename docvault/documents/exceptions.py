class UploadValidationError(Exception):
    """Raised when upload parameters are rejected before anything is stored."""


class DocumentNotFoundError(Exception):
    """Raised when a document (or its stored blob) cannot be found."""
