class ExtractionError(Exception):
    """Raised when text cannot be produced from an uploaded file."""


class UnsupportedTypeError(ExtractionError):
    """Raised when no extractor handles the declared media type."""


class ParseFailureError(ExtractionError):
    """Raised when a recognized file type cannot be parsed (corrupt content)."""
