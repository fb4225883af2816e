from abc import ABC, abstractmethod


class BaseTextExtractor(ABC):
    """Contract for all text extraction adapters."""

    @abstractmethod
    def extract(self, data: bytes) -> str:
        """Extract plain text from raw file bytes.

        Args:
            data: Raw file content.

        Returns:
            Extracted text with formatting and layout discarded.

        Raises:
            ParseFailureError: if the content cannot be parsed.
        """
