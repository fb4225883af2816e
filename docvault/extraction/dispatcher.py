from docvault.extraction.base import BaseTextExtractor
from docvault.extraction.exceptions import UnsupportedTypeError
from docvault.logging.logger import Log

WORD_MIME_TYPES: frozenset[str] = frozenset(
    {
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    }
)


class TextExtractionDispatcher:
    """Routes bytes to an extractor by declared media type only.

    No content sniffing: a PDF declared as text/plain is decoded as text.
    """

    def __init__(
        self,
        *,
        text_extractor: BaseTextExtractor,
        pdf_extractor: BaseTextExtractor,
        word_extractor: BaseTextExtractor,
    ) -> None:
        self._text_extractor = text_extractor
        self._pdf_extractor = pdf_extractor
        self._word_extractor = word_extractor

    def extract(self, data: bytes, mime_type: str) -> str:
        """Return plain text for the given media type.

        Raises:
            UnsupportedTypeError: if no extractor handles mime_type.
            ParseFailureError: if the content cannot be parsed.
        """
        extractor = self._select(mime_type)
        text = extractor.extract(data)
        Log.debug(
            f"Extracted {len(text)} chars using {type(extractor).__name__}",
            mime_type=mime_type,
        )
        return text

    def _select(self, mime_type: str) -> BaseTextExtractor:
        media_type = mime_type.split(";", 1)[0].strip().lower()
        if media_type.startswith("text/"):
            return self._text_extractor
        if media_type == "application/pdf":
            return self._pdf_extractor
        if media_type in WORD_MIME_TYPES:
            return self._word_extractor
        raise UnsupportedTypeError(f"Unsupported file type: {mime_type}")
