from docvault.extraction.base import BaseTextExtractor
from docvault.extraction.exceptions import ParseFailureError


class PlainTextAdapter(BaseTextExtractor):
    """Decodes text/* uploads as UTF-8, verbatim."""

    def extract(self, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseFailureError(f"Text file is not valid UTF-8: {exc}") from exc
