import io

import pdfplumber

from docvault.extraction.base import BaseTextExtractor
from docvault.extraction.exceptions import ParseFailureError


class PdfPlumberAdapter(BaseTextExtractor):
    """Extracts the text layer of each PDF page using pdfplumber."""

    def extract(self, data: bytes) -> str:
        try:
            with pdfplumber.open(io.BytesIO(data)) as pdf:
                pages = [page.extract_text() or "" for page in pdf.pages]
        except Exception as exc:
            raise ParseFailureError(f"pdfplumber could not parse PDF: {exc}") from exc
        return "\n".join(pages).strip()
