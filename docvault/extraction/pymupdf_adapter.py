import pymupdf

from docvault.extraction.base import BaseTextExtractor
from docvault.extraction.exceptions import ParseFailureError


class PyMuPdfAdapter(BaseTextExtractor):
    """Extracts the text layer of each PDF page using PyMuPDF."""

    def extract(self, data: bytes) -> str:
        try:
            with pymupdf.open(stream=data, filetype="pdf") as doc:  # type: ignore[no-untyped-call]
                pages = [page.get_text() for page in doc]
        except Exception as exc:
            raise ParseFailureError(f"pymupdf could not parse PDF: {exc}") from exc
        return "\n".join(pages).strip()
