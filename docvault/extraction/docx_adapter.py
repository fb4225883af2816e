import io
from collections.abc import Iterator
from typing import Any

import docx
from docx.table import Table

from docvault.extraction.base import BaseTextExtractor
from docvault.extraction.exceptions import ParseFailureError


class DocxAdapter(BaseTextExtractor):
    """Raw text of a Word document via python-docx.

    Body paragraphs and table cells are read in document order, one line per
    paragraph. Legacy binary .doc files are not readable by python-docx and
    surface as parse failures.
    """

    def extract(self, data: bytes) -> str:
        try:
            document = docx.Document(io.BytesIO(data))
        except Exception as exc:
            raise ParseFailureError(f"python-docx could not parse document: {exc}") from exc
        return "\n".join(_iter_lines(document))


def _iter_lines(container: Any) -> Iterator[str]:
    """Yield paragraph texts of a document or table cell, descending into tables."""
    for block in container.iter_inner_content():
        if isinstance(block, Table):
            yield from _iter_table_lines(block)
        else:
            yield block.text


def _iter_table_lines(table: Table) -> Iterator[str]:
    seen: set[Any] = set()
    for row in table.rows:
        for cell in row.cells:
            # Merged cells are repeated once per grid column they span.
            if cell._tc in seen:
                continue
            seen.add(cell._tc)
            yield from _iter_lines(cell)
