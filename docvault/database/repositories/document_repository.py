from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from docvault.database.connection import get_connection
from docvault.database.exceptions import PersistenceError
from docvault.documents.exceptions import DocumentNotFoundError
from docvault.documents.models import (
    Document,
    DocumentListItem,
    ListQuery,
    ProcessingRecord,
    ProcessingStatus,
    SortField,
    SortOrder,
)

SORT_COLUMNS: dict[SortField, sql.Composable] = {
    SortField.UPLOADED_AT: sql.Identifier("d", "uploaded_at"),
    SortField.ORIGINAL_NAME: sql.Identifier("d", "original_name"),
    SortField.SIZE: sql.Identifier("d", "size"),
}

SORT_DIRECTIONS: dict[SortOrder, sql.Composable] = {
    SortOrder.ASC: sql.SQL("ASC"),
    SortOrder.DESC: sql.SQL("DESC"),
}


@contextmanager
def wrap_db_errors(action: str) -> Generator[None, None, None]:
    """Re-raise driver errors as PersistenceError."""
    try:
        yield
    except psycopg.Error as exc:
        raise PersistenceError(f"Failed to {action}: {exc}") from exc


def row_to_document(row: dict[str, Any]) -> Document:
    return Document(
        id=str(row["id"]),
        filename=row["filename"],
        original_name=row["original_name"],
        mime_type=row["mime_type"],
        size=row["size"],
        storage_key=row["storage_key"],
        uploaded_at=row["uploaded_at"],
    )


def row_to_record(row: dict[str, Any]) -> ProcessingRecord:
    return ProcessingRecord(
        document_id=str(row["document_id"]),
        status=ProcessingStatus(row["status"]),
        summary=row["summary"],
        markdown=row["markdown"],
        processed_at=row["processed_at"],
        error_message=row["error_message"],
        started_at=row["started_at"],
    )


class DocumentRepository:
    """Database operations for the documents table."""

    def create_with_record(self, document: Document) -> ProcessingRecord:
        """Insert a document and its PENDING processing record in one transaction."""
        with wrap_db_errors(f"create document {document.id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        INSERT INTO documents
                        (id, filename, original_name, mime_type, size, storage_key, uploaded_at)
                        VALUES (%s, %s, %s, %s, %s, %s, %s)
                        """,
                        (
                            document.id,
                            document.filename,
                            document.original_name,
                            document.mime_type,
                            document.size,
                            document.storage_key,
                            document.uploaded_at,
                        ),
                    )
                    cur.execute(
                        """
                        INSERT INTO processing_records (document_id, status)
                        VALUES (%s, 'PENDING')
                        RETURNING document_id, status, summary, markdown,
                                  processed_at, error_message, started_at
                        """,
                        (document.id,),
                    )
                    row = cur.fetchone()
                conn.commit()

        if row is None:
            raise PersistenceError(f"Processing record for {document.id} was not created")
        return row_to_record(row)

    def find_by_id(self, document_id: str) -> Document:
        """Find a document by ID.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with wrap_db_errors(f"load document {document_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT id, filename, original_name, mime_type, size,
                               storage_key, uploaded_at
                        FROM documents
                        WHERE id = %s
                        """,
                        (document_id,),
                    )
                    row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found")
        return row_to_document(row)

    def find_with_record(self, document_id: str) -> tuple[Document, ProcessingRecord]:
        """Find a document together with its processing record.

        Raises:
            DocumentNotFoundError: if no document with this ID exists.
        """
        with wrap_db_errors(f"load document {document_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT d.id, d.filename, d.original_name, d.mime_type, d.size,
                               d.storage_key, d.uploaded_at,
                               p.document_id, p.status, p.summary, p.markdown,
                               p.processed_at, p.error_message, p.started_at
                        FROM documents d
                        JOIN processing_records p ON p.document_id = d.id
                        WHERE d.id = %s
                        """,
                        (document_id,),
                    )
                    row = cur.fetchone()

        if row is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found")
        return row_to_document(row), row_to_record(row)

    def find_all_paged(self, query: ListQuery) -> tuple[list[DocumentListItem], int]:
        """Return one page of listing items and the total document count."""
        order_by = sql.SQL("{column} {direction}, {tiebreak} {direction}").format(
            column=SORT_COLUMNS[query.sort_by],
            direction=SORT_DIRECTIONS[query.order],
            tiebreak=sql.Identifier("d", "id"),
        )
        statement = sql.SQL(
            """
            SELECT d.id, d.filename, d.original_name, d.mime_type, d.size,
                   d.uploaded_at, p.status
            FROM documents d
            JOIN processing_records p ON p.document_id = d.id
            ORDER BY {order_by}
            LIMIT %s OFFSET %s
            """
        ).format(order_by=order_by)

        with wrap_db_errors("list documents"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute("SELECT COUNT(*) AS total FROM documents")
                    count_row = cur.fetchone()
                    cur.execute(statement, (query.limit, query.offset))
                    rows = cur.fetchall()

        total = count_row["total"] if count_row is not None else 0
        items = [
            DocumentListItem(
                id=str(row["id"]),
                filename=row["filename"],
                original_name=row["original_name"],
                mime_type=row["mime_type"],
                size=row["size"],
                uploaded_at=row["uploaded_at"],
                processing_status=ProcessingStatus(row["status"]),
            )
            for row in rows
        ]
        return items, total

    def delete(self, document_id: str) -> bool:
        """Delete a document; its processing record goes with it (ON DELETE CASCADE).

        Returns False if nothing was deleted.
        """
        with wrap_db_errors(f"delete document {document_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("DELETE FROM documents WHERE id = %s", (document_id,))
                    deleted = cur.rowcount > 0
                conn.commit()
        return deleted
