from psycopg.rows import dict_row

from docvault.database.connection import get_connection
from docvault.database.repositories.document_repository import row_to_record, wrap_db_errors
from docvault.documents.models import ProcessingRecord


class ProcessingRecordRepository:
    """Database operations for the processing_records table.

    Every status change is a conditional UPDATE on the expected current
    status, so transitions can never go backwards or skip a state.
    """

    def find_by_document_id(self, document_id: str) -> ProcessingRecord | None:
        with wrap_db_errors(f"load processing record {document_id}"):
            with get_connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(
                        """
                        SELECT document_id, status, summary, markdown,
                               processed_at, error_message, started_at
                        FROM processing_records
                        WHERE document_id = %s
                        """,
                        (document_id,),
                    )
                    row = cur.fetchone()

        if row is None:
            return None
        return row_to_record(row)

    def acquire_lease(self, document_id: str) -> bool:
        """Atomically move PENDING -> PROCESSING.

        Returns True only for the single caller whose UPDATE changed the row.
        """
        with wrap_db_errors(f"acquire lease for {document_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE processing_records
                        SET status = 'PROCESSING', started_at = NOW(), updated_at = NOW()
                        WHERE document_id = %s AND status = 'PENDING'
                        """,
                        (document_id,),
                    )
                    acquired = cur.rowcount == 1
                conn.commit()
        return acquired

    def mark_completed(self, document_id: str, summary: str, markdown: str) -> bool:
        """Move PROCESSING -> COMPLETED and store both artifacts."""
        with wrap_db_errors(f"complete processing record {document_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE processing_records
                        SET status = 'COMPLETED', summary = %s, markdown = %s,
                            processed_at = NOW(), error_message = NULL, updated_at = NOW()
                        WHERE document_id = %s AND status = 'PROCESSING'
                        """,
                        (summary, markdown, document_id),
                    )
                    updated = cur.rowcount == 1
                conn.commit()
        return updated

    def mark_failed(self, document_id: str, error: str) -> bool:
        """Move PROCESSING -> FAILED and record the error."""
        with wrap_db_errors(f"fail processing record {document_id}"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        UPDATE processing_records
                        SET status = 'FAILED', error_message = %s,
                            summary = NULL, markdown = NULL, updated_at = NOW()
                        WHERE document_id = %s AND status = 'PROCESSING'
                        """,
                        (error, document_id),
                    )
                    updated = cur.rowcount == 1
                conn.commit()
        return updated

    def find_pending_document_ids(self, limit: int) -> list[str]:
        """Oldest PENDING documents first."""
        with wrap_db_errors("list pending documents"):
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        """
                        SELECT p.document_id
                        FROM processing_records p
                        JOIN documents d ON d.id = p.document_id
                        WHERE p.status = 'PENDING'
                        ORDER BY d.uploaded_at
                        LIMIT %s
                        """,
                        (limit,),
                    )
                    rows = cur.fetchall()
        return [str(row[0]) for row in rows]
