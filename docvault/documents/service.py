import uuid
from datetime import datetime, timezone
from pathlib import PurePath

from docvault.database.exceptions import PersistenceError
from docvault.database.repositories.document_repository import DocumentRepository
from docvault.documents.exceptions import DocumentNotFoundError, UploadValidationError
from docvault.documents.models import (
    ALLOWED_MIME_TYPES,
    Document,
    DocumentListItem,
    DownloadResult,
    ListQuery,
    Page,
    PageMeta,
    ProcessingRecord,
)
from docvault.logging.logger import Log
from docvault.storage.base import BaseStorage
from docvault.storage.exceptions import StorageError
from docvault.worker.task_runner import PipelineTaskRunner

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


class DocumentService:
    """Upload, list, inspect, delete and download documents.

    Uploads return as soon as the document and its PENDING processing record
    are stored; extraction and generation happen on the task runner.
    """

    def __init__(
        self,
        *,
        doc_repo: DocumentRepository,
        storage: BaseStorage,
        task_runner: PipelineTaskRunner,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self._doc_repo = doc_repo
        self._storage = storage
        self._task_runner = task_runner
        self._max_upload_bytes = max_upload_bytes

    def submit(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        size: int,
    ) -> tuple[Document, ProcessingRecord]:
        """Store an upload and schedule its pipeline run.

        Raises:
            UploadValidationError: on bad parameters; nothing is stored.
            StorageError: if the bytes cannot be written; no rows are created.
            PersistenceError: if the rows cannot be written.
        """
        self._validate_upload(data, original_name, mime_type, size)

        document_id = str(uuid.uuid4())
        storage_key = f"{uuid.uuid4().hex}{PurePath(original_name).suffix.lower()}"
        self._storage.save(storage_key, data)

        document = Document(
            id=document_id,
            filename=storage_key,
            original_name=original_name,
            mime_type=mime_type,
            size=size,
            storage_key=storage_key,
            uploaded_at=datetime.now(timezone.utc),
        )
        try:
            record = self._doc_repo.create_with_record(document)
        except PersistenceError:
            self._discard_blob(storage_key)
            raise

        Log.info(
            f"Uploaded document {document_id}",
            original_name=original_name,
            mime_type=mime_type,
            size=size,
        )
        try:
            self._task_runner.submit(document_id)
        except RuntimeError as exc:
            # Rows are committed; the pending sweep schedules the run later.
            Log.warning(f"Run for document {document_id} not scheduled: {exc}")
        return document, record

    def list_documents(self, query: ListQuery | None = None) -> Page[DocumentListItem]:
        query = query if query is not None else ListQuery()
        items, total = self._doc_repo.find_all_paged(query)
        return Page(meta=PageMeta.build(query.page, query.limit, total), data=items)

    def get_document(self, document_id: str) -> tuple[Document, ProcessingRecord]:
        """Return the document with its processing record and artifacts.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """
        return self._doc_repo.find_with_record(self._checked_id(document_id))

    def delete_document(self, document_id: str) -> None:
        """Remove the stored bytes (best-effort) and both rows.

        Raises:
            DocumentNotFoundError: if the document does not exist.
        """
        document, record = self._doc_repo.find_with_record(self._checked_id(document_id))
        if not record.status.is_terminal:
            Log.warning(
                f"Deleting document {document.id} while its processing is {record.status.value}"
            )
        self._discard_blob(document.storage_key)
        if not self._doc_repo.delete(document.id):
            raise DocumentNotFoundError(f"Document with ID {document_id} not found")
        Log.info(f"Deleted document {document.id}")

    def download_document(self, document_id: str) -> DownloadResult:
        """Return the original bytes with their name and media type.

        Raises:
            DocumentNotFoundError: if the document or its stored bytes are missing.
        """
        document = self._doc_repo.find_by_id(self._checked_id(document_id))
        try:
            data = self._storage.fetch(document.storage_key)
        except StorageError as exc:
            Log.warning(f"Stored file for document {document.id} unavailable: {exc}")
            raise DocumentNotFoundError(
                f"File for document with ID {document_id} not found"
            ) from exc
        return DownloadResult(
            data=data,
            original_name=document.original_name,
            mime_type=document.mime_type,
        )

    def _validate_upload(
        self,
        data: bytes,
        original_name: str,
        mime_type: str,
        size: int,
    ) -> None:
        if not original_name or not original_name.strip():
            raise UploadValidationError("File name is required")
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UploadValidationError(f"File type {mime_type} not supported")
        if size <= 0:
            raise UploadValidationError("File is empty")
        if size > self._max_upload_bytes:
            raise UploadValidationError(
                f"File size {size} exceeds the maximum of {self._max_upload_bytes} bytes"
            )
        if size != len(data):
            raise UploadValidationError(
                f"Declared size {size} does not match received {len(data)} bytes"
            )

    def _discard_blob(self, storage_key: str) -> None:
        try:
            self._storage.delete(storage_key)
        except StorageError as exc:
            Log.warning(f"Failed to delete stored file {storage_key}: {exc}")

    @staticmethod
    def _checked_id(document_id: str) -> str:
        try:
            return str(uuid.UUID(document_id))
        except (TypeError, ValueError) as exc:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found") from exc
