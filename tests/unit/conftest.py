import threading
from collections.abc import Callable, Generator
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

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
from docvault.documents.service import DocumentService
from docvault.extraction.dispatcher import TextExtractionDispatcher
from docvault.extraction.docx_adapter import DocxAdapter
from docvault.extraction.pdfplumber_adapter import PdfPlumberAdapter
from docvault.extraction.plain_text_adapter import PlainTextAdapter
from docvault.generation.client_base import BaseGenerationClient
from docvault.generation.generator import ArtifactGenerator, GenerationLimits
from docvault.processor.processor import Processor
from docvault.processor.steps import (
    AcquireLeaseStep,
    ExtractTextStep,
    GenerateArtifactsStep,
    LoadDocumentStep,
    MarkCompletedStep,
    MarkFailedStep,
)
from docvault.storage.local_storage import LocalStorage
from docvault.worker.task_runner import PipelineTaskRunner


class InMemoryDatabase:
    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.documents: dict[str, Document] = {}
        self.records: dict[str, ProcessingRecord] = {}


class InMemoryDocumentRepository:
    """Stands in for DocumentRepository with the same method contract."""

    _SORT_KEYS: dict[SortField, Callable[[Document], Any]] = {
        SortField.UPLOADED_AT: lambda d: d.uploaded_at,
        SortField.ORIGINAL_NAME: lambda d: d.original_name,
        SortField.SIZE: lambda d: d.size,
    }

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def create_with_record(self, document: Document) -> ProcessingRecord:
        with self._db.lock:
            record = ProcessingRecord(document_id=document.id, status=ProcessingStatus.PENDING)
            self._db.documents[document.id] = document
            self._db.records[document.id] = record
            return replace(record)

    def find_by_id(self, document_id: str) -> Document:
        with self._db.lock:
            document = self._db.documents.get(document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found")
        return document

    def find_with_record(self, document_id: str) -> tuple[Document, ProcessingRecord]:
        with self._db.lock:
            document = self._db.documents.get(document_id)
            record = self._db.records.get(document_id)
        if document is None or record is None:
            raise DocumentNotFoundError(f"Document with ID {document_id} not found")
        return document, replace(record)

    def find_all_paged(self, query: ListQuery) -> tuple[list[DocumentListItem], int]:
        with self._db.lock:
            documents = sorted(
                self._db.documents.values(),
                key=self._SORT_KEYS[query.sort_by],
                reverse=query.order is SortOrder.DESC,
            )
            statuses = {doc_id: r.status for doc_id, r in self._db.records.items()}
        page = documents[query.offset : query.offset + query.limit]
        items = [
            DocumentListItem(
                id=d.id,
                filename=d.filename,
                original_name=d.original_name,
                mime_type=d.mime_type,
                size=d.size,
                uploaded_at=d.uploaded_at,
                processing_status=statuses[d.id],
            )
            for d in page
        ]
        return items, len(documents)

    def delete(self, document_id: str) -> bool:
        with self._db.lock:
            self._db.records.pop(document_id, None)
            return self._db.documents.pop(document_id, None) is not None


class InMemoryProcessingRecordRepository:
    """Stands in for ProcessingRecordRepository; transitions are guarded on status."""

    def __init__(self, db: InMemoryDatabase) -> None:
        self._db = db

    def find_by_document_id(self, document_id: str) -> ProcessingRecord | None:
        with self._db.lock:
            record = self._db.records.get(document_id)
            return replace(record) if record is not None else None

    def acquire_lease(self, document_id: str) -> bool:
        return self._transition(
            document_id,
            ProcessingStatus.PENDING,
            status=ProcessingStatus.PROCESSING,
            started_at=datetime.now(timezone.utc),
        )

    def mark_completed(self, document_id: str, summary: str, markdown: str) -> bool:
        return self._transition(
            document_id,
            ProcessingStatus.PROCESSING,
            status=ProcessingStatus.COMPLETED,
            summary=summary,
            markdown=markdown,
            processed_at=datetime.now(timezone.utc),
            error_message=None,
        )

    def mark_failed(self, document_id: str, error: str) -> bool:
        return self._transition(
            document_id,
            ProcessingStatus.PROCESSING,
            status=ProcessingStatus.FAILED,
            error_message=error,
            summary=None,
            markdown=None,
        )

    def find_pending_document_ids(self, limit: int) -> list[str]:
        with self._db.lock:
            return [
                doc_id
                for doc_id, record in self._db.records.items()
                if record.status is ProcessingStatus.PENDING
            ][:limit]

    def _transition(self, document_id: str, expected: ProcessingStatus, **changes: Any) -> bool:
        with self._db.lock:
            record = self._db.records.get(document_id)
            if record is None or record.status is not expected:
                return False
            for name, value in changes.items():
                setattr(record, name, value)
            return True


class ScriptedClient(BaseGenerationClient):
    """Answers summary prompts and markdown prompts with fixed texts.

    Records every prompt. If `fail_when` matches a prompt, raises `error`.
    """

    SUMMARY_RESPONSE = "A short summary."
    MARKDOWN_RESPONSE = "# Converted"

    def __init__(
        self,
        fail_when: Callable[[str], bool] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.prompts: list[str] = []
        self._lock = threading.Lock()
        self._fail_when = fail_when
        self._error = error

    def generate(self, prompt: str) -> str:
        with self._lock:
            self.prompts.append(prompt)
        if self._fail_when is not None and self._fail_when(prompt):
            raise self._error if self._error is not None else RuntimeError("boom")
        if self.is_summary_prompt(prompt):
            return self.SUMMARY_RESPONSE
        return self.MARKDOWN_RESPONSE

    @property
    def summary_prompts(self) -> list[str]:
        return [p for p in self.prompts if self.is_summary_prompt(p)]

    @property
    def markdown_prompts(self) -> list[str]:
        return [p for p in self.prompts if not self.is_summary_prompt(p)]

    @staticmethod
    def is_summary_prompt(prompt: str) -> bool:
        head = prompt.split("\n\n", 1)[0]
        return "concise summary" in head


@dataclass
class PipelineEnv:
    db: InMemoryDatabase
    doc_repo: InMemoryDocumentRepository
    record_repo: InMemoryProcessingRecordRepository
    storage: LocalStorage
    client: ScriptedClient
    processor: Processor
    task_runner: PipelineTaskRunner
    service: DocumentService

    def wait(self) -> None:
        """Drain every scheduled run."""
        self.task_runner.shutdown()

    def record(self, document_id: str) -> ProcessingRecord:
        record = self.record_repo.find_by_document_id(document_id)
        assert record is not None
        return record


@pytest.fixture
def make_pipeline_env(tmp_path: Path) -> Generator[Callable[..., PipelineEnv], None, None]:
    """Build a full pipeline over in-memory repositories and tmp_path storage."""
    runners: list[PipelineTaskRunner] = []

    def _make(
        client: ScriptedClient | None = None,
        limits: GenerationLimits | None = None,
        max_upload_bytes: int = 10 * 1024 * 1024,
    ) -> PipelineEnv:
        db = InMemoryDatabase()
        doc_repo = InMemoryDocumentRepository(db)
        record_repo = InMemoryProcessingRecordRepository(db)
        storage = LocalStorage(tmp_path / "files")
        client = client if client is not None else ScriptedClient()
        generator = ArtifactGenerator(client=client, limits=limits or GenerationLimits())
        dispatcher = TextExtractionDispatcher(
            text_extractor=PlainTextAdapter(),
            pdf_extractor=PdfPlumberAdapter(),
            word_extractor=DocxAdapter(),
        )
        processor = Processor(
            steps=[
                AcquireLeaseStep(record_repo),  # type: ignore[arg-type]
                LoadDocumentStep(doc_repo=doc_repo, storage=storage),  # type: ignore[arg-type]
                ExtractTextStep(dispatcher),
                GenerateArtifactsStep(generator),
                MarkCompletedStep(record_repo),  # type: ignore[arg-type]
            ],
            failed_step=MarkFailedStep(record_repo),  # type: ignore[arg-type]
        )
        task_runner = PipelineTaskRunner(processor, max_workers=2)
        runners.append(task_runner)
        service = DocumentService(
            doc_repo=doc_repo,  # type: ignore[arg-type]
            storage=storage,
            task_runner=task_runner,
            max_upload_bytes=max_upload_bytes,
        )
        return PipelineEnv(
            db=db,
            doc_repo=doc_repo,
            record_repo=record_repo,
            storage=storage,
            client=client,
            processor=processor,
            task_runner=task_runner,
            service=service,
        )

    yield _make
    for runner in runners:
        runner.shutdown()


@pytest.fixture
def scripted_client() -> type[ScriptedClient]:
    return ScriptedClient
