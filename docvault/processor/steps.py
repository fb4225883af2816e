from docvault.database.repositories.document_repository import DocumentRepository
from docvault.database.repositories.processing_record_repository import (
    ProcessingRecordRepository,
)
from docvault.extraction.dispatcher import TextExtractionDispatcher
from docvault.generation.generator import ArtifactGenerator
from docvault.logging.logger import Log
from docvault.processor.exceptions import LeaseUnavailableError
from docvault.processor.pipeline import PipelineContext, PipelineStep
from docvault.storage.base import BaseStorage


class AcquireLeaseStep(PipelineStep):
    """PENDING -> PROCESSING, only for the run that wins the conditional update."""

    def __init__(self, record_repo: ProcessingRecordRepository) -> None:
        self._record_repo = record_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if not self._record_repo.acquire_lease(context.document_id):
            raise LeaseUnavailableError(
                f"Document {context.document_id} is not PENDING; another run owns it"
            )
        Log.info(f"Document {context.document_id} marked as processing")
        return context


class LoadDocumentStep(PipelineStep):
    def __init__(self, doc_repo: DocumentRepository, storage: BaseStorage) -> None:
        self._doc_repo = doc_repo
        self._storage = storage

    def run(self, context: PipelineContext) -> PipelineContext:
        document = self._doc_repo.find_by_id(context.document_id)
        context.document = document
        context.raw_bytes = self._storage.fetch(document.storage_key)
        Log.info(f"Loaded {len(context.raw_bytes)} bytes for document {context.document_id}")
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, dispatcher: TextExtractionDispatcher) -> None:
        self._dispatcher = dispatcher

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.document is None:
            raise ValueError("PipelineContext.document must be set before extraction")
        context.extracted_text = self._dispatcher.extract(
            context.raw_bytes, context.document.mime_type
        )
        Log.info(
            f"Extracted {len(context.extracted_text)} chars from document "
            f"{context.document_id}"
        )
        return context


class GenerateArtifactsStep(PipelineStep):
    def __init__(self, generator: ArtifactGenerator) -> None:
        self._generator = generator

    def run(self, context: PipelineContext) -> PipelineContext:
        context.artifacts = self._generator.generate_artifacts(context.extracted_text)
        Log.info(
            f"Generated artifacts for document {context.document_id}: "
            f"summary={len(context.artifacts.summary)} chars, "
            f"markdown={len(context.artifacts.markdown)} chars"
        )
        return context


class MarkCompletedStep(PipelineStep):
    def __init__(self, record_repo: ProcessingRecordRepository) -> None:
        self._record_repo = record_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.artifacts is None:
            raise ValueError("PipelineContext.artifacts must be set before completion")
        updated = self._record_repo.mark_completed(
            context.document_id,
            summary=context.artifacts.summary,
            markdown=context.artifacts.markdown,
        )
        if updated:
            Log.info(f"Document {context.document_id} marked as completed")
        else:
            Log.warning(
                f"Document {context.document_id} was no longer processing; result discarded"
            )
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, record_repo: ProcessingRecordRepository) -> None:
        self._record_repo = record_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        updated = self._record_repo.mark_failed(context.document_id, context.error_message)
        if updated:
            Log.error(f"Document {context.document_id} marked as failed: {context.error_message}")
        else:
            Log.warning(
                f"Document {context.document_id} was no longer processing; "
                f"failure not recorded: {context.error_message}"
            )
        return context
