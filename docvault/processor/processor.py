from docvault.config.settings import Settings
from docvault.database.repositories.document_repository import DocumentRepository
from docvault.database.repositories.processing_record_repository import (
    ProcessingRecordRepository,
)
from docvault.extraction.factory import build_dispatcher
from docvault.generation.client_base import BaseGenerationClient
from docvault.generation.generator import ArtifactGenerator, GenerationLimits
from docvault.logging.logger import Log
from docvault.processor.exceptions import LeaseUnavailableError
from docvault.processor.pipeline import PipelineContext, PipelineStep
from docvault.processor.steps import (
    AcquireLeaseStep,
    ExtractTextStep,
    GenerateArtifactsStep,
    LoadDocumentStep,
    MarkCompletedStep,
    MarkFailedStep,
)
from docvault.storage.base import BaseStorage


def describe_error(exc: Exception) -> str:
    """Error message stored on a FAILED record: exception kind plus its text."""
    message = str(exc) or "no details"
    return f"{type(exc).__name__}: {message}"


class Processor:
    """Runs one document through the pipeline and records the terminal status.

    Pipeline: lease -> load -> extract -> generate (summary || markdown) -> complete.
    Any failure after the lease moves the record to FAILED.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, document_id: str) -> bool:
        """Run the pipeline for a document.

        Returns False if the run did not acquire the lease and did nothing.
        """
        Log.info(f"Processing document {document_id}")
        context = PipelineContext(document_id=document_id)
        try:
            for step in self._steps:
                context = step.run(context)
        except LeaseUnavailableError as exc:
            Log.info(f"Skipping document {document_id}: {exc}")
            return False
        except Exception as exc:
            context.error_message = describe_error(exc)
            self._failed_step.run(context)
        return True


def build_processor(
    settings: Settings,
    *,
    client: BaseGenerationClient,
    storage: BaseStorage,
    doc_repo: DocumentRepository | None = None,
    record_repo: ProcessingRecordRepository | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    doc_repo = doc_repo if doc_repo is not None else DocumentRepository()
    record_repo = record_repo if record_repo is not None else ProcessingRecordRepository()
    generator = ArtifactGenerator(
        client=client,
        limits=GenerationLimits.from_settings(settings),
    )
    steps: list[PipelineStep] = [
        AcquireLeaseStep(record_repo),
        LoadDocumentStep(doc_repo=doc_repo, storage=storage),
        ExtractTextStep(build_dispatcher(settings)),
        GenerateArtifactsStep(generator),
        MarkCompletedStep(record_repo),
    ]
    return Processor(steps=steps, failed_step=MarkFailedStep(record_repo))
