from dataclasses import dataclass

from docvault.config.settings import Settings
from docvault.database.connection import apply_schema, close_pool, init_pool
from docvault.database.repositories.document_repository import DocumentRepository
from docvault.database.repositories.processing_record_repository import (
    ProcessingRecordRepository,
)
from docvault.documents.service import DocumentService
from docvault.generation.factory import GenerationClientFactory
from docvault.logging.logger import Log
from docvault.processor.processor import build_processor
from docvault.storage.local_storage import LocalStorage
from docvault.worker.task_runner import PipelineTaskRunner, ShutdownPolicy
from docvault.worker.worker import Worker


@dataclass
class Runtime:
    service: DocumentService
    task_runner: PipelineTaskRunner
    worker: Worker


def build_runtime(settings: Settings) -> Runtime:
    """Wire storage, repositories, the generation client and the task runner."""
    client = GenerationClientFactory.create(settings)
    storage = LocalStorage(settings.files_root)
    doc_repo = DocumentRepository()
    record_repo = ProcessingRecordRepository()
    processor = build_processor(
        settings,
        client=client,
        storage=storage,
        doc_repo=doc_repo,
        record_repo=record_repo,
    )
    task_runner = PipelineTaskRunner(
        processor,
        max_workers=settings.max_concurrent_runs,
        shutdown_policy=ShutdownPolicy(settings.shutdown_policy),
    )
    service = DocumentService(
        doc_repo=doc_repo,
        storage=storage,
        task_runner=task_runner,
        max_upload_bytes=settings.max_upload_bytes,
    )
    worker = Worker(record_repo, task_runner, settings)
    return Runtime(service=service, task_runner=task_runner, worker=worker)


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        apply_schema()
        runtime = build_runtime(settings)
        Log.info(f"Generation provider: {settings.generation_provider}")
        try:
            runtime.worker.run()
        finally:
            runtime.task_runner.shutdown()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
