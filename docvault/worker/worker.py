import time

from docvault.config.settings import Settings
from docvault.database.exceptions import PersistenceError
from docvault.database.repositories.processing_record_repository import (
    ProcessingRecordRepository,
)
from docvault.logging.logger import Log
from docvault.worker.task_runner import PipelineTaskRunner


class Worker:
    """Poll loop: find PENDING documents -> hand them to the task runner -> sleep."""

    def __init__(
        self,
        record_repo: ProcessingRecordRepository,
        task_runner: PipelineTaskRunner,
        settings: Settings,
    ) -> None:
        self._record_repo = record_repo
        self._task_runner = task_runner
        self._settings = settings

    def run(self, max_sweeps: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_sweeps is set, stop after that many sweeps (for testing).
        """
        Log.info("Worker started, polling for pending documents")
        sweeps = 0
        try:
            while max_sweeps is None or sweeps < max_sweeps:
                scheduled = self.sweep()
                sweeps += 1
                if scheduled == 0:
                    Log.debug("No new pending documents, sleeping")
                    time.sleep(self._settings.sweep_poll_interval_seconds)
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")

    def sweep(self) -> int:
        """Schedule runs for PENDING documents. Returns how many were newly scheduled."""
        scheduled = 0
        for document_id in self._try_find_pending():
            if self._task_runner.submit(document_id) is not None:
                scheduled += 1
        if scheduled:
            Log.info(f"Scheduled {scheduled} pending documents")
        return scheduled

    def _try_find_pending(self) -> list[str]:
        """Fetch pending document IDs. Gracefully handle DB errors."""
        try:
            return self._record_repo.find_pending_document_ids(
                limit=self._settings.max_concurrent_runs * 2
            )
        except PersistenceError as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return []
