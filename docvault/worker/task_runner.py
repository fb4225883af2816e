import threading
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum

from docvault.logging.logger import Log
from docvault.processor.processor import Processor


class ShutdownPolicy(str, Enum):
    """What happens to scheduled runs when the runner stops.

    DRAIN blocks until queued and in-flight runs finish. ABANDON cancels runs
    that have not started (their records stay PENDING) and returns at once;
    in-flight runs are not interrupted and finish before the interpreter exits.
    """

    DRAIN = "drain"
    ABANDON = "abandon"


class PipelineTaskRunner:
    """Background executor for pipeline runs, one task per document.

    `submit` never blocks on the run. A document already queued or running in
    this process is not scheduled again.
    """

    def __init__(
        self,
        processor: Processor,
        *,
        max_workers: int = 4,
        shutdown_policy: ShutdownPolicy = ShutdownPolicy.DRAIN,
    ) -> None:
        self._processor = processor
        self._shutdown_policy = shutdown_policy
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pipeline")
        self._lock = threading.Lock()
        self._in_flight: set[str] = set()
        self._closed = False

    def submit(self, document_id: str) -> Future[bool] | None:
        """Schedule a pipeline run. Returns None if one is already scheduled."""
        with self._lock:
            if self._closed:
                raise RuntimeError("Task runner has been shut down")
            if document_id in self._in_flight:
                Log.debug(f"Run for document {document_id} already scheduled")
                return None
            self._in_flight.add(document_id)
            future = self._executor.submit(self._run, document_id)
        future.add_done_callback(lambda _: self._release(document_id))
        Log.debug(f"Scheduled run for document {document_id}")
        return future

    def is_scheduled(self, document_id: str) -> bool:
        with self._lock:
            return document_id in self._in_flight

    def shutdown(self, policy: ShutdownPolicy | None = None) -> None:
        policy = policy if policy is not None else self._shutdown_policy
        with self._lock:
            self._closed = True
            pending = len(self._in_flight)
        Log.info(f"Task runner shutting down ({policy.value}), {pending} runs scheduled")
        if policy is ShutdownPolicy.DRAIN:
            self._executor.shutdown(wait=True)
        else:
            self._executor.shutdown(wait=False, cancel_futures=True)

    def _run(self, document_id: str) -> bool:
        try:
            return self._processor.process(document_id)
        except Exception:
            Log.exception(f"Pipeline run for document {document_id} crashed")
            return False

    def _release(self, document_id: str) -> None:
        with self._lock:
            self._in_flight.discard(document_id)
