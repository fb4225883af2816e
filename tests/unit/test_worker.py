from unittest.mock import MagicMock, patch

from docvault.database.exceptions import PersistenceError
from docvault.worker.worker import Worker


def _make_worker() -> tuple[Worker, MagicMock, MagicMock]:
    """Create a Worker with mocked dependencies."""
    mock_repo = MagicMock()
    mock_runner = MagicMock()
    settings = MagicMock(sweep_poll_interval_seconds=1, max_concurrent_runs=4)
    worker = Worker(mock_repo, mock_runner, settings)
    return worker, mock_repo, mock_runner


class TestWorkerSweep:
    def test_schedules_pending_documents(self) -> None:
        worker, mock_repo, mock_runner = _make_worker()
        mock_repo.find_pending_document_ids.return_value = ["a", "b"]

        assert worker.sweep() == 2

        mock_repo.find_pending_document_ids.assert_called_once_with(limit=8)
        assert [c.args[0] for c in mock_runner.submit.call_args_list] == ["a", "b"]

    def test_counts_only_newly_scheduled(self) -> None:
        worker, mock_repo, mock_runner = _make_worker()
        mock_repo.find_pending_document_ids.return_value = ["a", "b"]
        mock_runner.submit.side_effect = [None, MagicMock()]

        assert worker.sweep() == 1

    def test_database_error_is_retried_later(self) -> None:
        worker, mock_repo, mock_runner = _make_worker()
        mock_repo.find_pending_document_ids.side_effect = PersistenceError("connection lost")

        assert worker.sweep() == 0
        mock_runner.submit.assert_not_called()


class TestWorkerSleep:
    def test_sleeps_when_nothing_scheduled(self) -> None:
        worker, _repo, _runner = _make_worker()

        with (
            patch.object(worker, "sweep", side_effect=[0, KeyboardInterrupt]),
            patch("docvault.worker.worker.time.sleep") as mock_sleep,
        ):
            worker.run()

        mock_sleep.assert_called_once_with(1)

    def test_does_not_sleep_after_scheduling(self) -> None:
        worker, _repo, _runner = _make_worker()

        with (
            patch.object(worker, "sweep", side_effect=[3, KeyboardInterrupt]),
            patch("docvault.worker.worker.time.sleep") as mock_sleep,
        ):
            worker.run()

        mock_sleep.assert_not_called()


class TestWorkerShutdown:
    def test_handles_keyboard_interrupt(self) -> None:
        worker, _repo, _runner = _make_worker()

        with patch.object(worker, "sweep", side_effect=KeyboardInterrupt):
            worker.run()  # Should not raise

    def test_stops_after_max_sweeps(self) -> None:
        worker, _repo, _runner = _make_worker()

        with (
            patch.object(worker, "sweep", return_value=0) as mock_sweep,
            patch("docvault.worker.worker.time.sleep"),
        ):
            worker.run(max_sweeps=3)

        assert mock_sweep.call_count == 3
