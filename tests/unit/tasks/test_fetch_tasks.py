"""
Unit tests for the Celery fetch tasks, run eagerly with the database and
processor patched.
"""
from contextlib import contextmanager
from unittest.mock import MagicMock, patch

import pytest

from hail_sync.core.exceptions import FetchJobFailedError
from hail_sync.models.enums import JobStatus
from hail_sync.services.fetch_job_service import FetchJobService
from hail_sync.tasks import fetch_tasks


@pytest.fixture
def session_context(session):
    @contextmanager
    def _context():
        yield session

    with patch.object(fetch_tasks, "get_session_context", _context):
        yield session


def test_process_fetch_queue_reports_processed_jobs(session_context):
    job = MagicMock(id=7)
    with patch.object(fetch_tasks, "FetchQueueProcessor") as processor_cls:
        processor_cls.return_value.run.return_value = [job]

        result = fetch_tasks.process_fetch_queue.apply().get()

    processor_cls.assert_called_once_with(session_context)
    assert result == {"status": "ok", "processed_job_ids": [7]}


def test_process_fetch_queue_reraises_failed_job(session_context):
    with patch.object(fetch_tasks, "FetchQueueProcessor") as processor_cls:
        processor_cls.return_value.run.side_effect = FetchJobFailedError(3, 1, "Hail timed out")

        result = fetch_tasks.process_fetch_queue.apply()

    assert result.failed()
    assert isinstance(result.result, FetchJobFailedError)
    assert (result.result.job_id, result.result.units_done) == (3, 1)


def test_enqueue_recurring_fetch_queues_everything_once(session_context):
    first = fetch_tasks.enqueue_recurring_fetch.apply().get()
    second = fetch_tasks.enqueue_recurring_fetch.apply().get()

    pending = FetchJobService(session_context).pending_jobs()
    assert first["job_id"] == second["job_id"]
    assert [(job.to_fetch, job.status) for job in pending] == [("*", JobStatus.STARTING)]
