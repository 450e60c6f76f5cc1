"""
Unit tests for FetchJobService.
"""
import pytest
from sqlmodel import Session

from hail_sync.models.enums import JobStatus
from hail_sync.services.fetch_job_service import FetchJobService


class TestEnqueue:
    def test_enqueue_creates_starting_job(self, session):
        job = FetchJobService(session).enqueue("article")

        assert job.id is not None
        assert job.status == JobStatus.STARTING
        assert (job.global_total, job.global_done) == (0, 0)

    def test_enqueue_reuses_waiting_job_for_same_target(self, session):
        service = FetchJobService(session)

        first = service.enqueue("*")
        second = service.enqueue("*")

        assert first.id == second.id
        assert len(service.pending_jobs()) == 1

    def test_enqueue_queues_again_once_previous_job_started(self, session):
        service = FetchJobService(session)
        first = service.enqueue("*")
        service.claim(first)

        second = service.enqueue("*")

        assert second.id != first.id

    def test_enqueue_rejects_unknown_type(self, session):
        with pytest.raises(ValueError, match="not a fetchable"):
            FetchJobService(session).enqueue("comments")


class TestClaim:
    def test_claim_moves_job_to_running(self, session):
        service = FetchJobService(session)
        job = service.enqueue("image")

        assert service.claim(job) is True
        assert job.status == JobStatus.RUNNING
        assert job.started_at is not None

    def test_only_one_worker_wins_the_claim(self, engine, session):
        job = FetchJobService(session).enqueue("image")

        with Session(engine) as other_session:
            other_job = FetchJobService(other_session).get_job(job.id)
            assert FetchJobService(other_session).claim(other_job) is True

        assert FetchJobService(session).claim(job) is False
        assert job.status == JobStatus.RUNNING


class TestProgress:
    def test_pending_jobs_oldest_first(self, session):
        service = FetchJobService(session)
        first = service.enqueue("article")
        second = service.enqueue("image")
        service.claim(first)
        third = service.enqueue("video")

        assert [job.id for job in service.pending_jobs()] == [second.id, third.id]

    def test_list_jobs_newest_first(self, session):
        service = FetchJobService(session)
        ids = [service.enqueue(to_fetch).id for to_fetch in ("article", "image", "video")]

        assert [job.id for job in service.list_jobs(limit=2)] == list(reversed(ids))[:2]

    def test_counters_and_completion(self, session):
        service = FetchJobService(session)
        job = service.enqueue("*")
        service.claim(job)

        service.set_total(job, 2)
        service.update_current(job, current_type="article", current_total=10, current_done=4)
        service.increment_done(job)

        assert (job.global_done, job.global_total) == (1, 2)
        assert job.progress_percent == 50
        assert (job.current_type, job.current_total, job.current_done) == ("article", 10, 4)

        service.increment_done(job)
        service.mark_done(job)

        assert job.status == JobStatus.DONE
        assert job.current_type is None
        assert job.progress_percent == 100
        assert job.is_active is False

    def test_mark_error_truncates_message(self, session):
        service = FetchJobService(session)
        job = service.enqueue("*")

        service.mark_error(job, "x" * 5000)

        assert job.status == JobStatus.ERROR
        assert len(job.error_message) == 1000
