"""
Service for queued Hail fetch jobs.

Every mutation commits immediately so progress is visible to other
processes (admin surface, CLI) while a job runs.
"""
from typing import List, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from hail_sync.core.logging_config import LogCategory, log_info, log_warning
from hail_sync.core.time_utils import utc_now
from hail_sync.models.enums import JobStatus
from hail_sync.models.fetch_job import FetchJob


class FetchJobService:
    """Create, claim and track fetch jobs."""

    def __init__(self, session: Session):
        self.session = session

    def enqueue(self, to_fetch: str) -> FetchJob:
        """
        Queue a fetch of one type or of everything ("*").

        An existing job that has not started yet for the same target is
        returned instead of queueing a duplicate.

        Raises:
            ValueError: to_fetch is neither "*" nor a registered type
        """
        from hail_sync.hail.importers import is_fetchable

        if not is_fetchable(to_fetch):
            raise ValueError(f"'{to_fetch}' is not a fetchable Hail object type")

        existing = self.session.exec(
            select(FetchJob)
            .where(FetchJob.to_fetch == to_fetch)
            .where(FetchJob.status == JobStatus.STARTING)
            .order_by(FetchJob.created_at, FetchJob.id)
        ).first()
        if existing:
            log_info(f"Fetch of {to_fetch} already queued as job {existing.id}", category=LogCategory.JOBS)
            return existing

        job = FetchJob(to_fetch=to_fetch)
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        log_info(f"Queued fetch job {job.id}", category=LogCategory.JOBS, to_fetch=to_fetch)
        return job

    def get_job(self, job_id: int) -> Optional[FetchJob]:
        return self.session.get(FetchJob, job_id)

    def list_jobs(self, limit: int = 20) -> List[FetchJob]:
        """Most recent jobs first."""
        return list(self.session.exec(
            select(FetchJob).order_by(FetchJob.created_at.desc(), FetchJob.id.desc()).limit(limit)
        ).all())

    def pending_jobs(self) -> List[FetchJob]:
        """Jobs waiting to run, oldest first."""
        return list(self.session.exec(
            select(FetchJob)
            .where(FetchJob.status == JobStatus.STARTING)
            .order_by(FetchJob.created_at, FetchJob.id)
        ).all())

    def claim(self, job: FetchJob) -> bool:
        """
        Move a job from starting to running.

        The conditional update only matches while the job is still starting,
        so when two workers race exactly one of them gets True.
        """
        now = utc_now()
        result = self.session.exec(
            update(FetchJob)
            .where(FetchJob.id == job.id)
            .where(FetchJob.status == JobStatus.STARTING)
            .values(status=JobStatus.RUNNING, started_at=now, updated_at=now)
        )
        self.session.commit()
        self.session.refresh(job)

        if result.rowcount != 1:
            log_warning(f"Fetch job {job.id} was claimed by another worker", category=LogCategory.JOBS)
            return False
        return True

    def set_total(self, job: FetchJob, total: int) -> FetchJob:
        job.global_total = total
        return self._save(job)

    def increment_done(self, job: FetchJob) -> FetchJob:
        job.global_done = job.global_done + 1
        return self._save(job)

    def update_current(
        self,
        job: FetchJob,
        current_type: Optional[str] = None,
        current_total: Optional[int] = None,
        current_done: Optional[int] = None,
    ) -> FetchJob:
        """Record per-type progress reported by an importer."""
        if current_type is not None:
            job.current_type = current_type
        if current_total is not None:
            job.current_total = current_total
        if current_done is not None:
            job.current_done = current_done
        return self._save(job)

    def mark_done(self, job: FetchJob) -> FetchJob:
        job.mark_done()
        return self._save(job)

    def mark_error(self, job: FetchJob, error_message: str) -> FetchJob:
        # Drop half-written importer changes before recording the failure
        self.session.rollback()
        self.session.refresh(job)
        job.mark_error(error_message)
        return self._save(job)

    def _save(self, job: FetchJob) -> FetchJob:
        job.updated_at = utc_now()
        self.session.add(job)
        self.session.commit()
        self.session.refresh(job)
        return job
