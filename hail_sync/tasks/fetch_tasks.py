"""
Celery tasks for the Hail fetch queue.

- process_fetch_queue: run every waiting fetch job (scheduled by Celery Beat)
- enqueue_recurring_fetch: queue a fetch of every type (scheduled by Celery Beat)
"""
from sqlalchemy.exc import OperationalError

from hail_sync.core.celery_app import celery_app
from hail_sync.core.database import get_session_context
from hail_sync.core.exceptions import FetchJobFailedError
from hail_sync.core.logging_config import LogCategory, log_error, log_info
from hail_sync.hail.fetch_queue import FetchQueueProcessor
from hail_sync.models.enums import FETCH_ALL
from hail_sync.services.fetch_job_service import FetchJobService


@celery_app.task(
    bind=True,
    name="hail_sync.tasks.fetch_tasks.process_fetch_queue",
    autoretry_for=(OperationalError,),
    retry_kwargs={"max_retries": 3, "countdown": 30},
)
def process_fetch_queue(self):
    """Process queued fetch jobs; a failed job is re-raised so the task shows as failed."""
    log_info("Fetch queue task started", category=LogCategory.JOBS, task_id=self.request.id)

    try:
        with get_session_context() as session:
            jobs = FetchQueueProcessor(session).run()
            job_ids = [job.id for job in jobs]
    except FetchJobFailedError as exc:
        log_error(exc, task_id=self.request.id, job_id=exc.job_id, units_done=exc.units_done)
        raise

    log_info("Fetch queue task completed", category=LogCategory.JOBS,
             task_id=self.request.id, processed=len(job_ids))
    return {"status": "ok", "processed_job_ids": job_ids}


@celery_app.task(name="hail_sync.tasks.fetch_tasks.enqueue_recurring_fetch")
def enqueue_recurring_fetch():
    """Queue a fetch of every registered type."""
    with get_session_context() as session:
        job = FetchJobService(session).enqueue(FETCH_ALL)
        job_id = job.id

    log_info("Recurring Hail fetch queued", category=LogCategory.JOBS, job_id=job_id)
    return {"status": "queued", "job_id": job_id}
