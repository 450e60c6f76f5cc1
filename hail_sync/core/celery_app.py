"""
Celery application configuration for the fetch queue.
"""
from datetime import timedelta

from celery import Celery

from hail_sync.core.config import settings

celery_app = Celery(
    "hail_sync",
    include=[
        "hail_sync.tasks.fetch_tasks",
    ],
)

celery_app.conf.update(
    broker_url=settings.celery_broker_url,
    result_backend=settings.celery_result_backend,
    task_serializer=settings.celery_task_serializer,
    result_serializer=settings.celery_result_serializer,
    accept_content=settings.celery_accept_content,
    timezone=settings.celery_timezone,
    enable_utc=settings.celery_enable_utc,
    beat_schedule={
        "process-hail-fetch-queue": {
            "task": "hail_sync.tasks.fetch_tasks.process_fetch_queue",
            "schedule": timedelta(seconds=settings.fetch_queue_interval_seconds),
        },
        "enqueue-recurring-hail-fetch": {
            "task": "hail_sync.tasks.fetch_tasks.enqueue_recurring_fetch",
            "schedule": timedelta(hours=settings.recurring_fetch_interval_hours),
        },
    },
    task_track_started=True,
    task_time_limit=3600,  # 1 hour hard limit for tasks
    task_soft_time_limit=3300,  # 55 minutes soft limit
    worker_prefetch_multiplier=1,  # One task at a time
    worker_max_tasks_per_child=1000,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    broker_connection_retry_on_startup=True,
)


def get_celery_app() -> Celery:
    """Get Celery app instance."""
    return celery_app
