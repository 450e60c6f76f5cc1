"""
Background tasks for hail-sync.
"""

# Ensure Celery registers task modules on worker startup.
from hail_sync.tasks import fetch_tasks  # noqa: F401
