"""
Fetch job model: one row per queued Hail fetch.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Enum as SAEnum
from sqlmodel import Field

from hail_sync.core.time_utils import utc_now
from hail_sync.models.base import BaseModel
from hail_sync.models.enums import JobStatus


class FetchJob(BaseModel, table=True):
    """
    Track fetch job progress.

    Jobs are enqueued by the admin surface, the CLI or the recurring task and
    processed in creation order by the fetch queue. Progress counters are
    persisted after every unit of work so they can be watched mid-run.
    """
    __tablename__ = "hail_fetch_jobs"

    # "*" or a registered fetchable type identifier
    to_fetch: str = Field(max_length=64, nullable=False, index=True)

    status: JobStatus = Field(
        default=JobStatus.STARTING,
        sa_column=Column(
            SAEnum(JobStatus, name="fetch_job_status_enum", values_callable=lambda x: [e.value for e in x]),
            nullable=False,
            index=True
        )
    )

    # Organisation x type units
    global_total: int = Field(default=0, ge=0)
    global_done: int = Field(default=0, ge=0)

    # Per-type progress reported by the importer currently running
    current_type: Optional[str] = Field(default=None, max_length=64)
    current_total: int = Field(default=0, ge=0)
    current_done: int = Field(default=0, ge=0)

    error_message: Optional[str] = Field(default=None, max_length=1000)

    started_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"<FetchJob(id={self.id}, to_fetch={self.to_fetch}, status={self.status}, "
            f"done={self.global_done}/{self.global_total})>"
        )

    @property
    def is_active(self) -> bool:
        return self.status in {JobStatus.STARTING, JobStatus.RUNNING}

    @property
    def progress_percent(self) -> int:
        if self.global_total <= 0:
            return 100 if self.status == JobStatus.DONE else 0
        return min(100, int(self.global_done * 100 / self.global_total))

    def mark_done(self):
        """Mark job as done."""
        self.status = JobStatus.DONE
        self.current_type = None
        self.completed_at = utc_now()
        self.updated_at = self.completed_at

    def mark_error(self, error_message: str):
        """Mark job as failed; truncated to fit the column."""
        self.status = JobStatus.ERROR
        self.error_message = error_message[:1000]
        self.completed_at = utc_now()
        self.updated_at = self.completed_at
