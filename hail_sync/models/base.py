"""
Base model classes shared by every table.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel

from hail_sync.core.time_utils import utc_now


class TimestampMixin(SQLModel):
    """Creation and update timestamps, stored in UTC."""
    # sa_type rather than sa_column: a Column instance cannot be shared between tables
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )


class BaseModel(TimestampMixin):
    """Integer primary key; ascending ids double as insertion order."""
    id: Optional[int] = Field(default=None, primary_key=True)
