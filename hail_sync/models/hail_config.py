"""
Singleton configuration row holding Hail OAuth state and settings.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Text, UniqueConstraint
from sqlmodel import Field, Column, JSON

from hail_sync.models.base import BaseModel


class HailConfig(BaseModel, table=True):
    """
    Shared Hail configuration for the whole deployment.

    There is exactly one row (enforced by singleton_marker). Tokens are
    encrypted with Fernet before storage (core/encryption.py) and never
    exposed in API responses.

    Fields:
        access_token_encrypted: Encrypted OAuth access token
        access_token_expire: Absolute UTC expiry of the access token
        refresh_token_encrypted: Encrypted OAuth refresh token
        user_id: Hail user that authorised the application
        organisation_ids: Hail organisations whose content is fetched
        token_version: Incremented on every token write, used for compare-and-swap
        api_status_current: Last-known API status ("OK" or an error description)
        api_status_checked_at: When api_status_current was recorded
    """
    __tablename__ = "hail_config"
    __table_args__ = (
        UniqueConstraint('singleton_marker', name='uq_hail_config_singleton'),
    )

    singleton_marker: int = Field(default=1, nullable=False)

    access_token_encrypted: Optional[str] = Field(default=None, sa_type=Text)
    access_token_expire: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    refresh_token_encrypted: Optional[str] = Field(default=None, sa_type=Text)
    user_id: Optional[str] = Field(default=None, max_length=64)
    organisation_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    token_version: int = Field(default=0, nullable=False)

    api_status_current: Optional[str] = Field(default=None, max_length=255)
    api_status_checked_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    def __repr__(self) -> str:
        return (
            f"<HailConfig(user_id={self.user_id}, organisations={self.organisation_ids}, "
            f"token_version={self.token_version})>"
        )
