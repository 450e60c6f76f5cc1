"""
Local copies of Hail objects.

Every table is keyed by hail_id (the remote identifier) with a unique
constraint, so refetching a remote object updates the existing row.

Models:
- Article, Publication, Image, Video, PublicTag, PrivateTag

Extension Points:
- Add a new model subclassing HailObject with its endpoint and payload mapping
- Register an importer for it in hail_sync/hail/importers.py
"""
from datetime import datetime
from typing import Any, ClassVar, Dict, Optional

from sqlalchemy import DateTime, JSON, Text
from sqlmodel import Field

from hail_sync.core.time_utils import utc_now
from hail_sync.models.base import BaseModel


class HailObject(BaseModel):
    """Columns and payload mapping shared by every Hail object table."""

    # Remote endpoint segment, e.g. "articles" for GET articles/{hail_id}
    object_endpoint: ClassVar[str] = ""
    # Payload key holding the display title
    title_key: ClassVar[str] = "title"
    # model field -> payload key
    payload_fields: ClassVar[Dict[str, str]] = {}

    hail_id: str = Field(max_length=64, nullable=False, unique=True, index=True)
    hail_org_id: Optional[str] = Field(default=None, max_length=64, index=True)
    title: Optional[str] = Field(default=None, max_length=255)
    fetched_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    data: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    def apply_payload(self, payload: Dict[str, Any], org_id: Optional[str] = None) -> None:
        """Copy a Hail API payload onto this record and stamp the fetch time."""
        title = payload.get(self.title_key)
        self.title = str(title)[:255] if title is not None else None
        for field_name, key in self.payload_fields.items():
            value = payload.get(key)
            # Mapped columns are all text; the raw payload keeps the original types
            setattr(self, field_name, value if value is None or isinstance(value, str) else str(value))
        if org_id is not None:
            self.hail_org_id = str(org_id)
        self.data = payload
        self.fetched_at = utc_now()
        self.updated_at = self.fetched_at

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(hail_id={self.hail_id}, title={self.title!r})>"


class Article(HailObject, table=True):
    """Hail article."""
    __tablename__ = "hail_article"

    object_endpoint: ClassVar[str] = "articles"
    payload_fields: ClassVar[Dict[str, str]] = {
        "lede": "lede",
        "body": "body",
        "author": "author",
        "article_date": "date",
        "status": "status",
    }

    lede: Optional[str] = Field(default=None, sa_type=Text)
    body: Optional[str] = Field(default=None, sa_type=Text)
    author: Optional[str] = Field(default=None, max_length=255)
    article_date: Optional[str] = Field(default=None, max_length=64)
    status: Optional[str] = Field(default=None, max_length=32)


class Publication(HailObject, table=True):
    """Hail publication (a curated collection of articles)."""
    __tablename__ = "hail_publication"

    object_endpoint: ClassVar[str] = "publications"
    payload_fields: ClassVar[Dict[str, str]] = {
        "url": "url",
        "due_date": "due_date",
    }

    url: Optional[str] = Field(default=None, max_length=2048)
    due_date: Optional[str] = Field(default=None, max_length=64)


class Image(HailObject, table=True):
    """Hail image."""
    __tablename__ = "hail_image"

    object_endpoint: ClassVar[str] = "images"
    title_key: ClassVar[str] = "caption"
    payload_fields: ClassVar[Dict[str, str]] = {
        "caption": "caption",
        "url": "file_1000_url",
        "thumbnail_url": "file_500_square_url",
    }

    caption: Optional[str] = Field(default=None, sa_type=Text)
    url: Optional[str] = Field(default=None, max_length=2048)
    thumbnail_url: Optional[str] = Field(default=None, max_length=2048)


class Video(HailObject, table=True):
    """Hail video (hosted by a third-party service)."""
    __tablename__ = "hail_video"

    object_endpoint: ClassVar[str] = "videos"
    title_key: ClassVar[str] = "caption"
    payload_fields: ClassVar[Dict[str, str]] = {
        "caption": "caption",
        "service": "service",
        "service_id": "service_id",
    }

    caption: Optional[str] = Field(default=None, sa_type=Text)
    service: Optional[str] = Field(default=None, max_length=64)
    service_id: Optional[str] = Field(default=None, max_length=255)


class PublicTag(HailObject, table=True):
    """Hail public tag."""
    __tablename__ = "hail_public_tag"

    object_endpoint: ClassVar[str] = "tags"
    title_key: ClassVar[str] = "name"
    payload_fields: ClassVar[Dict[str, str]] = {"description": "description"}

    description: Optional[str] = Field(default=None, sa_type=Text)


class PrivateTag(HailObject, table=True):
    """Hail private tag (visible to organisation members only)."""
    __tablename__ = "hail_private_tag"

    object_endpoint: ClassVar[str] = "private-tags"
    title_key: ClassVar[str] = "name"
    payload_fields: ClassVar[Dict[str, str]] = {"description": "description"}

    description: Optional[str] = Field(default=None, sa_type=Text)
