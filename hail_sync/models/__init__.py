"""
Database models.
"""
from hail_sync.models.enums import JobStatus, NoticeType, FETCH_ALL, API_STATUS_OK
from hail_sync.models.fetch_job import FetchJob
from hail_sync.models.hail_config import HailConfig
from hail_sync.models.hail_objects import (
    HailObject,
    Article,
    Publication,
    Image,
    Video,
    PublicTag,
    PrivateTag,
)

__all__ = [
    "JobStatus",
    "NoticeType",
    "FETCH_ALL",
    "API_STATUS_OK",
    "FetchJob",
    "HailConfig",
    "HailObject",
    "Article",
    "Publication",
    "Image",
    "Video",
    "PublicTag",
    "PrivateTag",
]
