"""
Pydantic schemas for the Hail admin endpoints.

Design Principles:
- Never expose tokens (encrypted or not) in responses
- Hail object listings are read-only
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hail_sync.models.enums import FETCH_ALL, JobStatus, NoticeType


# ================================================================================
# REQUEST SCHEMAS
# ================================================================================

class OrganisationsUpdateRequest(BaseModel):
    """Hail organisations whose content should be fetched."""
    organisation_ids: List[str] = Field(
        ...,
        description="Hail organisation ids, e.g. ['ORG123', 'ORG456']"
    )

    @field_validator("organisation_ids")
    @classmethod
    def strip_ids(cls, v: List[str]) -> List[str]:
        return [org_id.strip() for org_id in v if org_id and org_id.strip()]


class FetchRequest(BaseModel):
    """Queue a fetch; "*" fetches every registered type."""
    to_fetch: str = Field(default=FETCH_ALL, max_length=64)


# ================================================================================
# RESPONSE SCHEMAS
# ================================================================================

class NoticeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    message: str
    notice_type: NoticeType


class HailStatusResponse(BaseModel):
    """Authorisation state and last-known API health."""
    authorised: bool
    ready_to_authorise: bool
    user_id: Optional[str] = None
    organisation_ids: List[str] = Field(default_factory=list)
    access_token_expire: Optional[datetime] = None
    api_status: Optional[str] = None
    api_status_checked_at: Optional[datetime] = None
    api_down: bool = False


class AuthorizationUrlResponse(BaseModel):
    authorization_url: str


class AuthorizationCallbackResponse(BaseModel):
    authorised: bool
    user_id: Optional[str] = None
    notices: List[NoticeResponse] = Field(default_factory=list)


class FetchJobResponse(BaseModel):
    """Progress of a fetch job."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    to_fetch: str
    status: JobStatus
    global_total: int
    global_done: int
    current_type: Optional[str] = None
    current_total: int
    current_done: int
    progress_percent: int
    error_message: Optional[str] = None
    created_at: datetime
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


class HailObjectResponse(BaseModel):
    """One local Hail object; type-specific columns stay in data."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    hail_id: str
    hail_org_id: Optional[str] = None
    title: Optional[str] = None
    fetched_at: Optional[datetime] = None
    data: Optional[Dict[str, Any]] = None


class HailObjectListResponse(BaseModel):
    object_type: str
    total: int
    limit: int
    offset: int
    items: List[HailObjectResponse]
