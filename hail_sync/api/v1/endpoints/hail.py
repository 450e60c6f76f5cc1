"""
Hail admin endpoints.

Endpoints:
- GET /hail/status: Authorisation state, organisations and API status
- GET /hail/authorize: URL to send the administrator to for OAuth consent
- GET /hail/callback: OAuth redirect target, exchanges the code for tokens
- PUT /hail/organisations: Choose the organisations to fetch
- GET /hail/objects/{object_type}: Read-only listing of fetched objects
- POST /hail/fetch: Queue a fetch job
- GET /hail/fetch, GET /hail/fetch/{job_id}: Fetch job progress

Endpoints that talk to Hail are plain functions so FastAPI runs them in
its threadpool.
"""
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from hail_sync.api.dependencies import get_hail_client
from hail_sync.core.database import get_session
from hail_sync.core.exceptions import UnknownFetchableError
from hail_sync.core.logging_config import LogCategory, log_info, log_warning
from hail_sync.hail.client import HailClient
from hail_sync.hail.importers import get_importer
from hail_sync.schemas.hail import (
    AuthorizationCallbackResponse,
    AuthorizationUrlResponse,
    FetchJobResponse,
    FetchRequest,
    HailObjectListResponse,
    HailStatusResponse,
    NoticeResponse,
    OrganisationsUpdateRequest,
)
from hail_sync.services.fetch_job_service import FetchJobService
from hail_sync.services.hail_config_service import HailConfigService
from hail_sync.services.hail_object_service import HailObjectService

router = APIRouter()


def _build_status(session: Session, client: HailClient) -> HailStatusResponse:
    config_service = HailConfigService(session)
    config = config_service.get_or_create()
    state = client.tokens.reload()
    return HailStatusResponse(
        authorised=client.tokens.is_authorised(),
        ready_to_authorise=client.tokens.is_ready_to_authorise(),
        user_id=state.user_id,
        organisation_ids=list(state.organisation_ids),
        access_token_expire=state.access_token_expire,
        api_status=config.api_status_current,
        api_status_checked_at=config.api_status_checked_at,
        api_down=config_service.is_api_down(),
    )


@router.get("/status", response_model=HailStatusResponse)
def get_status(
    session: Annotated[Session, Depends(get_session)],
    client: Annotated[HailClient, Depends(get_hail_client)],
):
    """Current Hail authorisation and API status."""
    return _build_status(session, client)


@router.get(
    "/authorize",
    response_model=AuthorizationUrlResponse,
    responses={
        400: {"description": "Hail client credentials are not configured"},
    }
)
def get_authorization_url(client: Annotated[HailClient, Depends(get_hail_client)]):
    """URL of the Hail consent page."""
    if not client.tokens.is_ready_to_authorise():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Set HAIL_CLIENT_ID and HAIL_CLIENT_SECRET before authorising Hail",
        )
    return AuthorizationUrlResponse(authorization_url=client.tokens.get_authorization_url())


@router.get(
    "/callback",
    response_model=AuthorizationCallbackResponse,
    responses={
        400: {"description": "Hail refused the authorization code"},
    }
)
def authorization_callback(
    client: Annotated[HailClient, Depends(get_hail_client)],
    code: str = Query(..., min_length=1),
):
    """Exchange the authorization code from Hail for an access token."""
    if not client.tokens.fetch_access_token(code):
        notice = client.notices.last
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=notice.message if notice else "Hail authorisation failed",
        )

    user_id = client.set_user_id()
    log_info("Hail authorised", category=LogCategory.HAIL_API, user_id=user_id)
    return AuthorizationCallbackResponse(
        authorised=client.tokens.is_authorised(),
        user_id=user_id,
        notices=[NoticeResponse.model_validate(notice) for notice in client.notices.drain()],
    )


@router.put("/organisations", response_model=HailStatusResponse)
def update_organisations(
    request: OrganisationsUpdateRequest,
    session: Annotated[Session, Depends(get_session)],
    client: Annotated[HailClient, Depends(get_hail_client)],
):
    """Set the Hail organisations to fetch content from."""
    HailConfigService(session).set_organisation_ids(request.organisation_ids)
    return _build_status(session, client)


@router.get(
    "/objects/{object_type}",
    response_model=HailObjectListResponse,
    responses={
        404: {"description": "Unknown Hail object type"},
    }
)
def list_objects(
    object_type: str,
    session: Annotated[Session, Depends(get_session)],
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """Fetched objects of one type, ordered by title."""
    try:
        model = get_importer(object_type).model
    except UnknownFetchableError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    object_service = HailObjectService(session)
    return HailObjectListResponse(
        object_type=object_type,
        total=object_service.count(model),
        limit=limit,
        offset=offset,
        items=object_service.list_objects(model, limit=limit, offset=offset),
    )


@router.post(
    "/fetch",
    response_model=FetchJobResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"description": "Unknown Hail object type"},
        503: {"description": "Hail API is currently unavailable"},
    }
)
def queue_fetch(
    request: FetchRequest,
    session: Annotated[Session, Depends(get_session)],
):
    """Queue a fetch job; it runs on the next fetch queue pass."""
    config_service = HailConfigService(session)
    if config_service.is_api_down():
        log_warning("Refused to queue fetch while Hail API is down", category=LogCategory.JOBS,
                    api_status=config_service.get_api_status())
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Hail API is unavailable ({config_service.get_api_status()}), try again later",
        )

    try:
        return FetchJobService(session).enqueue(request.to_fetch)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/fetch", response_model=List[FetchJobResponse])
def list_fetch_jobs(
    session: Annotated[Session, Depends(get_session)],
    limit: int = Query(20, ge=1, le=100),
):
    """Recent fetch jobs, newest first."""
    return FetchJobService(session).list_jobs(limit)


@router.get(
    "/fetch/{job_id}",
    response_model=FetchJobResponse,
    responses={
        404: {"description": "Fetch job not found"},
    }
)
def get_fetch_job(job_id: int, session: Annotated[Session, Depends(get_session)]):
    """Progress of one fetch job."""
    job = FetchJobService(session).get_job(job_id)
    if not job:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Fetch job not found")
    return job
