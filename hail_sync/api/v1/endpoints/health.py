"""
Liveness endpoint.
"""
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, text

from hail_sync.core.config import settings
from hail_sync.core.database import get_session
from hail_sync.core.logging_config import LogCategory, log_warning
from hail_sync.core.time_utils import serialize_datetime, utc_now

router = APIRouter(tags=["health"])


def _database_status(session: Session) -> str:
    try:
        session.exec(text("SELECT 1")).first()
    except SQLAlchemyError as e:
        log_warning("Health check could not reach the database", category=LogCategory.DB, error=str(e))
        return "disconnected"
    return "connected"


@router.get("/health", response_model=Dict[str, Any])
def health_check(session: Annotated[Session, Depends(get_session)]):
    """Service liveness; "degraded" when the database cannot be reached."""
    database = _database_status(session)
    return {
        "status": "healthy" if database == "connected" else "degraded",
        "timestamp": serialize_datetime(utc_now()),
        "service": settings.app_name,
        "version": settings.app_version,
        "database": database,
    }
