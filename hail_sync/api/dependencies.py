"""
Shared API dependencies.
"""
from typing import Annotated, Iterator

from fastapi import Depends
from sqlmodel import Session

from hail_sync.core.database import get_session
from hail_sync.hail.client import HailClient
from hail_sync.hail.service import build_hail_client


def get_hail_client(session: Annotated[Session, Depends(get_session)]) -> Iterator[HailClient]:
    """Hail client for the duration of one request."""
    with build_hail_client(session) as client:
        yield client
