"""
API v1 router.
"""
from fastapi import APIRouter

from hail_sync.api.v1.endpoints import hail, health

api_router = APIRouter()

api_router.include_router(hail.router, prefix="/hail", tags=["hail"])
api_router.include_router(health.router, tags=["health"])
