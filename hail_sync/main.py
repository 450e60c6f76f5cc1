"""
FastAPI application exposing the Hail admin surface.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from hail_sync.api.v1.api import api_router
from hail_sync.core.config import settings
from hail_sync.core.database import create_db_and_tables
from hail_sync.core.exceptions import (
    HailApiError,
    HailAuthorizationError,
    HailSyncException,
    TokenStateConflictError,
    UnknownFetchableError,
)
from hail_sync.core.logging_config import log_error, log_info, setup_logging
from hail_sync.middleware.request_logging import RequestLoggingMiddleware, request_id_ctx

# -----------------------------------------------------------------------------
# Startup / Shutdown
# -----------------------------------------------------------------------------
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    log_info(f"Starting up {settings.app_name}...")
    try:
        create_db_and_tables()
        log_info("Database initialization completed!")
    except Exception as exc:
        log_error(exc)
        raise
    yield
    log_info(f"Shutting down {settings.app_name}...")


# -----------------------------------------------------------------------------
# App Initialization
# -----------------------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Synchronises Hail articles, publications, media and tags into a local database",
    openapi_url=f"{settings.api_v1_prefix}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)


# -----------------------------------------------------------------------------
# Exception Handlers
# -----------------------------------------------------------------------------
@app.exception_handler(HailSyncException)
async def hail_sync_exception_handler(request: Request, exc: HailSyncException):
    request_id = request_id_ctx.get()
    log_error(exc, request_id=request_id)

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    if isinstance(exc, UnknownFetchableError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, TokenStateConflictError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, HailAuthorizationError):
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, HailApiError):
        status_code = status.HTTP_502_BAD_GATEWAY

    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "message": str(exc), "request_id": request_id},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    request_id = request_id_ctx.get()
    log_error(exc, request_id=request_id)
    msg = (
        "An unexpected error occurred. Please try again later."
        if settings.environment == "production"
        else str(exc)
    )
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "message": msg, "request_id": request_id},
    )


# -----------------------------------------------------------------------------
# API Routers
# -----------------------------------------------------------------------------
app.include_router(api_router, prefix=settings.api_v1_prefix)
