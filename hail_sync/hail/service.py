"""
Wiring for the Hail client.

Builds a HailClient from settings and the database: credentials from the
environment, token state from the configuration row, and API status
changes written back to it.
"""
from datetime import timedelta
from typing import Optional

import httpx
from sqlmodel import Session

from hail_sync.core.config import Settings, settings as default_settings
from hail_sync.hail.client import HailClient
from hail_sync.hail.notices import NoticeSink
from hail_sync.hail.tokens import HailCredentials, TokenManager
from hail_sync.services.hail_config_service import DatabaseTokenStore, HailConfigService


def build_http_client(
    settings: Settings = default_settings,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """HTTP client rooted at the Hail API base URL."""
    return httpx.Client(
        base_url=settings.hail_api_base_url,
        timeout=settings.hail_request_timeout,
        headers={
            "Accept": "application/json",
            "User-Agent": f"{settings.app_name}/{settings.app_version}",
        },
        follow_redirects=True,
        transport=transport,
    )


def build_token_manager(
    session: Session,
    http: httpx.Client,
    notices: NoticeSink,
    settings: Settings = default_settings,
) -> TokenManager:
    return TokenManager(
        credentials=HailCredentials.from_settings(settings),
        store=DatabaseTokenStore(session),
        http=http,
        notices=notices,
        redirect_url=settings.hail_redirect_url,
        authorization_url=settings.hail_authorization_url,
        refresh_threshold=timedelta(minutes=settings.hail_token_refresh_threshold_minutes),
    )


def build_hail_client(
    session: Session,
    transport: Optional[httpx.BaseTransport] = None,
    notices: Optional[NoticeSink] = None,
    settings: Settings = default_settings,
) -> HailClient:
    """
    Assemble a HailClient for one unit of work.

    The caller owns the returned client and should close it (it is also a
    context manager).
    """
    notices = notices or NoticeSink()
    http = build_http_client(settings, transport)
    tokens = build_token_manager(session, http, notices, settings)
    return HailClient(
        tokens=tokens,
        http=http,
        notices=notices,
        refresh_rate=settings.hail_refresh_rate,
        status_recorder=HailConfigService(session).set_api_status,
    )
