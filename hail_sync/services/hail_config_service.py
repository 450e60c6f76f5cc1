"""
Service for the singleton Hail configuration row.

Holds the OAuth token state (encrypted at rest), the organisations to fetch
and the last-known API status.
"""
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from hail_sync.core.encryption import decrypt_optional, encrypt_optional
from hail_sync.core.exceptions import TokenStateConflictError
from hail_sync.core.logging_config import LogCategory, log_info, log_warning
from hail_sync.core.time_utils import ensure_utc, utc_now
from hail_sync.hail.tokens import TokenState
from hail_sync.models.enums import API_STATUS_OK
from hail_sync.models.hail_config import HailConfig


class HailConfigService:
    """Read and write the shared Hail configuration."""

    def __init__(self, session: Session):
        self.session = session

    def get_or_create(self) -> HailConfig:
        config = self.session.exec(select(HailConfig)).first()
        if config:
            return config

        config = HailConfig()
        self.session.add(config)
        try:
            self.session.commit()
        except IntegrityError:
            # Another process created the row first
            self.session.rollback()
            return self.session.exec(select(HailConfig)).one()
        self.session.refresh(config)
        log_info("Created Hail configuration row", category=LogCategory.DB)
        return config

    def get_organisation_ids(self) -> List[str]:
        return list(self.get_or_create().organisation_ids or [])

    def set_organisation_ids(self, organisation_ids: List[str]) -> HailConfig:
        """
        Replace the configured organisations.

        Bumps token_version as well so a TokenManager holding an older
        snapshot cannot write the previous list back.
        """
        config = self.get_or_create()
        # Keep order, drop duplicates and blanks
        cleaned = list(dict.fromkeys(str(org_id).strip() for org_id in organisation_ids if str(org_id).strip()))
        config.organisation_ids = cleaned
        config.token_version = config.token_version + 1
        config.updated_at = utc_now()
        self.session.add(config)
        self.session.commit()
        self.session.refresh(config)
        log_info("Updated Hail organisations", category=LogCategory.DB, organisation_ids=cleaned)
        return config

    def get_api_status(self) -> Optional[str]:
        return self.get_or_create().api_status_current

    def set_api_status(self, status: str) -> None:
        config = self.get_or_create()
        previous = config.api_status_current
        config.api_status_current = status[:255]
        config.api_status_checked_at = utc_now()
        self.session.add(config)
        self.session.commit()
        if previous != config.api_status_current:
            if status == API_STATUS_OK:
                log_info("Hail API status is OK", category=LogCategory.HAIL_API, previous=previous)
            else:
                log_warning(f"Hail API status changed to {status}", category=LogCategory.HAIL_API,
                            previous=previous)

    def is_api_down(self) -> bool:
        """A status other than OK marks the API as down; no status yet counts as up."""
        status = self.get_api_status()
        return status is not None and status != API_STATUS_OK


class DatabaseTokenStore:
    """TokenStore backed by the HailConfig row."""

    def __init__(self, session: Session):
        self.session = session
        self.config_service = HailConfigService(session)

    def load(self) -> TokenState:
        config = self.config_service.get_or_create()
        self.session.refresh(config)
        return TokenState(
            access_token=decrypt_optional(config.access_token_encrypted),
            access_token_expire=ensure_utc(config.access_token_expire) if config.access_token_expire else None,
            refresh_token=decrypt_optional(config.refresh_token_encrypted),
            user_id=config.user_id,
            organisation_ids=tuple(config.organisation_ids or ()),
            version=config.token_version,
        )

    def save(self, state: TokenState, expected_version: int) -> TokenState:
        """
        Write state only if the stored version is still expected_version.

        Raises:
            TokenStateConflictError: another writer got there first
        """
        config = self.config_service.get_or_create()
        result = self.session.exec(
            update(HailConfig)
            .where(HailConfig.id == config.id)
            .where(HailConfig.token_version == expected_version)
            .values(
                access_token_encrypted=encrypt_optional(state.access_token),
                access_token_expire=state.access_token_expire,
                refresh_token_encrypted=encrypt_optional(state.refresh_token),
                user_id=state.user_id,
                organisation_ids=list(state.organisation_ids),
                token_version=state.version,
                updated_at=utc_now(),
            )
        )
        self.session.commit()

        if result.rowcount != 1:
            self.session.refresh(config)
            raise TokenStateConflictError(expected_version, config.token_version)
        return state
