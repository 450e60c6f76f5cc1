"""
Unit tests for HailConfigService and the database-backed token store.
"""
from datetime import datetime, timezone

import pytest

from hail_sync.core.exceptions import TokenStateConflictError
from hail_sync.hail.tokens import TokenState
from hail_sync.services.hail_config_service import DatabaseTokenStore, HailConfigService
from tests.lib.hail_api import FakeHailApi, make_token_manager

EXPIRES = datetime(2026, 3, 1, 13, 0, tzinfo=timezone.utc)


def _state(**overrides):
    values = {
        "access_token": "access-token-value",
        "refresh_token": "refresh-token-value",
        "access_token_expire": EXPIRES,
        "user_id": "user-1",
        "organisation_ids": ("1", "2"),
        "version": 1,
    }
    values.update(overrides)
    return TokenState(**values)


class TestConfigRow:
    def test_get_or_create_returns_single_row(self, session):
        service = HailConfigService(session)

        assert service.get_or_create().id == service.get_or_create().id

    def test_organisation_ids_are_deduplicated_and_bump_version(self, session):
        service = HailConfigService(session)
        before = service.get_or_create().token_version

        config = service.set_organisation_ids(["1", " 2 ", "1", ""])

        assert config.organisation_ids == ["1", "2"]
        assert service.get_organisation_ids() == ["1", "2"]
        assert config.token_version == before + 1

    def test_api_status(self, session):
        service = HailConfigService(session)
        assert service.is_api_down() is False

        service.set_api_status("HTTP 503")
        assert service.is_api_down() is True
        assert service.get_or_create().api_status_checked_at is not None

        service.set_api_status("OK")
        assert service.is_api_down() is False


class TestDatabaseTokenStore:
    def test_fresh_store_loads_empty_state(self, session):
        state = DatabaseTokenStore(session).load()

        assert state.access_token is None
        assert state.organisation_ids == ()
        assert state.version == 0

    def test_saved_state_round_trips_and_is_encrypted_at_rest(self, session):
        store = DatabaseTokenStore(session)

        store.save(_state(), expected_version=0)
        loaded = store.load()

        assert loaded == _state()
        config = HailConfigService(session).get_or_create()
        assert config.access_token_encrypted != "access-token-value"
        assert config.refresh_token_encrypted != "refresh-token-value"

    def test_stale_version_is_rejected(self, session):
        store = DatabaseTokenStore(session)
        store.save(_state(version=1), expected_version=0)

        with pytest.raises(TokenStateConflictError) as exc_info:
            store.save(_state(access_token="late-writer", version=1), expected_version=0)

        assert exc_info.value.actual_version == 1
        assert store.load().access_token == "access-token-value"

    def test_organisation_change_invalidates_older_snapshots(self, session):
        store = DatabaseTokenStore(session)
        store.save(_state(version=1), expected_version=0)

        HailConfigService(session).set_organisation_ids(["9"])

        with pytest.raises(TokenStateConflictError):
            store.save(_state(version=2), expected_version=1)
        assert store.load().organisation_ids == ("9",)

    def test_refresh_after_organisation_change_stores_new_tokens(self, session):
        store = DatabaseTokenStore(session)
        store.save(_state(refresh_token="refresh-1", version=1), expected_version=0)
        api = FakeHailApi()
        api.add(
            "oauth/access_token",
            {"access_token": "access-2", "refresh_token": "refresh-2", "expires_in": 3600},
            method="POST",
        )
        manager = make_token_manager(api, store=store)

        # An administrator changes organisations while the manager holds version 1
        HailConfigService(session).set_organisation_ids(["9"])

        assert manager.refresh_access_token() is True
        stored = store.load()
        assert stored.access_token == "access-2"
        assert stored.refresh_token == "refresh-2"
        assert stored.organisation_ids == ("9",)
        assert stored.version == 3
