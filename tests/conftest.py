"""
Pytest fixtures shared across the unit suites.

Environment defaults are set before any hail_sync import so the module-level
settings, engine and logging never touch a developer's .env, database or logs.
"""
import os
import tempfile

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-hail-sync-unit-tests")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="hail-sync-test-logs-"))

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import hail_sync.models  # noqa: F401  (registers every table)
from tests.lib.hail_api import FakeHailApi


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def hail_api() -> FakeHailApi:
    return FakeHailApi()
