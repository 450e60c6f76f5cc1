"""
Tests for the hail-sync CLI.
"""
from contextlib import contextmanager
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from hail_sync import __version__
from hail_sync.cli import cli
from hail_sync.cli.commands import auth, fetch
from hail_sync.core.exceptions import FetchJobFailedError
from hail_sync.services.fetch_job_service import FetchJobService
from hail_sync.services.hail_config_service import HailConfigService

runner = CliRunner()


@pytest.fixture
def cli_session(session):
    @contextmanager
    def _context():
        yield session

    with patch.object(fetch, "get_session_context", _context), \
            patch.object(auth, "get_session_context", _context), \
            patch.object(fetch, "setup_logging"):
        yield session


def test_version():
    result = runner.invoke(cli.app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_enqueue_and_list_jobs(cli_session):
    result = runner.invoke(cli.app, ["enqueue", "article"])
    assert result.exit_code == 0
    assert "queued for article" in result.output

    result = runner.invoke(cli.app, ["jobs"])
    assert result.exit_code == 0
    assert "article" in result.output
    assert "starting" in result.output


def test_enqueue_unknown_type_fails(cli_session):
    result = runner.invoke(cli.app, ["enqueue", "comments"])

    assert result.exit_code == 2
    assert FetchJobService(cli_session).pending_jobs() == []


def test_process_queue_exits_non_zero_when_job_fails(cli_session):
    with patch.object(fetch, "FetchQueueProcessor") as processor_cls:
        processor_cls.return_value.run.side_effect = FetchJobFailedError(4, 2, "Hail timed out")

        result = runner.invoke(cli.app, ["process-queue"])

    assert result.exit_code == 1
    assert "Fetch job 4 failed after 2 unit(s)" in result.output


def test_process_queue_with_nothing_waiting(cli_session):
    with patch.object(fetch, "FetchQueueProcessor") as processor_cls:
        processor_cls.return_value.run.return_value = []

        result = runner.invoke(cli.app, ["process-queue"])

    assert result.exit_code == 0
    assert "No fetch jobs waiting" in result.output


def test_set_orgs(cli_session):
    result = runner.invoke(cli.app, ["set-orgs", "11", "12"])

    assert result.exit_code == 0
    assert HailConfigService(cli_session).get_organisation_ids() == ["11", "12"]
