"""
Unit tests for the notice sink.
"""
import httpx

from hail_sync.core.exceptions import HailApiError
from hail_sync.hail.notices import NoticeSink, extract_error_message
from hail_sync.models.enums import NoticeType


def _status_error(status_code, json_body):
    request = httpx.Request("POST", "https://hail.test/api/v1/oauth/access_token")
    response = httpx.Response(status_code, json=json_body, request=request)
    return httpx.HTTPStatusError("failed", request=request, response=response)


def test_hail_error_body_message_is_preferred():
    error = _status_error(400, {"error": {"message": "Code expired"}})

    assert extract_error_message(error) == "Code expired"


def test_falls_back_to_exception_text():
    assert extract_error_message(_status_error(500, ["unexpected"])) == "failed"
    assert extract_error_message(HailApiError("Hail said no", status_code=500)) == "Hail said no"
    assert extract_error_message("plain message") == "plain message"


def test_sink_collects_and_drains():
    sink = NoticeSink()

    sink.report("Fetched 3 articles", NoticeType.GOOD)
    assert sink.has_errors is False

    sink.handle_exception(HailApiError("Timeout"), uri="me")
    assert sink.has_errors is True
    assert sink.last.message == "Timeout"

    drained = sink.drain()
    assert [notice.notice_type for notice in drained] == [NoticeType.GOOD, NoticeType.BAD]
    assert sink.notices == []
