"""
Error/notice sink for Hail API failures.

Failures that are recovered at the client boundary are logged and kept here
as human-readable notices, so the admin surface and CLI can show why a
request returned nothing.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

import httpx

from hail_sync.core.exceptions import HailApiError
from hail_sync.core.logging_config import LogCategory, log_error, log_info
from hail_sync.core.time_utils import utc_now
from hail_sync.models.enums import NoticeType


@dataclass(frozen=True)
class Notice:
    message: str
    notice_type: NoticeType = NoticeType.BAD
    created_at: datetime = field(default_factory=utc_now)


def extract_error_message(exception: Exception | str) -> str:
    """
    Best human-readable message for a failure.

    Hail error bodies look like {"error": {"message": "..."}}; when the
    exception carries such a response, that message wins.
    """
    if isinstance(exception, str):
        return exception

    response: Optional[httpx.Response] = getattr(exception, "response", None)
    if response is not None:
        message = error_message_from_response(response)
        if message:
            return message

    if isinstance(exception, HailApiError):
        return exception.message
    return str(exception)


def error_message_from_response(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return None


class NoticeSink:
    """Collects notices for one unit of work (a request, a CLI command, a task run)."""

    def __init__(self):
        self._notices: List[Notice] = []

    @property
    def notices(self) -> List[Notice]:
        return list(self._notices)

    @property
    def has_errors(self) -> bool:
        return any(notice.notice_type == NoticeType.BAD for notice in self._notices)

    @property
    def last(self) -> Optional[Notice]:
        return self._notices[-1] if self._notices else None

    def report(self, message: str, notice_type: NoticeType = NoticeType.BAD, **context) -> Notice:
        notice = Notice(message=message, notice_type=notice_type)
        self._notices.append(notice)
        if notice_type == NoticeType.BAD:
            log_error(message, **context)
        else:
            log_info(message, category=LogCategory.HAIL_API, **context)
        return notice

    def handle_exception(self, exception: Exception | str, **context) -> Notice:
        """Log a failure with its traceback and keep its message as a notice."""
        log_error(exception, **context)
        notice = Notice(message=extract_error_message(exception), notice_type=NoticeType.BAD)
        self._notices.append(notice)
        return notice

    def drain(self) -> List[Notice]:
        """Return all notices and clear the sink."""
        notices, self._notices = self._notices, []
        return notices
