"""
Custom application exceptions.

Exceptions that carry extra fields pass every constructor argument to
Exception.__init__ so they survive pickling, which Celery relies on to
report task failures.
"""
from typing import Optional


class HailSyncException(Exception):
    """Base exception for the Hail sync service."""
    pass


class HailApiError(HailSyncException):
    """Raised when a request to the Hail API fails (transport, HTTP status or payload)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, status_code)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class HailAuthorizationError(HailApiError):
    """Raised when the Hail API rejects the access token (HTTP 401)."""
    pass


class TokenStateConflictError(HailSyncException):
    """Raised when stored token state changed since it was loaded."""

    def __init__(self, expected_version: int, actual_version: int):
        super().__init__(expected_version, actual_version)
        self.expected_version = expected_version
        self.actual_version = actual_version

    def __str__(self) -> str:
        return f"Token state version conflict (expected {self.expected_version}, found {self.actual_version})"


class UnknownFetchableError(HailSyncException):
    """Raised when a fetch is requested for a type that is not registered."""
    pass


class FetchJobError(HailSyncException):
    """Base exception for fetch job processing."""
    pass


class FetchJobFailedError(FetchJobError):
    """Raised when a fetch job aborts; the job row has already been marked as error."""

    def __init__(self, job_id: int, units_done: int, message: str):
        super().__init__(job_id, units_done, message)
        self.job_id = job_id
        self.units_done = units_done
        self.message = message

    def __str__(self) -> str:
        return f"Fetch job {self.job_id} failed after {self.units_done} unit(s): {self.message}"
