"""
Enums and constants for the application.
"""
from enum import Enum


class JobStatus(str, Enum):
    """Lifecycle of a fetch job: starting -> running -> done | error."""
    STARTING = "starting"
    RUNNING = "running"
    DONE = "done"
    ERROR = "error"


class NoticeType(str, Enum):
    """Notice severity shown to administrators."""
    GOOD = "good"
    BAD = "bad"


# Fetch target meaning "every registered type"
FETCH_ALL = "*"

# Last-known API status value meaning the Hail API answered normally
API_STATUS_OK = "OK"
