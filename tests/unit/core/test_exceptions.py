"""
Unit tests for application exceptions surviving pickling (Celery result transport).
"""
import pickle

import pytest

from hail_sync.core.exceptions import (
    FetchJobFailedError,
    HailApiError,
    HailAuthorizationError,
    TokenStateConflictError,
)


@pytest.mark.parametrize(
    "error",
    [
        FetchJobFailedError(3, 1, "Hail timed out"),
        TokenStateConflictError(1, 2),
        HailApiError("Hail said no", status_code=503),
        HailAuthorizationError("Token expired", status_code=401),
    ],
)
def test_pickle_keeps_type_fields_and_message(error):
    restored = pickle.loads(pickle.dumps(error))

    assert type(restored) is type(error)
    assert vars(restored) == vars(error)
    assert str(restored) == str(error)


def test_messages():
    assert str(FetchJobFailedError(3, 1, "Hail timed out")) == "Fetch job 3 failed after 1 unit(s): Hail timed out"
    assert str(TokenStateConflictError(1, 2)) == "Token state version conflict (expected 1, found 2)"
    assert str(HailApiError("Hail said no", status_code=503)) == "Hail said no"
