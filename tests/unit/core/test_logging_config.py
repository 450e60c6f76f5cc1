"""
Unit tests for log sanitisation and the log helpers.
"""
import logging

from hail_sync.core.logging_config import LogCategory, _sanitize_data, log_error, log_info


class TestSanitizeData:
    def test_masks_token_and_secret_keys(self):
        data = {
            "access_token": "abc",
            "refresh_token": "def",
            "client_secret": "shh",
            "authorization_code": "code",
            "status_code": 500,
        }

        sanitized = _sanitize_data(data)

        assert sanitized["access_token"] == "***MASKED***"
        assert sanitized["refresh_token"] == "***MASKED***"
        assert sanitized["client_secret"] == "***MASKED***"
        assert sanitized["authorization_code"] == "***MASKED***"
        assert sanitized["status_code"] == 500

    def test_masks_credentials_in_urls(self):
        assert _sanitize_data("postgresql://hail:pw@db/hail") == "postgresql://hail:***@db/hail"

    def test_masks_long_token_like_strings(self):
        assert _sanitize_data("a" * 80) == "***MASKED***"
        assert _sanitize_data("short value") == "short value"

    def test_sanitizes_nested_structures(self):
        assert _sanitize_data({"grant": [{"token": "x"}]}) == {"grant": [{"token": "***MASKED***"}]}


class TestLogHelpers:
    def test_context_is_appended_and_masked(self, caplog):
        with caplog.at_level(logging.INFO, logger=LogCategory.HAIL_API.value):
            log_info("Stored token", category=LogCategory.HAIL_API, access_token="abc", expires_in=3600)

        assert "Stored token (access_token=***MASKED***, expires_in=3600)" in caplog.text

    def test_log_error_includes_traceback_for_exceptions(self, caplog):
        try:
            raise RuntimeError("broken")
        except RuntimeError as e:
            with caplog.at_level(logging.ERROR, logger=LogCategory.ERRORS.value):
                log_error(e, job_id=3)

        record = caplog.records[-1]
        assert record.exc_info is not None
        assert "Error: broken (job_id=3)" in record.getMessage()
