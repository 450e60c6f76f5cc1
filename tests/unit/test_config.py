"""
Unit tests for hail_sync.core.config.
"""
import pytest
from pydantic import ValidationError

from hail_sync.core.config import DEFAULT_SQLITE_URL, Settings


def make_settings(**kwargs):
    """Create Settings without loading values from .env or environment."""
    kwargs.setdefault("secret_key", "test-secret-key-for-testing-only-32-chars")
    return Settings(_env_file=None, **kwargs)


class TestHailSettings:
    def test_defaults(self):
        settings = make_settings()

        assert settings.hail_refresh_rate == 86400
        assert settings.hail_page_size == 100
        assert settings.hail_token_refresh_threshold_minutes == 15
        assert settings.hail_api_base_url.endswith("/")

    def test_base_url_gets_trailing_slash(self):
        settings = make_settings(hail_api_base_url="https://hail.example/api/v1")

        assert settings.hail_api_base_url == "https://hail.example/api/v1/"

    def test_base_url_must_be_http(self):
        with pytest.raises(ValidationError, match="HAIL_API_BASE_URL"):
            make_settings(hail_api_base_url="ftp://hail.example/")

    def test_redirect_url_is_derived_from_domain(self):
        settings = make_settings(domain_name="cms.example.org", domain_scheme="https")

        assert settings.hail_redirect_url == "https://cms.example.org/api/v1/hail/callback"

    def test_redirect_url_falls_back_to_localhost(self):
        settings = make_settings(app_port=9000)

        assert settings.hail_redirect_url == "http://localhost:9000/api/v1/hail/callback"

    def test_explicit_redirect_url_is_kept(self):
        settings = make_settings(hail_redirect_url="https://other.example/callback")

        assert settings.hail_redirect_url == "https://other.example/callback"

    @pytest.mark.parametrize("field", ["hail_refresh_rate", "hail_page_size", "fetch_queue_interval_seconds"])
    def test_intervals_must_be_positive(self, field):
        with pytest.raises(ValidationError, match="must be positive"):
            make_settings(**{field: 0})

    def test_has_hail_credentials(self):
        assert make_settings().has_hail_credentials is False
        assert make_settings(hail_client_id="id", hail_client_secret="secret").has_hail_credentials is True


class TestDatabaseSettings:
    def test_sqlite_is_default(self):
        settings = make_settings(database_url="")

        assert settings.database_url == DEFAULT_SQLITE_URL
        assert settings.database_type == "sqlite"

    def test_postgres_override_wins(self):
        settings = make_settings(postgres_url="postgresql://u:p@db/hail")

        assert settings.database_type == "postgresql"
        assert settings.effective_database_url == "postgresql://u:p@db/hail"

    def test_postgres_override_must_be_postgres(self):
        with pytest.raises(ValidationError):
            make_settings(postgres_url="mysql://db/hail")


class TestSecretsAndCelery:
    def test_secret_key_generated_outside_production(self):
        settings = make_settings(secret_key="")

        assert len(settings.secret_key) >= 32

    def test_production_requires_secret_key(self):
        with pytest.raises(ValidationError, match="SECRET_KEY must be set"):
            make_settings(secret_key="", environment="production")

    def test_production_requires_hail_credentials(self):
        with pytest.raises(ValidationError, match="HAIL_CLIENT_ID"):
            make_settings(environment="production", domain_name="cms.example.org")

    def test_celery_urls_default_to_redis_url(self):
        settings = make_settings(redis_url="redis://cache:6379/0")

        assert settings.celery_broker_url == "redis://cache:6379/0"
        assert settings.celery_result_backend == "redis://cache:6379/0"
