"""
Application configuration using pydantic-settings.
"""
import logging
import secrets
from pathlib import Path
from typing import List, Optional

from pydantic import field_validator, model_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict

from hail_sync import __version__

logger = logging.getLogger(__name__)

DEFAULT_SQLITE_URL = "sqlite:///./hail_sync.db"
DEFAULT_HAIL_API_BASE_URL = "https://hail.to/api/v1/"
DEFAULT_HAIL_AUTHORIZATION_URL = "https://hail.to/oauth/authorise"
HAIL_SCOPES = "user.basic content.read"

# Define the project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent.resolve()


class Settings(BaseSettings):
    """Application settings."""

    # Application
    app_name: str = "Hail Sync Service"
    app_version: str = __version__
    debug: bool = False
    environment: str = "development"
    domain_name: str = ""
    domain_scheme: str = "http"
    app_port: int = 8000
    api_v1_prefix: str = "/api/v1"

    # Database Configuration
    database_url: str = DEFAULT_SQLITE_URL
    postgres_url: Optional[str] = None

    # Security (used to encrypt stored OAuth tokens)
    secret_key: str = ""

    # Hail API credentials (read-only at runtime)
    hail_client_id: Optional[str] = None
    hail_client_secret: Optional[str] = None

    # Hail API endpoints
    hail_api_base_url: str = DEFAULT_HAIL_API_BASE_URL
    hail_authorization_url: str = DEFAULT_HAIL_AUTHORIZATION_URL
    hail_redirect_url: Optional[str] = None

    # Hail fetch behaviour
    hail_refresh_rate: int = 86400  # Seconds before a fetched object is stale
    hail_page_size: int = 100
    hail_token_refresh_threshold_minutes: int = 15
    hail_request_timeout: float = 30.0

    # Redis / Celery Configuration
    redis_url: Optional[str] = None
    celery_broker_url: Optional[str] = None
    celery_result_backend: Optional[str] = None
    celery_task_serializer: str = "json"
    celery_result_serializer: str = "json"
    celery_accept_content: List[str] = ["json"]
    celery_timezone: str = "UTC"
    celery_enable_utc: bool = True

    # Scheduling
    fetch_queue_interval_seconds: int = 60
    recurring_fetch_interval_hours: int = 6

    # Logging
    log_level: str = "INFO"
    log_dir: str = "./logs"
    log_sql_requests: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def database_type(self) -> str:
        """Detect database type from configuration."""
        if self.postgres_url:
            return "postgresql"
        if self.database_url.startswith(("postgresql", "postgres")):
            return "postgresql"
        return "sqlite"

    @property
    def effective_database_url(self) -> str:
        """Get the effective database URL, preferring the PostgreSQL override."""
        if self.postgres_url:
            return self.postgres_url
        return self.database_url

    @property
    def has_hail_credentials(self) -> bool:
        return bool(self.hail_client_id and self.hail_client_secret)

    @field_validator('secret_key')
    @classmethod
    def validate_secret_key(cls, v: str, info: ValidationInfo) -> str:
        """Validate SECRET_KEY is set and secure."""
        if not v:
            env = info.data.get('environment', 'development')
            if env == 'production':
                raise ValueError(
                    "SECRET_KEY must be set in production! "
                    "Generate one with: python -c 'import secrets; print(secrets.token_urlsafe(32))'"
                )
            logger.warning(
                "SECRET_KEY not set! Using auto-generated key for development. "
                "Stored Hail tokens will not survive a restart. Set SECRET_KEY in .env for persistence."
            )
            return secrets.token_urlsafe(32)

        if len(v) < 32:
            logger.warning(
                f"SECRET_KEY is only {len(v)} characters long. "
                "Recommend at least 32 characters for security."
            )
        return v

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate primary database URL."""
        if not v or not v.strip():
            logger.info(
                "DATABASE_URL not provided; defaulting to SQLite at %s", DEFAULT_SQLITE_URL
            )
            return DEFAULT_SQLITE_URL

        url = v.strip()
        if not url.startswith(("sqlite", "postgresql", "postgres")):
            logger.warning(
                "DATABASE_URL uses unsupported or untested dialect '%s'. Proceed with caution.",
                url.split("://", 1)[0]
            )
        return url

    @field_validator('postgres_url')
    @classmethod
    def validate_postgres_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate PostgreSQL override URL."""
        if not v or not v.strip():
            return None

        url = v.strip()
        if not url.startswith(("postgresql", "postgres")):
            raise ValueError(
                "POSTGRES_URL must be a PostgreSQL URL (postgresql:// or postgres://)"
            )
        return url

    @field_validator('hail_api_base_url')
    @classmethod
    def validate_hail_api_base_url(cls, v: str) -> str:
        """Relative endpoints are joined onto the base URL, so it must end with a slash."""
        url = v.strip()
        if not url.startswith(("http://", "https://")):
            raise ValueError("HAIL_API_BASE_URL must start with http:// or https://")
        if not url.endswith("/"):
            url = f"{url}/"
        return url

    @field_validator(
        'hail_refresh_rate',
        'hail_page_size',
        'hail_token_refresh_threshold_minutes',
        'fetch_queue_interval_seconds',
        'recurring_fetch_interval_hours',
    )
    @classmethod
    def validate_positive(cls, v: int, info: ValidationInfo) -> int:
        if v <= 0:
            raise ValueError(f"{info.field_name.upper()} must be positive")
        return v

    @field_validator('celery_broker_url', 'celery_result_backend')
    @classmethod
    def validate_celery_urls(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        """Auto-configure Celery from redis_url if not explicitly set."""
        if v:
            return v

        redis_url = info.data.get('redis_url')
        if redis_url:
            logger.info(
                f"{info.field_name.upper()} not set. Defaulting to REDIS_URL"
            )
            return redis_url
        return v

    @model_validator(mode='after')
    def construct_hail_redirect_url(self) -> 'Settings':
        """Construct the OAuth callback URL from domain components if not explicitly set."""
        if not self.hail_redirect_url:
            host = self.domain_name or f"localhost:{self.app_port}"
            self.hail_redirect_url = f"{self.domain_scheme}://{host}{self.api_v1_prefix}/hail/callback"
        return self

    @model_validator(mode='after')
    def validate_production_settings(self) -> 'Settings':
        """Production validation."""
        if self.environment != "production":
            return self

        errors = []
        if self.debug:
            errors.append("DEBUG must be False in production.")
        if not self.has_hail_credentials:
            errors.append("HAIL_CLIENT_ID and HAIL_CLIENT_SECRET must be set in production.")
        if self.hail_redirect_url and "localhost" in self.hail_redirect_url:
            logger.warning(
                "Production configuration warning: HAIL_REDIRECT_URL points to localhost."
            )
        if not self.celery_broker_url:
            logger.warning(
                "Production configuration warning: CELERY_BROKER_URL not configured. "
                "Scheduled fetches require Celery with Redis."
            )

        if errors:
            error_message = "Production configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            raise ValueError(error_message)
        return self


# Create settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get settings instance."""
    return settings
