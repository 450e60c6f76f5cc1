"""
Logging setup and helpers.

Every module logs through the log_* helpers with a LogCategory, so each
area (Hail API calls, fetch jobs, database) gets its own named logger that
can be tuned independently. Extra keyword arguments are appended to the
message as key=value pairs after masking anything that looks like a
credential.
"""
import logging
import logging.handlers
from enum import Enum
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit


class LogCategory(str, Enum):
    """Named loggers, one per area of the service."""
    APP = "hail_sync"
    ERRORS = "hail_sync.errors"
    HAIL_API = "hail_sync.hail_api"
    JOBS = "hail_sync.jobs"
    DB = "hail_sync.db"


DEFAULT_LOG_LEVEL = logging.INFO
LOG_FILE_NAME = "hail_sync.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
MASK = "***MASKED***"

# Substrings of context keys whose values are never written out
SENSITIVE_KEY_PARTS = (
    "token",
    "secret",
    "password",
    "authorization",
    "code",
    "database_url",
    "postgres_url",
    "redis_url",
    "broker_url",
)

# Context keys that match a sensitive part but are safe to log
SAFE_KEYS = {"status_code", "error_code"}

# Third-party loggers that are too chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "celery.app.trace")


def _is_sensitive_key(key) -> bool:
    key = str(key).lower()
    if key in SAFE_KEYS:
        return False
    return any(part in key for part in SENSITIVE_KEY_PARTS)


def _mask_url_password(value: str) -> str:
    parts = urlsplit(value)
    if parts.password is None:
        return value
    netloc = f"{parts.username}:***@{parts.hostname}"
    if parts.port:
        netloc = f"{netloc}:{parts.port}"
    return urlunsplit(parts._replace(netloc=netloc))


def _sanitize_data(data):
    """Mask credentials in log context: sensitive keys, URL passwords and token-like strings."""
    if isinstance(data, dict):
        return {
            key: MASK if _is_sensitive_key(key) else _sanitize_data(value)
            for key, value in data.items()
        }

    if isinstance(data, (list, tuple)):
        return [_sanitize_data(item) for item in data]

    if isinstance(data, str):
        if "://" in data and "@" in data:
            try:
                return _mask_url_password(data)
            except ValueError:
                return data
        # Long unbroken strings are almost always tokens
        if len(data) > 64 and all(c.isalnum() or c in "-_." for c in data):
            return MASK

    return data


def _resolve_log_level(level_value):
    """Turn a configured level ("debug", "10", 20) into a logging level; None if invalid."""
    if isinstance(level_value, str):
        level_value = level_value.strip()
        level_value = int(level_value) if level_value.isdigit() else level_value.upper()

    if isinstance(level_value, int):
        return level_value
    level = logging.getLevelName(level_value)
    return level if isinstance(level, int) else None


def _build_handlers(log_dir: Path, level: int):
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    file_handler = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5,
        encoding="utf-8",
    )
    for handler in (console_handler, file_handler):
        handler.setFormatter(formatter)
        handler.setLevel(level)
    return [console_handler, file_handler]


def setup_logging():
    """Configure the root logger with console and rotating file output."""
    from hail_sync.core.config import settings  # local import: config logs through this module

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    level = _resolve_log_level(settings.log_level)
    invalid_level = level is None
    if invalid_level:
        level = DEFAULT_LOG_LEVEL

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(level)
    for handler in _build_handlers(log_dir, level):
        root_logger.addHandler(handler)

    for category in LogCategory:
        logging.getLogger(category.value).setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger(LogCategory.APP.value)
    if invalid_level:
        logger.warning("Unknown log level %r, using INFO", settings.log_level)
    logger.info("Logging to %s at %s", log_dir / LOG_FILE_NAME, logging.getLevelName(level))


def _log(category: LogCategory, level: int, message: str, exc_info: bool = False, **context):
    if context:
        details = ", ".join(f"{key}={value}" for key, value in _sanitize_data(context).items())
        message = f"{message} ({details})"
    logging.getLogger(category.value).log(level, message, exc_info=exc_info)


def log_info(message: str, category: LogCategory = LogCategory.APP, **kwargs):
    _log(category, logging.INFO, message, **kwargs)


def log_debug(message: str, category: LogCategory = LogCategory.APP, **kwargs):
    _log(category, logging.DEBUG, message, **kwargs)


def log_warning(message: str, category: LogCategory = LogCategory.APP, **kwargs):
    _log(category, logging.WARNING, message, **kwargs)


def log_error(error: Exception | str, **kwargs):
    """Log an error to the errors logger.

    Args:
        error: Exception object or error message string; exceptions
            include their traceback
        **kwargs: Additional context (e.g., job_id, org_id)
    """
    _log(LogCategory.ERRORS, logging.ERROR, f"Error: {error}",
         exc_info=isinstance(error, Exception), **kwargs)
