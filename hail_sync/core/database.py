"""
Database configuration and session management.
Supports SQLite (default) and PostgreSQL (optional override).
"""
import logging

from sqlalchemy import event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from hail_sync.core.config import settings, PROJECT_ROOT
from hail_sync.core.logging_config import LogCategory, _sanitize_data

logger = logging.getLogger(LogCategory.DB)


def build_engine(database_url: str) -> Engine:
    """Create an engine with dialect-specific tuning."""
    url = make_url(database_url)

    if url.drivername.startswith("sqlite"):
        is_sqlite_memory = url.database in (None, "", ":memory:")
        engine_kwargs = {
            "echo": False,
            "connect_args": {"check_same_thread": False},
        }
        if is_sqlite_memory:
            engine_kwargs["poolclass"] = StaticPool

        new_engine = create_engine(database_url, **engine_kwargs)
        logger.info(f"Configured SQLite engine ({'in-memory' if is_sqlite_memory else 'file-based'})")

        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Set SQLite-specific pragma settings."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            if not is_sqlite_memory:
                cursor.execute("PRAGMA journal_mode=WAL")
                cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

        return new_engine

    if url.drivername.startswith("postgres"):
        new_engine = create_engine(
            database_url,
            echo=False,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=5,
            pool_recycle=3600,
        )
        logger.info("Configured PostgreSQL engine with connection pooling")
        return new_engine

    logger.warning(
        f"Using unsupported database type '{url.drivername}'. "
        "Install the appropriate DB driver for production use."
    )
    return create_engine(database_url, echo=False, pool_pre_ping=True)


database_url = settings.effective_database_url
logger.info(f"Using {settings.database_type} database: {_sanitize_data(database_url)}")
engine = build_engine(database_url)


@event.listens_for(Engine, "before_cursor_execute")
def _log_sql_statement(conn, cursor, statement, parameters, context, executemany):
    if not settings.log_sql_requests:
        return
    compact = " ".join(statement.split())
    if len(compact) > 800:
        compact = f"{compact[:800]}..."
    logger.info("SQL statement: %s", compact)


def create_db_and_tables():
    """Create database tables using Alembic migrations, falling back to create_all."""
    # Register every table on SQLModel.metadata
    import hail_sync.models  # noqa: F401

    try:
        logger.info("Running database migrations...")
        from alembic import command
        from alembic.config import Config

        alembic_cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
        alembic_cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
        alembic_cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
        alembic_cfg.attributes["configure_logger"] = False
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations completed successfully")
    except Exception as exc:
        logger.error(exc)
        logger.info("Falling back to SQLModel create_all...")
        SQLModel.metadata.create_all(engine)
        logger.info("Database tables created successfully (fallback)")


def get_session():
    """Get database session."""
    with Session(engine) as session:
        yield session


def get_session_context() -> Session:
    """
    Get database session as context manager.

    Use this for background tasks and the CLI.

    Example:
        with get_session_context() as session:
            ...
    """
    return Session(engine)
