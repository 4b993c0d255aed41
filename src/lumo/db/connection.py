"""
Database connection management for Lumo.

Provides the SQLite engine, session management, transaction support and
schema migrations.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.orm import Session, sessionmaker

from lumo.config import settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"

# Create engine instance (singleton pattern)
engine = create_engine(
    settings.database_url,
    echo=settings.database_echo,
    connect_args={
        "check_same_thread": False,
        "timeout": 30,
    },  # Request handlers run on a threadpool
    pool_pre_ping=True,
)


@event.listens_for(engine, "connect")
def _set_sqlite_pragmas(dbapi_connection, connection_record):  # pragma: no cover
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.close()


SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


def ensure_database_dir() -> Path:
    """
    Create the directory holding the database file if needed.

    Returns:
        Path: The database file path
    """
    db_file = settings.database_file
    db_file.parent.mkdir(parents=True, exist_ok=True)
    return db_file


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI to get database sessions with automatic cleanup.

    Yields:
        Session: A SQLAlchemy session

    Example (FastAPI):
        >>> @router.post("/v1/logs")
        >>> def ingest(db: Session = Depends(get_db)):
        >>>     EventRepository(db).bulk_create(events)
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions with automatic cleanup.

    Commits on success, rolls back on exception.

    Example:
        >>> with db_session() as db:
        >>>     NotificationRepository(db).unread_count()
    """
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def run_migrations(bind: Engine | None = None) -> None:
    """
    Upgrade the database schema to the latest Alembic revision.

    Args:
        bind: Engine to migrate (defaults to the application engine)
    """
    from alembic import command
    from alembic.config import Config

    if bind is None:
        ensure_database_dir()
        bind = engine
    logger.info("Running database migrations on %s", bind.url)

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", str(bind.url))

    with bind.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")

    logger.info("Database migrations completed")


def init_db() -> None:
    """
    Create tables directly from the models.

    Useful for tests and throwaway databases; the daemon itself uses
    ``run_migrations``.
    """
    from lumo.models.db import Base

    ensure_database_dir()
    Base.metadata.create_all(bind=engine)


def check_connection() -> bool:
    """
    Check if database connection is working.

    Returns:
        bool: True if connection successful, False otherwise
    """
    try:
        with db_session() as db:
            db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False
