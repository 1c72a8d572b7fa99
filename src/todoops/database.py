"""Core database connection, session and unit-of-work management using SQLAlchemy.

This module provides database connectivity for both PostgreSQL and SQLite,
with connection pooling, per-request sessions, and the transactional scopes
the service layer runs its operations in.
"""

import logging
import os
from contextlib import contextmanager
from typing import Generator, Iterator, Tuple

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import QueuePool

# Import config to ensure dotenv is loaded
from . import config

logger = logging.getLogger(__name__)

# Module-level engine and session factory - initialized lazily
ENGINE: Engine | None = None
SESSION_FACTORY: sessionmaker | None = None


def get_db_url() -> str:
    """Get database URL from environment variables.

    Returns:
        Database URL string. Defaults to SQLite in-memory if DATABASE_URL is not set.
    """
    return os.getenv("DATABASE_URL", "sqlite:///:memory:")


def create_engine_and_session_factory(db_url: str | None = None) -> Tuple[Engine, sessionmaker]:
    """Create SQLAlchemy engine and session factory.

    Args:
        db_url: Database URL. If None, uses get_db_url().

    Returns:
        Tuple of (engine, sessionmaker)

    Raises:
        Exception: If engine creation fails.
    """
    if db_url is None:
        db_url = get_db_url()

    try:
        if db_url.startswith("postgresql"):
            # PostgreSQL configuration with connection pooling
            engine = create_engine(
                db_url,
                pool_size=10,
                max_overflow=20,
                pool_timeout=30,
                pool_pre_ping=True
            )
        else:
            # SQLite configuration
            connect_args = {"check_same_thread": False}
            if db_url == "sqlite:///:memory:":
                # The database lives in one connection; a single pool slot makes
                # each session wait until the previous one commits or rolls back
                engine = create_engine(
                    db_url,
                    connect_args=connect_args,
                    poolclass=QueuePool,
                    pool_size=1,
                    max_overflow=0,
                    pool_timeout=30
                )
            else:
                engine = create_engine(db_url, connect_args=connect_args)

            if engine.dialect.name == "sqlite":
                _serialize_sqlite_transactions(engine)

        SessionLocal = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False
        )

        return engine, SessionLocal

    except Exception as e:
        logger.error(f"Failed to create database engine: {e}", exc_info=True)
        raise


def _serialize_sqlite_transactions(engine: Engine) -> None:
    """Start every SQLite transaction with BEGIN IMMEDIATE.

    SQLite has no SELECT ... FOR UPDATE. Taking the write lock when the
    transaction begins makes read-modify-write units on the same database run
    one after another; a waiting unit blocks up to the driver's busy timeout.
    """
    @event.listens_for(engine, "connect")
    def disable_driver_transactions(dbapi_connection, connection_record):
        # pysqlite would otherwise issue its own deferred BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _ensure_initialized() -> None:
    """Ensure the module-level ENGINE and SESSION_FACTORY are initialized.

    This function is called lazily to initialize database connections
    using the current environment configuration.
    """
    global ENGINE, SESSION_FACTORY

    if SESSION_FACTORY is None:
        ENGINE, SESSION_FACTORY = create_engine_and_session_factory()


def _reset_db_state() -> None:
    """Reset the module-level database state.

    This function safely disposes the current engine and resets
    ENGINE and SESSION_FACTORY to None, forcing re-initialization
    on the next database access. Primarily used for testing.
    """
    global ENGINE, SESSION_FACTORY

    if ENGINE is not None:
        try:
            ENGINE.dispose()
        except Exception as e:
            logger.error(f"Error disposing database engine: {e}", exc_info=True)

    ENGINE = None
    SESSION_FACTORY = None


def get_engine() -> Engine:
    """Return the module-level engine, creating it on first use."""
    _ensure_initialized()
    return ENGINE


def init_db() -> None:
    """Create the task schema on the configured database if it does not exist.

    Skipped when AUTO_CREATE_SCHEMA is disabled, in which case the schema
    is expected to be managed with Alembic migrations.
    """
    if not config.AUTO_CREATE_SCHEMA:
        logger.info("AUTO_CREATE_SCHEMA disabled, skipping schema creation")
        return

    # Imported here so the models are registered on Base.metadata
    from .models import Base

    engine = get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info(f"Database schema ready on {engine.url.render_as_string(hide_password=True)}")


def get_db() -> Generator[Session, None, None]:
    """Get database session generator.

    Yields:
        SQLAlchemy Session instance.

    Ensures proper cleanup of the session even if errors occur.
    """
    _ensure_initialized()

    db = SESSION_FACTORY()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}", exc_info=True)
        raise
    finally:
        db.close()


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """Run a block of reads and writes as one atomic transaction.

    The transaction is committed when the block completes and rolled back
    when it raises; the exception is always re-raised to the caller.

    Args:
        db: Session the block operates on.

    Yields:
        The same session.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


@contextmanager
def read_only_unit_of_work(db: Session) -> Iterator[Session]:
    """Run a block of reads in a transaction that never commits.

    The transaction is always rolled back on exit, which also releases any
    snapshot the database holds for it. Results must be serialized inside
    the block, since rollback expires loaded instances.

    Args:
        db: Session the block operates on.

    Yields:
        The same session.
    """
    try:
        yield db
    finally:
        db.rollback()


def check_db_connection() -> bool:
    """Check database connectivity.

    Returns:
        True if connection successful, False otherwise.
    """
    db_gen = None
    try:
        db_gen = get_db()
        db = next(db_gen)
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}", exc_info=True)
        return False
    finally:
        # Ensure generator cleanup even if exceptions occur
        if db_gen is not None:
            try:
                next(db_gen)
            except StopIteration:
                pass  # Generator properly closed
            except Exception as cleanup_error:
                logger.error(f"Error during database cleanup: {cleanup_error}", exc_info=True)
