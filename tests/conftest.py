"""Pytest configuration and fixtures for testing.

This module provides shared fixtures for database testing using in-memory SQLite
for fast and isolated test execution.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from todoops.models.base import Base
from todoops.api.app import app
from todoops.database import get_db
import todoops.database


@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory SQLite engine for testing.

    Yields:
        SQLAlchemy Engine instance configured for in-memory SQLite.
    """
    # Create in-memory SQLite engine with StaticPool
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )

    # Create all tables
    Base.metadata.create_all(bind=engine)

    yield engine

    # Clean up
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Create a sessionmaker bound to the test engine, configured like the application's."""
    return sessionmaker(
        bind=db_engine,
        autoflush=False,
        expire_on_commit=False
    )


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Create a database session for testing.

    Args:
        session_factory: sessionmaker fixture.

    Yields:
        SQLAlchemy Session instance for database operations.
    """
    session = session_factory()

    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a FastAPI test client with database dependency override.

    Args:
        db_session: Database session fixture for dependency injection.

    Yields:
        TestClient instance configured with test database session.
    """
    # Override the get_db dependency to use our test session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    # Apply dependency override
    app.dependency_overrides[get_db] = override_get_db

    # Create test client
    with TestClient(app) as test_client:
        yield test_client

    # Clean up dependency override
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def clean_db_state():
    """Clean database state before and after each test.

    This fixture ensures that the module-level database state
    is reset for each test to prevent interference.
    """
    # Reset state before test
    todoops.database._reset_db_state()

    yield

    # Reset state after test
    todoops.database._reset_db_state()
