"""
Pytest configuration and fixtures for Lumo tests.

This module provides shared fixtures for testing database models,
repositories and the HTTP API.
"""

from typing import Generator
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from lumo.models.db import Base


@pytest.fixture(scope="session")
def test_engine():
    """Create a test database engine using SQLite in-memory."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={
            "check_same_thread": False
        },  # Allow cross-thread access for TestClient
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """
    Create a new database session for a test.

    Each test gets a fresh session with a transaction that is rolled back
    after the test completes, ensuring test isolation.
    """
    connection = test_engine.connect()
    transaction = connection.begin()
    session = sessionmaker(bind=connection)()

    yield session

    session.close()
    if transaction.is_active:
        transaction.rollback()
    connection.close()


@pytest.fixture
def api_client(db_session: Session):
    """Create a test client for FastAPI with database dependency override."""
    from fastapi.testclient import TestClient

    from lumo.api.app import app
    from lumo.db.connection import get_db

    # Override the get_db dependency to use test database
    def override_get_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db

    # Keep startup away from the real database and log directory
    with patch("lumo.api.app.run_migrations"), patch("lumo.api.app.setup_logging"):
        client = TestClient(app)
        yield client

    # Clean up
    app.dependency_overrides.clear()
