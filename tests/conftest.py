"""Shared pytest fixtures for all tests."""

import sqlite3
import pytest
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from config import Config
from db.manager import DatabaseManager
from services.base import Services


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary database.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "budgetboard",
        db_data_dir=tmp_path / "budgetboard" / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=tmp_path / "budgetboard" / "logs",
        secret_key="test-secret",
    )


@pytest.fixture
def db_manager_with_schema(test_config, test_db):
    """Create a DatabaseManager with schema already set up.

    This fixture provides a DatabaseManager that uses an in-memory database
    with all migrations applied through DatabaseManager.apply_migrations.

    Args:
        test_config: Test configuration fixture.
        test_db: In-memory database connection fixture.

    Returns:
        DatabaseManager: Database manager with schema ready.
    """

    class InMemoryDatabaseManager(DatabaseManager):
        """Database manager that hands out one shared in-memory connection."""

        def __init__(self, config, conn):
            super().__init__(config)
            self.conn = conn

        @contextmanager
        def connect(self):
            # Don't close the connection - let the fixture handle it
            yield self.conn

        def get_db_path(self):
            """Return a fake path for the test database."""
            return Path(":memory:")

    db_manager = InMemoryDatabaseManager(test_config, test_db)
    db_manager.apply_migrations()
    return db_manager


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create a Services container with test database.

    Args:
        test_config: Test configuration fixture.
        db_manager_with_schema: Database manager with schema set up.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, db_manager=db_manager_with_schema)


@pytest.fixture
def store(services):
    """The SQLite document store behind the services container."""
    return services.store


@pytest.fixture
def fixed_now():
    """A fixed 'current time' in the middle of March 2025."""
    return datetime(2025, 3, 15, 12, 0, 0)


@pytest.fixture
def app(services, fixed_now):
    """Flask application on the test services, with a fixed clock."""
    from web import create_app

    app = create_app(services, clock=lambda: fixed_now)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
