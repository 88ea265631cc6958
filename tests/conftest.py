"""Shared test fixtures for the scantext test suite."""

from collections.abc import Iterator
from pathlib import Path

import pytest

from scantext.db.session import Database
from scantext.records.lifecycle import RecordLifecycleManager
from scantext.records.store import RecordStore
from scantext.utils.config import DatabaseConfig


@pytest.fixture
def database() -> Iterator[Database]:
    """A connected in-memory SQLite database, disposed after the test."""
    db = Database(DatabaseConfig(url="sqlite://")).connect()
    yield db
    db.dispose()


@pytest.fixture
def store(database: Database) -> RecordStore:
    return RecordStore(database)


@pytest.fixture
def lifecycle(store: RecordStore) -> RecordLifecycleManager:
    return RecordLifecycleManager(store)


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"
