"""
Global pytest fixtures for the URL shortener test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated memory and file storage engines for direct testing
    - Provide a URLManager wired to the memory engine
    - Provide a live PostgreSQL engine when DATABASE_DSN is set (skipped otherwise)

Why an app factory?
    Using `create_app()` ensures each test gets fresh in-memory state and its
    own delete worker, eliminating cross-test flakiness.
"""

import os

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortener.config import load_settings
from shortener.manager.url_manager import URLManager
from shortener.storage.file_storage import FileStorage
from shortener.storage.storage import MemoryStorage


@pytest.fixture
def settings(monkeypatch):
    """Settings with storage env cleared so nothing touches disk or network."""
    monkeypatch.delenv("DATABASE_DSN", raising=False)
    monkeypatch.delenv("FILE_STORAGE_PATH", raising=False)
    monkeypatch.delenv("BASE_URL", raising=False)
    monkeypatch.setenv("SECRET_URL_SERVICE", "test-secret")
    return load_settings()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def log_path(tmp_path) -> str:
    return str(tmp_path / "data" / "urls.jsonl")


@pytest.fixture
def file_storage(log_path) -> FileStorage:
    return FileStorage(log_path)


@pytest.fixture
def manager(memory_storage) -> URLManager:
    return URLManager(memory_storage)


@pytest.fixture
def app(settings, memory_storage):
    return create_app(settings=settings, storage=memory_storage)


@pytest.fixture
def client(app):
    """
    Provide a TestClient bound to a fresh app instance.

    Entering the client runs the lifespan, so the delete worker is shut
    down when the test finishes.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def pg_storage():
    """DBStorage against a live database; the `urls` table is emptied first."""
    dsn = os.getenv("DATABASE_DSN")
    if not dsn:
        pytest.skip("DATABASE_DSN not set")
    from shortener.storage.database import DatabaseManager
    from shortener.storage.db_storage import DBStorage

    db = DatabaseManager(dsn)
    with db.pool.connection() as con:
        con.execute("TRUNCATE urls")
    storage = DBStorage(db.pool)
    yield storage
    db.close()
