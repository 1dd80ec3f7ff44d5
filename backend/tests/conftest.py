"""
Tree Leaves Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── static_dir:     Temporary directory with index.html and thank-you.html
    ├── test_settings:  Settings pointing at temporary data/static directories
    ├── memory_store:   Empty MemoryLeafStore
    ├── file_store:     FileLeafStore in a temporary data directory
    ├── make_leaf:      Factory for LeafRecord instances
    ├── test_client:    HTTPX AsyncClient against an app using memory_store
    └── file_client:    HTTPX AsyncClient against an app using file_store
"""

import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
# Keeps the module-level app in app.main away from ./data
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="leaftree_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ENVIRONMENT"] = "test"

from app.config import Settings  # noqa: E402
from app.schemas.leaf import LeafPosition, LeafRecord  # noqa: E402
from app.services.leaf_store import FileLeafStore, MemoryLeafStore  # noqa: E402


@pytest.fixture
def static_dir(tmp_path):
    pages = tmp_path / "public"
    pages.mkdir()
    (pages / "index.html").write_text("<html><body>tree</body></html>", encoding="utf-8")
    (pages / "thank-you.html").write_text("<html><body>thanks</body></html>", encoding="utf-8")
    (pages / "app.js").write_text("console.log('leaves');", encoding="utf-8")
    return pages


@pytest.fixture
def test_settings(tmp_path, static_dir):
    return Settings(
        data_dir=str(tmp_path / "data"),
        static_dir=str(static_dir),
        environment="test",
        log_level="WARNING",
    )


@pytest.fixture
def memory_store():
    return MemoryLeafStore()


@pytest.fixture
def file_store(test_settings):
    return FileLeafStore(test_settings.leaves_file_path)


@pytest.fixture
def make_leaf():
    """
    Factory for LeafRecord instances.

    Usage:
        leaf = make_leaf(3, source="share", timestamp="2024-01-15T12:00:00.000Z")
    """
    def _make(index, source="manual", timestamp="2024-01-15T12:00:00.000Z"):
        return LeafRecord(
            index=index,
            timestamp=timestamp,
            source=source,
            position=LeafPosition(left="20%", top="30%", rotation="0deg"),
        )
    return _make


async def _client_for(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def test_client(test_settings, memory_store):
    """
    Async HTTP client for an app backed by the in-memory store.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/api/leaves")
            assert response.status_code == 200
    """
    from app.main import create_app
    app = create_app(test_settings, memory_store)
    async with await _client_for(app) as client:
        yield client


@pytest_asyncio.fixture
async def file_client(test_settings, file_store):
    from app.main import create_app
    app = create_app(test_settings, file_store)
    async with await _client_for(app) as client:
        yield client
