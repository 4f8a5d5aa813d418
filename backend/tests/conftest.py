"""
Blog API — Test Configuration (conftest.py)
=============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── sample_post_data: Field values for a stored post
    ├── database: Connected Database on a fresh SQLite file (aiosqlite)
    ├── app: FastAPI app wired to that database (lifespan not run)
    └── test_client: HTTPX AsyncClient talking to the app over ASGI
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Set before any blog_api import so the module-level settings pick them up
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("PORT", None)

from blog_api.config import Settings  # noqa: E402
from blog_api.database import Database  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = post
            result = await BlogService(mock_db_session).get(post_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def sample_post_data():
    return {
        "id": uuid4(),
        "title": "First post",
        "author": "John Doe",
        "description": "Hello from the first post.",
        "created_at": datetime.now(timezone.utc),
        "updated_at": datetime.now(timezone.utc),
        "revision": 0,
    }


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest_asyncio.fixture
async def database(sqlite_url):
    """A connected Database with the blog_posts table created."""
    db = Database(sqlite_url)
    await db.connect()
    await db.create_schema()
    yield db
    await db.dispose()


@pytest.fixture
def app(database):
    """
    App with the test database already on app.state.

    ASGITransport does not send lifespan events, so startup is skipped and
    the fixture plays its part.
    """
    from blog_api.main import create_app

    application = create_app(Settings(database_url=database.url, log_level="WARNING"))
    application.state.database = database
    return application


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def blog_payload():
    def _payload(title="A", author="Bob", description="D", **extra):
        data = {"title": title, "author": author, "description": description}
        data.update(extra)
        return {"data": data}

    return _payload
