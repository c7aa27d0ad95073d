"""Root test fixtures shared across all test types.

Database fixtures run against a per-test SQLite file (aiosqlite), created from
the SQLModel metadata. Unit tests that do not touch the database never
request them.
"""

import os

# Set env before any app imports: rate limiting off, cheap password hashing
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./amuta-test.db")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-key-with-at-least-32-characters")
os.environ.setdefault("INVITE_JWT_SECRET", "test-invite-secret-with-at-least-32-characters")
os.environ.setdefault("ARGON2_TIME_COST", "1")
os.environ.setdefault("ARGON2_MEMORY_COST", "1024")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel

from src.amuta import models  # noqa: F401 - register tables on the metadata
from src.amuta.api.dependencies import get_db_session
from src.amuta.core.config import get_settings
from src.amuta.core.db import get_session

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


# --- Database Fixtures ---


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine]:
    """Fresh database per test with all tables created."""
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'amuta.db'}",
        poolclass=NullPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session for arranging test data.

    Kept separate from the session services run in, so a service rollback
    never expires objects the test still holds.
    """
    async with get_session(engine) as session:
        yield session


@pytest.fixture
async def service_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session handed to the service under test."""
    async with get_session(engine) as session:
        yield session


# --- Email Fixtures ---


@pytest.fixture(autouse=True)
def mock_invite_email() -> MagicMock:
    """Capture invite emails instead of sending them.

    The token of the last email is in ``mock.call_args.kwargs["token"]``.
    """
    with patch(
        "src.amuta.services.invite_service.send_invite_email", return_value=True
    ) as mock:
        yield mock


# --- HTTP Client Fixtures ---


@pytest.fixture
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient]:
    """HTTP client against the app, with request sessions bound to the test database."""
    from src.amuta.main import app

    async def override_db_session() -> AsyncGenerator[AsyncSession]:
        async with get_session(engine) as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
