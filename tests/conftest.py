"""
Pytest configuration and shared fixtures.

Every test gets its own SQLite database file (via aiosqlite) created from the
SQLModel metadata, so tests are isolated without a running database server.
"""

import os
import tempfile
from collections.abc import AsyncGenerator
from pathlib import Path

# Settings are read at import time, so the environment must be in place
# before anything from unitreviews is imported.
_TEST_ROOT = Path(tempfile.mkdtemp(prefix="unitreviews-tests-"))
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-unitreviews")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TEST_ROOT / 'default.db'}")
os.environ.setdefault("AVATAR_STORAGE_PATH", str(_TEST_ROOT / "avatars"))
os.environ["GEMINI_API_KEY"] = ""

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

import unitreviews.models  # noqa: E402, F401
from unitreviews.core.database import get_db  # noqa: E402
from unitreviews.main import app as main_app  # noqa: E402
from unitreviews.models import Reviews, Units, Users  # noqa: E402

from tests.factories import make_review, make_unit, make_user  # noqa: E402


@pytest.fixture(scope="function")
async def engine(tmp_path: Path):
    """
    Create a fresh SQLite database for each test function.

    Function scope keeps the async engine on the same event loop as the
    function-scoped db_session fixture.
    """
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database (for code that opens its own sessions)."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session for a single test.

    Services commit through it, so data written by one call is visible to
    the next; the database file is discarded afterwards.
    """
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture(scope="function")
def app(db_session: AsyncSession) -> FastAPI:
    """
    Create FastAPI app with test database session.

    This overrides the database dependency to use the test session.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    main_app.dependency_overrides[get_db] = override_get_db

    yield main_app

    main_app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """
    Create async HTTP client for testing API endpoints.

    Usage:
        async def test_endpoint(client):
            response = await client.get("/api/v1/units")
            assert response.status_code == 200
    """
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def author(db_session: AsyncSession) -> Users:
    return await make_user(db_session, "alice")


@pytest.fixture
async def other_user(db_session: AsyncSession) -> Users:
    return await make_user(db_session, "bob")


@pytest.fixture
async def third_user(db_session: AsyncSession) -> Users:
    return await make_user(db_session, "carol")


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> Users:
    return await make_user(db_session, "admin", admin=True)


@pytest.fixture
async def unit(db_session: AsyncSession) -> Units:
    return await make_unit(db_session, "fit2099", "Object oriented design and implementation")


@pytest.fixture
async def review(db_session: AsyncSession, unit: Units, author: Users) -> Reviews:
    return await make_review(db_session, unit, author)
