"""Shared fixtures.

Every test gets its own in-memory SQLite database (aiosqlite), so nothing
leaks between tests and no PostgreSQL server is needed.

- ``db_session``: a session inside a transaction that is rolled back afterwards
- ``client``: httpx client bound to the app, which uses the same database
"""

import os

# Settings validate on import of main/core.ratelimit, so the env comes first
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("DATABASE_URL", TEST_DATABASE_URL)
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")

from collections.abc import AsyncGenerator, Iterator  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.config import clear_settings_cache  # noqa: E402
from core.database import Base, create_session_maker  # noqa: E402
from core.wide_event import clear_wide_event, init_wide_event  # noqa: E402


@pytest.fixture(autouse=True)
def wide_event() -> Iterator[dict]:
    """Open a wide event the way the middleware would for a request."""
    event = init_wide_event()
    yield event
    clear_wide_event()


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Iterator[None]:
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine]:
    """Engine over one shared in-memory connection with the schema created."""
    import models  # noqa: F401

    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session bound to an outer transaction that is never committed.

    Repositories only flush(), so everything a test writes is rolled back.
    """
    async with test_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(
            bind=connection, expire_on_commit=False, autoflush=False
        )
        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest_asyncio.fixture
async def app(test_engine: AsyncEngine) -> AsyncGenerator[FastAPI]:
    """The application with the state its lifespan would normally set.

    ASGITransport does not run lifespan events.
    """
    from main import app as application

    application.state.engine = test_engine
    application.state.session_maker = create_session_maker(test_engine)
    application.state.init_done = True
    application.state.init_error = None
    yield application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client for route tests.

    raise_app_exceptions=False returns the 500 envelope instead of raising
    the exception Starlette re-raises after the handler ran.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
