from __future__ import annotations

import os
from typing import TYPE_CHECKING

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from hrms_core.db import get_session
from hrms_core.main import app
from hrms_core.models import SQLModel
from hrms_core.services.feed_trigger import FeedTrigger, get_feed_trigger, set_feed_trigger
from hrms_core.services.sync_limiter import SyncRateLimiter, get_sync_limiter, set_sync_limiter

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")
FEED_URL = "http://feed.test/api/essl/sync"


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database per test with all tables created."""
    if TEST_DATABASE_URL.startswith("sqlite"):
        _engine = create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        _engine = create_async_engine(TEST_DATABASE_URL)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a database session wrapped in a transaction that rolls back after each test."""
    async with engine.connect() as conn:
        txn = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)
        yield session
        await session.close()
        await txn.rollback()


@pytest.fixture
def sync_limiter() -> Iterator[SyncRateLimiter]:
    """A fresh limiter installed as the process-wide one."""
    limiter = SyncRateLimiter(interval_seconds=60)
    set_sync_limiter(limiter)
    yield limiter
    set_sync_limiter(SyncRateLimiter())


@pytest.fixture
def feed_requests() -> list[httpx.Request]:
    """Requests received by the mocked time-clock feed."""
    return []


@pytest.fixture
async def feed_trigger(
    sync_limiter: SyncRateLimiter,
    feed_requests: list[httpx.Request],
) -> AsyncIterator[FeedTrigger]:
    """Feed trigger backed by a mock transport that accepts every sync."""

    def _handler(request: httpx.Request) -> httpx.Response:
        feed_requests.append(request)
        return httpx.Response(202, json={"status": "queued"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(_handler))
    trigger = FeedTrigger(
        FEED_URL,
        sync_limiter,
        timeout_seconds=2.0,
        delay_seconds=0,
        first_sync_delay_seconds=0,
        client=client,
    )
    set_feed_trigger(trigger)
    yield trigger
    await trigger.aclose()
    await client.aclose()
    set_feed_trigger(None)


@pytest.fixture
async def async_client(
    db_session: AsyncSession,
    feed_trigger: FeedTrigger,
    sync_limiter: SyncRateLimiter,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session and feed dependencies overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    app.dependency_overrides[get_feed_trigger] = lambda: feed_trigger
    app.dependency_overrides[get_sync_limiter] = lambda: sync_limiter
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
