"""
Shared test fixtures.

These replace real infrastructure with lightweight in-memory alternatives:
- PostgreSQL → SQLite in memory (via aiosqlite)
- Redis → fakeredis (pure Python Redis mock)
- HTTP server → httpx.AsyncClient with ASGI transport (no network)
- Queue timing → zero cool-down, short per-job timeout

This means tests:
- Run without Docker
- Run in milliseconds (no network, no disk, no 1s pauses)
- Are fully isolated (each test gets a fresh database and a fresh queue)
"""

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from fakeredis.aioredis import FakeRedis

from models.base import Base
from api.main import create_app
from api.dependencies import get_db, get_queue, get_redis
from scheduler.service import ConversionQueue
from worker.listeners import DeadLetterRecorder, HistoryRecorder, OwnerNotifier
from config.settings import settings
from tests.helpers import ADMIN_HEADERS, RecordingListener

# SQLite in-memory database, created fresh for each test
TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def async_engine():
    """Create a fresh in-memory database for each test."""
    # one shared connection, so listeners and request sessions see the same tables
    engine = create_async_engine(TEST_DB_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(async_engine):
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def fake_redis():
    """Create a fake Redis instance (in-memory, no real Redis needed)."""
    r = FakeRedis()
    yield r
    await r.flushall()


@pytest_asyncio.fixture
async def recorder():
    return RecordingListener()


@pytest_asyncio.fixture
async def queue(fake_redis, session_factory, recorder):
    """A queue wired with the production listeners plus an event recorder."""
    q = ConversionQueue(
        listeners=[
            OwnerNotifier(),
            DeadLetterRecorder(fake_redis),
            HistoryRecorder(session_factory),
            recorder,
        ],
        cooldown_seconds=0,
        job_timeout_seconds=5,
    )
    yield q
    await q.shutdown()


@pytest_asyncio.fixture
async def client(session_factory, fake_redis, queue, monkeypatch):
    """
    Create a test HTTP client that talks directly to the FastAPI app.

    dependency_overrides swap the real DB session, Redis client and queue
    for the test versions. ASGITransport doesn't run the app lifespan,
    so nothing here ever connects to Postgres or Redis.
    """
    monkeypatch.setattr(settings, "ADMIN_API_KEY", ADMIN_HEADERS["X-Admin-Key"])
    app = create_app()

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_redis():
        return fake_redis

    async def override_get_queue():
        return queue

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis
    app.dependency_overrides[get_queue] = override_get_queue

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
