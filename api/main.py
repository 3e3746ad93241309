"""
FastAPI application factory.

This file:
1. Creates the FastAPI app
2. Runs startup logic (create DB tables, connect to Redis, build the queue)
3. Registers all routers (jobs, admin, credits, health)
4. Runs shutdown logic (stop the queue, close connections)

The queue lives inside the API process: admission endpoints put jobs in,
and the single scheduler loop runs on the same event loop.

To run:  uvicorn api.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from redis.asyncio import Redis as AsyncRedis

from config.settings import settings
from models.base import async_engine, AsyncSessionLocal, Base
from api.routers import admin, credits, health, jobs
from scheduler.service import ConversionQueue
from worker.listeners import DeadLetterRecorder, HistoryRecorder, OwnerNotifier

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Runs on startup (before yield) and shutdown (after yield).

    Startup:
    - Creates all DB tables if they don't exist (safe to run multiple times)
    - Connects to Redis
    - Builds the conversion queue with its listeners

    Shutdown:
    - Stops the scheduler loop (an interrupted job stays queued)
    - Closes Redis connection
    - Disposes the DB engine (closes connection pool)
    """
    # ── Startup ─────────────────────────────────────────────────
    logger.info("Creating database tables...")
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    app.state.redis = AsyncRedis.from_url(settings.redis_url)
    app.state.queue = ConversionQueue(listeners=[
        OwnerNotifier(),
        DeadLetterRecorder(app.state.redis),
        HistoryRecorder(AsyncSessionLocal),
    ])
    logger.info(
        f"API ready — cooldown {settings.QUEUE_COOLDOWN_SECONDS}s, "
        f"max attempts {settings.DEFAULT_MAX_ATTEMPTS}"
    )

    yield  # app is running and serving requests between startup and shutdown

    # ── Shutdown ────────────────────────────────────────────────
    await app.state.queue.shutdown()
    await app.state.redis.close()
    await async_engine.dispose()
    logger.info("API shut down")


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    app = FastAPI(
        title="Conversion Queue",
        description="File-conversion front end with a single-worker sequential queue, retries and credits",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(health.router)
    app.include_router(jobs.router)
    app.include_router(admin.router)
    app.include_router(credits.router)

    return app


# This is what uvicorn imports: `uvicorn api.main:app`
app = create_app()
