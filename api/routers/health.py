"""
Health check endpoint.

Checks Postgres and Redis connectivity and reports whether the
scheduler loop is currently draining the queue.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from redis.asyncio import Redis

from api.dependencies import get_db, get_queue, get_redis
from scheduler.service import ConversionQueue

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(
    db: AsyncSession = Depends(get_db),
    redis: Redis = Depends(get_redis),
    queue: ConversionQueue = Depends(get_queue),
) -> dict:
    """Check that Postgres and Redis are reachable."""
    await db.execute(text("SELECT 1"))
    await redis.ping()

    return {
        "status": "healthy",
        "postgres": "ok",
        "redis": "ok",
        "queue": queue.engine.state.value,
    }
