"""
FastAPI dependency injection.

How this works:
- An endpoint declares `queue: ConversionQueue = Depends(get_queue)`
- FastAPI calls the dependency before your endpoint runs
- Tests replace any of these via app.dependency_overrides

The queue and the Redis client are created once in the app lifespan and
stored on app.state; the DB session is per request.
"""

import secrets
from typing import AsyncGenerator

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from redis.asyncio import Redis

from accounts.credits import CreditLedger
from config.settings import settings
from models.base import AsyncSessionLocal
from scheduler.service import ConversionQueue


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yields an async database session, auto-closes when the request ends."""
    async with AsyncSessionLocal() as session:
        yield session


async def get_redis(request: Request) -> Redis:
    """Returns the Redis client stored on the app during startup."""
    return request.app.state.redis


async def get_queue(request: Request) -> ConversionQueue:
    """Returns the process-wide conversion queue created during startup."""
    return request.app.state.queue


async def get_ledger(redis: Redis = Depends(get_redis)) -> CreditLedger:
    return CreditLedger(redis)


async def require_admin(x_admin_key: str | None = Header(None)) -> None:
    """
    Guard for the /admin routes: the X-Admin-Key header must match ADMIN_API_KEY.

    With no ADMIN_API_KEY configured every admin request is refused.
    """
    expected = settings.ADMIN_API_KEY
    if not expected or x_admin_key is None or not secrets.compare_digest(x_admin_key, expected):
        raise HTTPException(status_code=403, detail="Access denied. Admin only.")
