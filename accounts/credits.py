"""
Credit ledger — per-owner conversion credits stored in Redis hashes.

Each owner has one hash at convertqueue:credits:<owner_id>:

    free        free credits left today (reset to DAILY_FREE_CREDITS at 00:00 UTC)
    paid        purchased credits, never reset
    used        lifetime number of credits spent
    last_reset  ISO date (UTC) of the last daily reset

Spending order is paid first, then free. Every counter change goes
through HINCRBY so two concurrent deductions can't both spend the same
credit; a decrement that would go negative is undone immediately.

The queue never touches this ledger. Callers check credits before
admission, and ChargingHandler spends one credit when a job succeeds.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from redis.asyncio import Redis

from config.settings import settings

logger = logging.getLogger(__name__)


class InsufficientCreditsError(Exception):
    """Raised when an owner has neither paid nor free credits left."""


class AccountNotFoundError(Exception):
    """Raised when an admin operation targets an owner with no ledger entry."""


@dataclass(frozen=True)
class CreditAccount:
    owner_id: str
    free: int
    paid: int
    used: int
    last_reset: date

    @property
    def total(self) -> int:
        return self.free + self.paid


def _today(now: Optional[datetime] = None) -> date:
    return (now or datetime.now(timezone.utc)).astimezone(timezone.utc).date()


def time_until_reset(now: Optional[datetime] = None) -> timedelta:
    """Time left until the next 00:00 UTC, when free credits are refilled."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    tomorrow = datetime.combine(now.date() + timedelta(days=1), datetime.min.time(), timezone.utc)
    return tomorrow - now


def format_time_until_reset(now: Optional[datetime] = None) -> str:
    remaining = int(time_until_reset(now).total_seconds())
    return f"{remaining // 3600}h {(remaining % 3600) // 60}m"


class CreditLedger:

    KEY_PREFIX = "convertqueue:credits:"

    def __init__(self, redis_client: Redis, daily_free_credits: Optional[int] = None):
        self._redis = redis_client
        self._daily_free = (
            settings.DAILY_FREE_CREDITS if daily_free_credits is None else daily_free_credits
        )

    def _key(self, owner_id) -> str:
        return f"{self.KEY_PREFIX}{owner_id}"

    async def _read(self, owner_id) -> Optional[CreditAccount]:
        raw = await self._redis.hgetall(self._key(owner_id))
        if not raw:
            return None
        data = {
            (k.decode() if isinstance(k, bytes) else k): (v.decode() if isinstance(v, bytes) else v)
            for k, v in raw.items()
        }
        return CreditAccount(
            owner_id=str(owner_id),
            free=int(data.get("free", 0)),
            paid=int(data.get("paid", 0)),
            used=int(data.get("used", 0)),
            last_reset=date.fromisoformat(data["last_reset"]) if "last_reset" in data else _today(),
        )

    async def get_account(self, owner_id, create: bool = True) -> Optional[CreditAccount]:
        """Return the owner's account, opening one with today's free credits if needed."""
        account = await self._read(owner_id)
        if account is None and create:
            await self._redis.hset(self._key(owner_id), mapping={
                "free": self._daily_free,
                "paid": 0,
                "used": 0,
                "last_reset": _today().isoformat(),
            })
            logger.info(f"Opened credit account for owner {owner_id} ({self._daily_free} free credits)")
            account = await self._read(owner_id)
        return account

    async def reset_daily_credits(self, owner_id, now: Optional[datetime] = None) -> CreditAccount:
        """Refill free credits if the last reset happened on an earlier UTC day."""
        account = await self.get_account(owner_id)
        today = _today(now)
        if account.last_reset != today:
            await self._redis.hset(self._key(owner_id), mapping={
                "free": self._daily_free,
                "last_reset": today.isoformat(),
            })
            logger.info(f"Credits reset for owner {owner_id}: {self._daily_free} free credits")
            account = await self._read(owner_id)
        return account

    async def has_enough_credits(self, owner_id, required: int = 1) -> bool:
        account = await self.reset_daily_credits(owner_id)
        return account.total >= required

    async def deduct_credit(self, owner_id) -> CreditAccount:
        """Spend one credit, paid before free. Raises InsufficientCreditsError."""
        key = self._key(owner_id)
        await self.get_account(owner_id)

        for field in ("paid", "free"):
            left = await self._redis.hincrby(key, field, -1)
            if left >= 0:
                await self._redis.hincrby(key, "used", 1)
                account = await self._read(owner_id)
                logger.info(
                    f"Credit deducted for owner {owner_id}. "
                    f"Remaining: {account.free} free, {account.paid} paid"
                )
                return account
            await self._redis.hincrby(key, field, 1)

        raise InsufficientCreditsError(f"No credits available for owner {owner_id}")

    async def add_paid_credits(self, owner_id, credits: int) -> CreditAccount:
        if credits <= 0:
            raise ValueError("credits must be positive")
        if not await self._redis.exists(self._key(owner_id)):
            raise AccountNotFoundError(f"Owner {owner_id} not found")

        await self._redis.hincrby(self._key(owner_id), "paid", credits)
        account = await self._read(owner_id)
        logger.info(
            f"Added {credits} paid credits to owner {owner_id}. "
            f"Total paid credits: {account.paid}"
        )
        return account
