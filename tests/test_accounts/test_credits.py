"""
Tests for the CreditLedger.

Redis is fakeredis, so the HINCRBY-based spending logic runs against a
real Redis command implementation.
"""

from datetime import datetime, timedelta, timezone

import pytest

from accounts.credits import (
    AccountNotFoundError,
    CreditLedger,
    InsufficientCreditsError,
    format_time_until_reset,
    time_until_reset,
)


@pytest.mark.asyncio
async def test_new_owner_gets_daily_free_credits(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=15)

    account = await ledger.get_account("u1")

    assert account.free == 15
    assert account.paid == 0
    assert account.used == 0
    assert account.total == 15
    assert account.last_reset == datetime.now(timezone.utc).date()


@pytest.mark.asyncio
async def test_get_account_without_create(fake_redis):
    ledger = CreditLedger(fake_redis)
    assert await ledger.get_account("ghost", create=False) is None


@pytest.mark.asyncio
async def test_paid_credits_are_spent_before_free(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=1)
    await ledger.get_account("u1")
    await ledger.add_paid_credits("u1", 2)

    first = await ledger.deduct_credit("u1")
    assert (first.paid, first.free) == (1, 1)
    second = await ledger.deduct_credit("u1")
    assert (second.paid, second.free) == (0, 1)
    third = await ledger.deduct_credit("u1")
    assert (third.paid, third.free) == (0, 0)
    assert third.used == 3


@pytest.mark.asyncio
async def test_deduct_with_no_credits_leaves_counters_intact(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=0)

    with pytest.raises(InsufficientCreditsError):
        await ledger.deduct_credit("u1")

    account = await ledger.get_account("u1")
    assert (account.free, account.paid, account.used) == (0, 0, 0)


@pytest.mark.asyncio
async def test_has_enough_credits(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=1)

    assert await ledger.has_enough_credits("u1") is True
    await ledger.deduct_credit("u1")
    assert await ledger.has_enough_credits("u1") is False


@pytest.mark.asyncio
async def test_free_credits_reset_on_a_new_utc_day(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=5)
    await ledger.get_account("u1")
    await ledger.add_paid_credits("u1", 1)
    for _ in range(3):
        await ledger.deduct_credit("u1")

    tomorrow = datetime.now(timezone.utc) + timedelta(days=1)
    account = await ledger.reset_daily_credits("u1", now=tomorrow)

    assert account.free == 5
    assert account.paid == 0          # paid credits are never refilled
    assert account.used == 3
    assert account.last_reset == tomorrow.date()


@pytest.mark.asyncio
async def test_reset_same_day_is_noop(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=5)
    await ledger.deduct_credit("u1")

    account = await ledger.reset_daily_credits("u1")

    assert account.free == 4


@pytest.mark.asyncio
async def test_add_paid_credits_to_unknown_owner(fake_redis):
    ledger = CreditLedger(fake_redis)
    with pytest.raises(AccountNotFoundError):
        await ledger.add_paid_credits("ghost", 10)


@pytest.mark.asyncio
async def test_add_non_positive_credits(fake_redis):
    ledger = CreditLedger(fake_redis)
    await ledger.get_account("u1")
    with pytest.raises(ValueError):
        await ledger.add_paid_credits("u1", 0)


def test_time_until_reset():
    now = datetime(2024, 3, 10, 22, 30, tzinfo=timezone.utc)

    assert time_until_reset(now) == timedelta(hours=1, minutes=30)
    assert format_time_until_reset(now) == "1h 30m"


def test_time_until_reset_at_midnight():
    now = datetime(2024, 3, 10, 0, 0, tzinfo=timezone.utc)
    assert format_time_until_reset(now) == "24h 0m"
