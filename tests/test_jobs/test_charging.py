"""Tests for the ChargingHandler credit wrapper."""

import pytest

from accounts.credits import CreditLedger, InsufficientCreditsError
from jobs.charging import ChargingHandler
from scheduler.service import ConversionQueue
from tests.helpers import FlakyHandler, RecordingHandler


@pytest.mark.asyncio
async def test_success_spends_one_credit(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=3)
    handler = ChargingHandler(RecordingHandler(), ledger, "u1")

    result = await handler.run("A")

    assert result == {"payload": "A", "credits_remaining": 2}
    account = await ledger.get_account("u1")
    assert account.free == 2
    assert account.used == 1


@pytest.mark.asyncio
async def test_retries_are_charged_only_once(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=3)
    inner = FlakyHandler(failures=2)
    handler = ChargingHandler(inner, ledger, "u1")

    for _ in range(2):
        with pytest.raises(RuntimeError):
            await handler.run({})
    result = await handler.run({})

    assert len(inner.calls) == 3
    assert result["credits_remaining"] == 2
    account = await ledger.get_account("u1")
    assert account.free == 2
    assert account.used == 1


@pytest.mark.asyncio
async def test_out_of_credits_never_runs_the_conversion(fake_redis):
    ledger = CreditLedger(fake_redis, daily_free_credits=0)
    inner = RecordingHandler()
    handler = ChargingHandler(inner, ledger, "u1")

    with pytest.raises(InsufficientCreditsError):
        await handler.run("A")

    assert inner.calls == []
    assert handler.charged is False


def test_job_type_comes_from_inner_handler(fake_redis):
    handler = ChargingHandler(RecordingHandler(), CreditLedger(fake_redis), "u1")
    assert handler.job_type == "recording"


@pytest.mark.asyncio
async def test_owner_running_dry_while_waiting_skips_the_conversion(fake_redis):
    """Two jobs admitted on one credit: only the first one ever converts."""
    ledger = CreditLedger(fake_redis, daily_free_credits=1)
    inner = RecordingHandler()
    q = ConversionQueue(cooldown_seconds=0)

    q.submit("u1", "A", ChargingHandler(inner, ledger, "u1"))
    q.submit("u1", "B", ChargingHandler(inner, ledger, "u1"))

    assert await q.wait_idle(timeout=2)
    assert inner.calls == ["A"]
    stats = q.get_stats()
    assert stats.processed == 1
    assert stats.failed == 1
