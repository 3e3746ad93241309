"""
Credit-charging wrapper for job handlers.

Wraps any handler so that one credit is spent from the owner's ledger
before the inner handler does any work. The charge happens once per job:
a retried attempt reuses it instead of charging again. If the owner ran
out of credits while the job was waiting, the charge raises
InsufficientCreditsError and the inner handler never runs.

A ChargingHandler is built per admitted job, never shared between jobs.
"""

import logging

from accounts.credits import CreditLedger
from jobs.base import AbstractJobHandler

logger = logging.getLogger(__name__)


class ChargingHandler(AbstractJobHandler[dict]):

    def __init__(self, inner: AbstractJobHandler, ledger: CreditLedger, owner_id):
        self._inner = inner
        self._ledger = ledger
        self._owner_id = owner_id
        self._credits_remaining: int | None = None

    @property
    def charged(self) -> bool:
        return self._credits_remaining is not None

    async def run(self, payload: dict) -> dict:
        if not self.charged:
            account = await self._ledger.deduct_credit(self._owner_id)
            self._credits_remaining = account.total
        else:
            logger.debug(f"Owner {self._owner_id} already charged, retrying without a new charge")

        result = await self._inner.run(payload)
        return {**result, "credits_remaining": self._credits_remaining}

    @property
    def job_type(self) -> str:
        return self._inner.job_type
