"""
Job executor — runs a single job's handler inside an isolating boundary.

The scheduler loop calls executor.execute(job) for every attempt, and
this method guarantees it ALWAYS returns an ExecutionOutcome:

    1. Start the clock
    2. await handler.run(payload), bounded by the per-job timeout
    3. On success: outcome with the handler's result
    4. On any exception or timeout: outcome with the error message

Nothing a handler does can escape into the loop — one broken file must
never stall the queue for everyone else. The only exception that passes
through is asyncio.CancelledError, which means the whole queue is
shutting down.

The timeout exists because a hung handler would otherwise block the
single worker forever. A timed-out attempt counts as a normal failure
and goes through the retry decision like any other error.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from config.settings import settings
from scheduler.job import QueuedJob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionOutcome:
    succeeded: bool
    duration_ms: float
    result: Optional[dict] = None
    error: Optional[str] = None


class JobExecutor:

    def __init__(self, timeout_seconds: Optional[float] = None):
        if timeout_seconds is None:
            timeout_seconds = settings.JOB_TIMEOUT_SECONDS
        # 0 or negative → no timeout
        self._timeout = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None

    async def execute(self, job: QueuedJob) -> ExecutionOutcome:
        start_time = time.monotonic()
        try:
            if self._timeout is None:
                result = await job.handler.run(job.payload)
            else:
                result = await asyncio.wait_for(
                    job.handler.run(job.payload), timeout=self._timeout
                )
        except asyncio.TimeoutError:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error(f"Job {job.id} [{job.job_type}] timed out after {self._timeout}s")
            return ExecutionOutcome(
                succeeded=False,
                duration_ms=elapsed_ms,
                error=f"Timed out after {self._timeout}s",
            )
        except Exception as e:
            elapsed_ms = (time.monotonic() - start_time) * 1000
            logger.error(f"Job {job.id} [{job.job_type}] failed: {e}")
            return ExecutionOutcome(
                succeeded=False,
                duration_ms=elapsed_ms,
                error=str(e) or type(e).__name__,
            )

        elapsed_ms = (time.monotonic() - start_time) * 1000
        logger.info(f"Job {job.id} [{job.job_type}] completed in {elapsed_ms:.0f}ms")
        return ExecutionOutcome(
            succeeded=True,
            duration_ms=elapsed_ms,
            result=result if isinstance(result, dict) else {"value": result},
        )
