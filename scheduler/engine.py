"""
Scheduler Engine — the single worker that drains the queue.

At most ONE job executes at a time for the whole process. That is
enforced by a busy flag, not by a worker pool:

    IDLE ──claim()──> DRAINING ──pending list empty──> IDLE

While DRAINING, one asyncio task runs this loop:

    1. Under the store lock: dequeue_front()
       → None? clear busy flag + current job, go IDLE, task ends
    2. Record the job as current, emit JOB_STARTED
    3. await executor.execute(job)  (never raises, see worker/executor.py)
    4. Success → stats.record_success, emit JOB_SUCCEEDED
       Failure → RetryPolicy: requeue at front (JOB_RETRYING)
                 or terminal (stats.record_failure, JOB_FAILED)
    5. Fixed cool-down (default 1s), then back to 1

Once IDLE, nothing restarts the loop on its own — the next admission
calls claim() and launch(). claim() runs under the same lock as the
"pending list is empty → go IDLE" step, so an admission either sees the
loop still busy (and the loop will pick its job up) or sees it idle
(and starts a new one). It can't fall in between.
"""

import asyncio
import logging
from typing import Optional

from config.settings import settings
from models.enums import QueueEventType, QueueState
from scheduler.events import EventBus, QueueEvent
from scheduler.job import QueuedJob
from scheduler.stats import QueueStatistics
from scheduler.store import QueueStore
from worker.executor import JobExecutor
from worker.retry import RetryPolicy

logger = logging.getLogger(__name__)


class SchedulerEngine:

    def __init__(
        self,
        store: QueueStore,
        stats: QueueStatistics,
        events: EventBus,
        executor: Optional[JobExecutor] = None,
        retry_policy: Optional[RetryPolicy] = None,
        cooldown_seconds: Optional[float] = None,
    ):
        self._store = store
        self._stats = stats
        self._events = events
        self._executor = executor or JobExecutor()
        self._retry_policy = retry_policy or RetryPolicy(store)
        self._cooldown = (
            settings.QUEUE_COOLDOWN_SECONDS if cooldown_seconds is None else cooldown_seconds
        )
        self._busy = False
        self._activations = 0
        self._task: Optional[asyncio.Task] = None
        self._idle = asyncio.Event()
        self._idle.set()

    # ── State ───────────────────────────────────────────────────

    @property
    def is_processing(self) -> bool:
        with self._store.lock:
            return self._busy

    @property
    def state(self) -> QueueState:
        return QueueState.DRAINING if self.is_processing else QueueState.IDLE

    @property
    def activations(self) -> int:
        """How many times the loop went IDLE → DRAINING since startup."""
        with self._store.lock:
            return self._activations

    # ── Triggering ──────────────────────────────────────────────

    def claim(self) -> bool:
        """
        Set the busy flag if the loop is idle.

        Returns True if the caller won the flag and must call launch().
        Callers that combine this with an enqueue hold store.lock around both.
        """
        with self._store.lock:
            if self._busy:
                return False
            self._busy = True
            self._activations += 1
            self._idle.clear()
            return True

    def launch(self) -> None:
        """Start the drain task. Must run on the event loop thread after a successful claim()."""
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._drain(), name="convertqueue-drain")
        logger.debug("Scheduler loop activated")

    def trigger(self) -> bool:
        """Start the loop if it is idle. Returns whether a new loop was started."""
        if self.claim():
            self.launch()
            return True
        return False

    # ── The loop ────────────────────────────────────────────────

    async def _drain(self) -> None:
        try:
            while True:
                with self._store.lock:
                    job = self._store.dequeue_front()
                    if job is None:
                        self._go_idle()
                        return
                    self._store.set_current(job)

                try:
                    await self._process(job)
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    # executor and event bus already isolate handler/listener
                    # errors; this only guards the loop's own bookkeeping
                    logger.error(f"Scheduler loop error on job {job.id}: {e}", exc_info=True)
                    with self._store.lock:
                        if self._store.current is job:
                            self._store.set_current(None)

                await asyncio.sleep(self._cooldown)
        except asyncio.CancelledError:
            with self._store.lock:
                interrupted = self._store.current
                if interrupted is not None:
                    # shutdown mid-job: keep it at the front, the attempt doesn't count
                    self._store.requeue_front(interrupted)
                    logger.warning(f"Job {interrupted.id} interrupted by shutdown, requeued")
                self._go_idle()
            raise

    def _go_idle(self) -> None:
        # caller holds store.lock
        self._busy = False
        self._store.set_current(None)
        self._idle.set()
        logger.debug("Scheduler loop idle")

    async def _process(self, job: QueuedJob) -> None:
        logger.info(
            f"Processing job {job.id} for owner {job.owner_id} "
            f"(attempt {job.attempts + 1}/{job.max_attempts})"
        )
        await self._events.publish(
            QueueEvent(QueueEventType.JOB_STARTED, job, attempts=job.attempts)
        )

        outcome = await self._executor.execute(job)

        if outcome.succeeded:
            with self._store.lock:
                self._stats.record_success(outcome.duration_ms)
                self._store.set_current(None)
            await self._events.publish(QueueEvent(
                QueueEventType.JOB_SUCCEEDED,
                job,
                attempts=job.attempts,
                duration_ms=outcome.duration_ms,
                result=outcome.result,
            ))
            return

        with self._store.lock:
            requeued = self._retry_policy.handle_failure(job, outcome.error)
            if not requeued:
                self._stats.record_failure()
            self._store.set_current(None)

        await self._events.publish(QueueEvent(
            QueueEventType.JOB_RETRYING if requeued else QueueEventType.JOB_FAILED,
            job,
            attempts=job.attempts,
            duration_ms=outcome.duration_ms,
            error=outcome.error,
        ))

    # ── Lifecycle ───────────────────────────────────────────────

    async def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Wait until the loop goes IDLE. Returns False on timeout."""
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def stop(self) -> None:
        """Cancel a running drain task. Pending jobs (and an interrupted current one) stay queued."""
        task = self._task
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        logger.info("Scheduler engine stopped")
