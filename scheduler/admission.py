"""
Admission gateway — turns a caller's request into a queued job.

submit() is synchronous and returns as soon as the job is in the
pending list; it never waits for the job to run. The caller gets a
SubmitReceipt right away. If other jobs are already pending, the owner
also gets a one-shot "you're in queue" notice (JOB_QUEUED event) with a
coarse estimate: jobs_ahead * PER_JOB_ESTIMATE_SECONDS.

The append and the "is the worker idle?" check happen under one lock,
so two concurrent admissions can never both start a loop.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from config.settings import settings
from jobs.base import AbstractJobHandler
from models.enums import QueueEventType
from scheduler.engine import SchedulerEngine
from scheduler.events import EventBus, QueueEvent
from scheduler.job import QueuedJob
from scheduler.store import QueueStore
from worker.reply import ReplyChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmitReceipt:
    job_id: str
    position: int                 # 1-based position in the pending list
    jobs_ahead: int
    estimated_wait_seconds: int


class AdmissionGateway:

    def __init__(
        self,
        store: QueueStore,
        engine: SchedulerEngine,
        events: EventBus,
        default_max_attempts: Optional[int] = None,
        per_job_estimate_seconds: Optional[int] = None,
    ):
        self._store = store
        self._engine = engine
        self._events = events
        self._default_max_attempts = (
            settings.DEFAULT_MAX_ATTEMPTS if default_max_attempts is None else default_max_attempts
        )
        self._per_job_estimate = (
            settings.PER_JOB_ESTIMATE_SECONDS
            if per_job_estimate_seconds is None else per_job_estimate_seconds
        )
        self._notices: set[asyncio.Task] = set()

    def submit(
        self,
        owner_id: Any,
        payload: Any,
        handler: AbstractJobHandler,
        *,
        max_attempts: Optional[int] = None,
        reply: Optional[ReplyChannel] = None,
        job_type: Optional[str] = None,
    ) -> SubmitReceipt:
        """
        Admit a job. Must be called from the event loop thread.

        Raises ValueError if max_attempts < 1.
        """
        job = QueuedJob(
            owner_id=owner_id,
            payload=payload,
            handler=handler,
            max_attempts=self._default_max_attempts if max_attempts is None else max_attempts,
            reply=reply,
            job_type=job_type or getattr(handler, "job_type", "custom"),
        )

        with self._store.lock:
            self._store.enqueue(job)
            pending = self._store.size()
            claimed = self._engine.claim()

        if claimed:
            self._engine.launch()

        logger.info(f"Added job {job.id} to queue for owner {owner_id} (pending: {pending})")

        jobs_ahead = pending - 1 if pending > 1 else 0
        estimate = jobs_ahead * self._per_job_estimate
        if jobs_ahead:
            self._notify(QueueEvent(
                QueueEventType.JOB_QUEUED,
                job,
                jobs_ahead=jobs_ahead,
                estimated_wait_seconds=estimate,
            ))

        return SubmitReceipt(
            job_id=job.id,
            position=pending,
            jobs_ahead=jobs_ahead,
            estimated_wait_seconds=estimate,
        )

    def _notify(self, event: QueueEvent) -> None:
        # fire-and-forget: the notice must not delay admission
        task = asyncio.get_running_loop().create_task(self._events.publish(event))
        self._notices.add(task)
        task.add_done_callback(self._notices.discard)
