"""
ConversionQueue — one owned queue instance wiring all the pieces together.

    AdmissionGateway ──> QueueStore <── SchedulerEngine ──> JobExecutor
                                              │
                                              ├──> QueueStatistics
                                              └──> EventBus ──> listeners

There is no module-level queue state: the API creates one instance at
startup (app.state.queue), tests create as many as they like.

Besides submit(), this class is the admin query surface: stats, a
human-readable status message, the detailed pending list, clearing the
queue and removing an owner's pending jobs. None of these touch the job
that is currently executing.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from jobs.base import AbstractJobHandler
from scheduler.admission import AdmissionGateway, SubmitReceipt
from scheduler.engine import SchedulerEngine
from scheduler.events import EventBus, QueueListener
from scheduler.stats import QueueStatistics
from scheduler.store import PendingJobView, QueueStore
from worker.executor import JobExecutor
from worker.reply import ReplyChannel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueStats:
    processed: int
    failed: int
    average_processing_time_ms: int
    current_queue_length: int
    is_processing: bool
    current_job_id: Optional[str]
    uptime_seconds: int
    started_at: datetime
    success_rate: float          # percent of terminal outcomes that succeeded


class ConversionQueue:

    def __init__(
        self,
        listeners: Iterable[QueueListener] = (),
        *,
        cooldown_seconds: Optional[float] = None,
        job_timeout_seconds: Optional[float] = None,
        default_max_attempts: Optional[int] = None,
        per_job_estimate_seconds: Optional[int] = None,
    ):
        self.store = QueueStore()
        self.stats = QueueStatistics()
        self.events = EventBus(listeners)
        self.engine = SchedulerEngine(
            self.store,
            self.stats,
            self.events,
            executor=JobExecutor(timeout_seconds=job_timeout_seconds),
            cooldown_seconds=cooldown_seconds,
        )
        self.gateway = AdmissionGateway(
            self.store,
            self.engine,
            self.events,
            default_max_attempts=default_max_attempts,
            per_job_estimate_seconds=per_job_estimate_seconds,
        )

    # ── Admission ───────────────────────────────────────────────

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
        return self.gateway.submit(
            owner_id,
            payload,
            handler,
            max_attempts=max_attempts,
            reply=reply,
            job_type=job_type,
        )

    def position_of(self, owner_id) -> int:
        return self.store.position_of(owner_id)

    # ── Admin surface ───────────────────────────────────────────

    def get_stats(self) -> QueueStats:
        snap = self.stats.snapshot()
        with self.store.lock:
            queue_length = self.store.size()
            current = self.store.current
            is_processing = self.engine.is_processing

        finished = snap.processed + snap.failed
        success_rate = round(snap.processed / finished * 100, 1) if finished else 100.0

        return QueueStats(
            processed=snap.processed,
            failed=snap.failed,
            average_processing_time_ms=int(snap.average_processing_time_ms),
            current_queue_length=queue_length,
            is_processing=is_processing,
            current_job_id=current.id if current is not None else None,
            uptime_seconds=int(snap.uptime_seconds),
            started_at=snap.started_at,
            success_rate=success_rate,
        )

    def get_status_message(self) -> str:
        stats = self.get_stats()
        hours, rest = divmod(stats.uptime_seconds, 3600)
        return (
            "Queue Status\n\n"
            f"Current queue: {stats.current_queue_length} tasks\n"
            f"Processing: {'Yes' if stats.is_processing else 'No'}\n"
            f"Total processed: {stats.processed}\n"
            f"Total failed: {stats.failed}\n"
            f"Avg processing time: {stats.average_processing_time_ms}ms\n"
            f"Uptime: {hours}h {rest // 60}m"
        )

    def get_detailed_queue(self) -> list[PendingJobView]:
        return self.store.snapshot()

    def clear_queue(self) -> int:
        cleared = self.store.clear()
        logger.info(f"Queue cleared: {cleared} tasks removed")
        return cleared

    def remove_by_owner(self, owner_id) -> bool:
        removed = self.store.remove_by_owner(owner_id)
        if removed:
            logger.info(f"Removed pending jobs for owner {owner_id} from queue")
        return removed

    # ── Lifecycle ───────────────────────────────────────────────

    async def wait_idle(self, timeout: Optional[float] = None) -> bool:
        return await self.engine.wait_idle(timeout)

    async def shutdown(self) -> None:
        await self.engine.stop()
