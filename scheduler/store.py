"""
Queue store — the pending list plus the job currently executing.

Data structure: collections.deque
- enqueue:       append to right  → O(1)
- dequeue_front: pop from left    → O(1)
- requeue_front: append to left   → O(1)  ← retries jump the line

A retried job goes back to the FRONT, not the back: a failing job gets
redone right away instead of waiting behind every new arrival. Later
arrivals pay for that during failure storms.

Thread safety:
All state lives behind one re-entrant lock, `store.lock`. It is public
because admission needs a compound critical section (append + "is the
worker idle?" check) that spans the store and the engine. The lock is
never held across an await.
"""

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from models.enums import JobStatus
from scheduler.job import QueuedJob


@dataclass(frozen=True)
class PendingJobView:
    """Read-only copy of a pending job for admin / observability use."""
    position: int
    job_id: str
    owner_id: Any
    job_type: str
    submitted_at: datetime
    attempts: int
    max_attempts: int
    wait_seconds: float
    status: JobStatus             # QUEUED, or RETRYING once an attempt has failed


class QueueStore:

    def __init__(self):
        self._pending: deque[QueuedJob] = deque()
        self._current: Optional[QueuedJob] = None
        self.lock = threading.RLock()

    def enqueue(self, job: QueuedJob) -> None:
        with self.lock:
            self._pending.append(job)

    def dequeue_front(self) -> Optional[QueuedJob]:
        """Remove and return the first pending job, or None if the list is empty."""
        with self.lock:
            return self._pending.popleft() if self._pending else None

    def requeue_front(self, job: QueuedJob) -> None:
        with self.lock:
            self._pending.appendleft(job)

    def remove_by_owner(self, owner_id) -> bool:
        """
        Drop every pending job of this owner. Returns whether anything was removed.

        The current job is not in the pending list, so it is never affected.
        """
        with self.lock:
            before = len(self._pending)
            self._pending = deque(j for j in self._pending if j.owner_id != owner_id)
            return len(self._pending) != before

    def position_of(self, owner_id) -> int:
        """1-based position of the owner's first pending job, 0 if none is pending."""
        with self.lock:
            for index, job in enumerate(self._pending):
                if job.owner_id == owner_id:
                    return index + 1
            return 0

    def snapshot(self, now: Optional[datetime] = None) -> list[PendingJobView]:
        now = now or datetime.now(timezone.utc)
        with self.lock:
            return [
                PendingJobView(
                    position=index + 1,
                    job_id=job.id,
                    owner_id=job.owner_id,
                    job_type=job.job_type,
                    submitted_at=job.submitted_at,
                    attempts=job.attempts,
                    max_attempts=job.max_attempts,
                    wait_seconds=(now - job.submitted_at).total_seconds(),
                    status=JobStatus.RETRYING if job.attempts else JobStatus.QUEUED,
                )
                for index, job in enumerate(self._pending)
            ]

    def clear(self) -> int:
        """Drop all pending jobs (owners are not notified). Returns how many were dropped."""
        with self.lock:
            cleared = len(self._pending)
            self._pending.clear()
            return cleared

    def size(self) -> int:
        with self.lock:
            return len(self._pending)

    @property
    def current(self) -> Optional[QueuedJob]:
        with self.lock:
            return self._current

    def set_current(self, job: Optional[QueuedJob]) -> None:
        with self.lock:
            self._current = job
