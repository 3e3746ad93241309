"""
QueuedJob — one admitted conversion request plus its retry bookkeeping.

Lifecycle (a job is always in exactly ONE of these places):

    admitted ──> pending list ──> current (executing) ──> resolved
                      ^                    │
                      └── requeue_front ───┘   (failed, attempts left)

Only AdmissionGateway creates jobs. Only the scheduler loop mutates
them (attempts, position). The payload is opaque: nothing in the queue
reads or changes it, it is handed to handler.run() as-is.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from jobs.base import AbstractJobHandler
from worker.reply import ReplyChannel


def _new_job_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(eq=False)
class QueuedJob:
    owner_id: Any
    payload: Any
    handler: AbstractJobHandler
    max_attempts: int = 3
    reply: Optional[ReplyChannel] = None
    job_type: str = "custom"
    id: str = field(default_factory=_new_job_id)
    submitted_at: datetime = field(default_factory=_utcnow)
    attempts: int = 0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    @property
    def attempts_left(self) -> int:
        return self.max_attempts - self.attempts

    def __repr__(self) -> str:
        return (
            f"<QueuedJob {self.id} [{self.job_type}] owner={self.owner_id} "
            f"attempts={self.attempts}/{self.max_attempts}>"
        )
