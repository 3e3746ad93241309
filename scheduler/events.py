"""
Structured queue events and the bus that delivers them to listeners.

The scheduler loop and the admission gateway only EMIT events. Anything
with a side effect (chat messages, dead-letter entries, history rows)
lives in a listener — see worker/listeners.py.

A listener that raises is logged and skipped; it never reaches the
scheduler loop, and the remaining listeners still get the event.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional

from models.enums import QueueEventType
from scheduler.job import QueuedJob

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueueEvent:
    type: QueueEventType
    job: QueuedJob
    attempts: int = 0                 # attempts so far, copied at emission time
    duration_ms: Optional[float] = None
    result: Optional[dict] = None
    error: Optional[str] = None
    jobs_ahead: int = 0
    estimated_wait_seconds: int = 0
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def job_id(self) -> str:
        return self.job.id

    @property
    def owner_id(self):
        return self.job.owner_id


class QueueListener(ABC):

    @abstractmethod
    async def handle(self, event: QueueEvent) -> None:
        ...


class EventBus:

    def __init__(self, listeners: Iterable[QueueListener] = ()):
        self._listeners: list[QueueListener] = list(listeners)

    def subscribe(self, listener: QueueListener) -> None:
        self._listeners.append(listener)

    async def publish(self, event: QueueEvent) -> None:
        for listener in list(self._listeners):
            try:
                await listener.handle(event)
            except Exception as e:
                logger.error(
                    f"Listener {type(listener).__name__} failed on "
                    f"{event.type.value} for job {event.job_id}: {e}",
                    exc_info=True,
                )
