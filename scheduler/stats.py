"""
Queue statistics — process-wide counters for admin tooling.

Updated exactly once per TERMINAL outcome:
- success          → processed += 1, running average gets a new sample
- attempts exhausted → failed += 1 (no processing-time sample)
Retries don't touch the counters at all.

The scheduler loop writes, anyone reads (API threads included). A lock
around every write and around snapshot() means a reader never sees a
processed count that doesn't match the average.
"""

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable


@dataclass(frozen=True)
class StatsSnapshot:
    processed: int
    failed: int
    average_processing_time_ms: float
    started_at: datetime
    uptime_seconds: float


class QueueStatistics:

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._lock = threading.Lock()
        self._clock = clock
        self._processed = 0
        self._failed = 0
        self._average_ms = 0.0
        self._started_monotonic = clock()
        self.start_time = datetime.now(timezone.utc)

    def record_success(self, duration_ms: float) -> None:
        with self._lock:
            self._processed += 1
            n = self._processed
            self._average_ms = (self._average_ms * (n - 1) + duration_ms) / n

    def record_failure(self) -> None:
        with self._lock:
            self._failed += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(
                processed=self._processed,
                failed=self._failed,
                average_processing_time_ms=self._average_ms,
                started_at=self.start_time,
                uptime_seconds=self._clock() - self._started_monotonic,
            )
