"""
Retry policy — decides what happens when an attempt fails.

Two outcomes:
1. attempts < max_attempts  → put the job back at the FRONT of the pending list
2. attempts >= max_attempts → terminal failure, the job is dropped

Lifecycle on failure:
    current → (error) → attempts++ → front of pending list  (if attempts left)
    current → (error) → attempts++ → resolved as FAILED     (if exhausted)

There is no per-job backoff: the loop's fixed cool-down between jobs is
the only delay before a retry runs.
"""

import logging

from scheduler.job import QueuedJob
from scheduler.store import QueueStore

logger = logging.getLogger(__name__)


class RetryPolicy:

    def __init__(self, store: QueueStore):
        self._store = store

    def handle_failure(self, job: QueuedJob, error_msg: str | None = None) -> bool:
        """
        Record a failed attempt and requeue the job if it has attempts left.

        Returns True if the job was requeued, False if it failed terminally.
        """
        job.attempts += 1

        if job.attempts < job.max_attempts:
            self._store.requeue_front(job)
            logger.info(
                f"Job {job.id} will be retried "
                f"(attempt {job.attempts + 1}/{job.max_attempts})"
            )
            return True

        logger.warning(
            f"Job {job.id} exhausted attempts ({job.max_attempts}): {error_msg}"
        )
        return False
