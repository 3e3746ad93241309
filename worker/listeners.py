"""
Queue listeners — every side effect of a job's lifecycle lives here.

The scheduler loop only emits events (scheduler/events.py). These
listeners turn them into:

    OwnerNotifier       JOB_QUEUED    → "you're in queue" notice
                        JOB_SUCCEEDED → "conversion completed" notice
                        JOB_FAILED    → "conversion failed" notice
    DeadLetterRecorder  JOB_FAILED  → JSON entry on a Redis list
    HistoryRecorder     JOB_SUCCEEDED / JOB_FAILED → job_history row

Retries stay silent to the owner: the only messages they ever get from
the queue are the admission notice and one notice for the final outcome.

The dead-letter list works like the old scheduler's DLQ: someone reviews
it and either fixes the cause and resubmits, or clears it.
"""

import json
import logging
from datetime import datetime, timezone

from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import async_sessionmaker

from models.enums import JobStatus, QueueEventType
from models.job import JobRecord
from scheduler.events import QueueEvent, QueueListener

logger = logging.getLogger(__name__)

QUEUED_MESSAGE = (
    "You're in queue!\n\n"
    "Jobs ahead of you: {jobs_ahead}\n"
    "Estimated wait: ~{estimated_wait_seconds}s\n\n"
    "Your file will be processed automatically."
)
FAILED_MESSAGE = (
    "Conversion failed after multiple attempts. "
    "Please try again with a different file."
)
COMPLETED_MESSAGE = "Conversion completed!\n\nProcessed in {processing_seconds}s"
CREDITS_LINE = "\nCredits remaining: {credits_remaining}"


def completed_message(event: QueueEvent) -> str:
    text = COMPLETED_MESSAGE.format(processing_seconds=round((event.duration_ms or 0) / 1000))
    credits_remaining = (event.result or {}).get("credits_remaining")
    if credits_remaining is not None:
        text += CREDITS_LINE.format(credits_remaining=credits_remaining)
    return text


class OwnerNotifier(QueueListener):

    async def handle(self, event: QueueEvent) -> None:
        if event.type == QueueEventType.JOB_QUEUED:
            text = QUEUED_MESSAGE.format(
                jobs_ahead=event.jobs_ahead,
                estimated_wait_seconds=event.estimated_wait_seconds,
            )
        elif event.type == QueueEventType.JOB_SUCCEEDED:
            text = completed_message(event)
        elif event.type == QueueEventType.JOB_FAILED:
            text = FAILED_MESSAGE
        else:
            return

        reply = event.job.reply
        if reply is None:
            return

        try:
            await reply.send(text)
        except Exception as e:
            logger.error(f"Failed to send message to owner {event.owner_id}: {e}")


class DeadLetterRecorder(QueueListener):

    REDIS_DLQ_KEY = "convertqueue:dead_letter"

    def __init__(self, redis_client: Redis):
        self._redis = redis_client

    async def handle(self, event: QueueEvent) -> None:
        if event.type != QueueEventType.JOB_FAILED:
            return

        dlq_entry = json.dumps({
            "job_id": event.job_id,
            "owner_id": str(event.owner_id),
            "job_type": event.job.job_type,
            "error": event.error,
            "attempts": event.attempts,
            "failed_at": datetime.now(timezone.utc).isoformat(),
        })
        await self._redis.rpush(self.REDIS_DLQ_KEY, dlq_entry)
        logger.warning(f"Job {event.job_id} moved to dead-letter queue")


class HistoryRecorder(QueueListener):

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def handle(self, event: QueueEvent) -> None:
        if event.type == QueueEventType.JOB_SUCCEEDED:
            status = JobStatus.SUCCEEDED
        elif event.type == QueueEventType.JOB_FAILED:
            status = JobStatus.FAILED
        else:
            return

        record = JobRecord(
            job_id=event.job_id,
            owner_id=str(event.owner_id),
            job_type=event.job.job_type,
            status=status.value,
            result=event.result,
            error_message=event.error,
            processing_time_ms=event.duration_ms,
            # failed attempts so far, plus the successful one
            attempts=event.attempts + 1 if status == JobStatus.SUCCEEDED else event.attempts,
            max_attempts=event.job.max_attempts,
            submitted_at=event.job.submitted_at,
            finished_at=event.occurred_at,
        )
        async with self._session_factory() as session:
            session.add(record)
            await session.commit()
