"""
Admin endpoints — read the queue, manage the pending list, top up credits.

GET    /admin/stats        → counters + live queue state
GET    /admin/status       → the same as a plain-text status message
GET    /admin/queue        → detailed pending list with wait times
DELETE /admin/queue        → drop every pending job (owners are NOT notified)
GET    /admin/dead-letter  → jobs that exhausted all attempts
POST   /admin/credits      → add paid credits to an existing owner

None of these touch the job that is currently executing. Every route
requires the X-Admin-Key header (see require_admin in api/dependencies.py).
"""

import json

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse
from redis.asyncio import Redis

from accounts.credits import AccountNotFoundError, CreditLedger
from api.dependencies import get_ledger, get_queue, get_redis, require_admin
from api.routers.credits import to_response
from api.schemas.credits import AddCredits, CreditAccountResponse
from api.schemas.queue import ClearQueueResponse, PendingJobResponse, QueueStatsResponse
from scheduler.service import ConversionQueue
from worker.listeners import DeadLetterRecorder

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/stats", response_model=QueueStatsResponse)
async def get_stats(queue: ConversionQueue = Depends(get_queue)) -> QueueStatsResponse:
    return QueueStatsResponse.model_validate(queue.get_stats())


@router.get("/status", response_class=PlainTextResponse)
async def get_status(queue: ConversionQueue = Depends(get_queue)) -> PlainTextResponse:
    return PlainTextResponse(queue.get_status_message())


@router.get("/queue", response_model=list[PendingJobResponse])
async def get_detailed_queue(
    queue: ConversionQueue = Depends(get_queue),
) -> list[PendingJobResponse]:
    return [
        PendingJobResponse(
            position=view.position,
            job_id=view.job_id,
            owner_id=str(view.owner_id),
            job_type=view.job_type,
            submitted_at=view.submitted_at,
            attempts=view.attempts,
            max_attempts=view.max_attempts,
            wait_seconds=round(view.wait_seconds, 3),
            status=view.status,
        )
        for view in queue.get_detailed_queue()
    ]


@router.delete("/queue", response_model=ClearQueueResponse)
async def clear_queue(queue: ConversionQueue = Depends(get_queue)) -> ClearQueueResponse:
    return ClearQueueResponse(cleared=queue.clear_queue())


@router.get("/dead-letter")
async def get_dead_letter_jobs(redis: Redis = Depends(get_redis)) -> list[dict]:
    """List all jobs that failed terminally."""
    raw_entries = await redis.lrange(DeadLetterRecorder.REDIS_DLQ_KEY, 0, -1)
    return [json.loads(entry) for entry in raw_entries]


@router.post("/credits", response_model=CreditAccountResponse)
async def add_credits(
    body: AddCredits,
    ledger: CreditLedger = Depends(get_ledger),
) -> CreditAccountResponse:
    try:
        account = await ledger.add_paid_credits(body.owner_id, body.credits)
    except AccountNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return to_response(account)
