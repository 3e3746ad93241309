"""
Job admission endpoints.

POST   /jobs/                   → Admit a conversion job (returns before it runs)
GET    /jobs/history            → Finished jobs with filtering + pagination
GET    /jobs/position/{owner}   → Owner's place in the pending list
DELETE /jobs/owner/{owner}      → Cancel all of the owner's PENDING jobs

Admission flow:
1. Credit check (402 if the owner has nothing left)
2. Look up the handler for job_type, wrap it so one credit is spent when the job starts
3. Hand it to the queue — one place in line, no waiting

A job that is already executing can't be cancelled; it runs to
completion or exhausts its attempts.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from accounts.credits import CreditLedger
from api.dependencies import get_db, get_ledger, get_queue
from api.schemas.job import (
    JobHistoryResponse,
    JobRecordResponse,
    JobSubmit,
    JobSubmitResponse,
    QueuePosition,
)
from jobs.charging import ChargingHandler
from jobs.registry import get_job_handler
from models.enums import JobStatus
from models.job import JobRecord
from scheduler.service import ConversionQueue
from worker.reply import LogReplyChannel, WebhookReplyChannel

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("/", response_model=JobSubmitResponse, status_code=202)
async def submit_job(
    job_in: JobSubmit,
    queue: ConversionQueue = Depends(get_queue),
    ledger: CreditLedger = Depends(get_ledger),
) -> JobSubmitResponse:
    """
    Admit a new conversion job.

    202 Accepted: the job is queued, not done. Its outcome shows up in
    /jobs/history; the completion or failure notice also goes to callback_url if given.
    """
    if not await ledger.has_enough_credits(job_in.owner_id):
        raise HTTPException(
            status_code=402,
            detail="No credits remaining. Credits reset daily at 00:00 UTC.",
        )

    handler = ChargingHandler(
        get_job_handler(job_in.job_type.value), ledger, job_in.owner_id
    )
    if job_in.callback_url is not None:
        reply = WebhookReplyChannel(str(job_in.callback_url), job_in.owner_id)
    else:
        reply = LogReplyChannel(job_in.owner_id)

    receipt = queue.submit(
        job_in.owner_id,
        job_in.payload,
        handler,
        max_attempts=job_in.max_attempts,
        reply=reply,
        job_type=job_in.job_type.value,
    )
    return JobSubmitResponse.model_validate(receipt)


@router.get("/history", response_model=JobHistoryResponse)
async def list_history(
    owner_id: Optional[str] = Query(None, description="Filter by owner"),
    status: Optional[JobStatus] = Query(None, description="Filter by final status"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Jobs per page"),
    db: AsyncSession = Depends(get_db),
) -> JobHistoryResponse:
    """Finished jobs, newest first (OFFSET/LIMIT pagination)."""
    conditions = []
    if owner_id:
        conditions.append(JobRecord.owner_id == owner_id)
    if status:
        conditions.append(JobRecord.status == status.value)

    count_query = select(func.count(JobRecord.id))
    if conditions:
        count_query = count_query.where(*conditions)
    total = (await db.execute(count_query)).scalar() or 0

    offset = (page - 1) * page_size
    query = select(JobRecord).where(*conditions) if conditions else select(JobRecord)
    query = query.order_by(JobRecord.id.desc()).offset(offset).limit(page_size)
    records = (await db.execute(query)).scalars().all()

    return JobHistoryResponse(
        jobs=[JobRecordResponse.model_validate(r) for r in records],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/position/{owner_id}", response_model=QueuePosition)
async def get_position(
    owner_id: str,
    queue: ConversionQueue = Depends(get_queue),
) -> QueuePosition:
    return QueuePosition(owner_id=owner_id, position=queue.position_of(owner_id))


@router.delete("/owner/{owner_id}", status_code=204)
async def cancel_owner_jobs(
    owner_id: str,
    queue: ConversionQueue = Depends(get_queue),
) -> None:
    """Remove the owner's pending jobs. 404 if there was nothing pending."""
    if not queue.remove_by_owner(owner_id):
        raise HTTPException(
            status_code=404,
            detail=f"No pending jobs for owner {owner_id}",
        )
