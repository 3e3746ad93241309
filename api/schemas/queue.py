"""
Pydantic schemas for the /admin queue endpoints.

QueueStatsResponse: counters + live queue state.
PendingJobResponse: one entry of the detailed pending list.
ClearQueueResponse: how many pending jobs were dropped.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from models.enums import JobStatus


class QueueStatsResponse(BaseModel):
    processed: int
    failed: int
    average_processing_time_ms: int
    current_queue_length: int
    is_processing: bool
    current_job_id: Optional[str] = None
    uptime_seconds: int
    started_at: datetime
    success_rate: float

    model_config = {"from_attributes": True}


class PendingJobResponse(BaseModel):
    position: int
    job_id: str
    owner_id: str
    job_type: str
    submitted_at: datetime
    attempts: int
    max_attempts: int
    wait_seconds: float
    status: JobStatus


class ClearQueueResponse(BaseModel):
    cleared: int
