"""
Pydantic schemas for the /jobs endpoints.

These are NOT database models — they define the HTTP API contract:
- JobSubmit: what a caller sends to admit a conversion job (request body)
- JobSubmitResponse: the immediate receipt (job id + queue position)
- QueuePosition: an owner's current place in the pending list
- JobRecordResponse / JobHistoryResponse: finished jobs from job_history

FastAPI validates incoming data against these automatically.
If someone sends max_attempts=99, FastAPI returns a 422 error before our code even runs.
"""

from pydantic import AnyHttpUrl, BaseModel, Field
from typing import Optional
from datetime import datetime

from models.enums import JobType


class JobSubmit(BaseModel):
    """Request body for POST /jobs/."""

    owner_id: str = Field(..., min_length=1, max_length=64, examples=["123456789"])
    job_type: JobType  # must be one of: image_convert, sleep
    payload: dict = Field(
        default_factory=dict,
        examples=[{"input_path": "/data/photo.png", "target_format": "jpg"}],
    )
    max_attempts: Optional[int] = Field(
        default=None,
        ge=1,
        le=10,
        description="Defaults to DEFAULT_MAX_ATTEMPTS (3)",
    )
    callback_url: Optional[AnyHttpUrl] = Field(
        default=None,
        description="Queue notices and failure messages are POSTed here",
    )


class JobSubmitResponse(BaseModel):
    """Response body for POST /jobs/ — returned before the job runs."""

    job_id: str
    position: int
    jobs_ahead: int
    estimated_wait_seconds: int

    model_config = {"from_attributes": True}


class QueuePosition(BaseModel):
    owner_id: str
    position: int  # 0 = nothing pending for this owner


class JobRecordResponse(BaseModel):
    """One finished job from the history table."""

    job_id: str
    owner_id: str
    job_type: str
    status: str
    result: Optional[dict] = None
    error_message: Optional[str] = None
    processing_time_ms: Optional[float] = None
    attempts: int
    max_attempts: int
    submitted_at: datetime
    finished_at: datetime

    model_config = {"from_attributes": True}


class JobHistoryResponse(BaseModel):
    """Paginated list of finished jobs — returned by GET /jobs/history."""

    jobs: list[JobRecordResponse]
    total: int
    page: int
    page_size: int
