"""
JobRecord ORM model — maps to the "job_history" table.

The queue itself is in-memory; this table only keeps the terminal outcome
of each job (one row per job, written after success or after the last
failed attempt) so admins can look back at what ran.

Key design decisions:
- job_id is the queue's own uuid string, not a database-generated key
- JSON (JSONB on Postgres) for the handler result: each job type returns different data
- attempts + max_attempts: shows how much retrying a job needed
"""

from datetime import datetime

from sqlalchemy import JSON, String, Integer, Float, DateTime, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base
from models.enums import JobStatus


class JobRecord(Base):
    __tablename__ = "job_history"

    # ── Identity ────────────────────────────────────────────────
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    job_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    job_type: Mapped[str] = mapped_column(String(50), nullable=False)

    # ── Outcome ─────────────────────────────────────────────────
    status: Mapped[str] = mapped_column(
        String(20), default=JobStatus.SUCCEEDED.value, nullable=False, index=True
    )
    result: Mapped[dict | None] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=True
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    processing_time_ms: Mapped[float | None] = mapped_column(Float, nullable=True)

    # ── Retry tracking ──────────────────────────────────────────
    attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    max_attempts: Mapped[int] = mapped_column(Integer, default=3, nullable=False)

    # ── Timestamps ──────────────────────────────────────────────
    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    finished_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<JobRecord {self.job_id} [{self.job_type}] {self.status}>"
