"""
Shared enumerations used across the entire project.

Using Python enums (inheriting from str) means:
- They serialize to JSON automatically ("SUCCEEDED", not "JobStatus.SUCCEEDED")
- They work as SQLAlchemy column values
- They work as FastAPI query parameters
- Typos become immediate errors instead of silent bugs
"""

import enum


class JobStatus(str, enum.Enum):
    QUEUED = "QUEUED"          # admitted, waiting in the pending list
    RETRYING = "RETRYING"      # failed, put back at the front of the queue
    SUCCEEDED = "SUCCEEDED"    # handler finished successfully
    FAILED = "FAILED"          # exhausted all attempts


class JobType(str, enum.Enum):
    IMAGE_CONVERT = "image_convert"  # image format conversion via Pillow
    SLEEP = "sleep"                  # simulated workload (duration + failure rate)


class QueueState(str, enum.Enum):
    IDLE = "idle"              # nothing pending, no drain task running
    DRAINING = "draining"      # busy flag set, the single worker is active


class QueueEventType(str, enum.Enum):
    JOB_QUEUED = "job_queued"          # admitted behind other jobs
    JOB_STARTED = "job_started"
    JOB_RETRYING = "job_retrying"
    JOB_SUCCEEDED = "job_succeeded"
    JOB_FAILED = "job_failed"          # terminal, attempts exhausted
