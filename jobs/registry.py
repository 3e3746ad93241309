"""
Job handler registry — maps job_type strings to handler instances.

The HTTP admission endpoint receives a job_type ("image_convert", "sleep")
but needs the actual handler object to hand to the queue.
This registry does that lookup.
"""

from jobs.base import AbstractJobHandler
from jobs.image_convert import ImageConvertJob
from jobs.sleep_job import SleepJob

# Each handler is instantiated once and reused (they're stateless)
_REGISTRY: dict[str, AbstractJobHandler] = {}


def register_handler(handler: AbstractJobHandler) -> None:
    """Add (or replace) a handler under its job_type."""
    _REGISTRY[handler.job_type] = handler


def _register_defaults() -> None:
    for handler_cls in [ImageConvertJob, SleepJob]:
        register_handler(handler_cls())


_register_defaults()


def get_job_handler(job_type: str) -> AbstractJobHandler:
    """Look up a handler by job_type string. Raises ValueError if unknown."""
    handler = _REGISTRY.get(job_type)
    if handler is None:
        raise ValueError(
            f"Unknown job type: '{job_type}'. Available: {list(_REGISTRY.keys())}"
        )
    return handler
