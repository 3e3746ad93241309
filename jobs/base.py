"""
Abstract base class for job handlers.

Each job type (image_convert, sleep) implements this interface.
The queue calls `await handler.run(payload)` without knowing which type
it is and without looking inside the payload. Callers either pass a
handler instance directly to the queue or look one up from the
registry by job_type string.

Same Strategy pattern as before:
- AbstractJobHandler = interface
- ImageConvertJob, SleepJob = implementations
- registry.py = factory lookup

To add a new job type:
1. Create a class that inherits AbstractJobHandler
2. Implement run() and job_type
3. Add it to the registry
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

PayloadT = TypeVar("PayloadT")


class AbstractJobHandler(ABC, Generic[PayloadT]):

    @abstractmethod
    async def run(self, payload: PayloadT) -> dict[str, Any]:
        """
        Execute the job.

        Args:
            payload: job-specific parameters. The queue never inspects
                     or mutates it; each job type expects different keys.

        Returns:
            dict with results — stored in the job history.

        Raises:
            Any exception → the scheduler loop retries the job until
            max_attempts is reached.
        """
        ...

    @property
    @abstractmethod
    def job_type(self) -> str:
        """Unique identifier matching JobType enum (e.g., 'sleep', 'image_convert')."""
        ...
