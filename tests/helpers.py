"""
Small handlers and channels shared by the queue tests.

They record what happened (call order, overlap, messages) so tests can
assert on the queue's behaviour without timing guesswork.
"""

import asyncio

from jobs.base import AbstractJobHandler
from scheduler.events import QueueEvent, QueueListener
from worker.reply import ReplyChannel

ADMIN_HEADERS = {"X-Admin-Key": "test-admin-key"}


class ConcurrencyTracker:
    """Counts handlers running right now and the highest count ever seen."""

    def __init__(self):
        self.active = 0
        self.max_active = 0

    def enter(self) -> None:
        self.active += 1
        self.max_active = max(self.max_active, self.active)

    def exit(self) -> None:
        self.active -= 1


class RecordingHandler(AbstractJobHandler):
    """Succeeds after `delay` seconds, appending each payload to `calls`."""

    def __init__(self, delay: float = 0.0, tracker: ConcurrencyTracker | None = None):
        self.delay = delay
        self.tracker = tracker
        self.calls: list = []

    async def run(self, payload) -> dict:
        if self.tracker:
            self.tracker.enter()
        try:
            self.calls.append(payload)
            await asyncio.sleep(self.delay)
            return {"payload": payload}
        finally:
            if self.tracker:
                self.tracker.exit()

    @property
    def job_type(self) -> str:
        return "recording"


class FlakyHandler(AbstractJobHandler):
    """Fails the first `failures` calls, then succeeds."""

    def __init__(self, failures: int, calls: list | None = None):
        self.failures = failures
        self.calls = calls if calls is not None else []

    async def run(self, payload) -> dict:
        self.calls.append(payload)
        if len(self.calls) <= self.failures:
            raise RuntimeError(f"flaky failure #{len(self.calls)}")
        return {"ok": True}

    @property
    def job_type(self) -> str:
        return "flaky"


class BlockingHandler(AbstractJobHandler):
    """Runs until `release` is set. `started` is set as soon as it begins."""

    def __init__(self):
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def run(self, payload) -> dict:
        self.started.set()
        await self.release.wait()
        return {"released": True}

    @property
    def job_type(self) -> str:
        return "blocking"


class RecordingReplyChannel(ReplyChannel):

    def __init__(self, fail: bool = False):
        self.messages: list[str] = []
        self.fail = fail

    async def send(self, text: str) -> None:
        if self.fail:
            raise ConnectionError("chat API unreachable")
        self.messages.append(text)


class RecordingListener(QueueListener):

    def __init__(self):
        self.events: list[QueueEvent] = []

    async def handle(self, event: QueueEvent) -> None:
        self.events.append(event)

    def types_for(self, job_id: str) -> list[str]:
        return [e.type.value for e in self.events if e.job_id == job_id]


async def wait_until_running(queue, timeout: float = 1.0) -> None:
    """Wait until the scheduler loop has picked up a job."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while queue.get_stats().current_job_id is None:
        if loop.time() > deadline:
            raise AssertionError("no job started")
        await asyncio.sleep(0.005)
