"""
Reply channels — how the queue's listeners talk back to a job's owner.

The queue doesn't know about chat platforms. A caller attaches a
ReplyChannel to the job at admission time; OwnerNotifier uses it for
the "you're in queue" notice and the terminal-failure notice.

Two implementations ship here:
- LogReplyChannel: writes the message to the log (default for callers with no transport)
- WebhookReplyChannel: POSTs {"owner_id", "text"} to a callback URL with httpx
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class ReplyChannel(ABC):

    @abstractmethod
    async def send(self, text: str) -> None:
        """Deliver text to the owner. May raise; callers treat delivery as best effort."""
        ...


class LogReplyChannel(ReplyChannel):

    def __init__(self, owner_id):
        self._owner_id = owner_id

    async def send(self, text: str) -> None:
        logger.info(f"Reply to owner {self._owner_id}: {text}")


class WebhookReplyChannel(ReplyChannel):

    def __init__(
        self,
        url: str,
        owner_id,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.url = url
        self._owner_id = owner_id
        self._client = client
        self._timeout = timeout

    async def send(self, text: str) -> None:
        body = {"owner_id": str(self._owner_id), "text": text}
        if self._client is not None:
            resp = await self._client.post(self.url, json=body)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(self.url, json=body)
        resp.raise_for_status()
