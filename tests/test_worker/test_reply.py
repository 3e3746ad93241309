"""Tests for the reply channels."""

import json

import httpx
import pytest

from worker.reply import LogReplyChannel, WebhookReplyChannel


@pytest.mark.asyncio
async def test_webhook_posts_owner_and_text():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        channel = WebhookReplyChannel("http://hooks.test/notify", 42, client=client)
        await channel.send("hello")

    assert len(requests) == 1
    assert str(requests[0].url) == "http://hooks.test/notify"
    assert json.loads(requests[0].content) == {"owner_id": "42", "text": "hello"}


@pytest.mark.asyncio
async def test_webhook_raises_on_error_status():
    transport = httpx.MockTransport(lambda request: httpx.Response(500))

    async with httpx.AsyncClient(transport=transport) as client:
        channel = WebhookReplyChannel("http://hooks.test/notify", "u1", client=client)
        with pytest.raises(httpx.HTTPStatusError):
            await channel.send("hello")


@pytest.mark.asyncio
async def test_log_channel_writes_to_log(caplog):
    with caplog.at_level("INFO", logger="worker.reply"):
        await LogReplyChannel("u1").send("you're in queue")

    assert "Reply to owner u1: you're in queue" in caplog.text
