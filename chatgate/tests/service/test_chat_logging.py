"""Structured chat logs: lifecycle events present, secrets never in clear."""
from __future__ import annotations

import asyncio

import httpx
import pytest

from chatgate.base.models import CallSettings, ChatRequest, Credentials

SECRET = "sk-live-supersecret-0042"
GOOGLE_SECRET = "AIza-google-secret-0042"


def _ok(sse_body):
    return lambda request: httpx.Response(200, content=sse_body, headers={"content-type": "text/event-stream"})


@pytest.mark.asyncio
async def test_start_and_finalize_events_mask_credentials(make_client, sse, chatgate_logs, log_events):
    body = sse({"choices": [{"delta": {"content": "hi"}}]}, {"choices": [{"delta": {}, "finish_reason": "stop"}]})
    client, _ = make_client(_ok(body))
    await client.chat(ChatRequest.simple("gpt-4o-mini", "hi"), CallSettings("openai", Credentials(api_key=SECRET))).wait()

    start = log_events(chatgate_logs, "chat.start")
    assert len(start) == 1
    assert start[0]["phase"] == "start"
    assert start[0]["provider"] == "openai"
    assert start[0]["credential_source"] == "caller"
    assert start[0]["credential"] == "sk-…42"
    final = log_events(chatgate_logs, "chat.finalize")
    assert len(final) == 1
    assert final[0]["emitted"] is True
    assert final[0]["finish_reason"] == "stop"
    assert final[0]["emitted_count"] == 1
    assert final[0]["request_id"] == start[0]["request_id"]
    assert all(SECRET not in message for message in chatgate_logs)


@pytest.mark.asyncio
async def test_query_parameter_key_is_redacted(make_client, sse, chatgate_logs, log_events):
    body = sse({"candidates": [{"content": {"parts": [{"text": "ok"}]}, "finishReason": "STOP"}]})
    client, _ = make_client(_ok(body))
    settings = CallSettings("google", Credentials(api_key=GOOGLE_SECRET))
    await client.chat(ChatRequest.simple("gemini-2.0-flash", "hi"), settings).wait()
    start = log_events(chatgate_logs, "chat.start")[0]
    assert "key=" in start["url"]
    assert all(GOOGLE_SECRET not in message for message in chatgate_logs)


@pytest.mark.asyncio
async def test_error_event_carries_code_and_status(make_client, chatgate_logs, log_events):
    client, _ = make_client(lambda request: httpx.Response(429, json={"error": {"message": "Rate limit reached"}}))
    await client.chat(ChatRequest.simple("gpt-4o-mini", "hi"), CallSettings("openai", Credentials(api_key=SECRET))).wait()
    errors = log_events(chatgate_logs, "chat.error")
    assert len(errors) == 1
    assert errors[0]["error_code"] == "rate_limit"
    assert errors[0]["status"] == 429
    assert errors[0]["emitted"] is False
    assert all(SECRET not in message for message in chatgate_logs)


@pytest.mark.asyncio
async def test_cancel_event_is_logged(make_client, sse, chatgate_logs, log_events):
    client, _ = make_client(_ok(sse({"choices": [{"delta": {"content": "x"}}]})))
    handle = client.chat(ChatRequest.simple("gpt-4o-mini", "hi"), CallSettings("openai", Credentials(api_key=SECRET)))
    handle.cancel("stop")
    await handle.wait()
    await asyncio.sleep(0)
    canceled = log_events(chatgate_logs, "chat.canceled")
    assert len(canceled) == 1
    assert canceled[0]["reason"] == "stop"
    assert log_events(chatgate_logs, "chat.finalize") == []
