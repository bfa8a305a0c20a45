"""Shared fixtures for the chatgate test suite.

Upstream providers are simulated with ``httpx.MockTransport``; every request
the client sends is recorded so tests can assert on URLs, headers and bodies
(and on the absence of any request for configuration errors).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Iterator, List, Tuple

import httpx
import pytest

from chatgate.base.http import HttpTransport
from chatgate.base.logging import get_logger
from chatgate.config import GatewayConfig
from chatgate.service.client import ChatClient


class Upstream:
    """Callable MockTransport handler that records every request."""

    def __init__(self, handler: Callable[[httpx.Request], Any]) -> None:
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> Any:
        self.requests.append(request)
        return self.handler(request)

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)


def _sse(*chunks: Any) -> bytes:
    lines = []
    for chunk in chunks:
        data = chunk if isinstance(chunk, str) else json.dumps(chunk)
        lines.append(f"data: {data}\n\n")
    return "".join(lines).encode("utf-8")


@pytest.fixture()
def sse() -> Callable[..., bytes]:
    """Encode chunks (dicts or raw strings) as an SSE body."""
    return _sse


@pytest.fixture()
def make_client() -> Callable[..., Tuple[ChatClient, Upstream]]:
    """Build a ``ChatClient`` whose transport answers through ``handler``.

    Keyword arguments other than ``registry`` become ``GatewayConfig`` fields.
    """

    def _make(handler: Callable[[httpx.Request], Any], *, registry=None, **config_fields: Any):
        upstream = Upstream(handler)
        transport = HttpTransport(httpx.AsyncClient(transport=httpx.MockTransport(upstream)))
        client = ChatClient(GatewayConfig(**config_fields), registry=registry, transport=transport)
        return client, upstream

    return _make


class _ListHandler(logging.Handler):
    """Capture formatted log messages into a list."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: List[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


@pytest.fixture()
def chatgate_logs() -> Iterator[List[str]]:
    """Messages logged under the ``chatgate`` logger tree during the test.

    The shared logger does not propagate to the root logger, so ``caplog``
    cannot see it; a handler is attached directly instead.
    """
    logger = get_logger("chatgate")
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        yield handler.messages
    finally:
        logger.removeHandler(handler)


def events_named(messages: List[str], event: str) -> List[dict]:
    out = []
    for msg in messages:
        try:
            data = json.loads(msg)
        except ValueError:
            continue
        if data.get("event") == event:
            out.append(data)
    return out


@pytest.fixture()
def log_events() -> Callable[[List[str], str], List[dict]]:
    """Filter captured log messages down to decoded events with a given name."""
    return events_named
