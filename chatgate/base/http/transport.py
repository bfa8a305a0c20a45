"""Async HTTP transport for provider calls.

Purpose:
    Send one request per logical call through a shared ``httpx.AsyncClient``
    and convert every failure into a :class:`ProviderError`. The transport
    never retries.

External dependencies:
    - ``httpx`` (async client, streaming responses).

Timeout strategy:
    Each call passes its own read timeout (see ``timeouts.timeout_for_model``).
    It is applied as ``httpx.Timeout(read=...)``; for streams this is the
    longest wait for the next chunk. Connect timeout comes from
    :func:`get_timeout_config`.

Cancellation:
    ``stream_lines`` checks the optional :class:`CancellationToken` before
    yielding each line. Task cancellation (``asyncio.CancelledError``) unwinds
    through the ``async with`` block, which closes the response and returns
    the connection to the pool.

Testing:
    Inject ``httpx.AsyncClient(transport=httpx.MockTransport(handler))``.
"""
from __future__ import annotations

import contextlib
from typing import Any, AsyncIterator, Mapping, Optional

import httpx

from ..cancellation import CancellationToken, CancelledError
from ..errors import ErrorCode, ProviderError, error_from_exception, error_from_response
from ..timeouts import get_timeout_config


def _timeout(read_seconds: float) -> httpx.Timeout:
    cfg = get_timeout_config()
    return httpx.Timeout(read_seconds, connect=cfg.connect_seconds)


class HttpTransport:
    """Thin wrapper over ``httpx.AsyncClient`` with gateway error semantics."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=_timeout(get_timeout_config().default_seconds))
        return self._client

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        json: Any = None,
        timeout: float,
        provider: str,
        model: Optional[str] = None,
    ) -> httpx.Response:
        """Send a buffered request; non-2xx responses raise ``ProviderError``."""
        try:
            response = await self.client.request(method, url, headers=dict(headers), json=json, timeout=_timeout(timeout))
        except httpx.HTTPError as exc:
            raise error_from_exception(exc, provider=provider, model=model) from exc
        if response.status_code >= 400:
            raise error_from_response(response.status_code, response.text, provider=provider, model=model)
        return response

    async def send_json(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        json: Any = None,
        timeout: float,
        provider: str,
        model: Optional[str] = None,
    ) -> Any:
        """Like :meth:`send` but decode the body as JSON (``MALFORMED`` if it is not)."""
        response = await self.send(
            method, url, headers=headers, json=json, timeout=timeout, provider=provider, model=model
        )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(
                code=ErrorCode.MALFORMED,
                message=f"invalid JSON from upstream: {response.text[:200]}",
                provider=provider,
                model=model,
                status=response.status_code,
                raw=response.text,
            ) from exc

    async def stream_lines(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str],
        json: Any = None,
        timeout: float,
        provider: str,
        model: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> AsyncIterator[str]:
        """Yield response lines of a streamed request.

        Error statuses are detected before the first line: the body is read
        in full and raised as a ``ProviderError`` carrying the upstream
        message.
        """
        try:
            async with self.client.stream(
                method, url, headers=dict(headers), json=json, timeout=_timeout(timeout)
            ) as response:
                if response.status_code >= 400:
                    body = await response.aread()
                    raise error_from_response(
                        response.status_code,
                        body.decode("utf-8", errors="replace"),
                        provider=provider,
                        model=model,
                    )
                async for line in response.aiter_lines():
                    if token is not None:
                        token.raise_if_cancelled()
                    yield line
        except (ProviderError, CancelledError):
            raise
        except httpx.HTTPError as exc:
            raise error_from_exception(exc, provider=provider, model=model) from exc


@contextlib.asynccontextmanager
async def transport_scope(client: Optional[httpx.AsyncClient] = None) -> AsyncIterator[HttpTransport]:
    """Create a transport and close it on exit (CLI and tests)."""
    transport = HttpTransport(client)
    try:
        yield transport
    finally:
        await transport.aclose()


__all__ = ["HttpTransport", "transport_scope"]
