"""
Error classification helpers mapping exceptions and HTTP responses to
normalized ErrorCode values.

Implements HTTP status extraction, status-to-code mapping, upstream error
message extraction and a small message heuristic as a last resort. The
upstream error text is never rewritten: whatever the provider said ends up in
``ProviderError.message``.
"""
from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Optional

import httpx

from ..cancellation_parts.cancelled_error import CancelledError
from .error_code import ErrorCode
from .provider_error import ProviderError


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from an exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.MALFORMED,
    401: ErrorCode.UNAUTHORIZED,
    402: ErrorCode.QUOTA_EXCEEDED,
    403: ErrorCode.UNAUTHORIZED,
    408: ErrorCode.TIMEOUT,
    413: ErrorCode.MALFORMED,
    422: ErrorCode.MALFORMED,
    429: ErrorCode.RATE_LIMIT,
    504: ErrorCode.TIMEOUT,
}

_QUOTA_MARKERS = ("insufficient_quota", "quota_exceeded", "billing_hard_limit_reached")


def code_for_status(status: int, body_text: str = "") -> ErrorCode:
    """Map an HTTP status (plus body hints) to an :class:`ErrorCode`.

    A 429 whose body names an exhausted quota is reported as
    ``QUOTA_EXCEEDED`` rather than ``RATE_LIMIT``; the two need different
    handling by callers (waiting does not help the former).
    """
    lowered = body_text.lower()
    if status in (400, 403, 429) and any(marker in lowered for marker in _QUOTA_MARKERS):
        return ErrorCode.QUOTA_EXCEEDED
    if status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    return ErrorCode.UPSTREAM


def upstream_message(body_text: str, status: Optional[int] = None) -> str:
    """Extract the provider's error message from a response body.

    Recognized shapes: ``{"error": {"message": ...}}`` (OpenAI, Anthropic,
    Gemini), ``{"error": "..."}``, ``{"message": ...}`` and
    ``{"msg": ...}``. Anything else is returned as the stripped body text;
    an empty body falls back to ``"HTTP <status>"``.
    """
    text = (body_text or "").strip()
    data: Any = None
    if text:
        try:
            data = json.loads(text)
        except ValueError:
            data = None
    if isinstance(data, dict):
        err = data.get("error")
        if isinstance(err, dict) and isinstance(err.get("message"), str) and err["message"]:
            return err["message"]
        if isinstance(err, str) and err:
            return err
        for key in ("message", "msg"):
            val = data.get(key)
            if isinstance(val, str) and val:
                return val
    if text:
        return text
    return f"HTTP {status}" if status is not None else "empty response"


def error_from_response(
    status: int,
    body_text: str,
    *,
    provider: str,
    model: Optional[str] = None,
) -> ProviderError:
    """Build a :class:`ProviderError` for a non-success upstream response."""
    return ProviderError(
        code=code_for_status(status, body_text),
        message=upstream_message(body_text, status),
        provider=provider,
        model=model,
        status=status,
        raw=body_text,
    )


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:  # pragma: no cover - simple mapping
    """Substring heuristic mapping for exceptions without a status."""
    pattern_groups = (
        (ErrorCode.TIMEOUT, ("timeout", "timed out")),
        (ErrorCode.UNAUTHORIZED, ("unauthorized", "forbidden", "api key")),
        (ErrorCode.QUOTA_EXCEEDED, ("insufficient_quota", "quota")),
        (ErrorCode.UNSUPPORTED, ("unsupported", "not supported")),
        (ErrorCode.MALFORMED, ("malformed", "invalid json")),
    )
    for code, patterns in pattern_groups:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. ProviderError passthrough.
        2. Cancellation (cooperative token or asyncio task cancellation).
        3. Timeout exceptions (httpx, builtin and asyncio).
        4. HTTP status mapping.
        5. Other httpx transport errors map to ``NETWORK``.
        6. Message heuristics.
        7. ``INTERNAL`` fallback.
    """
    if isinstance(exc, ProviderError):
        return exc.code
    if isinstance(exc, (CancelledError, asyncio.CancelledError)):
        return ErrorCode.CANCELED
    if isinstance(exc, (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    status = _extract_status(exc)
    if status is not None:
        return code_for_status(status)
    if isinstance(exc, httpx.TransportError):
        return ErrorCode.NETWORK
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.INTERNAL


def error_from_exception(
    exc: BaseException,
    *,
    provider: str,
    model: Optional[str] = None,
) -> ProviderError:
    """Wrap an arbitrary exception as a :class:`ProviderError` (passthrough if already one)."""
    if isinstance(exc, ProviderError):
        return exc
    code = classify_exception(exc)
    message = str(exc) or exc.__class__.__name__
    return ProviderError(
        code=code,
        message=message,
        provider=provider,
        model=model,
        status=_extract_status(exc),
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "code_for_status",
    "error_from_exception",
    "error_from_response",
    "upstream_message",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
