"""Secret masking helpers for log output.

Credentials flow through headers and query strings; anything that reaches a
log line must go through :func:`mask_secret` or :func:`redact_headers` first.
"""
from __future__ import annotations

from typing import Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

SENSITIVE_HEADERS = frozenset(("authorization", "api-key", "x-api-key", "x-goog-api-key"))
SENSITIVE_PARAMS = frozenset(("key", "api_key", "access_token"))


def mask_secret(value: Optional[str]) -> str:
    """Return a short non-reversible rendering of ``value``.

    Keeps at most the first three and last two characters of values longer
    than eight characters (``sk-…yz``); shorter values become ``***``.
    """
    if not value:
        return ""
    text = str(value)
    if text.lower().startswith("bearer "):
        return "Bearer " + mask_secret(text[7:])
    if len(text) <= 8:
        return "***"
    return f"{text[:3]}…{text[-2:]}"


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Copy ``headers`` with credential-bearing values masked."""
    return {
        name: (mask_secret(value) if name.lower() in SENSITIVE_HEADERS else value)
        for name, value in headers.items()
    }


def redact_url(url: str) -> str:
    """Mask credential query parameters (e.g. Gemini's ``?key=``) in ``url``."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    pairs = [
        (k, mask_secret(v) if k.lower() in SENSITIVE_PARAMS else v)
        for k, v in parse_qsl(parts.query, keep_blank_values=True)
    ]
    return urlunsplit(parts._replace(query=urlencode(pairs, safe="…*")))


__all__ = ["mask_secret", "redact_headers", "redact_url", "SENSITIVE_HEADERS"]
