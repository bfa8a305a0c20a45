"""Billing usage window and arithmetic.

Usage is reported for the current calendar month: from the first day of
the month through tomorrow (the usage endpoint's end date is exclusive).
Amounts come back in hundredths (``total_usage``) and in dollars
(``hard_limit_usd``) and are rounded half-up to cents.
"""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any, Mapping, Tuple

from ..base.errors import ErrorCode, ProviderError
from ..base.models import UsageSummary


def usage_window(today: date) -> Tuple[str, str]:
    """Return ``(start_date, end_date)`` as ``YYYY-MM-DD`` strings."""
    start = today.replace(day=1)
    end = today + timedelta(days=1)
    return start.isoformat(), end.isoformat()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _body_error(body: Any, provider: str) -> None:
    if not isinstance(body, Mapping):
        raise ProviderError(ErrorCode.MALFORMED, "usage response is not an object", provider)
    err = body.get("error")
    if isinstance(err, Mapping) and err.get("type"):
        raise ProviderError(ErrorCode.UPSTREAM, str(err.get("message") or err["type"]), provider, raw=body)


def summarize_usage(used_body: Any, subscription_body: Any, *, provider: str) -> UsageSummary:
    """Combine the usage and subscription bodies into a :class:`UsageSummary`."""
    _body_error(used_body, provider)
    _body_error(subscription_body, provider)
    total_usage = used_body.get("total_usage")
    hard_limit = subscription_body.get("hard_limit_usd")
    if not isinstance(total_usage, (int, float)) or not isinstance(hard_limit, (int, float)):
        raise ProviderError(
            ErrorCode.MALFORMED,
            "usage response missing total_usage or hard_limit_usd",
            provider,
            raw={"usage": used_body, "subscription": subscription_body},
        )
    return UsageSummary(
        used=round_half_up(total_usage) / 100,
        total=round_half_up(hard_limit * 100) / 100,
    )


__all__ = ["usage_window", "round_half_up", "summarize_usage"]
