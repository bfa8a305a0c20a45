from __future__ import annotations

from datetime import date

import pytest

from chatgate.base.errors import ErrorCode, ProviderError
from chatgate.service.usage import round_half_up, summarize_usage, usage_window


def test_usage_window_runs_from_first_of_month_to_tomorrow():
    assert usage_window(date(2024, 3, 15)) == ("2024-03-01", "2024-03-16")
    assert usage_window(date(2024, 1, 31)) == ("2024-01-01", "2024-02-01")
    assert usage_window(date(2023, 12, 31)) == ("2023-12-01", "2024-01-01")


def test_round_half_up():
    assert round_half_up(0.5) == 1
    assert round_half_up(2.5) == 3
    assert round_half_up(2.49) == 2


def test_summarize_usage():
    summary = summarize_usage({"total_usage": 1234.5}, {"hard_limit_usd": 120.0}, provider="openai")
    assert summary.used == 12.35
    assert summary.total == 120.0


def test_summarize_usage_errors():
    with pytest.raises(ProviderError) as info:
        summarize_usage({"error": {"type": "invalid_request_error", "message": "no billing"}}, {}, provider="openai")
    assert info.value.code is ErrorCode.UPSTREAM
    assert info.value.message == "no billing"
    with pytest.raises(ProviderError) as info:
        summarize_usage({}, {"hard_limit_usd": 5}, provider="openai")
    assert info.value.code is ErrorCode.MALFORMED
