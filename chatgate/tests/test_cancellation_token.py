"""Unit tests for the cooperative cancellation token."""
from __future__ import annotations

import pytest

from chatgate.base.cancellation import CancellationToken, CancelledError


def test_cancel_is_idempotent_and_keeps_first_reason():
    token = CancellationToken()
    assert token.cancel("stop") is True  # nosec B101 - pytest assert in tests
    assert token.cancel("ignored") is False  # nosec B101 - pytest assert in tests
    assert token.cancelled and token.reason == "stop"  # nosec B101 - pytest assert in tests


def test_callbacks_run_once_and_late_callbacks_run_immediately():
    token = CancellationToken()
    seen = []
    token.add_callback(seen.append)
    token.cancel("first")
    token.cancel("second")
    token.add_callback(seen.append)
    assert seen == ["first", "first"]  # nosec B101 - pytest assert in tests


def test_raise_if_cancelled_raises_custom_error():
    token = CancellationToken()
    token.raise_if_cancelled()
    token.cancel("terminate")
    with pytest.raises(CancelledError):
        token.raise_if_cancelled()
