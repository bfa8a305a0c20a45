"""Cooperative cancellation token implementation.

Exposes the ``CancellationToken`` class threaded from a chat handle into the
transport. The transport polls it between streamed lines; the handle also
registers a callback so that cancelling the token tears down the running
task immediately instead of waiting for the next chunk.
"""

from __future__ import annotations

from threading import Lock
from typing import Callable, List

from .state import State
from .cancelled_error import CancelledError

CancelCallback = Callable[[str | None], None]


class CancellationToken:
    """A cooperative cancellation token with cancel-time callbacks.

    Thread-safe for ``cancel`` + ``raise_if_cancelled`` usage. Callbacks added
    after cancellation run immediately with the recorded reason.
    """

    def __init__(self) -> None:
        self._state = State()
        self._lock = Lock()
        self._callbacks: List[CancelCallback] = []

    @property
    def cancelled(self) -> bool:  # noqa: D401 - short form
        """Whether cancellation has been requested."""
        return self._state.cancelled

    @property
    def reason(self) -> str | None:  # noqa: D401 - short form
        """Reason string supplied at cancel time (if any)."""
        return self._state.reason

    def cancel(self, reason: str | None = None) -> bool:
        """Request cancellation; returns ``False`` if it was already requested."""
        with self._lock:
            if self._state.cancelled:
                return False
            self._state.cancelled = True
            self._state.reason = reason
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback(reason)
        return True

    def add_callback(self, callback: CancelCallback) -> None:
        """Run ``callback(reason)`` once when the token is cancelled."""
        with self._lock:
            if not self._state.cancelled:
                self._callbacks.append(callback)
                return
            reason = self._state.reason
        callback(reason)

    def raise_if_cancelled(self) -> None:
        """Raise ``CancelledError`` if token is cancelled."""
        if self._state.cancelled:
            raise CancelledError(self._state.reason or "operation cancelled")

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return (
            f"CancellationToken(cancelled={self._state.cancelled}, "
            f"reason={self._state.reason!r}, callbacks={len(self._callbacks)})"
        )


__all__ = ["CancellationToken", "CancelCallback"]
