"""Cancellation parts: token, state holder and error type."""

from .cancelled_error import CancelledError
from .state import State
from .token import CancellationToken

__all__ = ["CancelledError", "State", "CancellationToken"]
