"""Cooperative cancellation public surface.

Usage
-----
    token = CancellationToken()
    ...
    token.cancel("user pressed stop")
    token.raise_if_cancelled()  # -> CancelledError
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
