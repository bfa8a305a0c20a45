"""Cancellation error type.

Defines the public ``CancelledError`` used to signal cooperative cancellation
of an in-flight chat, speech or listing call. Kept isolated so the error
taxonomy can import it without pulling in the token machinery.
"""

from __future__ import annotations


class CancelledError(RuntimeError):
    """Raised when an operation is cancelled cooperatively.

    Distinct from :class:`asyncio.CancelledError`: this one is raised by
    :meth:`CancellationToken.raise_if_cancelled` at chunk boundaries, while the
    asyncio variant is delivered by task cancellation. Both map to
    ``ErrorCode.CANCELED``.
    """

__all__ = ["CancelledError"]
