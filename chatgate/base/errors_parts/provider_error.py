"""
Structured gateway error exception type.

Wraps configuration, transport and upstream failures with a normalized
`ErrorCode` so callers can branch on the category instead of parsing
messages. The upstream HTTP status and raw body are kept for diagnostics.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .error_code import ErrorCode


@dataclass(eq=False)
class ProviderError(Exception):
    """Represents a structured gateway error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable message. For upstream rejections this is the
            provider's own error text, unmodified.
        provider: Provider id where the error originated (e.g., ``"azure"``).
        model: Optional model name associated with the failure.
        status: Upstream HTTP status when the failure came from a response.
        raw: Optional original exception or response body for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    status: Optional[int] = None
    raw: Any = None

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining provider, model, code, and message."""
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly view (raw payload excluded)."""
        data: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "provider": self.provider,
        }
        if self.model:
            data["model"] = self.model
        if self.status is not None:
            data["status"] = self.status
        return data


__all__ = ["ProviderError"]
