"""Per-call metadata attached to results."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class ProviderMetadata:
    """Where a result came from and how long it took."""

    provider: str
    model: str
    request_id: Optional[str] = None
    http_status: Optional[int] = None
    latency_ms: Optional[float] = None
    credential_source: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


__all__ = ["ProviderMetadata"]
