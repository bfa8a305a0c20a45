"""Streaming metrics collected per chat call."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Timing and volume for one call.

    ``emitted`` counts delta events (text, reasoning, tool fragments);
    terminal events are not counted.
    """

    emitted: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    started_at: float = field(default_factory=time.monotonic, repr=False)

    def record_delta(self) -> None:
        if self.time_to_first_token_ms is None:
            self.time_to_first_token_ms = (time.monotonic() - self.started_at) * 1000.0
        self.emitted += 1

    def finalize(self) -> None:
        if self.total_duration_ms is None:
            self.total_duration_ms = (time.monotonic() - self.started_at) * 1000.0

    def to_fields(self) -> Dict[str, Any]:
        return {
            "emitted_count": self.emitted,
            "time_to_first_token_ms": _round(self.time_to_first_token_ms),
            "total_duration_ms": _round(self.total_duration_ms),
        }


def _round(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


__all__ = ["StreamMetrics"]
