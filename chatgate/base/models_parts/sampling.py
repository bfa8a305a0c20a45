"""Sampling parameters carried by a chat request."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SamplingParams:
    """Provider-neutral sampling knobs with conservative defaults."""

    temperature: float = 0.5
    top_p: float = 1.0
    presence_penalty: float = 0.0
    frequency_penalty: float = 0.0


__all__ = ["SamplingParams"]
