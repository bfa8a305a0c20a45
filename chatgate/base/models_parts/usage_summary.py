"""Billing usage summary."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class UsageSummary:
    """Spend for the current month versus the hard limit, in account currency."""

    used: float
    total: float


__all__ = ["UsageSummary"]
