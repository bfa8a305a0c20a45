"""Accumulated tool (function) call."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ToolCall:
    """A complete tool call assembled from streamed fragments.

    ``arguments`` is the concatenated raw argument text; it is usually JSON
    but is not parsed here.
    """

    index: int
    id: Optional[str]
    name: Optional[str]
    arguments: str = ""


__all__ = ["ToolCall"]
