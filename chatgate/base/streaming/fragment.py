"""Dialect-neutral view of one decoded provider chunk.

Dialect translators turn a provider's JSON chunk into a :class:`Fragment`;
the reconciler only ever looks at fragments. The same shape is reused for
buffered (non-streamed) replies.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from ..errors import ErrorCode


@dataclass(frozen=True)
class ToolCallDelta:
    """Tool call piece as seen in one chunk (``id`` only on the opening piece)."""

    id: Optional[str] = None
    name: Optional[str] = None
    arguments: str = ""


@dataclass(frozen=True)
class Fragment:
    """Normalized chunk.

    Attributes:
        content: Answer text delta.
        reasoning: Reasoning/thinking delta.
        tool_calls: Tool call pieces in arrival order.
        finish_reason: Provider finish reason, when reported.
        done: The chunk ends the stream.
        skip: Keep-alive or bookkeeping chunk with nothing to emit.
        error: Upstream error message reported inside the stream.
        error_code: Classification for ``error``.
    """

    content: str = ""
    reasoning: str = ""
    tool_calls: Tuple[ToolCallDelta, ...] = ()
    finish_reason: Optional[str] = None
    done: bool = False
    skip: bool = False
    error: Optional[str] = None
    error_code: ErrorCode = ErrorCode.UPSTREAM

    def is_empty(self) -> bool:
        """No content, reasoning, tool calls, finish signal or error."""
        return not (
            self.content
            or self.reasoning
            or self.tool_calls
            or self.finish_reason
            or self.done
            or self.skip
            or self.error
        )


SKIP = Fragment(skip=True)


def translate_normalized(obj: Mapping[str, Any]) -> Fragment:
    """Translator for chunks already in the normalized shape.

    Accepts ``{"content", "reasoning", "tool_calls": [{"id", "name",
    "arguments"}], "finish_reason", "error"}``; missing keys mean empty. Used
    for gateways that re-emit normalized chunks and for replaying captured
    streams.
    """
    calls = tuple(
        ToolCallDelta(id=c.get("id"), name=c.get("name"), arguments=c.get("arguments") or "")
        for c in obj.get("tool_calls") or ()
        if isinstance(c, Mapping)
    )
    error = obj.get("error")
    return Fragment(
        content=obj.get("content") or "",
        reasoning=obj.get("reasoning") or "",
        tool_calls=calls,
        finish_reason=obj.get("finish_reason"),
        done=bool(obj.get("finish_reason")),
        error=str(error) if error else None,
    )


__all__ = ["Fragment", "ToolCallDelta", "SKIP", "translate_normalized"]
