"""Normalized stream event vocabulary.

Every provider stream is reduced to this tagged union:

``TextDelta | ReasoningDelta | ToolCallFragment | Done | StreamError``

``Done`` and ``StreamError`` are terminal; a stream yields exactly one of them
and nothing after it. Cancellation is reported as a ``StreamError`` with code
``ErrorCode.CANCELED``.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Union

from ..errors import ErrorCode


@dataclass(frozen=True)
class TextDelta:
    delta: str
    kind: ClassVar[str] = "text"


@dataclass(frozen=True)
class ReasoningDelta:
    delta: str
    kind: ClassVar[str] = "reasoning"


@dataclass(frozen=True)
class ToolCallFragment:
    """A piece of a tool call.

    ``id`` is set only on the fragment that opens a call; later fragments of
    the same call carry ``id=None`` and extend ``args_chunk``.
    """

    index: int
    id: Optional[str]
    name: Optional[str]
    args_chunk: str
    kind: ClassVar[str] = "tool_call"


@dataclass(frozen=True)
class Done:
    finish_reason: Optional[str] = None
    kind: ClassVar[str] = "done"


@dataclass(frozen=True)
class StreamError:
    code: ErrorCode
    message: str
    status: Optional[int] = None
    kind: ClassVar[str] = "error"


StreamEvent = Union[TextDelta, ReasoningDelta, ToolCallFragment, Done, StreamError]


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (Done, StreamError))


def event_to_dict(event: StreamEvent) -> Dict[str, Any]:
    """JSON-friendly rendering used by the NDJSON service endpoint and the CLI."""
    if isinstance(event, (TextDelta, ReasoningDelta)):
        return {"type": event.kind, "delta": event.delta}
    if isinstance(event, ToolCallFragment):
        return {
            "type": event.kind,
            "index": event.index,
            "id": event.id,
            "name": event.name,
            "args": event.args_chunk,
        }
    if isinstance(event, Done):
        return {"type": event.kind, "finish_reason": event.finish_reason}
    return {"type": event.kind, "code": event.code.value, "message": event.message, "status": event.status}


__all__ = [
    "TextDelta",
    "ReasoningDelta",
    "ToolCallFragment",
    "Done",
    "StreamError",
    "StreamEvent",
    "is_terminal",
    "event_to_dict",
]
