"""Stream reconciler: framed provider lines in, normalized events out.

Purpose
-------
Consume one streamed response (SSE ``data:`` lines or bare NDJSON), decode
each JSON chunk through a dialect translator and emit :mod:`events`. The
reconciler is synchronous and holds no I/O; feeding the same lines to a fresh
instance always yields the same events.

States
------
``OPEN -> (THINKING | EMITTING)* -> CLOSED``

- reasoning deltas move to THINKING, text deltas to EMITTING;
- ``[DONE]``, an empty fragment, a fragment flagged ``done`` or end of
  transport closes with :class:`Done`;
- malformed JSON, an orphan tool fragment, or an upstream error object closes
  with :class:`StreamError`.

After CLOSED every input is ignored.

Tool calls
----------
A piece carrying an ``id`` opens a new slot; a piece without one extends the
most recently opened slot. A piece without ``id`` before any slot exists is a
protocol violation (``MALFORMED``).
"""
from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable, Iterable, List, Mapping, Optional, Tuple

from ..errors import ErrorCode
from ..models import ToolCall
from .events import Done, ReasoningDelta, StreamError, StreamEvent, TextDelta, ToolCallFragment
from .fragment import Fragment

Translator = Callable[[Mapping[str, Any]], Fragment]
DONE_SENTINEL = "[DONE]"
_IGNORED_PREFIXES = (":", "event:", "id:", "retry:")


class StreamState(str, Enum):
    OPEN = "open"
    THINKING = "thinking"
    EMITTING = "emitting"
    CLOSED = "closed"


class _ToolSlot:
    __slots__ = ("id", "name", "arguments")

    def __init__(self, call_id: Optional[str], name: Optional[str]) -> None:
        self.id = call_id
        self.name = name
        self.arguments = ""


class StreamReconciler:
    """Per-request state machine; create one per streamed response."""

    def __init__(self, translate: Translator) -> None:
        self._translate = translate
        self.state = StreamState.OPEN
        self.text = ""
        self.reasoning = ""
        self.finish_reason: Optional[str] = None
        self.error: Optional[StreamError] = None
        self._slots: List[_ToolSlot] = []

    @property
    def closed(self) -> bool:
        return self.state is StreamState.CLOSED

    @property
    def tool_calls(self) -> Tuple[ToolCall, ...]:
        return tuple(
            ToolCall(index=i, id=s.id, name=s.name, arguments=s.arguments)
            for i, s in enumerate(self._slots)
        )

    def feed_line(self, line: str) -> List[StreamEvent]:
        """Consume one framed line and return the events it produces."""
        if self.closed:
            return []
        stripped = line.strip()
        if not stripped or stripped.startswith(_IGNORED_PREFIXES):
            return []
        payload = stripped[5:].strip() if stripped.startswith("data:") else stripped
        if not payload:
            return []
        if payload == DONE_SENTINEL:
            return self._close()
        try:
            obj = json.loads(payload)
        except ValueError:
            return self.fail(ErrorCode.MALFORMED, f"malformed stream chunk: {payload[:200]}")
        if not isinstance(obj, dict):
            return self.fail(ErrorCode.MALFORMED, f"unexpected stream chunk: {payload[:200]}")
        return self.feed_fragment(self._translate(obj))

    def feed_fragment(self, fragment: Fragment) -> List[StreamEvent]:
        """Consume an already translated fragment."""
        if self.closed:
            return []
        if fragment.error:
            return self.fail(fragment.error_code, fragment.error)
        if fragment.skip:
            return []
        if fragment.is_empty():
            return self._close()

        events: List[StreamEvent] = []
        if fragment.reasoning:
            self.state = StreamState.THINKING
            self.reasoning += fragment.reasoning
            events.append(ReasoningDelta(fragment.reasoning))
        if fragment.content:
            self.state = StreamState.EMITTING
            self.text += fragment.content
            events.append(TextDelta(fragment.content))
        for piece in fragment.tool_calls:
            if piece.id:
                self._slots.append(_ToolSlot(piece.id, piece.name))
            elif not self._slots:
                events.extend(self.fail(ErrorCode.MALFORMED, "tool call fragment without id before any call was opened"))
                return events
            elif piece.name and not self._slots[-1].name:
                self._slots[-1].name = piece.name
            slot = self._slots[-1]
            slot.arguments += piece.arguments
            events.append(ToolCallFragment(len(self._slots) - 1, piece.id, piece.name, piece.arguments))
        if fragment.finish_reason:
            self.finish_reason = fragment.finish_reason
        if fragment.done:
            events.extend(self._close())
        return events

    def finish(self) -> List[StreamEvent]:
        """Signal end of transport; closes with ``Done`` if still open."""
        return [] if self.closed else self._close()

    def fail(self, code: ErrorCode, message: str, status: Optional[int] = None) -> List[StreamEvent]:
        """Close with a terminal :class:`StreamError` (no-op when already closed)."""
        if self.closed:
            return []
        self.state = StreamState.CLOSED
        self.error = StreamError(code, message, status)
        return [self.error]

    def _close(self) -> List[StreamEvent]:
        self.state = StreamState.CLOSED
        return [Done(self.finish_reason)]


def reconcile_lines(translate: Translator, lines: Iterable[str]) -> List[StreamEvent]:
    """Run ``lines`` through a fresh reconciler, including end-of-transport."""
    reconciler = StreamReconciler(translate)
    events: List[StreamEvent] = []
    for line in lines:
        events.extend(reconciler.feed_line(line))
    events.extend(reconciler.finish())
    return events


__all__ = ["StreamReconciler", "StreamState", "Translator", "DONE_SENTINEL", "reconcile_lines"]
