"""Streaming primitives: event union, fragments, reconciler, metrics."""

from .events import (
    Done,
    ReasoningDelta,
    StreamError,
    StreamEvent,
    TextDelta,
    ToolCallFragment,
    event_to_dict,
    is_terminal,
)
from .fragment import SKIP, Fragment, ToolCallDelta, translate_normalized
from .metrics import StreamMetrics
from .reconciler import DONE_SENTINEL, StreamReconciler, StreamState, Translator, reconcile_lines

__all__ = [
    "Done",
    "ReasoningDelta",
    "StreamError",
    "StreamEvent",
    "TextDelta",
    "ToolCallFragment",
    "event_to_dict",
    "is_terminal",
    "SKIP",
    "Fragment",
    "ToolCallDelta",
    "translate_normalized",
    "StreamMetrics",
    "DONE_SENTINEL",
    "StreamReconciler",
    "StreamState",
    "Translator",
    "reconcile_lines",
]
