"""Stream reconciler state machine over framed lines."""
from __future__ import annotations

import json

from chatgate.anthropic.stream import translate_fragment as anthropic_translate
from chatgate.base.errors import ErrorCode
from chatgate.base.models import ToolCall
from chatgate.base.streaming import (
    Done,
    ReasoningDelta,
    StreamError,
    StreamMetrics,
    StreamReconciler,
    StreamState,
    TextDelta,
    ToolCallFragment,
    event_to_dict,
    reconcile_lines,
    translate_normalized,
)
from chatgate.openai.stream import translate_fragment as openai_translate


def _data(obj) -> str:
    return "data: " + json.dumps(obj)


def test_normalized_stream_yields_deltas_then_single_done():
    lines = [
        _data({"content": "Hel"}),
        _data({"content": "lo"}),
        "data: [DONE]",
        _data({"content": "ignored"}),
    ]
    events = reconcile_lines(translate_normalized, lines)
    assert events == [TextDelta("Hel"), TextDelta("lo"), Done(None)]


def test_reasoning_then_text_moves_through_states():
    reconciler = StreamReconciler(translate_normalized)
    assert reconciler.state is StreamState.OPEN
    assert reconciler.feed_line(_data({"reasoning": "think"})) == [ReasoningDelta("think")]
    assert reconciler.state is StreamState.THINKING
    assert reconciler.feed_line(_data({"content": "answer"})) == [TextDelta("answer")]
    assert reconciler.state is StreamState.EMITTING
    assert reconciler.feed_line(_data({"finish_reason": "stop"})) == [Done("stop")]
    assert reconciler.closed
    assert (reconciler.text, reconciler.reasoning) == ("answer", "think")


def test_keepalives_comments_and_blank_lines_are_ignored():
    reconciler = StreamReconciler(translate_normalized)
    for line in ("", ": keep-alive", "event: message", "id: 7", "retry: 1000", "data:"):
        assert reconciler.feed_line(line) == []
    assert reconciler.state is StreamState.OPEN


def test_bare_ndjson_lines_are_accepted():
    events = reconcile_lines(translate_normalized, [json.dumps({"content": "x"})])
    assert events == [TextDelta("x"), Done(None)]


def test_malformed_json_closes_with_error_and_ignores_the_rest():
    reconciler = StreamReconciler(translate_normalized)
    reconciler.feed_line(_data({"content": "ok"}))
    events = reconciler.feed_line("data: {not json")
    assert len(events) == 1
    assert isinstance(events[0], StreamError)
    assert events[0].code is ErrorCode.MALFORMED
    assert reconciler.feed_line(_data({"content": "late"})) == []
    assert reconciler.finish() == []


def test_non_object_chunk_is_malformed():
    events = reconcile_lines(translate_normalized, ["data: [1, 2]"])
    assert [type(e) for e in events] == [StreamError]


def test_orphan_tool_fragment_is_a_protocol_error():
    events = reconcile_lines(translate_normalized, [_data({"tool_calls": [{"arguments": "{}"}]})])
    assert len(events) == 1
    assert events[0].code is ErrorCode.MALFORMED


def test_in_stream_error_object_closes_with_upstream_error():
    events = reconcile_lines(translate_normalized, [_data({"content": "a"}), _data({"error": "server melted"})])
    assert events == [TextDelta("a"), StreamError(ErrorCode.UPSTREAM, "server melted")]


def test_end_of_transport_closes_open_stream():
    events = reconcile_lines(translate_normalized, [_data({"content": "partial"})])
    assert events[-1] == Done(None)


def test_replay_is_deterministic():
    lines = [
        _data({"reasoning": "r"}),
        _data({"content": "a"}),
        _data({"tool_calls": [{"id": "t1", "name": "f", "arguments": "{"}]}),
        _data({"tool_calls": [{"arguments": "}"}]}),
        _data({"finish_reason": "tool_calls"}),
    ]
    assert reconcile_lines(translate_normalized, lines) == reconcile_lines(translate_normalized, lines)


def test_openai_tool_call_assembly():
    chunks = [
        {"choices": [{"delta": {"role": "assistant", "tool_calls": [
            {"index": 0, "id": "call_1", "type": "function", "function": {"name": "get_weather", "arguments": ""}}
        ]}}]},
        {"choices": [{"delta": {"tool_calls": [{"index": 0, "function": {"arguments": '{"city":'}}]}}]},
        {"choices": [{"delta": {"tool_calls": [{"index": 0, "function": {"arguments": '"Paris"}'}}]}}]},
        {"choices": [{"delta": {}, "finish_reason": "tool_calls"}]},
    ]
    reconciler = StreamReconciler(openai_translate)
    events = []
    for chunk in chunks:
        events.extend(reconciler.feed_line(_data(chunk)))
    events.extend(reconciler.feed_line("data: [DONE]"))
    assert events == [
        ToolCallFragment(0, "call_1", "get_weather", ""),
        ToolCallFragment(0, None, None, '{"city":'),
        ToolCallFragment(0, None, None, '"Paris"}'),
        Done("tool_calls"),
    ]
    assert reconciler.tool_calls == (ToolCall(0, "call_1", "get_weather", '{"city":"Paris"}'),)


def test_two_tool_calls_get_separate_slots():
    lines = [
        _data({"tool_calls": [{"id": "a", "name": "one", "arguments": "1"}, {"id": "b", "name": "two", "arguments": "2"}]}),
        _data({"tool_calls": [{"arguments": "2"}]}),
    ]
    reconciler = StreamReconciler(translate_normalized)
    for line in lines:
        reconciler.feed_line(line)
    assert reconciler.tool_calls == (ToolCall(0, "a", "one", "1"), ToolCall(1, "b", "two", "22"))


def test_openai_empty_chunk_terminates():
    events = reconcile_lines(openai_translate, [_data({"choices": [{"delta": {"content": "x"}}]}), "data: {}"])
    assert events == [TextDelta("x"), Done(None)]


def test_openai_metadata_only_chunk_does_not_end_stream():
    lines = [
        _data({"choices": [{"delta": {"content": "Hel"}}]}),
        _data({"id": "c1", "object": "chat.completion.chunk", "model": "gpt-4o"}),
        _data({"choices": [{"delta": {"content": "lo"}}]}),
        "data: [DONE]",
    ]
    events = reconcile_lines(openai_translate, lines)
    assert events == [TextDelta("Hel"), TextDelta("lo"), Done(None)]


def test_anthropic_typed_events():
    lines = [
        "event: message_start",
        _data({"type": "message_start", "message": {"id": "m1"}}),
        "event: content_block_delta",
        _data({"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": "Hi"}}),
        _data({"type": "ping"}),
        _data({"type": "message_delta", "delta": {"stop_reason": "end_turn"}}),
        _data({"type": "message_stop"}),
    ]
    assert reconcile_lines(anthropic_translate, lines) == [TextDelta("Hi"), Done("end_turn")]


def test_event_to_dict_shapes():
    assert event_to_dict(TextDelta("a")) == {"type": "text", "delta": "a"}
    assert event_to_dict(ToolCallFragment(0, "c", "f", "{}")) == {
        "type": "tool_call",
        "index": 0,
        "id": "c",
        "name": "f",
        "args": "{}",
    }
    assert event_to_dict(Done("stop")) == {"type": "done", "finish_reason": "stop"}
    assert event_to_dict(StreamError(ErrorCode.QUOTA_EXCEEDED, "pay up", 402)) == {
        "type": "error",
        "code": "quota_exceeded",
        "message": "pay up",
        "status": 402,
    }


def test_stream_metrics_counts_deltas():
    metrics = StreamMetrics()
    assert metrics.to_fields()["emitted_count"] == 0
    metrics.record_delta()
    metrics.record_delta()
    metrics.finalize()
    fields = metrics.to_fields()
    assert fields["emitted_count"] == 2
    assert fields["time_to_first_token_ms"] is not None
    assert fields["total_duration_ms"] >= fields["time_to_first_token_ms"]
