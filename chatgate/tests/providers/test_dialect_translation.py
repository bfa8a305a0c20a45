from __future__ import annotations

from chatgate.anthropic import stream as anthropic
from chatgate.base.errors import ErrorCode
from chatgate.base.streaming import SKIP, Fragment, ToolCallDelta
from chatgate.google import stream as gemini
from chatgate.openai import stream as openai


def test_openai_chunk_kinds():
    assert openai.translate_fragment({}) == Fragment()
    assert openai.translate_fragment({"choices": []}) is SKIP
    assert openai.translate_fragment({"id": "c1", "model": "gpt-4o"}) is SKIP
    assert openai.translate_fragment({"choices": [{"delta": {}}]}) is SKIP
    assert openai.translate_fragment({"choices": [{"delta": {"content": "Hi"}}]}).content == "Hi"
    reasoning = openai.translate_fragment({"choices": [{"delta": {"reasoning_content": "hmm"}}]})
    assert reasoning.reasoning == "hmm"
    finished = openai.translate_fragment({"choices": [{"delta": {}, "finish_reason": "stop"}]})
    assert finished.done and finished.finish_reason == "stop"


def test_openai_tool_call_and_error_chunks():
    fragment = openai.translate_fragment(
        {"choices": [{"delta": {"tool_calls": [{"index": 0, "id": "call_1", "function": {"name": "f", "arguments": ""}}]}}]}
    )
    assert fragment.tool_calls == (ToolCallDelta(id="call_1", name="f", arguments=""),)
    err = openai.translate_fragment({"error": {"message": "quota exceeded"}})
    assert err.error == "quota exceeded"


def test_openai_buffered_and_images_and_models():
    message = openai.extract_message(
        {"choices": [{"message": {"content": "Hello", "reasoning_content": "r"}, "finish_reason": "stop"}]}
    )
    assert (message.content, message.reasoning, message.finish_reason, message.done) == ("Hello", "r", "stop", True)
    images = openai.extract_images({"data": [{"url": "https://img/1.png"}, {"b64_json": "QUJD"}]})
    assert images == ["https://img/1.png", "data:image/png;base64,QUJD"]
    assert openai.parse_models({"data": [{"id": "gpt-4o"}, {"object": "x"}]}) == ["gpt-4o"]


def test_anthropic_event_kinds():
    assert anthropic.translate_fragment({"type": "ping"}) is SKIP
    assert anthropic.translate_fragment({"type": "message_start", "message": {}}) is SKIP
    opened = anthropic.translate_fragment(
        {"type": "content_block_start", "content_block": {"type": "tool_use", "id": "tu_1", "name": "lookup"}}
    )
    assert opened.tool_calls == (ToolCallDelta(id="tu_1", name="lookup"),)
    args = anthropic.translate_fragment(
        {"type": "content_block_delta", "delta": {"type": "input_json_delta", "partial_json": '{"q":1}'}}
    )
    assert args.tool_calls == (ToolCallDelta(arguments='{"q":1}'),)
    thinking = anthropic.translate_fragment({"type": "content_block_delta", "delta": {"type": "thinking_delta", "thinking": "t"}})
    assert thinking.reasoning == "t"
    stop = anthropic.translate_fragment({"type": "message_delta", "delta": {"stop_reason": "end_turn"}})
    assert stop.finish_reason == "end_turn" and not stop.done
    assert anthropic.translate_fragment({"type": "message_stop"}).done


def test_anthropic_error_event_is_classified():
    fragment = anthropic.translate_fragment({"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}})
    assert fragment.error == "Overloaded"
    assert fragment.error_code is ErrorCode.UPSTREAM
    limited = anthropic.translate_fragment({"type": "error", "error": {"type": "rate_limit_error", "message": "slow down"}})
    assert limited.error_code is ErrorCode.RATE_LIMIT


def test_anthropic_buffered_message():
    fragment = anthropic.extract_message(
        {
            "content": [
                {"type": "thinking", "thinking": "plan"},
                {"type": "text", "text": "answer"},
                {"type": "tool_use", "id": "tu_1", "name": "lookup", "input": {"q": 1}},
            ],
            "stop_reason": "tool_use",
        }
    )
    assert fragment.content == "answer"
    assert fragment.reasoning == "plan"
    assert fragment.tool_calls == (ToolCallDelta(id="tu_1", name="lookup", arguments='{"q": 1}'),)
    assert fragment.done


def test_gemini_thoughts_function_calls_and_blocks():
    chunk = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"text": "thinking...", "thought": True},
                        {"text": "Hello"},
                        {"functionCall": {"name": "lookup", "args": {"q": "x"}}},
                    ]
                }
            }
        ]
    }
    fragment = gemini.translate_fragment(chunk)
    assert fragment.reasoning == "thinking..."
    assert fragment.content == "Hello"
    assert fragment.tool_calls == (ToolCallDelta(id="lookup", name="lookup", arguments='{"q": "x"}'),)
    assert not fragment.done

    blocked = gemini.translate_fragment({"promptFeedback": {"blockReason": "SAFETY"}})
    assert blocked.error == "prompt blocked: SAFETY"
    assert blocked.error_code is ErrorCode.MALFORMED

    finished = gemini.translate_fragment({"candidates": [{"content": {"parts": []}, "finishReason": "STOP"}]})
    assert finished.done and finished.finish_reason == "STOP"
    assert gemini.translate_fragment({"usageMetadata": {}}) is SKIP
    assert gemini.extract_message({"usageMetadata": {}}).done


def test_gemini_error_and_model_listing():
    err = gemini.translate_fragment({"error": {"status": "RESOURCE_EXHAUSTED", "message": "quota"}})
    assert (err.error, err.error_code) == ("quota", ErrorCode.RATE_LIMIT)
    names = gemini.parse_models({"models": [{"name": "models/gemini-2.0-flash"}, {"name": "tunedModels/x"}]})
    assert names == ["gemini-2.0-flash", "tunedModels/x"]
