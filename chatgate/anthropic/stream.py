"""Anthropic event translation.

Streamed events are typed objects (``message_start``, ``content_block_start``,
``content_block_delta``, ``message_delta``, ``message_stop``, ``ping``,
``error``). Only ``message_stop`` ends the stream; ``message_delta`` carries
the stop reason.
"""
from __future__ import annotations

import json
from typing import Any, List, Mapping

from ..base.errors import ErrorCode
from ..base.streaming.fragment import SKIP, Fragment, ToolCallDelta

_ERROR_CODES = {
    "overloaded_error": ErrorCode.UPSTREAM,
    "rate_limit_error": ErrorCode.RATE_LIMIT,
    "authentication_error": ErrorCode.UNAUTHORIZED,
    "permission_error": ErrorCode.UNAUTHORIZED,
    "invalid_request_error": ErrorCode.MALFORMED,
    "request_too_large": ErrorCode.MALFORMED,
}


def _error_fragment(obj: Mapping[str, Any]) -> Fragment:
    err = obj.get("error") or {}
    if not isinstance(err, Mapping):
        return Fragment(error=str(err))
    message = err.get("message") or json.dumps(err, ensure_ascii=False)
    return Fragment(error=str(message), error_code=_ERROR_CODES.get(err.get("type"), ErrorCode.UPSTREAM))


def translate_fragment(obj: Mapping[str, Any]) -> Fragment:
    kind = obj.get("type")
    if kind is None and not obj:
        return Fragment()
    if kind == "error":
        return _error_fragment(obj)
    if kind == "content_block_start":
        block = obj.get("content_block") or {}
        if block.get("type") == "tool_use":
            return Fragment(tool_calls=(ToolCallDelta(id=block.get("id"), name=block.get("name")),))
        if block.get("type") == "text" and block.get("text"):
            return Fragment(content=block["text"])
        return SKIP
    if kind == "content_block_delta":
        delta = obj.get("delta") or {}
        dtype = delta.get("type")
        if dtype == "text_delta":
            return Fragment(content=delta.get("text") or "") if delta.get("text") else SKIP
        if dtype == "thinking_delta":
            return Fragment(reasoning=delta.get("thinking") or "") if delta.get("thinking") else SKIP
        if dtype == "input_json_delta":
            partial = delta.get("partial_json") or ""
            return Fragment(tool_calls=(ToolCallDelta(arguments=partial),)) if partial else SKIP
        return SKIP
    if kind == "message_delta":
        stop = (obj.get("delta") or {}).get("stop_reason")
        return Fragment(finish_reason=stop) if stop else SKIP
    if kind == "message_stop":
        return Fragment(done=True)
    return SKIP


def extract_message(obj: Mapping[str, Any]) -> Fragment:
    if obj.get("type") == "error":
        return _error_fragment(obj)
    text: List[str] = []
    reasoning: List[str] = []
    calls = []
    for block in obj.get("content") or ():
        btype = block.get("type")
        if btype == "text":
            text.append(block.get("text") or "")
        elif btype == "thinking":
            reasoning.append(block.get("thinking") or "")
        elif btype == "tool_use":
            calls.append(
                ToolCallDelta(
                    id=block.get("id"),
                    name=block.get("name"),
                    arguments=json.dumps(block.get("input") or {}, ensure_ascii=False),
                )
            )
    return Fragment(
        content="".join(text),
        reasoning="".join(reasoning),
        tool_calls=tuple(calls),
        finish_reason=obj.get("stop_reason"),
        done=True,
    )


def parse_models(obj: Mapping[str, Any]) -> List[str]:
    return [m["id"] for m in obj.get("data") or () if isinstance(m, Mapping) and m.get("id")]


__all__ = ["translate_fragment", "extract_message", "parse_models"]
