"""Gemini response translation.

Streamed chunks and buffered replies share one shape, so both paths use
:func:`_translate`. Function calls arrive whole; each opens its own slot
(``functionCall.id`` when present, else the function name).
"""
from __future__ import annotations

import json
from typing import Any, List, Mapping

from ..base.errors import ErrorCode
from ..base.streaming.fragment import SKIP, Fragment, ToolCallDelta

_STATUS_CODES = {
    "RESOURCE_EXHAUSTED": ErrorCode.RATE_LIMIT,
    "UNAUTHENTICATED": ErrorCode.UNAUTHORIZED,
    "PERMISSION_DENIED": ErrorCode.UNAUTHORIZED,
    "INVALID_ARGUMENT": ErrorCode.MALFORMED,
    "DEADLINE_EXCEEDED": ErrorCode.TIMEOUT,
}


def _translate(obj: Mapping[str, Any], *, buffered: bool) -> Fragment:
    err = obj.get("error")
    if err:
        if isinstance(err, Mapping):
            return Fragment(
                error=str(err.get("message") or json.dumps(err, ensure_ascii=False)),
                error_code=_STATUS_CODES.get(err.get("status"), ErrorCode.UPSTREAM),
            )
        return Fragment(error=str(err))
    candidates = obj.get("candidates")
    if not candidates:
        block = (obj.get("promptFeedback") or {}).get("blockReason")
        if block:
            return Fragment(error=f"prompt blocked: {block}", error_code=ErrorCode.MALFORMED)
        if not obj:
            return Fragment()
        return Fragment(done=True) if buffered else SKIP

    candidate = candidates[0] or {}
    text: List[str] = []
    reasoning: List[str] = []
    calls = []
    for part in (candidate.get("content") or {}).get("parts") or ():
        if "functionCall" in part:
            call = part["functionCall"] or {}
            calls.append(
                ToolCallDelta(
                    id=call.get("id") or call.get("name") or "call",
                    name=call.get("name"),
                    arguments=json.dumps(call.get("args") or {}, ensure_ascii=False),
                )
            )
        elif part.get("text"):
            (reasoning if part.get("thought") else text).append(part["text"])
    finish = candidate.get("finishReason")
    fragment = Fragment(
        content="".join(text),
        reasoning="".join(reasoning),
        tool_calls=tuple(calls),
        finish_reason=finish,
        done=bool(finish) or buffered,
    )
    return SKIP if fragment.is_empty() else fragment


def translate_fragment(obj: Mapping[str, Any]) -> Fragment:
    return _translate(obj, buffered=False)


def extract_message(obj: Mapping[str, Any]) -> Fragment:
    return _translate(obj, buffered=True)


def parse_models(obj: Mapping[str, Any]) -> List[str]:
    names = []
    for m in obj.get("models") or ():
        name = m.get("name") if isinstance(m, Mapping) else None
        if name:
            names.append(name.split("/", 1)[1] if name.startswith("models/") else name)
    return names


__all__ = ["translate_fragment", "extract_message", "parse_models"]
