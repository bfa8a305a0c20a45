"""OpenAI chunk translation (streamed and buffered)."""
from __future__ import annotations

import json
from typing import Any, List, Mapping, Sequence

from ..base.streaming.fragment import SKIP, Fragment, ToolCallDelta


def _tool_deltas(raw_calls: Any) -> tuple:
    deltas = []
    for call in raw_calls or ():
        if not isinstance(call, Mapping):
            continue
        function = call.get("function") or {}
        deltas.append(
            ToolCallDelta(
                id=call.get("id") or None,
                name=function.get("name") or None,
                arguments=function.get("arguments") or "",
            )
        )
    return tuple(deltas)


def _error_text(obj: Mapping[str, Any]) -> str:
    err = obj.get("error")
    if isinstance(err, Mapping):
        return str(err.get("message") or json.dumps(err, ensure_ascii=False))
    return str(err)


def translate_fragment(obj: Mapping[str, Any]) -> Fragment:
    """Translate one ``chat.completion.chunk`` object.

    Only an empty object (``{}``) is the terminator. Metadata-only chunks,
    chunks with an empty ``choices`` list and empty deltas are skipped.
    """
    if obj.get("error"):
        return Fragment(error=_error_text(obj))
    if not obj:
        return Fragment()
    choices = obj.get("choices") or []
    if not choices:
        return SKIP
    choice = choices[0] or {}
    delta = choice.get("delta") or {}
    finish_reason = choice.get("finish_reason")
    fragment = Fragment(
        content=delta.get("content") or "",
        reasoning=delta.get("reasoning_content") or delta.get("reasoning") or "",
        tool_calls=_tool_deltas(delta.get("tool_calls")),
        finish_reason=finish_reason,
        done=bool(finish_reason),
    )
    return SKIP if fragment.is_empty() else fragment


def extract_message(obj: Mapping[str, Any]) -> Fragment:
    """Translate a buffered ``chat.completion`` body."""
    if obj.get("error"):
        return Fragment(error=_error_text(obj))
    choices = obj.get("choices") or [{}]
    choice = choices[0] or {}
    message = choice.get("message") or {}
    return Fragment(
        content=message.get("content") or "",
        reasoning=message.get("reasoning_content") or "",
        tool_calls=_tool_deltas(message.get("tool_calls")),
        finish_reason=choice.get("finish_reason"),
        done=True,
    )


def extract_images(obj: Mapping[str, Any]) -> Sequence[str]:
    """Image references from an images/generations body (URL or data URL)."""
    images: List[str] = []
    for item in obj.get("data") or ():
        if not isinstance(item, Mapping):
            continue
        if item.get("url"):
            images.append(item["url"])
        elif item.get("b64_json"):
            images.append("data:image/png;base64," + item["b64_json"])
    return images


def parse_models(obj: Mapping[str, Any]) -> List[str]:
    return [m["id"] for m in obj.get("data") or () if isinstance(m, Mapping) and m.get("id")]


__all__ = ["translate_fragment", "extract_message", "extract_images", "parse_models"]
