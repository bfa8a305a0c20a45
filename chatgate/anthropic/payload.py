"""Anthropic Messages payload adapter.

- system messages are lifted into the top-level ``system`` field;
- consecutive messages with the same role are merged (the API requires
  alternation); no turns are invented;
- vision models get ``image`` blocks (base64 for data URLs, ``url`` sources
  otherwise), other models receive plain text;
- ``max_tokens`` is mandatory upstream and defaults to
  :data:`DEFAULT_MAX_TOKENS`; vision models never go below the shared floor.
"""
from __future__ import annotations

from typing import Any, Dict, List

from ..base.descriptor import ProviderDescriptor
from ..base.models import ChatRequest, Message
from ..base.payload_support import check_image_sizes, vision_max_tokens
from ..utils.model_traits import is_vision_model

DEFAULT_MAX_TOKENS = 4096


def _blocks(message: Message, vision: bool) -> List[Dict[str, Any]]:
    if not vision:
        text = message.text()
        return [{"type": "text", "text": text}] if text else []
    blocks: List[Dict[str, Any]] = []
    for part in message.parts:
        if part.type == "text" and part.text:
            blocks.append({"type": "text", "text": part.text})
        elif part.type == "image_url" and part.image_url:
            if part.is_inline_image:
                mime, data = part.data_url_parts()
                source = {"type": "base64", "media_type": mime, "data": data}
            else:
                source = {"type": "url", "url": part.image_url}
            blocks.append({"type": "image", "source": source})
    return blocks


def build_chat_payload(request: ChatRequest, descriptor: ProviderDescriptor) -> Dict[str, Any]:
    vision = is_vision_model(request.model)
    if vision:
        check_image_sizes(request.messages, descriptor, request.model)

    system_texts: List[str] = []
    turns: List[Dict[str, Any]] = []
    for message in request.messages:
        if message.role in ("system", "developer"):
            text = message.text()
            if text:
                system_texts.append(text)
            continue
        blocks = _blocks(message, vision)
        if not blocks:
            continue
        if turns and turns[-1]["role"] == message.role:
            turns[-1]["content"].extend(blocks)
        else:
            turns.append({"role": message.role, "content": blocks})

    max_tokens = request.max_tokens or DEFAULT_MAX_TOKENS
    if vision:
        max_tokens = vision_max_tokens(max_tokens)
    payload: Dict[str, Any] = {
        "model": request.model,
        "messages": turns,
        "max_tokens": max_tokens,
        "stream": request.stream,
        "temperature": request.sampling.temperature,
    }
    if request.sampling.top_p != 1.0:
        payload["top_p"] = request.sampling.top_p
    if system_texts:
        payload["system"] = "\n\n".join(system_texts)
    return payload


__all__ = ["DEFAULT_MAX_TOKENS", "build_chat_payload"]
