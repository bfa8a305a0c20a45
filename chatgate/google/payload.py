"""Gemini payload adapter.

Roles map to ``user`` / ``model``; system messages become
``systemInstruction``. Adjacent same-role turns are merged. Vision models get
``inline_data`` parts for data URLs and ``file_data`` parts for remote URLs,
and ``maxOutputTokens`` of at least :data:`VISION_MIN_MAX_TOKENS`.
"""
from __future__ import annotations

import mimetypes
from typing import Any, Dict, List

from ..base.descriptor import ProviderDescriptor
from ..base.models import ChatRequest, Message
from ..base.payload_support import check_image_sizes, vision_max_tokens
from ..utils.model_traits import is_vision_model

_ROLE_MAP = {"user": "user", "assistant": "model"}


def _parts(message: Message, vision: bool) -> List[Dict[str, Any]]:
    if not vision:
        text = message.text()
        return [{"text": text}] if text else []
    parts: List[Dict[str, Any]] = []
    for part in message.parts:
        if part.type == "text" and part.text:
            parts.append({"text": part.text})
        elif part.type == "image_url" and part.image_url:
            if part.is_inline_image:
                mime, data = part.data_url_parts()
                parts.append({"inline_data": {"mime_type": mime, "data": data}})
            else:
                mime = mimetypes.guess_type(part.image_url)[0] or "image/jpeg"
                parts.append({"file_data": {"mime_type": mime, "file_uri": part.image_url}})
    return parts


def build_chat_payload(request: ChatRequest, descriptor: ProviderDescriptor) -> Dict[str, Any]:
    vision = is_vision_model(request.model)
    if vision:
        check_image_sizes(request.messages, descriptor, request.model)

    system: List[Dict[str, Any]] = []
    contents: List[Dict[str, Any]] = []
    for message in request.messages:
        if message.role in ("system", "developer"):
            text = message.text()
            if text:
                system.append({"text": text})
            continue
        parts = _parts(message, vision)
        if not parts:
            continue
        role = _ROLE_MAP.get(message.role, "user")
        if contents and contents[-1]["role"] == role:
            contents[-1]["parts"].extend(parts)
        else:
            contents.append({"role": role, "parts": parts})

    generation: Dict[str, Any] = {
        "temperature": request.sampling.temperature,
        "topP": request.sampling.top_p,
    }
    if vision:
        generation["maxOutputTokens"] = vision_max_tokens(request.max_tokens)
    elif request.max_tokens:
        generation["maxOutputTokens"] = request.max_tokens
    payload: Dict[str, Any] = {"contents": contents, "generationConfig": generation}
    if system:
        payload["systemInstruction"] = {"parts": system}
    return payload


__all__ = ["build_chat_payload"]
