"""OpenAI payload adapter.

Model-family policy
-------------------
- image models (``dall-e-*``, ``gpt-image-*``): images/generations shape built
  from the last message; sampling dropped; never streamed.
- vision models: content kept as ``text`` / ``image_url`` blocks; inline
  images over the provider limit are rejected before sending.
- other models: content flattened to the message text.
- o-series (``o1``, ``o3``, ``o4``...): temperature 1, top_p 1, no penalties,
  ``max_completion_tokens``, and a leading ``developer`` message re-enabling
  Markdown output.
- gpt-5: temperature 1 and ``max_completion_tokens`` only.
- vision, non-reasoning: ``max_tokens`` raised to at least
  :data:`VISION_MIN_MAX_TOKENS`.

The model id is forwarded unchanged.
"""
from __future__ import annotations

from typing import Any, Dict, List

from ..base.descriptor import ProviderDescriptor
from ..base.models import ChatRequest, Message, SpeechRequest
from ..base.payload_support import VISION_MIN_MAX_TOKENS, check_image_sizes, vision_max_tokens
from ..utils.model_traits import is_gpt5, is_o_series, is_vision_model

DEVELOPER_DIRECTIVE = "Formatting re-enabled"
DEFAULT_IMAGE_SIZE = "1024x1024"
DEFAULT_IMAGE_QUALITY = "standard"
DEFAULT_IMAGE_STYLE = "vivid"


def _message_content(message: Message, vision: bool) -> Any:
    if not vision or isinstance(message.content, str):
        return message.text()
    blocks: List[Dict[str, Any]] = []
    for part in message.parts:
        if part.type == "text" and part.text is not None:
            blocks.append({"type": "text", "text": part.text})
        elif part.type == "image_url" and part.image_url:
            blocks.append({"type": "image_url", "image_url": {"url": part.image_url}})
    return blocks


def build_chat_payload(request: ChatRequest, descriptor: ProviderDescriptor) -> Dict[str, Any]:
    """Build a ``chat/completions`` payload."""
    model = request.model
    vision = is_vision_model(model)
    if vision:
        check_image_sizes(request.messages, descriptor, model)
    messages: List[Dict[str, Any]] = [
        {"role": m.role, "content": _message_content(m, vision)} for m in request.messages
    ]
    payload: Dict[str, Any] = {"model": model, "messages": messages, "stream": request.stream}
    sampling = request.sampling

    if is_gpt5(model):
        payload["temperature"] = 1
        if request.max_tokens:
            payload["max_completion_tokens"] = request.max_tokens
    elif is_o_series(model):
        messages.insert(0, {"role": "developer", "content": DEVELOPER_DIRECTIVE})
        payload["temperature"] = 1
        payload["top_p"] = 1
        if request.max_tokens:
            payload["max_completion_tokens"] = request.max_tokens
    else:
        payload["temperature"] = sampling.temperature
        payload["top_p"] = sampling.top_p
        payload["presence_penalty"] = sampling.presence_penalty
        payload["frequency_penalty"] = sampling.frequency_penalty
        if vision:
            payload["max_tokens"] = vision_max_tokens(request.max_tokens)
        elif request.max_tokens:
            payload["max_tokens"] = request.max_tokens
    return payload


def build_image_payload(request: ChatRequest, descriptor: ProviderDescriptor) -> Dict[str, Any]:
    """Build an ``images/generations`` payload from the last message text."""
    model = request.model
    payload: Dict[str, Any] = {
        "model": model,
        "prompt": request.last_text(),
        "n": 1,
        "size": request.size or DEFAULT_IMAGE_SIZE,
    }
    if model.startswith("dall-e"):
        payload["response_format"] = "b64_json"
    if model == "dall-e-3":
        payload["quality"] = request.quality or DEFAULT_IMAGE_QUALITY
        payload["style"] = request.style or DEFAULT_IMAGE_STYLE
    return payload


def build_speech_payload(request: SpeechRequest) -> Dict[str, Any]:
    return {
        "model": request.model,
        "input": request.input,
        "voice": request.voice,
        "response_format": request.response_format,
        "speed": request.speed,
    }


__all__ = [
    "DEVELOPER_DIRECTIVE",
    "VISION_MIN_MAX_TOKENS",
    "build_chat_payload",
    "build_image_payload",
    "build_speech_payload",
]
