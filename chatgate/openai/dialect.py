"""OpenAI dialect registration."""
from __future__ import annotations

from ..base.dialect import Dialect
from .payload import build_chat_payload, build_image_payload, build_speech_payload
from .stream import extract_images, extract_message, parse_models, translate_fragment

DIALECT = Dialect(
    name="openai",
    build_chat_payload=build_chat_payload,
    translate_fragment=translate_fragment,
    extract_message=extract_message,
    parse_models=parse_models,
    build_image_payload=build_image_payload,
    extract_images=extract_images,
    build_speech_payload=build_speech_payload,
    supports_usage=True,
)

__all__ = ["DIALECT"]
