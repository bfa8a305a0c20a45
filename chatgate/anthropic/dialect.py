"""Anthropic dialect registration."""
from __future__ import annotations

from ..base.dialect import Dialect
from .payload import build_chat_payload
from .stream import extract_message, parse_models, translate_fragment

DIALECT = Dialect(
    name="anthropic",
    build_chat_payload=build_chat_payload,
    translate_fragment=translate_fragment,
    extract_message=extract_message,
    parse_models=parse_models,
)

__all__ = ["DIALECT"]
