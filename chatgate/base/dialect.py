"""Dialect: the bundle of pure functions one wire protocol needs.

A dialect is a plain struct of functions rather than a class hierarchy; the
registry pairs each provider descriptor with one of them.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .descriptor import ProviderDescriptor
from .models import ChatRequest, SpeechRequest
from .streaming.fragment import Fragment

PayloadBuilder = Callable[[ChatRequest, ProviderDescriptor], Dict[str, Any]]


@dataclass(frozen=True)
class Dialect:
    """Pure request/response shaping functions for one wire protocol.

    Attributes:
        name: Dialect id referenced by descriptors.
        build_chat_payload: Chat request -> wire payload.
        translate_fragment: Streamed JSON chunk -> :class:`Fragment`.
        extract_message: Buffered JSON reply -> :class:`Fragment`.
        parse_models: Listing JSON -> model ids.
        build_image_payload: Image-generation payload, when supported.
        extract_images: Image reply -> image references (URLs or data URLs).
        build_speech_payload: Text-to-speech payload, when supported.
        supports_usage: Offers the billing usage/subscription endpoints.
    """

    name: str
    build_chat_payload: PayloadBuilder
    translate_fragment: Callable[[Mapping[str, Any]], Fragment]
    extract_message: Callable[[Mapping[str, Any]], Fragment]
    parse_models: Callable[[Mapping[str, Any]], List[str]]
    build_image_payload: Optional[PayloadBuilder] = None
    extract_images: Optional[Callable[[Mapping[str, Any]], Sequence[str]]] = None
    build_speech_payload: Optional[Callable[[SpeechRequest], Dict[str, Any]]] = None
    supports_usage: bool = False


__all__ = ["Dialect", "PayloadBuilder"]
