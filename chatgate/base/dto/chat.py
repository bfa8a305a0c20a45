"""
Pydantic DTOs and validators for inbound gateway requests.

Purpose
-------
Validate JSON bodies posted to the HTTP service before they become domain
objects (:class:`ChatRequest`, :class:`SpeechRequest`). Roles, content shape
and numeric bounds are checked here so provider dialects only ever see
well-formed requests.

External dependencies: Pydantic only (no network calls). No timeouts.

Failure semantics: validation either succeeds or raises
``pydantic.ValidationError``; the service maps that to a 422 response.

Wire shape
----------
Messages follow the OpenAI chat format. Content is a string or a list of
parts; an image part may carry its URL directly (``"image_url": "..."``) or
nested (``"image_url": {"url": "..."}``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

from ..models import ChatRequest, ContentPart, Message, SamplingParams, SpeechRequest

Role = Literal["system", "user", "assistant", "developer"]


class ContentPartDTO(BaseModel):
    """A text block or an image reference within a message."""

    type: Literal["text", "image_url"]
    text: Optional[str] = None
    image_url: Optional[Union[str, Dict[str, Any]]] = None

    @model_validator(mode="after")
    def _validate_part(self) -> "ContentPartDTO":
        if self.type == "image_url" and not self.url:
            raise ValueError("image_url part requires a url")
        if self.type == "text" and self.text is None:
            raise ValueError("text part requires text")
        return self

    @property
    def url(self) -> Optional[str]:
        ref = self.image_url
        if isinstance(ref, dict):
            ref = ref.get("url")
        return str(ref) if ref else None

    def to_domain(self) -> ContentPart:
        if self.type == "image_url":
            return ContentPart.of_image(self.url or "")
        return ContentPart.of_text(self.text or "")


class MessageDTO(BaseModel):
    """A chat message with either a text string or a list of parts.

    Rules:
        - ``content`` must be a non-empty string or a non-empty part list.
        - A ``user`` message must carry some visible content (text or image).
    """

    role: Role
    content: Union[str, List[ContentPartDTO]]

    @model_validator(mode="after")
    def _validate_content(self) -> "MessageDTO":
        content = self.content
        if isinstance(content, str):
            if self.role == "user" and content.strip() == "":
                raise ValueError("user message content must be non-empty")
            return self
        if not content:
            raise ValueError("content parts must be a non-empty list")
        if self.role == "user" and not any((p.text and p.text.strip()) or p.url for p in content):
            raise ValueError("user message must include text or an image")
        return self

    def to_domain(self) -> Message:
        if isinstance(self.content, str):
            return Message(self.role, self.content)
        return Message(self.role, tuple(p.to_domain() for p in self.content))


class ChatRequestDTO(BaseModel):
    """Inbound chat request.

    Parameters:
        model: Target model identifier (non-empty).
        messages: Ordered, non-empty list of messages.
        stream: Stream events (NDJSON) or return one JSON result.
        temperature: Within ``[0.0, 2.0]``.
        top_p: Within ``[0.0, 1.0]``.
        presence_penalty, frequency_penalty: Within ``[-2.0, 2.0]``.
        max_tokens: Positive when given.
        size, quality, style: Image generation options.
    """

    model: str = Field(..., min_length=1)
    messages: List[MessageDTO] = Field(..., min_length=1)
    stream: bool = True
    temperature: float = Field(default=0.5, ge=0.0, le=2.0)
    top_p: float = Field(default=1.0, ge=0.0, le=1.0)
    presence_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    frequency_penalty: float = Field(default=0.0, ge=-2.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    size: Optional[str] = None
    quality: Optional[str] = None
    style: Optional[str] = None

    @model_validator(mode="after")
    def _validate_sequence(self) -> "ChatRequestDTO":
        # A conversation cannot open with an assistant turn.
        if self.messages[0].role == "assistant":
            raise ValueError("first message must not be from 'assistant'")
        return self

    def to_domain(self) -> ChatRequest:
        return ChatRequest(
            messages=tuple(m.to_domain() for m in self.messages),
            model=self.model,
            sampling=SamplingParams(
                temperature=self.temperature,
                top_p=self.top_p,
                presence_penalty=self.presence_penalty,
                frequency_penalty=self.frequency_penalty,
            ),
            stream=self.stream,
            max_tokens=self.max_tokens,
            size=self.size,
            quality=self.quality,
            style=self.style,
        )


class SpeechRequestDTO(BaseModel):
    """Inbound text-to-speech request."""

    model: str = Field(..., min_length=1)
    input: str = Field(..., min_length=1)
    voice: str = Field(..., min_length=1)
    response_format: str = "mp3"
    speed: float = Field(default=1.0, ge=0.25, le=4.0)

    def to_domain(self) -> SpeechRequest:
        return SpeechRequest(
            model=self.model,
            input=self.input,
            voice=self.voice,
            response_format=self.response_format,
            speed=self.speed,
        )


__all__ = [
    "Role",
    "ContentPartDTO",
    "MessageDTO",
    "ChatRequestDTO",
    "SpeechRequestDTO",
]
