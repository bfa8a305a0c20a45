"""Uniform chat request dataclass."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple

from .message import Message
from .sampling import SamplingParams


@dataclass(frozen=True)
class ChatRequest:
    """Provider-neutral chat request, built fresh per call.

    Attributes:
        messages: Ordered conversation; stored as a tuple.
        model: Model id forwarded unchanged to the provider.
        sampling: Temperature / top_p / penalties.
        stream: Stream the reply as events when the model supports it.
        max_tokens: Optional completion budget.
        size, quality, style: Image-generation options (ignored for chat models).
    """

    messages: Tuple[Message, ...]
    model: str
    sampling: SamplingParams = field(default_factory=SamplingParams)
    stream: bool = True
    max_tokens: Optional[int] = None
    size: Optional[str] = None
    quality: Optional[str] = None
    style: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.messages, tuple):
            object.__setattr__(self, "messages", tuple(self.messages))

    @classmethod
    def simple(cls, model: str, prompt: str, *, stream: bool = True, system: Optional[str] = None) -> "ChatRequest":
        msgs: Sequence[Message] = ([Message("system", system)] if system else []) + [Message("user", prompt)]
        return cls(messages=tuple(msgs), model=model, stream=stream)

    def last_text(self) -> str:
        """Text of the final message (the prompt for image generation)."""
        return self.messages[-1].text() if self.messages else ""


__all__ = ["ChatRequest"]
