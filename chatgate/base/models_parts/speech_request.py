"""Text-to-speech request."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SpeechRequest:
    model: str
    input: str
    voice: str
    response_format: str = "mp3"
    speed: float = 1.0


__all__ = ["SpeechRequest"]
