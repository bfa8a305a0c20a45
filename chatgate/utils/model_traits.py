"""Model family classification helpers.

Pure string predicates over model ids used by the payload adapters (vision
content, reasoning-only parameter sets, image generation) and by the timeout
policy. All checks are case-insensitive.
"""
from __future__ import annotations

import re
from typing import Tuple

VISION_KEYWORDS: Tuple[str, ...] = (
    "vision",
    "gpt-4o",
    "gpt-4.1",
    "gpt-4-turbo",
    "gpt-5",
    "claude-3",
    "claude-sonnet-4",
    "claude-opus-4",
    "gemini-1.5",
    "gemini-2",
    "gemini-exp",
    "learnlm",
    "qwen-vl",
    "qwen2-vl",
    "glm-4v",
    "grok-4",
    "kimi-latest",
)
VISION_EXCLUDED: Tuple[str, ...] = ("claude-3-5-haiku-20241022",)
_O_SERIES = re.compile(r"^o\d")
_GPT4_PREFIXES: Tuple[str, ...] = ("gpt-4", "chatgpt-4o", "o1")
SLOW_MODEL_MARKERS: Tuple[str, ...] = ("dall-e", "gpt-image", "deepseek-r", "-thinking")


def _norm(model: str) -> str:
    return (model or "").strip().lower()


def is_o_series(model: str) -> bool:
    """``o1``, ``o3-mini``, ``o4-mini`` and friends."""
    return bool(_O_SERIES.match(_norm(model)))


def is_gpt5(model: str) -> bool:
    return _norm(model).startswith("gpt-5")


def is_reasoning_model(model: str) -> bool:
    """Reasoning-only families that reject custom sampling parameters."""
    return is_o_series(model) or is_gpt5(model)


def is_image_model(model: str) -> bool:
    """Image-generation models answered by the images endpoint."""
    name = _norm(model)
    return name.startswith("dall-e") or name.startswith("gpt-image")


def is_vision_model(model: str) -> bool:
    name = _norm(model)
    if name in VISION_EXCLUDED:
        return False
    if is_o_series(name) and not name.startswith("o1-mini") and not name.startswith("o3-mini"):
        return True
    return any(keyword in name for keyword in VISION_KEYWORDS)


def is_slow_model(model: str) -> bool:
    """Models that may take minutes before the first byte arrives."""
    name = _norm(model)
    return is_reasoning_model(name) or any(marker in name for marker in SLOW_MODEL_MARKERS)


def is_gpt4_model(model: str) -> bool:
    """GPT-4 class models (gated by ``disable_gpt4`` on the server)."""
    name = _norm(model)
    return name.startswith(_GPT4_PREFIXES) and not name.startswith("gpt-4o-mini")


__all__ = [
    "VISION_KEYWORDS",
    "SLOW_MODEL_MARKERS",
    "is_o_series",
    "is_gpt5",
    "is_reasoning_model",
    "is_image_model",
    "is_vision_model",
    "is_slow_model",
    "is_gpt4_model",
]
