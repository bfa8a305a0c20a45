from __future__ import annotations

import pytest

from chatgate.base.timeouts import TimeoutConfig, get_timeout_config, timeout_for_model
from chatgate.utils.model_traits import (
    is_gpt4_model,
    is_image_model,
    is_o_series,
    is_slow_model,
    is_vision_model,
)


@pytest.mark.parametrize(
    "model, slow",
    [
        ("gpt-4o-mini", False),
        ("claude-3-7-sonnet-20250219", False),
        ("o1", True),
        ("o3-mini", True),
        ("gpt-5-mini", True),
        ("dall-e-3", True),
        ("deepseek-chat", False),
        ("deepseek-reasoner", True),
        ("deepseek-r1", True),
        ("gemini-2.0-flash-thinking-exp", True),
    ],
)
def test_slow_models(model, slow):
    assert is_slow_model(model) is slow


def test_timeout_for_model_uses_config():
    cfg = TimeoutConfig(default_seconds=5, slow_model_seconds=50, connect_seconds=1)
    assert timeout_for_model("gpt-4o", cfg) == 5
    assert timeout_for_model("o1", cfg) == 50
    assert timeout_for_model(None, cfg) == 5


def test_timeout_env_overrides(monkeypatch):
    monkeypatch.setenv("CHATGATE_TIMEOUT_DEFAULT_SECONDS", "12")
    monkeypatch.setenv("CHATGATE_TIMEOUT_SLOW_SECONDS", "-3")
    cfg = get_timeout_config()
    assert cfg.default_seconds == 12.0
    assert cfg.slow_model_seconds == 300.0
    monkeypatch.delenv("CHATGATE_TIMEOUT_DEFAULT_SECONDS")
    assert get_timeout_config().default_seconds == 60.0


def test_model_families():
    assert is_o_series("o4-mini") and not is_o_series("gpt-4o")
    assert is_image_model("dall-e-3") and is_image_model("gpt-image-1")
    assert is_vision_model("gpt-4o") and is_vision_model("o1")
    assert not is_vision_model("o3-mini")
    assert not is_vision_model("claude-3-5-haiku-20241022")
    assert not is_vision_model("deepseek-chat")
    assert is_gpt4_model("gpt-4-turbo") and not is_gpt4_model("gpt-4o-mini")
