"""Unified timeout configuration for gateway calls.

Key Components
--------------
TimeoutConfig
    Dataclass capturing normalized timeout values in seconds.

get_timeout_config()
    Returns a process-cached configuration, parsing environment overrides on
    first use (and again whenever the relevant variables change). Supported
    environment variables (all optional):
        CHATGATE_TIMEOUT_DEFAULT_SECONDS
        CHATGATE_TIMEOUT_SLOW_SECONDS
        CHATGATE_TIMEOUT_CONNECT_SECONDS

timeout_for_model(model)
    Picks the request timeout for a model. Image generation and
    reasoning/thinking families are slow to produce a first byte and get the
    longer ``slow_model_seconds`` budget.

Timeout semantics
-----------------
The chosen value is applied as the httpx read timeout, i.e. the longest the
transport waits for the next byte. For streams this makes it an idle timeout
between chunks; no absolute wall-clock cap is imposed on a healthy stream.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

from ..utils.model_traits import is_slow_model


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        default_seconds: Read/idle timeout for ordinary chat models and for
            buffered calls (listing, usage, speech).
        slow_model_seconds: Read/idle timeout for slow model families.
        connect_seconds: TCP/TLS connect timeout.
    """

    default_seconds: float = 60.0
    slow_model_seconds: float = 300.0
    connect_seconds: float = 10.0


_CACHED: TimeoutConfig | None = None
_ENV_GUARD: str | None = None
_ENV_NAMES = (
    "CHATGATE_TIMEOUT_DEFAULT_SECONDS",
    "CHATGATE_TIMEOUT_SLOW_SECONDS",
    "CHATGATE_TIMEOUT_CONNECT_SECONDS",
)


def _parse_env_float(name: str, default: float) -> float:
    """Parse a positive float from the environment, falling back to ``default``."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
    except ValueError:  # pragma: no cover - defensive
        return default
    return val if val > 0 else default


def get_timeout_config() -> TimeoutConfig:
    """Return the process-cached :class:`TimeoutConfig`.

    The cache is refreshed when any ``CHATGATE_TIMEOUT_*`` variable changes,
    which lets tests adjust values with ``monkeypatch.setenv``.
    """
    global _CACHED, _ENV_GUARD  # noqa: PLW0603 - intentional, documented module cache
    guard = "/".join(os.getenv(name, "") for name in _ENV_NAMES)
    if _CACHED is not None and _ENV_GUARD == guard:
        return _CACHED
    defaults = TimeoutConfig()
    _CACHED = TimeoutConfig(
        default_seconds=_parse_env_float("CHATGATE_TIMEOUT_DEFAULT_SECONDS", defaults.default_seconds),
        slow_model_seconds=_parse_env_float("CHATGATE_TIMEOUT_SLOW_SECONDS", defaults.slow_model_seconds),
        connect_seconds=_parse_env_float("CHATGATE_TIMEOUT_CONNECT_SECONDS", defaults.connect_seconds),
    )
    _ENV_GUARD = guard
    return _CACHED


def timeout_for_model(model: str | None, config: TimeoutConfig | None = None) -> float:
    """Return the read timeout (seconds) for ``model``."""
    cfg = config or get_timeout_config()
    if model and is_slow_model(model):
        return cfg.slow_model_seconds
    return cfg.default_seconds


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
    "timeout_for_model",
]
