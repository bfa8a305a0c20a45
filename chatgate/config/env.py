"""chatgate.config.env
===================

Environment variable names for provider credentials and base URLs.

Design Notes
------------
- Canonical names live in ``ENV_MAP``; legacy or vendor-documented aliases
  live in ``ENV_ALIASES`` with the canonical name first.
- Lookups accept an explicit ``environ`` mapping so configuration loading
  stays testable without touching ``os.environ``.
- Values that look like placeholders (``changeme``, ``your-key-here`` ...)
  are treated as unset.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, Mapping, Optional, Tuple

# Provider id -> canonical API key variable
ENV_MAP: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "openai-compatible": "OPENAI_COMPATIBLE_API_KEY",
    "azure": "AZURE_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GOOGLE_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "xai": "XAI_API_KEY",
    "moonshot": "MOONSHOT_API_KEY",
    "siliconflow": "SILICONFLOW_API_KEY",
    "iflytek": "IFLYTEK_API_KEY",
}

ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "google": ("GOOGLE_API_KEY", "GEMINI_API_KEY"),
}

# Provider id -> base URL variables (first non-empty wins)
BASE_URL_ENV: Dict[str, Tuple[str, ...]] = {
    "openai": ("OPENAI_BASE_URL", "BASE_URL"),
    "openai-compatible": ("OPENAI_COMPATIBLE_BASE_URL",),
    "azure": ("AZURE_URL", "AZURE_BASE_URL"),
    "anthropic": ("ANTHROPIC_URL", "ANTHROPIC_BASE_URL"),
    "google": ("GOOGLE_URL", "GOOGLE_BASE_URL"),
    "deepseek": ("DEEPSEEK_URL", "DEEPSEEK_BASE_URL"),
    "xai": ("XAI_URL", "XAI_BASE_URL"),
    "moonshot": ("MOONSHOT_URL", "MOONSHOT_BASE_URL"),
    "siliconflow": ("SILICONFLOW_URL", "SILICONFLOW_BASE_URL"),
    "iflytek": ("IFLYTEK_URL", "IFLYTEK_BASE_URL"),
}

# Providers whose server key is ``<key>:<secret>``
SECRET_ENV: Dict[str, str] = {"iflytek": "IFLYTEK_API_SECRET"}

_PLACEHOLDER_MARKERS = ("placeholder", "changeme", "your-key", "your_api_key", "xxxx")


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if ``val`` looks like a template value rather than a secret."""
    if val is None:
        return False
    v = str(val).strip().lower()
    return any(marker in v for marker in _PLACEHOLDER_MARKERS)


def get_env_var_candidates(provider: str) -> Iterable[str]:
    """Yield acceptable API key variable names for a provider (canonical first)."""
    p = (provider or "").lower()
    canonical = ENV_MAP.get(p)
    if canonical:
        yield canonical
    for alias in ENV_ALIASES.get(p, ()):
        if alias != canonical:
            yield alias


def _first_value(names: Iterable[str], environ: Mapping[str, str]) -> Tuple[Optional[str], Optional[str]]:
    for name in names:
        val = (environ.get(name) or "").strip()
        if val and not is_placeholder(val):
            return val, name
    return None, None


def resolve_provider_key(provider: str, environ: Optional[Mapping[str, str]] = None) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, variable_name)`` of the provider's server key.

    Providers listed in ``SECRET_ENV`` only resolve when both halves are set.
    """
    env = os.environ if environ is None else environ
    value, name = _first_value(get_env_var_candidates(provider), env)
    secret_var = SECRET_ENV.get((provider or "").lower())
    if value and secret_var:
        secret, _ = _first_value((secret_var,), env)
        if not secret:
            return None, None
        value = f"{value}:{secret}"
    return value, name


def resolve_base_url(provider: str, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
    env = os.environ if environ is None else environ
    value, _ = _first_value(BASE_URL_ENV.get((provider or "").lower(), ()), env)
    return value


__all__ = [
    "ENV_MAP",
    "ENV_ALIASES",
    "BASE_URL_ENV",
    "SECRET_ENV",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_provider_key",
    "resolve_base_url",
]
