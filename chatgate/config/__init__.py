"""Unified configuration layer.

Goals
-----
* One immutable :class:`GatewayConfig` snapshot per process (or per reload).
* Merge sources in a predictable order:
    1. Built-in defaults
    2. Optional config file (YAML or JSON) named by ``CHATGATE_CONFIG_FILE``
    3. Environment variables
    4. In-code overrides passed to :func:`load_config`
* Atomic reload through :class:`ConfigHolder`; calls in flight keep the
  snapshot they started with.

Environment Variable Conventions
--------------------------------
``<PROVIDER>_API_KEY`` (plus aliases such as ``GEMINI_API_KEY``),
``<PROVIDER>_URL`` / ``<PROVIDER>_BASE_URL``, ``IFLYTEK_API_SECRET``,
``CODE`` (comma-separated access codes), ``CUSTOM_MODELS``,
``DEFAULT_MODEL``, ``DISABLE_LIST_MODELS``, ``DISABLE_GPT4``,
``AZURE_API_VERSION``.

Config File
-----------
::

    providers:
      openai:
        api_key: sk-...
        base_url: https://gateway.internal
        access_gated: true
      iflytek:
        api_key: abc
        api_secret: def
    access_codes: ["team-code"]
    custom_models: "+gpt-4o,-gpt-4.1,gpt-4o@azure=prod-4o"
    default_model: gpt-4o
    disable_list_models: false
    azure_api_version: 2024-10-21

Access codes are hashed (md5) on load; clear-text codes are not retained.
``access_gated`` marks a configured ``base_url`` as another access-gated
gateway; only such providers are sent ``nk-`` access codes upstream.
"""
from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional

import yaml

from ..base.credentials import hash_access_code
from ..base.log_support.redaction import mask_secret
from .defaults import AZURE_DEFAULT_API_VERSION, CONFIG_FILE_ENV
from .env import ENV_MAP, is_placeholder, resolve_base_url, resolve_provider_key


@dataclass(frozen=True)
class GatewayConfig:
    """Server-side configuration snapshot.

    Attributes:
        fallback_keys: Provider id -> server key used when the caller has none.
        base_urls: Provider id -> configured base URL.
        access_code_hashes: md5 hashes of accepted access codes; non-empty
            enables access control in the HTTP service.
        access_gated: Provider ids whose configured base URL accepts ``nk-``
            access codes as credentials.
        custom_models: Custom model table expression (see ``utils.model_table``).
        default_model: Model marked ``is_default`` in listings.
        disable_list_models: Serve the built-in catalog instead of querying
            upstream listings.
        disable_gpt4: Treat GPT-4 class models as unavailable.
        azure_api_version: ``api-version`` for Azure calls.
    """

    fallback_keys: Mapping[str, str] = field(default_factory=dict, repr=False)
    base_urls: Mapping[str, str] = field(default_factory=dict)
    access_code_hashes: FrozenSet[str] = field(default_factory=frozenset, repr=False)
    access_gated: FrozenSet[str] = field(default_factory=frozenset)
    custom_models: str = ""
    default_model: str = ""
    disable_list_models: bool = False
    disable_gpt4: bool = False
    azure_api_version: Optional[str] = AZURE_DEFAULT_API_VERSION

    @property
    def access_control_enabled(self) -> bool:
        return bool(self.access_code_hashes)

    def masked_keys(self) -> Dict[str, str]:
        """Provider -> masked key, for diagnostics."""
        return {p: mask_secret(k) for p, k in self.fallback_keys.items()}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in ("1", "true", "yes", "on")


def _split_codes(value: Any) -> list:
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [str(v) for v in value]
    else:
        items = str(value or "").split(",")
    return [v.strip() for v in items if v and v.strip()]


def _read_config_file(path: Optional[str]) -> Dict[str, Any]:
    """Load a YAML or JSON config file; missing paths yield ``{}``."""
    if not path:
        return {}
    p = Path(path).expanduser()
    if not p.is_file():
        return {}
    text = p.read_text(encoding="utf-8")
    data = json.loads(text) if p.suffix.lower() == ".json" else yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config file {p} must contain a mapping at the top level")
    return data


def _apply_file(state: Dict[str, Any], data: Mapping[str, Any]) -> None:
    for provider, section in (data.get("providers") or {}).items():
        if not isinstance(section, Mapping):
            continue
        pid = str(provider).lower()
        key = str(section.get("api_key") or "").strip()
        if key and not is_placeholder(key):
            secret = str(section.get("api_secret") or "").strip()
            state["fallback_keys"][pid] = f"{key}:{secret}" if secret else key
        if section.get("base_url"):
            state["base_urls"][pid] = str(section["base_url"]).strip()
        if _as_bool(section.get("access_gated")):
            state["access_gated"].add(pid)
    if "access_codes" in data:
        state["codes"] = _split_codes(data["access_codes"])
    for name in ("custom_models", "default_model", "azure_api_version"):
        if data.get(name) is not None:
            state[name] = str(data[name])
    for name in ("disable_list_models", "disable_gpt4"):
        if name in data:
            state[name] = _as_bool(data[name])


def _apply_env(state: Dict[str, Any], environ: Mapping[str, str]) -> None:
    for provider in ENV_MAP:
        key, _ = resolve_provider_key(provider, environ)
        if key:
            state["fallback_keys"][provider] = key
        base = resolve_base_url(provider, environ)
        if base:
            state["base_urls"][provider] = base
    if environ.get("CODE"):
        state["codes"] = _split_codes(environ["CODE"])
    for name, var in (
        ("custom_models", "CUSTOM_MODELS"),
        ("default_model", "DEFAULT_MODEL"),
        ("azure_api_version", "AZURE_API_VERSION"),
    ):
        if environ.get(var):
            state[name] = environ[var].strip()
    for name, var in (("disable_list_models", "DISABLE_LIST_MODELS"), ("disable_gpt4", "DISABLE_GPT4")):
        if var in environ:
            state[name] = _as_bool(environ[var])


def load_config(
    *,
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[str] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> GatewayConfig:
    """Assemble a :class:`GatewayConfig` (defaults -> file -> env -> overrides).

    Parameters:
        environ: Environment mapping; defaults to ``os.environ``.
        config_file: Explicit file path; defaults to ``$CHATGATE_CONFIG_FILE``.
        overrides: Field values applied last. ``access_codes`` may be given in
            clear text and is hashed like the other sources.
    """
    env = os.environ if environ is None else environ
    state: Dict[str, Any] = {
        "fallback_keys": {},
        "base_urls": {},
        "codes": [],
        "access_gated": set(),
        "custom_models": "",
        "default_model": "",
        "disable_list_models": False,
        "disable_gpt4": False,
        "azure_api_version": AZURE_DEFAULT_API_VERSION,
    }
    _apply_file(state, _read_config_file(config_file or env.get(CONFIG_FILE_ENV)))
    _apply_env(state, env)

    config = GatewayConfig(
        fallback_keys=dict(state["fallback_keys"]),
        base_urls=dict(state["base_urls"]),
        access_code_hashes=frozenset(hash_access_code(c) for c in state["codes"]),
        access_gated=frozenset(state["access_gated"]),
        custom_models=state["custom_models"],
        default_model=state["default_model"],
        disable_list_models=state["disable_list_models"],
        disable_gpt4=state["disable_gpt4"],
        azure_api_version=state["azure_api_version"] or None,
    )
    if overrides:
        extra = dict(overrides)
        if "access_codes" in extra:
            extra["access_code_hashes"] = frozenset(hash_access_code(c) for c in _split_codes(extra.pop("access_codes")))
        known = {f.name for f in fields(GatewayConfig)}
        unknown = set(extra) - known
        if unknown:
            raise ValueError(f"unknown config overrides: {sorted(unknown)}")
        config = replace(config, **extra)
    return config


class ConfigHolder:
    """Holds the current :class:`GatewayConfig` and swaps it atomically."""

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        *,
        loader: Callable[[], GatewayConfig] = load_config,
    ) -> None:
        self._loader = loader
        self._lock = threading.Lock()
        self._config = config if config is not None else loader()

    @property
    def current(self) -> GatewayConfig:
        return self._config

    def reload(self, config: Optional[GatewayConfig] = None) -> GatewayConfig:
        """Replace the snapshot (re-running the loader when none is given)."""
        new = config if config is not None else self._loader()
        with self._lock:
            self._config = new
        return new


__all__ = ["GatewayConfig", "ConfigHolder", "load_config"]
