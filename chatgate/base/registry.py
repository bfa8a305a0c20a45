"""Provider registry.

Purpose
-------
Map provider ids to immutable :class:`ProviderDescriptor` records and resolve
each descriptor's :class:`Dialect`. Dialect modules are imported lazily with
``importlib`` so that importing the registry has no side effects.

Lifecycle
---------
A registry is built once from :data:`BUILTIN_PROVIDERS` plus configuration
overrides (base URLs, Azure API version) and is read-only afterwards;
concurrent calls share it freely. Configuration reloads build a new registry.

Failure modes
-------------
Unknown ids raise ``ProviderError(UNKNOWN_PROVIDER)``.
"""
from __future__ import annotations

from functools import lru_cache
from importlib import import_module
from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from .descriptor import AuthStyle, PathStyle, ProviderDescriptor
from .dialect import Dialect
from .errors import ErrorCode, ProviderError

if TYPE_CHECKING:  # pragma: no cover
    from ..config import GatewayConfig

ANTHROPIC_VERSION = "2023-06-01"
_MB = 1024 * 1024

BUILTIN_PROVIDERS: Tuple[ProviderDescriptor, ...] = (
    ProviderDescriptor(
        id="openai",
        display_name="OpenAI",
        auth_style=AuthStyle.BEARER,
        dialect="openai",
        path_style=PathStyle.OPENAI,
        base_url_default="https://api.openai.com",
        max_image_bytes=20 * _MB,
        model_prefixes=("gpt-", "chatgpt-"),
    ),
    ProviderDescriptor(
        id="openai-compatible",
        display_name="OpenAI Compatible",
        auth_style=AuthStyle.BEARER,
        dialect="openai",
        path_style=PathStyle.OPENAI,
        base_url_default="https://api.openai.com",
        max_image_bytes=20 * _MB,
    ),
    ProviderDescriptor(
        id="azure",
        display_name="Azure OpenAI",
        auth_style=AuthStyle.API_KEY_HEADER,
        auth_header="api-key",
        dialect="openai",
        path_style=PathStyle.AZURE,
        max_image_bytes=20 * _MB,
    ),
    ProviderDescriptor(
        id="anthropic",
        display_name="Anthropic",
        auth_style=AuthStyle.API_KEY_HEADER,
        auth_header="x-api-key",
        dialect="anthropic",
        path_style=PathStyle.ANTHROPIC,
        base_url_default="https://api.anthropic.com",
        extra_headers=MappingProxyType({"anthropic-version": ANTHROPIC_VERSION}),
        max_image_bytes=5 * _MB,
    ),
    ProviderDescriptor(
        id="google",
        display_name="Google",
        auth_style=AuthStyle.QUERY_PARAM,
        auth_header="key",
        dialect="google",
        path_style=PathStyle.GOOGLE,
        base_url_default="https://generativelanguage.googleapis.com",
        requires_model_in_path=True,
        api_version="v1beta",
        max_image_bytes=20 * _MB,
    ),
    ProviderDescriptor(
        id="deepseek",
        display_name="DeepSeek",
        auth_style=AuthStyle.BEARER,
        dialect="openai",
        path_style=PathStyle.OPENAI,
        base_url_default="https://api.deepseek.com",
    ),
    ProviderDescriptor(
        id="xai",
        display_name="xAI",
        auth_style=AuthStyle.BEARER,
        dialect="openai",
        path_style=PathStyle.OPENAI,
        base_url_default="https://api.x.ai",
        max_image_bytes=10 * _MB,
    ),
    ProviderDescriptor(
        id="moonshot",
        display_name="Moonshot",
        auth_style=AuthStyle.BEARER,
        dialect="openai",
        path_style=PathStyle.OPENAI,
        base_url_default="https://api.moonshot.cn",
    ),
    ProviderDescriptor(
        id="siliconflow",
        display_name="SiliconFlow",
        auth_style=AuthStyle.BEARER,
        dialect="openai",
        path_style=PathStyle.OPENAI,
        base_url_default="https://api.siliconflow.cn",
    ),
    ProviderDescriptor(
        id="iflytek",
        display_name="iFlytek Spark",
        auth_style=AuthStyle.BEARER,
        dialect="openai",
        path_style=PathStyle.OPENAI,
        base_url_default="https://spark-api-open.xf-yun.com",
        secret_separator=":",
    ),
)

# Dialect name -> "module:attribute"
_DIALECTS: Dict[str, str] = {
    "openai": "chatgate.openai.dialect:DIALECT",
    "anthropic": "chatgate.anthropic.dialect:DIALECT",
    "google": "chatgate.google.dialect:DIALECT",
}


@lru_cache(maxsize=None)
def load_dialect(name: str) -> Dialect:
    """Import and return the dialect registered as ``name``."""
    target = _DIALECTS.get(name)
    if target is None:
        raise ProviderError(
            code=ErrorCode.UNSUPPORTED,
            message=f"unknown dialect '{name}'",
            provider="-",
        )
    module_name, attr = target.split(":")
    return getattr(import_module(module_name), attr)


class ProviderRegistry:
    """Read-only provider id -> descriptor mapping."""

    def __init__(self, descriptors: Iterable[ProviderDescriptor] = BUILTIN_PROVIDERS) -> None:
        self._by_id: Mapping[str, ProviderDescriptor] = MappingProxyType({d.id: d for d in descriptors})

    @classmethod
    def from_config(cls, config: "GatewayConfig") -> "ProviderRegistry":
        """Apply configured base URLs, access gating and the Azure API version to the builtins."""
        descriptors = []
        for d in BUILTIN_PROVIDERS:
            api_version: Optional[str] = config.azure_api_version if d.is_azure else None
            descriptors.append(
                d.with_overrides(
                    base_url=config.base_urls.get(d.id),
                    api_version=api_version,
                    access_gated=d.id in config.access_gated,
                )
            )
        return cls(descriptors)

    def get(self, provider_id: str) -> ProviderDescriptor:
        key = (provider_id or "").strip().lower()
        try:
            return self._by_id[key]
        except KeyError:
            raise ProviderError(
                code=ErrorCode.UNKNOWN_PROVIDER,
                message=f"unknown provider '{provider_id}'. Known: {', '.join(sorted(self._by_id))}",
                provider=provider_id or "-",
            ) from None

    def dialect_for(self, provider_id: str) -> Dialect:
        return load_dialect(self.get(provider_id).dialect)

    def ids(self) -> Tuple[str, ...]:
        return tuple(self._by_id)

    def __contains__(self, provider_id: object) -> bool:
        return isinstance(provider_id, str) and provider_id.strip().lower() in self._by_id

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)


__all__ = ["ANTHROPIC_VERSION", "BUILTIN_PROVIDERS", "ProviderRegistry", "load_dialect"]
