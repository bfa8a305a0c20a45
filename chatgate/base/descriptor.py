"""Provider descriptor: the static facts needed to address one provider.

Descriptors are immutable. Configuration overrides (base URL, Azure API
version) produce a new descriptor through :meth:`ProviderDescriptor.with_overrides`.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional, Tuple


class AuthStyle(str, Enum):
    """How the credential is presented upstream."""

    BEARER = "bearer"
    API_KEY_HEADER = "api-key-header"
    QUERY_PARAM = "query-param"


class PathStyle(str, Enum):
    """Which URL template family the endpoint builder applies."""

    OPENAI = "openai"
    AZURE = "azure"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


@dataclass(frozen=True)
class ProviderDescriptor:
    """Static description of a provider.

    Attributes:
        id: Registry key (``"openai"``, ``"azure"`` ...).
        display_name: Human-readable name.
        auth_style: Where the credential goes (see :class:`AuthStyle`).
        auth_header: Header name for header styles, query parameter name for
            ``QUERY_PARAM``.
        dialect: Payload/stream dialect name (``openai``, ``anthropic``, ``google``).
        path_style: URL template family.
        base_url_default: Built-in base URL; empty when it must be configured.
        base_url_override: Server-configured base URL, preferred over the default.
        requires_model_in_path: Model id is part of the URL path (Gemini).
        api_version: Version segment or query value (Azure ``api-version``,
            Gemini ``v1beta``).
        extra_headers: Static headers sent on every request.
        secret_separator: Providers authenticating with ``key<sep>secret``.
        max_image_bytes: Largest inline image accepted upstream.
        model_prefixes: Listing filter; empty keeps every model.
        supports_access_code: Accept ``nk-`` access codes as the credential of
            last resort. Only set for a configured base URL that fronts an
            access-gated gateway; public endpoints never see access codes.
    """

    id: str
    display_name: str
    auth_style: AuthStyle
    dialect: str
    path_style: PathStyle
    base_url_default: str = ""
    auth_header: str = "Authorization"
    base_url_override: Optional[str] = None
    requires_model_in_path: bool = False
    api_version: Optional[str] = None
    extra_headers: Mapping[str, str] = field(default_factory=dict)
    secret_separator: Optional[str] = None
    max_image_bytes: Optional[int] = None
    model_prefixes: Tuple[str, ...] = ()
    supports_access_code: bool = False

    @property
    def base_url(self) -> str:
        return self.base_url_override or self.base_url_default

    @property
    def is_azure(self) -> bool:
        return self.path_style is PathStyle.AZURE

    def with_overrides(
        self,
        *,
        base_url: Optional[str] = None,
        api_version: Optional[str] = None,
        access_gated: bool = False,
    ) -> "ProviderDescriptor":
        changes = {}
        if base_url:
            changes["base_url_override"] = base_url
            if access_gated:
                changes["supports_access_code"] = True
        if api_version:
            changes["api_version"] = api_version
        return replace(self, **changes) if changes else self


__all__ = ["AuthStyle", "PathStyle", "ProviderDescriptor"]
