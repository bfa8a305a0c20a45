"""Per-call caller settings and credentials.

Caller credentials are passed explicitly on every call; nothing is read from
a process-wide mutable store. ``repr`` of these objects never shows secrets.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..log_support.redaction import mask_secret


@dataclass(frozen=True)
class Credentials:
    """Caller-supplied secrets; every field may be empty."""

    api_key: str = field(default="", repr=False)
    api_secret: str = field(default="", repr=False)
    access_code: str = field(default="", repr=False)

    def __repr__(self) -> str:
        return (
            f"Credentials(api_key={mask_secret(self.api_key)!r}, "
            f"api_secret={'***' if self.api_secret else ''!r}, "
            f"access_code={'***' if self.access_code else ''!r})"
        )


@dataclass(frozen=True)
class CallSettings:
    """Which provider to call and how to reach it.

    Attributes:
        provider: Registry id (e.g. ``"openai"``, ``"azure"``).
        credentials: Caller secrets; empty fields defer to server fallbacks.
        base_url: Optional override of the provider's base URL.
        azure_deployment: Azure deployment name; when absent it is looked up
            from the custom model table (``model@azure=deployment``).
        azure_api_version: Azure ``api-version`` query value.
    """

    provider: str
    credentials: Credentials = field(default_factory=Credentials)
    base_url: Optional[str] = None
    azure_deployment: Optional[str] = None
    azure_api_version: Optional[str] = None


__all__ = ["Credentials", "CallSettings"]
