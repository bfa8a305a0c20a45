"""Credential resolution and authentication header construction.

Purpose
-------
Decide, for one call, which secret is presented to the provider and how.
Resolution order (first match wins):

1. the caller's own API key, verbatim (joined with the caller's secret for
   providers that authenticate with ``key:secret`` pairs);
2. the server fallback key configured for *exactly* this provider id;
3. the caller's access code, presented as ``nk-<code>``, but only when the
   provider's configured base URL is itself an access-gated gateway;
4. otherwise ``ErrorCode.NO_CREDENTIAL``, raised before any network call.

Keys configured for other providers are never consulted.

Server side
-----------
:func:`parse_auth_token` and :func:`check_access` implement the gateway half
of the access-code scheme: an inbound ``Authorization`` header is split into
access code or API key, and access codes are checked against md5 hashes.

All functions are pure; nothing here logs or touches the environment.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from typing import AbstractSet, Dict, Mapping, Optional

from .descriptor import AuthStyle, ProviderDescriptor
from .errors import ErrorCode, ProviderError
from .log_support.redaction import mask_secret
from .models import Credentials

ACCESS_CODE_PREFIX = "nk-"


class CredentialSource(str, Enum):
    CALLER = "caller"
    SERVER = "server"
    ACCESS_CODE = "access_code"


@dataclass(frozen=True)
class ResolvedCredential:
    """The secret chosen for a call and where it came from."""

    provider: str
    source: CredentialSource
    value: str = field(repr=False)

    @property
    def masked(self) -> str:
        return mask_secret(self.value)


@dataclass(frozen=True)
class AuthMaterial:
    """Headers and query parameters that carry the credential."""

    headers: Dict[str, str]
    params: Dict[str, str]


def resolve_credential(
    descriptor: ProviderDescriptor,
    credentials: Credentials,
    fallback_keys: Mapping[str, str],
) -> ResolvedCredential:
    """Pick the credential for ``descriptor`` (see module docstring for order).

    Raises:
        ProviderError: ``NO_CREDENTIAL`` when nothing applies.
    """
    api_key = credentials.api_key or ""
    if api_key.strip():
        secret = credentials.api_secret or ""
        if descriptor.secret_separator and secret.strip():
            api_key = f"{api_key}{descriptor.secret_separator}{secret}"
        return ResolvedCredential(descriptor.id, CredentialSource.CALLER, api_key)

    server_key = (fallback_keys.get(descriptor.id) or "").strip()
    if server_key:
        return ResolvedCredential(descriptor.id, CredentialSource.SERVER, server_key)

    access_code = (credentials.access_code or "").strip()
    if access_code and descriptor.supports_access_code:
        return ResolvedCredential(descriptor.id, CredentialSource.ACCESS_CODE, ACCESS_CODE_PREFIX + access_code)

    raise ProviderError(
        code=ErrorCode.NO_CREDENTIAL,
        message=f"no credential available for provider '{descriptor.id}'",
        provider=descriptor.id,
    )


def build_auth(descriptor: ProviderDescriptor, credential: ResolvedCredential) -> AuthMaterial:
    """Render ``credential`` according to the descriptor's auth style.

    Static ``extra_headers`` and the JSON content type are included so the
    result is the complete header set for a request.
    """
    headers: Dict[str, str] = {"Content-Type": "application/json"}
    headers.update(descriptor.extra_headers)
    params: Dict[str, str] = {}
    if descriptor.auth_style is AuthStyle.BEARER:
        headers[descriptor.auth_header] = f"Bearer {credential.value}"
    elif descriptor.auth_style is AuthStyle.API_KEY_HEADER:
        headers[descriptor.auth_header] = credential.value
    else:
        params[descriptor.auth_header] = credential.value
    return AuthMaterial(headers=headers, params=params)


# ---------------------------------------------------------------------------
# Gateway side
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AuthToken:
    """An inbound ``Authorization`` value split into its two possible meanings."""

    access_code: str = field(default="", repr=False)
    api_key: str = field(default="", repr=False)


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None


def hash_access_code(code: str) -> str:
    """md5 hex digest used to store access codes (never stored in clear)."""
    return hashlib.md5((code or "").encode("utf-8"), usedforsecurity=False).hexdigest()  # nosec B324 - lookup hash, not a password store


def parse_auth_token(header_value: Optional[str]) -> AuthToken:
    """Split ``Bearer <token>`` into access code (``nk-`` prefix) or API key."""
    token = (header_value or "").strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()
    if token.startswith(ACCESS_CODE_PREFIX):
        return AuthToken(access_code=token[len(ACCESS_CODE_PREFIX):])
    return AuthToken(api_key=token)


def check_access(token: AuthToken, allowed_hashes: AbstractSet[str]) -> AccessDecision:
    """Gate an inbound request.

    Access control is active when ``allowed_hashes`` is non-empty. Callers
    bringing their own API key pass; otherwise the access code's hash must be
    listed.
    """
    if not allowed_hashes or token.api_key:
        return AccessDecision(True)
    if not token.access_code:
        return AccessDecision(False, "empty access code")
    if hash_access_code(token.access_code) not in allowed_hashes:
        return AccessDecision(False, "wrong access code")
    return AccessDecision(True)


__all__ = [
    "ACCESS_CODE_PREFIX",
    "AccessDecision",
    "AuthMaterial",
    "AuthToken",
    "CredentialSource",
    "ResolvedCredential",
    "build_auth",
    "check_access",
    "hash_access_code",
    "parse_auth_token",
    "resolve_credential",
]
