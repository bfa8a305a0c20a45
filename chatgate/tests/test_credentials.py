"""Credential resolution and the gateway access gate."""
from __future__ import annotations

import pytest

from chatgate.base.credentials import (
    CredentialSource,
    build_auth,
    check_access,
    hash_access_code,
    parse_auth_token,
    resolve_credential,
)
from chatgate.base.errors import ErrorCode, ProviderError
from chatgate.base.models import Credentials
from chatgate.base.registry import ProviderRegistry
from chatgate.config import GatewayConfig

REGISTRY = ProviderRegistry()


def test_server_fallback_for_empty_caller_key():
    desc = REGISTRY.get("openai-compatible")
    cred = resolve_credential(desc, Credentials(api_key=""), {"openai-compatible": "sk-abc"})
    assert cred.source is CredentialSource.SERVER
    assert build_auth(desc, cred).headers["Authorization"] == "Bearer sk-abc"


def test_caller_key_wins_over_server_key():
    desc = REGISTRY.get("openai")
    cred = resolve_credential(desc, Credentials(api_key=" sk-mine "), {"openai": "sk-server"})
    assert cred.source is CredentialSource.CALLER
    assert cred.value == " sk-mine "


def test_other_providers_keys_are_never_used():
    desc = REGISTRY.get("deepseek")
    with pytest.raises(ProviderError) as info:
        resolve_credential(desc, Credentials(), {"openai": "sk-openai", "azure": "az"})
    assert info.value.code is ErrorCode.NO_CREDENTIAL
    assert info.value.provider == "deepseek"


def test_whitespace_only_caller_key_falls_back_to_server_key():
    desc = REGISTRY.get("openai")
    cred = resolve_credential(desc, Credentials(api_key="   "), {"openai": "sk-server"})
    assert cred.source is CredentialSource.SERVER


@pytest.mark.parametrize("provider", ["openai", "anthropic", "google", "azure", "deepseek"])
def test_access_code_is_never_sent_to_public_endpoints(provider):
    desc = REGISTRY.get(provider)
    assert desc.supports_access_code is False
    with pytest.raises(ProviderError) as info:
        resolve_credential(desc, Credentials(access_code="team-code"), {})
    assert info.value.code is ErrorCode.NO_CREDENTIAL


def test_access_code_is_presented_to_gated_gateway_only():
    config = GatewayConfig(
        base_urls={"openai": "https://gate.internal"},
        access_gated=frozenset({"openai", "deepseek"}),
    )
    registry = ProviderRegistry.from_config(config)
    desc = registry.get("openai")
    cred = resolve_credential(desc, Credentials(access_code="team-code"), {})
    assert cred.source is CredentialSource.ACCESS_CODE
    assert build_auth(desc, cred).headers["Authorization"] == "Bearer nk-team-code"
    # gating without a configured base URL keeps the public endpoint
    assert registry.get("deepseek").supports_access_code is False


def test_resolution_is_pure():
    desc = REGISTRY.get("anthropic")
    creds = Credentials(api_key="sk-ant-123")
    fallback = {"anthropic": "sk-ant-server"}
    first = resolve_credential(desc, creds, fallback)
    second = resolve_credential(desc, creds, fallback)
    assert first == second
    assert fallback == {"anthropic": "sk-ant-server"}


def test_key_and_secret_are_joined_for_iflytek():
    desc = REGISTRY.get("iflytek")
    cred = resolve_credential(desc, Credentials(api_key="key", api_secret="secret"), {})
    assert build_auth(desc, cred).headers["Authorization"] == "Bearer key:secret"


def test_auth_styles():
    azure = REGISTRY.get("azure")
    anthropic = REGISTRY.get("anthropic")
    google = REGISTRY.get("google")
    creds = Credentials(api_key="k-123")

    az = build_auth(azure, resolve_credential(azure, creds, {}))
    assert az.headers["api-key"] == "k-123"
    assert "Authorization" not in az.headers

    an = build_auth(anthropic, resolve_credential(anthropic, creds, {}))
    assert an.headers["x-api-key"] == "k-123"
    assert an.headers["anthropic-version"] == "2023-06-01"

    go = build_auth(google, resolve_credential(google, creds, {}))
    assert go.params == {"key": "k-123"}
    assert "Authorization" not in go.headers


def test_resolved_credential_repr_hides_value():
    desc = REGISTRY.get("openai")
    cred = resolve_credential(desc, Credentials(api_key="sk-very-secret-value"), {})
    assert "sk-very-secret-value" not in repr(cred)
    assert "sk-very-secret-value" not in repr(Credentials(api_key="sk-very-secret-value"))
    assert cred.masked == "sk-…ue"


def test_parse_auth_token():
    assert parse_auth_token("Bearer nk-letmein").access_code == "letmein"
    token = parse_auth_token("Bearer sk-user")
    assert token.api_key == "sk-user" and token.access_code == ""
    assert parse_auth_token(None).api_key == ""


def test_check_access():
    hashes = frozenset({hash_access_code("letmein")})
    assert check_access(parse_auth_token(""), frozenset()).allowed
    assert check_access(parse_auth_token("Bearer sk-own"), hashes).allowed
    assert check_access(parse_auth_token("Bearer nk-letmein"), hashes).allowed
    assert check_access(parse_auth_token(""), hashes).reason == "empty access code"
    assert check_access(parse_auth_token("Bearer nk-nope"), hashes).reason == "wrong access code"
