"""Configuration merge order: defaults -> file -> environment -> overrides."""
from __future__ import annotations

import json

import pytest

from chatgate.base.credentials import hash_access_code
from chatgate.config import ConfigHolder, GatewayConfig, load_config
from chatgate.config.defaults import AZURE_DEFAULT_API_VERSION
from chatgate.config.env import get_env_var_candidates, is_placeholder, resolve_provider_key


def test_defaults_with_empty_environment():
    cfg = load_config(environ={})
    assert cfg.fallback_keys == {}
    assert cfg.azure_api_version == AZURE_DEFAULT_API_VERSION
    assert not cfg.access_control_enabled
    assert not cfg.disable_list_models


def test_environment_keys_aliases_and_placeholders():
    env = {
        "OPENAI_API_KEY": "sk-openai-123456",
        "GEMINI_API_KEY": "g-key-123456",
        "ANTHROPIC_API_KEY": "changeme",
        "BASE_URL": "https://proxy.example.com",
        "CODE": "alpha, beta",
        "CUSTOM_MODELS": "-all,+gpt-4o",
        "DISABLE_GPT4": "1",
    }
    cfg = load_config(environ=env)
    assert cfg.fallback_keys == {"openai": "sk-openai-123456", "google": "g-key-123456"}
    assert cfg.base_urls == {"openai": "https://proxy.example.com"}
    assert cfg.access_code_hashes == frozenset({hash_access_code("alpha"), hash_access_code("beta")})
    assert cfg.custom_models == "-all,+gpt-4o"
    assert cfg.disable_gpt4 is True


def test_iflytek_requires_key_and_secret():
    assert resolve_provider_key("iflytek", {"IFLYTEK_API_KEY": "k"}) == (None, None)
    assert resolve_provider_key("iflytek", {"IFLYTEK_API_KEY": "k", "IFLYTEK_API_SECRET": "s"}) == ("k:s", "IFLYTEK_API_KEY")


def test_yaml_file_is_overridden_by_environment(tmp_path):
    path = tmp_path / "chatgate.yaml"
    path.write_text(
        "providers:\n"
        "  openai:\n"
        "    api_key: sk-from-file-0001\n"
        "  anthropic:\n"
        "    api_key: sk-ant-file-0001\n"
        "    base_url: https://anthropic.proxy\n"
        "    access_gated: true\n"
        "access_codes: [team]\n"
        "default_model: gpt-4o\n"
        "disable_list_models: true\n",
        encoding="utf-8",
    )
    cfg = load_config(environ={"OPENAI_API_KEY": "sk-from-env-0001"}, config_file=str(path))
    assert cfg.fallback_keys["openai"] == "sk-from-env-0001"
    assert cfg.fallback_keys["anthropic"] == "sk-ant-file-0001"
    assert cfg.base_urls["anthropic"] == "https://anthropic.proxy"
    assert cfg.access_gated == frozenset({"anthropic"})
    assert cfg.access_code_hashes == frozenset({hash_access_code("team")})
    assert cfg.default_model == "gpt-4o"
    assert cfg.disable_list_models is True


def test_json_file_via_environment_variable(tmp_path):
    path = tmp_path / "chatgate.json"
    path.write_text(json.dumps({"providers": {"deepseek": {"api_key": "ds-0001"}}}), encoding="utf-8")
    cfg = load_config(environ={"CHATGATE_CONFIG_FILE": str(path)})
    assert cfg.fallback_keys == {"deepseek": "ds-0001"}


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(environ={}, config_file=str(path))


def test_overrides_are_applied_last_and_validated():
    cfg = load_config(environ={"DEFAULT_MODEL": "gpt-4o"}, overrides={"default_model": "o1", "access_codes": "x"})
    assert cfg.default_model == "o1"
    assert cfg.access_code_hashes == frozenset({hash_access_code("x")})
    with pytest.raises(ValueError):
        load_config(environ={}, overrides={"no_such_field": 1})


def test_repr_and_masked_keys_hide_secrets():
    cfg = GatewayConfig(fallback_keys={"openai": "sk-secret-abcdef"})
    assert "sk-secret-abcdef" not in repr(cfg)
    assert cfg.masked_keys() == {"openai": "sk-…ef"}


def test_config_holder_reload_swaps_snapshot():
    snapshots = iter([GatewayConfig(default_model="a"), GatewayConfig(default_model="b")])
    holder = ConfigHolder(loader=lambda: next(snapshots))
    assert holder.current.default_model == "a"
    assert holder.reload().default_model == "b"
    assert holder.reload(GatewayConfig(default_model="c")).default_model == "c"
    assert holder.current.default_model == "c"


def test_env_helpers():
    assert list(get_env_var_candidates("google")) == ["GOOGLE_API_KEY", "GEMINI_API_KEY"]
    assert is_placeholder("your-key-here")
    assert not is_placeholder("sk-real")
