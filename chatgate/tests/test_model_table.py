from __future__ import annotations

from chatgate.base.models import ModelInfo, ModelProvider
from chatgate.utils.model_table import (
    collect_model_table,
    collect_models,
    default_models,
    deployment_for,
    is_model_blocked,
    split_model_provider,
)


def _available(models):
    return [m.key for m in models if m.available]


def test_split_model_provider_uses_last_at():
    assert split_model_provider("a@b@azure") == ("a@b", "azure")
    assert split_model_provider("gpt-4o") == ("gpt-4o", None)


def test_disable_all_then_enable_one():
    models = collect_models(default_models(), "-all,+gpt-4o@openai")
    assert _available(models) == ["gpt-4o@openai"]


def test_enable_without_provider_matches_every_provider():
    table = collect_model_table(default_models(), "-all,gpt-4o")
    assert sorted(k for k, m in table.items() if m.available) == ["gpt-4o@azure", "gpt-4o@openai"]


def test_unknown_model_creates_custom_provider_entry():
    table = collect_model_table(default_models(), "my-model=My Model,llama-3@Acme")
    custom = table["my-model@custom"]
    assert custom.display_name == "My Model"
    assert custom.provider == ModelProvider(id="custom", provider_name="Custom", provider_type="custom", sorted=-1000)
    assert custom.sorted == -999
    acme = table["llama-3@acme"]
    assert acme.provider.provider_name == "Acme"
    assert acme.provider.sorted < 0


def test_table_building_is_deterministic():
    table = "a,b@X,c=C"
    assert collect_model_table([], table) == collect_model_table([], table)


def test_custom_providers_sort_first_and_default_is_marked():
    models = collect_models(default_models(), "my-model", "gpt-4o")
    assert models[0].name == "my-model"
    defaults = [m.key for m in models if m.is_default]
    assert defaults == ["gpt-4o@openai"]


def test_display_name_rename_keeps_availability():
    base = [ModelInfo(name="gpt-4o", available=True, sorted=1, provider=ModelProvider("openai", "OpenAI", "openai", 1))]
    table = collect_model_table(base, "gpt-4o=GPT-4 Omni")
    assert table["gpt-4o@openai"].display_name == "GPT-4 Omni"
    assert table["gpt-4o@openai"].available


def test_deployment_for():
    custom = "gpt-4o@azure=prod-4o,gpt-4o-mini@openai=mini,-o1@azure=x"
    assert deployment_for(custom, "gpt-4o") == "prod-4o"
    assert deployment_for(custom, "gpt-4o-mini") is None
    assert deployment_for(custom, "o1") is None


def test_deployment_defaults_to_model_name_of_azure_entry():
    assert deployment_for("+gpt-4o@azure", "gpt-4o") == "gpt-4o"
    assert deployment_for("gpt-4.1@azure", "gpt-4.1") == "gpt-4.1"
    assert deployment_for("+gpt-4o@azure=prod,-gpt-4o@azure", "gpt-4o") is None
    assert deployment_for("+gpt-4o", "gpt-4o") is None
    assert deployment_for("", "gpt-4o") is None


def test_is_model_blocked():
    assert is_model_blocked("-gpt-4o@openai", "gpt-4o", "openai")
    assert not is_model_blocked("-gpt-4o@openai", "gpt-4o", "azure")
    assert not is_model_blocked("", "some-unlisted-model", "openai")
    assert is_model_blocked("", "gpt-4-turbo", "openai", disable_gpt4=True)
    assert not is_model_blocked("", "gpt-4o-mini", "openai", disable_gpt4=True)


def test_model_info_to_dict():
    info = collect_model_table(default_models(), "")["gpt-4o@openai"]
    data = info.to_dict()
    assert data["name"] == "gpt-4o"
    assert data["displayName"] == "gpt-4o"
    assert data["provider"]["providerType"] == "openai"
