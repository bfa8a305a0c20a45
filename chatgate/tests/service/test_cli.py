from __future__ import annotations

import json

import pytest

from chatgate.service.cli import main
from chatgate.service.cli.cli_parser import _str2bool, build_parser

SECRET = "sk-cli-secret-9999"


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("OPENAI_API_KEY", "GOOGLE_API_KEY", "GEMINI_API_KEY", "CHATGATE_CONFIG_FILE", "OPENAI_BASE_URL", "BASE_URL"):
        monkeypatch.delenv(name, raising=False)


def _last_json(text: str) -> dict:
    lines = [line for line in text.splitlines() if line.strip()]
    return json.loads(lines[-1])


def test_parser_defaults_and_stream_flags():
    parser = build_parser()
    args = parser.parse_args(["chat"])
    assert args.stream is True
    assert args.execute is False
    assert parser.parse_args(["chat", "--no-stream"]).stream is False
    assert parser.parse_args(["chat", "--stream", "off"]).stream is False
    assert parser.parse_args(["models", "--provider", "google"]).cmd == "models"


@pytest.mark.parametrize("value, expected", [(None, True), ("yes", True), ("0", False), ("off", False), ("anything", True)])
def test_str2bool(value, expected):
    assert _str2bool(value) is expected


def test_dry_run_prints_plan_without_secret(capsys):
    code = main(["--provider", "openai", "--model", "gpt-4o-mini", "--api-key", SECRET, "--prompt", "hello"])
    assert code == 0
    out = capsys.readouterr().out
    plan = _last_json(out)
    assert plan["url"] == "https://api.openai.com/v1/chat/completions"
    assert plan["credential_source"] == "caller"
    assert plan["credential"] == "sk-…99"
    assert plan["stream"] is True
    assert plan["prompt_preview"] == "hello"
    assert SECRET not in out


@pytest.mark.parametrize("model", ["dall-e-3", "gpt-image-1"])
def test_dry_run_plans_image_models_against_images_endpoint(capsys, model):
    code = main(["--provider", "openai", "--model", model, "--api-key", SECRET, "--prompt", "a cat"])
    assert code == 0
    plan = _last_json(capsys.readouterr().out)
    assert plan["url"] == "https://api.openai.com/v1/images/generations"
    assert plan["operation"] == "image"
    assert plan["stream"] is False


def test_dry_run_uses_table_deployment_for_azure(capsys, monkeypatch):
    monkeypatch.setenv("AZURE_URL", "https://res.openai.azure.com/openai")
    monkeypatch.setenv("CUSTOM_MODELS", "+gpt-4o@azure")
    code = main(["--provider", "azure", "--model", "gpt-4o", "--api-key", SECRET])
    assert code == 0
    plan = _last_json(capsys.readouterr().out)
    assert "/openai/deployments/gpt-4o/chat/completions" in plan["url"]


def test_dry_run_redacts_query_key(capsys):
    code = main(["chat", "--provider", "google", "--model", "gemini-2.0-flash", "--api-key", SECRET])
    assert code == 0
    out = capsys.readouterr().out
    plan = _last_json(out)
    assert ":streamGenerateContent" in plan["url"]
    assert SECRET not in out


def test_missing_credential_exits_2_with_hint(capsys):
    code = main(["--provider", "openai"])
    assert code == 2
    error = _last_json(capsys.readouterr().err)
    assert error["error"]["code"] == "no_credential"
    assert error["set_one_of_env"] == ["OPENAI_API_KEY"]


def test_unknown_provider_exits_2(capsys):
    assert main(["--provider", "nope", "--api-key", SECRET]) == 2
    assert _last_json(capsys.readouterr().err)["error"]["code"] == "unknown_provider"


def test_execute_requires_prompt(capsys):
    assert main(["--api-key", SECRET, "--execute"]) == 2
    assert "--prompt" in capsys.readouterr().err
