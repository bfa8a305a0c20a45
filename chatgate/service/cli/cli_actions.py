"""CLI action handlers.

Purpose
-------
Subcommand handlers for the gateway CLI. ``chat`` prints a dry-run plan
(provider, redacted endpoint, credential source) unless ``--execute`` is
given; ``models`` and ``usage`` always call upstream.

Error semantics
---------------
Errors are printed as JSON to stderr. Exit codes: ``0`` success, ``1``
upstream or runtime failure, ``2`` configuration error (unknown provider,
missing credential, incomplete settings).

Secrets are never printed; credentials appear masked.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from typing import Any, Dict, Optional

from ...base.errors import ProviderError
from ...base.log_support.redaction import redact_url
from ...base.logging import LogContext, get_logger, normalized_log_event
from ...base.models import CallSettings, ChatRequest, Credentials
from ...base.streaming import TextDelta, event_to_dict
from ...config import GatewayConfig, load_config
from ...config.env import get_env_var_candidates
from ..client import ChatClient

_logger = get_logger("chatgate.cli")


def settings_from_args(args: argparse.Namespace) -> CallSettings:
    return CallSettings(
        provider=args.provider,
        credentials=Credentials(api_key=args.api_key, api_secret=args.api_secret, access_code=args.access_code),
        base_url=args.base_url,
        azure_deployment=args.deployment,
        azure_api_version=args.api_version,
    )


def request_from_args(args: argparse.Namespace) -> ChatRequest:
    request = ChatRequest.simple(args.model, args.prompt or "", stream=args.stream, system=args.system)
    if args.temperature is not None:
        request = replace(request, sampling=replace(request.sampling, temperature=args.temperature))
    if args.max_tokens is not None:
        request = replace(request, max_tokens=args.max_tokens)
    return request


def _print_error(error: ProviderError) -> int:
    payload: Dict[str, Any] = {"error": error.to_dict()}
    if error.code.is_configuration:
        candidates = list(get_env_var_candidates(error.provider))
        if candidates:
            payload["set_one_of_env"] = candidates
    print(json.dumps(payload), file=sys.stderr)
    return 2 if error.code.is_configuration else 1


def plan_chat(args: argparse.Namespace, config: Optional[GatewayConfig] = None) -> Dict[str, Any]:
    """Compute a dry-run plan for a chat call without any network I/O.

    Raises:
        ProviderError: the same configuration errors ``ChatClient.chat`` raises.
    """
    plan = ChatClient(config or load_config()).plan_chat(request_from_args(args), settings_from_args(args))
    prompt = args.prompt
    return {
        "provider": plan.provider,
        "model": args.model,
        "operation": plan.operation.value,
        "url": redact_url(plan.url),
        "credential_source": plan.credential_source,
        "credential": plan.masked_credential,
        "stream": plan.stream,
        "timeout_s": plan.timeout,
        "prompt_preview": f"{prompt[:64]}..." if prompt and len(prompt) > 64 else prompt,
    }


async def _run_chat(args: argparse.Namespace) -> int:
    ctx = LogContext(provider=args.provider, model=args.model, operation="cli.chat")
    normalized_log_event(_logger, "cli.start", ctx, phase="start", attempt=1)
    async with ChatClient() as client:
        handle = client.chat(request_from_args(args), settings_from_args(args))
        async for event in handle:
            if args.json:
                print(json.dumps(event_to_dict(event), ensure_ascii=False), flush=True)
            elif isinstance(event, TextDelta):
                print(event.delta, end="", flush=True)
        result = await handle.wait()
    if not args.json:
        print()
    if result.error is not None:
        return _print_error(result.error)
    return 0


def handle_chat(args: argparse.Namespace) -> int:
    """Execute the ``chat`` subcommand (dry-run plan or real call)."""
    try:
        if not args.execute:
            print(json.dumps(plan_chat(args)))
            return 0
        if not args.prompt:
            print(json.dumps({"error": "--prompt is required with --execute"}), file=sys.stderr)
            return 2
        return asyncio.run(_run_chat(args))
    except ProviderError as exc:
        return _print_error(exc)


async def _list_models(args: argparse.Namespace) -> list:
    async with ChatClient() as client:
        return await client.list_models(settings_from_args(args))


def handle_models(args: argparse.Namespace) -> int:
    try:
        models = asyncio.run(_list_models(args))
    except ProviderError as exc:
        return _print_error(exc)
    if args.json:
        print(json.dumps([m.to_dict() for m in models]))
    else:
        for m in models:
            if m.available:
                marker = "*" if m.is_default else " "
                print(f"{marker} {m.name:<40} {m.provider.provider_name if m.provider else ''}")
    return 0


async def _fetch_usage(args: argparse.Namespace):
    async with ChatClient() as client:
        return await client.usage(settings_from_args(args))


def handle_usage(args: argparse.Namespace) -> int:
    try:
        summary = asyncio.run(_fetch_usage(args))
    except ProviderError as exc:
        return _print_error(exc)
    if args.json:
        print(json.dumps({"used": summary.used, "total": summary.total}))
    else:
        print(f"used {summary.used:.2f} of {summary.total:.2f}")
    return 0


__all__ = ["handle_chat", "handle_models", "handle_usage", "plan_chat", "request_from_args", "settings_from_args"]
