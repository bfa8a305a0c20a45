"""CLI parser construction for chatgate.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions``.
"""

from __future__ import annotations

import argparse

from ...config.defaults import CLI_DEFAULT_MODEL, CLI_DEFAULT_PROVIDER

SUBCOMMANDS = ("chat", "models", "usage")


def _str2bool(v: str | None) -> bool:
    """Permissive conversion of common truthy/falsey strings to bool.

    ``None`` (flag given without a value) maps to ``True``.
    """
    if v is None:
        return True
    val = v.strip().lower()
    if val in {"1", "t", "true", "y", "yes", "on"}:
        return True
    return False if val in {"0", "f", "false", "n", "no", "off"} else bool(val)


def add_stream_flags(parser: argparse.ArgumentParser) -> None:
    """Attach ``--stream``/``--no-stream`` flags (streaming on by default)."""
    grp = parser.add_mutually_exclusive_group()
    grp.add_argument("--stream", nargs="?", const=True, type=_str2bool, default=True)
    grp.add_argument("--no-stream", dest="stream", action="store_false")


def add_connection_flags(parser: argparse.ArgumentParser) -> None:
    """Provider selection and per-call credentials shared by every subcommand."""
    parser.add_argument("--provider", default=CLI_DEFAULT_PROVIDER)
    parser.add_argument("--api-key", default="", help="Caller key; server keys from the environment are used when empty")
    parser.add_argument("--api-secret", default="")
    parser.add_argument("--access-code", default="")
    parser.add_argument("--base-url", default=None)
    parser.add_argument("--deployment", default=None, help="Azure deployment name")
    parser.add_argument("--api-version", default=None, help="Azure api-version")
    parser.add_argument("--json", action="store_true", help="Print machine-readable output")


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level parser with ``chat``, ``models`` and ``usage``.

    No I/O happens here.
    """
    p = argparse.ArgumentParser(prog="chatgate", description="Chat gateway debugging CLI (chat is a dry run unless --execute)")
    sub = p.add_subparsers(dest="cmd")

    p_chat = sub.add_parser("chat", help="Plan or execute a single prompt (default)")
    add_connection_flags(p_chat)
    p_chat.add_argument("--model", default=CLI_DEFAULT_MODEL)
    p_chat.add_argument("--prompt", default=None)
    p_chat.add_argument("--system", default=None)
    p_chat.add_argument("--temperature", type=float, default=None)
    p_chat.add_argument("--max-tokens", type=int, default=None)
    add_stream_flags(p_chat)
    p_chat.add_argument("--execute", action="store_true")

    p_models = sub.add_parser("models", help="List models for a provider")
    add_connection_flags(p_models)

    p_usage = sub.add_parser("usage", help="Show month-to-date usage and hard limit")
    add_connection_flags(p_usage)

    return p


__all__ = ["SUBCOMMANDS", "add_connection_flags", "add_stream_flags", "build_parser"]
