"""Gateway debugging CLI (package entrypoint).

Argument parsing lives in ``cli_parser`` and subcommand handlers in
``cli_actions``; this module only dispatches.
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_actions import handle_chat, handle_models, handle_usage
from .cli_parser import SUBCOMMANDS, build_parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (0 success, non-zero on error).
    """
    p = build_parser()
    # "chat" is the default subcommand
    argv_list = list(sys.argv[1:] if argv is None else argv)
    if not argv_list or argv_list[0] not in SUBCOMMANDS and argv_list[0] not in {"-h", "--help"}:
        argv_list = ["chat"] + argv_list
    args = p.parse_args(argv_list)

    if args.cmd == "models":
        return handle_models(args)
    return handle_usage(args) if args.cmd == "usage" else handle_chat(args)


__all__ = ["main"]
