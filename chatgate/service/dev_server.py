from __future__ import annotations

import os

import uvicorn

from ..config.defaults import SERVICE_DEFAULT_HOST, SERVICE_DEFAULT_PORT


def _parse_port(value: str | None, default: int) -> int:
    """Best-effort parse of a port from string, falling back to a sane default."""
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def server_options(environ: dict | None = None) -> dict:
    """Resolve uvicorn options from the environment.

    - CHATGATE_HOST: interface to bind (default "127.0.0.1")
    - CHATGATE_PORT: port to bind (default 8091)
    - CHATGATE_RELOAD: "true"/"false" to toggle auto-reload (default off)
    """
    env = os.environ if environ is None else environ
    return {
        "host": env.get("CHATGATE_HOST", SERVICE_DEFAULT_HOST),
        "port": _parse_port(env.get("CHATGATE_PORT"), SERVICE_DEFAULT_PORT),
        "reload": (env.get("CHATGATE_RELOAD") or "").lower() == "true",
    }


def main() -> None:
    """Serve the gateway app with uvicorn."""
    uvicorn.run("chatgate.service.app:app", **server_options())


if __name__ == "__main__":
    main()
