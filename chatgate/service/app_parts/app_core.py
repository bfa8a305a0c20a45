"""Core helpers for the HTTP service.

Purpose
-------
Keep route functions in ``app.py`` short: client lookup, the access gate,
per-request caller settings and the mapping from :class:`ErrorCode` to HTTP
status all live here.

Access gate
-----------
The ``Authorization`` header carries either ``Bearer nk-<access code>`` or
``Bearer <api key>``. When access codes are configured, a request without
its own API key must present a listed code (hash compare). The resolved
:class:`Credentials` are passed to the client per call; nothing is written
to process state.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from ...base.credentials import check_access, parse_auth_token
from ...base.errors import ErrorCode, ProviderError
from ...base.logging import LogContext, get_logger, log_event
from ...base.models import CallSettings, Credentials
from ...utils.model_table import is_model_blocked
from ..client import ChatClient

_logger = get_logger("chatgate.service")

ERROR_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.NO_CREDENTIAL: 401,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.QUOTA_EXCEEDED: 402,
    ErrorCode.UNKNOWN_PROVIDER: 404,
    ErrorCode.INCOMPLETE_PROVIDER_CONFIG: 400,
    ErrorCode.MALFORMED: 400,
    ErrorCode.RATE_LIMIT: 429,
    ErrorCode.TIMEOUT: 504,
    ErrorCode.UNSUPPORTED: 501,
}


def status_for(code: ErrorCode) -> int:
    """HTTP status for an error code (502 for everything upstream-ish)."""
    return ERROR_STATUS.get(code, 502)


def error_response(error: ProviderError) -> JSONResponse:
    return JSONResponse(status_code=status_for(error.code), content={"ok": False, "error": error.to_dict()})


def get_client(request: Request) -> ChatClient:
    """Return the app's client, creating it from the environment on first use."""
    client: Optional[ChatClient] = getattr(request.app.state, "client", None)
    if client is None:
        client = ChatClient()
        request.app.state.client = client
    return client


def caller_settings(request: Request, provider: str, client: ChatClient) -> CallSettings:
    """Run the access gate and build the per-call settings.

    Raises:
        HTTPException: 401 when access control rejects the request.
    """
    config = client.config
    token = parse_auth_token(request.headers.get("authorization"))
    if config.access_control_enabled:
        decision = check_access(token, config.access_code_hashes)
        if not decision.allowed:
            log_event(
                _logger,
                "auth.denied",
                LogContext(provider=provider, operation=request.url.path),
                reason=decision.reason,
            )
            raise HTTPException(status_code=401, detail=decision.reason)
    credentials = Credentials(
        api_key=token.api_key,
        api_secret=request.headers.get("x-api-secret", ""),
        access_code=token.access_code,
    )
    return CallSettings(
        provider=provider,
        credentials=credentials,
        azure_deployment=request.headers.get("x-azure-deployment") or None,
    )


def ensure_model_allowed(client: ChatClient, model: str, provider: str) -> None:
    """Reject models the server configuration marks unavailable (403)."""
    config = client.config
    if is_model_blocked(config.custom_models, model, provider, disable_gpt4=config.disable_gpt4):
        raise HTTPException(status_code=403, detail=f"you are not allowed to use {model} model")


def providers_payload(client: ChatClient) -> Dict[str, Any]:
    providers = [
        {
            "id": d.id,
            "name": d.display_name,
            "dialect": d.dialect,
            "base_url": d.base_url,
            "has_server_key": bool(client.config.fallback_keys.get(d.id)),
        }
        for d in client.registry()
    ]
    return {"ok": True, "providers": providers}


__all__ = [
    "ERROR_STATUS",
    "caller_settings",
    "ensure_model_allowed",
    "error_response",
    "get_client",
    "providers_payload",
    "status_for",
]
