"""FastAPI application exposing the client facade over HTTP.

Routes
------
- ``GET  /api/health``
- ``GET  /api/providers``
- ``POST /api/{provider}/chat``: NDJSON stream of normalized events, or one
  JSON result when ``stream`` is false
- ``GET  /api/{provider}/models``
- ``GET  /api/{provider}/usage``
- ``POST /api/{provider}/speech``: raw audio bytes

Errors
------
:class:`ProviderError` raised before a response starts is returned as
``{"ok": false, "error": {...}}`` with the status from ``ERROR_STATUS``.
Once an NDJSON stream has started, failures arrive as its terminal ``error``
event instead.

Testing
-------
``create_app(client)`` accepts a prepared :class:`ChatClient` (typically one
whose transport wraps ``httpx.MockTransport``).
"""
from __future__ import annotations

import json
import os
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse

from ..base.dto import ChatRequestDTO, SpeechRequestDTO
from ..base.errors import ProviderError
from ..base.streaming import event_to_dict
from ..config.defaults import SERVICE_CORS_DEFAULT_ORIGINS
from .app_parts.app_core import (
    caller_settings,
    ensure_model_allowed,
    error_response,
    get_client,
    providers_payload,
    status_for,
)
from .client import ChatClient, ChatHandle

_SPEECH_MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "opus": "audio/ogg",
    "aac": "audio/aac",
    "flac": "audio/flac",
    "wav": "audio/wav",
    "pcm": "audio/pcm",
}


def create_app(client: Optional[ChatClient] = None) -> FastAPI:
    """Build the application; ``client`` defaults to one loaded from the environment."""
    app = FastAPI(title="chatgate", version="0.1.0")
    app.state.client = client

    cors_origins_env = os.getenv("CHATGATE_CORS_ORIGINS", SERVICE_CORS_DEFAULT_ORIGINS)
    allow_origins = [o.strip() for o in cors_origins_env.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProviderError)
    async def _provider_error(_: Request, exc: ProviderError) -> JSONResponse:
        return error_response(exc)

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        return {"ok": True}

    @app.get("/api/providers")
    def get_providers(client: ChatClient = Depends(get_client)) -> Dict[str, Any]:
        """List registered providers and whether a server key is configured."""
        return providers_payload(client)

    @app.post("/api/{provider}/chat")
    async def post_chat(
        provider: str,
        body: ChatRequestDTO,
        request: Request,
        client: ChatClient = Depends(get_client),
    ) -> Response:
        """Run one chat call.

        Streaming responses emit one JSON object per line, ending with a
        ``done`` or ``error`` event. Closing the connection cancels the
        upstream call.
        """
        settings = caller_settings(request, provider, client)
        ensure_model_allowed(client, body.model, provider)
        handle = client.chat(body.to_domain(), settings)
        if not body.stream:
            result = await handle.wait()
            status = 200 if result.ok else status_for(result.error.code) if result.error else 502
            return JSONResponse(status_code=status, content={"ok": result.ok, "result": result.to_dict()})
        return StreamingResponse(_ndjson(handle), media_type="application/x-ndjson")

    @app.get("/api/{provider}/models")
    async def get_models(provider: str, request: Request, client: ChatClient = Depends(get_client)) -> Dict[str, Any]:
        settings = caller_settings(request, provider, client)
        models = await client.list_models(settings)
        return {"ok": True, "models": [m.to_dict() for m in models]}

    @app.get("/api/{provider}/usage")
    async def get_usage(provider: str, request: Request, client: ChatClient = Depends(get_client)) -> Dict[str, Any]:
        settings = caller_settings(request, provider, client)
        summary = await client.usage(settings)
        return {"ok": True, "used": summary.used, "total": summary.total}

    @app.post("/api/{provider}/speech")
    async def post_speech(
        provider: str,
        body: SpeechRequestDTO,
        request: Request,
        client: ChatClient = Depends(get_client),
    ) -> Response:
        settings = caller_settings(request, provider, client)
        audio = await client.speech(body.to_domain(), settings)
        media_type = _SPEECH_MEDIA_TYPES.get(body.response_format, "application/octet-stream")
        return Response(content=audio, media_type=media_type)

    @app.on_event("shutdown")
    async def _close_client() -> None:
        if app.state.client is not None:
            await app.state.client.aclose()

    return app


async def _ndjson(handle: ChatHandle) -> AsyncIterator[bytes]:
    try:
        async for event in handle:
            yield (json.dumps(event_to_dict(event), ensure_ascii=False) + "\n").encode("utf-8")
    finally:
        handle.cancel("client disconnected")


app = create_app()


def get_app() -> FastAPI:
    """Return the module-level application (for ``uvicorn chatgate.service.app:app``)."""
    return app


__all__ = ["app", "create_app", "get_app"]
