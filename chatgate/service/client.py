"""Client facade.

Purpose
-------
Single entry point for callers: ``chat``, ``speech``, ``list_models`` and
``usage``. Each call is independent: it reads the current configuration
snapshot, looks up the provider, resolves the credential, builds the
endpoint and payload, and talks to the provider through the shared
transport.

Error channels
--------------
- Configuration problems (unknown provider, missing credential, incomplete
  Azure settings, unsupported operation, oversized inline image) raise
  :class:`ProviderError` synchronously from ``chat`` before any request is
  sent.
- Everything that happens after the request starts (HTTP status, network,
  timeout, malformed stream, cancellation) arrives through the handle as a
  terminal ``StreamError`` / ``on_error`` / ``ChatResult.error``.
- ``speech``, ``list_models`` and ``usage`` raise ``ProviderError``.

No call is retried.

Example
-------
    client = ChatClient()
    handle = client.chat(ChatRequest.simple("gpt-4o-mini", "hi"), CallSettings("openai"))
    async for event in handle:
        ...
    result = await handle.wait()
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any, AsyncIterator, List, Mapping, Optional, Union

from ..base.credentials import AuthMaterial, ResolvedCredential, build_auth, resolve_credential
from ..base.descriptor import ProviderDescriptor
from ..base.dialect import Dialect
from ..base.endpoints import Operation, build_endpoint
from ..base.errors import ErrorCode, ProviderError
from ..base.http import HttpTransport
from ..base.logging import LogContext, get_logger, log_event, normalized_log_event
from ..base.log_support.redaction import redact_url
from ..base.models import (
    CallSettings,
    ChatRequest,
    ModelInfo,
    ModelProvider,
    ProviderMetadata,
    SpeechRequest,
    UsageSummary,
)
from ..base.registry import ProviderRegistry, load_dialect
from ..base.streaming import Done, StreamError, StreamEvent, StreamReconciler
from ..base.timeouts import get_timeout_config, timeout_for_model
from ..config import ConfigHolder, GatewayConfig
from ..config.defaults import LISTED_MODEL_SEQ_START
from ..utils.model_table import collect_models, default_models, deployment_for
from ..utils.model_traits import is_image_model
from .handle import ChatCallbacks, ChatHandle
from .usage import summarize_usage, usage_window


@dataclass(frozen=True)
class _Call:
    """Everything resolved for one call before the first byte is sent."""

    descriptor: ProviderDescriptor
    dialect: Dialect
    credential: ResolvedCredential
    auth: AuthMaterial
    config: GatewayConfig


@dataclass(frozen=True)
class ChatPlan:
    """A prepared chat call: endpoint, payload and credential, nothing sent yet."""

    call: _Call
    operation: Operation
    stream: bool
    payload: Mapping[str, Any]
    url: str
    timeout: float

    @property
    def provider(self) -> str:
        return self.call.descriptor.id

    @property
    def credential_source(self) -> str:
        return self.call.credential.source.value

    @property
    def masked_credential(self) -> str:
        return self.call.credential.masked


class ChatClient:
    """Multi-provider chat client.

    Parameters:
        config: A :class:`GatewayConfig` snapshot or a :class:`ConfigHolder`
            (for reloadable configuration). Defaults to :func:`load_config`.
        registry: Provider registry; defaults to one built from the config.
        transport: HTTP transport; inject one wrapping
            ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        config: Union[GatewayConfig, ConfigHolder, None] = None,
        *,
        registry: Optional[ProviderRegistry] = None,
        transport: Optional[HttpTransport] = None,
    ) -> None:
        self._holder = config if isinstance(config, ConfigHolder) else ConfigHolder(config)
        self._registry = registry
        self._registry_cache: Optional[tuple] = None
        self._transport = transport or HttpTransport()
        self._logger = get_logger("chatgate.client")

    async def __aenter__(self) -> "ChatClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._transport.aclose()

    @property
    def config(self) -> GatewayConfig:
        return self._holder.current

    def registry(self, config: Optional[GatewayConfig] = None) -> ProviderRegistry:
        """Registry for ``config`` (rebuilt only when the snapshot changes)."""
        if self._registry is not None:
            return self._registry
        cfg = config or self.config
        cached = self._registry_cache
        if cached is None or cached[0] is not cfg:
            cached = (cfg, ProviderRegistry.from_config(cfg))
            self._registry_cache = cached
        return cached[1]

    def _prepare(self, settings: CallSettings) -> _Call:
        config = self.config
        descriptor = self.registry(config).get(settings.provider)
        dialect = load_dialect(descriptor.dialect)
        credential = resolve_credential(descriptor, settings.credentials, config.fallback_keys)
        log_event(
            self._logger,
            "auth.resolve",
            LogContext(provider=descriptor.id),
            level=logging.DEBUG,
            source=credential.source.value,
            credential=credential.masked,
        )
        return _Call(descriptor, dialect, credential, build_auth(descriptor, credential), config)

    def _endpoint(
        self,
        call: _Call,
        operation: Operation,
        settings: CallSettings,
        *,
        model: Optional[str] = None,
        stream: bool = False,
        query: Optional[Mapping[str, str]] = None,
    ) -> str:
        deployment = settings.azure_deployment
        if not deployment and call.descriptor.is_azure and model:
            deployment = deployment_for(call.config.custom_models, model, call.descriptor.id)
        return build_endpoint(
            call.descriptor,
            operation,
            base_url=settings.base_url,
            model=model,
            stream=stream,
            azure_deployment=deployment,
            azure_api_version=settings.azure_api_version,
            query=query,
            auth_params=call.auth.params,
        )

    # -------------------------------------------------------------------- chat

    def plan_chat(self, request: ChatRequest, settings: CallSettings) -> ChatPlan:
        """Resolve everything a chat call needs without sending anything.

        Image models are planned against the images endpoint. Payload
        pre-checks (inline image sizes) run here.

        Raises:
            ProviderError: configuration errors and rejected payloads.
        """
        call = self._prepare(settings)
        descriptor, dialect = call.descriptor, call.dialect
        model = request.model
        if is_image_model(model):
            if dialect.build_image_payload is None:
                raise ProviderError(
                    code=ErrorCode.UNSUPPORTED,
                    message=f"{descriptor.id} does not support image generation",
                    provider=descriptor.id,
                    model=model,
                )
            operation, stream = Operation.IMAGE, False
            payload = dialect.build_image_payload(request, descriptor)
        else:
            operation, stream = Operation.CHAT, request.stream
            payload = dialect.build_chat_payload(request, descriptor)
        return ChatPlan(
            call=call,
            operation=operation,
            stream=stream,
            payload=payload,
            url=self._endpoint(call, operation, settings, model=model, stream=stream),
            timeout=timeout_for_model(model),
        )

    def chat(
        self,
        request: ChatRequest,
        settings: CallSettings,
        callbacks: Optional[ChatCallbacks] = None,
    ) -> ChatHandle:
        """Start a chat call on the running event loop and return its handle.

        Raises:
            ProviderError: configuration errors, before any network activity.
        """
        plan = self.plan_chat(request, settings)
        call, descriptor = plan.call, plan.call.descriptor
        operation, stream, payload, url, timeout = plan.operation, plan.stream, plan.payload, plan.url, plan.timeout
        model = request.model
        image = operation is Operation.IMAGE

        request_id = uuid.uuid4().hex[:12]
        ctx = LogContext(provider=descriptor.id, model=model, request_id=request_id, operation=operation.value)
        meta = ProviderMetadata(
            provider=descriptor.id,
            model=model,
            request_id=request_id,
            credential_source=call.credential.source.value,
        )
        handle = ChatHandle(meta=meta, ctx=ctx, logger=self._logger, callbacks=callbacks)
        normalized_log_event(
            self._logger,
            "chat.start",
            ctx,
            phase="start",
            attempt=1,
            stream=stream,
            url=redact_url(url),
            credential_source=call.credential.source.value,
            credential=call.credential.masked,
            timeout_s=timeout,
        )
        if image:
            source = self._image_events(handle, call, url, payload, timeout, model)
        elif stream:
            source = self._stream_events(handle, call, url, payload, timeout, model)
        else:
            source = self._buffered_events(call, url, payload, timeout, model)
        handle.start(source)
        return handle

    async def _stream_events(
        self,
        handle: ChatHandle,
        call: _Call,
        url: str,
        payload: Mapping[str, Any],
        timeout: float,
        model: str,
    ) -> AsyncIterator[StreamEvent]:
        reconciler = StreamReconciler(call.dialect.translate_fragment)
        lines = self._transport.stream_lines(
            "POST",
            url,
            headers=call.auth.headers,
            json=payload,
            timeout=timeout,
            provider=call.descriptor.id,
            model=model,
            token=handle.token,
        )
        async with contextlib.aclosing(lines):  # type: ignore[type-var]
            async for line in lines:
                for event in reconciler.feed_line(line):
                    yield event
                if reconciler.closed:
                    break
        tail = reconciler.finish()
        log_event(
            self._logger,
            "stream.finalize",
            handle.ctx,
            state=reconciler.state.value,
            finish_reason=reconciler.finish_reason,
            tool_calls=len(reconciler.tool_calls),
            error_code=reconciler.error.code.value if reconciler.error else None,
        )
        for event in tail:
            yield event

    async def _buffered_events(
        self,
        call: _Call,
        url: str,
        payload: Mapping[str, Any],
        timeout: float,
        model: str,
    ) -> AsyncIterator[StreamEvent]:
        body = await self._transport.send_json(
            "POST", url, headers=call.auth.headers, json=payload, timeout=timeout, provider=call.descriptor.id, model=model
        )
        if not isinstance(body, dict):
            yield StreamError(ErrorCode.MALFORMED, "chat response is not a JSON object")
            return
        reconciler = StreamReconciler(call.dialect.translate_fragment)
        for event in reconciler.feed_fragment(call.dialect.extract_message(body)):
            yield event
        for event in reconciler.finish():
            yield event

    async def _image_events(
        self,
        handle: ChatHandle,
        call: _Call,
        url: str,
        payload: Mapping[str, Any],
        timeout: float,
        model: str,
    ) -> AsyncIterator[StreamEvent]:
        body = await self._transport.send_json(
            "POST", url, headers=call.auth.headers, json=payload, timeout=timeout, provider=call.descriptor.id, model=model
        )
        images = tuple(call.dialect.extract_images(body)) if call.dialect.extract_images and isinstance(body, dict) else ()
        if not images:
            yield StreamError(ErrorCode.MALFORMED, "image response contained no image")
            return
        handle.attach_images(images)
        yield Done("stop")

    # ------------------------------------------------------------------ speech

    async def speech(self, request: SpeechRequest, settings: CallSettings) -> bytes:
        """Synthesize speech and return the raw audio bytes."""
        call = self._prepare(settings)
        if call.dialect.build_speech_payload is None:
            raise ProviderError(
                code=ErrorCode.UNSUPPORTED,
                message=f"{call.descriptor.id} does not support speech",
                provider=call.descriptor.id,
                model=request.model,
            )
        url = self._endpoint(call, Operation.SPEECH, settings, model=request.model)
        ctx = LogContext(provider=call.descriptor.id, model=request.model, operation="speech")
        log_event(self._logger, "speech.start", ctx, url=redact_url(url), voice=request.voice)
        response = await self._transport.send(
            "POST",
            url,
            headers=call.auth.headers,
            json=call.dialect.build_speech_payload(request),
            timeout=get_timeout_config().default_seconds,
            provider=call.descriptor.id,
            model=request.model,
        )
        return response.content

    # ------------------------------------------------------------------ models

    async def list_models(self, settings: CallSettings) -> List[ModelInfo]:
        """Upstream (or built-in) models merged with the custom model table."""
        config = self.config
        descriptor = self.registry(config).get(settings.provider)
        ctx = LogContext(provider=descriptor.id, operation="models")
        if config.disable_list_models:
            log_event(self._logger, "models.fetch", ctx, source="builtin")
            return collect_models(default_models(), config.custom_models, config.default_model)

        call = self._prepare(settings)
        url = self._endpoint(call, Operation.MODELS, settings)
        body = await self._transport.send_json(
            "GET",
            url,
            headers=call.auth.headers,
            timeout=get_timeout_config().default_seconds,
            provider=descriptor.id,
        )
        names = call.dialect.parse_models(body if isinstance(body, dict) else {})
        if descriptor.model_prefixes:
            names = [n for n in names if n.startswith(descriptor.model_prefixes)]
        provider = ModelProvider(
            id=descriptor.id,
            provider_name=descriptor.display_name,
            provider_type=descriptor.dialect,
            sorted=1,
        )
        listed = [
            ModelInfo(name=name, available=True, sorted=LISTED_MODEL_SEQ_START + i, provider=provider)
            for i, name in enumerate(sorted(names))
        ]
        log_event(self._logger, "models.fetch", ctx, source="upstream", count=len(listed))
        return collect_models(listed, config.custom_models, config.default_model)

    # ------------------------------------------------------------------- usage

    async def usage(self, settings: CallSettings, *, today: Optional[date] = None) -> UsageSummary:
        """Month-to-date usage versus the hard limit (two concurrent requests)."""
        call = self._prepare(settings)
        provider = call.descriptor.id
        if not call.dialect.supports_usage:
            raise ProviderError(ErrorCode.UNSUPPORTED, f"{provider} does not report usage", provider)
        start, end = usage_window(today or date.today())
        usage_url = self._endpoint(call, Operation.USAGE, settings, query={"start_date": start, "end_date": end})
        subscription_url = self._endpoint(call, Operation.SUBSCRIPTION, settings)
        timeout = get_timeout_config().default_seconds
        log_event(self._logger, "usage.fetch", LogContext(provider=provider, operation="usage"), start=start, end=end)
        used, subscription = await asyncio.gather(
            self._transport.send_json("GET", usage_url, headers=call.auth.headers, timeout=timeout, provider=provider),
            self._transport.send_json("GET", subscription_url, headers=call.auth.headers, timeout=timeout, provider=provider),
            return_exceptions=True,
        )
        for outcome in (used, subscription):
            if isinstance(outcome, BaseException):
                raise outcome
        return summarize_usage(used, subscription, provider=provider)


__all__ = ["ChatClient", "ChatCallbacks", "ChatHandle", "ChatPlan"]
