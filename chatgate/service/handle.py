"""Chat handle: one in-flight chat call.

Purpose
-------
A :class:`ChatHandle` drives an async source of :class:`StreamEvent` objects
on the running event loop and fans them out three ways:

- callbacks (:class:`ChatCallbacks`), invoked in event order;
- async iteration (``async for event in handle``), single consumer;
- ``await handle.wait()`` returning the accumulated :class:`ChatResult`.

Terminal semantics
------------------
Exactly one terminal event is delivered per call: ``Done``, a
``StreamError``, or a ``StreamError`` with code ``CANCELED`` after
:meth:`ChatHandle.cancel`. Nothing is delivered after it.

Threading
---------
Handles belong to the loop that created them. To cancel from another thread
use ``loop.call_soon_threadsafe(handle.cancel)``.
"""
from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Callable, List, Optional, Tuple

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import ErrorCode, ProviderError, error_from_exception
from ..base.logging import LogContext, log_event, normalized_log_event
from ..base.models import ChatResult, ProviderMetadata, ToolCall
from ..base.streaming import (
    Done,
    ReasoningDelta,
    StreamError,
    StreamEvent,
    StreamMetrics,
    TextDelta,
    ToolCallFragment,
    is_terminal,
)


@dataclass
class ChatCallbacks:
    """Optional per-call callbacks.

    ``on_update(full_text, delta)`` and ``on_reasoning(full_reasoning, delta)``
    receive the running concatenation plus the new piece.
    """

    on_update: Optional[Callable[[str, str], None]] = None
    on_reasoning: Optional[Callable[[str, str], None]] = None
    on_tool_call: Optional[Callable[[ToolCallFragment], None]] = None
    on_finish: Optional[Callable[[ChatResult], None]] = None
    on_error: Optional[Callable[[ProviderError], None]] = None
    on_cancel: Optional[Callable[[ChatResult], None]] = None


class ChatHandle:
    """Awaitable, async-iterable, cancellable view of one chat call."""

    def __init__(
        self,
        *,
        meta: ProviderMetadata,
        ctx: LogContext,
        logger: logging.Logger,
        callbacks: Optional[ChatCallbacks] = None,
    ) -> None:
        loop = asyncio.get_running_loop()
        self.meta = meta
        self.metrics = StreamMetrics()
        self.token = CancellationToken()
        self.events: List[StreamEvent] = []
        self._ctx = ctx
        self._logger = logger
        self._callbacks = callbacks or ChatCallbacks()
        self._result_future: asyncio.Future = loop.create_future()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None
        self._closed = False
        self._text = ""
        self._reasoning = ""
        self._tool_slots: List[List] = []
        self._images: Tuple[str, ...] = ()
        self._finish_reason: Optional[str] = None
        self.token.add_callback(self._on_token_cancel)

    # ------------------------------------------------------------------ public

    @property
    def ctx(self) -> LogContext:
        return self._ctx

    @property
    def done(self) -> bool:
        return self._closed

    @property
    def result(self) -> Optional[ChatResult]:
        return self._result_future.result() if self._result_future.done() else None

    def cancel(self, reason: Optional[str] = None) -> bool:
        """Cancel the call; returns ``False`` when it already finished."""
        if self._closed:
            return False
        return self.token.cancel(reason or "canceled by caller")

    async def wait(self) -> ChatResult:
        """Wait for the terminal event and return the accumulated result."""
        return await asyncio.shield(self._result_future)

    def __aiter__(self) -> AsyncIterator[StreamEvent]:
        return self._iterate()

    def attach_images(self, images: Tuple[str, ...]) -> None:
        self._images = tuple(images)

    # ---------------------------------------------------------------- internal

    def start(self, source: AsyncIterator[StreamEvent]) -> None:
        if self._closed:
            return
        self._task = asyncio.get_running_loop().create_task(self._drive(source))

    async def _drive(self, source: AsyncIterator[StreamEvent]) -> None:
        try:
            async with contextlib.aclosing(source):  # type: ignore[type-var]
                async for event in source:
                    self._dispatch(event)
                    if self._closed:
                        break
        except (asyncio.CancelledError, CancelledError):
            self._on_token_cancel(self.token.reason or "canceled")
        except ProviderError as exc:
            self._fail(exc)
        except Exception as exc:  # noqa: BLE001 - converted to a terminal error event
            if self._closed:
                log_event(
                    self._logger,
                    "chat.callback_error",
                    self._ctx,
                    level=logging.ERROR,
                    error=repr(exc),
                )
            else:
                self._fail(error_from_exception(exc, provider=self.meta.provider, model=self.meta.model))
        else:
            if not self._closed:
                self._dispatch(Done(self._finish_reason))

    async def _iterate(self) -> AsyncIterator[StreamEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if is_terminal(event):
                return

    def _dispatch(self, event: StreamEvent) -> None:
        if self._closed:
            return
        if isinstance(event, Done):
            self._finish_reason = event.finish_reason or self._finish_reason
            self._complete("done", event)
            return
        if isinstance(event, StreamError):
            error = ProviderError(
                code=event.code,
                message=event.message,
                provider=self.meta.provider,
                model=self.meta.model,
                status=event.status,
            )
            self._complete("canceled" if event.code is ErrorCode.CANCELED else "error", event, error)
            return

        self.events.append(event)
        self._queue.put_nowait(event)
        self.metrics.record_delta()
        cb = self._callbacks
        if isinstance(event, TextDelta):
            self._text += event.delta
            if cb.on_update:
                cb.on_update(self._text, event.delta)
        elif isinstance(event, ReasoningDelta):
            self._reasoning += event.delta
            if cb.on_reasoning:
                cb.on_reasoning(self._reasoning, event.delta)
        elif isinstance(event, ToolCallFragment):
            if event.id or not self._tool_slots:
                self._tool_slots.append([event.id, event.name, ""])
            slot = self._tool_slots[-1]
            slot[1] = slot[1] or event.name
            slot[2] += event.args_chunk
            if cb.on_tool_call:
                cb.on_tool_call(event)

    def _fail(self, error: ProviderError) -> None:
        if self._closed:
            return
        status = "canceled" if error.code is ErrorCode.CANCELED else "error"
        self._complete(status, StreamError(error.code, error.message, error.status), error)

    def _on_token_cancel(self, reason: Optional[str]) -> None:
        if self._closed:
            return
        message = reason or "canceled"
        error = ProviderError(
            code=ErrorCode.CANCELED,
            message=message,
            provider=self.meta.provider,
            model=self.meta.model,
        )
        self._complete("canceled", StreamError(ErrorCode.CANCELED, message), error)
        if self._task is not None and not self._task.done() and self._task is not asyncio.current_task():
            self._task.cancel()

    def _complete(self, status: str, event: StreamEvent, error: Optional[ProviderError] = None) -> None:
        self._closed = True
        self.events.append(event)
        self._queue.put_nowait(event)
        self.metrics.finalize()
        self.meta.latency_ms = self.metrics.total_duration_ms
        result = ChatResult(
            status=status,  # type: ignore[arg-type]
            meta=self.meta,
            text=self._text,
            reasoning=self._reasoning,
            tool_calls=tuple(ToolCall(i, s[0], s[1], s[2]) for i, s in enumerate(self._tool_slots)),
            images=self._images,
            finish_reason=self._finish_reason,
            error=error,
        )
        if not self._result_future.done():
            self._result_future.set_result(result)
        self._log_terminal(status, error)

        cb = self._callbacks
        if status == "done" and cb.on_finish:
            cb.on_finish(result)
        elif status == "error" and cb.on_error and error is not None:
            cb.on_error(error)
        elif status == "canceled" and cb.on_cancel:
            cb.on_cancel(result)

    def _log_terminal(self, status: str, error: Optional[ProviderError]) -> None:
        fields = self.metrics.to_fields()
        emitted = self.metrics.emitted > 0
        if status == "done":
            normalized_log_event(
                self._logger,
                "chat.finalize",
                self._ctx,
                phase="finalize",
                attempt=1,
                emitted=emitted,
                finish_reason=self._finish_reason,
                **fields,
            )
        elif status == "canceled":
            normalized_log_event(
                self._logger,
                "chat.canceled",
                self._ctx,
                phase="cancel",
                attempt=1,
                emitted=emitted,
                reason=error.message if error else None,
                **fields,
            )
        else:
            normalized_log_event(
                self._logger,
                "chat.error",
                self._ctx,
                phase="error",
                attempt=1,
                error_code=error.code.value if error else ErrorCode.INTERNAL.value,
                emitted=emitted,
                level=logging.WARNING,
                message=error.message if error else None,
                status=error.status if error else None,
                **fields,
            )


__all__ = ["ChatCallbacks", "ChatHandle"]
