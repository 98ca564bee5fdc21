"""Request/notification correlation over a message channel.

ProtocolClient owns:
- a request-id counter (first id is 1, ids are never reused)
- a pending table mapping in-flight ids to futures
- a dispatch table mapping notification keys to carrier factories
- listeners per notification key, and error listeners

Inbound frames are handled one at a time in arrival order:
1. parse the frame
2. an id found in the pending table resolves that request, and the entry is
   removed
3. an id not in the pending table is an unmatched response (error)
4. otherwise the frame is a notification: its method maps to a dispatch key,
   the carrier is built from ``params`` and handed to every listener for the
   key; unknown keys are errors

Errors from the channel never stop the client. They are logged and delivered
to error listeners, and ``handle_frame`` reports REJECTED.

All state is owned by one event loop. Call the client only from that loop's
thread.
"""

from __future__ import annotations

import asyncio
import contextlib
import inspect
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any, Self

from ..config import ClientConfig
from ..exceptions import (
    ChannelClosedError,
    ProtocolFramingError,
    ProtocolRequestError,
    RequestTimeout,
)
from .channel import MessageChannel, WebSocketChannel
from .frames import InboundFrame, RequestFrame, parse_frame
from .notifications import Listener, NotificationFactory, notification_key

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

ErrorListener = Callable[[ProtocolFramingError], Any]

_UNSET: Any = object()


class FrameOutcome(str, Enum):
    """What handling a single inbound frame did."""

    RESOLVED = "resolved"  # completed a pending request
    DELIVERED = "delivered"  # dispatched a notification
    REJECTED = "rejected"  # malformed, unmatched or unknown; error reported


class ProtocolClient:
    """Client runtime shared by all generated bindings."""

    # Generated subclasses replace this with their static dispatch table
    notifications: Mapping[str, NotificationFactory] = {}

    def __init__(
        self,
        channel: MessageChannel,
        notifications: Mapping[str, NotificationFactory] | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
    ):
        self._channel = channel
        self._dispatch: Mapping[str, NotificationFactory] = (
            self.notifications if notifications is None else notifications
        )
        self._timeout = timeout
        self._last_id = 0
        self._pending: dict[int, tuple[str, asyncio.Future[Any]]] = {}
        self._listeners: dict[str, list[Listener[Any]]] = {}
        self._error_listeners: list[ErrorListener] = []
        self._reader_task: asyncio.Task[None] | None = None
        self._closed = False
        self._eof = False

    @classmethod
    async def connect(cls, url: str, config: ClientConfig | None = None) -> Self:
        """Open a WebSocket channel to ``url`` and start reading."""
        config = config or ClientConfig.from_env()
        channel = await WebSocketChannel.connect(url, config)
        client = cls(channel, timeout=config.timeout)
        client.start()
        return client

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def pending_ids(self) -> list[int]:
        """Ids of requests still awaiting a response."""
        return list(self._pending)

    @property
    def is_running(self) -> bool:
        return self._reader_task is not None and not self._reader_task.done()

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def request(
        self,
        method: str,
        params: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = _UNSET,
    ) -> Any:
        """Send a request and wait for its response.

        Args:
            method: Wire method, ``<domain>.<command>``
            params: Request parameters, omitted from the frame when None
            timeout: Seconds to wait; None waits forever. Defaults to the
                client's timeout.

        Returns:
            The response's ``result`` (None when the response has none)

        Raises:
            RequestTimeout: No response within ``timeout``
            ProtocolRequestError: The peer answered with an error
            ChannelClosedError: The channel closed before a response arrived
        """
        if self._closed or self._eof:
            raise ChannelClosedError("Client is closed")

        self._last_id += 1
        request_id = self._last_id
        frame = RequestFrame(id=request_id, method=method, params=dict(params) if params is not None else None)

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[request_id] = (method, future)

        try:
            await self._channel.send(frame.to_json())
            logger.debug(f"Sent {method} (id={request_id})")

            wait = self._timeout if timeout is _UNSET else timeout
            if wait is None:
                return await future
            try:
                return await asyncio.wait_for(future, timeout=wait)
            except TimeoutError:
                logger.warning(f"{method} (id={request_id}) timed out after {wait}s")
                raise RequestTimeout(method, request_id, wait) from None
        finally:
            self._pending.pop(request_id, None)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, name: str, handler: Listener[Any]) -> Callable[[], None]:
        """Call ``handler`` with each carrier dispatched under ``name``.

        Returns:
            A function that removes the listener again
        """
        self._listeners.setdefault(name, []).append(handler)

        def unsubscribe() -> None:
            self.remove_listener(name, handler)

        return unsubscribe

    def remove_listener(self, name: str, handler: Listener[Any]) -> None:
        handlers = self._listeners.get(name)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self._listeners[name]

    def add_error_listener(self, handler: ErrorListener) -> Callable[[], None]:
        """Call ``handler`` with every ProtocolFramingError the client sees."""
        self._error_listeners.append(handler)

        def unsubscribe() -> None:
            if handler in self._error_listeners:
                self._error_listeners.remove(handler)

        return unsubscribe

    # ------------------------------------------------------------------
    # Inbound frames
    # ------------------------------------------------------------------

    async def handle_frame(self, raw: str | bytes | dict[str, Any]) -> FrameOutcome:
        """Process one inbound frame."""
        try:
            frame = parse_frame(raw)
        except ProtocolFramingError as e:
            await self._report(e)
            return FrameOutcome.REJECTED

        if frame.is_response:
            return await self._complete(frame)

        if not frame.is_notification:
            await self._report(ProtocolFramingError("Frame has neither id nor method", frame=raw))
            return FrameOutcome.REJECTED

        return await self._dispatch_notification(frame, raw)

    async def _complete(self, frame: InboundFrame) -> FrameOutcome:
        entry = self._pending.pop(frame.id, None)  # type: ignore[arg-type]
        if entry is None:
            await self._report(
                ProtocolFramingError(f"Response for unknown or completed request id {frame.id}", frame=frame)
            )
            return FrameOutcome.REJECTED

        method, future = entry
        if future.done():
            # waiter already gave up (timeout or cancellation)
            return FrameOutcome.RESOLVED

        if frame.error is not None:
            future.set_exception(
                ProtocolRequestError(
                    method,
                    frame.id,  # type: ignore[arg-type]
                    frame.error.code,
                    frame.error.message,
                    frame.error.data,
                )
            )
        else:
            future.set_result(frame.result)
        logger.debug(f"Resolved {method} (id={frame.id})")
        return FrameOutcome.RESOLVED

    async def _dispatch_notification(self, frame: InboundFrame, raw: Any) -> FrameOutcome:
        key = notification_key(frame.method)  # type: ignore[arg-type]
        factory = self._dispatch.get(key)
        if factory is None:
            await self._report(ProtocolFramingError(f"No notification registered for {frame.method}", frame=raw))
            return FrameOutcome.REJECTED

        carrier = factory(frame.params)
        for handler in list(self._listeners.get(key, ())):
            try:
                result = handler(carrier)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Error in listener for {key}")
        return FrameOutcome.DELIVERED

    async def _report(self, error: ProtocolFramingError) -> None:
        logger.warning(f"Protocol framing error: {error}")
        for handler in list(self._error_listeners):
            try:
                result = handler(error)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Error in error listener")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background task that reads frames from the channel."""
        if self._reader_task is None:
            self._reader_task = asyncio.create_task(self._read_loop())

    async def run(self) -> None:
        """Read and handle frames until the channel closes."""
        try:
            async for raw in self._channel:
                await self.handle_frame(raw)
        finally:
            self._eof = True
            self._fail_pending(ChannelClosedError("Channel closed"))

    async def _read_loop(self) -> None:
        try:
            await self.run()
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Read loop error: {e}")

    async def close(self) -> None:
        """Stop reading, close the channel and fail outstanding requests."""
        if self._closed:
            return
        self._closed = True

        if self._reader_task:
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
            self._reader_task = None

        self._fail_pending(ChannelClosedError("Client closed"))
        await self._channel.close()

    def _fail_pending(self, error: Exception) -> None:
        for method, future in self._pending.values():
            if not future.done():
                logger.debug(f"Failing pending {method}: {error}")
                future.set_exception(error)
        self._pending.clear()

    async def __aenter__(self) -> Self:
        self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
