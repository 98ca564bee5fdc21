"""Bidirectional message channels.

A channel moves whole frames: ``send`` writes one, async iteration yields
inbound frames in arrival order and ends when the channel closes.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

import websockets
from websockets.asyncio.client import ClientConnection

from ..config import ClientConfig
from ..exceptions import ChannelClosedError

logger = logging.getLogger(__name__)


@runtime_checkable
class MessageChannel(Protocol):
    """Protocol for frame transports used by ProtocolClient."""

    async def send(self, message: str) -> None:
        """Send one frame.

        Raises:
            ChannelClosedError: If the channel is closed
        """
        ...

    def __aiter__(self) -> AsyncIterator[str | bytes]:
        """Yield inbound frames until the channel closes."""
        ...

    async def close(self) -> None:
        """Close the channel; iteration ends."""
        ...


class WebSocketChannel:
    """Channel over a WebSocket connection (one frame per message)."""

    def __init__(self, connection: ClientConnection):
        self._ws = connection

    @classmethod
    async def connect(cls, url: str, config: ClientConfig | None = None) -> WebSocketChannel:
        config = config or ClientConfig()
        connection = await websockets.connect(
            url,
            max_size=config.max_message_size,
            open_timeout=config.open_timeout,
            ping_interval=config.ping_interval,
        )
        logger.info(f"WebSocket channel connected to {url}")
        return cls(connection)

    async def send(self, message: str) -> None:
        try:
            await self._ws.send(message)
        except websockets.ConnectionClosed as e:
            raise ChannelClosedError(f"WebSocket closed: {e}") from e

    async def __aiter__(self) -> AsyncIterator[str | bytes]:
        try:
            async for message in self._ws:
                yield message
        except websockets.ConnectionClosedError as e:
            logger.warning(f"WebSocket closed with error: {e}")

    async def close(self) -> None:
        await self._ws.close()


_CLOSED = object()


class MemoryChannel:
    """In-memory channel for tests and in-process peers.

    Frames sent by the client are recorded in ``sent``; frames for the client
    are queued with ``feed``.

    Usage:
        channel = MemoryChannel()
        client = ProtocolClient(channel)
        client.start()
        task = asyncio.create_task(client.request("Page.enable"))
        ...
        channel.feed({"id": 1, "result": {}})
    """

    def __init__(self) -> None:
        self._inbound: asyncio.Queue[Any] = asyncio.Queue()
        self._sent: list[str] = []
        self._closed = False
        self._sent_event = asyncio.Event()

    @property
    def sent(self) -> list[str]:
        """Raw frames sent through this channel."""
        return self._sent.copy()

    @property
    def sent_frames(self) -> list[dict[str, Any]]:
        """Sent frames decoded from JSON."""
        return [json.loads(frame) for frame in self._sent]

    @property
    def closed(self) -> bool:
        return self._closed

    def feed(self, frame: str | bytes | dict[str, Any]) -> None:
        """Queue an inbound frame; dicts are encoded as JSON."""
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbound.put_nowait(frame)

    async def wait_sent(self, count: int) -> list[dict[str, Any]]:
        """Wait until at least ``count`` frames have been sent."""
        while len(self._sent) < count:
            self._sent_event.clear()
            await self._sent_event.wait()
        return self.sent_frames

    async def send(self, message: str) -> None:
        if self._closed:
            raise ChannelClosedError("Channel closed")
        self._sent.append(message)
        self._sent_event.set()

    async def __aiter__(self) -> AsyncIterator[str | bytes]:
        while True:
            frame = await self._inbound.get()
            if frame is _CLOSED:
                break
            yield frame

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._inbound.put_nowait(_CLOSED)
