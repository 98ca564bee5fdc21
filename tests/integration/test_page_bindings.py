"""End-to-end: generate bindings for a Page domain and drive them over a channel.

The generated module is executed in-process and its client talks to a
MemoryChannel standing in for the remote end.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from protobind.compiler import MemoryOutputSink, compile_description, generate
from protobind.runtime import FrameOutcome, MemoryChannel, Notification
from protobind.schema import ProtocolDescription


class _StaticProvider:
    def __init__(self, description: ProtocolDescription) -> None:
        self.description = description
        self.requested: list[str | None] = []

    async def get_protocol(self, version: str | None = None) -> ProtocolDescription:
        self.requested.append(version)
        return self.description


@pytest.fixture
def bindings(minimal_page_description: ProtocolDescription, load_bindings):
    return load_bindings(compile_description(minimal_page_description))


class TestPageScenario:
    """navigate(url) -> {frameId}, a payload-less loaded event and frameNavigated."""

    @pytest.mark.asyncio
    async def test_generated_stub_shape(self, bindings) -> None:
        assert bindings.Page_navigateOptions.__required_keys__ == frozenset({"url"})
        assert bindings.Page_navigateResult.__required_keys__ == frozenset({"frameId"})
        assert set(bindings.NOTIFICATIONS) == {"Page_loaded", "Page_frameNavigated"}

    @pytest.mark.asyncio
    async def test_navigate_round_trip(self, bindings) -> None:
        channel = MemoryChannel()
        async with bindings.ProtocolBindings(channel) as client:
            call = asyncio.create_task(client.Page.navigate({"url": "http://x"}))

            frames = await channel.wait_sent(1)
            assert frames == [{"id": 1, "method": "Page.navigate", "params": {"url": "http://x"}}]

            channel.feed({"id": 1, "result": {"frameId": "17"}})
            assert await asyncio.wait_for(call, timeout=1) == {"frameId": "17"}

    @pytest.mark.asyncio
    async def test_loaded_dispatch(self, bindings) -> None:
        channel = MemoryChannel()
        client = bindings.ProtocolBindings(channel)
        received: list[Notification[Any]] = []
        client.add_listener("Page_loaded", received.append)

        outcome = await client.handle_frame({"method": "Page.loaded"})

        assert outcome == FrameOutcome.DELIVERED
        assert received == [Notification("Page_loaded")]

    @pytest.mark.asyncio
    async def test_frame_navigated_dispatch(self, bindings) -> None:
        channel = MemoryChannel()
        client = bindings.ProtocolBindings(channel)
        received: list[Any] = []
        client.add_listener("Page_frameNavigated", received.append)

        await client.handle_frame({"method": "Page.frameNavigated", "params": {"frameId": "9"}})

        assert len(received) == 1
        assert isinstance(received[0], bindings.Page_frameNavigatedEvent)
        assert received[0].detail == {"frameId": "9"}

    @pytest.mark.asyncio
    async def test_unknown_event_reported(self, bindings) -> None:
        client = bindings.ProtocolBindings(MemoryChannel())
        errors: list[Exception] = []
        client.add_error_listener(errors.append)

        outcome = await client.handle_frame({"method": "Page.somethingNew"})

        assert outcome == FrameOutcome.REJECTED
        assert len(errors) == 1

    @pytest.mark.asyncio
    async def test_interleaved_traffic(self, bindings) -> None:
        """Notifications arriving between responses do not disturb correlation."""
        channel = MemoryChannel()
        async with bindings.ProtocolBindings(channel) as client:
            loaded = asyncio.Event()
            client.add_listener("Page_loaded", lambda n: loaded.set())

            first = asyncio.create_task(client.Page.navigate({"url": "http://a"}))
            second = asyncio.create_task(client.Page.navigate({"url": "http://b"}))
            await channel.wait_sent(2)

            channel.feed({"id": 2, "result": {"frameId": "B"}})
            channel.feed({"method": "Page.loaded"})
            channel.feed({"id": 1, "result": {"frameId": "A"}})

            assert await asyncio.wait_for(first, timeout=1) == {"frameId": "A"}
            assert await asyncio.wait_for(second, timeout=1) == {"frameId": "B"}
            await asyncio.wait_for(loaded.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_generate_through_provider(self, minimal_page_description: ProtocolDescription, load_bindings) -> None:
        provider = _StaticProvider(minimal_page_description)
        sink = MemoryOutputSink()

        result = await generate("1.0", provider, sink)

        assert provider.requested == ["1.0"]
        assert result.location == "memory:1.0"
        module = load_bindings(sink.artifacts["1.0"])
        assert module.PROTOCOL_VERSION == "1.0"
