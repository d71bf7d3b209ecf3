"""Tests for netkit.websocket_manager module."""

import asyncio
import contextlib
from typing import Callable

import pytest
from aiohttp import web, WSMsgType
from aiohttp.test_utils import TestServer

from netkit.errors import ConnectionClosedError, NotConnectedError
from netkit.event_bus import EventBus, Topics
from netkit.models import MessageKind, Result, WebSocketMessage
from netkit.websocket_manager import WebSocketManager, WebSocketState


async def ws_handler(request: web.Request) -> web.WebSocketResponse:
    """Echo server with a few commands.

    ``burst:N`` answers with N text messages, ``close`` closes from the server.
    """
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    async for msg in ws:
        if msg.type == WSMsgType.TEXT:
            if msg.data == "close":
                await ws.close()
            elif msg.data.startswith("burst:"):
                for i in range(int(msg.data.split(":", 1)[1])):
                    await ws.send_str(f"message {i}")
            else:
                await ws.send_str(msg.data)
        elif msg.type == WSMsgType.BINARY:
            await ws.send_bytes(msg.data)

    return ws


@contextlib.asynccontextmanager
async def ws_server():
    app = web.Application()
    app.router.add_get("/ws", ws_handler)
    server = TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/ws"))
    finally:
        await server.close()


def queue_collector() -> tuple[asyncio.Queue, Callable[[Result], None]]:
    queue: asyncio.Queue = asyncio.Queue()
    return queue, queue.put_nowait


async def next_result(queue: asyncio.Queue) -> Result:
    return await asyncio.wait_for(queue.get(), timeout=2)


class TestWebSocketManagerInit:
    """Test cases for WebSocketManager initialization."""

    def test_defaults(self):
        manager = WebSocketManager()

        assert manager.state == WebSocketState.DISCONNECTED
        assert manager.connected is False
        assert manager.on_message_received is None
        assert manager.url is None


class TestConnect:
    """Test cases for connect()."""

    @pytest.mark.asyncio
    async def test_connect_success(self):
        async with ws_server() as url:
            manager = WebSocketManager()
            try:
                assert await manager.connect(url) is True
                assert manager.state == WebSocketState.OPEN
                assert manager.url == url
            finally:
                await manager.disconnect()

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        async with ws_server() as url:
            manager = WebSocketManager()

            result = await manager.connect(url.replace("/ws", "/missing"))

            assert result is False
            assert manager.state == WebSocketState.DISCONNECTED
            assert manager._session is None

    @pytest.mark.asyncio
    async def test_single_use(self):
        async with ws_server() as url:
            manager = WebSocketManager()
            await manager.connect(url)
            await manager.disconnect()

            with pytest.raises(ConnectionClosedError):
                await manager.connect(url)


class TestMessaging:
    """Test cases for send() and the receive loop."""

    @pytest.mark.asyncio
    async def test_text_echo(self):
        queue, collect = queue_collector()

        async with ws_server() as url:
            manager = WebSocketManager(on_message_received=collect)
            try:
                await manager.connect(url)
                assert await manager.send("Hello, WebSocket") is True

                result = await next_result(queue)
            finally:
                await manager.disconnect()

        assert result.success is True
        assert result.value == WebSocketMessage.text("Hello, WebSocket")

    @pytest.mark.asyncio
    async def test_binary_echo(self):
        queue, collect = queue_collector()

        async with ws_server() as url:
            manager = WebSocketManager(on_message_received=collect)
            try:
                await manager.connect(url)
                await manager.send(b"\x00\x01\x02")

                result = await next_result(queue)
            finally:
                await manager.disconnect()

        assert result.value.kind is MessageKind.BINARY
        assert result.value.data == b"\x00\x01\x02"

    @pytest.mark.asyncio
    async def test_loop_keeps_listening(self):
        """Test consecutive messages arrive without re-arming the receiver."""
        queue, collect = queue_collector()

        async with ws_server() as url:
            manager = WebSocketManager(on_message_received=collect)
            try:
                await manager.connect(url)
                await manager.send("burst:5")

                results = [await next_result(queue) for _ in range(5)]

                await manager.send("after burst")
                tail = await next_result(queue)
            finally:
                await manager.disconnect()

        assert [r.value.data for r in results] == [f"message {i}" for i in range(5)]
        assert all(r.success for r in results)
        assert tail.value.data == "after burst"

    @pytest.mark.asyncio
    async def test_callback_error_does_not_stop_loop(self):
        received = []

        def flaky(result):
            received.append(result)
            if len(received) == 1:
                raise ValueError("callback failed")

        async with ws_server() as url:
            manager = WebSocketManager(on_message_received=flaky)
            try:
                await manager.connect(url)
                await manager.send("burst:2")
                for _ in range(50):
                    if len(received) >= 2:
                        break
                    await asyncio.sleep(0.02)
            finally:
                await manager.disconnect()

        assert [r.value.data for r in received[:2]] == ["message 0", "message 1"]

    @pytest.mark.asyncio
    async def test_send_without_connection(self):
        manager = WebSocketManager()

        with pytest.raises(NotConnectedError):
            await manager.send("hello")

    @pytest.mark.asyncio
    async def test_publishes_messages(self):
        bus = EventBus()
        events = []
        bus.subscribe(Topics.WEBSOCKET_MESSAGE, events.append)
        queue, collect = queue_collector()

        async with ws_server() as url:
            manager = WebSocketManager(on_message_received=collect, event_bus=bus)
            try:
                await manager.connect(url)
                await manager.send("ping")
                await next_result(queue)
            finally:
                await manager.disconnect()

        assert events == [WebSocketMessage.text("ping")]

    @pytest.mark.asyncio
    async def test_async_subscribers_notified(self):
        bus = EventBus()
        messages = []
        states = []

        async def on_message(message):
            messages.append(message)

        async def on_state(state):
            states.append(state)

        bus.subscribe_async(Topics.WEBSOCKET_MESSAGE, on_message)
        bus.subscribe_async(Topics.WEBSOCKET_STATE, on_state)
        queue, collect = queue_collector()

        async with ws_server() as url:
            manager = WebSocketManager(on_message_received=collect, event_bus=bus)
            try:
                await manager.connect(url)
                await manager.send("ping")
                await next_result(queue)
            finally:
                await manager.disconnect()

        assert messages == [WebSocketMessage.text("ping")]
        assert states == [
            WebSocketState.CONNECTING,
            WebSocketState.OPEN,
            WebSocketState.DISCONNECTED,
        ]


class TestDisconnect:
    """Test cases for disconnect() and closed connections."""

    @pytest.mark.asyncio
    async def test_disconnect_delivers_final_failure(self):
        queue, collect = queue_collector()

        async with ws_server() as url:
            manager = WebSocketManager(on_message_received=collect)
            await manager.connect(url)

            await manager.disconnect()

            result = await next_result(queue)

        assert result.success is False
        assert isinstance(result.error, ConnectionClosedError)
        assert manager.state == WebSocketState.DISCONNECTED
        assert manager._listen_task is None

    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self):
        bus = EventBus()
        states = []
        bus.subscribe(Topics.WEBSOCKET_STATE, states.append)

        async with ws_server() as url:
            manager = WebSocketManager(event_bus=bus)
            await manager.connect(url)

            await manager.disconnect()
            await manager.disconnect()

        assert states == [
            WebSocketState.CONNECTING,
            WebSocketState.OPEN,
            WebSocketState.DISCONNECTED,
        ]

    @pytest.mark.asyncio
    async def test_server_close_stops_loop(self):
        queue, collect = queue_collector()

        async with ws_server() as url:
            manager = WebSocketManager(on_message_received=collect)
            try:
                await manager.connect(url)
                await manager.send("close")

                result = await next_result(queue)
                await asyncio.wait_for(manager._listen_task, timeout=2)

                assert result.success is False
                assert isinstance(result.error, ConnectionClosedError)
                assert manager.state == WebSocketState.DISCONNECTED
                assert manager._session is None

                with pytest.raises(NotConnectedError):
                    await manager.send("too late")
            finally:
                await manager.disconnect()

        assert queue.empty()
