"""WebSocket facade with a continuous receive loop."""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING

import aiohttp

from .constants import DEFAULT_CONNECT_TIMEOUT_MS, WS_CLOSE_GOING_AWAY
from .errors import ConnectionClosedError, NotConnectedError, TransportError
from .models import Result, WebSocketMessage

if TYPE_CHECKING:
    from .event_bus import EventBus

logger = logging.getLogger(__name__)


class WebSocketState(str, Enum):
    """Connection states of a WebSocketManager."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    OPEN = "open"


MessageHandler = Callable[[Result[WebSocketMessage]], None]


class WebSocketManager:
    """Single-use WebSocket connection.

    Incoming messages are delivered to ``on_message_received`` from a
    background task that keeps reading until the connection closes.
    """

    def __init__(
        self,
        on_message_received: MessageHandler | None = None,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_MS / 1000,
        event_bus: "EventBus | None" = None
    ):
        """Initialize WebSocket manager.

        Args:
            on_message_received: Called with Result.ok(message) for each
                                 message and a final Result.fail(error)
            connect_timeout: Handshake timeout in seconds
            event_bus: Optional EventBus notified on state changes and messages
        """
        self.on_message_received = on_message_received
        self.on_send_error: Callable[[Exception], None] | None = None
        self._connect_timeout = connect_timeout
        self._event_bus = event_bus

        self._session: aiohttp.ClientSession | None = None
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._listen_task: asyncio.Task | None = None
        self._state = WebSocketState.DISCONNECTED
        self._used = False
        self._url: str | None = None

    @property
    def state(self) -> WebSocketState:
        """Get the current connection state."""
        return self._state

    @property
    def connected(self) -> bool:
        """Check if the WebSocket is open."""
        return self._state == WebSocketState.OPEN

    @property
    def url(self) -> str | None:
        return self._url

    async def _publish(self, topic: str, data: Any) -> None:
        """Notify sync and async subscribers."""
        if self._event_bus:
            self._event_bus.publish(topic, data)
            await self._event_bus.publish_async(topic, data)

    async def _set_state(self, state: WebSocketState) -> None:
        from .event_bus import Topics
        self._state = state
        await self._publish(Topics.WEBSOCKET_STATE, state)

    async def _deliver(self, result: Result[WebSocketMessage]) -> None:
        """Hand a result to the callback; callback errors never stop the loop."""
        if self.on_message_received:
            try:
                self.on_message_received(result)
            except Exception as e:
                logger.error(f"Error in message callback: {e}")
        if result.success:
            from .event_bus import Topics
            await self._publish(Topics.WEBSOCKET_MESSAGE, result.value)

    # =====================
    # Connection
    # =====================

    async def connect(self, url: str) -> bool:
        """
        Open the WebSocket connection and start listening.

        Returns:
            True if the handshake succeeded, False otherwise.

        Raises:
            ConnectionClosedError: If this instance was already used.
        """
        if self._used:
            raise ConnectionClosedError("WebSocket manager is single-use; create a new instance")
        self._used = True
        self._url = url

        await self._set_state(WebSocketState.CONNECTING)
        self._session = aiohttp.ClientSession()
        try:
            self._ws = await asyncio.wait_for(
                self._session.ws_connect(url),
                timeout=self._connect_timeout
            )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"WebSocket connection failed: {url}: {e!r}")
            await self._close_session()
            await self._set_state(WebSocketState.DISCONNECTED)
            return False

        logger.info(f"WebSocket connected to {url}")
        await self._set_state(WebSocketState.OPEN)
        self._listen_task = asyncio.create_task(self._listen(self._ws))
        return True

    async def disconnect(self) -> None:
        """Close the connection with the going-away code. Safe to call more than once."""
        ws = self._ws
        self._ws = None

        if ws is not None and not ws.closed:
            try:
                await ws.close(code=WS_CLOSE_GOING_AWAY)
            except aiohttp.ClientError as e:
                logger.error(f"Error closing WebSocket: {e!r}")

        if self._listen_task is not None:
            await asyncio.gather(self._listen_task, return_exceptions=True)
            self._listen_task = None

        await self._close_session()

        if self._state != WebSocketState.DISCONNECTED:
            await self._set_state(WebSocketState.DISCONNECTED)
            logger.info("WebSocket disconnected")

    async def _close_session(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # =====================
    # Message transmission
    # =====================

    async def send(self, message: str | bytes) -> bool:
        """
        Send one message: str as a text frame, bytes as a binary frame.

        Transmission errors are logged and passed to ``on_send_error``.

        Returns:
            True if the message was handed to the transport.

        Raises:
            NotConnectedError: If the WebSocket is not open.
        """
        ws = self._ws
        if ws is None or ws.closed or not self.connected:
            raise NotConnectedError("WebSocket is not connected")

        try:
            if isinstance(message, str):
                await ws.send_str(message)
                logger.debug("Message sent")
            else:
                await ws.send_bytes(bytes(message))
                logger.debug("Binary data sent")
        except (aiohttp.ClientError, ConnectionError, RuntimeError) as e:
            logger.error(f"WebSocket send error: {e!r}")
            if self.on_send_error:
                try:
                    self.on_send_error(TransportError(f"Send failed: {e!r}"))
                except Exception as callback_error:
                    logger.error(f"Error in send error callback: {callback_error}")
            return False
        return True

    # =====================
    # Message reception
    # =====================

    async def _listen(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        """Read messages until the connection closes or fails."""
        while True:
            msg = await ws.receive()

            if msg.type == aiohttp.WSMsgType.TEXT:
                await self._deliver(Result.ok(WebSocketMessage.text(msg.data)))
            elif msg.type == aiohttp.WSMsgType.BINARY:
                await self._deliver(Result.ok(WebSocketMessage.binary(msg.data)))
            elif msg.type == aiohttp.WSMsgType.ERROR:
                error = ws.exception()
                logger.error(f"WebSocket receive error: {error!r}")
                await self._deliver(Result.fail(TransportError(f"Receive failed: {error!r}")))
                break
            elif msg.type in (
                aiohttp.WSMsgType.CLOSE,
                aiohttp.WSMsgType.CLOSING,
                aiohttp.WSMsgType.CLOSED,
            ):
                logger.info(f"WebSocket closed: code={ws.close_code}")
                await self._deliver(Result.fail(ConnectionClosedError(f"WebSocket closed: code={ws.close_code}")))
                break
            else:
                logger.debug(f"Ignoring WebSocket frame of type {msg.type}")

        if self._ws is ws:
            # Closed by the peer rather than by disconnect()
            self._ws = None
            await self._close_session()
            await self._set_state(WebSocketState.DISCONNECTED)
            logger.info("WebSocket disconnected")
