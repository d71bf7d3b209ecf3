"""TCP socket facade over asyncio streams."""

import asyncio
import logging
from enum import Enum
from typing import Callable, TYPE_CHECKING

from .constants import DEFAULT_CONNECT_TIMEOUT_MS, DEFAULT_RECEIVE_CHUNK_SIZE
from .errors import ConnectionClosedError, NotConnectedError, TransportError

if TYPE_CHECKING:
    from .event_bus import EventBus

logger = logging.getLogger(__name__)


class SocketState(str, Enum):
    """Connection states of a SocketManager."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


StateHandler = Callable[[SocketState, Exception | None], None]


class SocketManager:
    """Single-use TCP connection with one-shot reads.

    No framing is imposed: message boundaries are the caller's concern.
    Once disconnected the instance cannot be reconnected; create a new one.
    """

    def __init__(
        self,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT_MS / 1000,
        chunk_size: int = DEFAULT_RECEIVE_CHUNK_SIZE,
        on_state_change: StateHandler | None = None,
        event_bus: "EventBus | None" = None
    ):
        """Initialize socket manager.

        Args:
            connect_timeout: Connection attempt timeout in seconds
            chunk_size: Maximum number of bytes returned by one receive()
            on_state_change: Called with (state, error) on every transition
            event_bus: Optional EventBus notified on state changes
        """
        self._connect_timeout = connect_timeout
        self._chunk_size = chunk_size
        self._on_state_change = on_state_change
        self._event_bus = event_bus

        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._state = SocketState.DISCONNECTED
        self._used = False
        self._host: str | None = None
        self._port: int | None = None

    @property
    def state(self) -> SocketState:
        """Get the current connection state."""
        return self._state

    @property
    def connected(self) -> bool:
        """Check if the socket is connected."""
        return self._state == SocketState.CONNECTED

    @property
    def address(self) -> tuple[str, int] | None:
        """Get the (host, port) passed to connect(), if any."""
        if self._host is None:
            return None
        return self._host, self._port

    async def _set_state(self, state: SocketState, error: Exception | None = None) -> None:
        """Record a transition and notify observers."""
        self._state = state
        if self._on_state_change:
            try:
                self._on_state_change(state, error)
            except Exception as e:
                logger.error(f"Error in socket state handler: {e}")
        if self._event_bus:
            from .event_bus import Topics
            event = {"state": state, "error": error}
            self._event_bus.publish(Topics.SOCKET_STATE, event)
            await self._event_bus.publish_async(Topics.SOCKET_STATE, event)

    async def connect(self, host: str, port: int) -> bool:
        """
        Open a TCP connection to host:port.

        Returns:
            True if connected, False if the attempt failed.

        Raises:
            ConnectionClosedError: If this instance was already used.
        """
        if self._used:
            raise ConnectionClosedError("Socket manager is single-use; create a new instance")
        self._used = True
        self._host = host
        self._port = port

        await self._set_state(SocketState.CONNECTING)
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(host, port),
                timeout=self._connect_timeout
            )
        except (OSError, asyncio.TimeoutError) as e:
            logger.error(f"Socket connection failed: {host}:{port}: {e!r}")
            await self._set_state(SocketState.FAILED, TransportError(f"Connection to {host}:{port} failed: {e!r}"))
            return False

        logger.info(f"Socket connected to {host}:{port}")
        await self._set_state(SocketState.CONNECTED)
        return True

    async def send(
        self,
        data: bytes,
        completion: Callable[[Exception | None], None] | None = None
    ) -> bool:
        """
        Write bytes to the connection.

        Args:
            data: Bytes to send
            completion: Called with None on success or the error on failure

        Returns:
            True if the data was sent, False otherwise.

        Raises:
            NotConnectedError: If there is no open connection.
        """
        if self._writer is None or not self.connected:
            raise NotConnectedError("Socket is not connected")

        error: Exception | None = None
        try:
            self._writer.write(data)
            await self._writer.drain()
            logger.debug(f"Sent {len(data)} bytes")
        except (OSError, RuntimeError) as e:
            logger.error(f"Send error: {e!r}")
            error = TransportError(f"Send failed: {e!r}")

        if completion:
            completion(error)
        return error is None

    async def receive(
        self,
        completion: Callable[[bytes | None], None] | None = None
    ) -> bytes | None:
        """
        Read once, returning at most chunk_size bytes.

        This is a one-shot read; call again to keep reading.

        Args:
            completion: Called with the same value that is returned

        Returns:
            The received bytes, or None on error, peer close, or after
            disconnect().

        Raises:
            NotConnectedError: If connect() was never called.
        """
        if not self._used:
            raise NotConnectedError("Socket is not connected")

        data: bytes | None = None
        if self._reader is not None and self.connected:
            try:
                chunk = await self._reader.read(self._chunk_size)
            except OSError as e:
                logger.error(f"Receive error: {e!r}")
            else:
                if chunk:
                    data = chunk
                else:
                    logger.info("Connection closed")

        if completion:
            completion(data)
        return data

    async def disconnect(self) -> None:
        """Close the connection. Safe to call more than once."""
        writer = self._writer
        self._writer = None

        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.error(f"Error closing socket: {e!r}")

        if self._reader is not None:
            # Wake any pending receive()
            self._reader.feed_eof()
            self._reader = None

        if self._state != SocketState.DISCONNECTED:
            await self._set_state(SocketState.DISCONNECTED)
            logger.info("Socket disconnected")
