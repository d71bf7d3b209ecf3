"""Thin asyncio facades for REST, file upload, TCP and WebSocket I/O."""

from .config_manager import ConfigManager
from .errors import (
    NetworkError,
    InvalidURLError,
    EncodingError,
    TransportError,
    StatusCodeError,
    DecodingError,
    NotConnectedError,
    ConnectionClosedError,
)
from .event_bus import EventBus, Topics
from .log import configure_logging
from .models import (
    HTTPMethod,
    Endpoint,
    APIRequest,
    APIResponse,
    Result,
    MessageKind,
    WebSocketMessage,
)
from .multipart import MultipartBody, encode_multipart
from .network_manager import NetworkManager
from .socket_manager import SocketManager, SocketState
from .token_store import TokenStore
from .websocket_manager import WebSocketManager, WebSocketState

__version__ = "0.1.0"

__all__ = [
    "ConfigManager",
    "NetworkError",
    "InvalidURLError",
    "EncodingError",
    "TransportError",
    "StatusCodeError",
    "DecodingError",
    "NotConnectedError",
    "ConnectionClosedError",
    "EventBus",
    "Topics",
    "configure_logging",
    "HTTPMethod",
    "Endpoint",
    "APIRequest",
    "APIResponse",
    "Result",
    "MessageKind",
    "WebSocketMessage",
    "MultipartBody",
    "encode_multipart",
    "NetworkManager",
    "SocketManager",
    "SocketState",
    "TokenStore",
    "WebSocketManager",
    "WebSocketState",
]
