"""Data models for requests, responses and messages."""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Generic, Mapping, TypeVar

T = TypeVar("T")


class HTTPMethod(str, Enum):
    """HTTP methods supported by an endpoint."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


@dataclass(frozen=True)
class Endpoint:
    """One addressable API operation, independent of the base URL."""

    path: str                                        # Appended verbatim to the base URL
    method: HTTPMethod = HTTPMethod.GET
    headers: Mapping[str, str] | None = None
    query_items: tuple[tuple[str, str], ...] | None = None

    def __post_init__(self):
        # Accept a plain dict or list of pairs, store as an ordered tuple
        if self.query_items is not None:
            items = self.query_items
            if isinstance(items, Mapping):
                items = items.items()
            object.__setattr__(
                self, "query_items", tuple((str(k), str(v)) for k, v in items)
            )
        if self.headers is not None:
            object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        if not isinstance(self.method, HTTPMethod):
            object.__setattr__(self, "method", HTTPMethod(str(self.method).upper()))


@dataclass
class APIRequest(Generic[T]):
    """An outgoing API call: endpoint plus an optional typed body."""

    endpoint: Endpoint
    body: T | None = None


@dataclass
class APIResponse(Generic[T]):
    """Response envelope returned by the server."""

    data: T
    status_code: int
    message: str

    @classmethod
    def from_dict(cls, raw: dict[str, Any], data_type: type | None = None) -> "APIResponse":
        """Create from dictionary (camelCase keys from server).

        Args:
            raw: Decoded JSON object
            data_type: Optional type for the ``data`` field. A class with a
                ``from_dict`` classmethod or a dataclass.
        """
        data = raw["data"]
        if data_type is not None:
            if hasattr(data_type, "from_dict"):
                data = data_type.from_dict(data)
            else:
                data = data_type(**data)
        return cls(
            data=data,
            status_code=int(raw["statusCode"]),
            message=str(raw["message"]),
        )


@dataclass
class Result(Generic[T]):
    """Outcome of an operation delivered through a callback."""

    success: bool
    value: T | None = None
    error: Exception | None = None

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: Exception) -> "Result[T]":
        return cls(success=False, error=error)


class MessageKind(str, Enum):
    """WebSocket message frame kinds."""

    TEXT = "text"
    BINARY = "binary"


@dataclass(frozen=True)
class WebSocketMessage:
    """One text or binary WebSocket message."""

    kind: MessageKind
    data: str | bytes

    @classmethod
    def text(cls, data: str) -> "WebSocketMessage":
        return cls(kind=MessageKind.TEXT, data=data)

    @classmethod
    def binary(cls, data: bytes) -> "WebSocketMessage":
        return cls(kind=MessageKind.BINARY, data=data)
