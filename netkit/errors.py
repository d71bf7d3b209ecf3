"""Error types raised by the network facades.

Every failure is scoped to the single operation or connection that produced
it. The underlying cause is chained with ``raise ... from``.
"""


class NetworkError(Exception):
    """Base class for all netkit errors."""


class InvalidURLError(NetworkError):
    """The request URL could not be built into an absolute URL."""

    def __init__(self, url: str):
        super().__init__(f"Invalid URL: {url!r}")
        self.url = url


class EncodingError(NetworkError):
    """The request body could not be serialized."""


class TransportError(NetworkError):
    """Connection, timeout or other transport-level failure."""


class StatusCodeError(NetworkError):
    """The server answered with a status code outside the accepted set."""

    def __init__(self, status: int, body: str = ""):
        super().__init__(f"Unexpected status code: {status}")
        self.status = status
        self.body = body


class DecodingError(NetworkError):
    """The response payload does not match the expected shape."""


class NotConnectedError(NetworkError):
    """A socket or WebSocket operation was attempted without a connection."""


class ConnectionClosedError(NetworkError):
    """The connection was closed by the peer or locally."""
