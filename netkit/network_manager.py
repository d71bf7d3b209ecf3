"""HTTP client facade for RESTful calls and file uploads."""

import asyncio
import dataclasses
import json
import logging
import typing
from typing import Any, Awaitable, Callable, Mapping, TypeVar, TYPE_CHECKING

import aiohttp
from yarl import URL

from .constants import DEFAULT_ACCEPTED_STATUS_CODES, DEFAULT_HTTP_TIMEOUT_MS
from .errors import (
    DecodingError,
    EncodingError,
    InvalidURLError,
    NetworkError,
    StatusCodeError,
    TransportError,
)
from .event_bus import Topics
from .http_headers import HEADER_AUTHORIZATION, HEADER_CONTENT_TYPE, CONTENT_TYPE_JSON
from .models import APIRequest, Endpoint, Result
from .multipart import encode_multipart
from .protocols import ITokenStore
from .token_store import TokenStore

if TYPE_CHECKING:
    from .config_manager import ConfigManager
    from .event_bus import EventBus

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SUPPORTED_SCHEMES = ("http", "https")


def encode_json_body(body: Any) -> bytes:
    """Serialize a request body to JSON bytes.

    Objects providing ``to_dict()`` are converted with it, dataclass
    instances with ``dataclasses.asdict``; anything else is passed to the
    JSON encoder as-is.
    """
    try:
        if hasattr(body, "to_dict"):
            payload = body.to_dict()
        elif dataclasses.is_dataclass(body) and not isinstance(body, type):
            payload = dataclasses.asdict(body)
        else:
            payload = body
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Failed to encode request body: {e}") from e


def convert_payload(decoded: Any, response_type: Any) -> Any:
    """Convert a decoded JSON value into ``response_type``.

    Supported targets: None (raw value), classes with ``from_dict``,
    dataclasses, ``list[X]`` of any supported X, builtin types (checked
    with ``isinstance``) and plain callables. A parameterized envelope
    such as ``APIResponse[User]`` passes its argument to ``from_dict`` as
    the data type.
    """
    if response_type is None:
        return decoded

    origin = typing.get_origin(response_type)

    if origin is list:
        if not isinstance(decoded, list):
            raise DecodingError(f"Expected a JSON array, got {type(decoded).__name__}")
        (item_type,) = typing.get_args(response_type) or (None,)
        return [convert_payload(item, item_type) for item in decoded]

    try:
        if origin is not None and hasattr(origin, "from_dict"):
            (data_type,) = typing.get_args(response_type) or (None,)
            return origin.from_dict(decoded, data_type)
        if hasattr(response_type, "from_dict"):
            return response_type.from_dict(decoded)
        if dataclasses.is_dataclass(response_type):
            if not isinstance(decoded, dict):
                raise DecodingError(
                    f"Expected a JSON object for {response_type.__name__}, "
                    f"got {type(decoded).__name__}"
                )
            return response_type(**decoded)
        if isinstance(response_type, type):
            if not isinstance(decoded, response_type):
                raise DecodingError(
                    f"Expected {response_type.__name__}, got {type(decoded).__name__}"
                )
            return decoded
        return response_type(decoded)
    except DecodingError:
        raise
    except (TypeError, KeyError, ValueError, AttributeError) as e:
        raise DecodingError(f"Failed to decode response: {e}") from e


def decode_response(payload: bytes, response_type: Any = None) -> Any:
    """Decode a response body as JSON and convert it to ``response_type``."""
    if not payload:
        decoded = None
    else:
        try:
            decoded = json.loads(payload)
        except (UnicodeDecodeError, ValueError) as e:
            raise DecodingError(f"Response is not valid JSON: {e}") from e

    if decoded is None and response_type is not None:
        raise DecodingError("Response body is empty")

    return convert_payload(decoded, response_type)


class NetworkManager:
    """Client for RESTful HTTP requests with bearer token injection.

    Each instance owns its own token store and HTTP session, so several
    independently authenticated clients can coexist.
    """

    def __init__(
        self,
        token_store: ITokenStore | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT_MS / 1000,
        accepted_status_codes: frozenset[int] | set[int] = DEFAULT_ACCEPTED_STATUS_CODES,
        event_bus: "EventBus | None" = None
    ):
        """Initialize network manager.

        Args:
            token_store: Bearer token source. A memory-only store is created
                         if omitted.
            timeout: Total request timeout in seconds
            accepted_status_codes: HTTP status codes treated as success
            event_bus: Optional EventBus notified when a request completes or fails
        """
        self._token_store = token_store if token_store is not None else TokenStore()
        self._timeout = timeout
        self._accepted_status_codes = frozenset(accepted_status_codes)
        self._event_bus = event_bus

        self._http_session: aiohttp.ClientSession | None = None
        self._background_tasks: set[asyncio.Task] = set()

    @classmethod
    def from_config(
        cls,
        config: "ConfigManager",
        token_store: TokenStore | None = None,
        event_bus: "EventBus | None" = None
    ) -> "NetworkManager":
        """Create a manager from persisted settings.

        The token store defaults to one persisted in the same settings.
        """
        if token_store is None:
            token_store = TokenStore(config, event_bus)
        return cls(
            token_store=token_store,
            timeout=config.http_timeout,
            accepted_status_codes=config.accepted_status_codes,
            event_bus=event_bus,
        )

    @property
    def token_store(self) -> ITokenStore:
        """Get the token store."""
        return self._token_store

    @property
    def accepted_status_codes(self) -> frozenset[int]:
        """Get the status codes treated as success."""
        return self._accepted_status_codes

    async def __aenter__(self) -> "NetworkManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =====================
    # Request building
    # =====================

    def build_url(self, endpoint: Endpoint, base_url: str) -> URL:
        """Build the request URL: base URL + endpoint path, then query items.

        Raises:
            InvalidURLError: If the result is not an absolute http(s) URL.
        """
        raw = f"{base_url}{endpoint.path}"
        try:
            url = URL(raw)
        except (TypeError, ValueError) as e:
            raise InvalidURLError(raw) from e

        if url.scheme not in _SUPPORTED_SCHEMES or not url.host:
            raise InvalidURLError(raw)

        if endpoint.query_items:
            url = url.extend_query(list(endpoint.query_items))
        return url

    def _build_headers(self, endpoint: Endpoint) -> dict[str, str]:
        """Endpoint headers plus the Authorization header when a token is set."""
        headers = dict(endpoint.headers or {})
        authorization = self._token_store.authorization_header()
        if authorization:
            headers[HEADER_AUTHORIZATION] = authorization
        return headers

    # =====================
    # Public API
    # =====================

    async def request(
        self,
        api_request: APIRequest,
        base_url: str,
        response_type: Any = None
    ) -> Any:
        """
        Send a request with an optional typed body and decode the response.

        Args:
            api_request: Endpoint plus optional body object
            base_url: Base URL the endpoint path is appended to
            response_type: Type to decode the response into (see convert_payload)

        Returns:
            The decoded response.

        Raises:
            InvalidURLError, EncodingError, TransportError, StatusCodeError,
            DecodingError
        """
        endpoint = api_request.endpoint
        url = self.build_url(endpoint, base_url)
        headers = self._build_headers(endpoint)

        body = None
        if api_request.body is not None:
            body = encode_json_body(api_request.body)
            headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_JSON

        return await self._execute(endpoint.method.value, url, headers, body, response_type)

    async def request_with_parameters(
        self,
        endpoint: Endpoint,
        base_url: str,
        parameters: Mapping[str, Any] | None = None,
        response_type: Any = None
    ) -> Any:
        """
        Send a request whose body is an untyped key/value mapping.

        Behaves exactly like request() otherwise.
        """
        url = self.build_url(endpoint, base_url)
        headers = self._build_headers(endpoint)

        body = None
        if parameters is not None:
            body = encode_json_body(dict(parameters))
            headers[HEADER_CONTENT_TYPE] = CONTENT_TYPE_JSON

        return await self._execute(endpoint.method.value, url, headers, body, response_type)

    async def upload_file(
        self,
        endpoint: Endpoint,
        base_url: str,
        file_data: bytes,
        file_name: str,
        mime_type: str,
        additional_parameters: Mapping[str, str] | None = None,
        response_type: Any = None
    ) -> Any:
        """
        Upload a file as multipart/form-data.

        Args:
            endpoint: Endpoint to upload to
            base_url: Base URL the endpoint path is appended to
            file_data: Raw file bytes
            file_name: File name sent in the file part
            mime_type: Content type of the file part
            additional_parameters: Extra string form fields, sent before the file
            response_type: Type to decode the response into

        Returns:
            The decoded response.
        """
        url = self.build_url(endpoint, base_url)
        headers = self._build_headers(endpoint)

        multipart = encode_multipart(file_data, file_name, mime_type, additional_parameters)
        headers[HEADER_CONTENT_TYPE] = multipart.content_type

        return await self._execute(
            endpoint.method.value, url, headers, multipart.body, response_type
        )

    def dispatch(
        self,
        operation: Awaitable[T],
        completion: Callable[[Result[T]], None]
    ) -> asyncio.Task:
        """
        Run a request in the background and deliver its outcome to a callback.

        Example:
            manager.dispatch(
                manager.request(APIRequest(endpoint), base_url, list[User]),
                on_users,
            )

        Args:
            operation: Un-awaited coroutine of request(), request_with_parameters()
                       or upload_file()
            completion: Called with Result.ok(value) or Result.fail(error)

        Returns:
            The background task.
        """
        async def run() -> None:
            try:
                value = await operation
            except NetworkError as e:
                result = Result.fail(e)
            else:
                result = Result.ok(value)

            try:
                completion(result)
            except Exception as e:
                logger.error(f"Error in completion callback: {e}")

        task = asyncio.create_task(run())
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        return task

    # =====================
    # Execution
    # =====================

    async def _ensure_http_session(self) -> aiohttp.ClientSession:
        """Ensure HTTP session exists."""
        if self._http_session is None or self._http_session.closed:
            self._http_session = aiohttp.ClientSession()
        return self._http_session

    async def _execute(
        self,
        method: str,
        url: URL,
        headers: dict[str, str],
        body: bytes | None,
        response_type: Any
    ) -> Any:
        """Perform the request and report its outcome on the event bus."""
        try:
            status, result = await self._perform(method, url, headers, body, response_type)
        except NetworkError as e:
            await self._publish(Topics.REQUEST_FAILED, {
                "method": method,
                "url": str(url),
                "error": e,
            })
            raise

        await self._publish(Topics.REQUEST_COMPLETED, {
            "method": method,
            "url": str(url),
            "status": status,
        })
        return result

    async def _perform(
        self,
        method: str,
        url: URL,
        headers: dict[str, str],
        body: bytes | None,
        response_type: Any
    ) -> tuple[int, Any]:
        """Perform the HTTP call, check the status and decode the payload."""
        session = await self._ensure_http_session()
        timeout = aiohttp.ClientTimeout(total=self._timeout)
        logger.debug(f"Sending {method} {url}")

        try:
            async with session.request(
                method, url, headers=headers, data=body, timeout=timeout
            ) as response:
                status = response.status
                payload = await response.read()
        except asyncio.TimeoutError as e:
            logger.error(f"Request timed out: {method} {url}")
            raise TransportError(f"Request timed out after {self._timeout}s: {method} {url}") from e
        except aiohttp.ClientError as e:
            logger.error(f"HTTP error on {method} {url}: {e}")
            raise TransportError(f"HTTP error on {method} {url}: {e}") from e

        if status not in self._accepted_status_codes:
            text = payload.decode("utf-8", errors="replace")
            logger.error(f"Request failed: {method} {url} -> {status} - {text}")
            raise StatusCodeError(status, text)

        logger.info(f"Request completed: {method} {url} -> {status}")
        return status, decode_response(payload, response_type)

    async def _publish(self, topic: str, data: dict[str, Any]) -> None:
        if self._event_bus:
            self._event_bus.publish(topic, data)
            await self._event_bus.publish_async(topic, data)

    # =====================
    # Cleanup
    # =====================

    async def close(self) -> None:
        """Wait for background requests and close the HTTP session."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

        if self._http_session and not self._http_session.closed:
            await self._http_session.close()
        self._http_session = None

        logger.info("Network manager closed")
