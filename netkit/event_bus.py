"""Event bus for pub/sub notification of token, request and connection changes."""

import asyncio
import logging
from typing import Any, Callable


logger = logging.getLogger(__name__)


class Topics:
    """Event topic constants."""

    # Authentication
    TOKEN_CHANGED = "token.changed"

    # TCP socket
    SOCKET_STATE = "socket.state"

    # WebSocket
    WEBSOCKET_STATE = "websocket.state"
    WEBSOCKET_MESSAGE = "websocket.message"

    # HTTP
    REQUEST_COMPLETED = "request.completed"
    REQUEST_FAILED = "request.failed"


class EventBus:
    """
    Simple pub/sub event bus.

    Supports both synchronous and asynchronous handlers.
    """

    def __init__(self):
        self._sync_handlers: dict[str, list[Callable]] = {}
        self._async_handlers: dict[str, list[Callable]] = {}

    def subscribe(self, topic: str, handler: Callable[[Any], None]) -> None:
        """
        Subscribe a synchronous handler to a topic.

        Args:
            topic: Event topic to subscribe to
            handler: Synchronous function to call when event is published
        """
        self._sync_handlers.setdefault(topic, []).append(handler)
        logger.debug(f"Subscribed sync handler to topic: {topic}")

    def subscribe_async(self, topic: str, handler: Callable[[Any], Any]) -> None:
        """
        Subscribe an asynchronous handler to a topic.

        Args:
            topic: Event topic to subscribe to
            handler: Async function to call when event is published
        """
        self._async_handlers.setdefault(topic, []).append(handler)
        logger.debug(f"Subscribed async handler to topic: {topic}")

    def unsubscribe(self, topic: str, handler: Callable) -> None:
        """Unsubscribe a handler from a topic. Unknown handlers are ignored."""
        for handlers in (self._sync_handlers, self._async_handlers):
            if handler in handlers.get(topic, []):
                handlers[topic].remove(handler)
                logger.debug(f"Unsubscribed handler from topic: {topic}")

    def publish(self, topic: str, data: Any = None) -> None:
        """
        Publish an event to all synchronous subscribers.

        Args:
            topic: Event topic
            data: Event data to pass to handlers
        """
        if topic not in self._sync_handlers:
            return

        logger.debug(f"Publishing to topic: {topic}")

        for handler in list(self._sync_handlers[topic]):
            try:
                handler(data)
            except Exception as e:
                logger.error(f"Error in sync handler for topic '{topic}': {e}")

    async def publish_async(self, topic: str, data: Any = None) -> None:
        """
        Publish an event to all asynchronous subscribers.

        Handlers run concurrently; their errors are logged, not raised.
        """
        if topic not in self._async_handlers:
            return

        logger.debug(f"Publishing async to topic: {topic}")

        tasks = [asyncio.create_task(handler(data)) for handler in self._async_handlers[topic]]
        if tasks:
            results = await asyncio.gather(*tasks, return_exceptions=True)
            for result in results:
                if isinstance(result, Exception):
                    logger.error(f"Error in async handler for topic '{topic}': {result}")

    def clear(self, topic: str | None = None) -> None:
        """Clear all handlers for a topic, or all topics if topic is None."""
        if topic is None:
            self._sync_handlers.clear()
            self._async_handlers.clear()
            logger.debug("Cleared all event handlers")
        else:
            self._sync_handlers.pop(topic, None)
            self._async_handlers.pop(topic, None)
            logger.debug(f"Cleared handlers for topic: {topic}")

    def get_subscriber_count(self, topic: str) -> int:
        """Get the number of subscribers (sync + async) for a topic."""
        return len(self._sync_handlers.get(topic, [])) + len(self._async_handlers.get(topic, []))
