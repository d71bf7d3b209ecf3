"""Bearer token storage with persistence to local settings."""

import logging
from typing import TYPE_CHECKING

from .constants import TOKEN_SETTINGS_KEY
from .http_headers import AUTH_SCHEME_BEARER

if TYPE_CHECKING:
    from .protocols import ISettingsStorage
    from .event_bus import EventBus

logger = logging.getLogger(__name__)


class TokenStore:
    """Holds at most one bearer token.

    The token is mirrored to the settings file (plain text) so it survives
    process restarts. Setting replaces the current value; clearing removes
    both the in-memory and the persisted copy.
    """

    def __init__(
        self,
        config: "ISettingsStorage | None" = None,
        event_bus: "EventBus | None" = None
    ):
        """Initialize token store.

        Args:
            config: Settings storage to persist the token in. If None, the
                    token lives in memory only.
            event_bus: Optional EventBus notified on token changes.
        """
        self._config = config
        self._event_bus = event_bus
        self._token: str | None = None

        if self._config is not None:
            stored = self._config.get(TOKEN_SETTINGS_KEY)
            if stored:
                self._token = str(stored)
                logger.debug("Bearer token loaded from settings")

    @property
    def token(self) -> str | None:
        """Get the current bearer token."""
        return self._token

    @property
    def has_token(self) -> bool:
        return self._token is not None

    def set_token(self, token: str) -> None:
        """Set or replace the bearer token and persist it."""
        if not token:
            raise ValueError("Bearer token must be a non-empty string")

        self._token = token
        if self._config is not None:
            self._config.set(TOKEN_SETTINGS_KEY, token)
            self._config.save()
        logger.info("Bearer token set")
        self._notify()

    def clear_token(self) -> None:
        """Remove the bearer token from memory and settings."""
        self._token = None
        if self._config is not None:
            self._config.remove(TOKEN_SETTINGS_KEY)
            self._config.save()
        logger.info("Bearer token cleared")
        self._notify()

    def authorization_header(self) -> str | None:
        """Get the ``Authorization`` header value, or None without a token."""
        if self._token is None:
            return None
        return f"{AUTH_SCHEME_BEARER} {self._token}"

    def _notify(self) -> None:
        if self._event_bus:
            from .event_bus import Topics
            self._event_bus.publish(Topics.TOKEN_CHANGED, {"has_token": self.has_token})
