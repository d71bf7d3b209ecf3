"""Local settings storage backed by a JSON file."""

import json
import logging
from pathlib import Path
from typing import Any

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_LOG_LEVEL,
    DEFAULT_HTTP_TIMEOUT_MS,
    DEFAULT_CONNECT_TIMEOUT_MS,
    DEFAULT_ACCEPTED_STATUS_CODES,
    DEFAULT_RECEIVE_CHUNK_SIZE,
)
from .paths import get_settings_path

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages persisted library settings."""

    def __init__(self, config_path: Path | None = None):
        self.config_path = config_path if config_path is not None else get_settings_path()
        self._config: dict[str, Any] = {}
        self._loaded = False
        self._defaults: dict[str, Any] = {
            "base_url": DEFAULT_BASE_URL,
            "http_timeout_ms": DEFAULT_HTTP_TIMEOUT_MS,
            "connect_timeout_ms": DEFAULT_CONNECT_TIMEOUT_MS,
            "accepted_status_codes": sorted(DEFAULT_ACCEPTED_STATUS_CODES),
            "receive_chunk_size": DEFAULT_RECEIVE_CHUNK_SIZE,
            "log_level": DEFAULT_LOG_LEVEL,
        }

    def load(self) -> dict[str, Any]:
        """Load settings from file, creating it with defaults if missing."""
        if self.config_path.exists():
            with open(self.config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
            self._loaded = True
        else:
            self._config = self._defaults.copy()
            self._loaded = True
            self.save()

        return self._config

    def _ensure_loaded(self) -> None:
        """Load from file on first access."""
        if not self._loaded:
            self.load()

    def save(self) -> None:
        """Save settings to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)
        logger.debug(f"Settings saved to {self.config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        self._ensure_loaded()
        if default is None:
            default = self._defaults.get(key)
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a setting value."""
        self._ensure_loaded()
        self._config[key] = value

    def update(self, data: dict[str, Any]) -> None:
        """Update multiple setting values."""
        self._ensure_loaded()
        self._config.update(data)

    def remove(self, key: str) -> None:
        """Remove a setting value; missing keys are ignored."""
        self._ensure_loaded()
        self._config.pop(key, None)

    @property
    def base_url(self) -> str:
        """Get base URL."""
        return self.get("base_url", "")

    @property
    def http_timeout(self) -> float:
        """Get HTTP request timeout in seconds."""
        return self.get("http_timeout_ms") / 1000

    @property
    def connect_timeout(self) -> float:
        """Get TCP/WebSocket connect timeout in seconds."""
        return self.get("connect_timeout_ms") / 1000

    @property
    def accepted_status_codes(self) -> frozenset[int]:
        """Get the set of HTTP status codes treated as success."""
        return frozenset(int(code) for code in self.get("accepted_status_codes"))
