"""Protocol definitions for pluggable components.

Lets callers substitute their own settings storage or token source.
"""

from typing import Protocol, Any, runtime_checkable


@runtime_checkable
class ISettingsStorage(Protocol):
    """Interface for key/value settings persistence."""

    def load(self) -> dict[str, Any]:
        """Load settings from storage."""
        ...

    def save(self) -> None:
        """Save settings to storage."""
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Set a setting value."""
        ...

    def remove(self, key: str) -> None:
        """Remove a setting value."""
        ...


@runtime_checkable
class ITokenStore(Protocol):
    """Interface for bearer token sources."""

    @property
    def token(self) -> str | None:
        """Get the current bearer token."""
        ...

    def set_token(self, token: str) -> None:
        """Set or replace the bearer token."""
        ...

    def clear_token(self) -> None:
        """Remove the bearer token."""
        ...

    def authorization_header(self) -> str | None:
        """Get the Authorization header value."""
        ...
