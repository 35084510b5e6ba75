"""Interfaces for forge_functional.

This module defines the protocols the test harness relies on. The harness
only ever talks to its collaborators through these capabilities, so any
application, dispatcher or response that provides them can be tested.
"""

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class IContainer(Protocol):
    """Protocol for dependency containers holding shared services."""

    def set_shared(self, key: Any, definition: Any) -> None:
        """Register a shared service."""
        ...

    def get_shared(self, key: Any) -> Any:
        """Resolve a shared service."""
        ...

    def has(self, key: Any) -> bool:
        """Check if a service is registered."""
        ...

    def reset(self) -> None:
        """Drop every registration."""
        ...


class IHeaderMap(Protocol):
    """Protocol for response header maps."""

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a header value."""
        ...


class IResponse(Protocol):
    """Protocol for responses produced by an application."""

    def get_headers(self) -> IHeaderMap:
        """Get the response headers."""
        ...

    def get_content(self) -> str:
        """Get the response body."""
        ...


class IDispatcher(Protocol):
    """Protocol for dispatchers tracking the resolved route."""

    def get_controller_name(self) -> str:
        """Get the last resolved controller name."""
        ...

    def get_action_name(self) -> str:
        """Get the last resolved action name."""
        ...

    def was_forwarded(self) -> bool:
        """Check whether the last dispatch was forwarded."""
        ...


@runtime_checkable
class IApplication(Protocol):
    """Protocol for applications the harness can call into."""

    def handle(self, url: str, context: Any = None, method: Optional[str] = None) -> IResponse:
        """Handle a request for the given URL and return the response."""
        ...

    async def handle_async(self, url: str, context: Any = None, method: Optional[str] = None) -> IResponse:
        """Coroutine form of handle, for callers inside an event loop."""
        ...
