"""Error types for the Forge functional testing toolkit.

All errors raised by the package derive from ForgeFunctionalError so callers
can catch them in one place. Assertion failures also derive from
AssertionError, which is what unittest and pytest report as test failures.
"""

from typing import Any, Optional


class ForgeFunctionalError(Exception):
    """Base class for all forge_functional errors."""
    pass


class AssertionFailure(ForgeFunctionalError, AssertionError):
    """Raised when a functional assertion does not hold.

    Carries the expected and actual values so reporters and tests can
    inspect them without parsing the message.
    """

    def __init__(self, message: str, expected: Any = None, actual: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.expected = expected
        self.actual = actual

    def __str__(self) -> str:
        return self.message


class UsageError(ForgeFunctionalError, RuntimeError):
    """Raised when the harness is used out of order (e.g. dispatch before set_up)."""
    pass


class ServiceNotFound(ForgeFunctionalError, KeyError):
    """Raised when a registry key has no registration."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f'Service "{self.key}" is not registered'


class DispatchError(ForgeFunctionalError):
    """Raised when the dispatcher cannot execute a controller action."""

    status_code = 404

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ControllerNotFound(DispatchError):
    """Raised when no controller is registered under the requested name."""
    pass


class ActionNotFound(DispatchError):
    """Raised when a controller has no method for the requested action."""
    pass


class CyclicRoutingError(DispatchError):
    """Raised when forwarding keeps going past the configured limit."""

    status_code = 500


class ResponseError(ForgeFunctionalError):
    """Exception raised for errors related to response creation."""
    pass


class RequestParsingError(ForgeFunctionalError):
    """Exception raised when a request body cannot be parsed."""
    pass
