"""Functional test harness.

FunctionalTestHarness drives an application end to end inside the test
process: it dispatches a URL, keeps the response in the registry, and
offers assertions over the resolved controller/action, forwarding,
headers, status line, redirects and body.
"""

import logging
from typing import Any, Callable, Mapping, Optional, Union

from forge_functional.application import Application
from forge_functional.config import Config
from forge_functional.dispatcher import Dispatcher
from forge_functional.errors import AssertionFailure, ServiceNotFound, UsageError
from forge_functional.escaper import Escaper
from forge_functional.interfaces import IApplication, IContainer
from forge_functional.registry import ServiceKey
from forge_functional.request import RequestContext

logger = logging.getLogger(__name__)

Bootstrap = Callable[[Application], None]


class FunctionalTestHarness:
    """In-process functional test harness.

    Usage::

        harness = FunctionalTestHarness()
        harness.set_up(Registry(), bootstrap=register_controllers)
        try:
            harness.dispatch("/products/show/5")
            harness.assert_controller("products")
            harness.assert_response_code(200)
        finally:
            harness.tear_down()

    The harness is also a context manager that tears down on exit.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self._config = config or Config()
        self._registry: Optional[IContainer] = None
        self._application: Optional[IApplication] = None
        self._context = RequestContext()
        self._saved_log_level: Optional[int] = None

    def set_up(self, registry: IContainer, bootstrap: Optional[Bootstrap] = None) -> "FunctionalTestHarness":
        """Register the default services and build the application.

        The dispatcher starts on the inert ``test/empty`` route so that a
        controller or action assertion never sees a previous test's route.
        The configured ``log_level`` applies to the ``forge_functional``
        logger until tear_down restores the previous level.

        Args:
            registry: The per-test registry.
            bootstrap: Optional callable registering controllers, routes or
                       middleware on the new application.
        """
        self._registry = registry
        package_logger = logging.getLogger("forge_functional")
        if self._saved_log_level is None:
            self._saved_log_level = package_logger.level
        package_logger.setLevel(self._config.log_level.upper())

        controller = self._config.get("testing__controller")
        action = self._config.get("testing__action")
        max_forwards = self._config.get("dispatcher__max_forwards")

        def dispatcher_factory(services: Any) -> Dispatcher:
            dispatcher = Dispatcher(services, max_forwards=max_forwards)
            dispatcher.set_controller_name(controller)
            dispatcher.set_action_name(action)
            dispatcher.set_params([])
            return dispatcher

        registry.set_shared(ServiceKey.DISPATCHER, dispatcher_factory)
        if hasattr(registry, "set"):
            registry.set(ServiceKey.ESCAPER, lambda services: Escaper())
        else:
            registry.set_shared(ServiceKey.ESCAPER, lambda services: Escaper())

        if isinstance(registry, IContainer):
            self._application = Application(registry, config=self._config)
            if bootstrap is not None:
                bootstrap(self._application)

        self._context = RequestContext()
        logger.debug("Harness set up with default route %s/%s", controller, action)
        return self

    def tear_down(self) -> None:
        """Reset the registry, drop the application and clear ambient state."""
        if self._registry is not None:
            self._registry.reset()
        self._application = None
        self._context.clear()
        self._context = RequestContext()
        if self._saved_log_level is not None:
            logging.getLogger("forge_functional").setLevel(self._saved_log_level)
            self._saved_log_level = None
        logger.debug("Harness torn down")

    def __enter__(self) -> "FunctionalTestHarness":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.tear_down()

    def dispatch(self, url: str, method: Optional[str] = None) -> Any:
        """Dispatch ``url`` and store the response under ``"response"``.

        Cannot be used inside a running event loop; await
        dispatch_async there instead.

        Returns:
            The response.

        Raises:
            UsageError: If set_up has not run.
        """
        application = self._require_application()
        logger.debug("Dispatching %s", url)
        return self._store(application.handle(url, self._context, method))

    async def dispatch_async(self, url: str, method: Optional[str] = None) -> Any:
        """Await the dispatch of ``url`` and store the response under ``"response"``."""
        application = self._require_application()
        logger.debug("Dispatching %s", url)
        return self._store(await application.handle_async(url, self._context, method))

    def _require_application(self) -> IApplication:
        if self._application is None:
            raise UsageError("No application available; call set_up() before dispatch()")
        return self._application

    def _store(self, response: Any) -> Any:
        self._registry.set_shared(ServiceKey.RESPONSE, response)
        return response

    def assert_controller(self, expected: str) -> None:
        """Assert that the last dispatched controller matches ``expected``."""
        actual = self.dispatcher.get_controller_name()

        if actual != expected:
            raise AssertionFailure(
                f'Failed asserting Controller name "{expected}", actual Controller name is "{actual}"',
                expected, actual,
            )

    def assert_action(self, expected: str) -> None:
        """Assert that the last dispatched action matches ``expected``."""
        actual = self.dispatcher.get_action_name()

        if actual != expected:
            raise AssertionFailure(
                f'Failed asserting Action name "{expected}", actual Action name is "{actual}"',
                expected, actual,
            )

    def assert_header(self, expected: Mapping[str, str]) -> None:
        """Assert that the response headers contain the given values.

        Each pair is checked on its own; the first mismatch fails::

            harness.assert_header({"Content-Type": "application/json"})
        """
        headers = self.get_response().get_headers()

        for field, expected_value in expected.items():
            actual_value = headers.get(field)

            if actual_value != expected_value:
                raise AssertionFailure(
                    f'Failed asserting "{field}" has a value of "{expected_value}", '
                    f'actual "{field}" header value is "{_display(actual_value)}"',
                    expected_value, actual_value,
                )

    def assert_response_code(self, expected: Union[int, str]) -> None:
        """Assert that the ``Status`` header contains ``expected``.

        The match is a case-insensitive substring match on the status line,
        so ``404`` matches ``"404 Not Found"``. Short inputs are loose:
        ``"0"`` also matches ``"200 OK"``.
        """
        expected = str(expected)
        actual_value = self.get_response().get_headers().get("Status")

        if not actual_value or expected.lower() not in actual_value.lower():
            raise AssertionFailure(
                f'Failed asserting response code is "{expected}", '
                f'actual response status is "{_display(actual_value)}"',
                expected, actual_value,
            )

    def assert_dispatch_is_forwarded(self) -> None:
        """Assert that the dispatcher forwarded during the last dispatch."""
        if not self.dispatcher.was_forwarded():
            raise AssertionFailure("Failed asserting dispatch was forwarded", True, False)

    def assert_redirect_to(self, location: str) -> None:
        """Assert that the response redirects to exactly ``location``."""
        actual_location = self.get_response().get_headers().get("Location")

        if not actual_location:
            raise AssertionFailure(
                "Failed asserting response caused a redirect: no redirect occurred",
                location, actual_location,
            )

        if actual_location != location:
            raise AssertionFailure(
                f'Failed asserting response redirects to "{location}". It redirects to "{actual_location}".',
                location, actual_location,
            )

    def get_content(self) -> str:
        """Get the body of the last dispatched response."""
        return self.get_response().get_content()

    def assert_response_content_contains(self, substring: str) -> None:
        """Assert that the response body contains ``substring``."""
        content = self.get_content()

        if substring not in content:
            raise AssertionFailure(
                f'Failed asserting response content contains "{substring}"',
                substring, content,
            )

    def get_response(self) -> Any:
        """Get the last dispatched response.

        Raises:
            UsageError: If nothing was dispatched in this test.
        """
        try:
            return self._require_registry().get_shared(ServiceKey.RESPONSE)
        except ServiceNotFound:
            raise UsageError("No response available; call dispatch() first") from None

    @property
    def dispatcher(self) -> Any:
        """Get the shared dispatcher."""
        try:
            return self._require_registry().get_shared(ServiceKey.DISPATCHER)
        except ServiceNotFound:
            raise UsageError("No dispatcher available; call set_up() first") from None

    @property
    def application(self) -> Optional[IApplication]:
        return self._application

    @property
    def registry(self) -> Optional[IContainer]:
        return self._registry

    @property
    def context(self) -> RequestContext:
        """Get the ambient request state for the next dispatch."""
        return self._context

    @property
    def config(self) -> Config:
        return self._config

    def _require_registry(self) -> IContainer:
        if self._registry is None:
            raise UsageError("No registry available; call set_up() first")
        return self._registry


def _display(value: Optional[str]) -> str:
    return "" if value is None else value
