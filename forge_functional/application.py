"""MVC application for forge_functional.

The Application turns a URL into a Response in process: it routes the
path, hands the resolved controller/action to the dispatcher from the
registry, runs the action behind the middleware stack, and converts the
result into the response. No network is involved.
"""

import asyncio
import logging
import traceback
from typing import Any, Callable, Dict, List, Optional, Type, Union

from forge_functional.config import Config
from forge_functional.controller import Controller
from forge_functional.dispatcher import Dispatcher
from forge_functional.errors import DispatchError
from forge_functional.escaper import Escaper
from forge_functional.middleware import Middleware, MiddlewareCallable, MiddlewareStack
from forge_functional.registry import Registry, ServiceKey
from forge_functional.request import Request, RequestContext
from forge_functional.response import Response
from forge_functional.router import Router

logger = logging.getLogger(__name__)


class Application:
    """Request-handling application bound to a registry.

    Usage::

        registry = Registry()
        app = Application(registry)
        app.register_controller("products", ProductsController)
        response = app.handle("/products/show/5")
    """

    def __init__(
        self,
        registry: Registry,
        config: Optional[Config] = None,
        router: Optional[Router] = None,
    ) -> None:
        """Initialize a new application.

        Args:
            registry: The registry holding the shared services.
            config: Optional configuration. Taken from the registry, or
                    defaults, when not provided.
            router: Optional router. A default MVC router is registered
                    when the registry has none.
        """
        self._registry = registry
        self._controllers: Dict[str, Type[Controller]] = {}
        self._middleware = MiddlewareStack(registry)

        if config is None:
            config = registry.get_shared(ServiceKey.CONFIG) if registry.has(ServiceKey.CONFIG) else Config()
        self._config = config
        registry.set_shared(ServiceKey.CONFIG, config)

        if router is not None:
            registry.set_shared(ServiceKey.ROUTER, router)
        elif not registry.has(ServiceKey.ROUTER):
            registry.set_shared(
                ServiceKey.ROUTER,
                lambda r: Router(
                    default_controller=config.get("dispatcher__default_controller"),
                    default_action=config.get("dispatcher__default_action"),
                ),
            )

        if not registry.has(ServiceKey.DISPATCHER):
            registry.set_shared(
                ServiceKey.DISPATCHER,
                lambda r: Dispatcher(r, max_forwards=config.get("dispatcher__max_forwards")),
            )

        if not registry.has(ServiceKey.ESCAPER):
            registry.set(ServiceKey.ESCAPER, lambda r: Escaper())

    def register_controller(self, name: str, controller: Type[Controller]) -> None:
        """Register a controller class under a name.

        Args:
            name: The controller name used in routes.
            controller: The controller class.
        """
        self._controllers[name] = controller

    def controller(self, name: str) -> Callable[[Type[Controller]], Type[Controller]]:
        """Decorator registering a controller class."""
        def decorator(cls: Type[Controller]) -> Type[Controller]:
            self.register_controller(name, cls)
            return cls
        return decorator

    def get_controller(self, name: str) -> Optional[Type[Controller]]:
        return self._controllers.get(name)

    def route(self, pattern: str, controller: str, action: str = "index", methods: Optional[List[str]] = None) -> None:
        """Add an explicit route to the registered router."""
        self.router.add(pattern, controller, action, methods)

    def add_middleware(self, middleware: Union[Middleware, MiddlewareCallable]) -> None:
        self._middleware.add(middleware)

    def handle(self, url: str, context: Optional[RequestContext] = None, method: Optional[str] = None) -> Response:
        """Handle a request synchronously.

        Must not be called from a running event loop; use handle_async
        there instead.

        Args:
            url: The request URL.
            context: The ambient request state.
            method: Optional HTTP method overriding the context.

        Returns:
            The response.
        """
        return asyncio.run(self.handle_async(url, context, method))

    async def handle_async(self, url: str, context: Optional[RequestContext] = None, method: Optional[str] = None) -> Response:
        """Handle a request.

        Routing and dispatch failures become 404 responses; any other
        exception becomes a 500 response.

        Args:
            url: The request URL.
            context: The ambient request state.
            method: Optional HTTP method overriding the context.

        Returns:
            The response.
        """
        request = Request.from_uri(url, context, method)
        self._registry.set_shared(ServiceKey.REQUEST, request)
        self._registry.set_shared(ServiceKey.RESPONSE, Response())

        logger.debug("Handling %s %s", request.method, request.uri)
        try:
            return await self._middleware.process(request, self._dispatch)
        except DispatchError as e:
            logger.debug("Dispatch failed for %s: %s", request.uri, e)
            return self._error_response(e, e.status_code)
        except Exception as e:
            logger.exception("Unhandled error while handling %s", request.uri)
            return self._error_response(e, getattr(e, "status_code", 500))

    async def _dispatch(self, request: Request) -> Response:
        match = self.router.match(request.path, request.method)
        if match is None:
            raise DispatchError(f"No route found for {request.method} {request.path}")

        dispatcher = self._registry.get_shared(ServiceKey.DISPATCHER)
        dispatcher.set_controller_name(match.controller)
        dispatcher.set_action_name(match.action)
        dispatcher.set_params(match.params)

        returned = await dispatcher.dispatch(self.get_controller)
        return self._to_response(returned)

    def _to_response(self, returned: Any) -> Response:
        if isinstance(returned, Response):
            self._registry.set_shared(ServiceKey.RESPONSE, returned)
            return returned

        response = self._registry.get_shared(ServiceKey.RESPONSE)
        if isinstance(returned, (dict, list)):
            response.set_json_content(returned)
        elif isinstance(returned, (str, bytes)):
            response.set_content(returned)
        return response

    def _error_response(self, error: Exception, status_code: int) -> Response:
        if not isinstance(status_code, int) or not 100 <= status_code <= 599:
            status_code = 500
        body = str(error)
        if self._config.debug:
            body = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        response = Response.text(body, status_code=status_code)
        self._registry.set_shared(ServiceKey.RESPONSE, response)
        return response

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def config(self) -> Config:
        return self._config

    @property
    def router(self) -> Router:
        return self._registry.get_shared(ServiceKey.ROUTER)

    @property
    def middleware(self) -> MiddlewareStack:
        return self._middleware

    @property
    def controllers(self) -> Dict[str, Type[Controller]]:
        return dict(self._controllers)
