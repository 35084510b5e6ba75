"""Middleware for forge_functional applications.

Middleware wrap the dispatch step of the application. A middleware is
either a Middleware instance or a plain ``async def (request, next)``
callable; both receive the Request and the next handler and return a
Response.
"""

import functools
from typing import Any, Awaitable, Callable, Iterator, List, Optional, Union

from forge_functional.registry import Registry, ServiceKey
from forge_functional.request import Request
from forge_functional.response import Response

Handler = Callable[[Request], Awaitable[Response]]
MiddlewareCallable = Callable[[Request, Handler], Awaitable[Response]]


async def _resolve(result: Any) -> Any:
    if hasattr(result, "__await__"):
        return await result
    return result


class Middleware:
    """Base class for middleware bound to an application's registry.

    Override ``before`` to inspect the request and optionally answer it
    directly, and ``after`` to adjust the response. Override ``process``
    for full control over the call to ``next``. Hooks may be sync or
    async.
    """

    registry: Optional[Registry] = None

    def before(self, request: Request) -> Optional[Response]:
        """Return a Response to answer the request without dispatching."""
        return None

    def after(self, request: Request, response: Response) -> Response:
        return response

    async def process(self, request: Request, next: Handler) -> Response:
        response = await _resolve(self.before(request))
        if response is None:
            response = await next(request)
        return await _resolve(self.after(request, response))

    async def __call__(self, request: Request, next: Handler) -> Response:
        return await self.process(request, next)

    @property
    def dispatcher(self) -> Any:
        """The application's dispatcher, as left by the last dispatch."""
        if self.registry is None:
            return None
        return self.registry.get_shared(ServiceKey.DISPATCHER)


class MiddlewareStack:
    """Ordered middleware around a final handler.

    The first middleware added is the outermost one.
    """

    def __init__(self, registry: Optional[Registry] = None) -> None:
        self._registry = registry
        self._middleware: List[Union[Middleware, MiddlewareCallable]] = []

    def add(self, middleware: Union[Middleware, MiddlewareCallable]) -> None:
        self._bind(middleware)
        self._middleware.append(middleware)

    def insert(self, index: int, middleware: Union[Middleware, MiddlewareCallable]) -> None:
        self._bind(middleware)
        self._middleware.insert(index, middleware)

    def remove(self, middleware: Union[Middleware, MiddlewareCallable]) -> None:
        if middleware in self._middleware:
            self._middleware.remove(middleware)

    def __iter__(self) -> Iterator[Union[Middleware, MiddlewareCallable]]:
        return iter(self._middleware)

    def __len__(self) -> int:
        return len(self._middleware)

    async def process(self, request: Request, handler: Handler) -> Response:
        """Run ``request`` through every middleware, then ``handler``.

        The chain is fixed when processing starts, so middleware added
        while a request is running only see later requests.
        """
        chain = tuple(self._middleware)

        async def call(index: int, current: Request) -> Response:
            if index == len(chain):
                return await handler(current)
            return await chain[index](current, functools.partial(call, index + 1))

        return await call(0, request)

    def _bind(self, middleware: Any) -> None:
        if isinstance(middleware, Middleware) and middleware.registry is None:
            middleware.registry = self._registry
