"""Router implementation for forge_functional.

Routers map a request path to a controller, an action and the route
parameters. Explicit routes are tried first; the default MVC route
(``/controller/action/param/...``) is used as a fallback.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class RouteMatch:
    """Result of matching a path."""

    controller: str
    action: str
    params: Dict[Any, str] = field(default_factory=dict)
    pattern: Optional[str] = None


@dataclass
class Route:
    """An explicit route."""

    pattern: str
    controller: str
    action: str
    methods: List[str]

    def match(self, path: str) -> Optional[Dict[Any, str]]:
        """Match ``path`` against the pattern, returning its named params."""
        pattern_parts = _segments(self.pattern)
        path_parts = _segments(path)

        if len(pattern_parts) != len(path_parts):
            return None

        params: Dict[Any, str] = {}
        for part, value in zip(pattern_parts, path_parts):
            if part.startswith("{") and part.endswith("}"):
                params[part[1:-1]] = value
            elif part != value:
                return None
        return params


def _segments(path: str) -> List[str]:
    return [part for part in path.strip("/").split("/") if part]


class Router:
    """Router resolving paths to controller/action pairs."""

    def __init__(
        self,
        default_controller: str = "index",
        default_action: str = "index",
        use_default_routes: bool = True,
    ) -> None:
        self._routes: List[Route] = []
        self._default_controller = default_controller
        self._default_action = default_action
        self._use_default_routes = use_default_routes

    @property
    def routes(self) -> List[Route]:
        """Get all explicit routes."""
        return self._routes

    def add(self, pattern: str, controller: str, action: str = "index", methods: Optional[List[str]] = None) -> Route:
        """Add an explicit route.

        Args:
            pattern: The URL path pattern, with ``{name}`` placeholders.
            controller: The controller name.
            action: The action name.
            methods: The HTTP methods to match. Defaults to any method.
        """
        route = Route(pattern, controller, action, [m.upper() for m in methods or []])
        self._routes.append(route)
        return route

    def set_defaults(self, controller: Optional[str] = None, action: Optional[str] = None) -> None:
        if controller:
            self._default_controller = controller
        if action:
            self._default_action = action

    def match(self, path: str, method: str = "GET") -> Optional[RouteMatch]:
        """Match a request path and method.

        Args:
            path: The request path.
            method: The request method.

        Returns:
            The match, or None when no route applies.
        """
        method = method.upper()
        for route in self._routes:
            if route.methods and method not in route.methods:
                continue
            params = route.match(path)
            if params is not None:
                return RouteMatch(route.controller, route.action, params, route.pattern)

        if not self._use_default_routes:
            logger.debug("No route for %s %s", method, path)
            return None
        return self._match_default(path)

    def _match_default(self, path: str) -> RouteMatch:
        parts = _segments(path)
        controller = parts[0] if parts else self._default_controller
        action = parts[1] if len(parts) > 1 else self._default_action
        params: Dict[Any, str] = {i: value for i, value in enumerate(parts[2:])}
        return RouteMatch(controller, action, params)
