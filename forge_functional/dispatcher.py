"""Dispatcher for forge_functional.

The dispatcher owns the resolved route (controller name, action name and
params), runs the matching controller action, and re-runs the loop when
an action forwards to another controller/action.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from forge_functional.errors import ActionNotFound, ControllerNotFound, CyclicRoutingError

logger = logging.getLogger(__name__)

ControllerResolver = Callable[[str], Optional[Type[Any]]]
Params = Union[Dict[Any, Any], List[Any], Tuple[Any, ...]]


def _normalize_params(params: Optional[Params]) -> Dict[Any, Any]:
    if params is None:
        return {}
    if isinstance(params, dict):
        return dict(params)
    return {i: value for i, value in enumerate(params)}


class Dispatcher:
    """Resolves and executes controller actions.

    Positional params are keyed by their integer index and passed to the
    action positionally; named params are passed as keyword arguments.
    """

    action_suffix = "_action"

    def __init__(self, registry: Any = None, max_forwards: int = 256) -> None:
        """Initialize a new Dispatcher.

        Args:
            registry: The registry handed to controllers.
            max_forwards: Dispatch cycles allowed before routing is
                          considered cyclic.
        """
        self._registry = registry
        self._max_forwards = max_forwards
        self._controller_name = ""
        self._action_name = ""
        self._params: Dict[Any, Any] = {}
        self._forwarded = False
        self._finished = False
        self._active_controller: Any = None
        self._returned_value: Any = None
        self._previous: Optional[Tuple[str, str]] = None

    def set_controller_name(self, name: str) -> None:
        self._controller_name = name

    def get_controller_name(self) -> str:
        return self._controller_name

    def set_action_name(self, name: str) -> None:
        self._action_name = name

    def get_action_name(self) -> str:
        return self._action_name

    def set_params(self, params: Optional[Params]) -> None:
        self._params = _normalize_params(params)

    def get_params(self) -> Dict[Any, Any]:
        return dict(self._params)

    def get_param(self, key: Any, default: Any = None) -> Any:
        return self._params.get(key, default)

    def set_registry(self, registry: Any) -> None:
        self._registry = registry

    def was_forwarded(self) -> bool:
        return self._forwarded

    def is_finished(self) -> bool:
        return self._finished

    def get_returned_value(self) -> Any:
        return self._returned_value

    def get_active_controller(self) -> Any:
        return self._active_controller

    def get_previous(self) -> Optional[Tuple[str, str]]:
        """Get the controller/action pair that forwarded, if any."""
        return self._previous

    def forward(
        self,
        controller: Optional[str] = None,
        action: Optional[str] = None,
        params: Optional[Params] = None,
    ) -> None:
        """Reroute the current dispatch to another controller/action.

        Omitted parts keep their current values. Takes effect once the
        running action returns.
        """
        self._previous = (self._controller_name, self._action_name)
        if controller is not None:
            self._controller_name = controller
        if action is not None:
            self._action_name = action
        if params is not None:
            self._params = _normalize_params(params)
        self._finished = False
        self._forwarded = True
        logger.debug(
            "Forwarding %s/%s to %s/%s",
            self._previous[0], self._previous[1], self._controller_name, self._action_name,
        )

    async def dispatch(self, resolver: ControllerResolver) -> Any:
        """Run the resolved action, following forwards.

        Args:
            resolver: Maps a controller name to a controller class.

        Returns:
            The value returned by the last executed action.

        Raises:
            ControllerNotFound: If the resolver knows no such controller.
            ActionNotFound: If the controller has no such action.
            CyclicRoutingError: If forwarding exceeds the limit.
        """
        dispatches = 0
        self._finished = False
        self._forwarded = False
        self._previous = None

        while not self._finished:
            dispatches += 1
            if dispatches > self._max_forwards:
                raise CyclicRoutingError("Dispatcher has detected a cyclic routing causing stability problems")

            self._finished = True
            controller_class = resolver(self._controller_name)
            if controller_class is None:
                raise ControllerNotFound(f'Controller "{self._controller_name}" was not found')

            method_name = self._action_name.replace("-", "_") + self.action_suffix
            controller = controller_class(self._registry)
            action = getattr(controller, method_name, None)
            if not callable(action):
                raise ActionNotFound(
                    f'Action "{self._action_name}" was not found on controller "{self._controller_name}"'
                )

            self._active_controller = controller
            initialize = getattr(controller, "initialize", None)
            if callable(initialize):
                result = initialize()
                if hasattr(result, "__await__"):
                    await result
                if not self._finished:
                    continue

            args, kwargs = self._call_arguments()
            logger.debug("Dispatching %s/%s", self._controller_name, self._action_name)
            result = action(*args, **kwargs)
            if hasattr(result, "__await__"):
                result = await result

            if self._finished:
                self._returned_value = result

        return self._returned_value

    def _call_arguments(self) -> Tuple[List[Any], Dict[str, Any]]:
        positional = sorted((k, v) for k, v in self._params.items() if isinstance(k, int))
        named = {k: v for k, v in self._params.items() if isinstance(k, str)}
        return [v for _, v in positional], named

    def __repr__(self) -> str:
        return f"Dispatcher({self._controller_name}/{self._action_name})"
