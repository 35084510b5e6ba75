"""Service registry for forge_functional.

The Registry is the per-test dependency container. It sits on top of a
kink Container and adds the shared/non-shared distinction, a full reset
and typed accessors for the services the application and the test
harness exchange.
"""

import enum
import logging
from typing import Any, Optional, Union

from kink import Container

from forge_functional.errors import ServiceNotFound

logger = logging.getLogger(__name__)


class ServiceKey(str, enum.Enum):
    """Well-known registry keys."""

    CONFIG = "config"
    DISPATCHER = "dispatcher"
    ESCAPER = "escaper"
    REQUEST = "request"
    RESPONSE = "response"
    ROUTER = "router"


Key = Union[ServiceKey, str]


def _key(key: Key) -> str:
    if isinstance(key, ServiceKey):
        return key.value
    return key


class Registry:
    """Registry of shared and per-lookup services.

    Shared definitions are kink services: a factory is resolved on first
    lookup and kink memoises the instance until the key is registered
    again or the registry is reset. Non-shared definitions are kink
    factories and are rebuilt on every lookup.

    Every callable definition, classes included, is a factory and is
    called with the registry. To register a callable object itself, wrap
    it: ``registry.set_shared("handler", lambda r: handler)``.
    """

    def __init__(self, container: Optional[Container] = None) -> None:
        """Initialize a new Registry.

        Args:
            container: Optional kink container. If not provided,
                       a new container will be created.
        """
        self._container = container or Container()

    def set_shared(self, key: Key, definition: Any) -> None:
        """Register a shared service.

        Args:
            key: The service key.
            definition: A factory taking the registry, or the instance
                        itself. Callables, classes included, are always
                        treated as factories.
        """
        name = _key(key)
        self._container.factories.pop(name, None)
        if callable(definition):
            self._container[name] = lambda _container: definition(self)
        else:
            self._container[name] = definition

    def set(self, key: Key, definition: Any) -> None:
        """Register a service that is rebuilt on every lookup.

        Args:
            key: The service key.
            definition: A factory taking the registry, or a value.
        """
        self._container.factories[_key(key)] = lambda _container: self._build(definition)

    def get(self, key: Key) -> Any:
        """Resolve a service.

        Raises:
            ServiceNotFound: If nothing is registered under the key.
        """
        name = _key(key)
        if name not in self._container:
            raise ServiceNotFound(name)
        return self._container[name]

    def get_shared(self, key: Key) -> Any:
        """Resolve a service as a shared one.

        A non-shared service is built once and registered as shared in
        its place, so later lookups return the same instance.
        """
        name = _key(key)
        if name not in self._container:
            raise ServiceNotFound(name)
        if name in self._container.factories:
            instance = self._container.factories.pop(name)(self._container)
            self._container[name] = instance
            return instance
        return self._container[name]

    def has(self, key: Key) -> bool:
        """Check if a service is registered."""
        return _key(key) in self._container

    def remove(self, key: Key) -> None:
        """Unregister a service and forget its instance.

        Raises:
            ServiceNotFound: If nothing is registered under the key.
        """
        name = _key(key)
        if name not in self._container:
            raise ServiceNotFound(name)
        del self._container[name]

    def __contains__(self, key: Key) -> bool:
        return self.has(key)

    def reset(self) -> None:
        """Drop every registration and every built instance."""
        logger.debug("Resetting registry")
        self._container = Container()

    def _build(self, definition: Any) -> Any:
        if callable(definition):
            return definition(self)
        return definition

    @property
    def container(self) -> Container:
        """Get the underlying kink container."""
        return self._container

    @property
    def dispatcher(self) -> Any:
        """Get the shared dispatcher."""
        return self.get_shared(ServiceKey.DISPATCHER)

    @property
    def response(self) -> Any:
        """Get the shared response."""
        return self.get_shared(ServiceKey.RESPONSE)

    @property
    def escaper(self) -> Any:
        """Get an escaper instance."""
        return self.get(ServiceKey.ESCAPER)

    @property
    def request(self) -> Any:
        """Get the current request."""
        return self.get_shared(ServiceKey.REQUEST)

    @property
    def router(self) -> Any:
        """Get the shared router."""
        return self.get_shared(ServiceKey.ROUTER)

    @property
    def config(self) -> Any:
        """Get the shared configuration."""
        return self.get_shared(ServiceKey.CONFIG)
