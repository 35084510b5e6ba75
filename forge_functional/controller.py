"""Base controller for forge_functional applications."""

from typing import Any

from forge_functional.registry import Registry, ServiceKey


class Controller:
    """Base class for controllers.

    Actions are methods named ``<action>_action``. They may be plain or
    async functions and may return a Response, a string (the body), a
    dict or list (a JSON body) or None to keep the working response.

    Usage::

        class ProductsController(Controller):
            def show_action(self, product_id):
                return f"Product {product_id}"
    """

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def initialize(self) -> Any:
        """Hook called before the action runs. May forward."""
        return None

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def dispatcher(self):
        return self._registry.get_shared(ServiceKey.DISPATCHER)

    @property
    def request(self):
        return self._registry.get_shared(ServiceKey.REQUEST)

    @property
    def response(self):
        return self._registry.get_shared(ServiceKey.RESPONSE)

    @property
    def escaper(self):
        return self._registry.get(ServiceKey.ESCAPER)

    @property
    def session(self):
        return self.request.session

    def forward(self, controller: str = None, action: str = None, params: Any = None) -> None:
        """Shortcut for ``self.dispatcher.forward``."""
        self.dispatcher.forward(controller=controller, action=action, params=params)

    def redirect(self, location: str, status_code: int = 302):
        """Shortcut for ``self.response.redirect``."""
        return self.response.redirect(location, status_code)
