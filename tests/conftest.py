"""Test fixtures and sample controllers for forge_functional."""

import pytest

from forge_functional.application import Application
from forge_functional.config import Config
from forge_functional.controller import Controller
from forge_functional.registry import Registry
from forge_functional.request import Request, RequestContext
from forge_functional.response import Response
from forge_functional.testing.harness import FunctionalTestHarness


class IndexController(Controller):
    """Home page controller."""

    def index_action(self):
        return "<h1>Welcome</h1>"


class ProductsController(Controller):
    """Controller exercising params, JSON, redirects and forwarding."""

    def index_action(self):
        self.response.set_content_type("text/html", "utf-8")
        return "<ul><li>Widget</li></ul>"

    def show_action(self, product_id):
        return f"Product {self.escaper.escape_html(product_id)}"

    def api_action(self):
        return {"products": ["widget", "gadget"]}

    async def search_action(self):
        query = self.request.get_query("q", "")
        return f"Results for {query}"

    def legacy_action(self):
        self.forward(action="index")

    def buy_action(self):
        if not self.session.get("user"):
            return self.redirect("/session/login")
        return "Bought"

    def save_action(self):
        name = self.request.get_post("name")
        return Response.json({"saved": name}, status_code=201)


class SessionController(Controller):
    """Login controller writing to the session."""

    def login_action(self):
        if self.request.is_post():
            self.session["user"] = self.request.get_post("user")
            return self.redirect("/")
        return "Please log in"


class BrokenController(Controller):
    """Controller whose actions fail."""

    def crash_action(self):
        raise RuntimeError("boom")

    def loop_action(self):
        self.forward(action="loop")


class AdminController(Controller):
    """Controller forwarding from initialize()."""

    def initialize(self):
        if not self.session.get("admin"):
            self.forward(controller="session", action="login")

    def index_action(self):
        return "Admin area"


CONTROLLERS = {
    "index": IndexController,
    "products": ProductsController,
    "session": SessionController,
    "broken": BrokenController,
    "admin": AdminController,
}


def register_controllers(application):
    for name, controller in CONTROLLERS.items():
        application.register_controller(name, controller)
    application.route("/p/{product_id}", "products", "show")


@pytest.fixture
def config():
    """Create a test configuration instance."""
    return Config()


@pytest.fixture
def registry():
    """Create a fresh registry."""
    registry = Registry()
    yield registry
    registry.reset()


@pytest.fixture
def app(registry, config):
    """Create an application with the sample controllers."""
    application = Application(registry, config=config)
    register_controllers(application)
    return application


@pytest.fixture
def harness(registry, config):
    """Create a set-up harness wired to the sample controllers."""
    harness = FunctionalTestHarness(config)
    harness.set_up(registry, bootstrap=register_controllers)
    try:
        yield harness
    finally:
        harness.tear_down()


@pytest.fixture
def request_factory():
    """Create a factory function for test requests."""
    def _create_request(method="GET", uri="/", **kwargs):
        return Request(method=method, uri=uri, **kwargs)
    return _create_request


@pytest.fixture
def context():
    """Create an empty ambient request context."""
    return RequestContext()
