"""Forge Functional - in-process functional testing for Forge MVC applications.

This package provides a small MVC application core (registry, router,
dispatcher, controllers, responses) and a functional test harness that
dispatches URLs against it and asserts on the outcome.
"""

# Define version
__version__ = "0.1.0"

__all__ = [
    "Application",
    "AssertionFailure",
    "Config",
    "Controller",
    "Dispatcher",
    "Escaper",
    "Headers",
    "Middleware",
    "MiddlewareStack",
    "Registry",
    "Request",
    "RequestContext",
    "Response",
    "Router",
    "ServiceKey",
    "UsageError",
]

from forge_functional.config import Config
from forge_functional.errors import AssertionFailure, UsageError
from forge_functional.headers import Headers
from forge_functional.registry import Registry, ServiceKey
from forge_functional.request import Request, RequestContext
from forge_functional.response import Response
from forge_functional.router import Router
from forge_functional.dispatcher import Dispatcher
from forge_functional.controller import Controller
from forge_functional.escaper import Escaper
from forge_functional.middleware import Middleware, MiddlewareStack
from forge_functional.application import Application
