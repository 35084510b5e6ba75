"""Functional testing support for forge_functional applications."""

__all__ = [
    "AsyncFunctionalTestCase",
    "FunctionalTestCase",
    "FunctionalTestHarness",
    "UnitTestCase",
]

from forge_functional.testing.harness import FunctionalTestHarness
from forge_functional.testing.cases import AsyncFunctionalTestCase, FunctionalTestCase, UnitTestCase
