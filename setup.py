#!/usr/bin/env python
"""Setup script for the forge_functional package."""

from setuptools import setup, find_packages

setup(
    name="forge_functional",
    version="0.1.0",
    description="In-process functional testing for Forge MVC applications",
    author="Forge Framework",
    author_email="forge@example.com",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "kink>=0.9.0",
        "multidict>=6.0",
        "orjson>=3.8",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "pytest-cov>=4.0",
        ],
    },
    entry_points={
        "pytest11": [
            "forge_functional = forge_functional.testing.pytest_plugin",
        ],
    },
    python_requires=">=3.8",
)
