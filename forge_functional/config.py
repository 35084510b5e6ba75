"""Configuration management for forge_functional.

This module provides the Config class that drives the application and the
test harness, layering built-in defaults, YAML files, environment variables
and runtime overrides.
"""

import os
from dataclasses import dataclass, field
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type, Union

import yaml


def validate_config(func):
    """Decorator to validate configuration values."""
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        result = func(self, *args, **kwargs)
        self._validate()
        return result
    return wrapper


@dataclass
class ConfigValue:
    """Configuration value with type information and validation."""
    value: Any
    type: Type
    required: bool = True
    default: Any = None
    validators: List[Callable[[Any], None]] = field(default_factory=list)

    def validate(self, key: str = "") -> None:
        """Validate the configuration value."""
        if self.required and self.value is None:
            raise ValueError(f"Required configuration value {key!r} is missing")
        if self.value is not None and not isinstance(self.value, self.type):
            raise TypeError(f"Expected {self.type.__name__} for {key!r}, got {type(self.value).__name__}")
        for validator in self.validators:
            validator(self.value)


def _positive(value: int) -> None:
    if value < 1:
        raise ValueError(f"Expected a positive integer, got {value}")


class Config:
    """Configuration for forge_functional applications and test cases.

    Values are stored flat, with nested sections joined by ``__``
    (``dispatcher__max_forwards``). Environment variables use the same
    key upper-cased behind the prefix, e.g. ``FORGE_DISPATCHER__MAX_FORWARDS``.
    """

    def __init__(self, env_prefix: str = "FORGE_", overrides: Optional[Dict[str, Any]] = None) -> None:
        """Initialize a new configuration instance.

        Args:
            env_prefix: Prefix for environment variables. Defaults to "FORGE_".
            overrides: Optional nested mapping applied after the environment.
        """
        self._env_prefix = env_prefix
        self._values: Dict[str, ConfigValue] = {}
        self._load_defaults()
        self.load_env()
        if overrides:
            self.update(overrides)

    def _load_defaults(self) -> None:
        """Load default configuration values."""
        defaults = {
            "debug": ConfigValue(False, bool, False),
            "env": ConfigValue("testing", str, False),
            "log_level": ConfigValue("INFO", str, False),
            "dispatcher": {
                "default_controller": ConfigValue("index", str),
                "default_action": ConfigValue("index", str),
                "max_forwards": ConfigValue(256, int, validators=[_positive]),
            },
            "testing": {
                "controller": ConfigValue("test", str),
                "action": ConfigValue("empty", str),
            },
        }
        self._values = self._flatten_config(defaults)

    def _flatten_config(self, config: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
        """Flatten nested configuration into a flat dictionary."""
        result = {}
        for key, value in config.items():
            full_key = f"{prefix}{key}" if prefix else key
            if isinstance(value, dict):
                result.update(self._flatten_config(value, f"{full_key}__"))
            else:
                result[full_key] = value
        return result

    def _unflatten_config(self, config: Dict[str, ConfigValue]) -> Dict[str, Any]:
        """Unflatten configuration into a nested dictionary."""
        result: Dict[str, Any] = {}
        for key, value in config.items():
            parts = key.split("__")
            current = result
            for part in parts[:-1]:
                current = current.setdefault(part, {})
            current[parts[-1]] = value.value
        return result

    @validate_config
    def load_file(self, path: Union[str, Path]) -> None:
        """Load configuration from a YAML file.

        Args:
            path: Path to the configuration file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file does not hold a mapping.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r") as f:
            config = yaml.safe_load(f)

        if config is None:
            return
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a dictionary")

        self._apply(self._flatten_config(config))

    @validate_config
    def load_env(self) -> None:
        """Load configuration from environment variables."""
        for key, config_value in self._values.items():
            value = os.getenv(f"{self._env_prefix}{key.upper()}")
            if value is not None:
                config_value.value = self._convert_value(value, config_value.type)

    @validate_config
    def update(self, values: Dict[str, Any]) -> None:
        """Apply a nested mapping of overrides."""
        self._apply(self._flatten_config(values))

    def _apply(self, flattened: Dict[str, Any]) -> None:
        for key, value in flattened.items():
            if key in self._values:
                self._values[key].value = value
            else:
                self._values[key] = ConfigValue(value, type(value), False)

    def _convert_value(self, value: str, target_type: Type) -> Any:
        """Convert a string value to the target type."""
        if target_type == bool:
            return value.lower() in ("true", "1", "yes")
        elif target_type == int:
            return int(value)
        elif target_type == float:
            return float(value)
        elif target_type == str:
            return value
        else:
            raise TypeError(f"Unsupported type: {target_type}")

    def _validate(self) -> None:
        """Validate all configuration values."""
        for key, value in self._values.items():
            value.validate(key)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Accepts flat keys (``dispatcher__max_forwards``) and section names
        (``dispatcher``), which return the nested mapping.
        """
        if key in self._values:
            return self._values[key].value
        section = self.to_dict().get(key)
        if isinstance(section, dict):
            return section
        return default

    @validate_config
    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        self._apply({key: value})

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a dictionary."""
        return self._unflatten_config(self._values)

    @property
    def debug(self) -> bool:
        """Get debug mode status."""
        return self.get("debug", False)

    @property
    def env(self) -> str:
        """Get current environment."""
        return self.get("env", "testing")

    @property
    def log_level(self) -> str:
        """Get log level."""
        return self.get("log_level", "INFO")

    @property
    def dispatcher(self) -> Dict[str, Any]:
        """Get dispatcher configuration."""
        return self.to_dict().get("dispatcher", {})

    @property
    def testing(self) -> Dict[str, Any]:
        """Get test harness configuration."""
        return self.to_dict().get("testing", {})
