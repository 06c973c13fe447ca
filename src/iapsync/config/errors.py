"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Base class for configuration problems detected at startup."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""


class InvalidConfigurationError(ConfigurationError):
    """Raised when a configuration value is present but unusable."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid configuration for {name}: {reason}")
        self.name = name
