"""
Configuration Provider Port - Abstract interface for configuration.

Implementations:
- FileConfigProvider: Load from YAML/TOML config files
- EnvironmentConfigProvider: Load from env vars and .env, layered over a file
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class FallbackConfig:
    """Configuration for the recovery engine."""

    use_defaults: bool = True  # Allow recovery from validation failures
    infer_from_context: bool = True  # Extract files/symbols/criteria while recovering
    log_warnings: bool = True
    max_attempts: int = 3


@dataclass(frozen=True)
class ParserOptions:
    """Options for a single parse call."""

    strict: bool = False  # Promote validation warnings to a failure
    enable_fallback: bool = True
    fallback_config: FallbackConfig = field(default_factory=FallbackConfig)
    skip_validation: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """Logging setup for the CLI."""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"
    file: str | None = None


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""

    parser: ParserOptions = field(default_factory=ParserOptions)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigProviderPort(ABC):
    """
    Abstract interface for configuration providers.

    Configuration can come from config files, environment variables,
    .env files, or CLI arguments.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name."""
        ...

    @abstractmethod
    def load(self) -> AppConfig:
        """
        Load complete configuration.

        Returns:
            Complete AppConfig object.

        Raises:
            ConfigFileError: If a config file exists but cannot be parsed.
        """
        ...

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dotted key, e.g. ``fallback.max_attempts``.

        Args:
            key: Configuration key.
            default: Default value if not found.

        Returns:
            Configuration value.
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """
        Override a configuration value.

        Args:
            key: Configuration key.
            value: Value to set.
        """
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid).
        """
        ...
