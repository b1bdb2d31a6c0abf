"""
Environment Config Provider - Load configuration from environment variables.

Supports:
- Environment variables (ISSUE_PARSER_STRICT, ISSUE_PARSER_MAX_ATTEMPTS, ...)
- .env files
- A config file underneath, via FileConfigProvider
- Command line argument overrides

Precedence: CLI overrides > environment > .env > config file > defaults.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from issue_parser.core.ports.config_provider import AppConfig, ConfigProviderPort

from .file_config import FileConfigProvider, build_app_config, check_values


ENV_PREFIX = "ISSUE_PARSER_"

# Environment variable suffix -> dotted config key
ENV_MAPPING = {
    "STRICT": "strict",
    "ENABLE_FALLBACK": "enable_fallback",
    "SKIP_VALIDATION": "skip_validation",
    "USE_DEFAULTS": "fallback.use_defaults",
    "INFER_FROM_CONTEXT": "fallback.infer_from_context",
    "LOG_WARNINGS": "fallback.log_warnings",
    "MAX_ATTEMPTS": "fallback.max_attempts",
    "LOG_LEVEL": "logging.level",
    "LOG_FORMAT": "logging.format",
    "LOG_FILE": "logging.file",
}

# Everything is a string in the environment; these keys are coerced
_INT_KEYS = frozenset({"fallback.max_attempts"})
_STR_KEYS = frozenset({"logging.level", "logging.format", "logging.file"})


def _coerce(key: str, raw_value: str) -> Any:
    value = raw_value.strip()
    if key in _STR_KEYS:
        return value
    if key in _INT_KEYS:
        try:
            return int(value)
        except ValueError:
            return value
    if value.lower() in ("true", "1", "yes", "on"):
        return True
    if value.lower() in ("false", "0", "no", "off"):
        return False
    return value


class EnvironmentConfigProvider(ConfigProviderPort):
    """
    Configuration provider that layers environment variables and .env files
    over a config file.
    """

    def __init__(
        self,
        config_file: Path | None = None,
        env_file: Path | None = None,
        cli_overrides: dict[str, Any] | None = None,
    ):
        """
        Initialize the config provider.

        Args:
            config_file: Explicit config file (auto-detected if not specified).
            env_file: Path to .env file (auto-detected if not specified).
            cli_overrides: Dotted-key overrides; None values are ignored.
        """
        self._env_file = Path(env_file) if env_file else None
        self._file_provider = FileConfigProvider(config_path=config_file)
        self._values: dict[str, Any] = {}
        self._overrides = {
            key: value for key, value in (cli_overrides or {}).items() if value is not None
        }
        self._loaded = False
        self.logger = logging.getLogger("EnvironmentConfigProvider")

    # -------------------------------------------------------------------------
    # ConfigProviderPort Implementation
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return f"Environment + {self._file_provider.name}"

    @property
    def config_file_path(self) -> Path | None:
        return self._file_provider.config_file_path

    def load(self) -> AppConfig:
        """
        Load the layered configuration.

        Raises:
            ConfigFileError: If the config file exists but cannot be parsed.
        """
        self._load()
        return build_app_config(self.get)

    def get(self, key: str, default: Any = None) -> Any:
        if not self._loaded:
            self._load()
        key = key.strip().lower().replace("-", "_")
        if key in self._overrides:
            return self._overrides[key]
        if key in self._values:
            return self._values[key]
        return self._file_provider.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._overrides[key.strip().lower().replace("-", "_")] = value

    def validate(self) -> list[str]:
        errors = self._file_provider.validate()
        if errors:
            return errors
        self._load_layers()
        return check_values(self.get)

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _load(self) -> None:
        self._file_provider.load()
        self._load_layers()

    def _load_layers(self) -> None:
        self._values = {}
        self._load_env_file()
        self._load_environment()
        self._loaded = True

    def _load_env_file(self) -> None:
        """Load ISSUE_PARSER_* values from a .env file."""
        env_file = self._find_env_file()
        if not env_file:
            return

        for line in env_file.read_text(encoding="utf-8").splitlines():
            line = line.strip()

            # Skip empty lines and comments
            if not line or line.startswith("#") or "=" not in line:
                continue

            name, value = line.split("=", 1)
            name = name.strip().removeprefix("export ").strip()
            value = value.strip().strip('"').strip("'")
            self._store(name, value)

        self.logger.debug(f"Loaded environment file {env_file}")

    def _find_env_file(self) -> Path | None:
        if self._env_file:
            return self._env_file if self._env_file.exists() else None

        cwd_env = Path.cwd() / ".env"
        if cwd_env.exists():
            return cwd_env
        return None

    def _load_environment(self) -> None:
        for name, value in os.environ.items():
            self._store(name, value)

    def _store(self, name: str, raw_value: str) -> None:
        if not name.startswith(ENV_PREFIX):
            return
        key = ENV_MAPPING.get(name[len(ENV_PREFIX) :])
        if key is not None:
            self._values[key] = _coerce(key, raw_value)
