"""
File Config Provider - Load configuration from YAML or TOML files.

Supports:
- .issue-parser.yaml / .issue-parser.yml
- .issue-parser.toml
- pyproject.toml under ``[tool.issue-parser]``

Example ``.issue-parser.yaml``::

    strict: false
    enable_fallback: true
    fallback:
      max_attempts: 2
      log_warnings: false
    logging:
      level: DEBUG
      format: json
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

import yaml

from issue_parser.core.exceptions import ConfigFileError
from issue_parser.core.ports.config_provider import (
    AppConfig,
    ConfigProviderPort,
    FallbackConfig,
    LoggingConfig,
    ParserOptions,
)


CONFIG_FILE_NAMES = (
    ".issue-parser.yaml",
    ".issue-parser.yml",
    ".issue-parser.toml",
)
PYPROJECT_TABLE = "issue-parser"

LOG_FORMATS = ("text", "json")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

BOOLEAN_KEYS = (
    "strict",
    "enable_fallback",
    "skip_validation",
    "fallback.use_defaults",
    "fallback.infer_from_context",
    "fallback.log_warnings",
)


def build_app_config(get: Any) -> AppConfig:
    """
    Assemble an AppConfig from a ``get(key, default)`` lookup.

    Shared by every provider so that defaults live in one place.
    """
    defaults = FallbackConfig()
    fallback = FallbackConfig(
        use_defaults=bool(get("fallback.use_defaults", defaults.use_defaults)),
        infer_from_context=bool(get("fallback.infer_from_context", defaults.infer_from_context)),
        log_warnings=bool(get("fallback.log_warnings", defaults.log_warnings)),
        max_attempts=int(get("fallback.max_attempts", defaults.max_attempts)),
    )
    parser = ParserOptions(
        strict=bool(get("strict", False)),
        enable_fallback=bool(get("enable_fallback", True)),
        fallback_config=fallback,
        skip_validation=bool(get("skip_validation", False)),
    )
    log_file = get("logging.file")
    return AppConfig(
        parser=parser,
        logging=LoggingConfig(
            level=str(get("logging.level", "INFO")).upper(),
            format=str(get("logging.format", "text")).lower(),
            file=str(log_file) if log_file else None,
        ),
    )


def check_values(get: Any) -> list[str]:
    """Type and range errors for the known configuration keys."""
    errors = []

    for key in BOOLEAN_KEYS:
        value = get(key)
        if value is not None and not isinstance(value, bool):
            errors.append(f"'{key}' must be true or false, got {value!r}")

    max_attempts = get("fallback.max_attempts")
    if max_attempts is not None:
        if isinstance(max_attempts, bool) or not isinstance(max_attempts, int):
            errors.append(f"'fallback.max_attempts' must be an integer, got {max_attempts!r}")
        elif max_attempts < 0:
            errors.append(f"'fallback.max_attempts' must not be negative, got {max_attempts}")

    log_format = get("logging.format")
    if log_format is not None and str(log_format).lower() not in LOG_FORMATS:
        errors.append(f"'logging.format' must be one of {', '.join(LOG_FORMATS)}, got {log_format!r}")

    level = get("logging.level")
    if level is not None and str(level).upper() not in LOG_LEVELS:
        errors.append(f"'logging.level' must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

    return errors


class FileConfigProvider(ConfigProviderPort):
    """
    Configuration provider that loads from YAML or TOML files.

    Search order when no explicit path is given:
    1. .issue-parser.yaml / .yml / .toml in the current directory
    2. pyproject.toml ``[tool.issue-parser]`` in the current directory
    3. The same files in the home directory
    """

    def __init__(
        self,
        config_path: Path | None = None,
        cli_overrides: dict[str, Any] | None = None,
    ):
        """
        Initialize the file config provider.

        Args:
            config_path: Explicit path to a config file.
            cli_overrides: Dotted-key overrides that win over file values.
        """
        self._explicit_path = Path(config_path) if config_path else None
        self._config_path: Path | None = None
        self._values: dict[str, Any] = {}
        self._overrides: dict[str, Any] = {}
        self._errors: list[str] = []
        self.logger = logging.getLogger("FileConfigProvider")

        for key, value in (cli_overrides or {}).items():
            if value is not None:
                self._overrides[_normalize_key(key)] = value

    # -------------------------------------------------------------------------
    # ConfigProviderPort Implementation
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        if self._config_path:
            return f"File ({self._config_path.name})"
        return "File (none)"

    @property
    def config_file_path(self) -> Path | None:
        """The config file that was loaded, if any."""
        return self._config_path

    def load(self) -> AppConfig:
        """
        Load configuration from the config file.

        Raises:
            ConfigFileError: If the file exists but cannot be parsed.
        """
        self._load_file()
        return build_app_config(self.get)

    def get(self, key: str, default: Any = None) -> Any:
        key = _normalize_key(key)
        if key in self._overrides:
            return self._overrides[key]
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._overrides[_normalize_key(key)] = value

    def validate(self) -> list[str]:
        """
        Validate the config file.

        A missing explicit file and unparseable files are reported here
        instead of raised.
        """
        errors = []
        if self._explicit_path and not self._explicit_path.exists():
            return [f"Config file not found: {self._explicit_path}"]

        try:
            self._load_file()
        except ConfigFileError as e:
            return [str(e)]

        errors.extend(self._errors)
        errors.extend(check_values(self.get))
        return errors

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    def _find_config_file(self) -> Path | None:
        if self._explicit_path:
            return self._explicit_path if self._explicit_path.exists() else None

        for directory in (Path.cwd(), Path.home()):
            for name in CONFIG_FILE_NAMES:
                candidate = directory / name
                if candidate.is_file():
                    return candidate
            pyproject = directory / "pyproject.toml"
            if pyproject.is_file() and self._has_pyproject_table(pyproject):
                return pyproject
        return None

    def _has_pyproject_table(self, path: Path) -> bool:
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            return False
        return PYPROJECT_TABLE in data.get("tool", {})

    def _load_file(self) -> None:
        self._values = {}
        self._errors = []
        self._config_path = self._find_config_file()
        if self._config_path is None:
            self.logger.debug("No config file found, using defaults")
            return

        data = self._read(self._config_path)
        if not isinstance(data, dict):
            self._errors.append(f"{self._config_path}: top level must be a mapping")
            return

        self._values = _flatten(data)
        self.logger.debug(f"Loaded config from {self._config_path}")

    def _read(self, path: Path) -> Any:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigFileError(path, "Cannot read config file", e) from e

        if path.suffix in (".yaml", ".yml"):
            try:
                return yaml.safe_load(content) or {}
            except yaml.YAMLError as e:
                raise ConfigFileError(path, "Invalid YAML syntax", e) from e

        try:
            data = tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            raise ConfigFileError(path, "Invalid TOML syntax", e) from e

        if path.name == "pyproject.toml":
            return data.get("tool", {}).get(PYPROJECT_TABLE, {})
        return data


def _normalize_key(key: str) -> str:
    return key.strip().lower().replace("-", "_")


def _flatten(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    """``{"fallback": {"max_attempts": 2}}`` -> ``{"fallback.max_attempts": 2}``."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{_normalize_key(str(key))}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat
