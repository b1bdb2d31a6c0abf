"""
Exceptions raised at the outer surface of the package.

Parsing itself reports expected failures as ``Err(ParseError)`` values; these
exceptions cover configuration loading and programming errors.
"""

from __future__ import annotations

from pathlib import Path


class IssueParserError(Exception):
    """Base exception for issue-parser."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ConfigError(IssueParserError):
    """Invalid configuration values."""


class ConfigFileError(ConfigError):
    """A configuration file could not be read or parsed."""

    def __init__(self, path: Path | str, message: str, cause: Exception | None = None):
        self.path = Path(path)
        super().__init__(f"{self.path}: {message}", cause)
