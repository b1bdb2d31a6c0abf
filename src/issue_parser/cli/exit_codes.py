"""
Exit Codes - Process exit codes for the issue-parser CLI.

Scripts can branch on these without scraping output:

    issue-parser issue.md --strict
    case $? in
        0) echo "clean" ;;
        4) echo "validation failed" ;;
        5) echo "could not parse" ;;
    esac
"""

from __future__ import annotations

from enum import IntEnum

from issue_parser.core.domain.enums import ParseErrorCode
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.exceptions import ConfigError


class ExitCode(IntEnum):
    """Exit codes returned by ``main()``."""

    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    FILE_NOT_FOUND = 3
    VALIDATION_ERROR = 4
    PARSE_ERROR = 5
    CANCELLED = 130  # 128 + SIGINT

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @classmethod
    def from_parse_error(cls, error: ParseError) -> ExitCode:
        """Exit code for a parse failure."""
        if error.code is ParseErrorCode.VALIDATION_ERROR:
            return cls.VALIDATION_ERROR
        return cls.PARSE_ERROR

    @classmethod
    def from_exception(cls, exc: BaseException) -> ExitCode:
        """Exit code for an exception escaping the CLI."""
        if isinstance(exc, KeyboardInterrupt):
            return cls.CANCELLED
        if isinstance(exc, ConfigError):
            return cls.CONFIG_ERROR
        if isinstance(exc, FileNotFoundError):
            return cls.FILE_NOT_FOUND
        return cls.ERROR


_DESCRIPTIONS = {
    ExitCode.SUCCESS: "Issue parsed",
    ExitCode.ERROR: "Unexpected error",
    ExitCode.CONFIG_ERROR: "Invalid configuration",
    ExitCode.FILE_NOT_FOUND: "Input file not found",
    ExitCode.VALIDATION_ERROR: "Issue failed validation",
    ExitCode.PARSE_ERROR: "Issue could not be parsed",
    ExitCode.CANCELLED: "Cancelled by user",
}
