"""
Parse errors - Structured failure values carried inside ``Err``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .enums import ParseErrorCode


@dataclass(frozen=True)
class ParseError:
    """
    A recoverable or terminal parse failure.

    Never raised. Sub-parsers return it inside ``Err`` and the orchestrator
    hands it to the recovery engine.

    Attributes:
        code: Failure category, decides recoverability.
        message: Human-readable description.
        section: Canonical section name the failure relates to, if any.
        cause: Underlying ParseError or library exception.
    """

    code: ParseErrorCode
    message: str
    section: str | None = None
    cause: ParseError | BaseException | None = None

    def __str__(self) -> str:
        prefix = f"{self.code.value}"
        if self.section:
            prefix = f"{prefix} [{self.section}]"
        return f"{prefix}: {self.message}"

    def with_section(self, section: str) -> ParseError:
        """Re-wrap this error as belonging to ``section``."""
        return ParseError(code=self.code, message=self.message, section=section, cause=self)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.section:
            data["section"] = self.section
        if isinstance(self.cause, ParseError):
            data["cause"] = self.cause.to_dict()
        elif self.cause is not None:
            data["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return data
