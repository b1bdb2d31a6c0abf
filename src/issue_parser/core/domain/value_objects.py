"""
Value objects - Small immutable records shared across the domain.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StackFrame:
    """One entry of a parsed stack trace."""

    file: str
    line: int
    column: int | None = None
    function: str | None = None

    def __str__(self) -> str:
        location = f"{self.file}:{self.line}"
        if self.column is not None:
            location = f"{location}:{self.column}"
        if self.function:
            return f"{self.function} ({location})"
        return location

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"file": self.file, "line": self.line}
        if self.column is not None:
            data["column"] = self.column
        if self.function:
            data["function"] = self.function
        return data


@dataclass(frozen=True)
class GivenWhenThenScenario:
    """A behaviour-driven GIVEN / WHEN / THEN triple."""

    given: str = ""
    when: str = ""
    then: str = ""

    def is_empty(self) -> bool:
        return not (self.given or self.when or self.then)

    def to_dict(self) -> dict[str, str]:
        return {"given": self.given, "when": self.when, "then": self.then}


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single validation finding.

    Attributes:
        field: Dotted path of the offending field, e.g. ``codeAnalysis.startLine``.
        message: Human-readable explanation.
        code: Stable machine-readable code, e.g. ``MISSING_DESCRIPTION``.
    """

    field: str
    message: str
    code: str

    def __str__(self) -> str:
        return f"[{self.code}] {self.field}: {self.message}"

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating a parsed issue.

    Errors are blocking, warnings are not. ``valid`` is derived from the
    error list so the two can never disagree.
    """

    errors: tuple[ValidationIssue, ...] = field(default_factory=tuple)
    warnings: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }
