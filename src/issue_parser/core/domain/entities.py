"""
Domain entities - The structured issue record and its parts.

All entities are immutable. A ``ParsedIssue`` is built exactly once, either
by the section parsers or by the recovery engine, and handed out by value.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .enums import IssuePriority, IssueSource, IssueType
from .value_objects import GivenWhenThenScenario, StackFrame


def _value(member: Any) -> Any:
    """Enum value, or the raw object when it is not an enum member."""
    return getattr(member, "value", member)


@dataclass(frozen=True)
class IssueContext:
    """
    Where the issue lives: priority, affected files and symbols, ownership.

    ``related_files`` and ``related_symbols`` are ordered and de-duplicated.
    """

    priority: IssuePriority = IssuePriority.MEDIUM
    related_files: tuple[str, ...] = ()
    related_symbols: tuple[str, ...] = ()
    component: str | None = None
    service: str | None = None
    environment: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "priority": _value(self.priority),
            "relatedFiles": list(self.related_files),
            "relatedSymbols": list(self.related_symbols),
        }
        if self.component:
            data["component"] = self.component
        if self.service:
            data["service"] = self.service
        if self.environment:
            data["environment"] = self.environment
        return data


@dataclass(frozen=True)
class CodeAnalysis:
    """Code location and failure details extracted from traces and snippets."""

    file_path: str = ""
    start_line: int | None = None
    end_line: int | None = None
    function_name: str | None = None
    class_name: str | None = None
    snippet: str | None = None
    stack_trace: tuple[StackFrame, ...] | None = None
    error_message: str | None = None
    error_type: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"filePath": self.file_path}
        optional = {
            "startLine": self.start_line,
            "endLine": self.end_line,
            "functionName": self.function_name,
            "className": self.class_name,
            "snippet": self.snippet,
            "errorMessage": self.error_message,
            "errorType": self.error_type,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        if self.stack_trace is not None:
            data["stackTrace"] = [frame.to_dict() for frame in self.stack_trace]
        return data


@dataclass(frozen=True)
class SuggestedFix:
    """A proposed fix with ordered steps and a cue-word confidence in [0, 1]."""

    description: str
    steps: tuple[str, ...] = ()
    confidence: float = 0.5

    def to_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "steps": list(self.steps),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class AcceptanceCriterion:
    """One acceptance criterion, optionally checked off or written as a scenario."""

    description: str
    completed: bool = False
    scenario: GivenWhenThenScenario | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "description": self.description,
            "completed": self.completed,
        }
        if self.scenario is not None:
            data["scenario"] = self.scenario.to_dict()
        return data


@dataclass(frozen=True)
class ParsedIssue:
    """
    The structured record produced from an issue body.

    Attributes:
        source: Originating system.
        type: Issue classification.
        problem_description: What is wrong or wanted. Must be non-empty to validate.
        context: Priority, related files and symbols, ownership.
        code_analysis: Trace and code location details, when any were found.
        suggested_fix: Proposed fix, when a fix section exists.
        acceptance_criteria: Ordered criteria.
        raw_sections: Section name to original Markdown text, kept for audit.
        source_id: Identifier in the originating system.
        source_url: Link into the originating system.
    """

    source: IssueSource
    type: IssueType
    problem_description: str
    context: IssueContext = field(default_factory=IssueContext)
    code_analysis: CodeAnalysis | None = None
    suggested_fix: SuggestedFix | None = None
    acceptance_criteria: tuple[AcceptanceCriterion, ...] = ()
    raw_sections: Mapping[str, str] = field(default_factory=dict)
    source_id: str | None = None
    source_url: str | None = None

    def __post_init__(self) -> None:
        # Freeze the mapping so the record stays immutable end to end
        if not isinstance(self.raw_sections, MappingProxyType):
            object.__setattr__(self, "raw_sections", MappingProxyType(dict(self.raw_sections)))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "source": _value(self.source),
            "type": _value(self.type),
            "problemDescription": self.problem_description,
            "context": self.context.to_dict(),
            "acceptanceCriteria": [c.to_dict() for c in self.acceptance_criteria],
            "rawSections": dict(self.raw_sections),
        }
        if self.source_id:
            data["sourceId"] = self.source_id
        if self.source_url:
            data["sourceUrl"] = self.source_url
        if self.code_analysis is not None:
            data["codeAnalysis"] = self.code_analysis.to_dict()
        if self.suggested_fix is not None:
            data["suggestedFix"] = self.suggested_fix.to_dict()
        return data
