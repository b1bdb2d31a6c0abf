"""
Domain layer - Entities, value objects, enums, and error values.

Pure Python with no knowledge of Markdown libraries or I/O.
"""

from .entities import (
    AcceptanceCriterion,
    CodeAnalysis,
    IssueContext,
    ParsedIssue,
    SuggestedFix,
)
from .enums import TYPE_PRECEDENCE, IssuePriority, IssueSource, IssueType, ParseErrorCode
from .errors import ParseError
from .value_objects import GivenWhenThenScenario, StackFrame, ValidationIssue, ValidationResult


__all__ = [
    "TYPE_PRECEDENCE",
    "AcceptanceCriterion",
    "CodeAnalysis",
    "GivenWhenThenScenario",
    "IssueContext",
    "IssuePriority",
    "IssueSource",
    "IssueType",
    "ParseError",
    "ParseErrorCode",
    "ParsedIssue",
    "StackFrame",
    "SuggestedFix",
    "ValidationIssue",
    "ValidationResult",
]
