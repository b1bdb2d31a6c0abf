"""
issue-parser - Parse Markdown issue bodies into structured, validated issues.

Quick start::

    from issue_parser import parse_issue_body

    result = parse_issue_body(body)
    if result.is_ok():
        issue = result.unwrap().issue
"""

from issue_parser.application.parsing import (
    IssueParser,
    ParseResult,
    RecoveryContext,
    aparse_issue_body,
    parse_issue_body,
    quick_parse,
    strict_parse,
)
from issue_parser.core.domain import (
    AcceptanceCriterion,
    CodeAnalysis,
    GivenWhenThenScenario,
    IssueContext,
    IssuePriority,
    IssueSource,
    IssueType,
    ParsedIssue,
    ParseError,
    ParseErrorCode,
    StackFrame,
    SuggestedFix,
    ValidationIssue,
    ValidationResult,
)
from issue_parser.core.ports.config_provider import FallbackConfig, ParserOptions
from issue_parser.core.result import Err, Ok, Result
from issue_parser.core.validation import validate_parsed_issue


__version__ = "1.0.0"

__all__ = [
    "AcceptanceCriterion",
    "CodeAnalysis",
    "Err",
    "FallbackConfig",
    "GivenWhenThenScenario",
    "IssueContext",
    "IssueParser",
    "IssuePriority",
    "IssueSource",
    "IssueType",
    "Ok",
    "ParseError",
    "ParseErrorCode",
    "ParseResult",
    "ParsedIssue",
    "ParserOptions",
    "RecoveryContext",
    "Result",
    "StackFrame",
    "SuggestedFix",
    "ValidationIssue",
    "ValidationResult",
    "__version__",
    "aparse_issue_body",
    "parse_issue_body",
    "quick_parse",
    "strict_parse",
    "validate_parsed_issue",
]
