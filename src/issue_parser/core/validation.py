"""
Issue validation - Check a ParsedIssue against domain invariants.

``validate_parsed_issue`` is a pure function. Errors make the result
invalid; warnings are advisory and never affect ``valid``.

Rules:

=========================  =======  ==========================================
Code                       Level    Condition
=========================  =======  ==========================================
INVALID_SOURCE             error    source is not a known source
INVALID_TYPE               error    type is not a known type
MISSING_DESCRIPTION        error    description is empty
SHORT_DESCRIPTION          warning  description shorter than 10 characters
LONG_DESCRIPTION           warning  description longer than 10,000 characters
INVALID_PRIORITY           error    priority is not a known priority
INVALID_FILE_PATH          warning  related file or analysis path looks wrong
INVALID_LINE_NUMBER        error    start or end line below 1
INVALID_LINE_RANGE         error    start line after end line
INVALID_STACK_FRAME        error    a stack frame without a file
INVALID_CONFIDENCE         error    fix confidence outside [0, 1]
EMPTY_STEPS                warning  suggested fix without steps
NO_ACCEPTANCE_CRITERIA     warning  no acceptance criteria
EMPTY_CRITERION            error    a criterion with an empty description
MISSING_SENTRY_ID          warning  sentry source without an id
MISSING_ASANA_ID           warning  asana source without an id
=========================  =======  ==========================================
"""

from __future__ import annotations

import math
import re
from typing import Any

from issue_parser.core.domain.entities import CodeAnalysis, ParsedIssue, SuggestedFix
from issue_parser.core.domain.enums import IssuePriority, IssueSource, IssueType
from issue_parser.core.domain.value_objects import ValidationIssue, ValidationResult


MIN_DESCRIPTION_LENGTH = 10
MAX_DESCRIPTION_LENGTH = 10_000

FILE_PATH_PATTERN = re.compile(r"^[./]?[\w\-./]+\.\w+$")


def create_validation_error(field: str, message: str, code: str) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, code=code)


def create_validation_warning(field: str, message: str, code: str) -> ValidationIssue:
    return ValidationIssue(field=field, message=message, code=code)


def _is_member(value: Any, enum_cls: type) -> bool:
    if isinstance(value, enum_cls):
        return True
    return isinstance(value, str) and value in {m.value for m in enum_cls}


def _validate_header(
    issue: ParsedIssue, errors: list[ValidationIssue], warnings: list[ValidationIssue]
) -> None:
    if not _is_member(issue.source, IssueSource):
        errors.append(
            create_validation_error("source", f"Invalid source: {issue.source!r}", "INVALID_SOURCE")
        )
    if not _is_member(issue.type, IssueType):
        errors.append(
            create_validation_error("type", f"Invalid issue type: {issue.type!r}", "INVALID_TYPE")
        )

    description = (issue.problem_description or "").strip()
    if not description:
        errors.append(
            create_validation_error(
                "problemDescription", "Problem description is required", "MISSING_DESCRIPTION"
            )
        )
    elif len(description) < MIN_DESCRIPTION_LENGTH:
        warnings.append(
            create_validation_warning(
                "problemDescription",
                f"Problem description is very short ({len(description)} characters)",
                "SHORT_DESCRIPTION",
            )
        )
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        warnings.append(
            create_validation_warning(
                "problemDescription",
                f"Problem description is very long ({len(description)} characters)",
                "LONG_DESCRIPTION",
            )
        )

    source = getattr(issue.source, "value", issue.source)
    if source == IssueSource.SENTRY.value and not issue.source_id:
        warnings.append(
            create_validation_warning(
                "sourceId", "Sentry issue has no Sentry issue id", "MISSING_SENTRY_ID"
            )
        )
    if source == IssueSource.ASANA.value and not issue.source_id:
        warnings.append(
            create_validation_warning("sourceId", "Asana issue has no Asana task id", "MISSING_ASANA_ID")
        )


def _validate_context(
    issue: ParsedIssue, errors: list[ValidationIssue], warnings: list[ValidationIssue]
) -> None:
    context = issue.context
    if not _is_member(context.priority, IssuePriority):
        errors.append(
            create_validation_error(
                "context.priority", f"Invalid priority: {context.priority!r}", "INVALID_PRIORITY"
            )
        )
    for index, path in enumerate(context.related_files):
        if not FILE_PATH_PATTERN.match(path):
            warnings.append(
                create_validation_warning(
                    f"context.relatedFiles[{index}]",
                    f"Suspicious file path: {path!r}",
                    "INVALID_FILE_PATH",
                )
            )


def _validate_code_analysis(
    analysis: CodeAnalysis, errors: list[ValidationIssue], warnings: list[ValidationIssue]
) -> None:
    if analysis.file_path and not FILE_PATH_PATTERN.match(analysis.file_path):
        warnings.append(
            create_validation_warning(
                "codeAnalysis.filePath",
                f"Suspicious file path: {analysis.file_path!r}",
                "INVALID_FILE_PATH",
            )
        )

    for name, line in (("startLine", analysis.start_line), ("endLine", analysis.end_line)):
        if line is not None and line < 1:
            errors.append(
                create_validation_error(
                    f"codeAnalysis.{name}",
                    f"Line numbers must be at least 1, got {line}",
                    "INVALID_LINE_NUMBER",
                )
            )

    if (
        analysis.start_line is not None
        and analysis.end_line is not None
        and analysis.start_line > analysis.end_line
    ):
        errors.append(
            create_validation_error(
                "codeAnalysis",
                f"Start line {analysis.start_line} is after end line {analysis.end_line}",
                "INVALID_LINE_RANGE",
            )
        )

    for index, frame in enumerate(analysis.stack_trace or ()):
        if not frame.file:
            errors.append(
                create_validation_error(
                    f"codeAnalysis.stackTrace[{index}]",
                    "Stack frame has no file",
                    "INVALID_STACK_FRAME",
                )
            )


def _validate_suggested_fix(
    fix: SuggestedFix, errors: list[ValidationIssue], warnings: list[ValidationIssue]
) -> None:
    confidence = fix.confidence
    if (
        not isinstance(confidence, (int, float))
        or math.isnan(confidence)
        or not 0.0 <= confidence <= 1.0
    ):
        errors.append(
            create_validation_error(
                "suggestedFix.confidence",
                f"Confidence must be between 0 and 1, got {confidence!r}",
                "INVALID_CONFIDENCE",
            )
        )
    if not fix.steps:
        warnings.append(
            create_validation_warning(
                "suggestedFix.steps", "Suggested fix has no steps", "EMPTY_STEPS"
            )
        )


def _validate_acceptance_criteria(
    issue: ParsedIssue, errors: list[ValidationIssue], warnings: list[ValidationIssue]
) -> None:
    if not issue.acceptance_criteria:
        warnings.append(
            create_validation_warning(
                "acceptanceCriteria", "No acceptance criteria defined", "NO_ACCEPTANCE_CRITERIA"
            )
        )
        return
    for index, criterion in enumerate(issue.acceptance_criteria):
        if not (criterion.description or "").strip():
            errors.append(
                create_validation_error(
                    f"acceptanceCriteria[{index}]",
                    "Acceptance criterion has an empty description",
                    "EMPTY_CRITERION",
                )
            )


def validate_parsed_issue(issue: ParsedIssue) -> ValidationResult:
    """
    Validate a parsed issue.

    Args:
        issue: The issue to check.

    Returns:
        ValidationResult with every error and warning found.
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    _validate_header(issue, errors, warnings)
    _validate_context(issue, errors, warnings)
    if issue.code_analysis is not None:
        _validate_code_analysis(issue.code_analysis, errors, warnings)
    if issue.suggested_fix is not None:
        _validate_suggested_fix(issue.suggested_fix, errors, warnings)
    _validate_acceptance_criteria(issue, errors, warnings)

    return ValidationResult(errors=tuple(errors), warnings=tuple(warnings))


# -------------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------------

CRITICAL_ERROR_CODES = frozenset({"MISSING_DESCRIPTION", "INVALID_SOURCE", "INVALID_TYPE"})


def has_critical_errors(result: ValidationResult) -> bool:
    """Whether any error makes the issue unusable downstream."""
    return any(e.code in CRITICAL_ERROR_CODES for e in result.errors)


def get_validation_summary(result: ValidationResult) -> str:
    """One-line summary of a validation result."""
    if result.valid and not result.warnings:
        return "Validation passed with no issues"
    if result.valid:
        return f"Validation passed with {len(result.warnings)} warning(s)"
    return f"Validation failed: {len(result.errors)} error(s), {len(result.warnings)} warning(s)"


def merge_validation_results(*results: ValidationResult) -> ValidationResult:
    """Concatenate errors and warnings of several results, in order."""
    return ValidationResult(
        errors=tuple(e for r in results for e in r.errors),
        warnings=tuple(w for r in results for w in r.warnings),
    )
