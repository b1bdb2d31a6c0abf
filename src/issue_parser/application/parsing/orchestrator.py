"""
Parse Orchestrator - Run the full issue parsing pipeline.

Pipeline::

    body -> AST -> section parsers -> ParsedIssue -> validation -> ParseResult
             |            |
             +------------+--> recovery engine (fallback issue) -> validation

Any stage failing with a recoverable error hands over to the recovery
engine. ``INVALID_FORMAT`` and exhausted recovery surface as ``Err``.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from markdown_it.tree import SyntaxTreeNode

from issue_parser.adapters.markdown import (
    MarkdownItAstProvider,
    SectionName,
    find_section,
    section_markdown,
)
from issue_parser.adapters.parsers import (
    parse_acceptance_criteria,
    parse_code_analysis,
    parse_context,
    parse_problem_description,
    parse_source,
    parse_suggested_fix,
    parse_type,
)
from issue_parser.core.domain.entities import ParsedIssue
from issue_parser.core.domain.enums import ParseErrorCode
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.domain.value_objects import ValidationResult
from issue_parser.core.ports.config_provider import ParserOptions
from issue_parser.core.ports.markdown_ast import MarkdownAstPort
from issue_parser.core.result import Err, Ok, Result
from issue_parser.core.validation import validate_parsed_issue

from .recovery import (
    RecoveryContext,
    attempt_recovery,
    create_fallback_issue,
    create_recovery_context,
    format_recovery_log,
    record_error,
    record_fallback,
    recovery_strategy,
)


EMPTY_BODY = "empty-body"

# Sections whose original Markdown is kept in ParsedIssue.raw_sections
RAW_SECTIONS = (
    SectionName.SOURCE,
    SectionName.TYPE,
    SectionName.CONTEXT,
    SectionName.PROBLEM_DESCRIPTION,
    SectionName.CODE_ANALYSIS,
    SectionName.SUGGESTED_FIX,
    SectionName.ACCEPTANCE_CRITERIA,
)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of a successful parse call.

    Attributes:
        issue: The parsed (or recovered) issue.
        validation: Validation of ``issue``; empty when validation was skipped.
        used_fallback: Whether the recovery engine produced ``issue``.
        recovery: Recovery audit trail when ``used_fallback`` is set.
    """

    issue: ParsedIssue
    validation: ValidationResult
    used_fallback: bool = False
    recovery: RecoveryContext | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "issue": self.issue.to_dict(),
            "validation": self.validation.to_dict(),
            "usedFallback": self.used_fallback,
        }
        if self.recovery is not None:
            data["recovery"] = self.recovery.to_dict()
        return data


class IssueParser:
    """
    Orchestrates parsing of a single issue body.

    Holds no per-call state, so one instance can serve concurrent calls.
    """

    def __init__(
        self,
        options: ParserOptions | None = None,
        ast_provider: MarkdownAstPort | None = None,
    ):
        """
        Initialize the parser.

        Args:
            options: Parse options, defaults to ``ParserOptions()``.
            ast_provider: Markdown AST provider, defaults to markdown-it-py.
        """
        self.options = options or ParserOptions()
        self.ast_provider = ast_provider or MarkdownItAstProvider()
        self.logger = logging.getLogger("IssueParser")

    def parse(self, body: str) -> Result[ParseResult, ParseError]:
        """
        Parse an issue body.

        Args:
            body: Raw Markdown issue body.

        Returns:
            Ok(ParseResult) or Err(ParseError).
        """
        if not body or not body.strip():
            return self._parse_empty(body or "")

        ast_result = self.ast_provider.parse(body)
        if ast_result.is_err():
            return self._recover(ast_result.unwrap_err(), body)

        issue_result = self._parse_sections(ast_result.unwrap(), body)
        if issue_result.is_err():
            return self._recover(issue_result.unwrap_err(), body)

        return self._finish(issue_result.unwrap())

    async def aparse(self, body: str) -> Result[ParseResult, ParseError]:
        """Parse without blocking the event loop."""
        return await asyncio.to_thread(self.parse, body)

    # -------------------------------------------------------------------------
    # Pipeline stages
    # -------------------------------------------------------------------------

    def _parse_empty(self, body: str) -> Result[ParseResult, ParseError]:
        if not self.options.enable_fallback:
            return Err(ParseError(code=ParseErrorCode.INVALID_FORMAT, message="Issue body is empty"))

        self.logger.debug("Empty issue body, using fallback issue")
        context = record_fallback(create_recovery_context(), EMPTY_BODY)
        issue = create_fallback_issue(body, self.options.fallback_config)
        return self._finish(issue, context)

    def _parse_sections(self, ast: SyntaxTreeNode, body: str) -> Result[ParsedIssue, ParseError]:
        source = parse_source(ast)
        if source.is_err():
            return source
        issue_type = parse_type(ast)
        if issue_type.is_err():
            return issue_type
        context = parse_context(ast)
        if context.is_err():
            return context
        code_analysis = parse_code_analysis(ast)
        if code_analysis.is_err():
            return code_analysis
        description = parse_problem_description(ast)
        if description.is_err():
            return description
        suggested_fix = parse_suggested_fix(ast)
        if suggested_fix.is_err():
            return suggested_fix
        criteria = parse_acceptance_criteria(ast)
        if criteria.is_err():
            return criteria

        parsed_source = source.unwrap()
        return Ok(
            ParsedIssue(
                source=parsed_source.source,
                type=issue_type.unwrap(),
                problem_description=description.unwrap(),
                context=context.unwrap(),
                code_analysis=code_analysis.unwrap(),
                suggested_fix=suggested_fix.unwrap(),
                acceptance_criteria=criteria.unwrap(),
                raw_sections=self._raw_sections(ast, body),
                source_id=parsed_source.source_id,
                source_url=parsed_source.source_url,
            )
        )

    def _raw_sections(self, ast: SyntaxTreeNode, body: str) -> dict[str, str]:
        raw = {"body": body}
        for name in RAW_SECTIONS:
            section = find_section(ast, name).unwrap_or(None)
            if section is not None:
                raw[name] = section_markdown(section, body)
        return raw

    def _recover(self, error: ParseError, body: str) -> Result[ParseResult, ParseError]:
        if error.code is ParseErrorCode.INVALID_FORMAT or not self.options.enable_fallback:
            return Err(error)

        config = self.options.fallback_config
        context = record_error(create_recovery_context(), error)
        issue = attempt_recovery(error, body, context, config)
        if issue is None:
            self.logger.error(format_recovery_log(context, "failed"))
            return Err(error)

        context = record_fallback(context, recovery_strategy(error, config) or "fallback")
        return self._finish(issue, context)

    def _finish(
        self, issue: ParsedIssue, context: RecoveryContext | None = None
    ) -> Result[ParseResult, ParseError]:
        options = self.options
        validation = ValidationResult() if options.skip_validation else validate_parsed_issue(issue)

        if options.strict and validation.warnings:
            return Err(
                ParseError(
                    code=ParseErrorCode.VALIDATION_ERROR,
                    message=f"Strict mode: {len(validation.warnings)} warning(s) found",
                )
            )

        if not validation.valid and not options.enable_fallback:
            details = "; ".join(e.message for e in validation.errors)
            return Err(
                ParseError(
                    code=ParseErrorCode.VALIDATION_ERROR,
                    message=f"Validation failed: {details}",
                )
            )

        used_fallback = context is not None
        if used_fallback:
            self.logger.warning(f"usedFallback=true | {format_recovery_log(context)}")

        return Ok(
            ParseResult(
                issue=issue,
                validation=validation,
                used_fallback=used_fallback,
                recovery=context,
            )
        )


# -------------------------------------------------------------------------
# Module-level entry points
# -------------------------------------------------------------------------


def parse_issue_body(
    body: str, options: ParserOptions | None = None
) -> Result[ParseResult, ParseError]:
    """Parse an issue body with the default AST provider."""
    return IssueParser(options).parse(body)


async def aparse_issue_body(
    body: str, options: ParserOptions | None = None
) -> Result[ParseResult, ParseError]:
    """Async variant of ``parse_issue_body``."""
    return await IssueParser(options).aparse(body)


def quick_parse(body: str) -> ParsedIssue | None:
    """Parse without validation, returning just the issue or None."""
    result = parse_issue_body(body, ParserOptions(skip_validation=True))
    return result.map(lambda r: r.issue).to_optional()


def strict_parse(body: str) -> Result[ParseResult, ParseError]:
    """Parse with warnings treated as failures and recovery disabled."""
    return parse_issue_body(body, ParserOptions(strict=True, enable_fallback=False))
