"""
Tests for the parse orchestrator.
"""

import asyncio
import logging
from typing import Any

import pytest

from issue_parser.application.parsing import (
    IssueParser,
    ParseResult,
    aparse_issue_body,
    parse_issue_body,
    quick_parse,
    strict_parse,
)
from issue_parser.application.parsing.orchestrator import EMPTY_BODY
from issue_parser.application.parsing.recovery import EMPTY_DESCRIPTION, TEXT_PARSING
from issue_parser.core.domain import (
    IssueSource,
    IssueType,
    ParseError,
    ParseErrorCode,
    ParsedIssue,
    ValidationResult,
)
from issue_parser.core.ports.config_provider import FallbackConfig, ParserOptions
from issue_parser.core.ports.markdown_ast import MarkdownAstPort
from issue_parser.core.result import Err, Ok, Result


class FailingAstProvider(MarkdownAstPort):
    """AST provider that always fails with the given code."""

    def __init__(self, code: ParseErrorCode = ParseErrorCode.AST_ERROR):
        self.code = code

    @property
    def name(self) -> str:
        return "failing"

    def parse(self, content: str) -> Result[Any, ParseError]:
        return Err(ParseError(code=self.code, message="Failed to parse markdown"))


MISSING_DESCRIPTION_BODY = "## Problem Description\n\n## Type\n\nBug\n"


class TestParseSuccess:
    """Tests for documents the section parsers handle."""

    def test_complete_issue(self, complete_issue):
        result = parse_issue_body(complete_issue)

        assert result.is_ok()
        parsed = result.unwrap()
        issue = parsed.issue
        assert issue.source == IssueSource.SENTRY
        assert issue.source_id == "PROJ-12345"
        assert issue.type == IssueType.BUG
        assert issue.problem_description.startswith("Users are experiencing random logouts")
        assert issue.code_analysis is not None
        assert issue.suggested_fix is not None
        assert len(issue.acceptance_criteria) == 4
        assert parsed.used_fallback is False
        assert parsed.recovery is None
        assert parsed.validation.valid
        assert parsed.validation.warnings == ()

    def test_raw_sections(self, complete_issue):
        issue = parse_issue_body(complete_issue).unwrap().issue

        assert issue.raw_sections["body"] == complete_issue
        assert issue.raw_sections["Type"] == "## Type\n\nBug"
        assert set(issue.raw_sections) == {
            "body",
            "Source",
            "Type",
            "Context",
            "Problem Description",
            "Code Analysis",
            "Suggested Fix",
            "Acceptance Criteria",
        }

    def test_every_sample_parses(self, any_issue):
        result = parse_issue_body(any_issue)

        assert result.is_ok()
        assert result.unwrap().issue.raw_sections["body"] == any_issue

    def test_warnings_do_not_fail_by_default(self, python_issue):
        parsed = parse_issue_body(python_issue).unwrap()

        codes = {w.code for w in parsed.validation.warnings}
        assert "MISSING_SENTRY_ID" in codes
        assert parsed.validation.valid

    def test_skip_validation(self, python_issue):
        parsed = parse_issue_body(python_issue, ParserOptions(skip_validation=True)).unwrap()
        assert parsed.validation == ValidationResult()

    def test_to_dict(self, asana_issue):
        data = parse_issue_body(asana_issue).unwrap().to_dict()

        assert set(data) == {"issue", "validation", "usedFallback"}
        assert data["usedFallback"] is False
        assert data["issue"]["source"] == "asana"
        assert data["validation"]["valid"] is True


class TestStrictMode:
    def test_warnings_become_error(self, python_issue):
        result = parse_issue_body(python_issue, ParserOptions(strict=True))

        error = result.unwrap_err()
        assert error.code == ParseErrorCode.VALIDATION_ERROR
        assert error.message.startswith("Strict mode:")

    def test_clean_issue_passes(self, complete_issue):
        assert parse_issue_body(complete_issue, ParserOptions(strict=True)).is_ok()

    def test_applies_to_recovered_issues(self):
        result = parse_issue_body("", ParserOptions(strict=True))
        assert result.unwrap_err().code == ParseErrorCode.VALIDATION_ERROR


class TestValidationFailures:
    def test_invalid_issue_returned_with_fallback(self):
        parsed = parse_issue_body(MISSING_DESCRIPTION_BODY).unwrap()

        assert not parsed.validation.valid
        assert parsed.validation.errors[0].code == "MISSING_DESCRIPTION"
        assert parsed.used_fallback is False

    def test_invalid_issue_fails_without_fallback(self):
        result = parse_issue_body(MISSING_DESCRIPTION_BODY, ParserOptions(enable_fallback=False))

        error = result.unwrap_err()
        assert error.code == ParseErrorCode.VALIDATION_ERROR
        assert error.message == "Validation failed: Problem description is required"


class TestEmptyBody:
    @pytest.mark.parametrize("body", ["", "   \n\t\n"])
    def test_fallback_issue(self, body):
        parsed = parse_issue_body(body).unwrap()

        assert parsed.used_fallback is True
        assert parsed.recovery.fallbacks_used == (EMPTY_BODY,)
        assert parsed.issue.problem_description == EMPTY_DESCRIPTION
        assert parsed.issue.source == IssueSource.MANUAL
        assert parsed.validation.valid

    def test_without_fallback(self):
        error = parse_issue_body("", ParserOptions(enable_fallback=False)).unwrap_err()
        assert error.code == ParseErrorCode.INVALID_FORMAT


class TestRecovery:
    """Tests for the hand-over to the recovery engine."""

    def test_ast_failure_recovers(self, quiet_fallback_options):
        parser = IssueParser(quiet_fallback_options, FailingAstProvider())

        parsed = parser.parse("Sentry crash in the login api").unwrap()

        assert parsed.used_fallback is True
        assert parsed.issue.source == IssueSource.SENTRY
        assert parsed.recovery.attempts == 2
        assert parsed.recovery.fallbacks_used == (TEXT_PARSING,)
        assert [e.code for e in parsed.recovery.errors] == [ParseErrorCode.AST_ERROR]
        assert parsed.to_dict()["recovery"]["attempts"] == 2

    def test_logs_used_fallback(self, quiet_fallback_options, caplog):
        parser = IssueParser(quiet_fallback_options, FailingAstProvider())

        with caplog.at_level(logging.WARNING, logger="IssueParser"):
            parser.parse("Crash in the api")

        assert "usedFallback=true | Parse recovery success | attempts: 2" in caplog.text

    def test_fallback_disabled(self):
        parser = IssueParser(ParserOptions(enable_fallback=False), FailingAstProvider())
        assert parser.parse("text").unwrap_err().code == ParseErrorCode.AST_ERROR

    def test_invalid_format_is_terminal(self):
        parser = IssueParser(ParserOptions(), FailingAstProvider(ParseErrorCode.INVALID_FORMAT))
        assert parser.parse("text").unwrap_err().code == ParseErrorCode.INVALID_FORMAT

    def test_attempt_cap(self, caplog):
        options = ParserOptions(fallback_config=FallbackConfig(max_attempts=1))
        parser = IssueParser(options, FailingAstProvider())

        with caplog.at_level(logging.ERROR, logger="IssueParser"):
            result = parser.parse("text")

        assert result.unwrap_err().code == ParseErrorCode.AST_ERROR
        assert "Parse recovery failed | attempts: 1" in caplog.text

    def test_validation_error_needs_defaults(self):
        options = ParserOptions(fallback_config=FallbackConfig(use_defaults=False))
        parser = IssueParser(options, FailingAstProvider(ParseErrorCode.VALIDATION_ERROR))
        assert parser.parse("text").is_err()


class TestEntryPoints:
    def test_aparse_matches_parse(self, complete_issue):
        parser = IssueParser()
        assert asyncio.run(parser.aparse(complete_issue)) == parser.parse(complete_issue)

    def test_aparse_issue_body(self, asana_issue):
        result = asyncio.run(aparse_issue_body(asana_issue))
        assert result.unwrap().issue.source_id == "1234567890"

    def test_concurrent_calls(self, complete_issue, asana_issue):
        parser = IssueParser()

        async def run_all() -> list[Result[ParseResult, ParseError]]:
            bodies = [complete_issue, asana_issue] * 5
            return await asyncio.gather(*(parser.aparse(b) for b in bodies))

        results = asyncio.run(run_all())

        assert all(r.is_ok() for r in results)
        assert [r.unwrap().issue.source for r in results[:2]] == [
            IssueSource.SENTRY,
            IssueSource.ASANA,
        ]

    def test_quick_parse(self, python_issue):
        issue = quick_parse(python_issue)
        assert isinstance(issue, ParsedIssue)
        assert issue.type == IssueType.BUG

    def test_strict_parse(self, complete_issue):
        assert strict_parse(complete_issue).is_ok()
        assert strict_parse("").unwrap_err().code == ParseErrorCode.INVALID_FORMAT

    def test_result_pattern_matching(self, minimal_issue):
        match parse_issue_body(minimal_issue):
            case Ok(parsed):
                assert parsed.issue.problem_description.startswith("The login button")
            case Err(error):
                pytest.fail(f"unexpected error: {error}")
