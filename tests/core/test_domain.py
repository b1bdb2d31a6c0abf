"""
Tests for domain enums, value objects, entities, and parse errors.
"""

from dataclasses import FrozenInstanceError

import pytest

from issue_parser.core.domain import (
    TYPE_PRECEDENCE,
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


# =============================================================================
# Enum Tests
# =============================================================================


class TestIssueSource:
    """Tests for IssueSource enum."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("sentry", IssueSource.SENTRY),
            ("Asana", IssueSource.ASANA),
            ("  GITHUB ", IssueSource.GITHUB),
            ("manual", IssueSource.MANUAL),
        ],
    )
    def test_from_string(self, value, expected):
        assert IssueSource.from_string(value) == expected

    def test_from_string_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown issue source"):
            IssueSource.from_string("jira")


class TestIssueType:
    """Tests for IssueType enum."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("bug", IssueType.BUG),
            ("Feature", IssueType.FEATURE),
            ("documentation", IssueType.DOCS),
            ("doc", IssueType.DOCS),
            ("tests", IssueType.TEST),
            ("testing", IssueType.TEST),
            ("chore", IssueType.CHORE),
        ],
    )
    def test_from_string(self, value, expected):
        assert IssueType.from_string(value) == expected

    def test_from_string_unknown_raises(self):
        with pytest.raises(ValueError):
            IssueType.from_string("epic")

    def test_precedence_covers_every_type_in_declaration_order(self):
        assert TYPE_PRECEDENCE == tuple(IssueType)


class TestIssuePriority:
    """Tests for IssuePriority enum."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Critical", IssuePriority.CRITICAL),
            ("urgent", IssuePriority.CRITICAL),
            ("P0", IssuePriority.CRITICAL),
            ("high", IssuePriority.HIGH),
            ("p1", IssuePriority.HIGH),
            ("low", IssuePriority.LOW),
            ("minor", IssuePriority.LOW),
            ("medium", IssuePriority.MEDIUM),
            ("whatever", IssuePriority.MEDIUM),
        ],
    )
    def test_from_string(self, value, expected):
        assert IssuePriority.from_string(value) == expected


class TestParseErrorCode:
    """Tests for ParseErrorCode enum."""

    def test_only_invalid_format_is_terminal(self):
        terminal = [code for code in ParseErrorCode if code.is_terminal]
        assert terminal == [ParseErrorCode.INVALID_FORMAT]


# =============================================================================
# Value Object Tests
# =============================================================================


class TestStackFrame:
    """Tests for StackFrame value object."""

    def test_str_with_function(self):
        frame = StackFrame(file="src/app.js", line=10, column=5, function="handle")
        assert str(frame) == "handle (src/app.js:10:5)"

    def test_str_without_function(self):
        assert str(StackFrame(file="main.py", line=3)) == "main.py:3"

    def test_to_dict_omits_missing_fields(self):
        assert StackFrame(file="main.py", line=3).to_dict() == {"file": "main.py", "line": 3}

    def test_is_immutable(self):
        frame = StackFrame(file="main.py", line=3)
        with pytest.raises(FrozenInstanceError):
            frame.line = 4


class TestGivenWhenThenScenario:
    """Tests for GivenWhenThenScenario value object."""

    def test_is_empty(self):
        assert GivenWhenThenScenario().is_empty()
        assert not GivenWhenThenScenario(given="a user").is_empty()

    def test_to_dict(self):
        scenario = GivenWhenThenScenario(given="a", when="b", then="c")
        assert scenario.to_dict() == {"given": "a", "when": "b", "then": "c"}


class TestValidationResult:
    """Tests for ValidationResult value object."""

    def test_valid_without_errors(self):
        warning = ValidationIssue(field="f", message="m", code="W")
        assert ValidationResult(warnings=(warning,)).valid

    def test_invalid_with_errors(self):
        error = ValidationIssue(field="f", message="m", code="E")
        assert not ValidationResult(errors=(error,)).valid

    def test_to_dict(self):
        error = ValidationIssue(field="type", message="bad", code="INVALID_TYPE")
        data = ValidationResult(errors=(error,)).to_dict()
        assert data == {
            "valid": False,
            "errors": [{"field": "type", "message": "bad", "code": "INVALID_TYPE"}],
            "warnings": [],
        }

    def test_issue_str(self):
        issue = ValidationIssue(field="type", message="bad", code="INVALID_TYPE")
        assert str(issue) == "[INVALID_TYPE] type: bad"


# =============================================================================
# ParseError Tests
# =============================================================================


class TestParseError:
    """Tests for ParseError."""

    def test_str(self):
        error = ParseError(code=ParseErrorCode.AST_ERROR, message="broken")
        assert str(error) == "AST_ERROR: broken"

    def test_str_with_section(self):
        error = ParseError(code=ParseErrorCode.PARSE_ERROR, message="bad", section="Type")
        assert str(error) == "PARSE_ERROR [Type]: bad"

    def test_with_section_keeps_original_as_cause(self):
        original = ParseError(code=ParseErrorCode.AST_ERROR, message="broken")
        wrapped = original.with_section("Context")

        assert wrapped.section == "Context"
        assert wrapped.code == ParseErrorCode.AST_ERROR
        assert wrapped.cause is original

    def test_to_dict_nested_cause(self):
        original = ParseError(code=ParseErrorCode.AST_ERROR, message="broken")
        data = original.with_section("Context").to_dict()
        assert data["section"] == "Context"
        assert data["cause"] == {"code": "AST_ERROR", "message": "broken"}

    def test_to_dict_exception_cause(self):
        error = ParseError(
            code=ParseErrorCode.AST_ERROR, message="broken", cause=RuntimeError("boom")
        )
        assert error.to_dict()["cause"] == "RuntimeError: boom"


# =============================================================================
# Entity Tests
# =============================================================================


class TestParsedIssue:
    """Tests for ParsedIssue entity."""

    @pytest.fixture
    def issue(self):
        return ParsedIssue(
            source=IssueSource.SENTRY,
            type=IssueType.BUG,
            problem_description="The checkout page crashes on submit",
            context=IssueContext(
                priority=IssuePriority.HIGH,
                related_files=("src/checkout.ts",),
                related_symbols=("submitOrder",),
                component="checkout",
            ),
            code_analysis=CodeAnalysis(
                file_path="src/checkout.ts",
                start_line=10,
                end_line=20,
                stack_trace=(StackFrame(file="src/checkout.ts", line=12),),
                error_type="TypeError",
            ),
            suggested_fix=SuggestedFix(description="Guard null", steps=("Add check",), confidence=0.8),
            acceptance_criteria=(AcceptanceCriterion(description="No crash", completed=True),),
            raw_sections={"body": "# Issue"},
            source_id="PROJ-1",
        )

    def test_defaults(self):
        issue = ParsedIssue(
            source=IssueSource.MANUAL, type=IssueType.CHORE, problem_description="Tidy up"
        )
        assert issue.context == IssueContext()
        assert issue.context.priority == IssuePriority.MEDIUM
        assert issue.code_analysis is None
        assert issue.suggested_fix is None
        assert issue.acceptance_criteria == ()
        assert dict(issue.raw_sections) == {}

    def test_raw_sections_are_read_only(self, issue):
        with pytest.raises(TypeError):
            issue.raw_sections["body"] = "changed"

    def test_raw_sections_copied_from_input(self):
        raw = {"body": "text"}
        issue = ParsedIssue(
            source=IssueSource.MANUAL,
            type=IssueType.CHORE,
            problem_description="Tidy up",
            raw_sections=raw,
        )
        raw["body"] = "changed"
        assert issue.raw_sections["body"] == "text"

    def test_is_immutable(self, issue):
        with pytest.raises(FrozenInstanceError):
            issue.problem_description = "changed"

    def test_to_dict_uses_camel_case(self, issue):
        data = issue.to_dict()

        assert data["source"] == "sentry"
        assert data["type"] == "bug"
        assert data["problemDescription"] == "The checkout page crashes on submit"
        assert data["sourceId"] == "PROJ-1"
        assert data["context"]["relatedFiles"] == ["src/checkout.ts"]
        assert data["context"]["component"] == "checkout"
        assert data["codeAnalysis"]["filePath"] == "src/checkout.ts"
        assert data["codeAnalysis"]["startLine"] == 10
        assert data["codeAnalysis"]["stackTrace"] == [{"file": "src/checkout.ts", "line": 12}]
        assert data["suggestedFix"]["confidence"] == 0.8
        assert data["acceptanceCriteria"] == [{"description": "No crash", "completed": True}]
        assert data["rawSections"] == {"body": "# Issue"}

    def test_to_dict_omits_absent_parts(self):
        issue = ParsedIssue(
            source=IssueSource.MANUAL, type=IssueType.CHORE, problem_description="Tidy up"
        )
        data = issue.to_dict()
        assert "codeAnalysis" not in data
        assert "suggestedFix" not in data
        assert "sourceId" not in data

    def test_code_analysis_to_dict_skips_none(self):
        assert CodeAnalysis(file_path="a.py").to_dict() == {"filePath": "a.py"}

    def test_criterion_to_dict_with_scenario(self):
        criterion = AcceptanceCriterion(
            description="d", scenario=GivenWhenThenScenario(given="g", when="w", then="t")
        )
        assert criterion.to_dict()["scenario"] == {"given": "g", "when": "w", "then": "t"}
