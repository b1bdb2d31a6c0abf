"""
Tests for the suggested fix parser.
"""

import pytest

from issue_parser.adapters.parsers import (
    calculate_confidence,
    is_valid_suggested_fix,
    parse_suggested_fix,
    parse_suggested_fix_from_text,
)
from issue_parser.adapters.parsers.suggested_fix_parser import (
    DEFAULT_CONFIDENCE,
    clean_description,
    extract_steps_from_text,
)
from issue_parser.core.domain import SuggestedFix


class TestCalculateConfidence:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("Maybe we should restart it", 0.3),
            ("We must definitely add a check", 0.95),
            ("This should work", 0.8),
            ("We could cache it", 0.6),
            ("Add a null check", DEFAULT_CONFIDENCE),
            ("trying things", DEFAULT_CONFIDENCE),
        ],
    )
    def test_tiers(self, text, expected):
        assert calculate_confidence(text) == expected


class TestStepsFromText:
    def test_bullets(self):
        assert extract_steps_from_text("- a step\n- b step") == ["a step", "b step"]

    def test_numbered_before_bullets(self):
        assert extract_steps_from_text("- note\n1. first\n2. second") == ["first", "second"]

    def test_sentences(self):
        assert extract_steps_from_text("Do the first thing now. Then ok.") == [
            "Do the first thing now."
        ]

    def test_whole_text(self):
        assert extract_steps_from_text("short") == ["short"]
        assert extract_steps_from_text("  ") == []

    def test_clean_description(self):
        assert clean_description("1. one\n  - two") == "one two"


class TestParseSuggestedFix:
    def test_prose_and_steps(self, ast, complete_issue):
        fix = parse_suggested_fix(ast(complete_issue)).unwrap()
        assert fix.description.startswith("The issue is that jwt.decode can return null")
        assert fix.steps == (
            "Add null check after decoding token",
            "Return false or throw specific error for invalid tokens",
            "Add logging for debugging",
            "Update unit tests",
        )
        assert fix.confidence == 0.8

    def test_list_only_uses_first_step_as_description(self, ast, asana_issue):
        fix = parse_suggested_fix(ast(asana_issue)).unwrap()
        assert fix.description == "Create theme context"
        assert len(fix.steps) == 3
        assert fix.confidence == DEFAULT_CONFIDENCE

    def test_direction_synonym(self, ast, refactor_issue):
        fix = parse_suggested_fix(ast(refactor_issue)).unwrap()
        assert fix.description == "Should split into:"
        assert fix.steps[0] == "Base HTTP client"
        assert len(fix.steps) == 4
        assert fix.confidence == 0.8

    def test_prose_with_code(self, ast, code_blocks_issue):
        fix = parse_suggested_fix(ast(code_blocks_issue)).unwrap()
        assert fix.description.startswith("Add proper cleanup in the destroy method:")
        assert fix.steps

    def test_missing_section(self, ast, minimal_issue):
        assert parse_suggested_fix(ast(minimal_issue)).unwrap() is None

    def test_empty_section(self, ast):
        root = ast("## Suggested Fix\n\n## Acceptance Criteria\n\n- [ ] works\n")
        assert parse_suggested_fix(root).unwrap() is None

    def test_invalid_ast(self):
        assert parse_suggested_fix(None).unwrap_err().section == "Suggested Fix"


class TestFromText:
    def test_numbered_block(self, asana_issue):
        fix = parse_suggested_fix_from_text(asana_issue)
        assert fix.description == "Create theme context"
        assert len(fix.steps) == 3

    def test_prose_block(self):
        fix = parse_suggested_fix_from_text("## Fix\n\nWe might retry the request later.\n")
        assert fix.description == "We might retry the request later."
        assert fix.confidence == 0.6

    def test_no_section(self):
        assert parse_suggested_fix_from_text("no fix here") is None


class TestIsValidSuggestedFix:
    def test_valid(self):
        assert is_valid_suggested_fix(SuggestedFix("Add check", ("one",), 0.5))

    @pytest.mark.parametrize(
        "fix",
        [
            None,
            SuggestedFix("", ("one",)),
            SuggestedFix("Add check", ()),
            SuggestedFix("Add check", ("one",), 1.5),
        ],
    )
    def test_invalid(self, fix):
        assert not is_valid_suggested_fix(fix)
