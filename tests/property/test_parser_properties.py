"""
Property-based tests for the issue parser.

Tests invariants for:
- Pipeline robustness on arbitrary input
- Keyword classification of issue types
- Confidence validation
- Record immutability
- Unstructured description truncation
"""

import dataclasses

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from issue_parser.adapters.parsers.problem_parser import (
    MAX_UNSTRUCTURED_LENGTH,
    parse_problem_from_text,
)
from issue_parser.adapters.parsers.type_parser import TYPE_KEYWORDS, detect_type
from issue_parser.application.parsing import parse_issue_body
from issue_parser.core.domain.entities import ParsedIssue, SuggestedFix
from issue_parser.core.domain.enums import IssueSource, IssueType
from issue_parser.core.validation import validate_parsed_issue


# =============================================================================
# Strategies for Generating Test Data
# =============================================================================

# Words that are not type keywords
FILLER_WORDS = ["the", "page", "user", "when", "login", "button", "mobile", "after", "slow"]

filler_strategy = st.lists(st.sampled_from(FILLER_WORDS), min_size=1, max_size=8)

keyword_strategy = st.sampled_from(list(IssueType)).flatmap(
    lambda issue_type: st.tuples(st.just(issue_type), st.sampled_from(TYPE_KEYWORDS[issue_type]))
)

markdown_fragment_strategy = st.sampled_from(
    [
        "## Source\n\nSentry\n",
        "## Type\n\n",
        "## Problem Description\n\n",
        "## Code Analysis\n\n```\n",
        "    at foo (src/a.ts:1:2)\n",
        "- [ ] ",
        "- [x] ",
        "GIVEN ",
        "1. ",
        "**Priority:** ",
        "```\n",
        "\n",
    ]
)

body_strategy = st.lists(
    st.one_of(markdown_fragment_strategy, st.text(max_size=40)), max_size=15
).map("".join)

out_of_range_strategy = st.one_of(
    st.floats(max_value=-0.001, allow_nan=False),
    st.floats(min_value=1.001, allow_nan=False),
)


def make_issue(**kwargs) -> ParsedIssue:
    defaults = {
        "source": IssueSource.MANUAL,
        "type": IssueType.BUG,
        "problem_description": "Something is wrong",
    }
    return ParsedIssue(**{**defaults, **kwargs})


# =============================================================================
# Pipeline Properties
# =============================================================================


class TestPipelineProperties:
    """Property tests for the parse pipeline."""

    @given(body=body_strategy)
    @settings(max_examples=50)
    def test_default_parse_always_succeeds(self, body):
        """With recovery enabled, any input yields an issue."""
        result = parse_issue_body(body)

        assert result.is_ok()
        parsed = result.unwrap()
        assert parsed.issue.raw_sections["body"] == body

    @given(body=body_strategy)
    @settings(max_examples=50)
    def test_validation_matches_issue(self, body):
        """The attached validation is exactly what validating the issue gives."""
        parsed = parse_issue_body(body).unwrap()
        assert parsed.validation == validate_parsed_issue(parsed.issue)


# =============================================================================
# Type Classification Properties
# =============================================================================


class TestTypeProperties:
    """Property tests for keyword classification."""

    @given(keyword=keyword_strategy, filler=filler_strategy)
    @settings(max_examples=50)
    def test_single_keyword_decides_type(self, keyword, filler):
        issue_type, word = keyword
        text = " ".join([*filler, word])
        assert detect_type(text) == issue_type

    @given(filler=filler_strategy)
    @settings(max_examples=50)
    def test_no_keywords_is_chore(self, filler):
        assert detect_type(" ".join(filler)) == IssueType.CHORE


# =============================================================================
# Validation Properties
# =============================================================================


class TestConfidenceProperties:
    """Property tests for suggested fix confidence."""

    @given(confidence=out_of_range_strategy)
    @settings(max_examples=50)
    def test_out_of_range_is_error(self, confidence):
        issue = make_issue(
            suggested_fix=SuggestedFix("Fix it", steps=("step",), confidence=confidence)
        )
        result = validate_parsed_issue(issue)

        assert not result.valid
        assert "INVALID_CONFIDENCE" in [e.code for e in result.errors]

    @given(confidence=st.floats(min_value=0.0, max_value=1.0))
    @settings(max_examples=50)
    def test_in_range_is_accepted(self, confidence):
        issue = make_issue(
            suggested_fix=SuggestedFix("Fix it", steps=("step",), confidence=confidence)
        )
        assert "INVALID_CONFIDENCE" not in [e.code for e in validate_parsed_issue(issue).errors]

    def test_nan_is_error(self):
        issue = make_issue(suggested_fix=SuggestedFix("Fix it", confidence=float("nan")))
        assert "INVALID_CONFIDENCE" in [e.code for e in validate_parsed_issue(issue).errors]


# =============================================================================
# Immutability Properties
# =============================================================================


class TestImmutabilityProperties:
    @given(body=body_strategy)
    @settings(max_examples=25)
    def test_parsed_issue_is_frozen(self, body):
        issue = parse_issue_body(body).unwrap().issue

        with pytest.raises(dataclasses.FrozenInstanceError):
            issue.problem_description = "changed"
        with pytest.raises(TypeError):
            issue.raw_sections["body"] = "changed"


# =============================================================================
# Description Properties
# =============================================================================


class TestDescriptionProperties:
    @given(
        text=st.text(
            alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz.,"),
            min_size=1000,
            max_size=1000,
        )
    )
    @settings(max_examples=25)
    def test_unstructured_text_is_truncated(self, text):
        assert parse_problem_from_text(text) == text[:MAX_UNSTRUCTURED_LENGTH]
