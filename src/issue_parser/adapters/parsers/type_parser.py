"""
Type Parser - Classify an issue as bug, feature, refactor, docs, test, or chore.

Classification runs in two phases:

1. An ordered list of explicit patterns (exact value, ``type: x`` label,
   ``[x]`` tag). The first pattern that matches wins.
2. Otherwise a keyword-frequency scorer counts whole-word hits of each type's
   keyword set. The strictly highest score wins; ties go to the earlier type
   in ``TYPE_PRECEDENCE``. All-zero scores yield ``chore``.
"""

from __future__ import annotations

import re

from markdown_it.tree import SyntaxTreeNode

from issue_parser.adapters.markdown import (
    SectionName,
    document_text,
    find_section,
    get_section_text,
)
from issue_parser.core.domain.enums import TYPE_PRECEDENCE, IssueType
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.result import Ok, Result


DEFAULT_TYPE = IssueType.CHORE

# (pattern, type); evaluated top to bottom, first match wins.
TYPE_PATTERNS: tuple[tuple[re.Pattern[str], IssueType], ...] = (
    # Exact value, the whole text
    (re.compile(r"^bug$", re.I), IssueType.BUG),
    (re.compile(r"^feature$", re.I), IssueType.FEATURE),
    (re.compile(r"^refactor(?:ing)?$", re.I), IssueType.REFACTOR),
    (re.compile(r"^docs?$", re.I), IssueType.DOCS),
    (re.compile(r"^documentation$", re.I), IssueType.DOCS),
    (re.compile(r"^tests?$", re.I), IssueType.TEST),
    (re.compile(r"^chore$", re.I), IssueType.CHORE),
    # Label style
    (re.compile(r"\btype:\s*bug\b", re.I), IssueType.BUG),
    (re.compile(r"\btype:\s*feature\b", re.I), IssueType.FEATURE),
    (re.compile(r"\btype:\s*refactor\b", re.I), IssueType.REFACTOR),
    (re.compile(r"\btype:\s*docs?\b", re.I), IssueType.DOCS),
    (re.compile(r"\btype:\s*tests?\b", re.I), IssueType.TEST),
    (re.compile(r"\btype:\s*chore\b", re.I), IssueType.CHORE),
    # Bracketed tags
    (re.compile(r"\[bug\]", re.I), IssueType.BUG),
    (re.compile(r"\[feature\]", re.I), IssueType.FEATURE),
    (re.compile(r"\[refactor\]", re.I), IssueType.REFACTOR),
    (re.compile(r"\[docs?\]", re.I), IssueType.DOCS),
    (re.compile(r"\[tests?\]", re.I), IssueType.TEST),
    (re.compile(r"\[chore\]", re.I), IssueType.CHORE),
)

TYPE_KEYWORDS: dict[IssueType, tuple[str, ...]] = {
    IssueType.BUG: (
        "bug",
        "error",
        "crash",
        "fail",
        "broken",
        "fix",
        "issue",
        "problem",
        "exception",
    ),
    IssueType.FEATURE: ("feature", "new", "add", "implement", "enhance", "request", "support"),
    IssueType.REFACTOR: (
        "refactor",
        "cleanup",
        "restructure",
        "reorganize",
        "improve",
        "optimize",
    ),
    IssueType.DOCS: ("docs", "documentation", "readme", "comment", "jsdoc", "guide", "tutorial"),
    IssueType.TEST: ("test", "spec", "coverage", "assertion", "mock", "stub"),
    IssueType.CHORE: ("chore", "dependency", "upgrade", "maintenance", "ci", "build", "config"),
}

_KEYWORD_PATTERNS: dict[IssueType, tuple[re.Pattern[str], ...]] = {
    issue_type: tuple(re.compile(rf"\b{re.escape(word)}\b", re.I) for word in words)
    for issue_type, words in TYPE_KEYWORDS.items()
}


def is_valid_issue_type(value: object) -> bool:
    """Whether ``value`` is an IssueType or one of its string values."""
    if isinstance(value, IssueType):
        return True
    return isinstance(value, str) and value in {t.value for t in IssueType}


def match_type_pattern(text: str) -> IssueType | None:
    """Phase one: first explicit pattern that matches, if any."""
    trimmed = text.strip()
    for pattern, issue_type in TYPE_PATTERNS:
        if pattern.search(trimmed):
            return issue_type
    return None


def score_type_keywords(text: str) -> dict[IssueType, int]:
    """Phase two: whole-word keyword hit counts per type."""
    return {
        issue_type: sum(len(p.findall(text)) for p in patterns)
        for issue_type, patterns in _KEYWORD_PATTERNS.items()
    }


def detect_type(text: str) -> IssueType:
    """Classify free text using both phases."""
    explicit = match_type_pattern(text)
    if explicit is not None:
        return explicit

    scores = score_type_keywords(text)
    best, best_score = DEFAULT_TYPE, 0
    for issue_type in TYPE_PRECEDENCE:
        if scores[issue_type] > best_score:
            best, best_score = issue_type, scores[issue_type]
    return best


def parse_type(ast: SyntaxTreeNode) -> Result[IssueType, ParseError]:
    """
    Parse the issue type from a document.

    Uses the "Type" section when present and non-empty, else the whole
    document text.
    """
    found = find_section(ast, SectionName.TYPE).map_err(lambda e: e.with_section(SectionName.TYPE))
    if found.is_err():
        return found

    section = found.unwrap()
    if section is not None:
        section_text = get_section_text(section)
        if section_text:
            return Ok(detect_type(section_text))

    return Ok(detect_type(document_text(ast)))


def parse_type_from_text(text: str) -> IssueType:
    """Parse the type from raw text, preferring a ``## Type`` block."""
    match = re.search(r"^#{1,6}\s*Type\s*:?\s*\n([\s\S]*?)(?=^#{1,6}\s|\Z)", text, re.I | re.M)
    if match and match.group(1).strip():
        return detect_type(match.group(1))
    return detect_type(text)
