"""
Suggested Fix Parser - Fix description, ordered steps, and confidence.

Confidence comes from a fixed cue-word lexicon, not from any statistical
model. Uncertainty cues are checked first so that hedged proposals never
score high.
"""

from __future__ import annotations

import re

from markdown_it.tree import SyntaxTreeNode

from issue_parser.adapters.markdown import (
    SectionName,
    extract_list_items,
    find_section,
    get_section_text,
    is_list,
    nodes_text,
)
from issue_parser.core.domain.entities import SuggestedFix
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.result import Ok, Result


DEFAULT_CONFIDENCE = 0.5

# (cue words, confidence); the first tier with a whole-word hit decides.
CONFIDENCE_LEXICON: tuple[tuple[tuple[str, ...], float], ...] = (
    (
        ("maybe", "perhaps", "unclear", "unsure", "unknown", "guess", "try", "investigate"),
        0.3,
    ),
    (("certain", "certainly", "definitely", "must", "always", "exactly", "clearly"), 0.95),
    (("should", "likely", "probably", "recommend", "recommended"), 0.8),
    (("might", "could", "possibly", "consider"), 0.6),
)

_TIER_PATTERNS = tuple(
    (re.compile(r"\b(?:" + "|".join(map(re.escape, words)) + r")\b", re.I), confidence)
    for words, confidence in CONFIDENCE_LEXICON
)

_LIST_MARKER = re.compile(r"^\s*(?:\d+[.)]|[-*+])\s+", re.M)
_NUMBERED_LINE = re.compile(r"^\s*\d+[.)]\s+(.+)$", re.M)
_BULLET_LINE = re.compile(r"^\s*[-*+]\s+(.+)$", re.M)
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")


def calculate_confidence(text: str) -> float:
    """Confidence in [0, 1] from cue words, 0.5 when there are none."""
    for pattern, confidence in _TIER_PATTERNS:
        if pattern.search(text):
            return confidence
    return DEFAULT_CONFIDENCE


def clean_description(text: str) -> str:
    """Strip list markers and collapse whitespace."""
    return " ".join(_LIST_MARKER.sub("", text).split())


def extract_steps_from_text(text: str) -> list[str]:
    """
    Steps from plain text.

    Numbered lines first, then bullet lines, then sentences longer than ten
    characters, then the whole text as a single step.
    """
    for pattern in (_NUMBERED_LINE, _BULLET_LINE):
        steps = [m.group(1).strip() for m in pattern.finditer(text) if m.group(1).strip()]
        if steps:
            return steps

    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(" ".join(text.split()))]
    steps = [s for s in sentences if len(s) > 10]
    if steps:
        return steps

    stripped = text.strip()
    return [stripped] if stripped else []


def parse_suggested_fix(ast: SyntaxTreeNode) -> Result[SuggestedFix | None, ParseError]:
    """
    Parse the suggested fix.

    The description is the prose before the first list in the section (the
    whole section when it has no list) and the steps are the items of that
    first list.

    Returns:
        Ok(SuggestedFix), Ok(None) when the section is missing or empty, or
        Err when the AST is unusable.
    """
    found = find_section(ast, SectionName.SUGGESTED_FIX).map_err(
        lambda e: e.with_section(SectionName.SUGGESTED_FIX)
    )
    if found.is_err():
        return found

    section = found.unwrap()
    if section is None:
        return Ok(None)
    section_text = get_section_text(section)
    if not section_text:
        return Ok(None)

    content = list(section.content)
    list_index = next((i for i, node in enumerate(content) if is_list(node)), None)

    if list_index is None:
        description = clean_description(section_text)
        steps = extract_steps_from_text(section_text)
    else:
        description = clean_description(nodes_text(content[:list_index]))
        steps = extract_list_items([content[list_index]])
        if not description and steps:
            description = clean_description(steps[0])

    return Ok(
        SuggestedFix(
            description=description,
            steps=tuple(steps),
            confidence=calculate_confidence(section_text),
        )
    )


def parse_suggested_fix_from_text(text: str) -> SuggestedFix | None:
    """Parse a suggested fix from raw text, or None without a fix section."""
    match = re.search(
        r"^#{1,6}\s*(?:Suggested Fix(?: Direction)?|Fix|Solution)\s*:?\s*\n([\s\S]*?)(?=^#{1,2}\s|\Z)",
        text,
        re.I | re.M,
    )
    if not match or not match.group(1).strip():
        return None

    block = match.group(1).strip()
    first_list = re.search(r"^\s*(?:\d+[.)]|[-*+])\s+", block, re.M)
    prose = block[: first_list.start()] if first_list else block
    steps = extract_steps_from_text(block)
    description = clean_description(prose) or (clean_description(steps[0]) if steps else "")

    return SuggestedFix(
        description=description,
        steps=tuple(steps),
        confidence=calculate_confidence(block),
    )


def is_valid_suggested_fix(fix: SuggestedFix | None) -> bool:
    """A fix is usable when it has a description, steps, and a sane confidence."""
    if fix is None:
        return False
    return bool(fix.description.strip()) and len(fix.steps) > 0 and 0.0 <= fix.confidence <= 1.0
