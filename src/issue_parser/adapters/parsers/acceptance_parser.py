"""
Acceptance Criteria Parser - Checkbox items and GIVEN/WHEN/THEN scenarios.

List items become criteria, with ``[ ]`` / ``[x]`` checkboxes setting
``completed``. GIVEN/WHEN/THEN paragraphs outside lists are appended after
the list criteria. Output is capped at ``MAX_CRITERIA``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from markdown_it.tree import SyntaxTreeNode

from issue_parser.adapters.markdown import (
    SectionName,
    extract_list_items,
    extract_text,
    find_section,
    get_section_text,
    is_list,
)
from issue_parser.core.domain.entities import AcceptanceCriterion
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.domain.value_objects import GivenWhenThenScenario
from issue_parser.core.result import Ok, Result


MAX_CRITERIA = 10

GWT_KEYWORD = re.compile(r"\b(GIVEN|WHEN|THEN)\b", re.I)
CHECKBOX_ITEM = re.compile(r"^\s*\[([ xX])\]\s*(.+)$", re.S)

CHECKBOX_LINE = re.compile(r"^\s*[-*+]\s*\[([ xX])\]\s*(.+)$", re.M)
NUMBERED_LINE = re.compile(r"^\s*\d+[.)]\s+(.+)$", re.M)
BULLET_LINE = re.compile(r"^\s*[-*+]\s+(.+)$", re.M)
GWT_LINE = re.compile(r"^\s*(GIVEN|WHEN|THEN|AND)\b[:\s]*(.*)$", re.I)
_GWT_BLOCK_SPLIT = re.compile(r"(?=\bGIVEN\b)", re.I)


def match_inline_scenario(text: str) -> GivenWhenThenScenario | None:
    """
    Inline ``GIVEN ... WHEN ... THEN ...`` scenario, or None.

    Clauses run from the first GIVEN to the next WHEN, from there to the
    next THEN, and from there to the end of the text. Keyword positions are
    found in a single pass.
    """
    given = when = None
    for match in GWT_KEYWORD.finditer(text):
        keyword = match.group(1).upper()
        if given is None:
            if keyword == "GIVEN":
                given = match
        elif when is None:
            if keyword == "WHEN":
                when = match
        elif keyword == "THEN":
            clauses = [
                " ".join(part.split())
                for part in (
                    text[given.end() : when.start()],
                    text[when.end() : match.start()],
                    text[match.end() :],
                )
            ]
            if not all(clauses):
                return None
            return GivenWhenThenScenario(*clauses)
    return None


def split_scenario_blocks(text: str) -> list[str]:
    """Split text in front of every GIVEN, dropping blank pieces."""
    return [block for block in _GWT_BLOCK_SPLIT.split(text) if block.strip()]


def parse_given_when_then(text: str) -> GivenWhenThenScenario | None:
    """
    Scenario from inline or line-oriented GIVEN/WHEN/THEN text.

    The inline form needs all three keywords. The line form accepts
    ``Given:``/``When:``/``Then:`` lines in any subset, with ``And`` lines
    appended to the clause above them.
    """
    scenario = match_inline_scenario(text)
    if scenario is not None:
        return scenario

    clauses = {"given": "", "when": "", "then": ""}
    current = None
    for line in text.splitlines():
        line_match = GWT_LINE.match(line)
        if not line_match:
            continue
        keyword, rest = line_match.group(1).lower(), line_match.group(2).strip()
        if keyword == "and":
            if current and rest:
                clauses[current] = f"{clauses[current]} and {rest}".strip()
            continue
        current = keyword
        clauses[current] = rest

    scenario = GivenWhenThenScenario(**clauses)
    return None if scenario.is_empty() else scenario


def parse_criterion(text: str) -> AcceptanceCriterion:
    """Criterion from a single list item's text."""
    checkbox = CHECKBOX_ITEM.match(text)
    if checkbox:
        description = checkbox.group(2).strip()
        return AcceptanceCriterion(
            description=description,
            completed=checkbox.group(1).lower() == "x",
            scenario=parse_given_when_then(description),
        )
    description = text.strip()
    return AcceptanceCriterion(description=description, scenario=parse_given_when_then(description))


def _dedupe(criteria: Iterable[AcceptanceCriterion]) -> tuple[AcceptanceCriterion, ...]:
    seen: set[str] = set()
    unique = []
    for criterion in criteria:
        if criterion.description and criterion.description not in seen:
            seen.add(criterion.description)
            unique.append(criterion)
    return tuple(unique[:MAX_CRITERIA])


def extract_criteria_from_text(text: str) -> tuple[AcceptanceCriterion, ...]:
    """
    Criteria from plain text.

    Tries checkbox lines, numbered lines, bullet lines, GIVEN blocks, and
    finally every line longer than ten characters; the first format that
    yields anything is used.
    """
    checkboxes = [
        AcceptanceCriterion(
            description=m.group(2).strip(),
            completed=m.group(1).lower() == "x",
            scenario=parse_given_when_then(m.group(2)),
        )
        for m in CHECKBOX_LINE.finditer(text)
    ]
    if checkboxes:
        return _dedupe(checkboxes)

    for pattern in (NUMBERED_LINE, BULLET_LINE):
        items = [parse_criterion(m.group(1)) for m in pattern.finditer(text)]
        if items:
            return _dedupe(items)

    scenarios = []
    for block in split_scenario_blocks(text):
        scenario = parse_given_when_then(block)
        if scenario is not None:
            scenarios.append(
                AcceptanceCriterion(description=" ".join(block.split()), scenario=scenario)
            )
    if scenarios:
        return _dedupe(scenarios)

    lines = (line.strip() for line in text.splitlines())
    return _dedupe(
        AcceptanceCriterion(description=line, scenario=parse_given_when_then(line))
        for line in lines
        if len(line) > 10
    )


def parse_acceptance_criteria(
    ast: SyntaxTreeNode,
) -> Result[tuple[AcceptanceCriterion, ...], ParseError]:
    """
    Parse acceptance criteria.

    Returns:
        Ok(criteria), empty when the section is missing or empty, or Err
        when the AST is unusable.
    """
    found = find_section(ast, SectionName.ACCEPTANCE_CRITERIA).map_err(
        lambda e: e.with_section(SectionName.ACCEPTANCE_CRITERIA)
    )
    if found.is_err():
        return found

    section = found.unwrap()
    if section is None:
        return Ok(())
    section_text = get_section_text(section)
    if not section_text:
        return Ok(())

    criteria = [parse_criterion(item) for item in extract_list_items(section.content)]
    for node in section.content:
        if is_list(node):
            continue
        for block in split_scenario_blocks(extract_text(node)):
            scenario = match_inline_scenario(block)
            if scenario is not None:
                criteria.append(
                    AcceptanceCriterion(description=" ".join(block.split()), scenario=scenario)
                )

    if criteria:
        return Ok(_dedupe(criteria))
    return Ok(extract_criteria_from_text(section_text))


def parse_acceptance_criteria_from_text(text: str) -> tuple[AcceptanceCriterion, ...]:
    """Parse criteria from raw text, preferring an acceptance/done criteria block."""
    match = re.search(
        r"^#{1,6}\s*(?:Acceptance Criteria|Done Criteria|Criteria)\s*:?\s*\n([\s\S]*?)(?=^#{1,2}\s|\Z)",
        text,
        re.I | re.M,
    )
    if match and match.group(1).strip():
        return extract_criteria_from_text(match.group(1))
    return extract_criteria_from_text(text)


def are_all_criteria_completed(criteria: Iterable[AcceptanceCriterion]) -> bool:
    """True when there is at least one criterion and all are checked."""
    criteria = list(criteria)
    return bool(criteria) and all(c.completed for c in criteria)


def count_criteria(criteria: Iterable[AcceptanceCriterion]) -> dict[str, int]:
    """``{"completed": n, "total": m}``."""
    criteria = list(criteria)
    return {"completed": sum(1 for c in criteria if c.completed), "total": len(criteria)}


def format_scenario(scenario: GivenWhenThenScenario) -> str:
    """Render a scenario as GIVEN/WHEN/THEN lines, skipping empty clauses."""
    parts = []
    if scenario.given:
        parts.append(f"GIVEN {scenario.given}")
    if scenario.when:
        parts.append(f"WHEN {scenario.when}")
    if scenario.then:
        parts.append(f"THEN {scenario.then}")
    return "\n".join(parts)
