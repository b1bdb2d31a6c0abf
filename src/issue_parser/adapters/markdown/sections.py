"""
Section Locator - Find headed sections in a Markdown document.

A section is a top-level heading plus every following node up to, but not
including, the next heading whose level is less than or equal to its own.
Headings are matched case-insensitively against a canonical name and its
registered synonyms, all kept in ``SECTION_SYNONYMS``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from markdown_it.tree import SyntaxTreeNode

from issue_parser.core.domain.enums import ParseErrorCode
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.result import Err, Ok, Result

from .ast import extract_text, heading_level, is_heading, is_root, nodes_text


class SectionName:
    """Canonical section names."""

    SOURCE = "Source"
    TYPE = "Type"
    CONTEXT = "Context"
    PROBLEM_DESCRIPTION = "Problem Description"
    CODE_ANALYSIS = "Code Analysis"
    STACK_TRACE = "Stack Trace"
    ERROR_MESSAGE = "Error Message"
    SUGGESTED_FIX = "Suggested Fix"
    ACCEPTANCE_CRITERIA = "Acceptance Criteria"
    RELATED_FILES = "Related Files"
    RELATED_SYMBOLS = "Related Symbols"


# Canonical name -> accepted heading texts, tried in order.
SECTION_SYNONYMS: dict[str, tuple[str, ...]] = {
    SectionName.SOURCE: ("Source",),
    SectionName.TYPE: ("Type",),
    SectionName.CONTEXT: ("Context",),
    SectionName.PROBLEM_DESCRIPTION: ("Problem Description", "Description"),
    SectionName.CODE_ANALYSIS: ("Code Analysis", "Stack Trace", "Error Message"),
    SectionName.STACK_TRACE: ("Stack Trace",),
    SectionName.ERROR_MESSAGE: ("Error Message",),
    SectionName.SUGGESTED_FIX: ("Suggested Fix", "Suggested Fix Direction", "Fix", "Solution"),
    SectionName.ACCEPTANCE_CRITERIA: ("Acceptance Criteria", "Done Criteria"),
    SectionName.RELATED_FILES: ("Related Files",),
    SectionName.RELATED_SYMBOLS: ("Related Symbols",),
}


def normalize_heading(text: str) -> str:
    """Case-fold, trim, collapse whitespace, and drop a trailing colon."""
    return " ".join(text.split()).rstrip(":").strip().casefold()


KNOWN_SECTION_NAMES: frozenset[str] = frozenset(
    normalize_heading(name) for names in SECTION_SYNONYMS.values() for name in names
)


@dataclass(frozen=True)
class Section:
    """
    A located section.

    Attributes:
        name: Canonical name it was looked up by.
        title: Heading text as written in the document.
        level: Heading depth, 1-6.
        heading: The heading node.
        content: Nodes between this heading and the section boundary.
    """

    name: str
    title: str
    level: int
    heading: SyntaxTreeNode
    content: tuple[SyntaxTreeNode, ...]


def is_known_section_heading(node: SyntaxTreeNode) -> bool:
    """Whether a heading's text is a canonical name or synonym."""
    return is_heading(node) and normalize_heading(extract_text(node)) in KNOWN_SECTION_NAMES


def _build_section(name: str, siblings: list[SyntaxTreeNode], index: int) -> Section:
    heading = siblings[index]
    level = heading_level(heading)
    content: list[SyntaxTreeNode] = []
    for node in siblings[index + 1 :]:
        if is_heading(node) and heading_level(node) <= level:
            break
        content.append(node)
    return Section(
        name=name,
        title=extract_text(heading).strip(),
        level=level,
        heading=heading,
        content=tuple(content),
    )


def _not_a_document(section: str) -> Err:
    return Err(
        ParseError(
            code=ParseErrorCode.AST_ERROR,
            message="Expected a Markdown document root node",
            section=section,
        )
    )


def find_section(ast: SyntaxTreeNode, canonical_name: str) -> Result[Section | None, ParseError]:
    """
    Locate a section by canonical name or synonym.

    Synonyms are tried in registration order, so a document containing both
    "Code Analysis" and "Stack Trace" resolves "Code Analysis" to the former.
    Names missing from the synonym table match only themselves.

    Args:
        ast: Document root node.
        canonical_name: Name to look up, e.g. ``SectionName.SUGGESTED_FIX``.

    Returns:
        Ok(Section), Ok(None) when no heading matches, or Err(AST_ERROR) when
        ``ast`` is not a document root.
    """
    if not is_root(ast):
        return _not_a_document(canonical_name)

    siblings = list(ast.children)
    headings = [
        (index, normalize_heading(extract_text(node)))
        for index, node in enumerate(siblings)
        if is_heading(node)
    ]

    for candidate in SECTION_SYNONYMS.get(canonical_name, (canonical_name,)):
        wanted = normalize_heading(candidate)
        for index, text in headings:
            if text == wanted:
                return Ok(_build_section(canonical_name, siblings, index))

    return Ok(None)


def find_sections_by_pattern(
    ast: SyntaxTreeNode, pattern: str | re.Pattern[str]
) -> Result[list[Section], ParseError]:
    """
    Every top-level section whose heading text matches ``pattern``.

    String patterns are compiled case-insensitively and matched with search.
    """
    regex = re.compile(pattern, re.IGNORECASE) if isinstance(pattern, str) else pattern
    if not is_root(ast):
        return _not_a_document(regex.pattern)

    siblings = list(ast.children)
    sections = []
    for index, node in enumerate(siblings):
        if is_heading(node):
            title = extract_text(node).strip()
            if regex.search(title):
                sections.append(_build_section(title, siblings, index))
    return Ok(sections)


def get_section_text(section: Section) -> str:
    """Plain text of a section's content, trimmed."""
    return nodes_text(section.content)


def section_markdown(section: Section, source: str) -> str:
    """
    Original Markdown of a section, heading included.

    Uses the source line map of the heading and the last content node; falls
    back to the plain section text when the nodes carry no map.
    """
    start_map = section.heading.map
    end_node = section.content[-1] if section.content else section.heading
    end_map = end_node.map
    if not start_map or not end_map:
        return get_section_text(section)
    lines = source.splitlines()
    return "\n".join(lines[start_map[0] : end_map[1]]).strip()
