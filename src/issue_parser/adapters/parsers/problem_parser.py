"""
Problem Description Parser.

The description is the "Problem Description" (or "Description") section. When
that section is missing or empty, everything before the first heading with a
known section name is used instead. Headings with unknown names do not stop
the scan, so their text becomes part of the description.
"""

from __future__ import annotations

import re

from markdown_it.tree import SyntaxTreeNode

from issue_parser.adapters.markdown import (
    SectionName,
    find_section,
    get_section_text,
    is_known_section_heading,
    nodes_text,
)
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.result import Ok, Result


MAX_UNSTRUCTURED_LENGTH = 500

TECHNICAL_TERMS = (
    "api",
    "endpoint",
    "database",
    "query",
    "cache",
    "timeout",
    "memory",
    "leak",
    "crash",
    "error",
    "exception",
    "null",
    "undefined",
    "authentication",
    "authorization",
    "token",
    "session",
    "login",
    "logout",
    "performance",
    "latency",
    "race condition",
    "deadlock",
    "concurrency",
    "validation",
    "permission",
    "upload",
    "download",
    "network",
    "socket",
    "request",
    "response",
)

_TERM_PATTERNS = tuple(
    (term, re.compile(rf"\b{re.escape(term)}\b", re.I)) for term in TECHNICAL_TERMS
)
_QUOTED_PATTERN = re.compile(r"\"([^\"\n]{3,})\"|`([^`\n]{3,})`|(?<!\w)'([^'\n]{3,})'(?!\w)")


def _fallback_description(ast: SyntaxTreeNode) -> str:
    collected = []
    for node in ast.children:
        if is_known_section_heading(node):
            break
        collected.append(node)
    return nodes_text(collected)


def parse_problem_description(ast: SyntaxTreeNode) -> Result[str, ParseError]:
    """
    Parse the problem description.

    Returns:
        Ok(description), possibly empty, or Err when the AST is unusable.
    """
    found = find_section(ast, SectionName.PROBLEM_DESCRIPTION).map_err(
        lambda e: e.with_section(SectionName.PROBLEM_DESCRIPTION)
    )
    if found.is_err():
        return found

    section = found.unwrap()
    if section is not None:
        description = get_section_text(section)
        if description:
            return Ok(description)

    return Ok(_fallback_description(ast))


def parse_problem_from_text(text: str) -> str:
    """
    Parse a description from raw text.

    Tries ``## Problem Description``, ``## Description`` and ``### Problem``
    blocks, then the text before the first level-2 heading, then the first
    500 characters.
    """
    patterns = (
        r"##\s*Problem Description\s*\n([\s\S]*?)(?=\n## |\Z)",
        r"##\s*Description\s*\n([\s\S]*?)(?=\n## |\Z)",
        r"###\s*Problem\s*\n([\s\S]*?)(?=\n### |\n## |\Z)",
    )
    for pattern in patterns:
        match = re.search(pattern, text, re.I)
        if match and match.group(1).strip():
            return match.group(1).strip()

    heading = text.find("\n##")
    if heading > 0:
        leading = text[:heading].strip()
        if leading:
            return leading

    return text[:MAX_UNSTRUCTURED_LENGTH].strip()


def summarize_problem(description: str, max_length: int = 200) -> str:
    """
    Shorten a description for display.

    Prefers cutting at a sentence end or line break in the back half of the
    allowed length, then at a word boundary, then hard-truncates. Anything
    that is cut short except at a sentence ends with "...".
    """
    if len(description) <= max_length:
        return description

    truncated = description[:max_length]
    sentence_end = max(truncated.rfind(". "), truncated.rfind("\n"))
    if sentence_end > max_length * 0.5:
        return truncated[: sentence_end + 1].strip()

    word_end = truncated.rfind(" ")
    if word_end > max_length * 0.8:
        return truncated[:word_end].rstrip() + "..."

    return truncated.rstrip() + "..."


def extract_problem_keywords(description: str) -> list[str]:
    """Technical terms and quoted phrases mentioned in a description."""
    keywords = [term for term, pattern in _TERM_PATTERNS if pattern.search(description)]
    for match in _QUOTED_PATTERN.finditer(description):
        quoted = next(group for group in match.groups() if group is not None).strip()
        if len(quoted) > 2 and quoted not in keywords:
            keywords.append(quoted)
    return keywords
