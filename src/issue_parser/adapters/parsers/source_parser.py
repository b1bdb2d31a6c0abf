"""
Source Parser - Determine where an issue came from.

Precedence: an explicit "Source" section, then keyword mentions anywhere in
the document, then ``manual``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from markdown_it.tree import SyntaxTreeNode

from issue_parser.adapters.markdown import (
    SectionName,
    document_text,
    find_section,
    get_section_text,
)
from issue_parser.core.domain.enums import IssueSource
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.result import Ok, Result


@dataclass(frozen=True)
class ParsedSource:
    """Source system plus optional identifier and link."""

    source: IssueSource = IssueSource.MANUAL
    source_id: str | None = None
    source_url: str | None = None


@dataclass(frozen=True)
class _SourcePattern:
    source: IssueSource
    keyword: re.Pattern[str]  # group 1: optional identifier
    url: re.Pattern[str]  # group 0: url, group 1: identifier


# Checked in order; the first source whose keyword or URL appears wins.
SOURCE_PATTERNS: tuple[_SourcePattern, ...] = (
    _SourcePattern(
        IssueSource.SENTRY,
        # Sentry short ids (PROJ-123) or numeric ids; the id itself is case-sensitive
        re.compile(
            r"\bsentry\b[:\s]+(?:issue\s*(?:id)?[:\s]+)?(?-i:([A-Z][A-Z0-9_]*-\d+|\d+\b))?",
            re.IGNORECASE,
        ),
        re.compile(r"https?://(?:[\w-]+\.)*sentry\.io/[^\s)>\]]*?issues/(\d+)/?", re.IGNORECASE),
    ),
    _SourcePattern(
        IssueSource.ASANA,
        re.compile(r"\basana\b[:\s]+(?:task\s*(?:id)?[:\s]+)?(\d+\b)?", re.IGNORECASE),
        re.compile(r"https?://app\.asana\.com/\d+/\d+/(\d+)", re.IGNORECASE),
    ),
    _SourcePattern(
        IssueSource.GITHUB,
        re.compile(r"\bgithub\b[:\s]+(?:issue[:\s]+)?#?(\d+\b)?", re.IGNORECASE),
        re.compile(r"https?://github\.com/[\w.-]+/[\w.-]+/issues/(\d+)", re.IGNORECASE),
    ),
)

MANUAL_PATTERN = re.compile(r"\bmanual(?:ly)?(?:\s+created)?\b", re.IGNORECASE)

URL_PATTERN = re.compile(r"https?://[^\s<>()\[\]`\"']+")

_SOURCE_KEYWORDS = ("sentry", "asana", "github")


def extract_source_url(text: str, source: IssueSource | None = None) -> str | None:
    """
    First URL pointing at a known source system.

    Args:
        text: Text to scan.
        source: Restrict to URLs of this source.
    """
    keywords = (source.value,) if source and source is not IssueSource.MANUAL else _SOURCE_KEYWORDS
    for match in URL_PATTERN.finditer(text):
        url = match.group(0).rstrip(".,;:")
        if any(k in url.lower() for k in keywords):
            return url
    return None


def detect_source(text: str) -> ParsedSource:
    """
    Infer the source from keyword and URL mentions.

    Explicit identifiers next to the keyword ("Sentry Issue: PROJ-1") take
    precedence over identifiers embedded in URLs.
    """
    for pattern in SOURCE_PATTERNS:
        keyword_match = pattern.keyword.search(text)
        url_match = pattern.url.search(text)
        if keyword_match is None and url_match is None:
            continue

        source_id = keyword_match.group(1) if keyword_match else None
        if source_id is None and url_match is not None:
            source_id = url_match.group(1)
        source_url = url_match.group(0) if url_match else None
        return ParsedSource(pattern.source, source_id, source_url)

    if MANUAL_PATTERN.search(text):
        return ParsedSource(IssueSource.MANUAL)

    lowered = text.lower()
    for keyword in _SOURCE_KEYWORDS:
        if keyword in lowered:
            return ParsedSource(IssueSource.from_string(keyword))

    return ParsedSource(IssueSource.MANUAL)


def _with_section_url(parsed: ParsedSource, text: str) -> ParsedSource:
    if parsed.source_url or parsed.source is IssueSource.MANUAL:
        return parsed
    return ParsedSource(parsed.source, parsed.source_id, extract_source_url(text, parsed.source))


def parse_source(ast: SyntaxTreeNode) -> Result[ParsedSource, ParseError]:
    """
    Parse the issue source from a document.

    Args:
        ast: Document root node.

    Returns:
        Ok(ParsedSource), or Err when the AST is unusable.
    """
    found = find_section(ast, SectionName.SOURCE).map_err(
        lambda e: e.with_section(SectionName.SOURCE)
    )
    if found.is_err():
        return found

    section = found.unwrap()
    if section is not None:
        section_text = get_section_text(section)
        if not section_text:
            return Ok(ParsedSource(IssueSource.MANUAL))
        return Ok(_with_section_url(detect_source(section_text), section_text))

    return Ok(detect_source(document_text(ast)))


def parse_source_from_text(text: str) -> ParsedSource:
    """Parse the source from raw text, preferring a ``## Source`` block."""
    match = re.search(r"^#{1,6}\s*Source\s*:?\s*\n([\s\S]*?)(?=^#{1,6}\s|\Z)", text, re.I | re.M)
    if match and match.group(1).strip():
        block = match.group(1)
        return _with_section_url(detect_source(block), block)
    return detect_source(text)
