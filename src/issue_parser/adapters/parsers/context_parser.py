"""
Context Parser - Priority, related files and symbols, and ownership fields.

The token extractors here (``extract_priority``, ``extract_file_paths``,
``extract_symbols``) are shared with the recovery engine, so both paths apply
the same patterns and the same output caps.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from markdown_it.tree import SyntaxTreeNode

from issue_parser.adapters.markdown import (
    SectionName,
    document_text,
    extract_list_items,
    find_section,
    get_section_text,
)
from issue_parser.core.domain.entities import IssueContext
from issue_parser.core.domain.enums import IssuePriority
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.result import Ok, Result


MAX_RELATED_FILES = 10
MAX_RELATED_SYMBOLS = 20

# Evaluated in order, first match wins.
PRIORITY_PATTERNS: tuple[tuple[re.Pattern[str], IssuePriority], ...] = (
    (re.compile(r"\bpriority\s*[:=]\s*\**\s*critical\b", re.I), IssuePriority.CRITICAL),
    (re.compile(r"\bpriority\s*[:=]\s*\**\s*high\b", re.I), IssuePriority.HIGH),
    (re.compile(r"\bpriority\s*[:=]\s*\**\s*medium\b", re.I), IssuePriority.MEDIUM),
    (re.compile(r"\bpriority\s*[:=]\s*\**\s*low\b", re.I), IssuePriority.LOW),
    (re.compile(r"\[critical\]", re.I), IssuePriority.CRITICAL),
    (re.compile(r"\[high\]", re.I), IssuePriority.HIGH),
    (re.compile(r"\[medium\]", re.I), IssuePriority.MEDIUM),
    (re.compile(r"\[low\]", re.I), IssuePriority.LOW),
    (re.compile(r"\bp[01]\b", re.I), IssuePriority.CRITICAL),
    (re.compile(r"\bp2\b", re.I), IssuePriority.HIGH),
    (re.compile(r"\bp3\b", re.I), IssuePriority.MEDIUM),
    (re.compile(r"\bp[45]\b", re.I), IssuePriority.LOW),
    (re.compile(r"\b(?:urgent|critical|blocker)\b", re.I), IssuePriority.CRITICAL),
    (re.compile(r"\b(?:high priority|important)\b", re.I), IssuePriority.HIGH),
    (re.compile(r"\b(?:low priority|minor)\b", re.I), IssuePriority.LOW),
    (re.compile(r"\bhigh\b", re.I), IssuePriority.HIGH),
    (re.compile(r"\blow\b", re.I), IssuePriority.LOW),
)

FILE_EXTENSIONS = (
    "tsx",
    "ts",
    "jsx",
    "js",
    "py",
    "go",
    "rs",
    "java",
    "rb",
    "php",
    "vue",
    "svelte",
    "scss",
    "css",
    "less",
    "html",
    "json",
    "yaml",
    "yml",
    "toml",
    "md",
    "sql",
    "bash",
    "zsh",
    "sh",
)

# A path must start at a word boundary-ish delimiter and end on a known extension
FILE_PATH_PATTERN = re.compile(
    r"(?<![^\s`'\"(\[])"
    r"((?:\.{1,2}/|/)?(?:[\w@.-]+/)*[\w.-]+\.(?:" + "|".join(FILE_EXTENSIONS) + r"))"
    r"(?=$|[\s`'\"()\[\]:,;!?]|\.(?:\s|$))",
    re.MULTILINE,
)

SYMBOL_PATTERNS: tuple[re.Pattern[str], ...] = (
    # `identifier` or `Class.method`
    re.compile(r"`([A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)(?:\(\))?`"),
    # call sites: identifier(
    re.compile(r"\b([A-Za-z_$][\w$]*)\s*\("),
    # type declarations and references
    re.compile(r"\b(?:class|new|extends|implements|interface)\s+([A-Z][\w$]*)"),
    # method calls: .method(
    re.compile(r"\.([a-z_$][\w$]*)\s*\("),
)

# Keywords, literals, primitive type names and logging calls
EXCLUDED_SYMBOLS = frozenset(
    {
        # JavaScript / TypeScript
        "if", "else", "for", "while", "do", "switch", "case", "break", "continue",
        "return", "throw", "try", "catch", "finally", "new", "delete", "typeof",
        "instanceof", "void", "this", "super", "class", "extends", "implements",
        "import", "export", "from", "as", "default", "function", "const", "let",
        "var", "async", "await", "yield", "true", "false", "null", "undefined",
        "console", "log", "error", "warn", "info", "debug", "print", "string",
        "number", "boolean", "object", "array", "any", "unknown", "never",
        # Python
        "def", "self", "and", "or", "not", "in", "is", "with", "none",
        # Prose
        "e", "i", "eg", "ie", "etc", "see", "at",
    }
)  # fmt: skip


def extract_priority(text: str) -> IssuePriority | None:
    """Priority from explicit fields or cue words, or None when nothing matches."""
    for pattern, priority in PRIORITY_PATTERNS:
        if pattern.search(text):
            return priority
    return None


def _unique(values: Iterable[str], limit: int) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for value in values:
        value = value.strip()
        if value and value not in seen:
            seen[value] = None
            if len(seen) >= limit:
                break
    return tuple(seen)


def extract_file_paths(text: str, limit: int = MAX_RELATED_FILES) -> tuple[str, ...]:
    """Extension-terminated path tokens, in order of appearance, de-duplicated."""
    return _unique((m.group(1) for m in FILE_PATH_PATTERN.finditer(text)), limit)


def extract_symbols(text: str, limit: int = MAX_RELATED_SYMBOLS) -> tuple[str, ...]:
    """
    Identifier tokens: backticked names first, then call sites and types.

    Language keywords and single-character names are skipped.
    """
    candidates: list[str] = []
    for pattern in SYMBOL_PATTERNS:
        for match in pattern.finditer(text):
            symbol = match.group(1)
            if len(symbol) > 1 and symbol.lower() not in EXCLUDED_SYMBOLS:
                candidates.append(symbol)
    return _unique(candidates, limit)


def extract_key_value(text: str, key: str) -> str | None:
    """
    Value of a ``Key: value`` or ``Key = value`` line.

    Bold markers and list bullets around the key are tolerated.
    """
    pattern = re.compile(
        rf"^\s*(?:[-*+]\s+)?\**{re.escape(key)}\**\s*(?::\**|=)\s*(.+?)\s*$",
        re.IGNORECASE | re.MULTILINE,
    )
    match = pattern.search(text)
    if not match:
        return None
    value = match.group(1).strip().strip("*`").strip()
    return value or None


def _context_from_text(
    text: str,
    files: tuple[str, ...] = (),
    symbols: tuple[str, ...] = (),
    fallback_text: str = "",
) -> IssueContext:
    priority = extract_priority(text) or (
        extract_priority(fallback_text) if fallback_text else None
    )
    if not files:
        files = extract_file_paths(text) or extract_file_paths(fallback_text)
    if not symbols:
        symbols = extract_symbols(text) or extract_symbols(fallback_text)

    return IssueContext(
        priority=priority or IssuePriority.MEDIUM,
        related_files=files[:MAX_RELATED_FILES],
        related_symbols=symbols[:MAX_RELATED_SYMBOLS],
        component=extract_key_value(text, "component"),
        service=extract_key_value(text, "service"),
        environment=extract_key_value(text, "environment") or extract_key_value(text, "env"),
    )


def _listed(ast: SyntaxTreeNode, name: str) -> Result[tuple[str, ...], ParseError]:
    found = find_section(ast, name).map_err(lambda e: e.with_section(name))
    if found.is_err():
        return found
    section = found.unwrap()
    if section is None:
        return Ok(())
    return Ok(tuple(item.strip("`").strip() for item in extract_list_items(section.content)))


def parse_context(ast: SyntaxTreeNode) -> Result[IssueContext, ParseError]:
    """
    Parse issue context.

    "Related Files" / "Related Symbols" lists win over token scanning. Token
    scanning covers the "Context" section first and the whole document second.
    """
    found = find_section(ast, SectionName.CONTEXT).map_err(
        lambda e: e.with_section(SectionName.CONTEXT)
    )
    if found.is_err():
        return found

    listed_files = _listed(ast, SectionName.RELATED_FILES)
    if listed_files.is_err():
        return listed_files
    listed_symbols = _listed(ast, SectionName.RELATED_SYMBOLS)
    if listed_symbols.is_err():
        return listed_symbols

    files = _unique(listed_files.unwrap(), MAX_RELATED_FILES)
    symbols = _unique(listed_symbols.unwrap(), MAX_RELATED_SYMBOLS)
    full_text = document_text(ast)

    section = found.unwrap()
    if section is None:
        return Ok(_context_from_text(full_text, files, symbols))

    return Ok(_context_from_text(get_section_text(section), files, symbols, full_text))


def parse_context_from_text(text: str) -> IssueContext:
    """Parse context from raw text, preferring a ``## Context`` block."""
    match = re.search(r"^#{1,6}\s*Context\s*:?\s*\n([\s\S]*?)(?=^#{1,2}\s|\Z)", text, re.I | re.M)
    if match and match.group(1).strip():
        return _context_from_text(match.group(1), fallback_text=text)
    return _context_from_text(text)
