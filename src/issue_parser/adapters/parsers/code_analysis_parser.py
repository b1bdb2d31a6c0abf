"""
Code Analysis Parser - Stack traces, error messages, and code locations.

Looks for a "Code Analysis" section (or its "Stack Trace" / "Error Message"
synonyms) and falls back to code blocks anywhere in the document.

Stack traces are parsed line by line against an ordered list of dialects.
The first dialect whose pattern matches a line decides that line's frame;
dialects are never combined.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from markdown_it.tree import SyntaxTreeNode

from issue_parser.adapters.markdown import (
    CodeBlock,
    Section,
    SectionName,
    document_text,
    extract_code_blocks,
    find_section,
    find_sections_by_pattern,
    get_section_text,
)
from issue_parser.core.domain.entities import CodeAnalysis
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.domain.value_objects import StackFrame
from issue_parser.core.result import Ok, Result


logger = logging.getLogger("CodeAnalysisParser")


# -------------------------------------------------------------------------
# Stack trace dialects
# -------------------------------------------------------------------------


@dataclass(frozen=True)
class StackTraceDialect:
    """A named line pattern and the frame builder for its match."""

    name: str
    pattern: re.Pattern[str]
    build: Callable[[re.Match[str]], StackFrame]


def _int(value: str | None) -> int | None:
    return int(value) if value else None


STACK_TRACE_DIALECTS: tuple[StackTraceDialect, ...] = (
    # at fn (src/app.ts:10:5) / at src/app.ts:10:5
    StackTraceDialect(
        "node",
        re.compile(r"\bat\s+(?:(?:async\s+)?([^\s(]+)\s+)?\(?([^\s():]+):(\d+):(\d+)\)?"),
        lambda m: StackFrame(m.group(2), int(m.group(3)), int(m.group(4)), m.group(1)),
    ),
    # File "app/main.py", line 10, in handler
    StackTraceDialect(
        "python",
        re.compile(r"File\s+\"([^\"]+)\",\s+line\s+(\d+)(?:,\s+in\s+(\S+))?"),
        lambda m: StackFrame(m.group(1), int(m.group(2)), None, m.group(3)),
    ),
    # at com.example.Service.method(Service.java:42)
    StackTraceDialect(
        "java",
        re.compile(r"\bat\s+([\w$.<>]+)\(([^\s():]+):(\d+)\)"),
        lambda m: StackFrame(m.group(2), int(m.group(3)), None, m.group(1)),
    ),
    # /go/src/app/main.go:42 +0x1d
    StackTraceDialect(
        "go",
        re.compile(r"^\s*([^\s:]+\.go):(\d+)"),
        lambda m: StackFrame(m.group(1), int(m.group(2))),
    ),
    # at ./src/main.rs:10:5
    StackTraceDialect(
        "rust",
        re.compile(r"\bat\s+([^\s():]+):(\d+):(\d+)"),
        lambda m: StackFrame(m.group(1), int(m.group(2)), int(m.group(3))),
    ),
    # path/file.ext:line[:col]; the path starts the line or follows a delimiter
    StackTraceDialect(
        "generic",
        re.compile(r"(?<![^\s(\[\"'=])([^\s:()\"'\[\]]+\.\w+):(\d+)(?::(\d+))?"),
        lambda m: StackFrame(m.group(1), int(m.group(2)), _int(m.group(3))),
    ),
)


def parse_stack_trace(text: str) -> list[StackFrame]:
    """Parse stack frames from text, one frame per line at most."""
    frames: list[StackFrame] = []
    for line in text.splitlines():
        for dialect in STACK_TRACE_DIALECTS:
            match = dialect.pattern.search(line)
            if match is None:
                continue
            frame = dialect.build(match)
            if frame.file and frame.line >= 1:
                frames.append(frame)
            break
    return frames


# -------------------------------------------------------------------------
# Error message and type
# -------------------------------------------------------------------------

# Ordered; the first pattern that matches provides the message in group 1.
ERROR_MESSAGE_PATTERNS: tuple[re.Pattern[str], ...] = (
    # JavaScript built-in errors
    re.compile(
        r"\b(?:TypeError|ReferenceError|SyntaxError|RangeError|URIError|EvalError|Error):\s*(.+)"
    ),
    # Python exception line
    re.compile(r"^\s*(?:[A-Za-z_]\w*\.)*[A-Z]\w*(?:Error|Exception|Warning):\s*(.+)$", re.M),
    # Java, optionally prefixed by the thread banner
    re.compile(
        r"(?:Exception in thread \"[^\"]*\"\s+)?"
        r"(?<![\w.])(?:[a-z]\w*\.)+[A-Z]\w*(?:Exception|Error):\s*(.+)"
    ),
    # Any other Error/Exception class
    re.compile(r"\b[A-Z]\w*(?:Error|Exception)\b:\s*(.+)"),
    # Generic heuristics
    re.compile(r"\b(?:error|failed|failure)[:\s]+(.+)", re.I),
    re.compile(r"\b(?:cannot|could not|unable to)\s+(.+)", re.I),
)

ERROR_TYPE_PATTERN = re.compile(
    r"(?<![\w.])((?:[a-z_]\w*\.)*(?:[A-Z]\w*)?(?:Error|Exception|Panic))\s*:"
)

_ERROR_LINE = re.compile(r"error|exception|failed", re.I)


def extract_error_message(text: str) -> str | None:
    """First error message found, trimmed."""
    for pattern in ERROR_MESSAGE_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1).strip():
            return match.group(1).strip()

    for line in text.splitlines():
        if _ERROR_LINE.search(line):
            return line.strip()
    return None


def extract_error_type(text: str) -> str | None:
    """Exception class name, package prefix removed."""
    match = ERROR_TYPE_PATTERN.search(text)
    if not match:
        return None
    return match.group(1).rsplit(".", 1)[-1]


# -------------------------------------------------------------------------
# Location
# -------------------------------------------------------------------------

LINE_RANGE_PATTERN = re.compile(r"\blines?\s*:?\s*(\d+)\s*(?:-|–|to)\s*(\d+)", re.I)
SINGLE_LINE_PATTERN = re.compile(r"\bline\s*:?\s*(\d+)", re.I)

FILE_META_PATTERN = re.compile(r"\b(?:file|path|title)\s*[=:]\s*[\"']?([^\s\"']+)", re.I)
FILE_LABEL_PATTERN = re.compile(r"\b(?:file|path)\s*:\s*`?([\w@./-]+\.\w+)`?", re.I)
FILE_IN_PATTERN = re.compile(r"\bin\s+`?([\w@./-]*\w/[\w@.-]+\.[A-Za-z]\w*|[\w@-]+\.[A-Za-z]\w*)`?")

FUNCTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\b(?:function|method|def|func|fn)\s+([A-Za-z_$][\w$]*)"),
    re.compile(r"\bin\s+`?([A-Za-z_$][\w$]*)\s*\("),
)
CLASS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bclass\s+([A-Z][\w$]*)"),
    re.compile(r"\bin\s+`?([A-Z][\w$]*)\.[a-zA-Z_$]"),
)


def extract_line_range(
    text: str, frames: list[StackFrame] | None = None
) -> tuple[int | None, int | None]:
    """
    ``(start, end)`` from "lines N-M", "line N", or the first stack frame.

    Values are reported as written, so an inverted range is left for the
    validator to flag.
    """
    match = LINE_RANGE_PATTERN.search(text)
    if match:
        return int(match.group(1)), int(match.group(2))
    match = SINGLE_LINE_PATTERN.search(text)
    if match:
        line = int(match.group(1))
        return line, line
    if frames:
        return frames[0].line, frames[0].line
    return None, None


def extract_file_path(
    text: str, blocks: list[CodeBlock], frames: list[StackFrame]
) -> str:
    """Fence metadata, then ``File:`` labels, then ``in x.ext``, then the first frame."""
    for block in blocks:
        if block.meta:
            match = FILE_META_PATTERN.search(block.meta)
            if match:
                return match.group(1)
    for pattern in (FILE_LABEL_PATTERN, FILE_IN_PATTERN):
        match = pattern.search(text)
        if match:
            return match.group(1)
    if frames:
        return frames[0].file
    return ""


def _split_qualified(name: str | None) -> tuple[str | None, str | None]:
    """``Class.method`` -> (method, Class); plain names have no class."""
    if not name:
        return None, None
    owner, _, member = name.rpartition(".")
    if not owner:
        return member, None
    return member or None, owner.rsplit(".", 1)[-1] or None


def _first_group(patterns: tuple[re.Pattern[str], ...], text: str) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def _pick_snippet(blocks: list[CodeBlock], preferred: list[CodeBlock]) -> str | None:
    if preferred:
        return preferred[0].value
    for block in blocks:
        if block.value and not parse_stack_trace(block.value):
            return block.value
    return blocks[0].value if blocks else None


def build_code_analysis(
    text: str,
    blocks: list[CodeBlock],
    trace_text: str | None = None,
    error_text: str | None = None,
    snippet_blocks: list[CodeBlock] | None = None,
) -> CodeAnalysis:
    """
    Assemble a CodeAnalysis from located text.

    Args:
        text: All text of the analysis region.
        blocks: Code blocks in the region.
        trace_text: Dedicated stack trace text, if a "Stack Trace" section exists.
        error_text: Dedicated error text, if an "Error Message" section exists.
        snippet_blocks: Code blocks from a snippet sub-section, preferred as snippet.
    """
    frames = parse_stack_trace(trace_text or text)
    start_line, end_line = extract_line_range(text, frames)

    frame_function, frame_class = _split_qualified(frames[0].function if frames else None)

    error_source = error_text or text
    error_message = extract_error_message(error_source)
    if error_message is None and error_text:
        error_message = error_text.strip().splitlines()[0]

    return CodeAnalysis(
        file_path=extract_file_path(text, blocks, frames),
        start_line=start_line,
        end_line=end_line,
        function_name=_first_group(FUNCTION_PATTERNS, text) or frame_function,
        class_name=_first_group(CLASS_PATTERNS, text) or frame_class,
        snippet=_pick_snippet(blocks, snippet_blocks or []),
        stack_trace=tuple(frames) if frames else None,
        error_message=error_message,
        error_type=extract_error_type(error_source) or extract_error_type(trace_text or text),
    )


def _lookup(ast: SyntaxTreeNode, name: str) -> Result[Section | None, ParseError]:
    return find_section(ast, name).map_err(lambda e: e.with_section(SectionName.CODE_ANALYSIS))


def parse_code_analysis(ast: SyntaxTreeNode) -> Result[CodeAnalysis | None, ParseError]:
    """
    Parse code analysis details.

    Returns:
        Ok(CodeAnalysis), Ok(None) when the document has no analysis section,
        no code block, and no parsable stack trace, or Err when the AST is
        unusable.
    """
    found = _lookup(ast, SectionName.CODE_ANALYSIS)
    if found.is_err():
        return found
    stack_found = _lookup(ast, SectionName.STACK_TRACE)
    if stack_found.is_err():
        return stack_found
    error_found = _lookup(ast, SectionName.ERROR_MESSAGE)
    if error_found.is_err():
        return error_found
    snippets_found = find_sections_by_pattern(ast, r"\bsnippet\b")
    if snippets_found.is_err():
        return snippets_found

    section = found.unwrap()
    section_text = get_section_text(section) if section else ""

    if section is not None and section_text:
        stack_section = stack_found.unwrap()
        error_section = error_found.unwrap()
        snippet_blocks = [
            block
            for snippet_section in snippets_found.unwrap()
            for block in extract_code_blocks(snippet_section.content)
        ]
        return Ok(
            build_code_analysis(
                section_text,
                extract_code_blocks(section.content),
                trace_text=get_section_text(stack_section) if stack_section else None,
                error_text=get_section_text(error_section) if error_section else None,
                snippet_blocks=snippet_blocks,
            )
        )

    blocks = extract_code_blocks(ast.children)
    if blocks:
        logger.debug(f"No analysis section, using {len(blocks)} code block(s)")
        return Ok(build_code_analysis("\n".join(b.value for b in blocks), blocks))

    text = document_text(ast)
    if parse_stack_trace(text):
        return Ok(build_code_analysis(text, []))
    return Ok(None)


_FENCE_PATTERN = re.compile(r"^```([^\n`]*)\n([\s\S]*?)^```", re.M)


def parse_code_analysis_from_text(text: str) -> CodeAnalysis | None:
    """Parse code analysis from raw text without building an AST."""
    match = re.search(
        r"^#{1,6}\s*(?:Code Analysis|Stack Trace|Error Message)\s*:?\s*\n([\s\S]*?)(?=^#{1,2}\s|\Z)",
        text,
        re.I | re.M,
    )
    region = match.group(1) if match and match.group(1).strip() else text

    blocks = []
    for fence in _FENCE_PATTERN.finditer(region):
        lang, _, meta = fence.group(1).strip().partition(" ")
        blocks.append(CodeBlock(fence.group(2).rstrip("\n"), lang or None, meta.strip() or None))

    if match is None and not blocks and not parse_stack_trace(text):
        return None
    return build_code_analysis(region, blocks)
