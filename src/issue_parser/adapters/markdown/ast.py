"""
Markdown AST - markdown-it-py backed tree construction and node helpers.

Implements the MarkdownAstPort interface. Nodes are
``markdown_it.tree.SyntaxTreeNode`` instances; block nodes carry a ``map``
with their source line range, which the section locator uses to recover the
original Markdown of a section.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from issue_parser.core.domain.enums import ParseErrorCode
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.ports.markdown_ast import MarkdownAstPort
from issue_parser.core.result import Err, Ok, Result


logger = logging.getLogger("MarkdownAst")

_LEAF_TEXT_TYPES = frozenset({"text", "text_special", "code_inline", "html_inline"})
_BREAK_TYPES = frozenset({"softbreak", "hardbreak"})
_CODE_TYPES = frozenset({"fence", "code_block"})
_LIST_TYPES = frozenset({"bullet_list", "ordered_list"})
_INLINE_CONTAINERS = frozenset({"inline", "link", "em", "strong", "s", "image"})


@dataclass(frozen=True)
class CodeBlock:
    """
    A fenced or indented code block.

    Attributes:
        value: Code content without the trailing newline.
        lang: First word of the fence info string, if any.
        meta: Remainder of the info string, e.g. ``file=src/app.ts``.
    """

    value: str
    lang: str | None = None
    meta: str | None = None


class MarkdownItAstProvider(MarkdownAstPort):
    """
    CommonMark parser built on markdown-it-py.

    Tables and strikethrough are enabled since issue bodies copied from
    GitHub commonly use them.
    """

    def __init__(self, md: MarkdownIt | None = None):
        """
        Initialize the provider.

        Args:
            md: Pre-configured MarkdownIt instance. Defaults to CommonMark
                with tables and strikethrough.
        """
        self._md = md or MarkdownIt("commonmark", {"html": True}).enable(
            ["table", "strikethrough"]
        )

    @property
    def name(self) -> str:
        return "markdown-it"

    def parse(self, content: str) -> Result[SyntaxTreeNode, ParseError]:
        try:
            tokens = self._md.parse(content)
            return Ok(SyntaxTreeNode(tokens))
        except Exception as e:
            logger.debug(f"Markdown parsing failed: {e}")
            return Err(
                ParseError(
                    code=ParseErrorCode.AST_ERROR,
                    message=f"Failed to parse markdown: {e}",
                    cause=e,
                )
            )


_default_provider: MarkdownItAstProvider | None = None


def parse_markdown_to_ast(content: str) -> Result[SyntaxTreeNode, ParseError]:
    """Parse Markdown with a shared default provider."""
    global _default_provider
    if _default_provider is None:
        _default_provider = MarkdownItAstProvider()
    return _default_provider.parse(content)


# -------------------------------------------------------------------------
# Node predicates
# -------------------------------------------------------------------------


def is_root(node: object) -> bool:
    return isinstance(node, SyntaxTreeNode) and node.type == "root"


def is_heading(node: SyntaxTreeNode) -> bool:
    return node.type == "heading"


def heading_level(node: SyntaxTreeNode) -> int:
    """Heading depth 1-6 taken from the ``h1``..``h6`` tag."""
    return int(node.tag[1:])


def is_list(node: SyntaxTreeNode) -> bool:
    return node.type in _LIST_TYPES


def is_code(node: SyntaxTreeNode) -> bool:
    return node.type in _CODE_TYPES


# -------------------------------------------------------------------------
# Text extraction
# -------------------------------------------------------------------------


def extract_text(node: SyntaxTreeNode) -> str:
    """
    Plain text of a node and its descendants.

    Inline formatting is dropped (``**Component:**`` becomes ``Component:``),
    line breaks become newlines, and sibling blocks are joined by newlines.
    Code blocks contribute their content verbatim.
    """
    node_type = node.type
    if node_type in _LEAF_TEXT_TYPES:
        return node.content
    if node_type in _BREAK_TYPES:
        return "\n"
    if node_type in _CODE_TYPES or node_type == "html_block":
        return node.content.rstrip("\n")
    if node_type in _INLINE_CONTAINERS:
        return "".join(extract_text(child) for child in node.children)

    parts = (extract_text(child) for child in node.children)
    return "\n".join(part for part in parts if part)


def nodes_text(nodes: Iterable[SyntaxTreeNode]) -> str:
    """Text of several sibling nodes, trimmed."""
    parts = (extract_text(node) for node in nodes)
    return "\n".join(part for part in parts if part).strip()


def document_text(root: SyntaxTreeNode) -> str:
    """Text of the whole document."""
    return nodes_text(root.children)


def walk(nodes: Iterable[SyntaxTreeNode]) -> Iterator[SyntaxTreeNode]:
    """Depth-first, document-order traversal including the given nodes."""
    for node in nodes:
        yield node
        yield from walk(node.children)


def extract_code_blocks(nodes: Iterable[SyntaxTreeNode]) -> list[CodeBlock]:
    """Every code block among ``nodes`` and their descendants, in document order."""
    blocks: list[CodeBlock] = []
    for node in walk(nodes):
        if not is_code(node):
            continue
        info = (node.info or "").strip() if node.type == "fence" else ""
        lang, _, meta = info.partition(" ")
        blocks.append(
            CodeBlock(
                value=node.content.rstrip("\n"),
                lang=lang or None,
                meta=meta.strip() or None,
            )
        )
    return blocks


def extract_list_items(nodes: Iterable[SyntaxTreeNode]) -> list[str]:
    """
    Item texts of the lists among ``nodes``.

    Only lists that are direct members of ``nodes`` are considered; nested
    sub-lists stay part of their parent item's text.
    """
    items: list[str] = []
    for node in nodes:
        if not is_list(node):
            continue
        for item in node.children:
            text = extract_text(item).strip()
            if text:
                items.append(text)
    return items
