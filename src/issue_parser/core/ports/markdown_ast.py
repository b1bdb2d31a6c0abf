"""
Markdown AST Port - Abstract interface for Markdown tree construction.

Implementations:
- MarkdownItAstProvider: markdown-it-py CommonMark parser
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any


if TYPE_CHECKING:
    from issue_parser.core.domain.errors import ParseError
    from issue_parser.core.result import Result


class MarkdownAstPort(ABC):
    """
    Interface for turning raw Markdown into a block/inline node tree.

    Failure must be reported as ``Err(ParseError)`` with code ``AST_ERROR``,
    never raised.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name."""
        ...

    @abstractmethod
    def parse(self, content: str) -> Result[Any, ParseError]:
        """
        Parse Markdown content into a document root node.

        Args:
            content: Raw Markdown text.

        Returns:
            Ok(root node) or Err(ParseError) with code AST_ERROR.
        """
        ...
