"""
Adapters - Concrete implementations of the core ports.

- markdown: markdown-it-py AST provider and section lookup
- parsers: one parser per issue section
- config: file and environment configuration providers
"""

from .config import EnvironmentConfigProvider, FileConfigProvider
from .markdown import MarkdownItAstProvider, parse_markdown_to_ast


__all__ = [
    "EnvironmentConfigProvider",
    "FileConfigProvider",
    "MarkdownItAstProvider",
    "parse_markdown_to_ast",
]
