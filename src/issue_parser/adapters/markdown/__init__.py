"""
Markdown adapters - AST construction and section location.
"""

from .ast import (
    CodeBlock,
    MarkdownItAstProvider,
    document_text,
    extract_code_blocks,
    extract_list_items,
    extract_text,
    heading_level,
    is_code,
    is_heading,
    is_list,
    nodes_text,
    parse_markdown_to_ast,
)
from .sections import (
    KNOWN_SECTION_NAMES,
    SECTION_SYNONYMS,
    Section,
    SectionName,
    find_section,
    find_sections_by_pattern,
    get_section_text,
    is_known_section_heading,
    section_markdown,
)


__all__ = [
    "KNOWN_SECTION_NAMES",
    "SECTION_SYNONYMS",
    "CodeBlock",
    "MarkdownItAstProvider",
    "Section",
    "SectionName",
    "document_text",
    "extract_code_blocks",
    "extract_list_items",
    "extract_text",
    "find_section",
    "find_sections_by_pattern",
    "get_section_text",
    "heading_level",
    "is_code",
    "is_heading",
    "is_known_section_heading",
    "is_list",
    "nodes_text",
    "parse_markdown_to_ast",
    "section_markdown",
]
