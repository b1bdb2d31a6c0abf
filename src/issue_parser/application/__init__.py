"""
Application layer - Use cases built on the core and adapters.
"""

from .parsing import IssueParser, ParseResult, parse_issue_body, quick_parse, strict_parse


__all__ = ["IssueParser", "ParseResult", "parse_issue_body", "quick_parse", "strict_parse"]
