"""
Domain enums - Issue source, type, priority, and parse error codes.
"""

from __future__ import annotations

from enum import Enum


class IssueSource(Enum):
    """Where an issue body originated."""

    ASANA = "asana"
    SENTRY = "sentry"
    MANUAL = "manual"
    GITHUB = "github"

    @classmethod
    def from_string(cls, value: str) -> IssueSource:
        """
        Parse a source name, tolerating case and surrounding whitespace.

        Raises:
            ValueError: If the value names no known source.
        """
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown issue source: {value!r}")


class IssueType(Enum):
    """
    Classification of an issue.

    Declaration order is significant: it is the tie-break order used by the
    keyword scorer (see ``TYPE_PRECEDENCE``).
    """

    BUG = "bug"
    FEATURE = "feature"
    REFACTOR = "refactor"
    DOCS = "docs"
    TEST = "test"
    CHORE = "chore"

    @classmethod
    def from_string(cls, value: str) -> IssueType:
        """
        Parse a type name.

        Accepts the canonical values plus common spellings such as
        "documentation" or "tests".

        Raises:
            ValueError: If the value names no known type.
        """
        normalized = value.strip().lower()
        aliases = {
            "doc": cls.DOCS,
            "documentation": cls.DOCS,
            "tests": cls.TEST,
            "testing": cls.TEST,
        }
        if normalized in aliases:
            return aliases[normalized]
        for member in cls:
            if member.value == normalized:
                return member
        raise ValueError(f"Unknown issue type: {value!r}")


# Ties in keyword scoring resolve to the earliest entry.
TYPE_PRECEDENCE: tuple[IssueType, ...] = (
    IssueType.BUG,
    IssueType.FEATURE,
    IssueType.REFACTOR,
    IssueType.DOCS,
    IssueType.TEST,
    IssueType.CHORE,
)


class IssuePriority(Enum):
    """Issue priority levels."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_string(cls, value: str) -> IssuePriority:
        """
        Parse priority from a string.

        Unknown values map to MEDIUM.
        """
        normalized = value.strip().lower()

        if any(x in normalized for x in ["critical", "urgent", "blocker", "p0"]):
            return cls.CRITICAL
        if any(x in normalized for x in ["high", "p1"]):
            return cls.HIGH
        if any(x in normalized for x in ["low", "minor", "p3", "p4"]):
            return cls.LOW
        return cls.MEDIUM


class ParseErrorCode(Enum):
    """Taxonomy of parse failures."""

    AST_ERROR = "AST_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    MISSING_SECTION = "MISSING_SECTION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_FORMAT = "INVALID_FORMAT"

    @property
    def is_terminal(self) -> bool:
        """Whether no recovery strategy can handle this code."""
        return self is ParseErrorCode.INVALID_FORMAT
