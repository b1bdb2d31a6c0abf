"""
Parsing - Pipeline orchestration and recovery.
"""

from .orchestrator import (
    IssueParser,
    ParseResult,
    aparse_issue_body,
    parse_issue_body,
    quick_parse,
    strict_parse,
)
from .recovery import (
    RecoveryContext,
    attempt_recovery,
    create_fallback_issue,
    create_recovery_context,
    format_recovery_log,
    record_error,
    record_fallback,
    recovery_strategy,
)


__all__ = [
    "IssueParser",
    "ParseResult",
    "RecoveryContext",
    "aparse_issue_body",
    "attempt_recovery",
    "create_fallback_issue",
    "create_recovery_context",
    "format_recovery_log",
    "parse_issue_body",
    "quick_parse",
    "record_error",
    "record_fallback",
    "recovery_strategy",
    "strict_parse",
]
