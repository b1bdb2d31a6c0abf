"""
Recovery Engine - Degraded parsing when the AST pipeline cannot finish.

Recovery is a small state machine over ``ParseError.code``:

- ``AST_ERROR``, ``PARSE_ERROR``, ``MISSING_SECTION``: recoverable.
- ``VALIDATION_ERROR``: recoverable only with ``FallbackConfig.use_defaults``.
- ``INVALID_FORMAT``: terminal.

Every attempt is recorded in an immutable ``RecoveryContext``; once
``attempts`` reaches ``max_attempts`` recovery is refused, which bounds the
work done for any input.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Any

from issue_parser.adapters.parsers.acceptance_parser import (
    CHECKBOX_LINE,
    MAX_CRITERIA,
    match_inline_scenario,
)
from issue_parser.adapters.parsers.context_parser import (
    extract_file_paths,
    extract_priority,
    extract_symbols,
)
from issue_parser.adapters.parsers.type_parser import detect_type
from issue_parser.core.domain.entities import AcceptanceCriterion, IssueContext, ParsedIssue
from issue_parser.core.domain.enums import IssuePriority, IssueSource, ParseErrorCode
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.ports.config_provider import FallbackConfig


logger = logging.getLogger("RecoveryEngine")

MAX_FALLBACK_DESCRIPTION = 500
EMPTY_DESCRIPTION = "No description available"

# Strategy names recorded in RecoveryContext.fallbacks_used
TEXT_PARSING = "text-based-parsing"
PARTIAL_ISSUE = "partial-issue"
DEFAULTS = "defaults"

_RECOVERABLE: dict[ParseErrorCode, str] = {
    ParseErrorCode.AST_ERROR: TEXT_PARSING,
    ParseErrorCode.PARSE_ERROR: TEXT_PARSING,
    ParseErrorCode.MISSING_SECTION: PARTIAL_ISSUE,
    ParseErrorCode.VALIDATION_ERROR: DEFAULTS,
}

_HEADING = re.compile(r"^#{1,6}\s+.*$", re.M)
_CODE_FENCE = re.compile(r"```[\s\S]*?(?:```|\Z)")
_INLINE_CODE = re.compile(r"`[^`\n]*`")
_URL = re.compile(r"https?://\S+")
# A GIVEN block runs until the next GIVEN or a blank line
_GWT_BLOCK = re.compile(r"\bGIVEN\b[\s\S]+?(?=\bGIVEN\b|\n\s*\n|\Z)", re.I)


@dataclass(frozen=True)
class RecoveryContext:
    """
    Audit trail of one top-level parse call's recovery path.

    Never mutated; ``record_error`` and ``record_fallback`` return new
    contexts.
    """

    attempts: int = 0
    errors: tuple[ParseError, ...] = ()
    fallbacks_used: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": self.attempts,
            "errors": [e.to_dict() for e in self.errors],
            "fallbacksUsed": list(self.fallbacks_used),
        }


def create_recovery_context() -> RecoveryContext:
    return RecoveryContext()


def record_fallback(context: RecoveryContext, name: str) -> RecoveryContext:
    """New context with ``name`` appended to the fallbacks and one more attempt."""
    return replace(
        context,
        attempts=context.attempts + 1,
        fallbacks_used=(*context.fallbacks_used, name),
    )


def record_error(context: RecoveryContext, error: ParseError) -> RecoveryContext:
    """New context with ``error`` appended and one more attempt."""
    return replace(context, attempts=context.attempts + 1, errors=(*context.errors, error))


# -------------------------------------------------------------------------
# Fallback issue
# -------------------------------------------------------------------------


def infer_source(text: str) -> IssueSource:
    lowered = text.lower()
    for source in (IssueSource.SENTRY, IssueSource.ASANA, IssueSource.GITHUB):
        if source.value in lowered:
            return source
    return IssueSource.MANUAL


def clean_description(body: str) -> str:
    """
    Body reduced to plain prose of at most 500 characters plus "...".

    Headings, code fences, inline code and URLs are removed and whitespace is
    collapsed. Long text is cut at the last space when one falls within the
    final hundred characters.
    """
    text = _CODE_FENCE.sub(" ", body)
    text = _HEADING.sub(" ", text)
    text = _INLINE_CODE.sub(" ", text)
    text = _URL.sub(" ", text)
    text = " ".join(text.split())

    if not text:
        return EMPTY_DESCRIPTION
    if len(text) <= MAX_FALLBACK_DESCRIPTION:
        return text

    cut = text.rfind(" ", 0, MAX_FALLBACK_DESCRIPTION)
    if cut <= MAX_FALLBACK_DESCRIPTION - 100:
        cut = MAX_FALLBACK_DESCRIPTION
    return text[:cut].rstrip() + "..."


def infer_acceptance_criteria(text: str) -> tuple[AcceptanceCriterion, ...]:
    """Checkbox lines and GIVEN/WHEN/THEN blocks anywhere in the text."""
    criteria = [
        AcceptanceCriterion(
            description=m.group(2).strip(),
            completed=m.group(1).lower() == "x",
        )
        for m in CHECKBOX_LINE.finditer(text)
    ]
    for block in _GWT_BLOCK.findall(CHECKBOX_LINE.sub("", text)):
        scenario = match_inline_scenario(block)
        if scenario is not None:
            criteria.append(
                AcceptanceCriterion(description=" ".join(block.split()), scenario=scenario)
            )
    return tuple(c for c in criteria if c.description)[:MAX_CRITERIA]


def create_fallback_issue(body: str, config: FallbackConfig | None = None) -> ParsedIssue:
    """
    Build a minimal issue from raw text using only regex heuristics.

    Args:
        body: Raw issue body, possibly empty.
        config: Controls whether files, symbols, and criteria are inferred.

    Returns:
        A ParsedIssue whose ``raw_sections`` holds the original body.
    """
    config = config or FallbackConfig()
    body = body or ""

    files: tuple[str, ...] = ()
    symbols: tuple[str, ...] = ()
    criteria: tuple[AcceptanceCriterion, ...] = ()
    if config.infer_from_context and body.strip():
        files = extract_file_paths(body)
        symbols = extract_symbols(body)
        criteria = infer_acceptance_criteria(body)

    return ParsedIssue(
        source=infer_source(body),
        type=detect_type(body),
        problem_description=clean_description(body),
        context=IssueContext(
            priority=extract_priority(body) or IssuePriority.MEDIUM,
            related_files=files,
            related_symbols=symbols,
        ),
        acceptance_criteria=criteria,
        raw_sections={"body": body},
    )


# -------------------------------------------------------------------------
# Recovery
# -------------------------------------------------------------------------


def recovery_strategy(error: ParseError, config: FallbackConfig) -> str | None:
    """Strategy name for an error, or None when it cannot be recovered."""
    strategy = _RECOVERABLE.get(error.code)
    if strategy == DEFAULTS and not config.use_defaults:
        return None
    return strategy


def attempt_recovery(
    error: ParseError,
    body: str,
    context: RecoveryContext,
    config: FallbackConfig | None = None,
) -> ParsedIssue | None:
    """
    Try to produce an issue despite ``error``.

    Args:
        error: The failure that stopped the normal pipeline.
        body: Raw issue body.
        context: Recovery so far; its attempt count enforces the cap.
        config: Recovery configuration.

    Returns:
        A fallback issue, or None when the attempt cap is reached or the
        error code is not recoverable.
    """
    config = config or FallbackConfig()

    if context.attempts >= config.max_attempts:
        logger.warning(
            f"Recovery refused after {context.attempts} attempt(s) (max {config.max_attempts})"
        )
        return None

    strategy = recovery_strategy(error, config)
    if strategy is None:
        logger.debug(f"No recovery strategy for {error.code.value}")
        return None

    if config.log_warnings:
        logger.warning(f"Recovering from {error} using {strategy}")
    return create_fallback_issue(body, config)


def format_recovery_log(context: RecoveryContext, status: str = "success") -> str:
    """
    One-line recovery summary for operators.

    Example:
        ``Parse recovery success | attempts: 2 | fallbacks: text-based-parsing |
        errors: AST_ERROR: Failed to parse markdown``
    """
    parts = [f"Parse recovery {status}", f"attempts: {context.attempts}"]
    if context.fallbacks_used:
        parts.append(f"fallbacks: {', '.join(context.fallbacks_used)}")
    if context.errors:
        parts.append(
            "errors: " + "; ".join(f"{e.code.value}: {e.message}" for e in context.errors)
        )
    return " | ".join(parts)
