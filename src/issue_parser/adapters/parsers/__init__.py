"""
Section parsers - One parser per issue section.

Each ``parse_*`` function takes a document root node and returns a
``Result``; each ``parse_*_from_text`` function works on raw text.
"""

from .acceptance_parser import (
    are_all_criteria_completed,
    count_criteria,
    format_scenario,
    parse_acceptance_criteria,
    parse_acceptance_criteria_from_text,
)
from .code_analysis_parser import (
    extract_error_message,
    extract_error_type,
    parse_code_analysis,
    parse_code_analysis_from_text,
    parse_stack_trace,
)
from .context_parser import (
    extract_file_paths,
    extract_priority,
    extract_symbols,
    parse_context,
    parse_context_from_text,
)
from .problem_parser import (
    extract_problem_keywords,
    parse_problem_description,
    parse_problem_from_text,
    summarize_problem,
)
from .source_parser import ParsedSource, detect_source, parse_source, parse_source_from_text
from .suggested_fix_parser import (
    calculate_confidence,
    is_valid_suggested_fix,
    parse_suggested_fix,
    parse_suggested_fix_from_text,
)
from .type_parser import detect_type, is_valid_issue_type, parse_type, parse_type_from_text


__all__ = [
    "ParsedSource",
    "are_all_criteria_completed",
    "calculate_confidence",
    "count_criteria",
    "detect_source",
    "detect_type",
    "extract_error_message",
    "extract_error_type",
    "extract_file_paths",
    "extract_priority",
    "extract_problem_keywords",
    "extract_symbols",
    "format_scenario",
    "is_valid_issue_type",
    "is_valid_suggested_fix",
    "parse_acceptance_criteria",
    "parse_acceptance_criteria_from_text",
    "parse_code_analysis",
    "parse_code_analysis_from_text",
    "parse_context",
    "parse_context_from_text",
    "parse_problem_description",
    "parse_problem_from_text",
    "parse_source",
    "parse_source_from_text",
    "parse_stack_trace",
    "parse_suggested_fix",
    "parse_suggested_fix_from_text",
    "parse_type",
    "parse_type_from_text",
    "summarize_problem",
]
