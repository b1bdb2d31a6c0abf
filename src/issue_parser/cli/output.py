"""
Output - Console output formatting for parse results.

Provides pretty-printed output with colors and formatting.
"""

from __future__ import annotations

import json
import sys
from typing import Any

from issue_parser.application.parsing import ParseResult
from issue_parser.core.domain.errors import ParseError
from issue_parser.core.domain.value_objects import ValidationResult
from issue_parser.core.validation import get_validation_summary


class Colors:
    """
    ANSI color codes for terminal output.

    Attributes:
        RESET: Reset all formatting to default.
        BOLD: Make text bold.
        DIM: Make text dimmed/faded.
        RED: Red text color.
        GREEN: Green text color.
        YELLOW: Yellow text color.
        BLUE: Blue text color.
        CYAN: Cyan text color.
    """

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


class Symbols:
    """Unicode symbols for terminal output."""

    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"
    INFO = "ℹ"
    BOX_H = "─"


class Console:
    """
    Console output helper with colors and formatting.

    Attributes:
        color: Whether to use ANSI color codes.
        verbose: Whether to print debug messages.
        quiet: Whether to suppress most output (for CI/scripting).
        json_mode: Whether to output JSON format for programmatic use.
    """

    def __init__(
        self,
        color: bool = True,
        verbose: bool = False,
        quiet: bool = False,
        json_mode: bool = False,
    ):
        """
        Initialize the console output helper.

        Args:
            color: Enable colored output. Automatically disabled if stdout is not a TTY.
            verbose: Enable verbose debug output.
            quiet: Suppress most output, only show errors and final summary.
            json_mode: Output JSON format instead of text.
        """
        self.json_mode = json_mode
        self.color = color and sys.stdout.isatty() and not json_mode
        self.verbose = verbose
        self.quiet = quiet or json_mode  # JSON mode implies quiet for intermediate output

        self._json_errors: list[str] = []

        # Quiet mode overrides verbose
        if self.quiet:
            self.verbose = False

    def _c(self, text: str, *codes: str) -> str:
        """Apply color codes to text, or return it unchanged when color is off."""
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET

    def print(self, text: str = "", force: bool = False) -> None:
        """
        Print text to stdout.

        Args:
            text: Text to print. Defaults to empty string for blank line.
            force: Print even in quiet mode.
        """
        if self.quiet and not force:
            return
        print(text)

    def header(self, text: str) -> None:
        if self.quiet:
            return
        width = max(len(text) + 4, 50)
        border = self._c(Symbols.BOX_H * width, Colors.CYAN) if self.color else "-" * width

        self.print()
        self.print(border)
        self.print(self._c(f"  {text}", Colors.BOLD, Colors.CYAN))
        self.print(border)
        self.print()

    def section(self, text: str) -> None:
        if self.quiet:
            return
        self.print()
        self.print(self._c(f"{Symbols.ARROW} {text}", Colors.BOLD, Colors.BLUE))

    def success(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.CHECK} {text}", Colors.GREEN))

    def error(self, text: str) -> None:
        """
        Print an error message with cross symbol.

        Always prints, to stderr, even in quiet mode. Collected in JSON mode.
        """
        if self.json_mode:
            self._json_errors.append(text)
            return
        print(self._c(f"  {Symbols.CROSS} {text}", Colors.RED), file=sys.stderr)

    def warning(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.WARN} {text}", Colors.YELLOW))

    def info(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"  {Symbols.INFO} {text}", Colors.CYAN))

    def detail(self, text: str) -> None:
        if self.quiet:
            return
        self.print(self._c(f"    {text}", Colors.DIM))

    def debug(self, text: str) -> None:
        """Print debug message (only visible in verbose mode)."""
        if self.verbose:
            self.print(self._c(f"  [DEBUG] {text}", Colors.DIM))

    def item(self, label: str, value: Any) -> None:
        """Print a ``label: value`` line."""
        if self.quiet:
            return
        self.print(f"  {self._c(f'{label}:', Colors.BOLD)} {value}")

    # -------------------------------------------------------------------------
    # Parse output
    # -------------------------------------------------------------------------

    def json(self, data: dict[str, Any]) -> None:
        """Write a JSON document to stdout, including collected errors."""
        if self._json_errors:
            data = {**data, "errors": list(self._json_errors)}
        print(json.dumps(data, indent=2, ensure_ascii=False))

    def parse_error(self, error: ParseError) -> None:
        """Report a failed parse, or emit it as JSON in JSON mode."""
        if self.json_mode:
            self.json({"success": False, "error": error.to_dict()})
            return
        self.error(str(error))

    def validation(self, validation: ValidationResult) -> None:
        """Print validation errors and warnings."""
        summary = get_validation_summary(validation)
        if validation.valid and not validation.warnings:
            self.success(summary)
            return

        if validation.valid:
            self.warning(summary)
        else:
            self.error(summary)
        for issue in validation.errors:
            self.detail(f"{Symbols.CROSS} [{issue.code}] {issue.field}: {issue.message}")
        for issue in validation.warnings:
            self.detail(f"{Symbols.WARN} [{issue.code}] {issue.field}: {issue.message}")

    def parse_result(self, result: ParseResult) -> None:
        """Print a parse result, or emit ``result.to_dict()`` as JSON in JSON mode."""
        if self.json_mode:
            self.json({"success": True, **result.to_dict()})
            return

        issue = result.issue
        if self.quiet:
            self.print(
                f"{issue.type.value} | {issue.source.value} | {get_validation_summary(result.validation)}",
                force=True,
            )
            return

        self.header("Parsed Issue")
        self.item("Source", issue.source.value)
        if issue.source_id:
            self.item("Source ID", issue.source_id)
        if issue.source_url:
            self.item("Source URL", issue.source_url)
        self.item("Type", issue.type.value)
        self.item("Priority", issue.context.priority.value)

        self.section("Problem")
        self.detail(issue.problem_description)

        if issue.context.related_files or issue.context.related_symbols:
            self.section("Context")
            for path in issue.context.related_files:
                self.detail(f"{Symbols.DOT} {path}")
            if issue.context.related_symbols:
                self.detail(f"symbols: {', '.join(issue.context.related_symbols)}")

        analysis = issue.code_analysis
        if analysis is not None:
            self.section("Code Analysis")
            location = analysis.file_path or "(unknown file)"
            if analysis.start_line is not None:
                location += f":{analysis.start_line}"
                if analysis.end_line is not None and analysis.end_line != analysis.start_line:
                    location += f"-{analysis.end_line}"
            self.detail(location)
            if analysis.error_type or analysis.error_message:
                self.detail(f"{analysis.error_type or 'Error'}: {analysis.error_message or ''}".rstrip())
            for frame in analysis.stack_trace or ():
                self.detail(f"  at {frame}")

        fix = issue.suggested_fix
        if fix is not None:
            self.section(f"Suggested Fix (confidence {fix.confidence:.2f})")
            self.detail(fix.description)
            for index, step in enumerate(fix.steps, 1):
                self.detail(f"{index}. {step}")

        if issue.acceptance_criteria:
            self.section("Acceptance Criteria")
            for criterion in issue.acceptance_criteria:
                box = "[x]" if criterion.completed else "[ ]"
                self.detail(f"{box} {criterion.description}")

        self.section("Validation")
        self.validation(result.validation)

        if result.used_fallback:
            fallbacks = ", ".join(result.recovery.fallbacks_used) if result.recovery else ""
            self.warning(f"Recovered with fallback parsing ({fallbacks})")
