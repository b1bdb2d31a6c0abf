"""
CLI App - Main entry point for the issue-parser command line tool.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from issue_parser.adapters.config import EnvironmentConfigProvider
from issue_parser.application.parsing import IssueParser
from issue_parser.core.exceptions import ConfigError

from .exit_codes import ExitCode
from .logging import get_logger, setup_logging
from .output import Console


def create_parser() -> argparse.ArgumentParser:
    """
    Create the command-line argument parser for issue-parser.

    Returns:
        Configured ArgumentParser instance.
    """
    parser = argparse.ArgumentParser(
        prog="issue-parser",
        description="Parse a Markdown issue body into a structured, validated issue",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Parse a file and print a summary
  issue-parser ISSUE.md

  # Parse from stdin and print JSON
  cat ISSUE.md | issue-parser - --json

  # Treat validation warnings as failures, never fall back
  issue-parser ISSUE.md --strict --no-fallback

  # Allow a single recovery attempt and log as JSON
  issue-parser ISSUE.md --max-attempts 2 --log-format json

Configuration is read from .issue-parser.yaml / .toml, pyproject.toml
[tool.issue-parser], ISSUE_PARSER_* environment variables and .env.
Command line flags win over all of them.
        """,
    )

    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="Path to the issue Markdown file, or - for stdin (default)",
    )

    # Parse options
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail when validation reports any warning",
    )
    parser.add_argument(
        "--no-fallback",
        dest="enable_fallback",
        action="store_false",
        default=None,
        help="Disable recovery; parse failures become errors",
    )
    parser.add_argument(
        "--skip-validation",
        action="store_true",
        default=None,
        help="Skip validation of the parsed issue",
    )
    parser.add_argument(
        "--max-attempts",
        type=int,
        default=None,
        metavar="N",
        help="Maximum recovery attempts per parse (default: 3)",
    )

    # Configuration
    parser.add_argument(
        "--config", "-c", type=str, help="Path to config file (.issue-parser.yaml, .toml)"
    )

    # Output
    parser.add_argument(
        "--json", action="store_true", help="Print the parse result as JSON on stdout"
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    verbosity.add_argument(
        "--quiet", "-q", action="store_true", help="Only print errors and the final result"
    )

    # Logging
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Log level (default: INFO, or DEBUG with --verbose)",
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=None,
        help="Log format: text (default) or json",
    )
    parser.add_argument("--log-file", type=str, default=None, help="Also write logs to this file")

    return parser


def cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map parsed arguments to dotted config keys; unset flags map to None."""
    return {
        "strict": args.strict,
        "enable_fallback": args.enable_fallback,
        "skip_validation": args.skip_validation,
        "fallback.max_attempts": args.max_attempts,
        "logging.level": args.log_level,
        "logging.format": args.log_format,
        "logging.file": args.log_file,
    }


def read_input(source: str) -> str:
    """
    Read the issue body from a file path or stdin.

    Raises:
        FileNotFoundError: If the path does not exist.
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(source)
    return path.read_text(encoding="utf-8")


def _log_level(args: argparse.Namespace, configured: str) -> int:
    if args.log_level:
        return logging.getLevelName(args.log_level)
    if args.verbose:
        return logging.DEBUG
    if args.quiet:
        return logging.ERROR
    return logging.getLevelName(configured)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the issue-parser CLI.

    Args:
        argv: Arguments to parse, defaults to ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.max_attempts is not None and args.max_attempts < 0:
        parser.error("--max-attempts must not be negative")

    console = Console(
        color=not args.no_color,
        verbose=args.verbose,
        quiet=args.quiet,
        json_mode=args.json,
    )

    config_provider = EnvironmentConfigProvider(
        config_file=Path(args.config) if args.config else None,
        cli_overrides=cli_overrides(args),
    )
    errors = config_provider.validate()
    if errors:
        for error in errors:
            console.error(error)
        if args.json:
            console.json({"success": False})
        return ExitCode.CONFIG_ERROR

    try:
        config = config_provider.load()
    except ConfigError as e:
        console.error(str(e))
        return ExitCode.from_exception(e)

    setup_logging(
        level=_log_level(args, config.logging.level),
        log_format=config.logging.format,
        log_file=config.logging.file,
    )
    logger = get_logger("issue_parser.cli", input=args.input)
    console.debug(f"Configuration: {config_provider.name}")

    try:
        body = read_input(args.input)
    except FileNotFoundError:
        console.error(f"File not found: {args.input}")
        if args.json:
            console.json({"success": False})
        return ExitCode.FILE_NOT_FOUND
    except (OSError, UnicodeDecodeError) as e:
        console.error(f"Cannot read {args.input}: {e}")
        if args.json:
            console.json({"success": False})
        return ExitCode.ERROR
    except KeyboardInterrupt:
        console.warning("Interrupted by user")
        return ExitCode.CANCELLED

    logger.debug(f"Read {len(body)} characters")

    try:
        result = IssueParser(config.parser).parse(body)
    except KeyboardInterrupt:
        console.print()
        console.warning("Interrupted by user")
        return ExitCode.CANCELLED

    if result.is_err():
        error = result.unwrap_err()
        logger.error(f"Parse failed: {error}")
        console.parse_error(error)
        return ExitCode.from_parse_error(error)

    parse_result = result.unwrap()
    console.parse_result(parse_result)

    if not parse_result.validation.valid:
        return ExitCode.VALIDATION_ERROR
    return ExitCode.SUCCESS


def run() -> None:
    """
    Entry point for the console script.

    Calls main() and exits with its return code.
    """
    sys.exit(main())


if __name__ == "__main__":
    run()
