"""
CLI Module - Command Line Interface for issue-parser.
"""

from .app import main, run
from .exit_codes import ExitCode
from .logging import ContextLogger, JSONFormatter, TextFormatter, get_logger, setup_logging
from .output import Console


__all__ = [
    "Console",
    "ContextLogger",
    "ExitCode",
    "JSONFormatter",
    "TextFormatter",
    "get_logger",
    "main",
    "run",
    "setup_logging",
]
