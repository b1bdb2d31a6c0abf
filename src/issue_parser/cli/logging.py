"""
Logging - Structured log output for the issue-parser CLI.

Two formats are available:

- text: ``2026-01-05 10:30:00 - IssueParser - WARNING - message``
- json: one JSON object per line, for log aggregation pipelines

Example JSON line::

    {"timestamp": "2026-01-05T10:30:00.123Z", "level": "WARNING",
     "logger": "IssueParser", "message": "usedFallback=true | ..."}
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any, TextIO


# LogRecord attributes that are not user-supplied context
_RESERVED_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

NOISY_LOGGERS = ("markdown_it", "asyncio", "urllib3")


def _context_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


class JSONFormatter(logging.Formatter):
    """
    Format log records as single-line JSON objects.

    Extra attributes on a record (``logger.info(..., extra={...})``) are
    collected under ``context``.
    """

    def __init__(
        self,
        include_timestamp: bool = True,
        include_level: bool = True,
        include_logger: bool = True,
        include_location: bool = False,
        static_fields: dict[str, Any] | None = None,
    ):
        """
        Initialize the JSON formatter.

        Args:
            include_timestamp: Add an ISO-8601 UTC ``timestamp``.
            include_level: Add ``level``.
            include_logger: Add ``logger``.
            include_location: Add ``location`` (file, line, function).
            static_fields: Fields added to every record, e.g. a service name.
        """
        super().__init__()
        self.include_timestamp = include_timestamp
        self.include_level = include_level
        self.include_logger = include_logger
        self.include_location = include_location
        self.static_fields = static_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {}

        if self.include_timestamp:
            created = datetime.fromtimestamp(record.created, tz=timezone.utc)
            data["timestamp"] = created.strftime("%Y-%m-%dT%H:%M:%S.") + f"{created.microsecond // 1000:03d}Z"
        if self.include_level:
            data["level"] = record.levelname
        if self.include_logger:
            data["logger"] = record.name

        data["message"] = record.getMessage()
        data.update(self.static_fields)

        if self.include_location:
            data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        context = _context_fields(record)
        if context:
            data["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            data["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": "".join(traceback.format_exception(exc_type, exc_value, exc_tb)),
            }

        return json.dumps(data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter with optional colors and ``key=value`` context."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "\033[36m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1m\033[31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True, include_context: bool = False):
        super().__init__(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        output = super().format(record)

        if self.include_context:
            context = _context_fields(record)
            if context:
                output += " | " + " ".join(f"{key}={value}" for key, value in context.items())

        if self.use_colors:
            color = self.LEVEL_COLORS.get(record.levelno, "")
            output = f"{color}{output}{self.RESET}"
        return output


class ContextLogger:
    """
    Logger wrapper that attaches bound context to every record.

    Example:
        >>> log = ContextLogger("IssueParser", {"file": "issue.md"})
        >>> log.bind(attempt=2).warning("Recovering")
    """

    def __init__(self, name: str, context: dict[str, Any] | None = None):
        self._logger = logging.getLogger(name)
        self._context = dict(context or {})

    def bind(self, **context: Any) -> ContextLogger:
        """New logger with ``context`` merged over the current context."""
        return ContextLogger(self._logger.name, {**self._context, **context})

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        extra = {**self._context, **kwargs.pop("extra", {})}
        self._logger.log(level, msg, *args, extra=extra, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, msg, *args, **kwargs)


def setup_logging(
    level: int = logging.INFO,
    log_format: str = "text",
    static_fields: dict[str, Any] | None = None,
    log_file: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Configure root logging for the CLI.

    Existing root handlers are replaced. Logs go to stderr so that stdout
    stays clean for ``--json`` output.

    Args:
        level: Root log level.
        log_format: "text" or "json".
        static_fields: Fields added to every JSON record.
        log_file: Also write logs to this file.
        stream: Console stream, defaults to stderr.
    """
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    console_stream = stream or sys.stderr
    formatter: logging.Formatter
    if log_format == "json":
        formatter = JSONFormatter(static_fields=static_fields)
    else:
        use_colors = hasattr(console_stream, "isatty") and console_stream.isatty()
        formatter = TextFormatter(use_colors=use_colors)

    console_handler = logging.StreamHandler(console_stream)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            JSONFormatter(static_fields=static_fields)
            if log_format == "json"
            else TextFormatter(use_colors=False)
        )
        root.addHandler(file_handler)

    root.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str, **context: Any) -> ContextLogger:
    """ContextLogger for ``name`` with optional bound context."""
    return ContextLogger(name, context)
