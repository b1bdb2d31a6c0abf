"""
Ports - Abstract interfaces that adapters implement.
"""

from .config_provider import (
    AppConfig,
    ConfigProviderPort,
    FallbackConfig,
    LoggingConfig,
    ParserOptions,
)
from .markdown_ast import MarkdownAstPort


__all__ = [
    "AppConfig",
    "ConfigProviderPort",
    "FallbackConfig",
    "LoggingConfig",
    "MarkdownAstPort",
    "ParserOptions",
]
