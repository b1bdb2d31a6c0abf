"""
Fixtures for CLI tests.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from issue_parser.adapters.config import ENV_PREFIX
from issue_parser.cli.logging import JSONFormatter, TextFormatter


@pytest.fixture(autouse=True)
def restore_root_logging() -> Iterator[None]:
    """Drop handlers installed by setup_logging() and restore the root level."""
    root = logging.getLogger()
    saved_level = root.level
    yield
    for handler in root.handlers[:]:
        if isinstance(handler.formatter, (JSONFormatter, TextFormatter)):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(saved_level)


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Empty working directory and HOME, no ISSUE_PARSER_* variables."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for name in list(os.environ):
        if name.startswith(ENV_PREFIX):
            monkeypatch.delenv(name)
    return tmp_path
