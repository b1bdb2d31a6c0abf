"""Allow ``python -m issue_parser``."""

from issue_parser.cli.app import run


run()
