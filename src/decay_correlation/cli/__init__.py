"""Command line interface for decay-correlation."""

from decay_correlation.cli.app import build_parser, main, run_cli
from decay_correlation.cli.errors import CliError

__all__ = ["CliError", "build_parser", "main", "run_cli"]
