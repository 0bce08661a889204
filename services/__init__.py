"""Service layer abstractions for the listbox engine."""

from .cli import CLIOptions, build_parser
from .cli import main as cli_main
from .cli import parse_arguments, run_cli
from .session import ReplayError, ReplaySession, StepRecord, parse_event

__all__ = [
    "CLIOptions",
    "ReplayError",
    "ReplaySession",
    "StepRecord",
    "build_parser",
    "cli_main",
    "parse_arguments",
    "parse_event",
    "run_cli",
]
