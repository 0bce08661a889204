"""Command-line interface that replays scripted listbox interactions."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, TextIO

from config_manager import Config, EngineSettings
from constants import LOG_LEVELS
from logging_utils import configure_logging, level_from_name, logger
from services.session import ReplayError, ReplaySession


@dataclass(frozen=True)
class CLIOptions:
    """Typed representation of CLI arguments for easier testing."""

    options: tuple[str, ...]
    events: tuple[str, ...]
    disabled: tuple[str, ...] = ()
    value: Optional[str] = None
    listbox_disabled: bool = False
    config_path: Optional[Path] = None
    log_level: str = "WARNING"


def _split_csv(values: Iterable[str]) -> tuple[str, ...]:
    """Normalise comma-separated values into a tuple of unique strings."""

    normalised: list[str] = []
    for value in values:
        for part in value.split(","):
            stripped = part.strip()
            if stripped:
                normalised.append(stripped)
    return tuple(dict.fromkeys(normalised))


def build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser for the CLI."""

    parser = argparse.ArgumentParser(
        description="Replay keyboard and pointer events against a headless listbox",
    )
    parser.add_argument(
        "events",
        nargs="*",
        help=(
            "Events to replay in order: key names (ArrowDown, Enter, Space, ...), "
            "single characters, wait:MS, click, click:OPTION, hover:OPTION, "
            "leave, outside, outside:focusable, blur"
        ),
    )
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        dest="options",
        help="Option label; repeat or separate with commas",
    )
    parser.add_argument(
        "--disabled",
        action="append",
        default=[],
        help="Label of an option that starts disabled",
    )
    parser.add_argument("--value", help="Label of the initially selected option")
    parser.add_argument(
        "--listbox-disabled",
        action="store_true",
        help="Start with the whole listbox disabled",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="INI file holding engine settings (created with defaults when missing)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Console log level",
    )
    return parser


def parse_arguments(argv: Sequence[str] | None = None) -> CLIOptions:
    """Parse raw command-line arguments into :class:`CLIOptions`."""

    parser = build_parser()
    args = parser.parse_args(argv)
    options = _split_csv(args.options)
    if not options:
        parser.error("at least one --option is required")

    return CLIOptions(
        options=options,
        events=tuple(args.events),
        disabled=_split_csv(args.disabled),
        value=args.value,
        listbox_disabled=args.listbox_disabled,
        config_path=args.config,
        log_level=args.log_level,
    )


def _load_settings(options: CLIOptions) -> EngineSettings:
    if options.config_path is None:
        return EngineSettings()
    return Config(str(options.config_path)).settings


def run_cli(
    options: CLIOptions,
    *,
    stdout: TextIO | None = None,
    configure_logger_handler: bool = True,
) -> int:
    """Replay the scripted events and print one JSON line per step."""

    out = stdout or sys.stdout
    level = level_from_name(options.log_level, logging.WARNING)
    if configure_logger_handler and not logger.handlers:
        configure_logging(handler=logging.StreamHandler(stream=sys.stderr), level=level)
    else:
        logger.setLevel(level)

    settings = _load_settings(options)
    try:
        session = ReplaySession(
            options.options,
            disabled=options.disabled,
            value=options.value,
            listbox_disabled=options.listbox_disabled,
            settings=settings,
        )
    except ReplayError as exc:
        logger.error("%s", exc)
        return 2

    try:
        for token in options.events:
            try:
                record = session.apply(token)
            except ReplayError as exc:
                logger.error("%s", exc)
                return 2
            out.write(json.dumps(record.as_dict()) + "\n")
    finally:
        session.close()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point used by ``python -m services.cli``."""

    options = parse_arguments(argv)
    try:
        return run_cli(options)
    except KeyboardInterrupt:
        logger.warning("Replay interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
