"""
Validator exit tool CLI entry point.

Exit validators and withdraw all funds (stake + rewards). The tool guides
the operator through choosing a beacon node and keystore directory,
selecting validators, and confirming the irreversible exit.

Usage::

    python -m validator_exit
    python -m validator_exit --beacon-url http://localhost:5052 --keystore-dir ./managed-keystores
    python -m validator_exit --config exit.yaml --no-color

Options:
    --beacon-url      Default beacon node URL offered at the prompt
    --keystore-dir    Default keystore directory offered at the prompt
    --consensus-dir   Network definition directory (testnet dir)
    --image           Lighthouse container image used to sign and broadcast
    --config          YAML file with settings
    --timeout         Beacon API request timeout in seconds
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from validator_exit.config import ExitToolConfig
from validator_exit.subsystems.operator import Console, ExitSession

VERSION = "1.0.0"

EXIT_INTERRUPTED = 130
"""Conventional exit code after SIGINT."""

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    # ANSI color codes
    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)
        timestamp = self.formatTime(record, self.datefmt)
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"
        return f"{self.CYAN}{timestamp}{self.RESET} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """
    Configure logging for the tool.

    Library modules log diagnostics. Only warnings and above are shown
    unless verbose, so they do not clutter the interactive prompts.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="validator-exit",
        description="Exit validators and withdraw all funds (stake + rewards)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--beacon-url", type=str, default=None, help="Default beacon node URL")
    parser.add_argument(
        "--keystore-dir", type=Path, default=None, help="Default keystore directory"
    )
    parser.add_argument(
        "--consensus-dir", type=Path, default=None, help="Network definition directory"
    )
    parser.add_argument("--image", type=str, default=None, help="Lighthouse container image")
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument(
        "--timeout", type=float, default=None, help="Beacon API request timeout in seconds"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def resolve_config(args: argparse.Namespace) -> ExitToolConfig:
    """
    Merge defaults, environment, config file and flags.

    Raises:
        FileNotFoundError, yaml.YAMLError, pydantic.ValidationError: On a bad config.
    """
    overrides: dict[str, Any] = {
        name: value
        for name, value in {
            "beacon_url": args.beacon_url,
            "keystore_dir": args.keystore_dir,
            "consensus_dir": args.consensus_dir,
            "lighthouse_image": args.image,
            "request_timeout": args.timeout,
        }.items()
        if value is not None
    }
    if args.config is not None:
        return ExitToolConfig.from_yaml_file(args.config, **overrides)
    return ExitToolConfig.from_env(**overrides)


def print_header(console: Console) -> None:
    console.echo()
    console.echo(f"Validator Exit Tool v{VERSION}", bold=True)
    console.echo("Exit validators and withdraw all funds (stake + rewards)", bold=True)
    console.echo()


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.no_color)
    console = Console(color=not args.no_color)

    try:
        config = resolve_config(args)
    except (OSError, ValueError, ValidationError, yaml.YAMLError) as exc:
        console.error(f"Invalid configuration: {exc}")
        return 1

    print_header(console)
    try:
        return ExitSession(config=config, console=console).run()
    except (KeyboardInterrupt, click.Abort):
        # Exits already broadcast stay broadcast. A rerun skips them.
        console.echo()
        console.info("Interrupted")
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
