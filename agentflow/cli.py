"""Command-line entry point."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

from agentflow.doctor import run_doctor

_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def _load_dotenv(path: Path) -> bool:
    """Load KEY=VALUE lines from `path` without overriding existing variables."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        return False
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        os.environ.setdefault(key, value)
    return True


def _add_global_options(parser: argparse.ArgumentParser, *, suppress: bool) -> None:
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if suppress else False,
        help="enable verbose / debug output",
    )
    parser.add_argument(
        "--output",
        default=argparse.SUPPRESS if suppress else "text",
        help="output format: text | json",
    )


def _doctor_command(args: argparse.Namespace) -> None:
    run_doctor(full=args.full)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with its subcommands."""
    parser = argparse.ArgumentParser(
        prog="agentflow", description="AI agent orchestration runtime"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_VERSION}")
    _add_global_options(parser, suppress=False)

    subcommands = parser.add_subparsers(dest="command", metavar="COMMAND")
    subcommands.required = True

    doctor = subcommands.add_parser(
        "doctor", help="check system dependencies and configuration"
    )
    doctor.add_argument(
        "--full",
        action="store_true",
        help="also run optional checks (Ollama, API keys, running server)",
    )
    _add_global_options(doctor, suppress=True)
    doctor.set_defaults(handler=_doctor_command)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the process exit code."""
    dotenv_loaded = _load_dotenv(Path(".env"))

    args = build_parser().parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    if dotenv_loaded:
        logger.info("Loaded .env file")
    logger.info("agentflow starting: version=%s", _VERSION)

    try:
        args.handler(args)
    except Exception as exc:  # noqa: BLE001 - top-level reporting
        message = str(exc)
        if message:
            print(f"Error: {message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())