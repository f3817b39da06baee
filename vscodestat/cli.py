"""
Command Line Entry Point

Usage:
    vscodestat publisher.extension
    vscodestat publisher.extension --out-dir stats --period month

Options not given on the command line fall back to the VSCODESTAT_*
environment variables (see vscodestat.config.settings).
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

import structlog
from pydantic import ValidationError

from vscodestat.collector import VscodeStatCollector
from vscodestat.config.logging import configure_logging
from vscodestat.config.settings import get_settings
from vscodestat.exceptions import ConfigurationError, VscodeStatError
from vscodestat.models import StatPeriod

logger = structlog.get_logger(__name__)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vscodestat",
        description="Collect VS Code Marketplace statistics into CSV files",
    )
    parser.add_argument(
        "extension",
        nargs="?",
        help="Extension id, e.g. publisher.extension",
    )
    parser.add_argument(
        "--out-dir",
        help="Directory of the CSV files; without it statistics are only printed",
    )
    parser.add_argument(
        "--period",
        choices=[p.value for p in StatPeriod],
        help="Group statistics into one file per year, month or day",
    )
    parser.add_argument(
        "--write-extension-name",
        action="store_true",
        default=None,
        help="Add an extension column",
    )
    parser.add_argument(
        "--no-merge",
        dest="merge",
        action="store_false",
        default=None,
        help="Overwrite files instead of merging with stored rows",
    )
    parser.add_argument("--postfix", help="Postfix of the CSV file names")
    parser.add_argument("--max-attempts", type=positive_int, help="Total vsce attempts (at least 1)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    return parser


def apply_args(settings, args: argparse.Namespace):
    """Settings overridden by the given command line options"""
    collector_overrides = {
        "extension_name": args.extension,
        "out_dir": args.out_dir,
        "date_period": StatPeriod.parse(args.period) if args.period else None,
        "write_extension_name": args.write_extension_name,
        "merge_stored_data": args.merge,
        "file_postfix": args.postfix,
    }
    collector = settings.collector.model_copy(
        update={k: v for k, v in collector_overrides.items() if v is not None}
    )

    fetch = settings.fetch
    if args.max_attempts is not None:
        fetch = fetch.model_copy(update={"max_attempts": args.max_attempts})

    return settings.model_copy(update={"collector": collector, "fetch": fetch})


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = apply_args(get_settings(), args)
    except ValidationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 2

    try:
        collector = VscodeStatCollector.from_settings(settings)
        merged = asyncio.run(collector.write_stats())
    except ConfigurationError as e:
        logger.error("Invalid configuration", error=str(e))
        return 2
    except VscodeStatError as e:
        logger.error("Statistics collection failed", error=str(e), error_type=type(e).__name__)
        return 1

    output = {name: rows.to_dicts() for name, rows in merged.items()}
    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
