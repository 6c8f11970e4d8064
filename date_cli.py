#!/usr/bin/env python3
# PYTHON_ARGCOMPLETE_OK
"""
flexidate CLI

Command-line tool for trying date construction from the terminal.
Every command prints a JSON document.

Usage:
    python date_cli.py parse <input> [--timezone TZ] [--format FMT] [--output FMT]
    python date_cli.py limit-format <format> <part> [<part> ...]
    python date_cli.py week <date> [--iso] [--first-day N]

Exit code is 1 when the parsed date has errors, 0 otherwise.
"""
import argparse
import json
import sys
from pathlib import Path

import argcomplete

# Add project root to path (file is in root)
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from flexidate.core.logging_config import configure_logging, get_logger
from flexidate.core.services.date_object import DateValue
from flexidate.core.utils import calendar_utils
from flexidate.core.utils.granularity import GRANULARITY_PARTS, format_order, limit_format

logger = get_logger(__name__)


def cmd_parse(value: str, timezone: str = None, fmt: str = None, output: str = "c",
              validate_format: bool = True) -> dict:
    """Build a DateValue and describe it."""
    date = DateValue(value, timezone, fmt, settings={"validate_format": validate_format})
    return {
        "input": value,
        "format": fmt,
        "value": date.format(output),
        "timezone": date.timezone_name,
        "offset": date.offset,
        "timestamp": date.timestamp,
        "granularity": list(date.granularity),
        "parts": date.to_array(),
        "errors": [error.model_dump(mode="json") for error in date.errors],
        }


def cmd_limit_format(fmt: str, parts: list) -> dict:
    """Limit a display pattern to some date parts."""
    return {
        "format": fmt,
        "parts": parts,
        "limited": limit_format(fmt, parts),
        "order": format_order(fmt),
        }


def cmd_week(value: str, iso: bool = False, first_day: int = None) -> dict:
    """Calendar week number and range of a date."""
    day = DateValue(value, "UTC")
    iso8601 = True if iso else None
    week = calendar_utils.calendar_week(day, first_day, iso8601)
    week_range = None
    if week is not None:
        week_year = day.datetime.isocalendar()[0] if iso else day.datetime.year
        week_range = calendar_utils.calendar_week_range(week, week_year, first_day, iso8601)
    return {
        "date": day.format("Y-m-d"),
        "week": week,
        "weeks_in_year": calendar_utils.weeks_in_year(day.datetime.year, first_day, iso8601),
        "range": [d.isoformat() for d in week_range] if week_range else None,
        "errors": day.error_messages,
        }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="flexidate CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python date_cli.py parse "2009-03-07 10:30" --timezone America/Chicago
  python date_cli.py parse 2009 --format Y --output Y
  python date_cli.py limit-format "F j, Y - H:i" year month day
  python date_cli.py week 2024-01-07 --first-day 1
        """
        )
    parser.add_argument("--log-level", default=None, help="Logging level (default: settings LOG_LEVEL)")
    parser.add_argument("--plain-logs", action="store_true", help="Human-readable log lines instead of JSON")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # parse
    parse_parser = subparsers.add_parser("parse", help="Build a date from input")
    parse_parser.add_argument("input", help="Date input (string or Unix timestamp)")
    parse_parser.add_argument("--timezone", "-z", default=None, help="Timezone name or offset")
    parse_parser.add_argument("--format", "-f", default=None, help="PHP date()-style parse pattern")
    parse_parser.add_argument("--output", "-o", default="c", help="Output pattern (default: c)")
    parse_parser.add_argument("--no-validate", action="store_true", help="Skip round-trip format validation")

    # limit-format
    limit_parser = subparsers.add_parser("limit-format", help="Limit a pattern to some date parts")
    limit_parser.add_argument("format", help="PHP date()-style pattern")
    limit_parser.add_argument("parts", nargs="+", choices=GRANULARITY_PARTS, help="Parts to keep")

    # week
    week_parser = subparsers.add_parser("week", help="Calendar week of a date")
    week_parser.add_argument("date", help="Date (YYYY-MM-DD or free-form)")
    week_parser.add_argument("--iso", action="store_true", help="Use ISO-8601 weeks")
    week_parser.add_argument("--first-day", type=int, choices=range(7), default=None,
                             help="First day of the week (0 = Sunday)")

    argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging(args.log_level, json_logs=not args.plain_logs)
    logger.debug("Running command", command=args.command)

    if args.command == "parse":
        result = cmd_parse(args.input, args.timezone, args.format, args.output, not args.no_validate)
    elif args.command == "limit-format":
        result = cmd_limit_format(args.format, args.parts)
    else:
        result = cmd_week(args.date, args.iso, args.first_day)

    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 1 if result.get("errors") else 0


if __name__ == "__main__":
    sys.exit(main())
