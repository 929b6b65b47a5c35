"""Turnip price pattern calculator CLI.

Usage examples:
  turnip-calc 90 55 52 ? 43 --last-week smallspike
  python -m turnip_calc.apps.cli 104 90 86 --debug
"""
from __future__ import annotations
import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

from turnip_calc.core.config import ConfigError, load_settings
from turnip_calc.core.custom_types import Pattern, Price
from turnip_calc.patterns.engine import run

MISSING_PRICE = "?"

PATTERN_CHOICES = ["decreasing", "random", "smallspike", "largespike"]

AFTER_HELP = (
    "This tool calculates the chance of each pattern based on observed turnip\n"
    "prices. Specifying last week's pattern will increase the accuracy of\n"
    "results, since the previous pattern affects the chance of the next one.\n\n"
    "Missed prices can be replaced with '?'.\n\n"
    "Example usage: turnip-calc 90 --last-week smallspike 55 52 ? 43"
)


def setup_logging(log_level: str, log_file: Optional[str] = None) -> None:
    """Route loguru output to stderr (and optionally a file)."""
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper(), format="{time:HH:mm:ss.SSS} - {level} - {message}")
    if log_file:
        logger.add(
            log_file,
            level=log_level.upper(),
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} - {level} - {message}",
            rotation="10 MB",
        )


def _effective_level(log_level: str, debug: bool) -> str:
    if debug and log_level.upper() not in ("TRACE", "DEBUG"):
        return "DEBUG"
    return log_level


def _parse_pattern(value: str) -> Pattern:
    try:
        return Pattern.from_name(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid pattern '{value}' (choose from {', '.join(PATTERN_CHOICES)})")


def _parse_price(value: str) -> Price:
    if value == MISSING_PRICE:
        return None
    try:
        price = int(value)
    except ValueError:
        price = -1
    if price < 0:
        raise argparse.ArgumentTypeError(
            f"the argument '{value}' should be a non-negative integer or the character '{MISSING_PRICE}'")
    return price


def _parse_base_price(value: str) -> int:
    try:
        price = int(value)
    except ValueError:
        price = -1
    if price < 0:
        raise argparse.ArgumentTypeError(f"the base price '{value}' should be a non-negative integer")
    return price


def create_parser() -> argparse.ArgumentParser:
    """Creates the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="turnip-calc",
        description="Calculate the chance of each turnip price pattern for the week.",
        epilog=AFTER_HELP,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("base_price", metavar="BASE_PRICE", type=_parse_base_price,
                        help="The price you bought turnips for.")
    parser.add_argument("prices", metavar="PRICES", type=_parse_price, nargs="*",
                        help="The sell prices observed so far in order.")
    parser.add_argument("-l", "--last-week", type=_parse_pattern, default=None,
                        help=f"Last week's pattern ({', '.join(PATTERN_CHOICES)}).")
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug dumps.")
    parser.add_argument("--config", type=str, default=None, help="Path to a YAML configuration file.")
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def format_results(results) -> List[str]:
    lines = ["Analysis:"]
    for pattern, chance in results:
        lines.append(f"{pattern.display_name}: {chance * 100.0:.0f}%")
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entrypoint."""
    parser = create_parser()
    # Options may appear between prices.
    args = parser.parse_intermixed_args(argv)

    # Sinks for the settings load itself; reconfigured once settings are known.
    setup_logging(_effective_level(args.log_level or "INFO", args.debug))
    logger.enable("turnip_calc")

    load_dotenv()  # TURNIP_CALC_* overrides may live in a .env file
    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        parser.error(str(e))

    if len(args.prices) > settings.engine.max_observations:
        parser.error(f"at most {settings.engine.max_observations} prices can be given, got {len(args.prices)}")

    # CLI > config > default
    setup_logging(_effective_level(args.log_level or settings.logging.level, args.debug),
                  settings.logging.log_file)

    results = run(args.last_week, args.base_price, args.prices, debug=args.debug, settings=settings)
    if not results:
        print("These prices did not match any known pattern. Either your "
              "numbers are wrong, or there is a bug.")
        return 1

    for line in format_results(results):
        print(line)
    return 0


if __name__ == '__main__':  # pragma: no cover
    sys.exit(main())
