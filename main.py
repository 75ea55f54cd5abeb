# main.py

"""Entry point for the multiscrape command-line interface."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import get_logger, setup_logging
from src.config.source_specs import SOURCE_SPECS

logger = get_logger("main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(spec.id for spec in SOURCE_SPECS)

    parser = argparse.ArgumentParser(
        prog="multiscrape",
        description="Multi-marketplace product listing aggregator.",
        epilog=f"Available sources: {valid_ids}",
    )
    parser.add_argument(
        "term",
        nargs="?",
        default=None,
        help="Search term.",
    )
    parser.add_argument(
        "-p",
        "--page",
        type=int,
        default=1,
        help="Result page requested from sources that paginate (default: 1).",
    )
    parser.add_argument(
        "-s",
        "--sources",
        default=None,
        help="Comma-separated source IDs (default: all).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Echo INFO-level log records to stderr.",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Check source connectivity and browser availability.",
    )
    return parser


def _run_scrape(args: argparse.Namespace) -> None:
    """Run one scrape and exit with its status code."""
    from src.cli.runner import cli_scrape

    exit_code = asyncio.run(
        cli_scrape(
            term=args.term,
            page=args.page,
            source_csv=args.sources,
            output_format=args.output_format,
        )
    )
    sys.exit(exit_code)


def _run_health_check() -> None:
    """Run source connectivity health check."""
    from src.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the health check or a scrape."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(
        console_level=logging.INFO if args.verbose else logging.WARNING
    )
    logger.info("multiscrape starting, log file: %s", log_file)

    if args.health:
        _run_health_check()
    else:
        _run_scrape(args)


if __name__ == "__main__":
    main()
