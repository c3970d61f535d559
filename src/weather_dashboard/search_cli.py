"""CLI: resolve a place query across providers and print the merged results."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.table import Table

from .config import Settings, load_settings
from .exceptions import ConfigError
from .location.models import AggregatedResult
from .location.resolver import build_resolver
from .log_setup import setup_logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse search CLI arguments."""
    parser = argparse.ArgumentParser(description="Search for places by name.")
    parser.add_argument("query", help="Free-text place name, e.g. 'Springfield'.")
    parser.add_argument(
        "--max-print",
        type=int,
        default=None,
        help="Number of results to print.",
    )
    return parser.parse_args(argv)


def _print_results(console: Console, result: AggregatedResult, max_print: int) -> None:
    console.print(
        f"Query={result.query!r} results={len(result.results)} "
        f"fallback={'yes' if result.used_fallback else 'no'}"
    )
    if not result.results:
        console.print("No matching places found.")
        return
    console.print(f"Top match: {result.results[0].display_name}")

    table = Table(title="Place Matches")
    table.add_column("#", justify="right")
    table.add_column("Name", overflow="fold")
    table.add_column("Region", overflow="fold")
    table.add_column("Country", overflow="fold")
    table.add_column("Lat", justify="right")
    table.add_column("Lon", justify="right")
    table.add_column("Source")

    for position, candidate in enumerate(result.results[:max_print], start=1):
        table.add_row(
            str(position),
            candidate.name,
            candidate.region or "-",
            candidate.country,
            f"{candidate.latitude:.4f}",
            f"{candidate.longitude:.4f}",
            candidate.provider,
        )
    console.print(table)


async def _resolve(
    settings: Settings, query: str, logger: logging.Logger
) -> AggregatedResult:
    async with build_resolver(settings, logger=logger) as resolver:
        return await resolver.resolve_locations(query)


def main(argv: list[str] | None = None) -> int:
    """Run a single place search."""
    args = parse_args(argv)
    logger = setup_logger()
    console = Console()

    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("Configuration failure: %s", exc)
        return 2
    setup_logger(level=settings.log_level)

    if args.max_print is not None and args.max_print <= 0:
        logger.error("--max-print must be > 0 when provided.")
        return 2

    result = asyncio.run(_resolve(settings, args.query, logger))
    _print_results(console, result, max_print=args.max_print or settings.search_max_print)
    return 0


if __name__ == "__main__":
    sys.exit(main())
