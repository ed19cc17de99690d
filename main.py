"""CLI entry point for the nearby search engine."""

import argparse
import asyncio
import logging
import sys

from nearsearch.core.config import Settings
from nearsearch.core.errors import SearchError
from nearsearch.core.schemas import EntityKind, SalaryFrequency, SearchResponse
from nearsearch.pipeline.orchestrator import build_query, export_results_json, search
from nearsearch.pipeline.salary import convert_salary, format_salary_display, is_reasonable_salary
from nearsearch.sources.base import DataSource
from nearsearch.sources.memory import FileSource

KIND_CHOICES = [k.value for k in EntityKind]
FREQUENCY_CHOICES = [f.value for f in SalaryFrequency]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Nearby search - rank professionals, companies and jobs around a point",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- search subcommand ---
    search_parser = subparsers.add_parser("search", help="Run a search over the configured sources")
    search_parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    search_parser.add_argument("--term", default=None, help="Free-text search term")
    search_parser.add_argument("--lat", type=float, default=None, help="Center latitude")
    search_parser.add_argument("--lng", type=float, default=None, help="Center longitude")
    radius = search_parser.add_mutually_exclusive_group()
    radius.add_argument("--radius-km", type=float, default=None, help="Search radius in km")
    radius.add_argument("--radius-miles", type=float, default=None, help="Search radius in miles")
    search_parser.add_argument("--salary-min", type=float, default=None, help="Minimum pay")
    search_parser.add_argument("--salary-max", type=float, default=None, help="Maximum pay")
    search_parser.add_argument(
        "--salary-period",
        default="yearly",
        help="Pay frequency of --salary-min/--salary-max (default: yearly)",
    )
    search_parser.add_argument(
        "--kind",
        action="append",
        choices=KIND_CHOICES,
        help="Entity kind to search (repeatable; default: all configured)",
    )
    search_parser.add_argument("--limit", type=int, default=50, help="Max results to print (default: 50)")
    search_parser.add_argument(
        "--export",
        choices=["json"],
        help="Export results to format (json)",
    )
    search_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    # --- convert-salary subcommand ---
    convert_parser = subparsers.add_parser(
        "convert-salary",
        help="Convert a pay amount between frequencies",
    )
    convert_parser.add_argument("amount", type=float, help="Amount to convert")
    convert_parser.add_argument("--from", dest="from_period", required=True, help="Source frequency")
    convert_parser.add_argument("--to", dest="to_period", required=True, help="Target frequency")
    convert_parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )

    args = parser.parse_args(argv)
    if args.command is None:
        parser.error("a command is required (search, convert-salary)")
    return args


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_sources(settings: Settings) -> dict[EntityKind, DataSource]:
    """One file-backed source per configured entity kind."""
    return {kind: FileSource(kind, path) for kind, path in settings.sources.items()}


def print_results(response: SearchResponse, limit: int) -> None:
    shown = response.candidates[:limit] if limit > 0 else response.candidates
    print(f"\n{len(response.candidates)} results (showing {len(shown)})")
    if response.partial:
        failed = ", ".join(k.value for k in response.failed_kinds)
        print(f"  Partial results: sources failed for {failed}")
    for rank, c in enumerate(shown, start=1):
        e = c.entity
        star = "*" if e.priority else " "
        distance = f"{c.distance_km:6.1f} km" if c.distance_km is not None else "       -"
        print(
            f"{rank:3d}. {star} [{e.kind.value:<12}] {c.relevance_score:3.1f}  {distance}  "
            f"{e.display_name or e.primary_text}",
        )


def cmd_search(args: argparse.Namespace) -> None:
    """Handle search subcommand."""
    settings = Settings.from_yaml(args.config)
    if not settings.sources:
        msg = "no sources configured"
        raise ValueError(msg)

    radius_miles = args.radius_miles
    if args.lat is not None and args.radius_km is None and radius_miles is None:
        radius_miles = settings.search.default_radius_miles

    query = build_query(
        term=args.term,
        lat=args.lat,
        lng=args.lng,
        radius_km=args.radius_km,
        radius_miles=radius_miles,
        salary_min=args.salary_min,
        salary_max=args.salary_max,
        salary_period=args.salary_period,
        kinds=args.kind or [k.value for k in settings.sources],
    )
    sources = build_sources(settings)
    response = asyncio.run(search(query, sources, settings.search))

    if args.export == "json":
        shown = response.model_copy(update={"candidates": response.candidates[:args.limit]})
        print(export_results_json(shown))
    else:
        print_results(response, args.limit)


def cmd_convert_salary(args: argparse.Namespace) -> None:
    """Handle convert-salary subcommand."""
    source = SalaryFrequency.parse(args.from_period)
    target = SalaryFrequency.parse(args.to_period)
    converted = convert_salary(args.amount, source, target)
    print(format_salary_display(converted, converted, target))
    if not is_reasonable_salary(converted, target):
        print(f"  Note: outside the typical {target.value} range")


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "convert-salary":
        try:
            cmd_convert_salary(args)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    else:
        try:
            cmd_search(args)
        except (FileNotFoundError, ValueError, SearchError) as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)


if __name__ == "__main__":
    main()
