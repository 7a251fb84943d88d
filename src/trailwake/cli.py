"""Command-line awareness briefing.

Usage:
    trailwake --lat 40.35 --lon -74.66                     # Brief for tomorrow's dawn
    trailwake --lat 40.35 --lon -74.66 --run-start 05:45   # Include the daylight check
    trailwake --status                                     # Show cache status
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from trailwake.awareness import AwarenessReport, refresh_awareness
from trailwake.cache import DuckDBStore, TTLCache
from trailwake.clients import DawnClient, ForecastClient
from trailwake.config import Settings
from trailwake.errors import AwarenessError, StorageUnavailableError
from trailwake.features.formatting import format_mm, format_pop, format_temp, format_wind
from trailwake.utils.geo import validate_coordinates
from trailwake.utils.time import format_minutes, get_zone, minutes_since_midnight, parse_hhmm

logger = logging.getLogger(__name__)


def _hhmm(value: str) -> int:
    try:
        return parse_hhmm(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def print_report(report: AwarenessReport) -> None:
    """Print an awareness report in human-readable format."""
    weather = report.weather
    wetness = report.wetness
    dawn_at = format_minutes(minutes_since_midnight(report.dawn.date, report.tz))

    print()
    print("=" * 60)
    print(f"Run Awareness ({report.coordinates.lat}, {report.coordinates.lon})")
    print("=" * 60)
    print(f"Dawn: {report.dawn.local.strftime('%a %b %d')} at {dawn_at} ({report.tz})")
    print()
    print(f"Temperature: {format_temp(weather.temp_f)}")
    print(f"Wind: {format_wind(weather.wind_mph)}")
    print(f"Wind chill: {format_temp(weather.wind_chill_f)}")
    print(f"Wet-bulb: {format_temp(weather.wet_bulb_f)}")
    print(f"Precip chance: {format_pop(weather.pop)}")
    if weather.is_snow:
        print("Snow expected")
    print()
    print(f"Trail: {wetness.label} (score {format_mm(wetness.score)})")
    print(f"  {wetness.summary}")
    if report.daylight.needed:
        print(f"  {report.daylight.message}")
    print()
    print(f"Status: {report.overall.status.value.upper()}")
    for name, message in report.overall.messages.items():
        print(f"  {name:<10} {message}")
    print("=" * 60)


def print_status(stats: dict) -> None:
    """Print cache statistics."""
    print()
    print("=" * 60)
    print("Trailwake Cache Status")
    print("=" * 60)
    print(f"Database: {stats['db_path']}")
    print(f"Cached entries: {stats['entry_count']}")
    print(f"Total rows: {stats['row_count']}")
    print("=" * 60)


def build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trailwake",
        description="Weather awareness for tomorrow's pre-dawn run",
        epilog="""
Examples:
  trailwake --lat 40.35 --lon -74.66
  trailwake --lat 40.35 --lon -74.66 --tz America/New_York --run-start 05:45
  trailwake --status
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--lat", type=float, help="Latitude in decimal degrees")
    parser.add_argument("--lon", type=float, help="Longitude in decimal degrees")
    parser.add_argument(
        "--tz",
        default=settings.default_tz,
        help=f"IANA timezone (default: {settings.default_tz})",
    )
    parser.add_argument(
        "--run-start",
        type=_hhmm,
        default=None,
        help="Planned run start as HH:MM (24-hour)",
    )
    parser.add_argument(
        "--status",
        action="store_true",
        help="Show current cache status",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help=f"Cache database path (default: {settings.cache_path})",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress output except errors",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    settings = Settings.from_env()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    if args.quiet:
        level = logging.ERROR
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    store = DuckDBStore(args.db or settings.cache_path)

    try:
        if args.status:
            try:
                print_status(store.get_stats())
            except StorageUnavailableError as e:
                logger.error(f"Cache unavailable: {e}")
                return 1
            return 0

        if args.lat is None or args.lon is None:
            parser.error("--lat and --lon are required")
        if not validate_coordinates(args.lat, args.lon):
            parser.error(f"invalid coordinates: {args.lat}, {args.lon}")
        try:
            get_zone(args.tz)
        except ValueError as e:
            parser.error(str(e))

        cache = TTLCache(store)
        try:
            report = refresh_awareness(
                args.lat,
                args.lon,
                args.tz,
                args.run_start,
                forecast_client=ForecastClient(cache, settings=settings),
                dawn_client=DawnClient(cache, settings=settings),
            )
        except AwarenessError as e:
            logger.error(f"Awareness refresh failed: {e}")
            return 1

        print_report(report)
        return 0

    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
