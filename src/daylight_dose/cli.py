"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from daylight_dose import __version__
from daylight_dose.config import Settings, get_settings
from daylight_dose.datasources.open_meteo import OpenMeteoUVProvider
from daylight_dose.dosimetry import altitude_multiplier, burn_time_table, rate_breakdown
from daylight_dose.engine import DoseEngine, DoseSnapshot
from daylight_dose.errors import DoseError
from daylight_dose.flows.fetch import fetch_all
from daylight_dose.health import StoreHealthLog
from daylight_dose.history import daily_totals, format_duration, format_iu, summarize_sessions
from daylight_dose.persistence import SessionRepository, UVRecordArchive
from daylight_dose.reference import SKIN_TYPES
from daylight_dose.reference.labels import CLOTHING_LABELS, SKIN_TYPE_LABELS, SUNSCREEN_LABELS
from daylight_dose.schemas import (
    ClothingLevel,
    DailyUVRecord,
    Location,
    PersonalProfile,
    SkinType,
    SunscreenLevel,
)
from daylight_dose.store import DataStore
from daylight_dose.uv import LocationKey, OfflineCoordinator, UVTimeSeriesCache

if TYPE_CHECKING:
    from datetime import date

    from daylight_dose.uv import FetchDaily


logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="daylight-dose",
        description="Estimate vitamin-D synthesis from sun exposure",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    # 'rate' command - evaluate the rate model once
    rate_parser = subparsers.add_parser("rate", help="Show the vitamin-D rate for given conditions")
    rate_parser.add_argument("--uv", type=float, required=True, help="UV index")
    _add_profile_arguments(rate_parser)
    rate_parser.add_argument(
        "--quality",
        type=float,
        default=1.0,
        help="Time-of-day quality 0..1 (default: 1.0, solar noon)",
    )
    rate_parser.add_argument(
        "--adaptation",
        type=float,
        default=1.0,
        help="Adaptation factor (default: 1.0)",
    )

    burn_parser = subparsers.add_parser("burn", help="Show burn time for every skin type")
    burn_parser.add_argument("--uv", type=float, required=True, help="UV index")

    # 'refresh' command - pre-fetch UV records into the archive
    refresh_parser = subparsers.add_parser("refresh", help="Fetch today's and tomorrow's UV")
    refresh_parser.add_argument(
        "--days", type=int, default=2, help="Number of days to fetch (default: 2)"
    )

    # 'track' command - live session
    track_parser = subparsers.add_parser("track", help="Track a live exposure session")
    track_parser.add_argument(
        "--minutes", type=float, default=15.0, help="Session length (default: 15)"
    )
    track_parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between ticks (default: tick_seconds from settings)",
    )
    track_parser.add_argument(
        "--uv", type=float, default=None, help="Manual UV index instead of fetched data"
    )

    # 'log' command - manual session entry
    log_parser = subparsers.add_parser("log", help="Record a session that was not tracked")
    log_parser.add_argument("--uv", type=float, required=True, help="UV index during exposure")
    log_parser.add_argument("--minutes", type=float, required=True, help="Exposure length")

    history_parser = subparsers.add_parser("history", help="Summarize recent sessions")
    history_parser.add_argument(
        "--days", type=int, default=7, help="Days to include (default: 7)"
    )

    return parser


def _add_profile_arguments(parser: argparse.ArgumentParser) -> None:
    """Profile overrides; unset values fall back to settings."""
    parser.add_argument(
        "--skin-type",
        type=int,
        choices=[int(s) for s in SkinType],
        default=None,
        help="Fitzpatrick skin type 1-6",
    )
    parser.add_argument(
        "--clothing", choices=[c.value for c in ClothingLevel], default=None, help="Clothing level"
    )
    parser.add_argument(
        "--sunscreen",
        choices=[s.value for s in SunscreenLevel],
        default=None,
        help="Sunscreen level",
    )
    parser.add_argument("--age", type=int, default=None, help="Age in years")
    parser.add_argument("--altitude", type=float, default=None, help="Altitude in meters")
    parser.add_argument(
        "--age-factor",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Apply the age reduction to the rate (default: from settings)",
    )


def _profile_from_args(args: argparse.Namespace, settings: Settings) -> PersonalProfile:
    base = settings.default_profile()
    overrides = {
        "skin_type": SkinType(args.skin_type) if args.skin_type is not None else None,
        "clothing_level": ClothingLevel(args.clothing) if args.clothing else None,
        "sunscreen_level": SunscreenLevel(args.sunscreen) if args.sunscreen else None,
        "age": args.age,
        "altitude_m": args.altitude,
        "use_age_factor": args.age_factor,
    }
    return base.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def _location(settings: Settings) -> Location:
    altitude = settings.altitude_m if settings.altitude_m > 0 else None
    return Location(latitude=settings.lat, longitude=settings.lon, altitude_m=altitude)


def _archiving(fetch: FetchDaily, archive: UVRecordArchive) -> FetchDaily:
    """Wrap a provider so every fetched record is also written to disk."""

    async def fetch_and_archive(lat: float, lon: float, day: date) -> DailyUVRecord:
        record = await fetch(lat, lon, day)
        try:
            archive.save(record)
        except OSError:
            logger.exception("Failed to archive UV record for %s", day)
        return record

    return fetch_and_archive


def build_engine(settings: Settings) -> DoseEngine:
    """Wire the engine to Open-Meteo and the local data store."""
    store = DataStore(settings.data_dir)
    archive = UVRecordArchive(store, settings.freshness_interval)
    repository = SessionRepository(store)
    health = StoreHealthLog(store, settings.tzinfo)
    location = _location(settings)

    provider = OpenMeteoUVProvider(settings.timezone)
    cache = UVTimeSeriesCache(_archiving(provider, archive), settings.freshness_interval)
    today = datetime.now(settings.tzinfo).date()
    key = LocationKey.from_coordinates(location.latitude, location.longitude)
    cache.seed(archive.load_location(key, since=today - timedelta(days=1)))

    coordinator = OfflineCoordinator(
        cache,
        settings.tzinfo,
        apply_cloud_attenuation=settings.apply_cloud_attenuation,
    )
    engine = DoseEngine(
        coordinator,
        lambda: location,
        repository.load_profile() or settings.default_profile(),
        persistence=repository,
        health=health,
        tz=settings.tzinfo,
    )
    engine.seed_adaptation(today)
    return engine


def _print_status(snap: DoseSnapshot) -> None:
    status = "offline" if snap.offline_mode else "no data" if snap.has_no_data else "live"
    print(
        f"[{snap.as_of:%H:%M:%S}] UV {snap.current_uv:.1f} ({status}) | "
        f"{snap.current_rate:,.0f} IU/h | session {format_iu(snap.session_accumulated_iu)}"
    )


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    profile = settings.default_profile()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Location: ({settings.lat}, {settings.lon}) {settings.timezone}")
    print(f"Data dir: {settings.data_dir}")
    print(f"Skin type: {SKIN_TYPE_LABELS[profile.skin_type]}")
    print(f"Clothing: {CLOTHING_LABELS[profile.clothing_level]}")
    print(f"Sunscreen: {SUNSCREEN_LABELS[profile.sunscreen_level]}")
    print(f"Age factor: {'on' if profile.use_age_factor else 'off'}")
    return 0


def cmd_rate(args: argparse.Namespace) -> int:
    """Handle the 'rate' command: one evaluation of the rate model."""
    settings = get_settings()
    profile = _profile_from_args(args, settings)
    try:
        breakdown = rate_breakdown(
            args.uv,
            profile,
            time_of_day_quality=args.quality,
            adaptation_factor=args.adaptation,
            altitude_multiplier=altitude_multiplier(profile.altitude_m),
        )
    except DoseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"UV index: {args.uv:.1f}")
    print(f"  UV factor:         {breakdown.uv_factor:.3f}")
    print(f"  Exposure factor:   {breakdown.exposure_factor:.3f}")
    print(f"  Skin type factor:  {breakdown.skin_factor:.3f}")
    print(f"  Age factor:        {breakdown.age_factor:.3f}")
    print(f"  Altitude:          {breakdown.altitude_multiplier:.3f}")
    print(f"  Time of day:       {breakdown.time_of_day_quality:.3f}")
    print(f"  Adaptation:        {breakdown.adaptation_factor:.3f}")
    print(f"Rate: {breakdown.iu_per_hour:,.0f} IU/hour ({breakdown.iu_per_minute:,.1f} IU/min)")
    if breakdown.burn_time_minutes is None:
        print("Burn time: none")
    else:
        print(f"Burn time: {breakdown.burn_time_minutes} min")
    return 0


def cmd_burn(args: argparse.Namespace) -> int:
    """Handle the 'burn' command."""
    try:
        table = burn_time_table(args.uv)
    except DoseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Burn time at UV {args.uv:.1f}:")
    for skin_type, minutes in table.items():
        label = SKIN_TYPE_LABELS[skin_type]
        med = SKIN_TYPES[skin_type].med_multiplier
        shown = "no burn risk" if minutes is None else f"{minutes} min"
        print(f"  {label:<10} (MED x{med:g}): {shown}")
    return 0


def cmd_refresh(args: argparse.Namespace) -> int:
    """Handle the 'refresh' command: fetch UV into the archive."""
    settings = get_settings()
    print(f"Fetching UV for ({settings.lat}, {settings.lon})...")
    result = fetch_all(
        lat=settings.lat,
        lon=settings.lon,
        days=args.days,
        timezone=settings.timezone,
        data_dir=settings.data_dir,
    )
    for day, peak in result["max_uv"].items():
        print(f"  {day}: peak UV {peak:.1f}")
    print("Done.")
    return 0


def cmd_track(args: argparse.Namespace) -> int:
    """Handle the 'track' command: run a live session until time is up."""
    settings = get_settings()
    interval = args.interval if args.interval is not None else settings.tick_seconds
    engine = build_engine(settings)
    engine.subscribe(_print_status)

    async def track() -> None:
        await engine.refresh()
        if args.uv is not None:
            engine.set_manual_uv(args.uv)
        elif engine.snapshot().has_no_data:
            print("No UV data available; tracking at UV 0.", file=sys.stderr)

        stop = asyncio.Event()
        asyncio.get_running_loop().call_later(args.minutes * 60, stop.set)
        engine.begin()
        try:
            await engine.run(interval, stop=stop)
        finally:
            session = engine.end()
            print(
                f"Session complete: {format_iu(session.accumulated_iu)} over "
                f"{format_duration(session.duration_seconds)} (avg UV {session.average_uv:.1f})"
            )

    try:
        asyncio.run(track())
    except KeyboardInterrupt:
        print("\nTracking stopped.")
    except DoseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_log(args: argparse.Namespace) -> int:
    """Handle the 'log' command: record a manual session."""
    settings = get_settings()
    engine = build_engine(settings)
    try:
        session = engine.log_manual_session(args.uv, args.minutes)
    except DoseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(
        f"Logged {format_iu(session.accumulated_iu)} for "
        f"{format_duration(session.duration_seconds)} at UV {args.uv:.1f}"
    )
    return 0


def cmd_history(args: argparse.Namespace) -> int:
    """Handle the 'history' command."""
    settings = get_settings()
    repository = SessionRepository(DataStore(settings.data_dir))
    today = datetime.now(settings.tzinfo).date()
    sessions = repository.load_sessions(start=today - timedelta(days=args.days - 1))

    if not sessions:
        print(f"No sessions in the last {args.days} days.")
        return 0

    for day, total in daily_totals(sessions, settings.tzinfo).items():
        print(f"  {day}: {format_iu(total)}")
    summary = summarize_sessions(sessions)
    print(
        f"{summary.count} sessions, {format_iu(summary.total_iu)} total, "
        f"{format_duration(summary.total_seconds)} in the sun, avg UV {summary.average_uv:.1f}"
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "rate": cmd_rate,
        "burn": cmd_burn,
        "refresh": cmd_refresh,
        "track": cmd_track,
        "log": cmd_log,
        "history": cmd_history,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
