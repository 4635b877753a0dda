#!/usr/bin/env python3
"""
CLI entry point for the seasonal traveler tracker.

Defines the following commands:
  tracker serve [--db PATH] [--port 8000] [--event-date YYYY-MM-DD]
  tracker routes [TRAVELER]
  tracker position TRAVELER --lat LAT --lon LON [--label TEXT] [--at ISO8601]
  tracker eta TRAVELER --lat LAT --lon LON [--radius KM] [--at ISO8601]
  tracker demo TRAVELER --lat LAT --lon LON [--speed X] [--ticks N] [--bookmark NAME]
  tracker geocode QUERY [--db PATH]
  tracker status FAMILY [--at ISO8601] [--event-date YYYY-MM-DD]
  tracker profiles [--db PATH] [--reset]
  tracker version
"""

import sys
from argparse import ArgumentParser, Namespace
from datetime import date, datetime
from importlib.metadata import PackageNotFoundError, version as _get_version
from typing import Optional

import uvicorn

from tracker.engine.eta import format_time_remaining
from tracker.engine.messages import MessageFeed
from tracker.engine.routes import FAMILIES, TRAVELERS, get_traveler
from tracker.engine.types import Target
from tracker.geocode import GeocodeError, Geocoder
from tracker.server import create_app
from tracker.storage.dao import DAO
from tracker.tracking import Tracker
from tracker.utils.device import clear_device_id, get_device_id
from tracker.utils.log import get_logger

logger = get_logger(__name__)

DEFAULT_DB = "tracker.sqlite"


def _parse_at(text: Optional[str]) -> Optional[datetime]:
    if text is None:
        return None
    at = datetime.fromisoformat(text)
    if at.tzinfo is None:
        raise ValueError(f"timestamp {text!r} needs a timezone offset, e.g. 2025-12-24T22:00:00+01:00")
    return at


def serve(db: str, port: int, event_date: Optional[date]) -> None:
    """
    Spin up FastAPI+Uvicorn to serve the tracker API.

    Parameters
    ----------
    db
        SQLite file holding profiles, checklists and the geocode cache.
    port
        Port on which to serve HTTP.
    event_date
        Optional override of the Three Kings' event date.
    """
    logger.info("Serve: db=%s, port=%d, event_date=%s", db, port, event_date)
    app = create_app(db, event_date)
    uvicorn.run(app, host="127.0.0.1", port=port)


def routes(traveler_key: Optional[str], event_date: Optional[date]) -> None:
    """
    Log the waypoint table of one traveler, or a summary of all of them.
    """
    tracker = Tracker(event_date)
    if traveler_key is None:
        for t in TRAVELERS.values():
            start, end = tracker.window(t)
            logger.info("%s %-9s %s -> %s (%s)", t.glyph, t.key, start.isoformat(), end.isoformat(), t.config.eta_policy.value)
        return
    traveler = get_traveler(traveler_key)
    for i, w in enumerate(tracker.route(traveler)):
        logger.info("%2d  %s  %8.4f %9.4f  %s", i, w.ts.isoformat(), w.lat, w.lon, w.label)
    if traveler.appends_home:
        logger.info("    %s  (home)", traveler.arrival_time(tracker.day(traveler)).isoformat())


def position(traveler_key: str, target: Target, at: Optional[datetime], event_date: Optional[date]) -> None:
    """
    Log where a traveler is at an instant (default: now).
    """
    tracker = Tracker(event_date)
    traveler = get_traveler(traveler_key)
    now = at or tracker.demo_clock(traveler.family).now()
    pos = tracker.position(traveler, target, now)
    logger.info(
        "%s %s @ %s: (%.4f, %.4f) heading %.0f°, %d km/h, %d m, %d%% - %s -> %s",
        traveler.glyph, traveler.name, now.isoformat(), pos.lat, pos.lon,
        pos.heading, pos.speed, pos.altitude, pos.progress, pos.segment_label, pos.next_stop,
    )


def eta(
    traveler_key: str,
    target: Target,
    at: Optional[datetime],
    radius: Optional[float],
    event_date: Optional[date],
) -> None:
    """
    Log a traveler's ETA to a target (default: now).
    """
    tracker = Tracker(event_date)
    traveler = get_traveler(traveler_key)
    now = at or tracker.demo_clock(traveler.family).now()
    result = tracker.eta(traveler, target, now, radius)
    remaining = format_time_remaining(result.eta, now) if result.eta else "-"
    logger.info(
        "%s -> %s: eta=%s (%s), distance=%.1f km, near=%s, passed=%s",
        traveler.name, target.label, result.eta.isoformat() if result.eta else None,
        remaining, result.distance, result.is_near, result.is_passed,
    )


def demo(
    traveler_key: str,
    target: Target,
    speed: float,
    ticks: int,
    every: int,
    bookmark: Optional[str],
    event_date: Optional[date],
) -> None:
    """
    Step a demo clock through a traveler's journey and log what the UI would show.

    Parameters
    ----------
    traveler_key
        Which traveler to follow.
    target
        Home location.
    speed
        Demo speed multiplier.
    ticks
        Number of clock ticks to run; stops early once the clock pauses at the end.
    every
        Log the position every `every` ticks.
    bookmark
        Optional bookmark to jump to right after enabling the clock.
    """
    tracker = Tracker(event_date)
    traveler = get_traveler(traveler_key)
    clock = tracker.demo_clock(traveler.family)
    clock.set_speed(speed)
    clock.enable()
    if bookmark:
        clock.jump(bookmark)
    feed = MessageFeed(traveler.family)

    for n in range(ticks):
        now = clock.now()
        pos = tracker.position(traveler, target, now)
        result = tracker.eta(traveler, target, now)
        for msg in feed.update(pos, result, now):
            logger.info("%s %s", msg.glyph, msg.text)
        if n % every == 0:
            logger.info(
                "[%s] (%.3f, %.3f) %3d%% %s -> %s, %.0f km to %s",
                now.isoformat(timespec="seconds"), pos.lat, pos.lon, pos.progress,
                pos.segment_label, pos.next_stop, result.distance, target.label,
            )
        if not clock.is_playing:
            break
        clock.tick()
    logger.info("Demo stopped at %s", clock.now().isoformat())


def status(family: str, at: Optional[datetime], event_date: Optional[date]) -> None:
    """
    Log whether a family is still to depart, flying or done, with the countdown.
    """
    tracker = Tracker(event_date)
    now = at or tracker.demo_clock(family).now()
    phase, left = tracker.status(family, now)
    logger.info(
        "%s @ %s: %s, departure in %dd %02dh %02dm %02ds",
        family, now.isoformat(), phase.value, left.days, left.hours, left.minutes, left.seconds,
    )


def geocode(query: str, db: str) -> None:
    """
    Search a place name and log the hits.
    """
    dao = DAO(db)
    try:
        for place in Geocoder(dao).search(query):
            logger.info("(%.5f, %.5f) %s", place.lat, place.lon, place.display_name)
    finally:
        dao.close()


def profiles(db: str, reset: bool) -> None:
    """
    List the profiles of this machine's device id, or forget them all.
    """
    device_id = get_device_id()
    dao = DAO(db)
    try:
        if reset:
            deleted = dao.delete_device_profiles(device_id)
            clear_device_id()
            logger.info("Removed %d profiles and the device id", deleted)
            return
        logger.info("Device %s", device_id)
        for p in dao.list_profiles(device_id):
            logger.info("%s %s - %s (%.4f, %.4f) [%s]", p.avatar, p.name, p.city_label, p.lat, p.lon, p.id)
    finally:
        dao.close()


def version() -> None:
    """
    Print the installed tracker package version.
    """
    try:
        ver = _get_version("seasonal-tracker")
    except PackageNotFoundError:
        ver = "unknown"
    logger.info("tracker version %s", ver)


def _add_event_date_arg(p: ArgumentParser) -> None:
    p.add_argument(
        "--event-date", type=date.fromisoformat, default=None,
        help="Override the Three Kings' event date (YYYY-MM-DD).",
    )


def _add_target_args(p: ArgumentParser) -> None:
    p.add_argument("traveler", type=str, choices=sorted(TRAVELERS), help="Traveler key.")
    p.add_argument("--lat", type=float, required=True, help="Home latitude.")
    p.add_argument("--lon", type=float, required=True, help="Home longitude.")
    p.add_argument("--label", type=str, default="Home", help="Home label.")


def parse_args(argv: Optional[list[str]] = None) -> Namespace:
    """
    Parse command-line arguments and return the populated namespace.
    """
    parser = ArgumentParser(prog="tracker")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # tracker serve
    p = subparsers.add_parser("serve", help="Serve via FastAPI + Uvicorn.")
    p.add_argument("--db", type=str, default=DEFAULT_DB, help="SQLite database file.")
    p.add_argument("--port", type=int, default=8000, help="Port number to serve on.")
    _add_event_date_arg(p)

    # tracker routes
    p = subparsers.add_parser("routes", help="Show traveler routes.")
    p.add_argument("traveler", nargs="?", choices=sorted(TRAVELERS), help="Traveler key.")
    _add_event_date_arg(p)

    # tracker position
    p = subparsers.add_parser("position", help="Where is a traveler?")
    _add_target_args(p)
    p.add_argument("--at", type=str, help="ISO8601 instant with offset (default: now).")
    _add_event_date_arg(p)

    # tracker eta
    p = subparsers.add_parser("eta", help="When does a traveler reach home?")
    _add_target_args(p)
    p.add_argument("--at", type=str, help="ISO8601 instant with offset (default: now).")
    p.add_argument("--radius", type=float, help="Proximity radius in km.")
    _add_event_date_arg(p)

    # tracker demo
    p = subparsers.add_parser("demo", help="Run the demo clock through a journey.")
    _add_target_args(p)
    p.add_argument("--speed", type=float, default=600, help="Speed multiplier.")
    p.add_argument("--ticks", type=int, default=10_000, help="Maximum number of ticks.")
    p.add_argument("--every", type=int, default=100, help="Log every N ticks.")
    p.add_argument("--bookmark", type=str, help="Bookmark to jump to first.")
    _add_event_date_arg(p)

    # tracker status
    p = subparsers.add_parser("status", help="Countdown, tracking or ended?")
    p.add_argument("family", type=str, choices=sorted(FAMILIES), help="Traveler family.")
    p.add_argument("--at", type=str, help="ISO8601 instant with offset (default: now).")
    _add_event_date_arg(p)

    # tracker geocode
    p = subparsers.add_parser("geocode", help="Search a place name.")
    p.add_argument("query", type=str, help="Place to search for.")
    p.add_argument("--db", type=str, default=DEFAULT_DB, help="SQLite database file.")

    # tracker profiles
    p = subparsers.add_parser("profiles", help="List or reset this device's profiles.")
    p.add_argument("--db", type=str, default=DEFAULT_DB, help="SQLite database file.")
    p.add_argument("--reset", action="store_true", help="Delete every profile and the device id.")

    # tracker version
    subparsers.add_parser("version", help="Show tracker version and exit.")

    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """
    Entry point: dispatch to the selected subcommand.
    """
    args = parse_args(argv)
    try:
        match args.command:
            case "serve":
                serve(args.db, args.port, args.event_date)
            case "routes":
                routes(args.traveler, args.event_date)
            case "position":
                target = Target(args.lat, args.lon, args.label)
                position(args.traveler, target, _parse_at(args.at), args.event_date)
            case "eta":
                target = Target(args.lat, args.lon, args.label)
                eta(args.traveler, target, _parse_at(args.at), args.radius, args.event_date)
            case "demo":
                target = Target(args.lat, args.lon, args.label)
                demo(args.traveler, target, args.speed, args.ticks, max(args.every, 1), args.bookmark, args.event_date)
            case "status":
                status(args.family, _parse_at(args.at), args.event_date)
            case "geocode":
                geocode(args.query, args.db)
            case "profiles":
                profiles(args.db, args.reset)
            case "version":
                version()
            case _:
                sys.exit(1)
    except (KeyError, ValueError, GeocodeError) as exc:
        logger.error("%s", exc.args[0] if exc.args else exc)
        sys.exit(2)


if __name__ == "__main__":
    main()
