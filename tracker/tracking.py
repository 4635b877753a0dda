# tracker/tracking.py

"""
Glue between the traveler registry and the pure engine, shared by the
HTTP server and the CLI.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from tracker.engine.clock import DemoClock
from tracker.engine.eta import combined_eta, eta
from tracker.engine.position import position, trajectory
from tracker.engine.routes import Traveler, build_route, family_members, tracking_window
from tracker.engine.stats import traveler_stats
from tracker.engine.status import Countdown, TrackingStatus, time_until, tracking_status
from tracker.engine.types import ETAResult, Position, Target


class Tracker:
    """
    Engine entry points bound to one event date.

    Parameters
    ----------
    event_date
        Overrides the event date of travelers whose date is movable (the
        Three Kings). Santa always keeps his own date.
    """

    def __init__(self, event_date: Optional[date] = None) -> None:
        self.event_date = event_date

    def day(self, traveler: Traveler) -> date:
        if self.event_date is not None and traveler.movable_date:
            return self.event_date
        return traveler.default_event_date

    def window(self, traveler: Traveler) -> tuple[datetime, datetime]:
        return tracking_window(traveler, self.day(traveler))

    def route(self, traveler: Traveler, target: Optional[Target] = None):
        return build_route(traveler, target, self.day(traveler))

    def position(self, traveler: Traveler, target: Target, now: datetime) -> Position:
        return position(now, self.route(traveler, target), traveler.base_altitude)

    def trajectory(self, traveler: Traveler, target: Target, now: datetime) -> list[tuple[float, float]]:
        return trajectory(now, self.route(traveler, target))

    def eta(
        self,
        traveler: Traveler,
        target: Target,
        now: datetime,
        proximity_radius_km: Optional[float] = None,
    ) -> ETAResult:
        cfg = traveler.config
        return eta(
            now,
            self.route(traveler, target),
            target,
            proximity_radius_km or cfg.proximity_radius_km,
            cfg.eta_policy,
            cfg.samples_per_segment,
        )

    def family_eta(
        self,
        family: str,
        target: Target,
        now: datetime,
        proximity_radius_km: Optional[float] = None,
    ) -> tuple[dict[str, ETAResult], ETAResult]:
        """
        Per-traveler ETAs for a whole family plus their combined ETA.
        """
        results = {
            t.key: self.eta(t, target, now, proximity_radius_km)
            for t in family_members(family)
        }
        return results, combined_eta(results.values())

    def status(self, family: str, now: datetime) -> tuple[TrackingStatus, Countdown]:
        """
        Journey phase of a family at `now`, plus the time left until departure.
        """
        start, end = self.window(family_members(family)[0])
        return tracking_status(now, start, end), time_until(start, now)

    def stats(self, traveler: Traveler, now: datetime) -> dict[str, int]:
        start, end = self.window(traveler)
        return traveler_stats(traveler.key, now, start, end)

    def demo_clock(self, family: str) -> DemoClock:
        """
        Fresh demo clock spanning a family's journey, with its bookmarks.
        """
        lead = family_members(family)[0]
        start, end = self.window(lead)
        return DemoClock(
            start,
            end,
            bookmarks=lead.bookmark_times(self.day(lead)),
            tick_interval_ms=lead.config.tick_interval_ms,
            speed_multiplier=lead.config.speed_multiplier,
        )
