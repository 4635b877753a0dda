"""
Position engine: where is the traveler at a given instant?

Segments are located by binary search over waypoint timestamps; inside a
segment latitude and longitude are interpolated linearly and independently.
Heading and speed are constant per segment.
"""

from __future__ import annotations

import math
from bisect import bisect_right
from datetime import datetime

from tracker.engine.types import Position, Waypoint
from tracker.utils.geo import haversine_km, initial_bearing, lerp

PRE_DEPARTURE_LABEL = "Getting ready to depart"
ARRIVED_LABEL = "Arrived"


def fraction(now: datetime, seg_start: datetime, seg_end: datetime) -> float:
    """
    Interpolation fraction of `now` within [seg_start, seg_end], clamped to [0, 1].
    """
    duration = (seg_end - seg_start).total_seconds()
    if duration <= 0:
        return 0.0
    t = (now - seg_start).total_seconds() / duration
    return min(1.0, max(0.0, t))


def segment_index(now: datetime, route: list[Waypoint]) -> int:
    """
    Index i of the active segment, such that route[i].ts <= now < route[i+1].ts.

    Only meaningful for `now` inside the route window; callers pin the
    position to the origin/destination outside of it.
    """
    stamps = [w.ts for w in route]
    i = bisect_right(stamps, now) - 1
    return min(max(i, 0), len(route) - 2)


def progress(now: datetime, route: list[Waypoint]) -> int:
    """Overall progress along the route, integer percent in [0, 100]."""
    start, end = route[0].ts, route[-1].ts
    if now < start:
        return 0
    if now >= end:
        return 100
    return round((now - start) / (end - start) * 100)


def cosmetic_altitude(now: datetime, index: int, base_altitude: int) -> int:
    ms = now.timestamp() * 1000
    wobble = math.sin(ms / 30000) * 400 + math.sin(ms / 10000 + index) * 200
    return round(base_altitude + wobble)


def position(now: datetime, route: list[Waypoint], base_altitude: int = 10000) -> Position:
    """
    Interpolate the traveler's position at `now`.

    Parameters
    ----------
    now
        Timezone-aware query instant.
    route
        Strictly time-ordered waypoints, at least two.
    base_altitude
        Centre of the cosmetic altitude wobble, metres.

    Returns
    -------
    Position
        Pinned to the origin before the route starts and to the
        destination once it has ended.
    """
    origin, destination = route[0], route[-1]

    if now < origin.ts:
        return Position(
            lat=origin.lat,
            lon=origin.lon,
            heading=0.0,
            speed=0,
            altitude=0,
            segment_label=PRE_DEPARTURE_LABEL,
            next_stop=route[1].label,
            progress=0,
        )

    if now >= destination.ts:
        return Position(
            lat=destination.lat,
            lon=destination.lon,
            heading=0.0,
            speed=0,
            altitude=0,
            segment_label=ARRIVED_LABEL,
            next_stop=None,
            progress=100,
        )

    i = segment_index(now, route)
    a, b = route[i], route[i + 1]
    t = fraction(now, a.ts, b.ts)

    hours = (b.ts - a.ts).total_seconds() / 3600
    speed = round(haversine_km(a.coords, b.coords) / hours) if hours > 0 else 0

    return Position(
        lat=lerp(a.lat, b.lat, t),
        lon=lerp(a.lon, b.lon, t),
        heading=initial_bearing(a.coords, b.coords),
        speed=speed,
        altitude=cosmetic_altitude(now, i, base_altitude),
        segment_label=a.label,
        next_stop=b.label,
        progress=progress(now, route),
        segment_index=i,
    )


def trajectory(now: datetime, route: list[Waypoint]) -> list[tuple[float, float]]:
    """
    Path flown so far: every waypoint already reached plus the current position.

    Empty before departure.
    """
    path = [w.coords for w in route if w.ts <= now]
    if path:
        here = position(now, route)
        path.append((here.lat, here.lon))
    return path
