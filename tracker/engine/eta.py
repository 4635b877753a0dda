"""
ETA engine: when will the traveler reach a target?

Two strategies, chosen per traveler through `EtaPolicy`:

- SAMPLED walks every segment in `samples_per_segment` steps and returns the
  first future sample inside the proximity radius. When nothing future
  gets that close it falls back to the closest future approach. When the
  route's closest approach is already behind us and nothing ahead enters
  the radius, the target counts as passed and no ETA is given.
- FIXED_ARRIVAL declares the route's final instant the arrival for everyone.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Iterator, Optional

from tracker.engine.config import EtaPolicy
from tracker.engine.position import position
from tracker.engine.types import ETAResult, Target, Waypoint
from tracker.utils.geo import haversine_km, is_within, lerp

DEFAULT_PROXIMITY_KM = 30.0
DEFAULT_SAMPLES = 20


def sample_route(route: list[Waypoint], samples_per_segment: int = DEFAULT_SAMPLES) -> Iterator[tuple[datetime, float, float]]:
    """
    Yield (instant, lat, lon) samples along the route, segment by segment.

    Each segment contributes `samples_per_segment + 1` samples, endpoints
    included, so shared waypoints appear twice.
    """
    for a, b in zip(route, route[1:]):
        span = b.ts - a.ts
        for j in range(samples_per_segment + 1):
            t = j / samples_per_segment
            yield a.ts + span * t, lerp(a.lat, b.lat, t), lerp(a.lon, b.lon, t)


def _sampled(
    now: datetime,
    route: list[Waypoint],
    target: Target,
    radius_km: float,
    samples_per_segment: int,
) -> tuple[Optional[datetime], bool]:
    closest_d = float("inf")
    closest_ts: Optional[datetime] = None
    closest_future_d = float("inf")
    closest_future_ts: Optional[datetime] = None

    for ts, lat, lon in sample_route(route, samples_per_segment):
        d = haversine_km((lat, lon), target.coords)
        if d < closest_d:
            closest_d, closest_ts = d, ts
        if ts <= now:
            continue
        if d <= radius_km:
            return ts, False
        if d < closest_future_d:
            closest_future_d, closest_future_ts = d, ts

    if closest_ts is not None and closest_ts < now:
        return None, True
    return closest_future_ts, False


def eta(
    now: datetime,
    route: list[Waypoint],
    target: Target,
    proximity_radius_km: float = DEFAULT_PROXIMITY_KM,
    policy: EtaPolicy = EtaPolicy.SAMPLED,
    samples_per_segment: int = DEFAULT_SAMPLES,
) -> ETAResult:
    """
    Estimate the traveler's arrival at `target`.

    Parameters
    ----------
    now
        Timezone-aware query instant.
    route
        Strictly time-ordered waypoints, at least two.
    target
        Home location.
    proximity_radius_km
        Distance under which the traveler counts as near.
    policy
        ETA strategy, see module docstring.
    samples_per_segment
        Resolution of the SAMPLED search.

    Returns
    -------
    ETAResult
    """
    here = position(now, route)
    distance = haversine_km((here.lat, here.lon), target.coords)
    is_near = is_within((here.lat, here.lon), target.coords, proximity_radius_km)

    if now >= route[-1].ts:
        return ETAResult(eta=None, distance=distance, is_passed=True, is_near=is_near)

    if policy is EtaPolicy.FIXED_ARRIVAL:
        return ETAResult(eta=route[-1].ts, distance=distance, is_passed=False, is_near=is_near)

    arrival, passed = _sampled(now, route, target, proximity_radius_km, samples_per_segment)
    return ETAResult(eta=arrival, distance=distance, is_passed=passed, is_near=is_near)


def combined_eta(results: Iterable[ETAResult]) -> ETAResult:
    """
    Merge the ETAs of several travelers heading to the same home.

    The farthest traveler sets the distance; the latest known ETA is the
    shared arrival; near/passed flags are OR-ed.
    """
    results = list(results)
    if not results:
        raise ValueError("combined_eta needs at least one result")
    etas = [r.eta for r in results if r.eta is not None]
    return ETAResult(
        eta=max(etas) if etas else None,
        distance=max(r.distance for r in results),
        is_passed=any(r.is_passed for r in results),
        is_near=any(r.is_near for r in results),
    )


def format_time_remaining(arrival: datetime, now: datetime) -> str:
    """Human countdown such as '2h 5min', '12min' or 'Arrived!'."""
    diff = (arrival - now).total_seconds()
    if diff <= 0:
        return "Arrived!"
    minutes = int(diff // 60)
    hours, rest = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {rest}min"
    return f"{minutes}min"
