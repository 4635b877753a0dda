# tracker/engine/types.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Waypoint:
    """
    Timestamped geographic checkpoint on a route.

    Parameters
    ----------
    lat : float
        Latitude in decimal degrees.
    lon : float
        Longitude in decimal degrees.
    ts : datetime
        Timezone-aware instant the traveler is at this checkpoint.
    label : str
        Free-text place name, usually "City, Country".
    """
    lat: float
    lon: float
    ts: datetime
    label: str

    @property
    def coords(self) -> tuple[float, float]:
        return (self.lat, self.lon)


@dataclass(frozen=True)
class Target:
    """
    Home location the ETA is computed against.
    """
    lat: float
    lon: float
    label: str = "Home"

    @property
    def coords(self) -> tuple[float, float]:
        return (self.lat, self.lon)


@dataclass(frozen=True)
class Position:
    """
    Interpolated traveler state at one instant.

    Parameters
    ----------
    lat, lon : float
        Interpolated coordinates in decimal degrees.
    heading : float
        Initial bearing of the active segment, degrees in [0, 360).
    speed : int
        Segment speed in km/h.
    altitude : int
        Cosmetic altitude in metres.
    segment_label : str
        Label of the waypoint the active segment starts at.
    next_stop : Optional[str]
        Label of the next waypoint, None once the route is over.
    progress : int
        Overall route progress, percent.
    segment_index : Optional[int]
        Index of the active segment, None outside the route window.
    """
    lat: float
    lon: float
    heading: float
    speed: int
    altitude: int
    segment_label: str
    next_stop: Optional[str]
    progress: int
    segment_index: Optional[int] = None


@dataclass(frozen=True)
class ETAResult:
    """
    Arrival estimate relative to a target.

    Parameters
    ----------
    eta : Optional[datetime]
        Estimated arrival instant, None when unknown or already passed.
    distance : float
        Current distance to the target in km.
    is_passed : bool
        The traveler is done with this target.
    is_near : bool
        The traveler is within the proximity radius right now.
    """
    eta: Optional[datetime]
    distance: float
    is_passed: bool
    is_near: bool
