# tracker/engine/routes.py

"""
Static waypoint tables for every traveler.

All clock times are local Madrid winter time (UTC+1). Each table row is
(lat, lon, day offset from the event date, hour, minute, label); rows are
turned into `Waypoint`s for a concrete event date on demand, so the same
tables serve any year.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional

from tracker.engine.config import EngineConfig
from tracker.engine.types import Target, Waypoint

CET = timezone(timedelta(hours=1), "CET")

# -----------------------------------------------------------------------------
# Santa: Rovaniemi -> Europe -> Spain -> Americas -> Asia -> Rovaniemi
SANTA_TABLE = [
    (66.5436,   25.8473, 0, 18,  0, "Santa Claus Village"),
    (64.1466,   28.7675, 0, 18, 20, "Joensuu, Finland"),
    (60.1699,   24.9384, 0, 18, 45, "Helsinki, Finland"),
    (59.3293,   18.0686, 0, 19,  5, "Stockholm, Sweden"),
    (55.6761,   12.5683, 0, 19, 30, "Copenhagen, Denmark"),
    (52.5200,   13.4050, 0, 19, 50, "Berlin, Germany"),
    (52.3676,    4.9041, 0, 20, 10, "Amsterdam, Netherlands"),
    (50.8503,    4.3517, 0, 20, 25, "Brussels, Belgium"),
    (48.8566,    2.3522, 0, 20, 45, "Paris, France"),
    (43.2630,   -2.9350, 0, 21,  5, "Bilbao, Spain"),
    (42.8782,   -8.5448, 0, 21, 25, "Santiago de Compostela"),
    (41.6488,   -0.8891, 0, 21, 50, "Zaragoza, Spain"),
    (41.3879,    2.1699, 0, 22, 10, "Barcelona, Spain"),
    (40.4168,   -3.7038, 0, 22, 30, "Madrid, Spain"),
    (37.3891,   -5.9845, 0, 22, 55, "Seville, Spain"),
    (36.7213,   -4.4214, 0, 23, 10, "Malaga, Spain"),
    (38.3452,   -0.4810, 0, 23, 25, "Alicante, Spain"),
    (39.4699,   -0.3763, 0, 23, 30, "Valencia, Spain"),
    (39.8628,   -4.0273, 0, 23, 45, "Toledo, Spain"),
    (38.9942,   -1.8564, 0, 23, 55, "Albacete, Spain"),
    (38.7223,   -9.1393, 1,  0, 15, "Lisbon, Portugal"),
    (41.1496,   -8.6109, 1,  0, 35, "Porto, Portugal"),
    (33.9716,   -6.8498, 1,  1,  0, "Rabat, Morocco"),
    (31.6295,   -7.9811, 1,  1, 20, "Marrakesh, Morocco"),
    (28.4636,  -16.2518, 1,  1, 50, "Tenerife, Canary Islands"),
    (28.1235,  -15.4363, 1,  2,  5, "Gran Canaria"),
    (40.7128,  -74.0060, 1,  2, 45, "New York, USA"),
    (34.0522, -118.2437, 1,  3, 15, "Los Angeles, USA"),
    (19.4326,  -99.1332, 1,  3, 45, "Mexico City"),
    (-22.9068, -43.1729, 1,  4, 15, "Rio de Janeiro, Brazil"),
    (-34.6037, -58.3816, 1,  4, 35, "Buenos Aires, Argentina"),
    (35.6762,  139.6503, 1,  5, 15, "Tokyo, Japan"),
    (31.2304,  121.4737, 1,  5, 35, "Shanghai, China"),
    (28.6139,   77.2090, 1,  5, 55, "New Delhi, India"),
    (25.2048,   55.2708, 1,  6, 15, "Dubai, UAE"),
    (41.0082,   28.9784, 1,  6, 35, "Istanbul, Turkey"),
    (37.9838,   23.7275, 1,  6, 50, "Athens, Greece"),
    (41.9028,   12.4964, 1,  7,  5, "Rome, Italy"),
    (47.3769,    8.5417, 1,  7, 20, "Zurich, Switzerland"),
    (55.7558,   37.6173, 1,  7, 40, "Moscow, Russia"),
    (66.5436,   25.8473, 1,  8,  0, "Santa Claus Village"),
]

# -----------------------------------------------------------------------------
# Three Kings: all leave Addis Ababa at 08:00 and reach the home at 18:00
MELCHOR_TABLE = [
    (9.0320,    38.7469, 0,  8,  0, "Addis Ababa, Ethiopia"),
    (24.7136,   46.6753, 0,  8, 30, "Riyadh, Saudi Arabia"),
    (19.0760,   72.8777, 0,  9,  0, "Mumbai, India"),
    (31.2304,  121.4737, 0,  9, 40, "Shanghai, China"),
    (35.6762,  139.6503, 0, 10, 15, "Tokyo, Japan"),
    (-33.8688, 151.2093, 0, 11,  0, "Sydney, Australia"),
    (34.0522, -118.2437, 0, 12,  0, "Los Angeles, USA"),
    (40.7128,  -74.0060, 0, 12, 45, "New York, USA"),
    (51.5074,   -0.1278, 0, 13, 30, "London, United Kingdom"),
    (48.8566,    2.3522, 0, 14, 15, "Paris, France"),
    (40.4168,   -3.7038, 0, 15, 30, "Madrid, Spain"),
]

GASPAR_TABLE = [
    (9.0320,    38.7469, 0,  8,  0, "Addis Ababa, Ethiopia"),
    (30.0444,   31.2357, 0,  8, 25, "Cairo, Egypt"),
    (41.0082,   28.9784, 0,  8, 50, "Istanbul, Turkey"),
    (28.6139,   77.2090, 0,  9, 30, "New Delhi, India"),
    (39.9042,  116.4074, 0, 10, 10, "Beijing, China"),
    (37.5665,  126.9780, 0, 10, 45, "Seoul, South Korea"),
    (-36.8509, 174.7645, 0, 11, 30, "Auckland, New Zealand"),
    (19.4326,  -99.1332, 0, 12, 30, "Mexico City"),
    (43.6532,  -79.3832, 0, 13, 15, "Toronto, Canada"),
    (52.5200,   13.4050, 0, 14,  0, "Berlin, Germany"),
    (41.9028,   12.4964, 0, 15,  0, "Rome, Italy"),
]

BALTASAR_TABLE = [
    (9.0320,    38.7469, 0,  8,  0, "Addis Ababa, Ethiopia"),
    (-1.2921,   36.8219, 0,  8, 20, "Nairobi, Kenya"),
    (25.2048,   55.2708, 0,  8, 50, "Dubai, UAE"),
    (12.9716,   77.5946, 0,  9, 25, "Bangalore, India"),
    (22.3193,  114.1694, 0, 10,  0, "Hong Kong"),
    (34.6937,  135.5023, 0, 10, 35, "Osaka, Japan"),
    (-31.9505, 115.8605, 0, 11, 20, "Perth, Australia"),
    (-23.5505, -46.6333, 0, 12, 15, "Sao Paulo, Brazil"),
    (-12.0464, -77.0428, 0, 13,  0, "Lima, Peru"),
    (38.7223,   -9.1393, 0, 14,  0, "Lisbon, Portugal"),
    (41.3879,    2.1699, 0, 15, 15, "Barcelona, Spain"),
]
# -----------------------------------------------------------------------------

PROFILE_AVATARS = ("👶", "👧", "👦", "🧒", "👸", "🤴", "🎁", "⭐", "🐪", "👑", "🎅", "🦌")


def at(event_date: date, hour: int, minute: int = 0, day_offset: int = 0) -> datetime:
    """Build a CET instant relative to an event date."""
    day = event_date + timedelta(days=day_offset)
    return datetime.combine(day, time(hour, minute), tzinfo=CET)


def _from_table(table: list[tuple]) -> Callable[[date], list[Waypoint]]:
    def build(event_date: date) -> list[Waypoint]:
        return [
            Waypoint(lat, lon, at(event_date, hour, minute, offset), label)
            for lat, lon, offset, hour, minute, label in table
        ]
    return build


@dataclass(frozen=True)
class Traveler:
    """
    Everything that distinguishes one traveler from another.

    A traveler whose `arrival` is set finishes at the user's home: the
    home target is appended to its base route at that (event-relative) time.
    Only travelers with `movable_date` follow an event-date override; the
    others always fly on their `default_event_date`.
    """
    key: str
    name: str
    glyph: str
    color: str
    family: str
    default_event_date: date
    base_route: Callable[[date], list[Waypoint]]
    base_altitude: int
    config: EngineConfig
    arrival: Optional[tuple[int, int, int]] = None  # (day offset, hour, minute)
    bookmarks: dict[str, tuple[int, int, int]] = field(default_factory=dict)
    movable_date: bool = False

    @property
    def appends_home(self) -> bool:
        return self.arrival is not None

    def arrival_time(self, event_date: date) -> Optional[datetime]:
        if self.arrival is None:
            return None
        offset, hour, minute = self.arrival
        return at(event_date, hour, minute, offset)

    def bookmark_times(self, event_date: date) -> dict[str, datetime]:
        return {
            name: at(event_date, hour, minute, offset)
            for name, (offset, hour, minute) in self.bookmarks.items()
        }


_REYES_BOOKMARKS = {
    "start":  (0,  8,  0),
    "europe": (0, 13, 15),
    "spain":  (0, 15,  0),
    "end":    (0, 17, 50),
}

TRAVELERS: dict[str, Traveler] = {
    "santa": Traveler(
        key="santa",
        name="Santa Claus",
        glyph="🎅",
        color="#C0392B",
        family="santa",
        default_event_date=date(2025, 12, 24),
        base_route=_from_table(SANTA_TABLE),
        base_altitude=10000,
        config=EngineConfig.santa(),
        bookmarks={
            "start":    (0, 18,  0),
            "spain":    (0, 21,  0),
            "valencia": (0, 23, 20),
            "end":      (1,  7, 50),
        },
    ),
    "melchor": Traveler(
        key="melchor",
        name="Melchor",
        glyph="👑",
        color="#FFD700",
        family="reyes",
        default_event_date=date(2025, 1, 5),
        base_route=_from_table(MELCHOR_TABLE),
        base_altitude=8000,
        config=EngineConfig.reyes(),
        arrival=(0, 18, 0),
        bookmarks=_REYES_BOOKMARKS,
        movable_date=True,
    ),
    "gaspar": Traveler(
        key="gaspar",
        name="Gaspar",
        glyph="🎁",
        color="#E74C3C",
        family="reyes",
        default_event_date=date(2025, 1, 5),
        base_route=_from_table(GASPAR_TABLE),
        base_altitude=8000,
        config=EngineConfig.reyes(),
        arrival=(0, 18, 0),
        bookmarks=_REYES_BOOKMARKS,
        movable_date=True,
    ),
    "baltasar": Traveler(
        key="baltasar",
        name="Baltasar",
        glyph="⭐",
        color="#3498DB",
        family="reyes",
        default_event_date=date(2025, 1, 5),
        base_route=_from_table(BALTASAR_TABLE),
        base_altitude=8000,
        config=EngineConfig.reyes(),
        arrival=(0, 18, 0),
        bookmarks=_REYES_BOOKMARKS,
        movable_date=True,
    ),
}

FAMILIES: dict[str, tuple[str, ...]] = {
    "santa": ("santa",),
    "reyes": ("melchor", "gaspar", "baltasar"),
}


def get_traveler(key: str) -> Traveler:
    """
    Look up a traveler by key.

    Raises
    ------
    KeyError
        If no traveler is registered under `key`.
    """
    try:
        return TRAVELERS[key.lower()]
    except KeyError:
        raise KeyError(f"unknown traveler: {key!r}") from None


def family_members(family: str) -> list[Traveler]:
    try:
        keys = FAMILIES[family.lower()]
    except KeyError:
        raise KeyError(f"unknown traveler family: {family!r}") from None
    return [TRAVELERS[k] for k in keys]


def build_route(
    traveler: Traveler,
    target: Optional[Target] = None,
    event_date: Optional[date] = None,
) -> list[Waypoint]:
    """
    Materialize a traveler's route for an event date.

    Parameters
    ----------
    traveler
        The traveler whose table to use.
    target
        Home location; appended as the final waypoint for travelers that
        finish at the user's home. Ignored otherwise.
    event_date
        Day the journey starts on. Defaults to the traveler's own date.

    Returns
    -------
    list[Waypoint]
        Strictly time-ordered waypoints, at least two.
    """
    day = event_date or traveler.default_event_date
    route = traveler.base_route(day)
    if traveler.appends_home and target is not None:
        route.append(Waypoint(target.lat, target.lon, traveler.arrival_time(day), target.label))
    return route


def tracking_window(traveler: Traveler, event_date: Optional[date] = None) -> tuple[datetime, datetime]:
    """
    Return (start, end) of the traveler's journey, independent of any target.
    """
    day = event_date or traveler.default_event_date
    route = traveler.base_route(day)
    end = traveler.arrival_time(day) or route[-1].ts
    return route[0].ts, end
