"""
Pydantic schemas for API bodies, API responses and stored rows.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from tracker.engine.routes import PROFILE_AVATARS


class ProfileIn(BaseModel):
    """
    Fields a client may set when creating or editing a profile.
    """
    device_id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=60)
    avatar: str
    city_label: str = Field(min_length=1)
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)

    @field_validator("name", "city_label")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("avatar")
    @classmethod
    def _known_avatar(cls, value: str) -> str:
        if value not in PROFILE_AVATARS:
            raise ValueError(f"avatar must be one of {' '.join(PROFILE_AVATARS)}")
        return value


class Profile(ProfileIn):
    """
    Stored profile row.
    """
    id: str
    created_at: str


class ChecklistItem(BaseModel):
    id: str
    label: str
    checked: bool = False


class GeocodeQuery(BaseModel):
    query: str


class Place(BaseModel):
    """
    One geocoding hit.
    """
    display_name: str
    lat: float
    lon: float
    type: Optional[str] = None
    address: Optional[dict] = None


class TrackQuery(BaseModel):
    """
    Where is a traveler, relative to a home, at an instant?
    `at` defaults to the traveler family's clock.
    """
    traveler: str = "santa"
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    label: str = "Home"
    at: Optional[datetime] = None
    proximity_radius_km: Optional[float] = Field(default=None, gt=0)

    @field_validator("at")
    @classmethod
    def _aware(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            raise ValueError("timestamp must carry a timezone offset")
        return value


class CombinedQuery(TrackQuery):
    family: str = "reyes"


class PositionOut(BaseModel):
    traveler: str
    at: datetime
    lat: float
    lon: float
    heading: float
    speed: int
    altitude: int
    segment_label: str
    next_stop: Optional[str]
    progress: int


class ETAOut(BaseModel):
    traveler: str
    at: datetime
    eta: Optional[datetime]
    distance_km: float
    is_passed: bool
    is_near: bool
    time_remaining: Optional[str] = None


class CombinedETAOut(BaseModel):
    family: str
    at: datetime
    travelers: list[ETAOut]
    combined: ETAOut


class WaypointOut(BaseModel):
    lat: float
    lon: float
    ts: datetime
    label: str


class TravelerOut(BaseModel):
    key: str
    name: str
    glyph: str
    color: str
    family: str
    start: datetime
    end: datetime
    appends_home: bool
    eta_policy: str


class DemoStateOut(BaseModel):
    family: str
    is_demo_mode: bool
    simulated_time: datetime
    speed_multiplier: float
    is_playing: bool
    now: datetime
    bookmarks: list[str]
    speeds: list[float]


class SpeedIn(BaseModel):
    multiplier: float = Field(gt=0)


class MessageOut(BaseModel):
    id: str
    kind: str
    text: str
    glyph: str
    traveler: Optional[str] = None


class CountdownOut(BaseModel):
    days: int
    hours: int
    minutes: int
    seconds: int
    total_seconds: int


class StatusOut(BaseModel):
    """
    Journey phase of a traveler family at `at`.
    """
    family: str
    at: datetime
    status: str
    start: datetime
    end: datetime
    countdown: CountdownOut
