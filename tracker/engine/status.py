# tracker/engine/status.py

"""
Journey phase and departure countdown, both relative to a caller-supplied
`now` so the demo clock drives them too.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class TrackingStatus(str, Enum):
    """
    COUNTDOWN
        Before departure.
    TRACKING
        Between departure (inclusive) and the end of the journey.
    ENDED
        At or after the end of the journey.
    """
    COUNTDOWN = "countdown"
    TRACKING = "tracking"
    ENDED = "ended"


@dataclass(frozen=True)
class Countdown:
    days: int
    hours: int
    minutes: int
    seconds: int

    @property
    def total_seconds(self) -> int:
        return ((self.days * 24 + self.hours) * 60 + self.minutes) * 60 + self.seconds


def tracking_status(now: datetime, start: datetime, end: datetime) -> TrackingStatus:
    if now < start:
        return TrackingStatus.COUNTDOWN
    if now >= end:
        return TrackingStatus.ENDED
    return TrackingStatus.TRACKING


def time_until(start: datetime, now: datetime) -> Countdown:
    """
    Whole days/hours/minutes/seconds left until `start`; all zero once it has passed.
    """
    remaining = max(0, int((start - now).total_seconds()))
    days, rest = divmod(remaining, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return Countdown(days, hours, minutes, seconds)
