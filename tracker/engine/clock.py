# tracker/engine/clock.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from tracker.utils.log import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DemoState:
    """
    Snapshot of a demo clock.
    """
    is_demo_mode: bool
    simulated_time: datetime
    speed_multiplier: float
    is_playing: bool
    now: datetime


class DemoClock:
    """
    Substitutable time source with play/pause, speed-up and bookmarks.

    Disabled, `now()` is the wall clock. Enabled, `now()` is a simulated
    instant that only moves when `tick()` is called by an external timer,
    by `tick_interval_ms * speed_multiplier` each time, and never past `end`.
    """

    def __init__(
        self,
        start: datetime,
        end: datetime,
        bookmarks: Optional[dict[str, datetime]] = None,
        tick_interval_ms: int = 100,
        speed_multiplier: float = 100,
        wall_clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if end < start:
            raise ValueError("demo clock end precedes start")
        self.start = start
        self.end = end
        self.bookmarks = {"start": start, "end": end, **(bookmarks or {})}
        self.tick_interval_ms = tick_interval_ms
        self.speed_multiplier = speed_multiplier
        self.wall_clock = wall_clock

        self.is_demo_mode = False
        self.is_playing = False
        self.simulated_time = start

    def enable(self) -> None:
        self.is_demo_mode = True
        self.simulated_time = self.start
        self.is_playing = True
        logger.info("Demo mode on at %s (x%s)", self.simulated_time.isoformat(), self.speed_multiplier)

    def disable(self) -> None:
        self.is_demo_mode = False
        self.is_playing = False
        logger.info("Demo mode off")

    def toggle(self) -> bool:
        """Flip play/pause; returns the new playing flag."""
        self.is_playing = not self.is_playing
        return self.is_playing

    def set_speed(self, multiplier: float) -> None:
        if multiplier <= 0:
            raise ValueError(f"speed multiplier must be positive, got {multiplier}")
        self.speed_multiplier = multiplier

    def jump_to(self, instant: datetime) -> None:
        self.simulated_time = instant
        self.is_playing = True

    def jump(self, bookmark: str) -> None:
        """
        Move the simulated time to a named instant and resume playing.

        Raises
        ------
        KeyError
            If `bookmark` is not one of this clock's bookmarks.
        """
        try:
            instant = self.bookmarks[bookmark]
        except KeyError:
            raise KeyError(f"unknown bookmark: {bookmark!r}") from None
        logger.debug("Jump to %s (%s)", bookmark, instant.isoformat())
        self.jump_to(instant)

    def tick(self) -> None:
        if not self.is_demo_mode or not self.is_playing:
            return
        step = timedelta(milliseconds=self.tick_interval_ms * self.speed_multiplier)
        advanced = self.simulated_time + step
        if advanced >= self.end:
            self.simulated_time = self.end
            self.is_playing = False
            logger.info("Demo clock reached the end, pausing")
            return
        self.simulated_time = advanced

    def now(self) -> datetime:
        return self.simulated_time if self.is_demo_mode else self.wall_clock()

    def state(self) -> DemoState:
        return DemoState(
            is_demo_mode=self.is_demo_mode,
            simulated_time=self.simulated_time,
            speed_multiplier=self.speed_multiplier,
            is_playing=self.is_playing,
            now=self.now(),
        )
