# tracker/engine/config.py

from dataclasses import dataclass
from enum import Enum


class EtaPolicy(str, Enum):
    """
    How an arrival estimate is derived.

    SAMPLED
        Walk the route in fixed steps and pick the first future instant
        within the proximity radius of the target.
    FIXED_ARRIVAL
        Every traveler reaches the target at the route's final instant.
    """
    SAMPLED = "sampled"
    FIXED_ARRIVAL = "fixed_arrival"


@dataclass
class EngineConfig:
    """
    Configuration for the position/ETA engine and its demo clock.

    Attributes
    ----------
    proximity_radius_km
        Distance (km) below which a traveler is "arriving".
    samples_per_segment
        Number of steps each segment is cut into by the sampled ETA search.
    eta_policy
        Which ETA strategy to use.
    tick_interval_ms
        Period (ms) of the external timer driving `DemoClock.tick`.
    speed_multiplier
        Default demo speed-up factor.
    demo_speeds
        Speed presets offered to the demo controls.
    """
    proximity_radius_km: float      = 30.0
    samples_per_segment: int        = 20
    eta_policy:          EtaPolicy  = EtaPolicy.SAMPLED
    tick_interval_ms:    int        = 100
    speed_multiplier:    float      = 100
    demo_speeds:         tuple      = (1, 10, 100, 1000)

    @classmethod
    def santa(cls):
        """Preset for the Christmas Eve route (sampled ETA)."""
        return cls()

    @classmethod
    def reyes(cls):
        """Preset for the Three Kings routes (shared fixed arrival)."""
        return cls(
            eta_policy=EtaPolicy.FIXED_ARRIVAL,
            demo_speeds=(60, 600, 1000, 2000),
        )
