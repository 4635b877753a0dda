from datetime import datetime, timedelta

import pytest

from tracker.engine.routes import CET
from tracker.engine.types import Waypoint

T0 = datetime(2025, 12, 24, 18, 0, tzinfo=CET)


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def diagonal_route():
    """(0, 0) -> (10, 10) in one hour."""
    return [
        Waypoint(0.0, 0.0, T0, "Origin"),
        Waypoint(10.0, 10.0, T0 + timedelta(hours=1), "Destination"),
    ]


@pytest.fixture
def northbound_route():
    """(0, 0) -> (10, 0) in one hour, straight up the prime meridian."""
    return [
        Waypoint(0.0, 0.0, T0, "South"),
        Waypoint(10.0, 0.0, T0 + timedelta(hours=1), "North"),
    ]


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "tracker.sqlite")
