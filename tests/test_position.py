"""Tests for position interpolation."""

from datetime import timedelta

import pytest

from tracker.engine.position import (
    ARRIVED_LABEL,
    PRE_DEPARTURE_LABEL,
    fraction,
    position,
    progress,
    segment_index,
    trajectory,
)
from tracker.engine.types import Waypoint


def test_halfway_on_single_segment(diagonal_route, t0):
    pos = position(t0 + timedelta(minutes=30), diagonal_route)
    assert pos.lat == pytest.approx(5.0)
    assert pos.lon == pytest.approx(5.0)
    assert pos.progress == 50
    assert pos.segment_label == "Origin"
    assert pos.next_stop == "Destination"
    assert pos.segment_index == 0
    # ~1568 km in one hour
    assert 1500 < pos.speed < 1600
    assert 0 < pos.heading < 90


def test_before_departure_pins_to_origin(diagonal_route, t0):
    pos = position(t0 - timedelta(minutes=5), diagonal_route)
    assert (pos.lat, pos.lon) == (0.0, 0.0)
    assert pos.progress == 0
    assert pos.speed == 0
    assert pos.segment_label == PRE_DEPARTURE_LABEL
    assert pos.next_stop == "Destination"
    assert pos.segment_index is None


def test_after_arrival_pins_to_destination(diagonal_route, t0):
    for late in (timedelta(hours=1), timedelta(hours=5)):
        pos = position(t0 + late, diagonal_route)
        assert (pos.lat, pos.lon) == (10.0, 10.0)
        assert pos.progress == 100
        assert pos.segment_label == ARRIVED_LABEL
        assert pos.next_stop is None


def test_progress_is_monotonic(diagonal_route, t0):
    values = [progress(t0 + timedelta(minutes=m), diagonal_route) for m in range(-10, 75, 5)]
    assert values == sorted(values)
    assert values[0] == 0 and values[-1] == 100


def test_fraction_clamped(t0):
    end = t0 + timedelta(hours=1)
    assert fraction(t0 - timedelta(hours=1), t0, end) == 0.0
    assert fraction(t0 + timedelta(hours=2), t0, end) == 1.0
    assert fraction(t0 + timedelta(minutes=15), t0, end) == pytest.approx(0.25)


def test_fraction_sweep_is_non_decreasing(t0):
    end = t0 + timedelta(hours=1)
    values = [fraction(t0 + timedelta(minutes=m), t0, end) for m in range(-15, 76, 3)]
    assert values == sorted(values)
    assert all(0.0 <= v <= 1.0 for v in values)
    assert values[0] == 0.0 and values[-1] == 1.0


def test_zero_duration_segment_does_not_divide_by_zero(t0):
    assert fraction(t0, t0, t0) == 0.0
    route = [
        Waypoint(0.0, 0.0, t0, "A"),
        Waypoint(1.0, 1.0, t0, "B"),
        Waypoint(2.0, 2.0, t0 + timedelta(hours=1), "C"),
    ]
    pos = position(t0, route)
    assert pos.segment_label == "B"
    assert (pos.lat, pos.lon) == (1.0, 1.0)


def test_segment_index_binary_search(t0):
    route = [Waypoint(float(i), 0.0, t0 + timedelta(minutes=10 * i), str(i)) for i in range(6)]
    assert segment_index(t0, route) == 0
    assert segment_index(t0 + timedelta(minutes=10), route) == 1
    assert segment_index(t0 + timedelta(minutes=35), route) == 3
    # clamped to the last segment
    assert segment_index(t0 + timedelta(hours=2), route) == 4


def test_trajectory(diagonal_route, t0):
    assert trajectory(t0 - timedelta(minutes=1), diagonal_route) == []
    path = trajectory(t0 + timedelta(minutes=30), diagonal_route)
    assert path[0] == (0.0, 0.0)
    assert path[-1] == pytest.approx((5.0, 5.0))
