"""Tests for the demo clock."""

from datetime import timedelta

import pytest

from tracker.engine.clock import DemoClock


@pytest.fixture
def clock(t0):
    wall = t0 - timedelta(days=30)
    return DemoClock(
        t0,
        t0 + timedelta(hours=1),
        bookmarks={"middle": t0 + timedelta(minutes=30)},
        wall_clock=lambda: wall,
    )


def test_disabled_clock_is_wall_clock(clock, t0):
    assert clock.now() == t0 - timedelta(days=30)
    clock.tick()
    assert clock.simulated_time == t0


def test_enable_resets_to_start_and_plays(clock, t0):
    clock.jump_to(t0 + timedelta(minutes=20))
    clock.enable()
    assert clock.is_demo_mode
    assert clock.is_playing
    assert clock.now() == t0


def test_tick_advances_interval_times_speed(clock, t0):
    clock.enable()
    clock.set_speed(600)
    clock.tick()
    assert clock.now() == t0 + timedelta(seconds=60)


def test_paused_clock_does_not_move(clock, t0):
    clock.enable()
    assert clock.toggle() is False
    clock.tick()
    assert clock.now() == t0


def test_tick_clamps_at_end_and_pauses(clock, t0):
    clock.enable()
    clock.set_speed(1000)
    clock.jump_to(t0 + timedelta(minutes=59, seconds=50))
    clock.tick()
    assert clock.now() == t0 + timedelta(hours=1)
    assert not clock.is_playing
    clock.tick()
    assert clock.now() == t0 + timedelta(hours=1)


def test_jump_to_bookmark(clock, t0):
    clock.enable()
    clock.toggle()
    clock.jump("middle")
    assert clock.now() == t0 + timedelta(minutes=30)
    assert clock.is_playing
    clock.jump("end")
    assert clock.now() == t0 + timedelta(hours=1)


def test_unknown_bookmark(clock):
    with pytest.raises(KeyError):
        clock.jump("north-pole")


def test_disable_returns_to_wall_clock(clock, t0):
    clock.enable()
    clock.disable()
    assert not clock.is_playing
    assert clock.now() == t0 - timedelta(days=30)


def test_invalid_arguments(clock, t0):
    with pytest.raises(ValueError):
        clock.set_speed(0)
    with pytest.raises(ValueError):
        DemoClock(t0, t0 - timedelta(seconds=1))


def test_state_snapshot(clock, t0):
    clock.enable()
    state = clock.state()
    assert state.is_demo_mode and state.is_playing
    assert state.simulated_time == state.now == t0
    assert state.speed_multiplier == 100
