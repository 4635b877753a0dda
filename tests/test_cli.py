"""Tests for the command-line entry point, checked through its log output."""

import logging

import pytest

from tracker import cli
from tracker.storage.dao import DAO
from tracker.utils.validate import ProfileIn

MADRID = ["--lat", "40.4168", "--lon", "-3.7038", "--label", "Madrid"]


@pytest.fixture
def logs(caplog):
    caplog.set_level(logging.INFO)
    return caplog


def test_parse_args():
    args = cli.parse_args(["eta", "melchor", *MADRID, "--radius", "10", "--event-date", "2026-01-05"])
    assert args.command == "eta"
    assert args.traveler == "melchor"
    assert args.radius == 10.0
    assert args.event_date.year == 2026


def test_unknown_traveler_is_rejected():
    with pytest.raises(SystemExit) as exc:
        cli.parse_args(["position", "rudolph", *MADRID])
    assert exc.value.code == 2


def test_position(logs):
    cli.main(["position", "santa", *MADRID, "--at", "2025-12-24T17:00:00+01:00"])
    line = logs.messages[-1]
    assert "Santa Claus @ 2025-12-24T17:00:00+01:00" in line
    assert "Getting ready to depart -> Joensuu, Finland" in line


def test_eta_logs_fixed_arrival(logs):
    cli.main(["eta", "gaspar", *MADRID, "--at", "2025-01-05T12:00:00+01:00"])
    line = logs.messages[-1]
    assert line.startswith("Gaspar -> Madrid: eta=2025-01-05T18:00:00+01:00 (6h 0min)")
    assert "passed=False" in line


def test_kings_event_date_does_not_move_santa(logs):
    cli.main(["routes", "--event-date", "2026-01-05"])
    santa = next(m for m in logs.messages if " santa " in m)
    melchor = next(m for m in logs.messages if " melchor " in m)
    assert "2025-12-24T18:00:00+01:00 -> 2025-12-25T08:00:00+01:00" in santa
    assert "2026-01-05T08:00:00+01:00 -> 2026-01-05T18:00:00+01:00" in melchor


def test_routes_for_one_king(logs):
    cli.main(["routes", "baltasar"])
    assert "Addis Ababa, Ethiopia" in logs.messages[0]
    assert logs.messages[-1].strip() == "2025-01-05T18:00:00+01:00  (home)"


def test_status(logs):
    cli.main(["status", "reyes", "--at", "2025-01-04T07:00:00+01:00"])
    assert logs.messages[-1] == "reyes @ 2025-01-04T07:00:00+01:00: countdown, departure in 1d 01h 00m 00s"
    cli.main(["status", "santa", "--at", "2025-12-24T20:00:00+01:00"])
    assert ": tracking," in logs.messages[-1]


def test_naive_timestamp_exits_nonzero():
    with pytest.raises(SystemExit) as exc:
        cli.main(["position", "santa", *MADRID, "--at", "2025-12-24T22:30:00"])
    assert exc.value.code == 2


def test_demo_runs_to_the_end(logs):
    cli.main(["demo", "melchor", *MADRID, "--speed", "2000", "--every", "50"])
    assert logs.messages[-1] == "Demo stopped at 2025-01-05T18:00:00+01:00"
    assert any("The Three Kings have set off!" in m for m in logs.messages)
    assert any("About one hour until arrival" in m for m in logs.messages)


def test_demo_unknown_bookmark_exits_nonzero():
    with pytest.raises(SystemExit) as exc:
        cli.main(["demo", "santa", *MADRID, "--bookmark", "north-pole", "--ticks", "1"])
    assert exc.value.code == 2


def test_profiles_listing_and_reset(tmp_path, monkeypatch, logs):
    device_file = tmp_path / "device_id"
    db = str(tmp_path / "t.sqlite")
    monkeypatch.setattr("tracker.utils.device.DEFAULT_DEVICE_FILE", device_file)

    cli.main(["profiles", "--db", db])
    assert device_file.exists()
    device_id = device_file.read_text(encoding="utf-8")
    assert logs.messages[-1] == f"Device {device_id}"

    dao = DAO(db)
    profile = dao.add_profile(ProfileIn(
        device_id=device_id, name="Lucía", avatar="👧", city_label="Madrid", lat=40.4168, lon=-3.7038,
    ))
    dao.close()

    cli.main(["profiles", "--db", db])
    assert logs.messages[-1] == f"👧 Lucía - Madrid (40.4168, -3.7038) [{profile.id}]"

    cli.main(["profiles", "--db", db, "--reset"])
    assert logs.messages[-1] == "Removed 1 profiles and the device id"
    assert not device_file.exists()
