"""API tests through FastAPI's TestClient."""

from datetime import date, datetime

import pytest
import requests
from fastapi.testclient import TestClient

from tracker.engine.routes import CET
from tracker.server import create_app

MADRID = {"lat": 40.4168, "lon": -3.7038, "label": "Madrid"}


@pytest.fixture
def client(db_path):
    with TestClient(create_app(db_path)) as client:
        yield client


def _ts(value):
    return datetime.fromisoformat(value)


def test_status(client):
    resp = client.get("/api/status")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_travelers_and_routes(client):
    travelers = client.get("/api/travelers").json()
    assert [t["key"] for t in travelers] == ["santa", "melchor", "gaspar", "baltasar"]
    assert travelers[1]["eta_policy"] == "fixed_arrival"

    route = client.get("/api/travelers/santa/route").json()
    assert route[0]["label"] == "Santa Claus Village"
    assert client.get("/api/travelers/rudolph/route").status_code == 404


def test_position_before_departure(client):
    body = {"traveler": "santa", "at": "2025-12-24T17:00:00+01:00", **MADRID}
    pos = client.post("/api/position", json=body).json()
    assert pos["progress"] == 0
    assert pos["segment_label"] == "Getting ready to depart"
    assert pos["next_stop"] == "Joensuu, Finland"


def test_position_rejects_naive_timestamps(client):
    body = {"traveler": "santa", "at": "2025-12-24T17:00:00", **MADRID}
    assert client.post("/api/position", json=body).status_code == 422


def test_position_unknown_traveler(client):
    body = {"traveler": "rudolph", "at": "2025-12-24T17:00:00+01:00", **MADRID}
    assert client.post("/api/position", json=body).status_code == 404


def test_kings_eta_is_fixed_arrival(client):
    body = {"traveler": "melchor", "at": "2025-01-05T10:00:00+01:00", **MADRID}
    out = client.post("/api/eta", json=body).json()
    assert _ts(out["eta"]) == datetime(2025, 1, 5, 18, 0, tzinfo=CET)
    assert out["time_remaining"] == "8h 0min"
    assert not out["is_passed"]


def test_combined_eta(client):
    body = {"family": "reyes", "at": "2025-01-05T12:00:00+01:00", **MADRID}
    out = client.post("/api/eta/combined", json=body).json()
    assert [t["traveler"] for t in out["travelers"]] == ["melchor", "gaspar", "baltasar"]
    assert _ts(out["combined"]["eta"]) == datetime(2025, 1, 5, 18, 0, tzinfo=CET)
    assert out["combined"]["distance_km"] == max(t["distance_km"] for t in out["travelers"])

    body["family"] = "elves"
    assert client.post("/api/eta/combined", json=body).status_code == 404


def test_trajectory(client):
    body = {"traveler": "santa", "at": "2025-12-24T19:00:00+01:00", **MADRID}
    path = client.post("/api/trajectory", json=body).json()
    # three waypoints already reached plus the current position
    assert len(path) == 4


def test_demo_clock_drives_engine(client):
    state = client.post("/api/demo/reyes/enable").json()
    assert state["is_demo_mode"] and state["is_playing"]
    assert _ts(state["simulated_time"]) == datetime(2025, 1, 5, 8, 0, tzinfo=CET)
    assert state["speeds"] == [60, 600, 1000, 2000]
    assert state["bookmarks"] == ["start", "europe", "spain", "end"]

    pos = client.post("/api/position", json={"traveler": "gaspar", **MADRID}).json()
    assert pos["segment_label"] == "Addis Ababa, Ethiopia"

    client.post("/api/demo/reyes/speed", json={"multiplier": 600})
    state = client.post("/api/demo/reyes/tick", params={"count": 10}).json()
    assert _ts(state["now"]) == datetime(2025, 1, 5, 8, 10, tzinfo=CET)

    state = client.post("/api/demo/reyes/jump/spain").json()
    assert _ts(state["now"]) == datetime(2025, 1, 5, 15, 0, tzinfo=CET)

    state = client.post("/api/demo/reyes/toggle").json()
    assert not state["is_playing"]

    # the santa clock is independent
    assert not client.get("/api/demo/santa").json()["is_demo_mode"]

    state = client.post("/api/demo/reyes/disable").json()
    assert not state["is_demo_mode"]


def test_demo_errors(client):
    assert client.post("/api/demo/reyes/jump/north-pole").status_code == 404
    assert client.get("/api/demo/elves").status_code == 404
    assert client.post("/api/demo/santa/speed", json={"multiplier": 0}).status_code == 422


def test_stats_and_messages(client):
    stats = client.get("/api/stats/melchor").json()
    assert {"gifts", "candies", "stars"} <= set(stats)

    msg = client.get("/api/messages/random", params={"traveler": "gaspar"}).json()
    assert msg["traveler"] == "gaspar"
    assert client.get("/api/messages/random", params={"traveler": "grinch"}).status_code == 404


def test_profiles_and_checklist(client):
    body = {"device_id": "dev-1", "name": "Lucía", "avatar": "👧", "city_label": "Madrid", "lat": 40.4, "lon": -3.7}
    resp = client.post("/api/profiles", json=body)
    assert resp.status_code == 201
    profile = resp.json()

    assert [p["id"] for p in client.get("/api/profiles", params={"device_id": "dev-1"}).json()] == [profile["id"]]
    assert client.post("/api/profiles", json={**body, "avatar": "🐸"}).status_code == 422

    resp = client.put(f"/api/profiles/{profile['id']}", json={**body, "city_label": "Valencia"})
    assert resp.json()["city_label"] == "Valencia"
    assert client.put(f"/api/profiles/{profile['id']}", json={**body, "device_id": "dev-2"}).status_code == 403
    assert client.put("/api/profiles/missing", json=body).status_code == 404

    items = client.post(f"/api/profiles/{profile['id']}/checklist/shoes").json()
    assert [i["id"] for i in items if i["checked"]] == ["shoes"]
    assert client.post(f"/api/profiles/{profile['id']}/checklist/carrots").status_code == 404
    items = client.delete(f"/api/profiles/{profile['id']}/checklist").json()
    assert not any(i["checked"] for i in items)

    assert client.delete(f"/api/profiles/{profile['id']}").status_code == 204
    assert client.delete(f"/api/profiles/{profile['id']}").status_code == 404
    assert client.get("/api/profiles/missing/checklist").status_code == 404

    client.post("/api/profiles", json=body)
    client.post("/api/profiles", json=body)
    assert client.delete("/api/devices/dev-1/profiles").json() == {"deleted": 2}


def test_geocode_errors(client, monkeypatch):
    assert client.post("/api/geocode", json={"query": "  "}).status_code == 400

    def boom(*args, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", boom)
    assert client.post("/api/geocode", json={"query": "Madrid"}).status_code == 502


def test_family_status_follows_demo_clock(client):
    client.post("/api/demo/santa/enable")
    out = client.get("/api/status/santa").json()
    assert out["status"] == "tracking"
    assert out["countdown"]["total_seconds"] == 0
    client.post("/api/demo/santa/jump/end")
    client.post("/api/demo/santa/speed", json={"multiplier": 100000})
    client.post("/api/demo/santa/tick")
    assert client.get("/api/status/santa").json()["status"] == "ended"
    assert client.get("/api/status/elves").status_code == 404


def test_event_date_only_moves_the_kings(tmp_path):
    with TestClient(create_app(str(tmp_path / "t.sqlite"), date(2026, 1, 5))) as client:
        travelers = {t["key"]: t for t in client.get("/api/travelers").json()}
        assert _ts(travelers["santa"]["start"]) == datetime(2025, 12, 24, 18, 0, tzinfo=CET)
        assert _ts(travelers["melchor"]["start"]) == datetime(2026, 1, 5, 8, 0, tzinfo=CET)
        out = client.get("/api/status/reyes").json()
        assert _ts(out["start"]) == datetime(2026, 1, 5, 8, 0, tzinfo=CET)


def test_family_names_are_case_insensitive(client):
    assert client.get("/api/demo/Reyes").json()["family"] == "reyes"
    assert client.get("/api/status/SANTA").status_code == 200
    body = {"family": "Reyes", "at": "2025-01-05T12:00:00+01:00", **MADRID}
    out = client.post("/api/eta/combined", json=body)
    assert out.status_code == 200
    assert out.json()["family"] == "reyes"


def test_kings_route_with_home_matches_window(client):
    route = client.get("/api/travelers/melchor/route", params=MADRID).json()
    assert route[-1]["label"] == "Madrid"
    assert _ts(route[-1]["ts"]) == datetime(2025, 1, 5, 18, 0, tzinfo=CET)
    bare = client.get("/api/travelers/melchor/route").json()
    assert bare[-1]["label"] == "Madrid, Spain"
    assert client.get("/api/travelers/melchor/route", params={"lat": 95, "lon": 0}).status_code == 422


def test_message_feed_fires_once_until_demo_restarts(client):
    client.post("/api/demo/reyes/enable")
    client.post("/api/demo/reyes/jump/spain")
    body = {"traveler": "melchor", **MADRID}
    ids = [m["id"] for m in client.post("/api/messages/feed", json=body).json()]
    assert ids[0] == "departure"
    assert "eta-60" not in ids
    assert client.post("/api/messages/feed", json=body).json() == []

    client.post("/api/demo/reyes/jump/end")
    ids = [m["id"] for m in client.post("/api/messages/feed", json=body).json()]
    # 10 minutes out and already over the home city
    assert ids == ["departure", "spain", "eta-60", "arriving"]

    # other travelers keep their own feed
    ids = [m["id"] for m in client.post("/api/messages/feed", json={**body, "traveler": "gaspar"}).json()]
    assert "departure" in ids
