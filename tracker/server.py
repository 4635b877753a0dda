# tracker/server.py
"""
FastAPI server for the tracker.
"""

from datetime import date
from typing import Iterator, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from starlette.responses import JSONResponse

from tracker.engine.eta import format_time_remaining
from tracker.engine.messages import MessageFeed, random_message
from tracker.engine.routes import FAMILIES, TRAVELERS, Traveler, get_traveler
from tracker.engine.types import ETAResult, Target
from tracker.geocode import GeocodeError, Geocoder
from tracker.storage.dao import DAO
from tracker.tracking import Tracker
from tracker.utils.log import get_logger
from tracker.utils.validate import (
    ChecklistItem,
    CombinedETAOut,
    CombinedQuery,
    CountdownOut,
    DemoStateOut,
    ETAOut,
    GeocodeQuery,
    MessageOut,
    Place,
    PositionOut,
    Profile,
    ProfileIn,
    SpeedIn,
    StatusOut,
    TrackQuery,
    TravelerOut,
    WaypointOut,
)

logger = get_logger(__name__)


def _traveler(key: str) -> Traveler:
    try:
        return get_traveler(key)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0]))


def _eta_out(key: str, at, result: ETAResult) -> ETAOut:
    return ETAOut(
        traveler=key,
        at=at,
        eta=result.eta,
        distance_km=result.distance,
        is_passed=result.is_passed,
        is_near=result.is_near,
        time_remaining=format_time_remaining(result.eta, at) if result.eta else None,
    )


def create_app(db_path: str, event_date: Optional[date] = None) -> FastAPI:
    """
    Build a FastAPI instance bound to a database file and the Three Kings' event date.

    The app owns one demo clock per traveler family; every engine call
    reads "now" from the matching clock unless the request pins an instant.
    """
    app = FastAPI(title="tracker")
    app.state.db_path = db_path
    app.state.tracker = Tracker(event_date)
    app.state.clocks = {family: app.state.tracker.demo_clock(family) for family in FAMILIES}
    app.state.feeds = {key: MessageFeed(t.family) for key, t in TRAVELERS.items()}

    def get_dao(request: Request) -> Iterator[DAO]:
        dao = DAO(request.app.state.db_path)
        try:
            yield dao
        finally:
            dao.close()

    def clock_for(request: Request, family: str):
        try:
            return request.app.state.clocks[family.lower()]
        except KeyError:
            raise HTTPException(status_code=404, detail=f"unknown traveler family: {family!r}")

    def resolve_now(request: Request, traveler: Traveler, query: TrackQuery):
        return query.at or clock_for(request, traveler.family).now()

    @app.get("/api/status", response_class=JSONResponse)
    async def status() -> JSONResponse:
        return JSONResponse(status_code=200, content={"status": "ok"})

    @app.get("/api/status/{family}", response_model=StatusOut)
    async def family_status(request: Request, family: str):
        family = family.lower()
        now = clock_for(request, family).now()
        tracker: Tracker = request.app.state.tracker
        phase, countdown = tracker.status(family, now)
        start, end = tracker.window(TRAVELERS[FAMILIES[family][0]])
        return StatusOut(
            family=family,
            at=now,
            status=phase.value,
            start=start,
            end=end,
            countdown=CountdownOut(
                days=countdown.days,
                hours=countdown.hours,
                minutes=countdown.minutes,
                seconds=countdown.seconds,
                total_seconds=countdown.total_seconds,
            ),
        )

    # -- travelers and engine -------------------------------------------------

    @app.get("/api/travelers", response_model=list[TravelerOut])
    async def list_travelers(request: Request):
        tracker: Tracker = request.app.state.tracker
        out = []
        for t in TRAVELERS.values():
            start, end = tracker.window(t)
            out.append(TravelerOut(
                key=t.key,
                name=t.name,
                glyph=t.glyph,
                color=t.color,
                family=t.family,
                start=start,
                end=end,
                appends_home=t.appends_home,
                eta_policy=t.config.eta_policy.value,
            ))
        return out

    @app.get("/api/travelers/{key}/route", response_model=list[WaypointOut])
    async def get_route(
        request: Request,
        key: str,
        lat: Optional[float] = Query(default=None, ge=-90, le=90),
        lon: Optional[float] = Query(default=None, ge=-180, le=180),
        label: str = "Home",
    ):
        traveler = _traveler(key)
        target = Target(lat, lon, label) if lat is not None and lon is not None else None
        route = request.app.state.tracker.route(traveler, target)
        return [WaypointOut(lat=w.lat, lon=w.lon, ts=w.ts, label=w.label) for w in route]

    @app.post("/api/position", response_model=PositionOut)
    async def get_position(request: Request, query: TrackQuery):
        traveler = _traveler(query.traveler)
        now = resolve_now(request, traveler, query)
        target = Target(query.lat, query.lon, query.label)
        pos = request.app.state.tracker.position(traveler, target, now)
        return PositionOut(
            traveler=traveler.key,
            at=now,
            lat=pos.lat,
            lon=pos.lon,
            heading=pos.heading,
            speed=pos.speed,
            altitude=pos.altitude,
            segment_label=pos.segment_label,
            next_stop=pos.next_stop,
            progress=pos.progress,
        )

    @app.post("/api/trajectory", response_model=list[tuple[float, float]])
    async def get_trajectory(request: Request, query: TrackQuery):
        traveler = _traveler(query.traveler)
        now = resolve_now(request, traveler, query)
        target = Target(query.lat, query.lon, query.label)
        return request.app.state.tracker.trajectory(traveler, target, now)

    @app.post("/api/eta", response_model=ETAOut)
    async def get_eta(request: Request, query: TrackQuery):
        traveler = _traveler(query.traveler)
        now = resolve_now(request, traveler, query)
        target = Target(query.lat, query.lon, query.label)
        result = request.app.state.tracker.eta(traveler, target, now, query.proximity_radius_km)
        return _eta_out(traveler.key, now, result)

    @app.post("/api/eta/combined", response_model=CombinedETAOut)
    async def get_combined_eta(request: Request, query: CombinedQuery):
        clock = clock_for(request, query.family)
        now = query.at or clock.now()
        target = Target(query.lat, query.lon, query.label)
        per_traveler, combined = request.app.state.tracker.family_eta(
            query.family, target, now, query.proximity_radius_km
        )
        family = query.family.lower()
        return CombinedETAOut(
            family=family,
            at=now,
            travelers=[_eta_out(k, now, r) for k, r in per_traveler.items()],
            combined=_eta_out(family, now, combined),
        )

    @app.get("/api/stats/{key}", response_class=JSONResponse)
    async def get_stats(request: Request, key: str):
        traveler = _traveler(key)
        now = clock_for(request, traveler.family).now()
        stats = request.app.state.tracker.stats(traveler, now)
        return JSONResponse(status_code=200, content={"traveler": traveler.key, "at": now.isoformat(), **stats})

    @app.get("/api/messages/random", response_model=MessageOut)
    async def get_random_message(traveler: Optional[str] = None):
        try:
            msg = random_message(traveler)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"no messages for traveler {traveler!r}")
        return MessageOut(id=msg.id, kind=msg.kind, text=msg.text, glyph=msg.glyph, traveler=msg.traveler)

    @app.post("/api/messages/feed", response_model=list[MessageOut])
    async def get_feed_messages(request: Request, query: TrackQuery):
        """
        Milestone messages newly due for a traveler; each fires once until the
        family's demo clock is restarted or jumps.
        """
        traveler = _traveler(query.traveler)
        now = resolve_now(request, traveler, query)
        target = Target(query.lat, query.lon, query.label)
        tracker: Tracker = request.app.state.tracker
        pos = tracker.position(traveler, target, now)
        result = tracker.eta(traveler, target, now, query.proximity_radius_km)
        feed: MessageFeed = request.app.state.feeds[traveler.key]
        return [
            MessageOut(id=m.id, kind=m.kind, text=m.text, glyph=m.glyph, traveler=m.traveler)
            for m in feed.update(pos, result, now)
        ]

    # -- demo clock -----------------------------------------------------------

    def demo_state(request: Request, family: str) -> DemoStateOut:
        clock = clock_for(request, family)
        family = family.lower()
        state = clock.state()
        return DemoStateOut(
            family=family,
            is_demo_mode=state.is_demo_mode,
            simulated_time=state.simulated_time,
            speed_multiplier=state.speed_multiplier,
            is_playing=state.is_playing,
            now=state.now,
            bookmarks=sorted(clock.bookmarks, key=clock.bookmarks.get),
            speeds=list(TRAVELERS[FAMILIES[family][0]].config.demo_speeds),
        )

    def reset_feeds(request: Request, family: str) -> None:
        for key in FAMILIES[family.lower()]:
            request.app.state.feeds[key].reset()

    @app.get("/api/demo/{family}", response_model=DemoStateOut)
    async def get_demo(request: Request, family: str):
        return demo_state(request, family)

    @app.post("/api/demo/{family}/enable", response_model=DemoStateOut)
    async def enable_demo(request: Request, family: str):
        clock_for(request, family).enable()
        reset_feeds(request, family)
        return demo_state(request, family)

    @app.post("/api/demo/{family}/disable", response_model=DemoStateOut)
    async def disable_demo(request: Request, family: str):
        clock_for(request, family).disable()
        reset_feeds(request, family)
        return demo_state(request, family)

    @app.post("/api/demo/{family}/toggle", response_model=DemoStateOut)
    async def toggle_demo(request: Request, family: str):
        clock_for(request, family).toggle()
        return demo_state(request, family)

    @app.post("/api/demo/{family}/tick", response_model=DemoStateOut)
    async def tick_demo(request: Request, family: str, count: int = 1):
        clock = clock_for(request, family)
        for _ in range(max(count, 0)):
            clock.tick()
        return demo_state(request, family)

    @app.post("/api/demo/{family}/speed", response_model=DemoStateOut)
    async def set_demo_speed(request: Request, family: str, body: SpeedIn):
        clock_for(request, family).set_speed(body.multiplier)
        return demo_state(request, family)

    @app.post("/api/demo/{family}/jump/{bookmark}", response_model=DemoStateOut)
    async def jump_demo(request: Request, family: str, bookmark: str):
        try:
            clock_for(request, family).jump(bookmark)
        except KeyError as exc:
            raise HTTPException(status_code=404, detail=str(exc.args[0]))
        reset_feeds(request, family)
        return demo_state(request, family)

    # -- profiles -------------------------------------------------------------

    @app.get("/api/profiles", response_model=list[Profile])
    async def list_profiles(device_id: str, dao: DAO = Depends(get_dao)):
        return dao.list_profiles(device_id)

    @app.post("/api/profiles", response_model=Profile, status_code=201)
    async def create_profile(profile: ProfileIn, dao: DAO = Depends(get_dao)):
        return dao.add_profile(profile)

    @app.put("/api/profiles/{profile_id}", response_model=Profile)
    async def update_profile(profile_id: str, profile: ProfileIn, dao: DAO = Depends(get_dao)):
        existing = dao.get_profile(profile_id)
        if existing is None:
            raise HTTPException(status_code=404, detail="profile not found")
        if existing.device_id != profile.device_id:
            raise HTTPException(status_code=403, detail="profile belongs to another device")
        return dao.update_profile(profile_id, profile)

    @app.delete("/api/profiles/{profile_id}", status_code=204)
    async def delete_profile(profile_id: str, dao: DAO = Depends(get_dao)):
        if not dao.delete_profile(profile_id):
            raise HTTPException(status_code=404, detail="profile not found")

    @app.delete("/api/devices/{device_id}/profiles", response_class=JSONResponse)
    async def reset_device(device_id: str, dao: DAO = Depends(get_dao)):
        deleted = dao.delete_device_profiles(device_id)
        return JSONResponse(status_code=200, content={"deleted": deleted})

    # -- checklist ------------------------------------------------------------

    def require_profile(dao: DAO, profile_id: str) -> None:
        if dao.get_profile(profile_id) is None:
            raise HTTPException(status_code=404, detail="profile not found")

    @app.get("/api/profiles/{profile_id}/checklist", response_model=list[ChecklistItem])
    async def get_checklist(profile_id: str, dao: DAO = Depends(get_dao)):
        require_profile(dao, profile_id)
        return dao.get_checklist(profile_id)

    @app.post("/api/profiles/{profile_id}/checklist/{item_id}", response_model=list[ChecklistItem])
    async def toggle_checklist(profile_id: str, item_id: str, dao: DAO = Depends(get_dao)):
        require_profile(dao, profile_id)
        items = dao.toggle_checklist_item(profile_id, item_id)
        if items is None:
            raise HTTPException(status_code=404, detail=f"unknown checklist item {item_id!r}")
        return items

    @app.delete("/api/profiles/{profile_id}/checklist", response_model=list[ChecklistItem])
    async def reset_checklist(profile_id: str, dao: DAO = Depends(get_dao)):
        require_profile(dao, profile_id)
        return dao.reset_checklist(profile_id)

    # -- geocoding ------------------------------------------------------------

    @app.post("/api/geocode", response_model=list[Place])
    def geocode(query: GeocodeQuery, dao: DAO = Depends(get_dao)):
        try:
            return Geocoder(dao).search(query.query)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except GeocodeError as exc:
            logger.error("Geocoding failed: %s", exc)
            raise HTTPException(status_code=502, detail="failed to geocode location")

    return app
