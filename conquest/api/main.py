"""
FastAPI backend for Dice Conquest.
A local bridge between the browser map view and one in-memory game session.
"""

import logging
import random
import threading
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from conquest.config import (
    CORS_ORIGINS,
    DEBUG_DICE,
    DEFAULT_MAP_ID,
    DEFAULT_VIEWPORT_HEIGHT,
    DEFAULT_VIEWPORT_WIDTH,
)
from conquest.engine import DEFAULT_FOCUS_SCALE
from conquest.engine.definitions import SetupError, list_maps, load_map
from conquest.engine.events import GameEvent
from conquest.engine.game import GameOrchestrator
from conquest.engine.queries import get_game_summary
from conquest.engine.viewport import ViewportSize

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Dice Conquest API",
    description="Local API for Dice Conquest - a four-player dice territory game",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request, call_next):
    """Log method and path of failing requests so 500s can be traced to the endpoint."""
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("[500] %s %s (exception)", request.method, request.url.path)
        raise
    if response.status_code >= 500:
        logger.error("[%d] %s %s", response.status_code, request.method, request.url.path)
    return response


# One session per process; every request that touches it holds the lock
_session: GameOrchestrator | None = None
_session_lock = threading.Lock()


# ===== Pydantic Models =====

class ViewportRequest(BaseModel):
    width: float = Field(DEFAULT_VIEWPORT_WIDTH, gt=0)
    height: float = Field(DEFAULT_VIEWPORT_HEIGHT, gt=0)


class NewGameRequest(BaseModel):
    """map_id from GET /maps. Omitted = conquest.config.DEFAULT_MAP_ID."""
    map_id: str | None = None
    seed: int | None = None
    debug: bool | None = None
    viewport: ViewportRequest | None = None


class RollRequest(BaseModel):
    """Forced die face for manual testing; omitted = random roll."""
    value: int | None = None


class ZoomRequest(BaseModel):
    x: float
    y: float
    direction: Literal[-1, 1]


class PanRequest(BaseModel):
    dx: float
    dy: float


class FocusRequest(BaseModel):
    region_id: str
    scale: float = DEFAULT_FOCUS_SCALE


# ===== Helper Functions =====

def get_session() -> GameOrchestrator:
    """Current game session; 404 if no game has been started."""
    if _session is None:
        raise HTTPException(status_code=404, detail="No game in progress. POST /game to start one.")
    return _session


def session_response(session: GameOrchestrator, events: list[GameEvent]) -> dict[str, Any]:
    snapshot = session.snapshot()
    return {
        "state": snapshot["state"],
        "summary": get_game_summary(session.state),
        "viewport": snapshot["viewport"],
        "highlights": snapshot["highlights"],
        "events": [e.to_dict() for e in events],
    }


def reset_session() -> None:
    """Drop the current session (used by tests)."""
    global _session
    with _session_lock:
        _session = None


# ===== Endpoints =====

@app.get("/")
def root():
    return {"status": "ok", "game": "Dice Conquest", "in_progress": _session is not None}


@app.get("/maps")
def get_maps():
    """Available maps (JSON and SVG) under conquest/data/maps."""
    return {"maps": list_maps(), "default": DEFAULT_MAP_ID}


@app.post("/game")
def create_game(request: NewGameRequest):
    """Start a new game, replacing any game in progress."""
    global _session
    map_id = request.map_id or DEFAULT_MAP_ID
    try:
        map_def = load_map(map_id)
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"Map {map_id} not found")
    except SetupError as e:
        raise HTTPException(status_code=400, detail=str(e))

    vp = request.viewport or ViewportRequest()
    session = GameOrchestrator(
        map_def,
        ViewportSize(vp.width, vp.height),
        rng=random.Random(request.seed),
        debug_dice=DEBUG_DICE if request.debug is None else request.debug,
    )
    with _session_lock:
        try:
            events = session.start()
        except SetupError as e:
            raise HTTPException(status_code=400, detail=str(e))
        _session = session
        logger.info("New game on map %s (seed=%s, debug=%s)", map_id, request.seed, session.debug_dice)
        return session_response(session, events)


@app.get("/game")
def get_game():
    with _session_lock:
        session = get_session()
        return session_response(session, [])


@app.post("/game/roll")
def do_roll(request: RollRequest | None = None):
    """Roll the die for the current player."""
    with _session_lock:
        session = get_session()
        forced = request.value if request else None
        return session_response(session, session.roll_dice(forced))


@app.post("/game/end-turn")
def do_end_turn():
    with _session_lock:
        session = get_session()
        return session_response(session, session.end_turn())


@app.post("/game/regions/{region_id}/click")
def click_region(region_id: str):
    """Capture attempt during the capture phase, otherwise region info."""
    with _session_lock:
        session = get_session()
        return session_response(session, session.click_region(region_id))


@app.get("/game/highlights")
def get_highlights():
    with _session_lock:
        return get_session().capture_highlights()


@app.post("/game/viewport/zoom")
def viewport_zoom(request: ZoomRequest):
    with _session_lock:
        session = get_session()
        return session_response(session, session.wheel(request.x, request.y, request.direction))


@app.post("/game/viewport/pan")
def viewport_pan(request: PanRequest):
    with _session_lock:
        session = get_session()
        return session_response(session, session.pan_by(request.dx, request.dy))


@app.post("/game/viewport/resize")
def viewport_resize(request: ViewportRequest):
    with _session_lock:
        session = get_session()
        return session_response(session, session.resize(request.width, request.height))


@app.post("/game/viewport/focus")
def viewport_focus(request: FocusRequest):
    with _session_lock:
        session = get_session()
        if request.region_id not in session.map_def.regions:
            raise HTTPException(status_code=404, detail=f"Region {request.region_id} not found")
        return session_response(session, session.focus_region(request.region_id, request.scale))


@app.post("/game/scores/{player_id}/focus")
def focus_score_entry(player_id: int):
    """Score panel click: centre the map on the player's start region."""
    with _session_lock:
        session = get_session()
        if player_id not in session.state.player_scores:
            raise HTTPException(status_code=404, detail=f"Player {player_id} not found")
        return session_response(session, session.click_score_entry(player_id))


if __name__ == "__main__":
    import uvicorn

    from conquest.config import API_HOST, API_PORT
    from conquest.logging_setup import setup_logging

    setup_logging()
    uvicorn.run(app, host=API_HOST, port=API_PORT)
