"""
Game orchestrator.
Wires dice rolls and region clicks into the reducer and pan/zoom/focus requests
into the viewport controller, then forwards every resulting event to subscribers.
The orchestrator owns the single GameState of a session and is the only place
that replaces it.
"""

import logging
import random
from typing import Callable

from conquest.engine import DEFAULT_FOCUS_SCALE
from conquest.engine.actions import capture_region, end_turn, roll_dice
from conquest.engine.definitions import MapDefinition, SetupError
from conquest.engine.events import (
    GameEvent,
    message,
    scores_changed,
    transform_changed,
    turn_changed,
)
from conquest.engine.queries import describe_region, get_capture_highlights
from conquest.engine.reducer import apply_action
from conquest.engine.state import GameState
from conquest.engine.utils import generate_dice_roll, new_game_from_map
from conquest.engine.viewport import Transform, ViewportController, ViewportSize

logger = logging.getLogger(__name__)

Listener = Callable[[GameEvent], None]


class GameOrchestrator:
    """One local game session: map, state, viewport and event subscribers."""

    def __init__(
        self,
        map_def: MapDefinition,
        viewport: ViewportSize,
        rng: random.Random | None = None,
        debug_dice: bool = False,
    ):
        self.map_def = map_def
        self.rng = rng or random.Random()
        self.debug_dice = debug_dice
        self.state: GameState | None = None
        self.viewport = ViewportController(map_def.content_bounds(), viewport)
        self._listeners: list[Listener] = []

    # ===== Notifications =====

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for every outbound event. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, events: list[GameEvent]) -> list[GameEvent]:
        for event in events:
            for listener in list(self._listeners):
                listener(event)
        return events

    def _require_state(self) -> GameState:
        if self.state is None:
            raise RuntimeError("Game has not been started")
        return self.state

    # ===== Game flow =====

    def start(self) -> list[GameEvent]:
        """
        Build adjacency, assign starting regions and open the first turn.

        Raises:
            SetupError: the map cannot host a game; the session stays unstarted.
        """
        try:
            state, events = new_game_from_map(self.map_def, self.rng)
        except SetupError:
            logger.error("Cannot start a game on map %s", self.map_def.id, exc_info=True)
            raise
        self.state = state
        events.append(scores_changed(state.player_scores))
        events.append(turn_changed(state.current_player, state.turn_number))
        events.append(message(f"Ход Игрока {state.current_player}. Бросьте кубик!"))
        events.append(transform_changed(**self.viewport.reset().to_dict()))
        return self._emit(events)

    def roll_dice(self, forced_value: int | None = None) -> list[GameEvent]:
        """Roll for the current player. Debug mode forces a 6 unless a value is given."""
        state = self._require_state()
        if forced_value is not None:
            value = forced_value
        elif self.debug_dice:
            value = 6
        else:
            value = generate_dice_roll(self.rng)
        self.state, events = apply_action(state, roll_dice(state.current_player, value))
        return self._emit(events)

    def click_region(self, region_id: str) -> list[GameEvent]:
        """
        A region was clicked. During the capture phase this is a capture attempt;
        otherwise it only reports who owns the region. After game over the click
        is a capture attempt too, so the player hears why it was refused.
        """
        state = self._require_state()
        if state.game_over or state.capture_phase_active:
            self.state, events = apply_action(state, capture_region(state.current_player, region_id))
            return self._emit(events)
        return self._emit([message(describe_region(state, region_id))])

    def end_turn(self) -> list[GameEvent]:
        state = self._require_state()
        self.state, events = apply_action(state, end_turn(state.current_player))
        return self._emit(events)

    def capture_highlights(self) -> dict[str, list[str]]:
        return get_capture_highlights(self._require_state())

    # ===== Viewport =====

    def _transform_event(self, transform: Transform, animate: bool = False) -> list[GameEvent]:
        return self._emit([transform_changed(
            transform.scale, transform.translate_x, transform.translate_y, animate=animate
        )])

    def wheel(self, x: float, y: float, direction: int) -> list[GameEvent]:
        return self._transform_event(self.viewport.zoom_at(x, y, direction))

    def pointer_down(self, x: float, y: float) -> None:
        self.viewport.begin_pan(x, y)

    def pointer_move(self, x: float, y: float) -> list[GameEvent]:
        transform = self.viewport.drag_to(x, y)
        if transform is None:
            return []
        return self._transform_event(transform)

    def pointer_up(self) -> None:
        self.viewport.end_pan()

    def pan_by(self, dx: float, dy: float) -> list[GameEvent]:
        return self._transform_event(self.viewport.pan_by(dx, dy))

    def resize(self, width: float, height: float) -> list[GameEvent]:
        return self._transform_event(self.viewport.resize(width, height))

    def focus_region(self, region_id: str, target_scale: float = DEFAULT_FOCUS_SCALE) -> list[GameEvent]:
        """Centre the view on a region. No-op (no events) if the region has no usable geometry."""
        if region_id not in self.map_def.regions:
            logger.warning("Focus requested for unknown region %s", region_id)
            return []
        bbox = self.map_def.get_bounding_box(region_id)
        point = self.map_def.get_boundary_point(region_id)
        transform = self.viewport.focus_on(bbox, target_scale, point)
        if transform is None:
            logger.warning("Region %s has no geometry to focus on", region_id)
            return []
        return self._transform_event(transform, animate=True)

    def click_score_entry(self, player_id: int) -> list[GameEvent]:
        """Score panel entry clicked: focus on that player's start region."""
        state = self._require_state()
        region_id = state.player_start_regions.get(player_id)
        if region_id is None:
            logger.info("No start region recorded for player %s", player_id)
            return []
        return self.focus_region(region_id)

    # ===== Snapshot =====

    def snapshot(self) -> dict:
        """State, viewport and highlights in the JSON shape sent to the UI."""
        state = self._require_state()
        return {
            "map_id": self.map_def.id,
            "state": state.to_dict(),
            "viewport": {
                "transform": self.viewport.transform.to_dict(),
                "width": self.viewport.viewport.width,
                "height": self.viewport.viewport.height,
                "content_bounds": (
                    self.viewport.content_bounds.to_dict() if self.viewport.content_bounds else None
                ),
            },
            "highlights": get_capture_highlights(state),
        }
