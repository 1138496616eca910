"""
Game events for UI hooks and logging.
Events describe what happened during action processing; the orchestrator
forwards them to subscribers as outbound notifications.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}


# ===== Event Type Constants =====

# Setup events
GAME_STARTED = "game_started"
START_REGION_ASSIGNED = "start_region_assigned"

# Turn events
PHASE_CHANGED = "phase_changed"
DICE_ROLLED = "dice_rolled"
TURN_CHANGED = "turn_changed"

# Capture events
CAPTURE_RESULT = "capture_result"
SCORES_CHANGED = "scores_changed"
TERRITORY_HIGHLIGHT_SET = "territory_highlight_set"

# Rejections (state unchanged)
ACTION_REJECTED = "action_rejected"

# End of game
GAME_OVER = "game_over"

# Viewport
TRANSFORM_CHANGED = "transform_changed"

# Status line text for the UI
MESSAGE = "message"


# ===== Event Factory Functions =====

def game_started(regions: int, players: int) -> GameEvent:
    return GameEvent(GAME_STARTED, {"regions": regions, "players": players})


def start_region_assigned(player: int, region_id: str) -> GameEvent:
    return GameEvent(START_REGION_ASSIGNED, {"player": player, "region_id": region_id})


def phase_changed(old_phase: str, new_phase: str, player: int) -> GameEvent:
    return GameEvent(PHASE_CHANGED, {
        "old_phase": old_phase,
        "new_phase": new_phase,
        "player": player,
    })


def dice_rolled(player: int, value: int, capture_available: bool) -> GameEvent:
    return GameEvent(DICE_ROLLED, {
        "player": player,
        "value": value,
        "capture_available": capture_available,
    })


def turn_changed(player: int, turn_number: int) -> GameEvent:
    return GameEvent(TURN_CHANGED, {"player": player, "turn_number": turn_number})


def capture_result(
    region_id: str,
    success: bool,
    player: int,
    reason: str | None = None,
    previous_owner: int | None = None,
) -> GameEvent:
    """
    Outcome of a capture attempt.
    previous_owner is set on success (0 for a neutral region); reason is set on rejection.
    """
    payload: dict[str, Any] = {
        "region_id": region_id,
        "success": success,
        "player": player,
    }
    if reason is not None:
        payload["reason"] = reason
    if previous_owner is not None:
        payload["previous_owner"] = previous_owner
    return GameEvent(CAPTURE_RESULT, payload)


def scores_changed(scores: dict[int, int]) -> GameEvent:
    return GameEvent(SCORES_CHANGED, {"scores": {str(p): s for p, s in scores.items()}})


def territory_highlight_set(
    available: list[str],
    unavailable: list[str],
    capturable: list[str],
) -> GameEvent:
    """
    Which regions the UI should mark during a capture phase:
    available = neutral and eligible, unavailable = neutral but not eligible,
    capturable = enemy-owned and eligible. All lists empty clears the marks.
    """
    return GameEvent(TERRITORY_HIGHLIGHT_SET, {
        "available": available,
        "unavailable": unavailable,
        "capturable": capturable,
    })


def action_rejected(action_type: str, player: int, reason: str) -> GameEvent:
    return GameEvent(ACTION_REJECTED, {
        "action": action_type,
        "player": player,
        "reason": reason,
    })


def game_over(winner: int | None, message: str, leaders: list[int], scores: dict[int, int]) -> GameEvent:
    """
    Emitted once when the game ends.

    Args:
        winner: Winning player id, or None for a draw
        message: Result text shown to the players
        leaders: Players sharing the top score (a single entry unless it is a draw)
        scores: Final scores per player
    """
    return GameEvent(GAME_OVER, {
        "winner": winner,
        "message": message,
        "leaders": leaders,
        "scores": {str(p): s for p, s in scores.items()},
    })


def transform_changed(scale: float, translate_x: float, translate_y: float, animate: bool = False) -> GameEvent:
    """animate=True asks the renderer to ease towards the transform (used for focus)."""
    return GameEvent(TRANSFORM_CHANGED, {
        "scale": scale,
        "translate_x": translate_x,
        "translate_y": translate_y,
        "animate": animate,
    })


def message(text: str) -> GameEvent:
    return GameEvent(MESSAGE, {"text": text})
