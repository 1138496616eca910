"""
Query functions for UI integration.
These functions help the UI understand what actions are available
without mutating game state.
"""

from dataclasses import dataclass
from typing import Any

from conquest.engine import DICE_SIDES, NEUTRAL
from conquest.engine.actions import Action, CAPTURE_REGION, END_TURN, ROLL_DICE
from conquest.engine.state import GameState, Phase

# Rejection reasons (returned to callers, never raised)
REASON_GAME_OVER = "game is over"
REASON_NOT_YOUR_TURN = "not your turn"
REASON_WRONG_PHASE = "not your turn phase"
REASON_UNKNOWN_REGION = "unknown region"
REASON_OWN_TERRITORY = "target is your own territory"
REASON_NOT_ADJACENT = "not adjacent"
REASON_FIRST_CAPTURE_NEUTRAL = "first capture must target a neutral region"
REASON_INVALID_DICE = "dice value out of range"

# Phase rules: which action types are allowed in which phases
PHASE_ALLOWED_ACTIONS = {
    Phase.AWAITING_ROLL: [ROLL_DICE],
    Phase.ROLLING: [],
    # Ending the turn from the capture phase gives up the capture
    Phase.CAPTURE: [CAPTURE_REGION, END_TURN],
    Phase.AWAITING_END_TURN: [END_TURN],
    Phase.GAME_OVER: [],
}


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "error": self.error}


# ===== Action Validation =====

def validate_action(state: GameState, action: Action) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True or valid=False with the rejection reason.
    """
    if state.game_over:
        return ValidationResult(False, REASON_GAME_OVER)

    if action.player != state.current_player:
        return ValidationResult(False, REASON_NOT_YOUR_TURN)

    if action.type not in PHASE_ALLOWED_ACTIONS.get(state.phase, []):
        return ValidationResult(False, REASON_WRONG_PHASE)

    if action.type == ROLL_DICE:
        value = action.payload.get("value")
        if not isinstance(value, int) or isinstance(value, bool) or not 1 <= value <= DICE_SIDES:
            return ValidationResult(False, REASON_INVALID_DICE)

    elif action.type == CAPTURE_REGION:
        reason = capture_rejection_reason(state, action.player, action.payload.get("region_id"))
        if reason:
            return ValidationResult(False, reason)

    return ValidationResult(True)


def capture_rejection_reason(state: GameState, player: int, region_id: str | None) -> str | None:
    """
    Why player may not capture region_id right now, or None if the target is eligible.
    Only the target rules are checked here; phase and turn checks are in validate_action.

    - Own territory is never a target.
    - With no regions yet, any neutral region is eligible regardless of adjacency.
    - Otherwise the target must border one of the player's regions and be neutral or enemy-owned.
    """
    region = state.regions.get(region_id) if region_id else None
    if region is None:
        return REASON_UNKNOWN_REGION
    if region.owner == player:
        return REASON_OWN_TERRITORY
    if state.player_scores.get(player, 0) == 0:
        return None if region.owner == NEUTRAL else REASON_FIRST_CAPTURE_NEUTRAL
    borders_own = any(
        state.regions[n].owner == player
        for n in region.adjacent
        if n in state.regions
    )
    if not borders_own:
        return REASON_NOT_ADJACENT
    return None


def can_capture(state: GameState, region_id: str, player: int | None = None) -> bool:
    """True if the region is an eligible target for player (default: current player)."""
    player = state.current_player if player is None else player
    return capture_rejection_reason(state, player, region_id) is None


def get_available_action_types(state: GameState) -> list[str]:
    """Get list of action types available in the current phase."""
    return list(PHASE_ALLOWED_ACTIONS.get(state.phase, []))


# ===== Board Queries =====

def has_neutral_regions(state: GameState) -> bool:
    return any(r.owner == NEUTRAL for r in state.regions.values())


def count_owned_regions(state: GameState) -> int:
    """Number of regions with a non-neutral owner. Always equals the sum of scores."""
    return sum(1 for r in state.regions.values() if r.owner != NEUTRAL)


def get_player_regions(state: GameState, player: int) -> list[str]:
    return sorted(rid for rid, r in state.regions.items() if r.owner == player)


def get_capture_highlights(state: GameState) -> dict[str, list[str]]:
    """
    Region marks for the capture phase.

    Returns:
        {"available": neutral eligible regions,
         "unavailable": neutral regions the player cannot reach,
         "capturable": enemy regions the player can take}
        All empty outside the capture phase.
    """
    result: dict[str, list[str]] = {"available": [], "unavailable": [], "capturable": []}
    if not state.capture_phase_active:
        return result

    player = state.current_player
    for region_id in sorted(state.regions):
        owner = state.regions[region_id].owner
        if owner == player:
            continue
        if can_capture(state, region_id, player):
            if owner == NEUTRAL:
                result["available"].append(region_id)
            else:
                result["capturable"].append(region_id)
        elif owner == NEUTRAL:
            result["unavailable"].append(region_id)
    return result


def describe_region(state: GameState, region_id: str) -> str:
    """Status text for clicking a region outside the capture phase."""
    owner = state.owner_of(region_id)
    if owner is None:
        return f"Страна {region_id} не найдена."
    if owner == NEUTRAL:
        return f"Страна {region_id} нейтральна. Выбросите 6 для захвата."
    score = state.player_scores.get(state.current_player, 0)
    return f"Страна {region_id} принадлежит Игроку {owner}. Ваш счет: {score}."


def get_game_summary(state: GameState) -> dict[str, Any]:
    """
    Compact overview for the UI header and score panel.
    """
    return {
        "turn_number": state.turn_number,
        "current_player": state.current_player,
        "phase": state.phase.value,
        "dice_result": state.dice_result,
        "can_roll": ROLL_DICE in get_available_action_types(state),
        "can_end_turn": END_TURN in get_available_action_types(state),
        "game_over": state.game_over,
        "winner": state.winner,
        "leaders": list(state.leaders),
        "message": state.message,
        "players": [
            {
                "player": p,
                "score": state.player_scores.get(p, 0),
                "start_region": state.player_start_regions.get(p),
            }
            for p in state.player_ids
        ],
        "regions_total": len(state.regions),
        "regions_owned": count_owned_regions(state),
    }
