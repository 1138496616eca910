"""
Main game reducer.
Applies actions to state, enforcing rules and producing new state.
Returns (new_state, events) where events describe what happened.
A rejected action returns the given state untouched plus an action_rejected event
(and, for captures, a failed capture_result).
"""

import logging
from dataclasses import dataclass, field

from conquest.engine import CAPTURE_ROLL, NEUTRAL
from conquest.engine.actions import Action, CAPTURE_REGION, END_TURN, ROLL_DICE
from conquest.engine.state import GameState, Phase
from conquest.engine.queries import (
    REASON_NOT_ADJACENT,
    validate_action,
    has_neutral_regions,
    get_capture_highlights,
)
from conquest.engine.events import (
    GameEvent,
    phase_changed,
    dice_rolled,
    turn_changed,
    capture_result,
    scores_changed,
    territory_highlight_set,
    action_rejected,
    game_over,
    message,
)

logger = logging.getLogger(__name__)


@dataclass
class WinResult:
    """How the game ended."""
    winner: int | None  # None for a draw
    message: str
    leaders: list[int] = field(default_factory=list)
    by_points: bool = False  # True when decided because every region was taken


def apply_action(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Apply a single action to the current state, returning new state and events.

    Validates:
    - Game is not over
    - Action player matches current_player
    - Action is allowed in the current phase
    - Action-specific rules (dice range, capture eligibility)

    Args:
        state: Current game state (never mutated)
        action: Action to apply

    Returns:
        Tuple of (new_state, events). On rejection new_state is the input state.
    """
    if action.type not in (ROLL_DICE, CAPTURE_REGION, END_TURN):
        raise ValueError(f"Unknown action type: {action.type}")

    validation = validate_action(state, action)
    if not validation.valid:
        logger.debug("Rejected %s from player %s: %s", action.type, action.player, validation.error)
        return state, _rejection_events(action, validation.error or "")

    new_state = state.copy()

    if action.type == ROLL_DICE:
        return _handle_roll_dice(new_state, action)
    if action.type == CAPTURE_REGION:
        return _handle_capture_region(new_state, action)
    return _handle_end_turn(new_state)


def _rejection_events(action: Action, reason: str) -> list[GameEvent]:
    events = [action_rejected(action.type, action.player, reason)]
    if action.type == CAPTURE_REGION:
        region_id = str(action.payload.get("region_id"))
        events.append(capture_result(region_id, False, action.player, reason=reason))
        if reason == REASON_NOT_ADJACENT:
            events.append(message("Вы можете захватить только территорию, граничащую с вашими владениями!"))
    return events


def _set_phase(state: GameState, new_phase: Phase, events: list[GameEvent]) -> None:
    old = state.phase
    state.phase = new_phase
    events.append(phase_changed(old.value, new_phase.value, state.current_player))


def _handle_roll_dice(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Resolve a die roll.
    A 6 opens the capture phase, but only while at least one region is neutral;
    any other result (or a 6 on a fully owned map) waits for the end of the turn.
    """
    events: list[GameEvent] = []
    value = action.payload["value"]

    _set_phase(state, Phase.ROLLING, events)
    state.dice_result = value

    capture_available = value == CAPTURE_ROLL and has_neutral_regions(state)
    events.append(dice_rolled(state.current_player, value, capture_available))

    if capture_available:
        _set_phase(state, Phase.CAPTURE, events)
        highlights = get_capture_highlights(state)
        events.append(territory_highlight_set(
            highlights["available"], highlights["unavailable"], highlights["capturable"]
        ))
        events.append(message("Выпала 6! Кликните по СВОБОДНОЙ стране для захвата или завершите ход."))
    else:
        _set_phase(state, Phase.AWAITING_END_TURN, events)
        if value == CAPTURE_ROLL:
            events.append(message("Выпала 6, но нет свободных стран! Завершите ход."))
        else:
            events.append(message(f"Выпало {value}. Завершите ход."))

    logger.debug("Player %d rolled %d -> %s", state.current_player, value, state.phase.value)
    return state, events


def _handle_capture_region(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Capture an eligible region (eligibility already checked by validate_action).
    Ownership and both scores change together, then the win condition is evaluated.
    """
    events: list[GameEvent] = []
    player = state.current_player
    region_id = action.payload["region_id"]
    region = state.regions[region_id]
    previous_owner = region.owner

    region.owner = player
    state.player_scores[player] += 1
    if previous_owner != NEUTRAL:
        state.player_scores[previous_owner] -= 1

    logger.info("Player %d captured %s (previous owner %d)", player, region_id, previous_owner)
    events.append(capture_result(region_id, True, player, previous_owner=previous_owner))
    events.append(scores_changed(state.player_scores))
    events.append(territory_highlight_set([], [], []))
    if previous_owner != NEUTRAL:
        events.append(message(f"Игрок {player} захватил {region_id} у Игрока {previous_owner}! Завершите ход."))
    else:
        events.append(message(f"Игрок {player} захватил {region_id}! Завершите ход."))

    _set_phase(state, Phase.AWAITING_END_TURN, events)

    result = evaluate_win_condition(state, player)
    if result is not None:
        _end_game(state, result, events)

    return state, events


def _end_game(state: GameState, result: WinResult, events: list[GameEvent]) -> None:
    state.winner = result.winner
    state.leaders = list(result.leaders)
    state.message = result.message
    _set_phase(state, Phase.GAME_OVER, events)
    logger.info("Game over: %s", result.message)
    events.append(game_over(result.winner, result.message, state.leaders, state.player_scores))
    events.append(message(f"=== {result.message} ==="))


def evaluate_win_condition(state: GameState, capturing_player: int | None = None) -> WinResult | None:
    """
    Check whether the game has ended. Called after every capture.

    Rule order:
    1. The capturing player reaching the win threshold wins immediately.
    2. Otherwise, once every region has an owner, the single top scorer wins on
       points; a shared top score is a draw and every tied player is a leader.

    Returns:
        None if play continues, else a WinResult (winner None for a draw)
    """
    player = state.current_player if capturing_player is None else capturing_player
    if state.player_scores.get(player, 0) >= state.win_threshold:
        return WinResult(winner=player, message=f"ИГРОК {player} ПОБЕДИЛ", leaders=[player])

    total = len(state.regions)
    captured = sum(1 for r in state.regions.values() if r.owner != NEUTRAL)
    if total == 0 or captured < total:
        return None

    max_score = max(state.player_scores.get(p, 0) for p in state.player_ids)
    leaders = [p for p in state.player_ids if state.player_scores.get(p, 0) == max_score]

    if len(leaders) == 1:
        return WinResult(
            winner=leaders[0],
            message=f"ИГРОК {leaders[0]} ПОБЕДИЛ ПО ОЧКАМ ({max_score} стран)",
            leaders=leaders,
            by_points=True,
        )
    return WinResult(
        winner=None,
        message=f"НИЧЬЯ! Все страны захвачены. Лидеры по {max_score}.",
        leaders=leaders,
        by_points=True,
    )


def _handle_end_turn(state: GameState) -> tuple[GameState, list[GameEvent]]:
    """
    End the current turn and advance to the next player (N wraps back to 1).
    Resets the die; a full round completes when play returns to player 1.
    """
    events: list[GameEvent] = []
    if state.capture_phase_active:
        events.append(territory_highlight_set([], [], []))

    next_player = (state.current_player % state.total_players) + 1
    if next_player == 1:
        state.turn_number += 1

    state.dice_result = 0
    _set_phase(state, Phase.AWAITING_ROLL, events)
    state.current_player = next_player

    events.append(turn_changed(next_player, state.turn_number))
    events.append(message(f"Ход Игрока {next_player}. Бросьте кубик!"))
    return state, events


def replay_from_actions(
    initial_state: GameState,
    actions: list[Action],
) -> tuple[GameState, list[GameEvent]]:
    """
    Replay a series of actions from an initial state.
    State is derived from the action log; rejected actions leave it unchanged.

    Returns:
        Tuple of (final_state, all_events) after all actions applied
    """
    current_state = initial_state
    all_events: list[GameEvent] = []

    for action in actions:
        current_state, events = apply_action(current_state, action)
        all_events.extend(events)

    return current_state, all_events
