"""
Utility functions for the game engine: setup, dice and printing.
"""

import logging
import random

from conquest.engine import DICE_SIDES, NEUTRAL, STARTING_TERRITORIES_PER_PLAYER, TOTAL_PLAYERS, WIN_THRESHOLD
from conquest.engine.adjacency import build_adjacency_graph
from conquest.engine.definitions import GeometryProvider, MapDefinition, SetupError
from conquest.engine.events import GameEvent, game_started, start_region_assigned
from conquest.engine.state import GameState, RegionState

logger = logging.getLogger(__name__)


def initialize_game_state(
    region_ids: list[str],
    adjacency: dict[str, frozenset[str]],
    rng: random.Random | None = None,
    total_players: int = TOTAL_PLAYERS,
    starting_per_player: int = STARTING_TERRITORIES_PER_PLAYER,
    win_threshold: int = WIN_THRESHOLD,
) -> tuple[GameState, list[GameEvent]]:
    """
    Create the initial game state and hand out starting regions.

    All regions start neutral. The neutral list is shuffled (Fisher-Yates via
    Random.shuffle) and consumed in order: each player, by id, gets
    starting_per_player regions, scoring one point per region. The first
    region a player receives is recorded as their start region.

    Raises:
        SetupError: no regions, or fewer neutral regions than starting slots.
            No state is produced and the game must not start.
    """
    rng = rng or random.Random()
    if not region_ids:
        raise SetupError("Cannot start a game on a map without regions")

    regions = {
        rid: RegionState(owner=NEUTRAL, adjacent=frozenset(adjacency.get(rid, frozenset())))
        for rid in region_ids
    }
    state = GameState(
        regions=regions,
        player_scores={p: 0 for p in range(1, total_players + 1)},
        win_threshold=win_threshold,
        total_players=total_players,
    )

    neutral_ids = [rid for rid, rs in regions.items() if rs.owner == NEUTRAL]
    required = total_players * starting_per_player
    if len(neutral_ids) < required:
        raise SetupError(
            f"Not enough neutral regions for starting assignment: have {len(neutral_ids)}, need {required}"
        )

    rng.shuffle(neutral_ids)

    events: list[GameEvent] = []
    index = 0
    for player in range(1, total_players + 1):
        for n in range(starting_per_player):
            region_id = neutral_ids[index]
            index += 1
            state.regions[region_id].owner = player
            state.player_scores[player] += 1
            if n == 0:
                state.player_start_regions[player] = region_id
                events.append(start_region_assigned(player, region_id))
                logger.info("Player %d starts in %s", player, region_id)

    events.insert(0, game_started(len(regions), total_players))
    return state, events


def new_game_from_map(
    map_def: MapDefinition,
    rng: random.Random | None = None,
    geometry: GeometryProvider | None = None,
) -> tuple[GameState, list[GameEvent]]:
    """Build the adjacency graph for a loaded map and set up a fresh game on it."""
    adjacency = build_adjacency_graph(map_def.region_ids, geometry or map_def)
    return initialize_game_state(map_def.region_ids, adjacency, rng)


def generate_dice_roll(rng: random.Random | None = None) -> int:
    """Roll one die (uniform 1..DICE_SIDES)."""
    return (rng or random).randint(1, DICE_SIDES)


def print_game_state(state: GameState, verbose: bool = False):
    """
    Pretty-print the current game state.

    Args:
        state: Current game state
        verbose: If True, list every region with its owner and neighbours
    """
    print(f"\n{'='*60}")
    print(
        f"Turn {state.turn_number} | Player: {state.current_player} | Phase: {state.phase.value}"
        f" | Dice: {state.dice_result or '?'}")
    print(f"{'='*60}")

    if verbose:
        for region_id in sorted(state.regions):
            rs = state.regions[region_id]
            owner_str = f"player {rs.owner}" if rs.owner else "neutral"
            print(f"  {region_id:<16} {owner_str:<10} -> {', '.join(sorted(rs.adjacent)) or '-'}")

    print(f"\n{'Scores':.<40}")
    for player in state.player_ids:
        start = state.player_start_regions.get(player, "-")
        print(f"  Player {player}: {state.player_scores.get(player, 0)} (start: {start})")
    if state.game_over:
        print(f"\n*** {state.message} ***")
    print()
