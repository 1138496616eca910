"""
Game setup: starting regions, setup failures and dice generation.
"""

import random

import pytest

from conquest.engine import NEUTRAL
from conquest.engine.definitions import SetupError
from conquest.engine.events import GAME_STARTED, START_REGION_ASSIGNED
from conquest.engine.state import Phase
from conquest.engine.utils import generate_dice_roll, initialize_game_state, new_game_from_map


def test_each_player_gets_one_distinct_region(grid_map, grid_adjacency):
    state, events = initialize_game_state(grid_map.region_ids, grid_adjacency, random.Random(3))

    assert state.player_scores == {1: 1, 2: 1, 3: 1, 4: 1}
    starts = [state.player_start_regions[p] for p in range(1, 5)]
    assert len(set(starts)) == 4
    for player, rid in zip(range(1, 5), starts):
        assert state.regions[rid].owner == player
    assert sum(1 for r in state.regions.values() if r.owner != NEUTRAL) == 4

    assert state.phase == Phase.AWAITING_ROLL
    assert state.current_player == 1
    assert state.dice_result == 0
    assert state.turn_number == 1
    assert events[0].type == GAME_STARTED
    assigned = [e.payload for e in events if e.type == START_REGION_ASSIGNED]
    assert [a["player"] for a in assigned] == [1, 2, 3, 4]


def test_assignment_follows_shuffled_order(grid_map, grid_adjacency):
    expected = list(grid_map.region_ids)
    random.Random(11).shuffle(expected)

    state, _ = initialize_game_state(grid_map.region_ids, grid_adjacency, random.Random(11))
    assert [state.player_start_regions[p] for p in range(1, 5)] == expected[:4]


def test_same_seed_same_assignment(grid_map):
    a, _ = new_game_from_map(grid_map, random.Random(5))
    b, _ = new_game_from_map(grid_map, random.Random(5))
    assert a.player_start_regions == b.player_start_regions


def test_adjacency_is_attached_to_regions(grid_map):
    state, _ = new_game_from_map(grid_map, random.Random(0))
    assert state.regions["r0c0"].adjacent == frozenset({"r0c1", "r1c0", "r1c1"})


def test_too_few_regions_raises(grid_adjacency):
    ids = ["r0c0", "r0c1", "r0c2"]
    with pytest.raises(SetupError):
        initialize_game_state(ids, grid_adjacency, random.Random(0))


def test_no_regions_raises():
    with pytest.raises(SetupError):
        initialize_game_state([], {}, random.Random(0))


def test_exactly_enough_regions(grid_adjacency):
    ids = ["r0c0", "r0c1", "r1c0", "r1c1"]
    state, _ = initialize_game_state(ids, grid_adjacency, random.Random(0))
    assert all(r.owner != NEUTRAL for r in state.regions.values())
    # Neighbours outside the map are kept as given; capture checks ignore unknown ids
    assert "r0c2" in state.regions["r0c1"].adjacent


def test_dice_roll_range():
    rng = random.Random(42)
    rolls = {generate_dice_roll(rng) for _ in range(500)}
    assert rolls == {1, 2, 3, 4, 5, 6}
