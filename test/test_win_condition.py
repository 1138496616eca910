"""
Win condition scenarios: threshold win, points win, draw, and the
score bookkeeping around them. All on the 5x4 grid (20 regions, threshold 15).
"""

from conquest.engine.actions import capture_region, end_turn, roll_dice
from conquest.engine.events import ACTION_REJECTED, GAME_OVER
from conquest.engine.reducer import apply_action, evaluate_win_condition
from conquest.engine.state import Phase

ROW_MAJOR = [f"r{row}c{col}" for row in range(4) for col in range(5)]


def owners_for(layout: dict[int, list[str]]) -> dict[str, int]:
    return {rid: player for player, rids in layout.items() for rid in rids}


def capture(state, region_id):
    state, _ = apply_action(state, roll_dice(state.current_player, 6))
    return apply_action(state, capture_region(state.current_player, region_id))


def test_threshold_win_exactly_at_fifteen(make_state):
    # Player 1 holds the first 14 regions; r2c4 is neutral and borders r2c3
    owners = {rid: 1 for rid in ROW_MAJOR[:14]}
    owners.update({"r3c0": 2, "r3c1": 3, "r3c2": 4})
    state = make_state(owners)
    assert state.player_scores[1] == 14
    assert evaluate_win_condition(state, 1) is None

    state, events = capture(state, "r2c4")

    assert state.player_scores[1] == 15
    assert state.phase == Phase.GAME_OVER
    assert state.game_over
    assert state.winner == 1
    assert state.leaders == [1]
    assert state.message == "ИГРОК 1 ПОБЕДИЛ"
    over = next(e for e in events if e.type == GAME_OVER)
    assert over.payload["winner"] == 1
    assert over.payload["scores"]["1"] == 15


def test_no_win_at_fourteen(make_state):
    state = make_state({rid: 1 for rid in ROW_MAJOR[:13]})
    state, events = capture(state, "r2c3")
    assert state.player_scores[1] == 14
    assert not state.game_over
    assert GAME_OVER not in [e.type for e in events]


def test_points_win_on_full_map(make_state):
    owners = owners_for({
        1: ROW_MAJOR[0:6],
        2: ROW_MAJOR[6:11],
        3: ROW_MAJOR[11:16],
        4: ROW_MAJOR[16:20],
    })
    result = evaluate_win_condition(make_state(owners), 1)

    assert result is not None
    assert result.winner == 1
    assert result.by_points
    assert result.leaders == [1]
    assert result.message == "ИГРОК 1 ПОБЕДИЛ ПО ОЧКАМ (6 стран)"


def test_points_win_via_last_capture(make_state):
    # r0c4 is the last neutral region and borders player 1's r0c3
    owners = owners_for({
        1: ["r0c0", "r0c1", "r0c2", "r0c3", "r1c0"],
        2: ["r1c1", "r1c2", "r1c3", "r1c4", "r2c0"],
        3: ["r2c1", "r2c2", "r2c3", "r2c4", "r3c0"],
        4: ["r3c1", "r3c2", "r3c3", "r3c4"],
    })
    state, events = capture(make_state(owners), "r0c4")

    assert state.player_scores == {1: 6, 2: 5, 3: 5, 4: 4}
    assert state.game_over
    assert state.winner == 1
    assert state.leaders == [1]
    assert state.message == "ИГРОК 1 ПОБЕДИЛ ПО ОЧКАМ (6 стран)"


def test_draw_when_top_score_is_shared(make_state):
    owners = owners_for({
        1: ROW_MAJOR[0:5],
        2: ROW_MAJOR[5:10],
        3: ROW_MAJOR[10:15],
        4: ROW_MAJOR[15:20],
    })
    result = evaluate_win_condition(make_state(owners), 1)

    assert result is not None
    assert result.winner is None
    assert result.leaders == [1, 2, 3, 4]
    assert result.message == "НИЧЬЯ! Все страны захвачены. Лидеры по 5."


def test_draw_via_last_capture(make_state):
    # [4, 5, 5, 5] with r0c4 the only neutral region; player 1 takes it -> [5, 5, 5, 5]
    owners = owners_for({
        1: ["r0c0", "r0c1", "r0c2", "r0c3"],
        2: ROW_MAJOR[5:10],
        3: ROW_MAJOR[10:15],
        4: ROW_MAJOR[15:20],
    })
    state, events = capture(make_state(owners), "r0c4")

    assert ACTION_REJECTED not in [e.type for e in events]
    assert state.player_scores == {1: 5, 2: 5, 3: 5, 4: 5}
    assert state.game_over
    assert state.winner is None
    assert state.leaders == [1, 2, 3, 4]
    assert state.message == "НИЧЬЯ! Все страны захвачены. Лидеры по 5."


def test_full_map_six_cannot_capture(make_state):
    owners = owners_for({
        1: ROW_MAJOR[0:5],
        2: ROW_MAJOR[5:10],
        3: ROW_MAJOR[10:15],
        4: ROW_MAJOR[15:20],
    })
    state, _ = apply_action(make_state(owners), roll_dice(1, 6))
    assert state.phase == Phase.AWAITING_END_TURN
    assert not state.game_over


def test_game_continues_while_regions_remain(make_state):
    owners = owners_for({
        1: ROW_MAJOR[0:6],
        2: ROW_MAJOR[6:11],
        3: ROW_MAJOR[11:16],
        4: ROW_MAJOR[16:19],
    })
    assert evaluate_win_condition(make_state(owners), 1) is None


def play_round(state, region_id):
    """Player 1 rolls a 6 and captures; players 2-4 roll a 1 and pass."""
    assert state.current_player == 1
    state, events = capture(state, region_id)
    if state.game_over:
        return state, events
    state, _ = apply_action(state, end_turn(1))
    for player in (2, 3, 4):
        state, _ = apply_action(state, roll_dice(player, 1))
        state, _ = apply_action(state, end_turn(player))
    return state, events


def test_score_conservation_over_many_captures(make_state):
    state = make_state({"r0c0": 1, "r3c4": 2})
    for target in ["r0c1", "r1c1", "r2c2", "r2c3", "r3c3", "r3c4"]:
        state, events = play_round(state, target)
        assert events[0].payload["success"] is True
        owned = sum(1 for r in state.regions.values() if r.owner != 0)
        assert sum(state.player_scores.values()) == owned

    assert state.regions["r3c4"].owner == 1
    assert state.player_scores[1] == 7
    assert state.player_scores[2] == 0
    assert state.turn_number == 7
    assert state.phase == Phase.AWAITING_ROLL


def test_sixes_carry_player_from_fourteen_to_fifteen(make_state):
    state = make_state({"r0c0": 1, "r3c2": 4, "r3c3": 3, "r3c4": 2})
    targets = ROW_MAJOR[1:15]

    for target in targets[:-1]:
        state, events = play_round(state, target)
        assert not state.game_over
    assert state.player_scores[1] == 14
    assert state.regions["r3c0"].owner == 0

    state, events = play_round(state, targets[-1])

    assert state.game_over
    assert state.winner == 1
    assert state.message == "ИГРОК 1 ПОБЕДИЛ"
    assert state.player_scores[1] == 15
    over = [e for e in events if e.type == GAME_OVER]
    assert len(over) == 1
    assert over[0].payload["winner"] == 1
