"""
Main entry point for the Dice Conquest engine.
Plays a seeded game on the default map with simple bots and prints what happens.
Run: python main.py [map_id] [seed]
"""

import random
import sys

from conquest.config import DEFAULT_MAP_ID, DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH
from conquest.engine.definitions import load_map
from conquest.engine.events import CAPTURE_RESULT, DICE_ROLLED, GAME_OVER, TRANSFORM_CHANGED
from conquest.engine.game import GameOrchestrator
from conquest.engine.queries import get_game_summary
from conquest.engine.utils import print_game_state
from conquest.engine.viewport import ViewportSize
from conquest.logging_setup import setup_logging

MAX_TURNS = 200


def pick_target(highlights: dict[str, list[str]], rng: random.Random) -> str | None:
    """Bot choice: prefer enemy regions (they swing the score by two), else any free one."""
    if highlights["capturable"]:
        return rng.choice(highlights["capturable"])
    if highlights["available"]:
        return rng.choice(highlights["available"])
    return None


def print_event(event):
    p = event.payload
    if event.type == DICE_ROLLED:
        print(f"  Player {p['player']} rolled {p['value']}")
    elif event.type == CAPTURE_RESULT and p["success"]:
        print(f"  Player {p['player']} captured {p['region_id']}")
    elif event.type == GAME_OVER:
        print(f"  *** {p['message']} ***")
    elif event.type == TRANSFORM_CHANGED and p["animate"]:
        print(f"  View focused: scale={p['scale']:.2f} translate=({p['translate_x']:.1f}, {p['translate_y']:.1f})")


def main():
    map_id = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_MAP_ID
    seed = int(sys.argv[2]) if len(sys.argv) > 2 else 7
    setup_logging("WARNING")

    print("Dice Conquest - scripted demo")
    print("=" * 60)

    map_def = load_map(map_id)
    bot_rng = random.Random(seed + 1)
    game = GameOrchestrator(
        map_def,
        ViewportSize(DEFAULT_VIEWPORT_WIDTH, DEFAULT_VIEWPORT_HEIGHT),
        rng=random.Random(seed),
    )
    game.subscribe(print_event)
    game.start()

    print(f"\n[INITIAL STATE] map={map_def.display_name} seed={seed}")
    print_game_state(game.state, verbose=True)

    # Score panel click: centre on player 1's start region
    game.click_score_entry(1)

    while not game.state.game_over and game.state.turn_number <= MAX_TURNS:
        game.roll_dice()
        if game.state.capture_phase_active:
            target = pick_target(game.capture_highlights(), bot_rng)
            if target is not None:
                game.click_region(target)
        if not game.state.game_over:
            game.end_turn()

    print("\n[FINAL STATE]")
    print_game_state(game.state, verbose=True)

    summary = get_game_summary(game.state)
    print("=" * 60)
    if summary["game_over"]:
        print(f"Finished after {summary['turn_number']} rounds: {game.state.message}")
    else:
        print(f"Stopped after {MAX_TURNS} rounds without a result.")
    print(f"Regions owned: {summary['regions_owned']}/{summary['regions_total']}")
    print("=" * 60)


if __name__ == "__main__":
    main()
