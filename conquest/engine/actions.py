"""
Action definitions for the game.
Actions are immutable, deterministic instructions; dice values are decided
before the action is built so the reducer never needs randomness.
"""

from dataclasses import dataclass, field

ROLL_DICE = "roll_dice"
CAPTURE_REGION = "capture_region"
END_TURN = "end_turn"


@dataclass(frozen=True)
class Action:
    """Base action class. All actions have a type, the acting player, and a payload."""
    type: str  # "roll_dice", "capture_region", "end_turn"
    player: int  # player id performing the action
    payload: dict = field(default_factory=dict)


def roll_dice(player: int, value: int) -> Action:
    """
    Record a die roll for the current player.
    The face value comes from utils.generate_dice_roll() or a forced/debug value.

    Example: roll_dice(1, 6)  # opens the capture phase if any region is neutral
    """
    return Action(type=ROLL_DICE, player=player, payload={"value": value})


def capture_region(player: int, region_id: str) -> Action:
    """
    Capture a region during the capture phase.
    The first capture of a player with no regions may target any neutral region;
    after that the target must border one of the player's own regions.
    """
    return Action(type=CAPTURE_REGION, player=player, payload={"region_id": region_id})


def end_turn(player: int) -> Action:
    """End the current turn and pass the die to the next player."""
    return Action(type=END_TURN, player=player)
