"""
Game state representation.
The reducer never mutates a state it is given; it works on a copy and returns it.
to_dict() gives the JSON shape sent to the UI.
"""

from copy import deepcopy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from conquest.engine import NEUTRAL, TOTAL_PLAYERS, WIN_THRESHOLD


class Phase(str, Enum):
    """Turn state. Exactly one is active; each action moves between them."""
    AWAITING_ROLL = "awaiting_roll"
    ROLLING = "rolling"  # only inside a roll_dice reduction, never observable afterwards
    CAPTURE = "capture"
    AWAITING_END_TURN = "awaiting_end_turn"
    GAME_OVER = "game_over"


@dataclass
class RegionState:
    """State of a single region."""
    owner: int = NEUTRAL  # 0 = neutral, else player id
    # Neighbouring region ids; fixed once the adjacency graph is built
    adjacent: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_neutral(self) -> bool:
        return self.owner == NEUTRAL

    def to_dict(self) -> dict[str, Any]:
        return {
            "owner": self.owner,
            "adjacent": sorted(self.adjacent),
        }


@dataclass
class GameState:
    """Complete game state for one session."""
    regions: dict[str, RegionState]  # region_id -> RegionState
    current_player: int = 1
    dice_result: int = 0  # 0 = not rolled yet this turn
    phase: Phase = Phase.AWAITING_ROLL
    turn_number: int = 1  # full rounds; increments when play wraps back to player 1
    # player_id -> number of owned regions
    player_scores: dict[int, int] = field(
        default_factory=lambda: {p: 0 for p in range(1, TOTAL_PLAYERS + 1)}
    )
    # player_id -> region assigned at game start (never reassigned)
    player_start_regions: dict[int, str] = field(default_factory=dict)
    winner: int | None = None  # None while playing, and also for a draw
    # Players sharing the top score when the game ended on points
    leaders: list[int] = field(default_factory=list)
    message: str = ""  # final result text once the game is over
    win_threshold: int = WIN_THRESHOLD
    total_players: int = TOTAL_PLAYERS

    @property
    def capture_phase_active(self) -> bool:
        return self.phase == Phase.CAPTURE

    @property
    def game_over(self) -> bool:
        return self.phase == Phase.GAME_OVER

    @property
    def player_ids(self) -> list[int]:
        return list(range(1, self.total_players + 1))

    def owner_of(self, region_id: str) -> int | None:
        region = self.regions.get(region_id)
        return region.owner if region else None

    def copy(self) -> "GameState":
        """Return a deep copy of this game state."""
        return deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Convert GameState to a dictionary for JSON responses."""
        return {
            "current_player": self.current_player,
            "dice_result": self.dice_result,
            "phase": self.phase.value,
            "capture_phase_active": self.capture_phase_active,
            "game_over": self.game_over,
            "turn_number": self.turn_number,
            "regions": {rid: rs.to_dict() for rid, rs in self.regions.items()},
            # JSON object keys are strings
            "player_scores": {str(p): s for p, s in self.player_scores.items()},
            "player_start_regions": {str(p): r for p, r in self.player_start_regions.items()},
            "winner": self.winner,
            "leaders": list(self.leaders),
            "message": self.message,
            "win_threshold": self.win_threshold,
        }
