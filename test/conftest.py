"""
Shared pytest fixtures for engine and API tests.
Maps are built in memory so tests do not depend on the bundled data files,
except where a test is about loading them.
"""

from typing import Callable

import pytest

from conquest.engine import NEUTRAL
from conquest.engine.adjacency import build_adjacency_graph
from conquest.engine.definitions import BoundingBox, MapDefinition, RegionDefinition
from conquest.engine.state import GameState, Phase, RegionState


def make_grid_map(cols: int = 5, rows: int = 4, size: float = 100.0, map_id: str = "grid") -> MapDefinition:
    """cols x rows touching square regions named r<row>c<col>."""
    regions = {}
    for row in range(rows):
        for col in range(cols):
            rid = f"r{row}c{col}"
            regions[rid] = RegionDefinition(
                id=rid,
                display_name=rid.upper(),
                bbox=BoundingBox(col * size, row * size, size, size),
            )
    return MapDefinition(id=map_id, display_name=map_id, regions=regions)


@pytest.fixture
def grid_map() -> MapDefinition:
    return make_grid_map()


@pytest.fixture
def grid_adjacency(grid_map) -> dict[str, frozenset[str]]:
    return build_adjacency_graph(grid_map.region_ids, grid_map)


@pytest.fixture
def make_state(grid_map, grid_adjacency) -> Callable[..., GameState]:
    """
    Factory for a state on the 5x4 grid with the given owners.
    Scores are derived from ownership so they always balance.
    """

    def _make(owners: dict[str, int] | None = None, phase: Phase = Phase.AWAITING_ROLL, **kwargs) -> GameState:
        owners = owners or {}
        regions = {
            rid: RegionState(owner=owners.get(rid, NEUTRAL), adjacent=grid_adjacency[rid])
            for rid in grid_map.region_ids
        }
        scores = {p: 0 for p in range(1, 5)}
        for owner in owners.values():
            if owner != NEUTRAL:
                scores[owner] += 1
        return GameState(regions=regions, player_scores=scores, phase=phase, **kwargs)

    return _make
