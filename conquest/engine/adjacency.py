"""
Region adjacency graph.

Two regions are neighbours when their bounding boxes overlap once each box is
grown by a small tolerance on all four sides. This is an approximation of
real border sharing: regions that are merely close can come out adjacent, and
long thin borders can be missed. Game rules (capture eligibility) depend on
this exact test.
"""

import logging
from itertools import combinations
from typing import Iterable

from conquest.engine import ADJACENCY_TOLERANCE
from conquest.engine.definitions import BoundingBox, GeometryProvider

logger = logging.getLogger(__name__)


def boxes_touch(a: BoundingBox, b: BoundingBox, tolerance: float = ADJACENCY_TOLERANCE) -> bool:
    """True unless one box lies entirely beyond the other's edge plus tolerance."""
    return not (
        a.x > b.x + b.width + tolerance
        or a.x + a.width < b.x - tolerance
        or a.y > b.y + b.height + tolerance
        or a.y + a.height < b.y - tolerance
    )


def _safe_bbox(geometry: GeometryProvider, region_id: str) -> BoundingBox | None:
    try:
        return geometry.get_bounding_box(region_id)
    except Exception as e:
        logger.warning("Geometry query failed for region %s: %s", region_id, e)
        return None


def build_adjacency_graph(
    region_ids: Iterable[str],
    geometry: GeometryProvider,
    tolerance: float = ADJACENCY_TOLERANCE,
) -> dict[str, frozenset[str]]:
    """
    Build the undirected adjacency graph for the given regions.

    Every region is a node, even one whose geometry is missing (it simply gets
    no neighbours). Each unordered pair is tested once and recorded in both
    directions. Geometry failures never abort the build.

    Returns:
        region_id -> frozenset of neighbouring region ids
    """
    ids = list(dict.fromkeys(region_ids))
    boxes = {rid: _safe_bbox(geometry, rid) for rid in ids}
    neighbours: dict[str, set[str]] = {rid: set() for rid in ids}

    missing = [rid for rid, b in boxes.items() if b is None]
    if missing:
        logger.warning(
            "%d region(s) without a bounding box, treated as having no neighbours: %s",
            len(missing), ", ".join(sorted(missing)),
        )

    for a_id, b_id in combinations(ids, 2):
        a, b = boxes[a_id], boxes[b_id]
        if a is None or b is None:
            continue
        if boxes_touch(a, b, tolerance):
            neighbours[a_id].add(b_id)
            neighbours[b_id].add(a_id)

    logger.debug(
        "Adjacency graph built: %d regions, %d edges",
        len(ids), sum(len(n) for n in neighbours.values()) // 2,
    )
    return {rid: frozenset(n) for rid, n in neighbours.items()}
