"""
Static map definitions: regions and their geometry.
Maps live under data/maps/ as either <map_id>.json (explicit bounding boxes)
or <map_id>.svg (every shape with an id is a region, see svg_map.py).
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Protocol

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent.parent / "data"
MAPS_DIR = DATA_DIR / "maps"


class SetupError(ValueError):
    """The session cannot start: bad map or not enough regions to hand out."""


def _default_map_id() -> str:
    """Single place for default: conquest.config.DEFAULT_MAP_ID."""
    from conquest.config import DEFAULT_MAP_ID
    return DEFAULT_MAP_ID


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in content coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def is_degenerate(self) -> bool:
        return self.width == 0 or self.height == 0

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict) -> "BoundingBox":
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )

    @classmethod
    def from_bounds(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> "BoundingBox":
        return cls(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)

    @classmethod
    def union(cls, boxes: Iterable["BoundingBox | None"]) -> "BoundingBox | None":
        """Smallest box containing every given box. None when there is nothing to enclose."""
        present = [b for b in boxes if b is not None]
        if not present:
            return None
        return cls.from_bounds(
            min(b.x for b in present),
            min(b.y for b in present),
            max(b.right for b in present),
            max(b.bottom for b in present),
        )


@dataclass(frozen=True)
class RegionDefinition:
    """Defines immutable properties of a map region."""
    id: str
    display_name: str
    bbox: BoundingBox | None  # None when the geometry could not be measured
    # First point of the region's outline; used to focus on regions with a degenerate box
    boundary_point: tuple[float, float] | None = None


class GeometryProvider(Protocol):
    """Answers geometry questions about regions in content coordinates."""

    def get_bounding_box(self, region_id: str) -> BoundingBox | None:
        ...

    def get_boundary_point(self, region_id: str) -> tuple[float, float] | None:
        ...


@dataclass
class MapDefinition:
    """A loaded map. Also serves as the GeometryProvider for its own regions."""
    id: str
    display_name: str
    regions: dict[str, RegionDefinition] = field(default_factory=dict)
    source: str = "json"  # "json" or "svg"

    @property
    def region_ids(self) -> list[str]:
        return list(self.regions.keys())

    def get_bounding_box(self, region_id: str) -> BoundingBox | None:
        region = self.regions.get(region_id)
        if region is None:
            raise KeyError(f"Unknown region: {region_id}")
        return region.bbox

    def get_boundary_point(self, region_id: str) -> tuple[float, float] | None:
        region = self.regions.get(region_id)
        if region is None:
            return None
        if region.boundary_point is not None:
            return region.boundary_point
        if region.bbox is not None:
            return (region.bbox.x, region.bbox.y)
        return None

    def content_bounds(self) -> BoundingBox | None:
        """Union bounding box of all regions (computed from the map, never changes)."""
        return BoundingBox.union(r.bbox for r in self.regions.values())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "regions": {
                rid: {
                    "display_name": r.display_name,
                    "bbox": r.bbox.to_dict() if r.bbox else None,
                }
                for rid, r in self.regions.items()
            },
        }


def _region_from_dict(data: dict) -> RegionDefinition:
    region_id = str(data.get("id") or "")
    if not region_id:
        raise SetupError("Region without id in map file")
    bbox_raw = data.get("bbox")
    bbox = None
    if isinstance(bbox_raw, dict):
        try:
            bbox = BoundingBox.from_dict(bbox_raw)
        except (KeyError, TypeError, ValueError):
            logger.warning("Region %s has an unreadable bbox %r; treating geometry as unavailable", region_id, bbox_raw)
    point_raw = data.get("boundary_point")
    boundary_point = None
    if isinstance(point_raw, (list, tuple)) and len(point_raw) == 2:
        boundary_point = (float(point_raw[0]), float(point_raw[1]))
    return RegionDefinition(
        id=region_id,
        display_name=str(data.get("display_name") or region_id),
        bbox=bbox,
        boundary_point=boundary_point,
    )


def map_from_dict(data: dict, map_id: str | None = None) -> MapDefinition:
    """Build a MapDefinition from the JSON map shape. Region ids must be unique."""
    map_id = map_id or str(data.get("id") or "custom")
    regions: dict[str, RegionDefinition] = {}
    for raw in data.get("regions") or []:
        if not isinstance(raw, dict):
            continue
        region = _region_from_dict(raw)
        if region.id in regions:
            raise SetupError(f"Duplicate region id in map {map_id}: {region.id}")
        regions[region.id] = region
    if not regions:
        raise SetupError(f"Map {map_id} has no regions")
    return MapDefinition(
        id=map_id,
        display_name=str(data.get("display_name") or map_id),
        regions=regions,
    )


def list_maps() -> list[dict]:
    """Return [{ id, display_name, format }, ...] for all maps under data/maps/."""
    out = []
    if not MAPS_DIR.exists():
        return out
    for path in sorted(MAPS_DIR.iterdir()):
        if path.suffix == ".json":
            try:
                with open(path, "r", encoding="utf-8") as f:
                    m = json.load(f)
                out.append({
                    "id": path.stem,
                    "display_name": m.get("display_name", path.stem),
                    "format": "json",
                })
            except (json.JSONDecodeError, OSError):
                out.append({"id": path.stem, "display_name": path.stem, "format": "json"})
        elif path.suffix == ".svg":
            out.append({"id": path.stem, "display_name": path.stem, "format": "svg"})
    return out


def load_map(map_id: str | None = None, maps_dir: Path | str | None = None) -> MapDefinition:
    """
    Load a map by id. JSON maps take precedence over SVG maps with the same id.

    Raises:
        FileNotFoundError: no map with this id
        SetupError: the map exists but defines no usable regions
    """
    map_id = map_id or _default_map_id()
    base = Path(maps_dir) if maps_dir else MAPS_DIR
    json_path = base / f"{map_id}.json"
    if json_path.exists():
        with open(json_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        map_def = map_from_dict(data, map_id=map_id)
        logger.info("Loaded map %s (%d regions) from %s", map_id, len(map_def.regions), json_path.name)
        return map_def
    svg_path = base / f"{map_id}.svg"
    if svg_path.exists():
        from conquest.engine.svg_map import load_svg_map
        return load_svg_map(svg_path, map_id=map_id)
    raise FileNotFoundError(f"Map not found: {map_id}")
