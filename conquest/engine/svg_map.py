"""
SVG map loader.
Every <path> carrying an id attribute is a region; backgrounds, frames and other
shapes are decoration. Callers may widen this with region_tags.
Outline points are pulled from the markup and reduced to bounds with shapely.
Curve segments contribute their control points, so a curved region's box may be
slightly larger than the drawn outline. Element transforms are not applied.
"""

from __future__ import annotations

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Iterable, Iterator, List, Tuple

from shapely.geometry import MultiPoint, box

from conquest.engine.definitions import BoundingBox, MapDefinition, RegionDefinition, SetupError

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

REGION_TAGS = ("path",)

_COMMAND = re.compile(r"[MmLlHhVvZzCcSsQqTtAa]")
_NUMBER = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
# Arc flags are single digits and may run into the next number ("a25 25 0 1150 50")
_FLAG = re.compile(r"[01]")
_SEPARATOR = re.compile(r"[\s,]*")
_PATH_PARAMS = {"M": 2, "L": 2, "H": 1, "V": 1, "C": 6, "S": 4, "Q": 4, "T": 2, "A": 7, "Z": 0}
_ARC_FLAG_INDEXES = (3, 4)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def parse_points(points_str: str) -> List[Point]:
    """Parse a polygon/polyline points attribute ("x,y x,y" or "x y x y")."""
    if not points_str:
        return []
    tokens = points_str.replace(",", " ").split()
    pts: List[Point] = []
    for i in range(0, len(tokens) - 1, 2):
        try:
            pts.append((float(tokens[i]), float(tokens[i + 1])))
        except ValueError:
            continue
    return pts


def _skip_separators(d: str, pos: int) -> int:
    return _SEPARATOR.match(d, pos).end()


def _read_params(d: str, pos: int, cmd: str) -> tuple[List[float], int]:
    upper = cmd.upper()
    vals: List[float] = []
    for k in range(_PATH_PARAMS[upper]):
        pattern = _FLAG if upper == "A" and k in _ARC_FLAG_INDEXES else _NUMBER
        m = pattern.match(d, pos)
        if m is None:
            raise ValueError(f"Truncated '{cmd}' segment in path data")
        vals.append(float(m.group()))
        pos = _skip_separators(d, m.end())
    return vals, pos


def parse_path_points(d: str) -> List[Point]:
    """
    Collect the absolute coordinates of every vertex and control point in path data.
    Raises ValueError on data that does not start with a command, or on a truncated segment.
    """
    d = d or ""
    points: List[Point] = []
    cx = cy = 0.0
    sx = sy = 0.0
    cmd = None
    pos = _skip_separators(d, 0)
    while pos < len(d):
        m = _COMMAND.match(d, pos)
        if m:
            cmd = m.group()
            pos = _skip_separators(d, m.end())
            if cmd in "Zz":
                cx, cy = sx, sy
            continue
        if cmd is None:
            raise ValueError(f"Path data must start with a command: {d[:20]!r}")
        upper = cmd.upper()
        if upper == "Z":
            raise ValueError(f"Unexpected number after closepath in {d[:20]!r}")
        vals, pos = _read_params(d, pos, cmd)
        rel = cmd.islower()
        ox, oy = (cx, cy) if rel else (0.0, 0.0)

        if upper == "H":
            seg = [(vals[0] + ox, cy)]
        elif upper == "V":
            seg = [(cx, vals[0] + oy)]
        elif upper == "A":
            seg = [(vals[5] + ox, vals[6] + oy)]
        else:
            seg = [(vals[k] + ox, vals[k + 1] + oy) for k in range(0, len(vals), 2)]

        points.extend(seg)
        cx, cy = seg[-1]
        if upper == "M":
            sx, sy = cx, cy
            # Extra coordinate pairs after a moveto are implicit linetos
            cmd = "l" if rel else "L"
    return points


def _element_points(el: ET.Element) -> List[Point]:
    tag = _local(el.tag)
    if tag == "path":
        return parse_path_points(el.attrib.get("d", ""))
    if tag in ("polygon", "polyline"):
        return parse_points(el.attrib.get("points", ""))
    if tag == "rect":
        x = float(el.attrib.get("x", "0"))
        y = float(el.attrib.get("y", "0"))
        w = float(el.attrib.get("width", "0"))
        h = float(el.attrib.get("height", "0"))
        minx, miny, maxx, maxy = box(x, y, x + w, y + h).bounds
        return [(minx, miny), (maxx, miny), (maxx, maxy), (minx, maxy)]
    return []


def _iter_region_elements(el: ET.Element, tags: Iterable[str]) -> Iterator[ET.Element]:
    for child in el:
        tag = _local(child.tag)
        if tag in ("defs", "style", "clipPath", "mask", "symbol"):
            continue
        if tag in tags and child.attrib.get("id"):
            yield child
        yield from _iter_region_elements(child, tags)


def measure_element(el: ET.Element) -> tuple[BoundingBox | None, Point | None]:
    """Bounding box and first outline point of a region element. (None, None) if unmeasurable."""
    try:
        pts = _element_points(el)
    except ValueError as e:
        logger.warning("Cannot read geometry of %s: %s", el.attrib.get("id"), e)
        return None, None
    if not pts:
        return None, None
    minx, miny, maxx, maxy = MultiPoint(pts).bounds
    return BoundingBox.from_bounds(minx, miny, maxx, maxy), pts[0]


def load_svg_map(
    path: Path | str,
    map_id: str | None = None,
    region_tags: Iterable[str] = REGION_TAGS,
) -> MapDefinition:
    """
    Load an SVG file as a map. Only elements whose tag is in region_tags (default:
    path) and that carry an id become regions.

    Raises:
        SetupError: the file is not XML, or no region element is found
    """
    path = Path(path)
    map_id = map_id or path.stem
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise SetupError(f"Map {map_id} is not valid SVG: {e}") from e

    regions: dict[str, RegionDefinition] = {}
    tags = tuple(region_tags)
    for el in _iter_region_elements(root, tags):
        region_id = el.attrib["id"]
        if region_id in regions:
            logger.warning("Duplicate region id %s in %s; keeping the first", region_id, path.name)
            continue
        bbox, first_point = measure_element(el)
        if bbox is None:
            logger.warning("Region %s in %s has no measurable geometry", region_id, path.name)
        title = el.attrib.get("title") or el.attrib.get("data-name") or region_id
        regions[region_id] = RegionDefinition(
            id=region_id,
            display_name=title,
            bbox=bbox,
            boundary_point=first_point,
        )

    if not regions:
        raise SetupError(f"No regions with an id found in {path.name}")
    logger.info("Loaded SVG map %s (%d regions)", map_id, len(regions))
    return MapDefinition(id=map_id, display_name=root.attrib.get("title", map_id), regions=regions, source="svg")
