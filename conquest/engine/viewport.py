"""
Viewport transform math for the map view.

A transform maps content coordinates to screen coordinates:
    screen = content * scale + translate
All functions here are pure: (content bounds, viewport size, transform) in,
transform out. Animation and easing belong to the renderer, which is only
given the target transform.
"""

from dataclasses import dataclass

from conquest.engine import DEFAULT_FOCUS_SCALE, MAX_SCALE, MIN_SCALE, ZOOM_SPEED
from conquest.engine.definitions import BoundingBox


@dataclass(frozen=True)
class Transform:
    scale: float = 1.0
    translate_x: float = 0.0
    translate_y: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "scale": self.scale,
            "translate_x": self.translate_x,
            "translate_y": self.translate_y,
        }


@dataclass(frozen=True)
class ViewportSize:
    width: float
    height: float

    @property
    def is_known(self) -> bool:
        return self.width > 0 and self.height > 0


IDENTITY = Transform()


def clamp_scale(scale: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, scale))


def screen_to_content(transform: Transform, x: float, y: float) -> tuple[float, float]:
    """Content coordinates of a viewport point under the given transform."""
    return (
        (x - transform.translate_x) / transform.scale,
        (y - transform.translate_y) / transform.scale,
    )


def _clamp_axis(translate: float, start: float, size: float, view: float, scale: float) -> float:
    # near: content's leading edge on the viewport origin; far: trailing edge on the viewport's far edge
    near = -start * scale
    far = view - (start + size) * scale
    if size * scale >= view:
        lo, hi = far, near  # content covers the viewport on this axis
    else:
        lo, hi = near, far  # content floats anywhere inside the viewport
    return max(lo, min(hi, translate))


def clamp_transform(
    transform: Transform,
    content: BoundingBox | None,
    viewport: ViewportSize | None,
) -> Transform:
    """
    Keep the map from being dragged out of view.

    Per axis: content larger than the viewport must always cover it (no empty
    band at either side); content smaller than the viewport may sit anywhere
    between flush with one edge and flush with the other. Without known,
    non-degenerate content bounds and viewport size the transform is returned as is.
    Applying the clamp twice gives the same result as applying it once.
    """
    if content is None or content.is_degenerate or viewport is None or not viewport.is_known:
        return transform
    s = transform.scale
    return Transform(
        scale=s,
        translate_x=_clamp_axis(transform.translate_x, content.x, content.width, viewport.width, s),
        translate_y=_clamp_axis(transform.translate_y, content.y, content.height, viewport.height, s),
    )


def zoom_at(
    transform: Transform,
    x: float,
    y: float,
    direction: int,
    content: BoundingBox | None = None,
    viewport: ViewportSize | None = None,
    apply_clamp: bool = True,
) -> Transform:
    """
    Zoom one step around the viewport point (x, y).

    direction > 0 zooms in by ZOOM_SPEED, otherwise out by its reciprocal.
    The content point under (x, y) stays under (x, y) (before clamping).
    """
    factor = ZOOM_SPEED if direction > 0 else 1 / ZOOM_SPEED
    old_scale = transform.scale
    new_scale = clamp_scale(old_scale * factor)
    ratio = new_scale / old_scale
    zoomed = Transform(
        scale=new_scale,
        translate_x=x - (x - transform.translate_x) * ratio,
        translate_y=y - (y - transform.translate_y) * ratio,
    )
    return clamp_transform(zoomed, content, viewport) if apply_clamp else zoomed


def pan_by(
    transform: Transform,
    dx: float,
    dy: float,
    content: BoundingBox | None = None,
    viewport: ViewportSize | None = None,
) -> Transform:
    """Move the map by a screen-space delta, divided by scale so pan speed feels the same at every zoom."""
    moved = Transform(
        scale=transform.scale,
        translate_x=transform.translate_x + dx / transform.scale,
        translate_y=transform.translate_y + dy / transform.scale,
    )
    return clamp_transform(moved, content, viewport)


def focus_on(
    region: BoundingBox | None,
    viewport: ViewportSize,
    content: BoundingBox | None = None,
    target_scale: float = DEFAULT_FOCUS_SCALE,
    boundary_point: tuple[float, float] | None = None,
) -> Transform | None:
    """
    Target transform that centres a region in the viewport at target_scale.

    A missing or degenerate region box falls back to a 1x1 box at a point on
    the region's outline; with no such point there is nothing to focus on and
    None is returned.
    """
    if region is None or region.is_degenerate:
        if boundary_point is None:
            return None
        region = BoundingBox(boundary_point[0], boundary_point[1], 1.0, 1.0)

    scale = clamp_scale(target_scale)
    cx, cy = region.center
    centred = Transform(
        scale=scale,
        translate_x=viewport.width / 2 - cx * scale,
        translate_y=viewport.height / 2 - cy * scale,
    )
    return clamp_transform(centred, content, viewport)


class ViewportController:
    """
    Holds the current transform for one map view.
    Content bounds are fixed at construction; every change goes through the pure
    functions above and is clamped.
    """

    def __init__(
        self,
        content_bounds: BoundingBox | None,
        viewport: ViewportSize,
        transform: Transform = IDENTITY,
    ):
        self._content = content_bounds
        self.viewport = viewport
        self.transform = clamp_transform(transform, content_bounds, viewport)
        self._pan_anchor: tuple[float, float] | None = None

    @property
    def content_bounds(self) -> BoundingBox | None:
        return self._content

    @property
    def is_panning(self) -> bool:
        return self._pan_anchor is not None

    def zoom_at(self, x: float, y: float, direction: int) -> Transform:
        self.transform = zoom_at(self.transform, x, y, direction, self._content, self.viewport)
        return self.transform

    def pan_by(self, dx: float, dy: float) -> Transform:
        self.transform = pan_by(self.transform, dx, dy, self._content, self.viewport)
        return self.transform

    def begin_pan(self, x: float, y: float) -> None:
        self._pan_anchor = (x, y)

    def drag_to(self, x: float, y: float) -> Transform | None:
        """Pan by the movement since the last pointer position. None when no drag is active."""
        if self._pan_anchor is None:
            return None
        ax, ay = self._pan_anchor
        self._pan_anchor = (x, y)
        return self.pan_by(x - ax, y - ay)

    def end_pan(self) -> None:
        self._pan_anchor = None

    def focus_on(
        self,
        region: BoundingBox | None,
        target_scale: float = DEFAULT_FOCUS_SCALE,
        boundary_point: tuple[float, float] | None = None,
    ) -> Transform | None:
        target = focus_on(region, self.viewport, self._content, target_scale, boundary_point)
        if target is not None:
            self.transform = target
        return target

    def resize(self, width: float, height: float) -> Transform:
        self.viewport = ViewportSize(width, height)
        self.transform = clamp_transform(self.transform, self._content, self.viewport)
        return self.transform

    def reset(self) -> Transform:
        self.transform = clamp_transform(IDENTITY, self._content, self.viewport)
        return self.transform
