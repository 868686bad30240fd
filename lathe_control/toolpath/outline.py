"""Digitized outline of the piece: the surface curve plus everything derived
from it.

The outline owns two curves:

* ``surface`` - dots placed on the inside or outside surface of the piece,
  kept sorted by y (lathe z) and fitted with the chosen style;
* ``safe_path`` - optional retract points, joined with straight lines and
  also kept sorted by y.

Inside/outside surfaces and cutter paths are computed on demand from the
current state and never stored.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np

from lathe_control.curves import sampled
from lathe_control.curves.curve import Curve, FitStyle, PointLike
from lathe_control.curves.geometry import polyline_bbox
from lathe_control.cutters.cutter import Cutter
from lathe_control.cutters.location import Location
from lathe_control.toolpath.offset import cutter_path

logger = logging.getLogger(__name__)

DEFAULT_THICKNESS = 0.1
DEFAULT_RESOLUTION = 0.01
MIN_RESOLUTION = 0.001


class OutlineError(Exception):
    """Raised for outline edits that need a particular number of points."""

    pass


class Outline:
    """Digitized surface, wall thickness and sampling resolution.

    Parameters
    ----------
    points : Iterable[PointLike]
        Surface dots; inserted in y order.
    style : FitStyle
        Fit style for the surface curve.
    location : Location
        Which surface the dots were placed on.
    thickness : float
        Wall thickness (inches, >= 0).
    resolution : float
        Sample spacing for every derived curve (inches, >= MIN_RESOLUTION).
    safe_points : Iterable[PointLike]
        Retract path points.
    """

    def __init__(
        self,
        points: Iterable[PointLike] = (),
        style: FitStyle = FitStyle.BEZIER,
        location: Location = Location.FRONT_INSIDE,
        thickness: float = DEFAULT_THICKNESS,
        resolution: float = DEFAULT_RESOLUTION,
        safe_points: Iterable[PointLike] = (),
    ) -> None:
        if thickness < 0.0:
            raise ValueError(f"thickness must be >= 0, got {thickness}")
        if resolution < MIN_RESOLUTION:
            raise ValueError(
                f"resolution must be >= {MIN_RESOLUTION}, got {resolution}"
            )
        self.location = Location(location)
        self.thickness = float(thickness)
        self.surface = Curve(style=style, spacing=resolution)
        self.safe_path = Curve(style=FitStyle.STRAIGHT, spacing=resolution)
        for p in points:
            self.add_point(p[0], p[1])
        for p in safe_points:
            self.add_safe_point(p[0], p[1])

    def __repr__(self) -> str:
        return (
            f"Outline({self.location.value}, {len(self.surface)} pts, "
            f"thickness={self.thickness}, resolution={self.resolution})"
        )

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @property
    def resolution(self) -> float:
        return self.surface.spacing

    @resolution.setter
    def resolution(self, value: float) -> None:
        if value < MIN_RESOLUTION:
            raise ValueError(f"resolution must be >= {MIN_RESOLUTION}, got {value}")
        self.surface.spacing = value
        self.safe_path.spacing = value

    @property
    def num_points(self) -> int:
        return len(self.surface)

    @property
    def has_safe_path(self) -> bool:
        return len(self.safe_path) > 0

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def add_point(self, x: float, y: float) -> int:
        return self.surface.insert_sorted(x, y, axis="y")

    def delete_point(self, index: int) -> bool:
        return self.surface.delete_point(index)

    def add_safe_point(self, x: float, y: float) -> int:
        return self.safe_path.insert_sorted(x, y, axis="y")

    def delete_safe_point(self, index: int) -> bool:
        return self.safe_path.delete_point(index)

    def delete_safe_path(self) -> bool:
        return self.safe_path.clear()

    def clear(self) -> bool:
        changed = self.surface.clear()
        return self.safe_path.clear() or changed

    def offset_surface(self, d: float) -> bool:
        """Move the surface dots by *d* along their normals."""
        return self.surface.offset_normal(d, self.location.is_front_in_or_back_out)

    def offset_for_cutter(self, cutter: Cutter) -> bool:
        """Shift dots digitized at a disc cutter's centre onto the surface."""
        if not cutter.frame.is_disc:
            return False
        return self.offset_surface(-cutter.radius)

    def offset_vertical(self, delta: float) -> bool:
        """Move the surface and safe path down by *delta* (z decreases)."""
        changed = self.surface.translate(0.0, -delta)
        return self.safe_path.translate(0.0, -delta) or changed

    def invert(self) -> bool:
        changed = self.surface.invert()
        return self.safe_path.invert() or changed

    def scale(self, factor: float) -> bool:
        """Scale both curves about the origin; factors outside [0.1, 10] are ignored."""
        if factor < 0.1 or factor > 10.0 or factor == 1.0:
            return False
        changed = self.surface.scale(factor, factor)
        return self.safe_path.scale(factor, factor) or changed

    def _require_two_points(self) -> None:
        if len(self.surface) != 2:
            raise OutlineError(
                f"This only works for 2 points, outline has {len(self.surface)}"
            )

    def set_two_points_vertical(self) -> bool:
        """Give the second point the x of the first."""
        self._require_two_points()
        p0, p1 = self.surface.points
        return self.surface.move_point(1, p0.x, p1.y)

    def set_two_points_horizontal(self) -> bool:
        """Give the second point the y of the first."""
        self._require_two_points()
        p0, p1 = self.surface.points
        return self.surface.move_point(1, p1.x, p0.y)

    # ------------------------------------------------------------------
    # Derived curves
    # ------------------------------------------------------------------

    def _surfaces(self, cutter: Cutter | None) -> tuple[np.ndarray, np.ndarray]:
        pts = self.surface.sample()
        t = self.thickness
        if self.location.is_inside:
            inside = pts
            outside = sampled.offset_points(pts, t if self.location.is_front else -t)
        else:
            outside = pts
            inside = sampled.offset_points(pts, -t if self.location.is_front else t)
        if cutter is not None and self.location.is_front != cutter.location.is_front:
            inside, outside = sampled.flip_x(inside), sampled.flip_x(outside)
        return (
            sampled.resample_uniform(inside, self.resolution),
            sampled.resample_uniform(outside, self.resolution),
        )

    def inside_curve(self, cutter: Cutter | None = None) -> np.ndarray:
        """Sampled inside surface, on the cutter's side when one is given."""
        return self._surfaces(cutter)[0]

    def outside_curve(self, cutter: Cutter | None = None) -> np.ndarray:
        """Sampled outside surface, on the cutter's side when one is given."""
        return self._surfaces(cutter)[1]

    def cut_curve(self, cutter: Cutter) -> np.ndarray:
        """The surface *cutter* actually works on."""
        inside, outside = self._surfaces(cutter)
        return inside if cutter.location.is_inside else outside

    def cutter_path(self, cutter: Cutter) -> np.ndarray:
        return cutter_path(
            self.surface, cutter, self.location, self.thickness, self.resolution,
        )

    def safe_points(self) -> np.ndarray:
        """Retract points in y order, shape (N, 2)."""
        return self.safe_path.as_array()

    def bounding_box(self, cutter: Cutter | None = None) -> tuple[float, float, float, float]:
        """Box around the surfaces (and cutter path); ``(0, 0, 2, 2)`` when empty."""
        if len(self.surface) == 0:
            return (0.0, 0.0, 2.0, 2.0)
        inside, outside = self._surfaces(cutter)
        parts: list[Sequence] = [self.surface.as_array(), inside, outside]
        if cutter is not None:
            parts.append(self.cutter_path(cutter))
        return polyline_bbox(np.concatenate([p for p in parts if len(p)]))
