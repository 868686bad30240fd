"""Point-defined curves with a single cached sample.

A :class:`Curve` owns its :class:`ControlPoint` list outright.  Every edit
goes through a method on the curve, which drops the cached samples via
:meth:`Curve.touch` and returns ``True`` when anything actually changed, so
the caller decides what to recompute.  Nothing observes the points.

Fit styles
----------
``STRAIGHT``  join the dots with straight segments
``BEZIER``    tangent-continuous quadratic/cubic Bézier segments
``TRIG``      quarter sine/cosine arcs, odd points set the curvature
``RAW``       the control points themselves, unmodified

Whatever the style, 0 points sample to nothing, 1 point to itself, and 2
points to a straight segment.

Usage::

    curve = Curve(style=FitStyle.BEZIER, spacing=0.01)
    curve.insert_sorted(0.0, 0.0)
    curve.insert_sorted(0.5, 0.3)
    pts = curve.sample()             # (N, 2) array, cached
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Literal, Sequence, Union

import numpy as np

from lathe_control.curves import fitting, geometry, trig

logger = logging.getLogger(__name__)

DEFAULT_SPACING = 0.01


class FitStyle(str, Enum):
    """How a curve passes through its control points."""

    STRAIGHT = "straight"
    BEZIER = "bezier"
    TRIG = "trig"
    RAW = "raw"


@dataclass(slots=True)
class ControlPoint:
    """Digitized point.

    Parameters
    ----------
    x, y : float
        Position in inches (``y`` is the lathe z axis).
    y2 : float | None
        Optional second ordinate for curves that carry two values per x.
    """

    x: float
    y: float
    y2: float | None = None

    def as_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


PointLike = Union[ControlPoint, Sequence[float]]


def _to_point(p: PointLike) -> ControlPoint:
    if isinstance(p, ControlPoint):
        return ControlPoint(p.x, p.y, p.y2)
    if len(p) == 3:
        return ControlPoint(float(p[0]), float(p[1]), float(p[2]))
    return ControlPoint(float(p[0]), float(p[1]))


class Curve:
    """Ordered control points, a fit style, and one cached sample array.

    Parameters
    ----------
    points : Iterable[PointLike]
        Initial points, kept in the given order.
    style : FitStyle
        Fit style; see module docstring.
    spacing : float
        Default sample spacing (inches), > 0.
    """

    def __init__(
        self,
        points: Iterable[PointLike] = (),
        style: FitStyle = FitStyle.BEZIER,
        spacing: float = DEFAULT_SPACING,
    ) -> None:
        if spacing <= 0.0:
            raise ValueError(f"spacing must be > 0, got {spacing}")
        self._points: list[ControlPoint] = [_to_point(p) for p in points]
        self._style = FitStyle(style)
        self._spacing = float(spacing)
        self._samples: np.ndarray | None = None
        self._sampled_at: float | None = None

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"Curve({self._style.value}, {len(self._points)} pts)"

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def points(self) -> tuple[ControlPoint, ...]:
        """Read-only view; edit through the curve's methods."""
        return tuple(self._points)

    @property
    def style(self) -> FitStyle:
        return self._style

    @style.setter
    def style(self, value: FitStyle) -> None:
        value = FitStyle(value)
        if value is not self._style:
            self._style = value
            self.touch()

    @property
    def spacing(self) -> float:
        return self._spacing

    @spacing.setter
    def spacing(self, value: float) -> None:
        if value <= 0.0:
            raise ValueError(f"spacing must be > 0, got {value}")
        if value != self._spacing:
            self._spacing = float(value)
            self.touch()

    @property
    def is_cached(self) -> bool:
        return self._samples is not None

    def as_array(self) -> np.ndarray:
        """Control points as an ``(N, 2)`` array."""
        return geometry.as_points([p.as_tuple() for p in self._points])

    # ------------------------------------------------------------------
    # Point list edits (each returns a changed flag)
    # ------------------------------------------------------------------

    def touch(self) -> None:
        """Drop the cached samples; the next read rebuilds them."""
        self._samples = None
        self._sampled_at = None

    def add_point(self, x: float, y: float, y2: float | None = None) -> bool:
        self._points.append(ControlPoint(float(x), float(y), y2))
        self.touch()
        return True

    def insert_sorted(
        self,
        x: float,
        y: float,
        y2: float | None = None,
        axis: Literal["x", "y"] = "y",
    ) -> int:
        """Insert keeping the list sorted along *axis*; return the new index.

        A point below the first goes in front, a point at or beyond the last
        is appended, anything else lands after the last point not above it.
        """
        if axis not in ("x", "y"):
            raise ValueError(f"axis must be 'x' or 'y', got {axis!r}")
        pt = ControlPoint(float(x), float(y), y2)
        key = pt.x if axis == "x" else pt.y
        coord = [p.x if axis == "x" else p.y for p in self._points]

        if not coord or key >= coord[-1]:
            index = len(self._points)
        elif key < coord[0]:
            index = 0
        else:
            index = next(
                i for i in range(1, len(coord)) if coord[i - 1] <= key < coord[i]
            )
        self._points.insert(index, pt)
        self.touch()
        return index

    def delete_point(self, index: int) -> bool:
        del self._points[index]
        self.touch()
        return True

    def move_point(
        self, index: int, x: float, y: float, y2: float | None = None,
    ) -> bool:
        """Drag a point.  Returns ``False`` when it is already there."""
        p = self._points[index]
        new_y2 = p.y2 if y2 is None else y2
        if (p.x, p.y, p.y2) == (x, y, new_y2):
            return False
        p.x, p.y, p.y2 = float(x), float(y), new_y2
        self.touch()
        return True

    def set_all_points(self, points: Iterable[PointLike]) -> bool:
        new = [_to_point(p) for p in points]
        if new == self._points:
            return False
        self._points = new
        self.touch()
        return True

    def clear(self) -> bool:
        if not self._points:
            return False
        self._points.clear()
        self.touch()
        return True

    # ------------------------------------------------------------------
    # Whole-curve transforms
    # ------------------------------------------------------------------

    def invert(self) -> bool:
        """Mirror about y = 0 and reverse the order (keeps y ascending)."""
        if not self._points:
            return False
        for p in self._points:
            p.y = -p.y
            if p.y2 is not None:
                p.y2 = -p.y2
        self._points.reverse()
        self.touch()
        return True

    def scale(self, sx: float, sy: float) -> bool:
        if not self._points or (sx == 1.0 and sy == 1.0):
            return False
        for p in self._points:
            p.x *= sx
            p.y *= sy
            if p.y2 is not None:
                p.y2 *= sy
        self.touch()
        return True

    def translate(self, dx: float, dy: float) -> bool:
        if not self._points or (dx == 0.0 and dy == 0.0):
            return False
        for p in self._points:
            p.x += dx
            p.y += dy
            if p.y2 is not None:
                p.y2 += dy
        self.touch()
        return True

    def offset_normal(self, d: float, direction: bool) -> bool:
        """Move every point by *d* along its tangent normal.

        The normal is ``(sin a, -cos a)`` for tangent angle ``a`` when
        *direction* is True, the opposite vector otherwise.
        """
        if not self._points or d == 0.0:
            return False
        ang = fitting.tangent_angles(self.as_array())
        sign = 1.0 if direction else -1.0
        for p, a in zip(self._points, ang):
            p.x += sign * d * math.sin(a)
            p.y -= sign * d * math.cos(a)
        self.touch()
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def sample(self, spacing: float | None = None) -> np.ndarray:
        """Sampled curve at roughly *spacing* (default: the curve's).

        The result is cached until the next edit or a different spacing.
        The returned array is read-only; copy it before modifying.
        """
        spacing = self._spacing if spacing is None else float(spacing)
        if spacing <= 0.0:
            raise ValueError(f"spacing must be > 0, got {spacing}")
        if self._samples is None or self._sampled_at != spacing:
            self._samples = self._build(spacing)
            self._samples.setflags(write=False)
            self._sampled_at = spacing
            logger.debug("%r sampled to %d points", self, len(self._samples))
        return self._samples

    def _build(self, spacing: float) -> np.ndarray:
        pts = self.as_array()
        if len(pts) <= 1:
            return pts
        if len(pts) == 2:
            return geometry.segment_points(pts[0], pts[1], spacing)

        if self._style is FitStyle.BEZIER:
            return fitting.sample_bezier(pts, spacing)
        if self._style is FitStyle.TRIG:
            return trig.sample_trig(pts, spacing)
        if self._style is FitStyle.STRAIGHT:
            chunks = [pts[:1]]
            for a, b in zip(pts[:-1], pts[1:]):
                chunks.append(geometry.segment_points(a, b, spacing, include_start=False))
            return np.concatenate(chunks)
        return pts

    def _lookup_points(self) -> np.ndarray:
        if len(self._points) <= 2 or self._style in (FitStyle.STRAIGHT, FitStyle.RAW):
            return self.as_array()
        # Always the curve's own spacing; a cache at another spacing is left alone
        if self._samples is not None and self._sampled_at != self._spacing:
            return self._build(self._spacing)
        return self.sample()

    def y_at(self, x: float) -> float:
        """y on the curve at *x*; clamped to the end points outside them.

        Assumes the points are sorted along x.  Returns 0.0 for an empty
        curve.
        """
        if not self._points:
            return 0.0
        if self._style is FitStyle.TRIG and len(self._points) >= 3:
            return trig.trig_y_at(self.as_array(), x)
        return geometry.lookup(self._lookup_points(), x, axis=0)

    def x_at(self, y: float) -> float:
        """x on the curve at *y*; the inverse of :meth:`y_at`."""
        if not self._points:
            return 0.0
        return geometry.lookup(self._lookup_points(), y, axis=1)

    def bounding_box(self) -> tuple[float, float, float, float]:
        """``(xmin, ymin, xmax, ymax)`` of the control points."""
        return geometry.polyline_bbox(self.as_array())

    def closest_point(self, x: float, y: float, max_dist: float) -> int | None:
        """Index of the nearest control point closer than *max_dist*."""
        best, best_d = None, max_dist
        for i, p in enumerate(self._points):
            d = math.hypot(p.x - x, p.y - y)
            if d < best_d:
                best, best_d = i, d
        return best
