"""Tangent-continuous piecewise Bézier fitting through control points.

For N >= 3 points every interior point gets a tangent angle interpolated
between its two neighbouring chord angles, weighted by chord length.  The
end points reflect the neighbouring tangent about the end chord.  Each
consecutive pair of points is then joined by:

* a **quadratic** segment whose control point is the intersection of the
  two tangent lines (the chord midpoint when the tangents are parallel), or
* a **cubic** segment when the pair is a point of inflection (the tangents
  fall on opposite sides of the chord).  Its two control points sit on the
  tangent lines at 25 % and 75 % of the chord, measured along whichever
  axis the chord is less steep against.

Angles are radians.  Chord angles are unwrapped so that consecutive chords
never jump by 2π across the ±π boundary.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from lathe_control.curves.geometry import (
    bezier_cubic_eval,
    bezier_quad_eval,
    steps_for,
)

_TWO_PI = 2.0 * math.pi
_HALF_PI = 0.5 * math.pi


# ---------------------------------------------------------------------------
# Tangent lines
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TangentLine:
    """Infinite straight line through ``(x0, y0)`` at ``angle`` radians.

    ``slope`` and ``intercept`` are meaningless for vertical lines; callers
    check ``vertical`` first.
    """

    x0: float
    y0: float
    angle: float
    vertical: bool
    slope: float
    intercept: float

    @classmethod
    def through(cls, x: float, y: float, angle: float) -> TangentLine:
        a = angle % _TWO_PI
        vertical = math.isclose(a, _HALF_PI, abs_tol=1e-12) or math.isclose(
            a, 3.0 * _HALF_PI, abs_tol=1e-12
        )
        slope = 0.0 if vertical else math.tan(a)
        return cls(x, y, a, vertical, slope, y - slope * x)

    @classmethod
    def between(cls, x0: float, y0: float, x1: float, y1: float) -> TangentLine:
        return cls.through(x0, y0, math.atan2(y1 - y0, x1 - x0))

    def y_at(self, x: float) -> float:
        """y on the line at *x*; a vertical line answers with its anchor y."""
        if self.vertical:
            return self.y0
        return self.slope * x + self.intercept

    def x_at(self, y: float) -> float:
        """x on the line at *y*; a horizontal line answers with its anchor x."""
        if self.vertical:
            return self.x0
        if self.slope == 0.0:
            return self.x0
        return (y - self.intercept) / self.slope

    def intersection(self, other: TangentLine) -> tuple[float, float] | None:
        """Crossing point, or ``None`` for parallel lines."""
        if self.vertical and other.vertical:
            return None
        if self.vertical:
            return (self.x0, other.y_at(self.x0))
        if other.vertical:
            return (other.x0, self.y_at(other.x0))
        if math.isclose(self.slope, other.slope, rel_tol=1e-12, abs_tol=1e-12):
            return None
        x = (other.intercept - self.intercept) / (self.slope - other.slope)
        return (x, self.slope * x + self.intercept)


# ---------------------------------------------------------------------------
# Angles
# ---------------------------------------------------------------------------


def chord_angles(points: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Angle and length of every chord, angles unwrapped across ±π.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        ``(angles, lengths)``, each shape (N-1,).
    """
    d = np.diff(points, axis=0)
    angles = np.arctan2(d[:, 1], d[:, 0])
    for i in range(1, len(angles)):
        if angles[i - 1] > _HALF_PI and angles[i] < 0.0:
            angles[i] += _TWO_PI
        elif angles[i - 1] < -_HALF_PI and angles[i] > 0.0:
            angles[i] -= _TWO_PI
    return angles, np.hypot(d[:, 0], d[:, 1])


def tangent_angles(points: np.ndarray) -> np.ndarray:
    """Tangent angle at every control point, shape (N,).

    Two points share the chord angle.  Fewer than two points have no
    tangent and yield zeros.
    """
    n = len(points)
    if n < 2:
        return np.zeros(n)
    seg, length = chord_angles(points)
    if n == 2:
        return np.array([seg[0], seg[0]])

    ang = np.empty(n)
    total = length[:-1] + length[1:]
    # Coincident neighbours have no length to weight by
    weight = np.divide(length[:-1], total, out=np.full_like(total, 0.5), where=total > 0.0)
    ang[1:-1] = seg[:-1] + (seg[1:] - seg[:-1]) * weight
    ang[0] = 2.0 * seg[0] - ang[1]
    ang[-1] = 2.0 * seg[-1] - ang[-2]
    return ang


def is_inflection(chord: float, start: float, end: float) -> bool:
    """True when the tangent angles straddle the chord in reversed order."""
    return (chord > start and end < chord) or (chord < start and end > chord)


# ---------------------------------------------------------------------------
# Fitting and sampling
# ---------------------------------------------------------------------------


def fit_segments(points: np.ndarray) -> list[np.ndarray]:
    """Control polygons for every consecutive pair of *points*.

    Parameters
    ----------
    points : np.ndarray
        Control points, shape (N, 2), N >= 3.

    Returns
    -------
    list[np.ndarray]
        N-1 polygons, each shape (3, 2) for a quadratic segment or (4, 2)
        for a cubic (inflection) segment.
    """
    seg, _ = chord_angles(points)
    ang = tangent_angles(points)
    polygons: list[np.ndarray] = []
    for i in range(len(points) - 1):
        p0, p1 = points[i], points[i + 1]
        line0 = TangentLine.through(p0[0], p0[1], ang[i])
        line1 = TangentLine.through(p1[0], p1[1], ang[i + 1])

        if is_inflection(seg[i], ang[i], ang[i + 1]):
            chord = TangentLine.between(p0[0], p0[1], p1[0], p1[1])
            if chord.vertical or abs(chord.slope) > 1.0:
                y1 = p0[1] + 0.25 * (p1[1] - p0[1])
                y2 = p0[1] + 0.75 * (p1[1] - p0[1])
                c1 = (line0.x_at(y1), y1)
                c2 = (line1.x_at(y2), y2)
            else:
                x1 = p0[0] + 0.25 * (p1[0] - p0[0])
                x2 = p0[0] + 0.75 * (p1[0] - p0[0])
                c1 = (x1, line0.y_at(x1))
                c2 = (x2, line1.y_at(x2))
            polygons.append(np.array([p0, c1, c2, p1], dtype=np.float64))
            continue

        cross = line0.intersection(line1)
        if cross is None:
            cross = ((p0[0] + p1[0]) / 2.0, (p0[1] + p1[1]) / 2.0)
        polygons.append(np.array([p0, cross, p1], dtype=np.float64))
    return polygons


def sample_bezier(points: np.ndarray, spacing: float) -> np.ndarray:
    """Sample the fitted curve through *points* (N >= 3) at *spacing*.

    Each segment is stepped ``max(int(chord / spacing), 1)`` times; the
    first control point starts the output and every segment ends exactly on
    its far control point.
    """
    chunks = [points[:1].copy()]
    for poly in fit_segments(points):
        n = steps_for(float(np.hypot(*(poly[-1] - poly[0]))), spacing)
        t = np.arange(1, n + 1, dtype=np.float64) / n
        if len(poly) == 3:
            chunks.append(bezier_quad_eval(poly[0], poly[1], poly[2], t))
        else:
            chunks.append(bezier_cubic_eval(poly[0], poly[1], poly[2], poly[3], t))
    return np.concatenate(chunks)
