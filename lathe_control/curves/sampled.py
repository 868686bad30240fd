"""Operations on already-sampled curves (``(N, 2)`` arrays).

These work on the output of :meth:`Curve.sample` and on cutter paths built
from it.  None of them modify their input; each returns a new array (or a
scalar / vector).

The perpendicular offset uses the chord between each sample's neighbours:
for chord angle θ the point moves by ``(d·sin θ, -d·cos θ)``, which is the
right-hand normal when walking from the first sample to the last.  Where
the neighbours share an x value the chord is vertical and the point moves
along x only.
"""

from __future__ import annotations

import math

import numpy as np

from lathe_control.curves.geometry import (
    as_points,
    polyline_bbox,
    polyline_length,
    resample_uniform,
)

FILTER_ANGLE = 1.01 * (math.pi / 2.0)
"""Largest turn between consecutive offset segments that is kept."""

__all__ = [
    "FILTER_ANGLE",
    "filter_folds",
    "flip_x",
    "index_of_nearest",
    "interpolate_along",
    "length",
    "nearest_point",
    "offset_points",
    "perpendicular",
    "polyline_bbox",
    "resample_uniform",
    "subset",
]


def length(points: np.ndarray) -> float:
    return polyline_length(points)


def offset_points(points: np.ndarray, d: float) -> np.ndarray:
    """Displace every sample by *d* along its local normal, then filter.

    Fewer than 2 points, or ``d == 0``, come back unchanged (as a copy).
    """
    pts = as_points(points)
    n = len(pts)
    if n <= 1 or d == 0.0:
        return pts

    prev = pts[np.maximum(np.arange(n) - 1, 0)]
    nxt = pts[np.minimum(np.arange(n) + 1, n - 1)]
    dx = nxt[:, 0] - prev[:, 0]
    dy = nxt[:, 1] - prev[:, 1]
    theta = np.arctan2(dy, dx)

    out = np.empty_like(pts)
    vertical = dx == 0.0
    out[:, 0] = np.where(vertical, pts[:, 0] + d, pts[:, 0] + d * np.sin(theta))
    out[:, 1] = np.where(vertical, pts[:, 1], pts[:, 1] - d * np.cos(theta))
    return filter_folds(out)


def _angle(p1: np.ndarray, p2: np.ndarray) -> float:
    return math.atan2(p2[1] - p1[1], p2[0] - p1[0])


def _angle_near(p1: np.ndarray, p2: np.ndarray, ref: float) -> float:
    """Angle p1 -> p2 shifted by 2π so it is within π of *ref*."""
    ang = _angle(p1, p2)
    if abs(ang - ref) > math.pi:
        ang += 2.0 * math.pi if ref > 0.0 else -2.0 * math.pi
    return ang


def filter_folds(points: np.ndarray) -> np.ndarray:
    """Drop points where an offset curve folds back on itself.

    An offset of a concave region larger than its radius of curvature makes
    a small loop.  Walking the points, any turn sharper than
    :data:`FILTER_ANGLE` removes the last kept point and skips the next
    input point.  Three or fewer points are returned as is; if the walk
    deletes down to fewer than two kept points the unfiltered input is
    returned.
    """
    pts = as_points(points)
    if len(pts) <= 3:
        return pts

    kept = [pts[0], pts[1]]
    i = 2
    while i < len(pts):
        last = _angle(kept[-2], kept[-1])
        nxt = _angle_near(kept[-1], pts[i], last)
        if abs(last - nxt) <= FILTER_ANGLE:
            kept.append(pts[i])
        else:
            kept.pop()
            if len(kept) < 2:
                return pts
        i += 1
    return np.array(kept)


def flip_x(points: np.ndarray) -> np.ndarray:
    """Mirror about x = 0 (front <-> back of the workpiece)."""
    out = as_points(points)
    out[:, 0] = -out[:, 0]
    return out


def index_of_nearest(points: np.ndarray, p) -> int:
    """Index of the sample closest to *p*, or -1 when there are none."""
    if len(points) == 0:
        return -1
    d = np.hypot(points[:, 0] - p[0], points[:, 1] - p[1])
    return int(np.argmin(d))


def nearest_point(points: np.ndarray, p) -> np.ndarray | None:
    """Copy of the sample closest to *p*, or ``None`` when there are none."""
    i = index_of_nearest(points, p)
    if i < 0:
        return None
    return np.array(points[i], dtype=np.float64)


def perpendicular(points: np.ndarray, p, direction: bool) -> np.ndarray | None:
    """Unit normal to the curve at the sample nearest *p*.

    ``(dy, -dx)`` of the neighbouring chord when *direction* is True,
    ``(-dy, dx)`` otherwise.  Tiny components are snapped to exactly 0.0
    so callers can test for pure horizontal/vertical normals.  ``None``
    for fewer than 2 samples or a zero-length chord.
    """
    n = len(points)
    if n < 2:
        return None
    i = index_of_nearest(points, p)
    a = points[max(i - 1, 0)]
    b = points[min(i + 1, n - 1)]
    dx, dy = b[0] - a[0], b[1] - a[1]
    v = np.array([dy, -dx]) if direction else np.array([-dy, dx])
    norm = math.hypot(v[0], v[1])
    if norm == 0.0:
        return None
    v = v / norm
    v[np.abs(v) < 1e-12] = 0.0
    return v


def interpolate_along(points: np.ndarray, p, d: float) -> np.ndarray | None:
    """Point at arc distance *d* from the sample nearest *p*.

    Positive *d* walks toward the last sample, negative toward the first.
    ``None`` when the walk falls off either end or there are fewer than 2
    samples.  ``d == 0`` returns *p* itself.
    """
    if d == 0.0:
        return np.array(p, dtype=np.float64)
    n = len(points)
    if n < 2:
        return None
    start = index_of_nearest(points, p)
    step = 1 if d > 0.0 else -1
    target = abs(d)
    walked = 0.0
    i = start
    while 0 <= i + step < n:
        a, b = points[i], points[i + step]
        seg = math.hypot(b[0] - a[0], b[1] - a[1])
        if walked + seg >= target and seg > 0.0:
            f = (target - walked) / seg
            return a + (b - a) * f
        walked += seg
        i += step
    return None


def subset(points: np.ndarray, p0, p1) -> np.ndarray | None:
    """Samples between the ones nearest *p0* and *p1*, in p0 -> p1 order."""
    if len(points) == 0:
        return None
    i0 = index_of_nearest(points, p0)
    i1 = index_of_nearest(points, p1)
    if i0 <= i1:
        return np.array(points[i0:i1 + 1])
    return np.array(points[i1:i0 + 1][::-1])
