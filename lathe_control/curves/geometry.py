"""Low-level geometry on numpy point arrays.

Provides:
    - Quadratic and cubic Bézier evaluation (Bernstein form)
    - Straight-segment sampling at a requested spacing
    - Polyline operations: length, cumulative length, bbox
    - Uniform arc-length re-sampling
    - Linear lookup of one ordinate from the other along a polyline

Used by:
    - Curve engine: per-style sampling and inverse lookups
    - Sampled-curve helpers: offsetting and re-sampling cutter paths

Every polyline is an ``(N, 2)`` float64 array of ``(x, y)`` rows.  In lathe
space ``y`` is the z axis.  All coordinates in inches.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np


def as_points(points) -> np.ndarray:
    """Return *points* as an ``(N, 2)`` float64 array (copy)."""
    arr = np.array(points, dtype=np.float64)
    if arr.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    return arr.reshape(-1, 2)


def bezier_quad_eval(
    p0: np.ndarray,
    p1: np.ndarray,
    p2: np.ndarray,
    t: np.ndarray,
) -> np.ndarray:
    """Evaluate a quadratic Bézier curve at parameters *t*.

    Parameters
    ----------
    p0, p1, p2 : np.ndarray
        End point, control point, end point, shape (2,).
    t : np.ndarray
        Parameter values in [0, 1], shape (N,).

    Returns
    -------
    np.ndarray
        Points on curve, shape (N, 2).

    Notes
    -----
    B(t) = (1-t)²·p0 + 2(1-t)t·p1 + t²·p2
    """
    t = np.atleast_1d(np.asarray(t, dtype=np.float64))[:, None]
    u = 1.0 - t
    return u * u * p0 + 2.0 * u * t * p1 + t * t * p2


def bezier_cubic_eval(
    p0: np.ndarray,
    p1: np.ndarray,
    p2: np.ndarray,
    p3: np.ndarray,
    t: np.ndarray,
) -> np.ndarray:
    """Evaluate a cubic Bézier curve at parameters *t*.

    Parameters
    ----------
    p0, p1, p2, p3 : np.ndarray
        Control polygon, each shape (2,).
    t : np.ndarray
        Parameter values in [0, 1], shape (N,).

    Returns
    -------
    np.ndarray
        Points on curve, shape (N, 2).

    Notes
    -----
    B(t) = (1-t)³·p0 + 3(1-t)²t·p1 + 3(1-t)t²·p2 + t³·p3
    """
    t = np.atleast_1d(np.asarray(t, dtype=np.float64))[:, None]
    u = 1.0 - t
    return (
        u ** 3 * p0
        + 3.0 * u * u * t * p1
        + 3.0 * u * t * t * p2
        + t ** 3 * p3
    )


def steps_for(length: float, spacing: float) -> int:
    """Number of sub-steps for a chord of *length* at *spacing* (min 1)."""
    if spacing <= 0.0:
        raise ValueError(f"spacing must be > 0, got {spacing}")
    return max(int(length / spacing), 1)


def segment_points(
    p0: np.ndarray,
    p1: np.ndarray,
    spacing: float,
    include_start: bool = True,
) -> np.ndarray:
    """Sample the straight segment p0 -> p1 at roughly *spacing*.

    Parameters
    ----------
    p0, p1 : np.ndarray
        Segment ends, shape (2,).
    spacing : float
        Requested distance between samples.
    include_start : bool
        Include *p0* as the first row.  Disable when chaining segments.

    Returns
    -------
    np.ndarray
        Shape (n + 1, 2) or (n, 2) without the start; both ends are exact.
    """
    p0 = np.asarray(p0, dtype=np.float64)
    p1 = np.asarray(p1, dtype=np.float64)
    n = steps_for(float(np.hypot(*(p1 - p0))), spacing)
    start = 0 if include_start else 1
    t = np.arange(start, n + 1, dtype=np.float64) / n
    return p0 + (p1 - p0) * t[:, None]


def polyline_length(points: np.ndarray) -> float:
    """Total length of a polyline (0.0 for fewer than 2 points)."""
    if len(points) < 2:
        return 0.0
    return float(np.hypot(*np.diff(points, axis=0).T).sum())


def cumulative_lengths(points: np.ndarray) -> np.ndarray:
    """Distance from the first vertex to every vertex, shape (N,)."""
    if len(points) == 0:
        return np.zeros(0, dtype=np.float64)
    seg = np.hypot(*np.diff(points, axis=0).T) if len(points) > 1 else np.zeros(0)
    return np.concatenate([[0.0], np.cumsum(seg)])


def polyline_bbox(points: np.ndarray) -> Tuple[float, float, float, float]:
    """Axis-aligned bounding box ``(xmin, ymin, xmax, ymax)``.

    Returns ``(0, 0, 0, 0)`` when there are no points.
    """
    if len(points) == 0:
        return (0.0, 0.0, 0.0, 0.0)
    xmin, ymin = points.min(axis=0)
    xmax, ymax = points.max(axis=0)
    return (float(xmin), float(ymin), float(xmax), float(ymax))


def resample_uniform(points: np.ndarray, spacing: float) -> np.ndarray:
    """Re-sample a polyline to equal arc-length spacing.

    Parameters
    ----------
    points : np.ndarray
        Polyline vertices, shape (N, 2).
    spacing : float
        Target distance between consecutive output points.

    Returns
    -------
    np.ndarray
        ``round(L / spacing) + 1`` points; the first and last input points
        are kept exactly.  Inputs with fewer than 2 points, or zero total
        length, are returned unchanged (as a copy).
    """
    if spacing <= 0.0:
        raise ValueError(f"spacing must be > 0, got {spacing}")
    points = as_points(points)
    if len(points) < 2:
        return points
    dist = cumulative_lengths(points)
    total = dist[-1]
    if total == 0.0:
        return points
    n = max(int(np.floor(total / spacing + 0.5)) + 1, 2)
    targets = total * np.arange(n, dtype=np.float64) / (n - 1)
    out = np.column_stack([
        np.interp(targets, dist, points[:, 0]),
        np.interp(targets, dist, points[:, 1]),
    ])
    out[0] = points[0]
    out[-1] = points[-1]
    return out


def lookup(points: np.ndarray, value: float, axis: int) -> float:
    """Linear lookup of the other ordinate where ``points[:, axis] == value``.

    Parameters
    ----------
    points : np.ndarray
        Polyline vertices, shape (N, 2), N >= 1.
    value : float
        Known ordinate.
    axis : int
        0 to look up y for a given x, 1 to look up x for a given y.

    Returns
    -------
    float
        Interpolated value from the first segment that brackets *value*.
        When no segment brackets it the end point whose ordinate is nearer
        is used (clamping outside the point range).
    """
    if len(points) == 0:
        return 0.0
    other = 1 - axis
    known = points[:, axis]
    if len(points) == 1:
        return float(points[0, other])

    lo = np.minimum(known[:-1], known[1:])
    hi = np.maximum(known[:-1], known[1:])
    hits = np.nonzero((value >= lo) & (value <= hi))[0]
    if len(hits) == 0:
        if abs(value - known[0]) <= abs(value - known[-1]):
            return float(points[0, other])
        return float(points[-1, other])

    i = int(hits[0])
    k0, k1 = known[i], known[i + 1]
    o0, o1 = points[i, other], points[i + 1, other]
    if k1 == k0:
        return float(o0)
    return float(o0 + (value - k0) / (k1 - k0) * (o1 - o0))
