"""Quarter sine/cosine segments.

Points are grouped in triples ``(0, 1, 2), (2, 3, 4), ...``.  The middle
point of a triple only chooses the curvature; the arc itself runs from the
first to the third point as one of four quarter waves.  An even number of
points leaves a trailing pair which is joined with a straight line.

All segments are functions of x.  A segment whose ends share an x value
has no quarter wave and is joined with a straight line instead.
"""

from __future__ import annotations

import math
from enum import Enum

import numpy as np

from lathe_control.curves.geometry import segment_points, steps_for

_HALF_PI = 0.5 * math.pi


class TrigStyle(Enum):
    """Shape of one quarter-wave segment."""

    SINE = "sine"
    NSINE = "nsine"
    COS = "cos"
    NCOS = "ncos"
    STRAIGHT = "straight"


def _slope(a: np.ndarray, b: np.ndarray) -> float:
    dx = b[0] - a[0]
    if dx == 0.0:
        return math.copysign(math.inf, b[1] - a[1]) if b[1] != a[1] else 0.0
    return (b[1] - a[1]) / dx


def segment_style(pts: np.ndarray) -> TrigStyle:
    """Pick the quarter wave that bends the way the middle point does."""
    if len(pts) == 2:
        return TrigStyle.STRAIGHT
    s01 = _slope(pts[0], pts[1])
    s12 = _slope(pts[1], pts[2])
    if _slope(pts[0], pts[2]) >= 0.0:
        return TrigStyle.SINE if s01 > s12 else TrigStyle.NCOS
    return TrigStyle.COS if s01 > s12 else TrigStyle.NSINE


def evaluate(style: TrigStyle, p0: np.ndarray, p2: np.ndarray, x) -> np.ndarray:
    """y of the segment from *p0* to *p2* at *x* (scalar or array)."""
    x = np.asarray(x, dtype=np.float64)
    x0, y0 = p0
    x2, y2 = p2
    u = (x - x0) / (x2 - x0)
    if style is TrigStyle.STRAIGHT:
        return y0 + (y2 - y0) * u
    if style is TrigStyle.SINE:
        return y0 + (y2 - y0) * np.sin(_HALF_PI * u)
    if style is TrigStyle.COS:
        return y2 + (y0 - y2) * np.cos(_HALF_PI * u)
    if style is TrigStyle.NSINE:
        return y0 - (y0 - y2) * np.sin(_HALF_PI * u)
    return y2 - (y2 - y0) * np.cos(_HALF_PI * u)


def segments(points: np.ndarray) -> list[np.ndarray]:
    """Split *points* (N >= 2) into triples plus an optional trailing pair."""
    groups = [points[i:i + 3] for i in range(0, len(points) - 2, 2)]
    if len(points) % 2 == 0:
        groups.append(points[-2:])
    return groups


def sample_trig(points: np.ndarray, spacing: float) -> np.ndarray:
    """Sample a quarter-trig curve through *points* (N >= 3) at *spacing*.

    Samples are uniform in x inside each segment; the step count follows
    the straight distance between the segment ends.
    """
    chunks = [points[:1].copy()]
    for seg in segments(points):
        p0, p2 = seg[0], seg[-1]
        if p2[0] == p0[0]:
            chunks.append(segment_points(p0, p2, spacing, include_start=False))
            continue
        n = steps_for(float(np.hypot(*(p2 - p0))), spacing)
        x = p0[0] + (p2[0] - p0[0]) * np.arange(1, n + 1, dtype=np.float64) / n
        y = evaluate(segment_style(seg), p0, p2, x)
        y[-1] = p2[1]
        chunks.append(np.column_stack([x, y]))
    return np.concatenate(chunks)


def trig_y_at(points: np.ndarray, x: float) -> float:
    """Closed-form y for *x*, clamped to the end points outside the range."""
    first, last = points[0], points[-1]
    if (x - first[0]) * (last[0] - first[0]) <= 0.0:
        return float(first[1])
    if (x - last[0]) * (last[0] - first[0]) >= 0.0:
        return float(last[1])
    for seg in segments(points):
        lo, hi = sorted((seg[0][0], seg[-1][0]))
        if lo <= x <= hi and hi > lo:
            return float(evaluate(segment_style(seg), seg[0], seg[-1], x))
    return float(last[1])
