"""
Curve engine.

Turns ordered control points into sampled curves (straight, Bézier,
quarter-trig or raw), with inverse lookups, whole-curve transforms and
helpers for offsetting and re-sampling the results.
"""

from lathe_control.curves.curve import ControlPoint, Curve, FitStyle
from lathe_control.curves import sampled

__all__ = [
    "ControlPoint",
    "Curve",
    "FitStyle",
    "sampled",
]
