"""Cutter tip profiles for pointed (drill / eccentric) frames.

A profile describes the cross-section of a rod cutter's tip and answers two
questions: how far the tip surface sits back from its lowest point at a
given distance from the rod centre (:meth:`Profile.profile_at`) and how wide
the cut is at a given depth (:meth:`Profile.width_at_depth`).

Built-in profiles
-----------------
``IDEAL``     infinitely sharp, width is always 0
``POINT160``  160° included-angle point
``ROUND``     hemispherical end, radius = rod radius

Custom profiles are drawn as a curve in normalized units:
``x ∈ [-1, 1]`` across the rod diameter and ``y ∈ [0, 1]`` up from the tip.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from enum import Enum

from lathe_control.curves.curve import Curve, FitStyle

logger = logging.getLogger(__name__)

_TAN80 = math.tan(math.radians(80.0))
_NORMALIZE_TOL = 0.0002

# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


class Profile(ABC):
    """Base class for cutter tip profiles."""

    name: str = ""

    @abstractmethod
    def profile_at(self, d: float, rod_radius: float) -> float:
        """Height of the tip surface at distance *d* from the rod centre.

        Returns -1.0 when ``|d|`` is beyond the rod radius.
        """

    @abstractmethod
    def width_at_depth(self, depth: float, rod_diameter: float) -> float:
        """Width of the cut when the tip is *depth* into the surface."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


# ---------------------------------------------------------------------------
# Built-ins
# ---------------------------------------------------------------------------


class IdealProfile(Profile):
    name = "IDEAL"

    def profile_at(self, d: float, rod_radius: float) -> float:
        if abs(d) > rod_radius:
            return -1.0
        return 0.0

    def width_at_depth(self, depth: float, rod_diameter: float) -> float:
        return 0.0


class Point160Profile(Profile):
    name = "POINT160"

    def profile_at(self, d: float, rod_radius: float) -> float:
        if abs(d) > rod_radius:
            return -1.0
        return abs(d) / _TAN80

    def width_at_depth(self, depth: float, rod_diameter: float) -> float:
        if depth <= 0.0:
            return 0.0
        return min(rod_diameter, 2.0 * depth * _TAN80)


class RoundProfile(Profile):
    name = "ROUND"

    def profile_at(self, d: float, rod_radius: float) -> float:
        if abs(d) > rod_radius:
            return -1.0
        u = d / rod_radius
        return rod_radius * (1.0 - math.sqrt(1.0 - u * u))

    def width_at_depth(self, depth: float, rod_diameter: float) -> float:
        if depth <= 0.0:
            return 0.0
        r = rod_diameter / 2.0
        if depth >= r:
            return rod_diameter
        return 2.0 * math.sqrt(r * r - (r - depth) * (r - depth))


IDEAL = IdealProfile()
POINT160 = Point160Profile()
ROUND = RoundProfile()

BUILTIN_PROFILES: dict[str, Profile] = {p.name: p for p in (IDEAL, POINT160, ROUND)}


# ---------------------------------------------------------------------------
# Custom profiles
# ---------------------------------------------------------------------------


class CustomStyle(str, Enum):
    """How a custom profile joins its points."""

    STRAIGHT = "straight"
    CURVE = "curve"


class CustomProfile(Profile):
    """User-drawn profile, kept sorted by x in normalized units.

    Parameters
    ----------
    name : str
        Display name.
    style : CustomStyle
        ``STRAIGHT`` joins the points with lines, ``CURVE`` fits a Bézier.
    points : iterable of (x, y)
        Initial points; each is clamped into the normalized box.
    """

    def __init__(
        self,
        name: str,
        style: CustomStyle = CustomStyle.STRAIGHT,
        points=(),
    ) -> None:
        self.name = name
        self.style = CustomStyle(style)
        fit = FitStyle.STRAIGHT if self.style is CustomStyle.STRAIGHT else FitStyle.BEZIER
        self.curve = Curve(style=fit)
        for x, y in points:
            self.add_point(x, y)

    def add_point(self, x: float, y: float) -> int:
        """Clamp into ``[-1, 1] × [0, 1]`` and insert sorted by x."""
        x = max(-1.0, min(1.0, float(x)))
        y = max(0.0, min(1.0, float(y)))
        return self.curve.insert_sorted(x, y, axis="x")

    def delete_point(self, index: int) -> bool:
        return self.curve.delete_point(index)

    def clear(self) -> bool:
        return self.curve.clear()

    def needs_normalize(self) -> bool:
        """True when the points do not span exactly x ∈ [-1, 1] from y = 0."""
        if len(self.curve) < 2:
            return False
        xmin, ymin, xmax, _ = self.curve.bounding_box()
        return (
            abs(xmin + 1.0) > _NORMALIZE_TOL
            or abs(xmax - 1.0) > _NORMALIZE_TOL
            or abs(ymin) > _NORMALIZE_TOL
        )

    def normalize(self) -> bool:
        """Shift and stretch the points to fill the normalized box."""
        if not self.needs_normalize():
            return False
        xmin, ymin, xmax, ymax = self.curve.bounding_box()
        width, height = xmax - xmin, ymax - ymin
        self.curve.translate(-(xmax + xmin) / 2.0, -ymin)
        self.curve.scale(
            2.0 / width if width > 0.0 else 1.0,
            1.0 / height if height > 0.0 else 1.0,
        )
        return True

    def mirror(self) -> bool:
        """Replace the negative half with a mirror image of the positive half."""
        if len(self.curve) < 2:
            return False
        positive = [(p.x, p.y) for p in self.curve.points if p.x >= 0.0]
        mirrored = [(-x, y) for x, y in reversed(positive) if x > 0.0]
        self.curve.set_all_points(mirrored + positive)
        return True

    def profile_at(self, d: float, rod_radius: float) -> float:
        if abs(d) > rod_radius:
            return -1.0
        return rod_radius * self.curve.y_at(d / rod_radius)

    def width_at_depth(self, depth: float, rod_diameter: float) -> float:
        return min(rod_diameter, rod_diameter * abs(self.curve.x_at(depth)))


def get_profile(name: str) -> Profile:
    """Look up a built-in profile by name (case-insensitive)."""
    try:
        return BUILTIN_PROFILES[name.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown profile {name!r}; expected one of {sorted(BUILTIN_PROFILES)}"
        ) from None
