"""Rosette patterns.

A pattern is one repeat of a rosette's shape: a function from the fraction
``n`` of the way through a repeat (0 to 1) to a deflection between 0 and 1.
A :class:`Rosette` repeats a pattern around the spindle and scales it to a
peak-to-peak amplitude in inches.

Besides the built-in :class:`Pattern` shapes, a :class:`CustomPattern` is
drawn as points with x the fraction of a repeat and y the deflection.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Union

from lathe_control.curves.curve import Curve, FitStyle
from lathe_control.cutters.profiles import CustomStyle

COMPARE_ERROR = 1e-6
"""Angles and amplitudes closer than this are treated as equal."""


def _frac(n: float) -> float:
    if n > 1.0 or n < 0.0:
        return n - math.floor(n)
    return n


def _none(n: float) -> float:
    return 0.0


def _halfsine(n: float) -> float:
    return math.sin(n * math.pi)


def _triangle(n: float) -> float:
    return 1.0 - abs(2.0 * _frac(n) - 1.0)


def _heart(n: float) -> float:
    # Only half is defined; the other half is its mirror image
    nn = 2.0 * _frac(n)
    if nn > 1.0:
        nn = 2.0 - nn
    z = math.sin(nn * 2.0 * math.pi)
    if nn >= 0.75:
        z += 1.0
    elif nn > 0.25:
        z += (1.0 - math.sin(nn * 2.0 * math.pi)) / 2.0
    return z


def _tudor(n: float) -> float:
    nn = _frac(n)
    return min(0.5 + 0.5 * math.cos(4.0 * math.pi * nn), 5.0 * _triangle(nn))


class Pattern(str, Enum):
    """Built-in rosette patterns."""

    NONE = "none"
    HALFSINE = "halfsine"
    TRIANGLE = "triangle"
    HEART = "heart"
    TUDOR = "tudor"

    def at(self, n: float) -> float:
        """Deflection (0 to 1) at fraction *n* of one repeat."""
        return _FUNCS[self](n)


_FUNCS = {
    Pattern.NONE: _none,
    Pattern.HALFSINE: _halfsine,
    Pattern.TRIANGLE: _triangle,
    Pattern.HEART: _heart,
    Pattern.TUDOR: _tudor,
}


class CustomPattern:
    """User-drawn pattern, kept sorted by x in normalized units.

    Parameters
    ----------
    name : str
        Display name.
    style : CustomStyle
        ``STRAIGHT`` joins the points with lines, ``CURVE`` fits a Bézier.
    points : iterable of (x, y)
        x is the fraction of one repeat and y the deflection; both are
        clamped into [0, 1].
    """

    def __init__(self, name: str, style: CustomStyle = CustomStyle.STRAIGHT, points=()) -> None:
        self.name = name
        self.style = CustomStyle(style)
        fit = FitStyle.STRAIGHT if self.style is CustomStyle.STRAIGHT else FitStyle.BEZIER
        self.curve = Curve(style=fit)
        for x, y in points:
            self.add_point(x, y)

    def __repr__(self) -> str:
        return f"CustomPattern({self.name!r}, {self.style.value}, {len(self.curve)} pts)"

    def add_point(self, x: float, y: float) -> int:
        x = max(0.0, min(1.0, float(x)))
        y = max(0.0, min(1.0, float(y)))
        return self.curve.insert_sorted(x, y, axis="x")

    def at(self, n: float) -> float:
        """Deflection (0 to 1) at fraction *n* of one repeat."""
        return self.curve.y_at(_frac(n))

    def breakpoints(self) -> list[float]:
        """x of every point, as fractions of one repeat."""
        return [p.x for p in self.curve.points]


AnyPattern = Union[Pattern, CustomPattern]


def angle_check(a: float) -> float:
    """*a* degrees folded into [0, 360)."""
    a = math.fmod(a, 360.0)
    if a < 0.0:
        a += 360.0
    if a >= 360.0:
        a -= 360.0
    return a


@dataclass(frozen=True, slots=True)
class Rosette:
    """A pattern repeated around the spindle.

    Parameters
    ----------
    pattern : Pattern or CustomPattern
        Shape of one repeat.
    repeat : int
        Number of repeats per revolution (>= 1).
    p_to_p : float
        Peak-to-peak amplitude in inches (>= 0).
    phase : float
        Phase in degrees of one repeat: 180 shifts by half a repeat.
    invert : bool
        Swap high and low points.
    """

    pattern: AnyPattern = Pattern.NONE
    repeat: int = 1
    p_to_p: float = 0.0
    phase: float = 0.0
    invert: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.pattern, CustomPattern):
            object.__setattr__(self, "pattern", Pattern(self.pattern))
        if self.repeat < 1:
            raise ValueError(f"repeat must be >= 1, got {self.repeat}")
        if self.p_to_p < 0.0:
            raise ValueError(f"p_to_p must be >= 0, got {self.p_to_p}")

    @property
    def is_flat(self) -> bool:
        """True when following this rosette is just a circle."""
        return self.pattern is Pattern.NONE or self.p_to_p == 0.0

    def _deflection(self, angle: float) -> float:
        per_repeat = 360.0 / self.repeat
        adjusted = angle_check(angle + self.phase / self.repeat)
        m = int(adjusted / per_repeat)
        fraction = (adjusted - m * per_repeat) / per_repeat
        value = self.p_to_p * self.pattern.at(fraction)
        if self.invert:
            return self.p_to_p - value
        return value

    def amplitude_at(self, angle: float, outside: bool = False) -> float:
        """Deflection in inches (0 to p_to_p) at *angle* degrees.

        Outside cutters see the rosette from the other side, so the value
        is mirrored once more.
        """
        value = self._deflection(angle)
        if outside:
            return self.p_to_p - value
        return value

    @property
    def follows_breakpoints(self) -> bool:
        """True for a straight-line custom pattern, which is cut point to point."""
        return isinstance(self.pattern, CustomPattern) and self.pattern.style is CustomStyle.STRAIGHT

    def breakpoint_angles(self) -> list[float]:
        """Spindle angles in [0, 360] at the corners of a custom pattern.

        Duplicates are merged, and the middle of three angles with the same
        amplitude is dropped, since a straight move covers it.
        """
        if not isinstance(self.pattern, CustomPattern):
            raise TypeError(f"{self.pattern.value} pattern has no breakpoints")
        angles = [0.0, 360.0]
        for i in range(self.repeat):
            base = 360.0 * i / self.repeat
            for x in self.pattern.breakpoints():
                c = x * 360.0 / self.repeat + base - self.phase / self.repeat
                if c < 0.0:
                    c += 360.0
                elif c > 360.0:
                    c -= 360.0
                angles.append(c)
        angles.sort()

        merged = [angles[0]]
        for a in angles[1:]:
            if abs(a - merged[-1]) >= COMPARE_ERROR:
                merged.append(a)

        for i in range(len(merged) - 2, 0, -1):
            here = self.amplitude_at(merged[i])
            if (
                abs(self.amplitude_at(merged[i - 1]) - here) < COMPARE_ERROR
                and abs(here - self.amplitude_at(merged[i + 1])) < COMPARE_ERROR
            ):
                del merged[i]
        return merged
