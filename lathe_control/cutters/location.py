"""Where a cutter (or a digitized surface) sits relative to the workpiece.

The workpiece turns about the z axis.  *Front* and *back* are the two sides
of that axis as seen from the operator (positive and negative x); *inside*
and *outside* say whether the surface is the bore of a hollow form or its
outer skin.
"""

from __future__ import annotations

from enum import Enum


class Location(str, Enum):
    """Front/back × inside/outside placement."""

    FRONT_INSIDE = "front_inside"
    FRONT_OUTSIDE = "front_outside"
    BACK_INSIDE = "back_inside"
    BACK_OUTSIDE = "back_outside"

    @property
    def is_front(self) -> bool:
        return self in (Location.FRONT_INSIDE, Location.FRONT_OUTSIDE)

    @property
    def is_back(self) -> bool:
        return not self.is_front

    @property
    def is_inside(self) -> bool:
        return self in (Location.FRONT_INSIDE, Location.BACK_INSIDE)

    @property
    def is_outside(self) -> bool:
        return not self.is_inside

    @property
    def is_front_in_or_back_out(self) -> bool:
        """True for the two placements whose cut advances toward +x normal."""
        return self in (Location.FRONT_INSIDE, Location.BACK_OUTSIDE)


class Frame(str, Enum):
    """Cutting frame that holds the cutter."""

    HCF = "hcf"
    """Horizontal cutting frame (spinning disc)."""
    UCF = "ucf"
    """Universal cutting frame (spinning disc, tiltable)."""
    DRILL = "drill"
    """Drilling frame (pointed, rotates on its own axis)."""
    ECF = "ecf"
    """Eccentric cutting frame (pointed, orbits)."""

    @property
    def is_disc(self) -> bool:
        return self in (Frame.HCF, Frame.UCF)
