"""Helical thread cut along a straight vertical outline."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from lathe_control.cutters.cutter import Cutter
from lathe_control.cutters.location import Location
from lathe_control.job_ir.instructions import MotionList, Speed
from lathe_control.strategies.common import (
    CoarseFine,
    Strategy,
    StrategyError,
    require_cutter_path,
)
from lathe_control.toolpath.outline import Outline

logger = logging.getLogger(__name__)

SIN60 = math.sqrt(3.0) / 2.0
BACKOFF = 0.010
"""Clearance from the surface for entry and exit moves (inches)."""

HALF_DEPTH = 0.707
"""The first pass goes to this fraction of the depth, about half the material."""


@dataclass(frozen=True, slots=True)
class ThreadCut(Strategy):
    """Thread with *tpi* threads per inch.

    Parameters
    ----------
    tpi : int
        Threads per inch (>= 1).
    starts : int
        Number of interleaved starts (>= 1).
    percent : int
        Thread engagement in percent (0 to 100).
    """

    tpi: int
    starts: int = 1
    percent: int = 60

    name = "thread"

    def __post_init__(self) -> None:
        if self.tpi < 1:
            raise ValueError(f"tpi must be >= 1, got {self.tpi}")
        if self.starts < 1:
            raise ValueError(f"starts must be >= 1, got {self.starts}")
        if not 0 <= self.percent <= 100:
            raise ValueError(f"percent must be in [0, 100], got {self.percent}")

    @property
    def pitch(self) -> float:
        return 1.0 / self.tpi

    @property
    def full_depth(self) -> float:
        """Height of a sharp 60 degree thread."""
        return SIN60 * self.pitch

    @property
    def engagement(self) -> float:
        """Radial difference between the two mating diameters."""
        return self.full_depth * self.percent / 100.0

    @property
    def cut_depth(self) -> float:
        return (self.full_depth + self.engagement) / 2.0

    def outside_diameter(self, inside_diameter: float) -> float:
        """Major diameter that mates with a thread of *inside_diameter*."""
        return inside_diameter + 2.0 * self.engagement

    def inside_diameter(self, outside_diameter: float) -> float:
        return outside_diameter - 2.0 * self.engagement

    def check(self, outline: Outline, cutter: Cutter) -> None:
        if outline.num_points != 2:
            raise StrategyError(
                f"Thread cut needs exactly 2 outline points, got {outline.num_points}"
            )
        p0, p1 = outline.surface.points
        if p0.x != p1.x:
            raise StrategyError(
                f"Thread cut needs a vertical outline, got x={p0.x:.4f} and x={p1.x:.4f}"
            )
        require_cutter_path(outline, cutter, "Thread cut")

    def make_instructions(
        self,
        outline: Outline,
        cutter: Cutter,
        coarse_fine: CoarseFine,
        steps_per_rotation: int,
    ) -> MotionList:
        depth = self.cut_depth
        backoff = BACKOFF
        if cutter.location in (Location.FRONT_OUTSIDE, Location.BACK_INSIDE):
            depth = -depth
        else:
            backoff = -backoff

        path = outline.cutter_path(cutter)
        (x0, z0), (x1, z1) = path[0], path[-1]
        # Negative for right hand threads
        rotation = -360.0 * (z1 - z0) * self.tpi / self.starts

        ml = MotionList()
        ml.comment(
            f"Thread: {self.tpi} tpi, {self.starts} start, {self.percent}% "
            f"depth={self.cut_depth:.4f}"
        )
        ml.comment(f"Cutter: {cutter.name}")
        for i in range(self.starts):
            offset = 360.0 * i / self.starts
            for d in (HALF_DEPTH * depth, depth):
                ml.go_to_xzc(Speed.FAST, x0 + backoff, z0, offset)
                ml.go_to_xz(Speed.VELOCITY, x0 + d, z0)
                ml.go_to_xzc(Speed.RPM, x1 + d, z1, rotation + offset)
                ml.go_to_xz(Speed.VELOCITY, x1 + backoff, z1)
                ml.spindle_wrap_check()
        ml.go_to_xzc(Speed.FAST, x1 + backoff, z1, 0.0)
        logger.debug("Thread cut: %d starts, %d instructions", self.starts, len(ml))
        return ml
