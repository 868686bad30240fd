"""Contour cut: follow the whole cutter path as a spiral.

The spindle turns one full revolution for every point of the re-sampled
cutter path, so the cut advances ``step`` inches per revolution.  Passes
start ``backoff`` inches off the surface and deepen by ``depth1`` for
``count1`` coarse passes, then by ``depth2`` for ``count2`` fine passes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from lathe_control.curves import sampled
from lathe_control.cutters.cutter import Cutter
from lathe_control.job_ir.instructions import MotionList, Speed
from lathe_control.strategies.common import (
    CoarseFine,
    Strategy,
    require_cutter_path,
)
from lathe_control.toolpath.outline import Outline

logger = logging.getLogger(__name__)

MIN_STEP = 0.001
MAX_STEP = 0.1
MAX_COUNT = 10
MAX_DEPTH = 0.1


class Direction(str, Enum):
    LAST_TO_FIRST = "last_to_first"
    FIRST_TO_LAST = "first_to_last"


@dataclass(frozen=True, slots=True)
class ContourCut(Strategy):
    """Spiral cut following the outline.

    Parameters
    ----------
    step : float
        Advance per revolution in inches, clamped to [0.001, 0.1].
    backoff : float
        Distance off the surface of the first pass (inches, >= 0).
    direction : Direction
        Which end of the cutter path to start from.
    count1, count2 : int
        Coarse and fine pass counts (0 to 10).
    depth1, depth2 : float
        Depth added by each coarse and fine pass (inches, 0 to 0.1).
    """

    step: float = 0.05
    backoff: float = 0.0
    direction: Direction = Direction.LAST_TO_FIRST
    count1: int = 1
    depth1: float = 0.02
    count2: int = 1
    depth2: float = 0.005

    name = "contour"

    def __post_init__(self) -> None:
        object.__setattr__(self, "step", min(MAX_STEP, max(MIN_STEP, self.step)))
        object.__setattr__(self, "direction", Direction(self.direction))
        if self.backoff < 0.0:
            raise ValueError(f"backoff must be >= 0, got {self.backoff}")
        for label, count in (("count1", self.count1), ("count2", self.count2)):
            if not 0 <= count <= MAX_COUNT:
                raise ValueError(f"{label} must be in [0, {MAX_COUNT}], got {count}")
        for label, depth in (("depth1", self.depth1), ("depth2", self.depth2)):
            if not 0.0 <= depth <= MAX_DEPTH:
                raise ValueError(f"{label} must be in [0, {MAX_DEPTH}], got {depth}")

    @property
    def num_passes(self) -> int:
        return self.count1 + self.count2

    @property
    def total_depth(self) -> float:
        """Depth of the last pass below the surface."""
        return self.count1 * self.depth1 + self.count2 * self.depth2 - self.backoff

    def check(self, outline: Outline, cutter: Cutter) -> None:
        require_cutter_path(outline, cutter, "Contour cut")

    def pass_depths(self) -> list[float]:
        depths = []
        depth = -self.backoff
        for _ in range(self.count1):
            depth += self.depth1
            depths.append(depth)
        for _ in range(self.count2):
            depth += self.depth2
            depths.append(depth)
        return depths

    def make_instructions(
        self,
        outline: Outline,
        cutter: Cutter,
        coarse_fine: CoarseFine,
        steps_per_rotation: int,
    ) -> MotionList:
        follow = sampled.resample_uniform(outline.cutter_path(cutter), self.step)
        safe = outline.safe_points()
        if self.direction is Direction.FIRST_TO_LAST:
            safe = safe[::-1]

        ml = MotionList()
        ml.comment(
            f"Contour: step={self.step:.4f} passes={self.num_passes} "
            f"{self.direction.value}"
        )
        ml.comment(f"Cutter: {cutter.name}")
        for depth in self.pass_depths():
            self._cut_pass(ml, cutter, follow, safe, depth)
        logger.debug(
            "Contour cut: %d passes over %d points, %d instructions",
            self.num_passes, len(follow), len(ml),
        )
        return ml

    def _cut_pass(
        self,
        ml: MotionList,
        cutter: Cutter,
        follow: np.ndarray,
        safe: np.ndarray,
        depth: float,
    ) -> None:
        d = depth if cutter.location.is_front_in_or_back_out else -depth
        pts = sampled.offset_points(follow, d)
        if len(pts) == 0:
            return
        if self.direction is Direction.LAST_TO_FIRST:
            pts = pts[::-1]

        ml.comment(f"Contour pass depth={depth:.4f}")
        ml.go_to_xz(Speed.VELOCITY, pts[0][0], pts[0][1])
        ml.turn(360.0)
        c = 720.0
        for x, z in pts[1:]:
            # Stop at the spindle axis
            if (cutter.location.is_back and x > 0.0) or (cutter.location.is_front and x < 0.0):
                break
            ml.go_to_xzc(Speed.RPM, x, z, c)
            c += 360.0
        ml.turn(c)
        ml.spindle_wrap_check()
        for x, z in safe:
            ml.go_to_xz(Speed.FAST, x, z)
