"""Rosette cut: plunge at one point and follow a rosette around the spindle.

The cutter sits at a point on the cutter path and cuts to ``cut_depth``
along the path's inward normal in coarse passes plus a final pass.  On
every pass the spindle turns one full revolution while the x/z position
is deflected by the rosette, which is what carves the pattern.

Motions
-------
``PERP``     deflect along the normal
``TANGENT``  deflect along the surface
``PUMP``     deflect along z
``ROCK``     deflect along x
``BOTH``     x from the primary rosette, z from the second one
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from lathe_control.curves import sampled
from lathe_control.cutters.cutter import Cutter
from lathe_control.cutters.location import Location
from lathe_control.job_ir.instructions import MotionList, Speed
from lathe_control.strategies.common import (
    CoarseFine,
    Strategy,
    StrategyError,
    require_cutter_path,
)
from lathe_control.strategies.patterns import Rosette
from lathe_control.toolpath.outline import Outline

logger = logging.getLogger(__name__)

CUT_MARGIN = 0.0049
"""Passes shallower than the pattern by at least this much are plain circles."""


class Motion(str, Enum):
    PERP = "perp"
    TANGENT = "tangent"
    PUMP = "pump"
    ROCK = "rock"
    BOTH = "both"


@dataclass(frozen=True, slots=True)
class RosetteCut(Strategy):
    """Rosette-following cut at one point.

    Parameters
    ----------
    x, z : float
        Cut point in inches; snapped to the nearest cutter-path sample
        when ``snap`` is True.
    cut_depth : float
        Total depth in inches (>= 0).
    rosette : Rosette
        Primary rosette.
    motion : Motion
        How the rosette deflects the cutter.
    rosette2 : Rosette | None
        Second rosette for ``Motion.BOTH`` (drives z).
    snap : bool
        Move the point onto the cutter path.
    """

    x: float
    z: float
    cut_depth: float
    rosette: Rosette
    motion: Motion = Motion.PERP
    rosette2: Rosette | None = None
    snap: bool = True

    name = "rosette"

    def __post_init__(self) -> None:
        object.__setattr__(self, "motion", Motion(self.motion))
        if self.cut_depth < 0.0:
            raise ValueError(f"cut_depth must be >= 0, got {self.cut_depth}")

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def check(self, outline: Outline, cutter: Cutter) -> None:
        if self.motion is Motion.BOTH and self.rosette2 is None:
            raise StrategyError("Rosette cut with BOTH motion needs a second rosette")
        path = require_cutter_path(outline, cutter, "Rosette cut")
        if sampled.perpendicular(path, self._position(path), True) is None:
            raise StrategyError(
                f"No surface normal at ({self.x:.4f}, {self.z:.4f})"
            )

    def _position(self, path: np.ndarray) -> np.ndarray:
        if self.snap:
            return sampled.nearest_point(path, (self.x, self.z))
        return np.array([self.x, self.z], dtype=np.float64)

    def _frame(self, outline: Outline, cutter: Cutter) -> tuple[np.ndarray, np.ndarray]:
        path = outline.cutter_path(cutter)
        pos = self._position(path)
        perp = sampled.perpendicular(path, pos, cutter.location.is_front_in_or_back_out)
        return pos, perp

    @staticmethod
    def _top_outside(perp: np.ndarray, cutter: Cutter) -> bool:
        return perp[1] < 0.0 and cutter.location.is_outside

    def _move_unit(self, perp: np.ndarray, cutter: Cutter) -> np.ndarray:
        """Unit deflection for PERP and TANGENT, pointing away from the deepest cut."""
        if self.motion is Motion.PERP:
            return -perp
        if self.motion is not Motion.TANGENT:
            return np.zeros(2)
        along = np.array([perp[1], -perp[0]])
        loc = cutter.location
        if loc is Location.BACK_INSIDE:
            return -along
        if loc is Location.FRONT_OUTSIDE:
            return -along if self._top_outside(perp, cutter) else along
        if loc is Location.BACK_OUTSIDE:
            return along if self._top_outside(perp, cutter) else -along
        return along

    def rosette_move(self, angle: float, perp: np.ndarray, cutter: Cutter) -> np.ndarray:
        """x/z deflection at spindle *angle* degrees."""
        outside = cutter.location.is_outside
        if self.motion in (Motion.PERP, Motion.TANGENT):
            return self._move_unit(perp, cutter) * self.rosette.amplitude_at(angle, outside)

        x_move = z_move = 0.0
        if self.motion is Motion.BOTH:
            z_move = self.rosette2.amplitude_at(angle, outside)
            x_move = self.rosette.amplitude_at(angle, outside)
        elif self.motion is Motion.PUMP:
            z_move = self.rosette.amplitude_at(angle, outside)
        else:
            x_move = self.rosette.amplitude_at(angle, outside)

        loc = cutter.location
        if loc is Location.BACK_INSIDE:
            return np.array([x_move, z_move])
        if loc is Location.FRONT_OUTSIDE:
            if self._top_outside(perp, cutter):
                return np.array([x_move, z_move])
            return np.array([x_move, -z_move])
        if loc is Location.BACK_OUTSIDE:
            if self._top_outside(perp, cutter):
                return np.array([-x_move, z_move])
            return np.array([-x_move, -z_move])
        return np.array([-x_move, z_move])

    def _is_circle(self, depth: float, perp: np.ndarray) -> bool:
        if self.motion is Motion.BOTH:
            if self.rosette.is_flat and self.rosette2.is_flat:
                return True
        elif self.rosette.is_flat:
            return True
        shallow = depth <= self.cut_depth - self.rosette.p_to_p - CUT_MARGIN
        if perp[0] == 0.0 and self.motion is Motion.PUMP and shallow:
            return True
        if perp[1] == 0.0 and self.motion is Motion.ROCK and shallow:
            return True
        return self.motion is Motion.PERP and shallow

    def _in_air(self, depth: float, move: np.ndarray, perp: np.ndarray) -> bool | None:
        """Whether the cutter clears the work at this deflection; None if not tracked."""
        if self.motion is Motion.PUMP and perp[0] == 0.0:
            return depth < -perp[1] * move[1]
        if self.motion is Motion.ROCK and perp[1] == 0.0:
            return depth < -perp[0] * move[0]
        if self.motion is Motion.PERP:
            return depth < float(np.hypot(move[0], move[1]))
        return None

    # ------------------------------------------------------------------
    # Instructions
    # ------------------------------------------------------------------

    def make_instructions(
        self,
        outline: Outline,
        cutter: Cutter,
        coarse_fine: CoarseFine,
        steps_per_rotation: int,
    ) -> MotionList:
        pos, perp = self._frame(outline, cutter)
        ml = MotionList()
        ml.comment(
            f"Rosette cut at x={pos[0]:.4f} z={pos[1]:.4f} depth={self.cut_depth:.4f}"
        )
        ml.comment(f"Cutter: {cutter.name}")
        ml.spindle_wrap_check()

        start = pos + self.rosette_move(0.0, perp, cutter)
        ml.go_to_xzc(Speed.FAST, start[0], start[1], 0.0)

        cf = coarse_fine
        target = self.cut_depth - cf.last_depth
        increment = cf.pass_depth if cf.pass_depth > 0.0 else target
        depth = 0.0
        passes = 0
        while depth < target:
            depth = min(target, depth + increment)
            self._follow(ml, cutter, pos, perp, depth, cf.pass_step,
                         cf.rotation.negative(last=False), steps_per_rotation)
            passes += 1
        if cf.last_depth > 0.0:
            self._follow(ml, cutter, pos, perp, self.cut_depth, cf.last_step,
                         cf.rotation.negative(last=True), steps_per_rotation)
            passes += 1

        ml.spindle_wrap_check()
        ml.go_to_xzc(Speed.FAST, start[0], start[1], 0.0)
        logger.debug("Rosette cut: %d passes, %d instructions", passes, len(ml))
        return ml

    def _follow(
        self,
        ml: MotionList,
        cutter: Cutter,
        pos: np.ndarray,
        perp: np.ndarray,
        depth: float,
        step: int,
        negative: bool,
        steps_per_rotation: int,
    ) -> None:
        x0, z0 = pos + depth * perp
        sign = -1.0 if negative else 1.0
        ml.spindle_wrap_check()

        # Straight-line custom patterns only need their corners
        if self.motion is not Motion.BOTH and self.rosette.follows_breakpoints:
            angles = self.rosette.breakpoint_angles()
            if negative:
                angles = [a - 360.0 for a in reversed(angles)]
            for i, c in enumerate(angles):
                move = self.rosette_move(c, perp, cutter)
                ml.go_to_xzc(Speed.VELOCITY if i == 0 else Speed.RPM,
                             x0 + move[0], z0 + move[1], c)
            return

        if self._is_circle(depth, perp):
            ml.go_to_xzc(Speed.VELOCITY, x0, z0, 0.0)
            ml.turn(sign * 360.0)
            ml.spindle_wrap_check()
            return

        in_air = False
        saved = (x0, z0, 0.0)
        for i in range(0, steps_per_rotation + 1, step):
            c = sign * 360.0 * i / steps_per_rotation
            move = self.rosette_move(c, perp, cutter)
            x, z = x0 + move[0], z0 + move[1]
            air = self._in_air(depth, move, perp)
            if air:
                saved = (x, z, c)
                if not in_air:
                    ml.go_to_xzc(Speed.FAST, x, z, c)
                in_air = True
                continue
            if in_air:
                ml.go_to_xzc(Speed.FAST, *saved)
            in_air = False
            ml.go_to_xzc(Speed.VELOCITY if i == 0 else Speed.RPM, x, z, c)

        if in_air:
            ml.go_to_xzc(Speed.FAST, *saved)

        if steps_per_rotation % step != 0:
            c = sign * 360.0
            move = self.rosette_move(c, perp, cutter)
            ml.go_to_xzc(Speed.RPM, x0 + move[0], z0 + move[1], c)
