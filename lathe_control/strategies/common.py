"""Shared pieces for cut strategies.

A strategy turns an outline, a cutter and its own parameters into a
:class:`~lathe_control.job_ir.MotionList`.  Every strategy checks its
inputs with :meth:`check` before producing anything, so a job with an
unusable operation fails before any G-code is compiled.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import numpy as np

from lathe_control.cutters.cutter import Cutter
from lathe_control.job_ir.instructions import MotionList
from lathe_control.toolpath.outline import Outline


class StrategyError(Exception):
    """Raised when a strategy's inputs cannot produce a cut."""

    pass


class Rotation(str, Enum):
    """Spindle direction for coarse and final passes."""

    PLUS_ALWAYS = "plus_always"
    NEG_ALWAYS = "neg_always"
    NEG_LAST = "neg_last"

    def negative(self, last: bool) -> bool:
        """True when a pass should turn the spindle backwards."""
        if self is Rotation.NEG_LAST:
            return last
        return self is Rotation.NEG_ALWAYS


@dataclass(frozen=True, slots=True)
class CoarseFine:
    """Pass schedule for repeated cuts.

    Parameters
    ----------
    pass_depth : float
        Depth added per coarse pass (inches, >= 0).
    pass_step : int
        Spindle steps between instructions on coarse passes (>= 1).
    last_depth : float
        Depth of the final pass (inches, >= 0); 0 skips it.
    last_step : int
        Spindle steps between instructions on the final pass (>= 1).
    rotation : Rotation
        Spindle direction rule.
    """

    pass_depth: float = 0.02
    pass_step: int = 5
    last_depth: float = 0.005
    last_step: int = 1
    rotation: Rotation = Rotation.PLUS_ALWAYS

    def __post_init__(self) -> None:
        if self.pass_depth < 0.0:
            raise ValueError(f"pass_depth must be >= 0, got {self.pass_depth}")
        if self.last_depth < 0.0:
            raise ValueError(f"last_depth must be >= 0, got {self.last_depth}")
        if self.pass_step < 1 or self.last_step < 1:
            raise ValueError(
                f"pass_step and last_step must be >= 1, got "
                f"{self.pass_step}, {self.last_step}"
            )
        object.__setattr__(self, "rotation", Rotation(self.rotation))


class Strategy(ABC):
    """Base class for cut strategies."""

    name = "strategy"

    @abstractmethod
    def check(self, outline: Outline, cutter: Cutter) -> None:
        """Raise :class:`StrategyError` when the inputs cannot be cut."""

    @abstractmethod
    def make_instructions(
        self,
        outline: Outline,
        cutter: Cutter,
        coarse_fine: CoarseFine,
        steps_per_rotation: int,
    ) -> MotionList:
        """Instructions for this cut; call :meth:`check` first."""


def require_cutter_path(outline: Outline, cutter: Cutter, what: str) -> np.ndarray:
    """Cutter path with at least 2 points, else :class:`StrategyError`."""
    if outline.num_points < 2:
        raise StrategyError(
            f"{what} needs at least 2 outline points, got {outline.num_points}"
        )
    path = outline.cutter_path(cutter)
    if len(path) < 2:
        raise StrategyError(f"{what} needs a cutter path with at least 2 points")
    return path
