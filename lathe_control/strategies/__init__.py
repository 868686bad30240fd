"""
Cut strategies.

Each strategy turns an outline and a cutter into a ``MotionList`` for one
operation: a rosette-following cut at a point, a spiral contour along the
whole outline, or a helical thread.
"""

from lathe_control.strategies.common import (
    CoarseFine,
    Rotation,
    Strategy,
    StrategyError,
)
from lathe_control.strategies.contour import ContourCut, Direction
from lathe_control.strategies.patterns import CustomPattern, Pattern, Rosette
from lathe_control.strategies.rosette import Motion, RosetteCut
from lathe_control.strategies.thread import ThreadCut

__all__ = [
    "CoarseFine",
    "ContourCut",
    "CustomPattern",
    "Direction",
    "Motion",
    "Pattern",
    "Rosette",
    "RosetteCut",
    "Rotation",
    "Strategy",
    "StrategyError",
    "ThreadCut",
]
