"""
Motion instruction module.

Defines every motion a cut strategy can request as immutable dataclasses,
plus the append-only list that collects them.  This vocabulary is the
contract between the strategies and G-code compilation.

x and z are inches, the spindle angle c is degrees.
"""

from lathe_control.job_ir.instructions import (
    Comment,
    Instruction,
    MotionList,
    MoveXZ,
    MoveXZC,
    MoveXZCFast,
    MoveXZCRpm,
    MoveXZCVelocity,
    MoveXZFast,
    MoveXZVelocity,
    Speed,
    SpindleWrap,
    Turn,
)

__all__ = [
    "Comment",
    "Instruction",
    "MotionList",
    "MoveXZ",
    "MoveXZC",
    "MoveXZCFast",
    "MoveXZCRpm",
    "MoveXZCVelocity",
    "MoveXZFast",
    "MoveXZVelocity",
    "Speed",
    "SpindleWrap",
    "Turn",
]
