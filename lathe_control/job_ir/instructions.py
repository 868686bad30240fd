"""Motion instructions -- the vocabulary between cut strategies and G-code.

Every instruction is an immutable, slotted dataclass.  Instructions use
**semantic** names (``MoveXZCRpm``, not ``G93 G1 X Z C F``), **inch** units
for x and z, and **degrees** for the spindle angle c.  They carry no feed
rates: the compiler chooses the feed mode from the instruction kind and the
machine configuration.

Kinds
-----
``MoveXZ*``    two-axis moves, spindle angle unchanged
``MoveXZC*``   three-axis moves with an absolute spindle angle
``Turn``       spindle-only rotation to an absolute angle
``SpindleWrap`` re-base the spindle angle into [-180, 180)
``Comment``    free text copied into the program

Suffixes give the speed: ``Fast`` (maximum), ``Velocity`` (cruise linear
feed) and ``Rpm`` (spindle-paced).

Grouping
--------
A :class:`MotionList` is the ordered, append-only output of one strategy.
Strategies decide ordering, direction and pass count; the list only
records.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, overload

# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Instruction(ABC):
    """Base class for all motion instructions."""

    pass


# ---------------------------------------------------------------------------
# Annotation
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Comment(Instruction):
    """Single-line program comment.

    Parameters
    ----------
    text : str
        Comment body; must not contain line breaks.
    """

    text: str

    def __post_init__(self) -> None:
        if "\n" in self.text or "\r" in self.text:
            raise ValueError("Comment text must be a single line")


# ---------------------------------------------------------------------------
# Two-axis moves
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MoveXZ(Instruction):
    """Base for x/z moves.

    Parameters
    ----------
    x, z : float
        Target in inches (x across the bed, z along the spindle).
    """

    x: float
    z: float


@dataclass(frozen=True, slots=True)
class MoveXZFast(MoveXZ):
    """x/z move at maximum linear velocity."""


@dataclass(frozen=True, slots=True)
class MoveXZVelocity(MoveXZ):
    """x/z move at the cruise linear velocity."""


# ---------------------------------------------------------------------------
# Three-axis moves
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MoveXZC(Instruction):
    """Base for x/z/c moves.

    Parameters
    ----------
    x, z : float
        Target in inches.
    c : float
        Absolute spindle angle in degrees (any value; wraps are explicit).
    """

    x: float
    z: float
    c: float


@dataclass(frozen=True, slots=True)
class MoveXZCFast(MoveXZC):
    """x/z/c move as fast as the slowest axis allows."""


@dataclass(frozen=True, slots=True)
class MoveXZCVelocity(MoveXZC):
    """x/z/c move paced by the cruise linear velocity."""


@dataclass(frozen=True, slots=True)
class MoveXZCRpm(MoveXZC):
    """x/z/c move paced by the cruise spindle speed."""


# ---------------------------------------------------------------------------
# Spindle
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Turn(Instruction):
    """Spindle-only rotation to absolute angle *c* (degrees) at cruise rpm."""

    c: float


@dataclass(frozen=True, slots=True)
class SpindleWrap(Instruction):
    """Re-base the spindle angle into [-180, 180) without moving."""

    pass


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class Speed(str, Enum):
    """Speed selector for :meth:`MotionList.go_to_xz` / :meth:`MotionList.go_to_xzc`."""

    FAST = "fast"
    VELOCITY = "velocity"
    RPM = "rpm"


_XZC_KINDS = {
    Speed.FAST: MoveXZCFast,
    Speed.VELOCITY: MoveXZCVelocity,
    Speed.RPM: MoveXZCRpm,
}


class MotionList:
    """Ordered, append-only list of instructions with builder helpers."""

    __slots__ = ("_items",)

    def __init__(self, items: Iterable[Instruction] = ()) -> None:
        self._items: list[Instruction] = []
        self.extend(items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._items)

    @overload
    def __getitem__(self, index: int) -> Instruction: ...

    @overload
    def __getitem__(self, index: slice) -> list[Instruction]: ...

    def __getitem__(self, index):
        return self._items[index]

    def __repr__(self) -> str:
        return f"MotionList({len(self._items)} instructions)"

    def append(self, inst: Instruction) -> None:
        if not isinstance(inst, Instruction):
            raise TypeError(f"Expected an Instruction, got {type(inst).__name__}")
        self._items.append(inst)

    def extend(self, items: Iterable[Instruction]) -> None:
        for inst in items:
            self.append(inst)

    def clear(self) -> None:
        self._items.clear()

    def comment(self, text: str) -> None:
        self.append(Comment(text))

    def go_to_xz(self, speed: Speed, x: float, z: float) -> None:
        """Two-axis move; RPM has no meaning without c and maps to VELOCITY."""
        if Speed(speed) is Speed.FAST:
            self.append(MoveXZFast(float(x), float(z)))
        else:
            self.append(MoveXZVelocity(float(x), float(z)))

    def go_to_xzc(self, speed: Speed, x: float, z: float, c: float) -> None:
        """Three-axis move; numpy scalars are stored as plain floats."""
        self.append(_XZC_KINDS[Speed(speed)](float(x), float(z), float(c)))

    def turn(self, c: float) -> None:
        self.append(Turn(float(c)))

    def spindle_wrap_check(self) -> None:
        self.append(SpindleWrap())
