"""Feed-mode decision table.

Which G-code feed mode a motion instruction compiles to depends only on
the instruction kind and on which axes actually move after quantization.
That decision lives here as data, separate from text formatting, so it can
be inspected and tested on its own.

Modes
-----
``LINEAR``        ``g94`` units-per-minute feed
``INVERSE_TIME``  ``g93`` feed is 1 / minutes for the move
``RAPID``         ``g0``, used only to reach the very first point when no
                  axis needs to move
``SKIP``          nothing emitted

Rate rules
----------
``MAX_VELOCITY``  the configured maximum linear velocity
``CRUISE``        the configured cruise velocity
``FAST_TIME``     1 / max(dx/max_vel, dz/max_vel, dc/max_rpm)
``RPM_TIME``      1 / max(dx/max_vel, dz/max_vel, dc/rpm)
``RPM_TURN``      rpm / dc

dx and dz are inches, dc is rotations.  Every inverse-time rate is capped
at the controller's maximum instruction rate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from lathe_control.configs.loader import FeedConfig


class Kind(Enum):
    """Instruction kinds that produce motion."""

    XZ_FAST = "xz_fast"
    XZ_VELOCITY = "xz_velocity"
    XZC_FAST = "xzc_fast"
    XZC_VELOCITY = "xzc_velocity"
    XZC_RPM = "xzc_rpm"
    TURN = "turn"

    @property
    def uses_linear(self) -> bool:
        return self is not Kind.TURN

    @property
    def uses_spindle(self) -> bool:
        return self not in (Kind.XZ_FAST, Kind.XZ_VELOCITY)


class Movement(Enum):
    """Which axis groups change between the last and the new target."""

    NONE = "none"
    LINEAR = "linear"
    SPINDLE = "spindle"
    BOTH = "both"

    @classmethod
    def classify(cls, linear: bool, spindle: bool) -> Movement:
        if linear and spindle:
            return cls.BOTH
        if linear:
            return cls.LINEAR
        if spindle:
            return cls.SPINDLE
        return cls.NONE


class Mode(Enum):
    LINEAR = "g94"
    INVERSE_TIME = "g93"
    RAPID = "g0"
    SKIP = "skip"


class Rate(Enum):
    NONE = "none"
    MAX_VELOCITY = "max_velocity"
    CRUISE = "cruise"
    FAST_TIME = "fast_time"
    RPM_TIME = "rpm_time"
    RPM_TURN = "rpm_turn"


XZ = ("x", "z")
XZC = ("x", "z", "c")
C = ("c",)


@dataclass(frozen=True, slots=True)
class FeedDecision:
    """What to emit for one instruction.

    Parameters
    ----------
    mode : Mode
        Feed mode (or SKIP).
    rate : Rate
        How to compute the ``f`` word; ``Rate.NONE`` for RAPID and SKIP.
    axes : tuple[str, ...]
        Axis words to write, in order.
    """

    mode: Mode
    rate: Rate = Rate.NONE
    axes: tuple[str, ...] = ()

    @property
    def emits(self) -> bool:
        return self.mode is not Mode.SKIP


SKIP = FeedDecision(Mode.SKIP)
RAPID_XZC = FeedDecision(Mode.RAPID, Rate.NONE, XZC)

_XZ_MAX = FeedDecision(Mode.LINEAR, Rate.MAX_VELOCITY, XZ)
_XZ_CRUISE = FeedDecision(Mode.LINEAR, Rate.CRUISE, XZ)
_XZC_FAST = FeedDecision(Mode.INVERSE_TIME, Rate.FAST_TIME, XZC)
_XZC_CRUISE = FeedDecision(Mode.LINEAR, Rate.CRUISE, XZC)
_XZC_RPM = FeedDecision(Mode.INVERSE_TIME, Rate.RPM_TIME, XZC)
_C_TURN = FeedDecision(Mode.INVERSE_TIME, Rate.RPM_TURN, C)

# (kind, movement) -> decision for instructions after the first point.
# Pairs that cannot occur (an XZ kind never sees spindle movement, a turn
# never sees linear movement) are left out.
TABLE: dict[tuple[Kind, Movement], FeedDecision] = {
    (Kind.XZ_FAST, Movement.NONE): SKIP,
    (Kind.XZ_FAST, Movement.LINEAR): _XZ_MAX,
    (Kind.XZ_VELOCITY, Movement.NONE): SKIP,
    (Kind.XZ_VELOCITY, Movement.LINEAR): _XZ_CRUISE,
    (Kind.XZC_FAST, Movement.NONE): SKIP,
    (Kind.XZC_FAST, Movement.LINEAR): _XZC_FAST,
    (Kind.XZC_FAST, Movement.SPINDLE): _XZC_FAST,
    (Kind.XZC_FAST, Movement.BOTH): _XZC_FAST,
    (Kind.XZC_VELOCITY, Movement.NONE): SKIP,
    (Kind.XZC_VELOCITY, Movement.LINEAR): _XZC_CRUISE,
    (Kind.XZC_VELOCITY, Movement.SPINDLE): _C_TURN,
    (Kind.XZC_VELOCITY, Movement.BOTH): _XZC_CRUISE,
    (Kind.XZC_RPM, Movement.NONE): SKIP,
    (Kind.XZC_RPM, Movement.LINEAR): _XZ_CRUISE,
    (Kind.XZC_RPM, Movement.SPINDLE): _XZC_RPM,
    (Kind.XZC_RPM, Movement.BOTH): _XZC_RPM,
    (Kind.TURN, Movement.NONE): SKIP,
    (Kind.TURN, Movement.SPINDLE): _C_TURN,
}

# The machine origin is unknown, so a first point that matches the assumed
# origin still has to be commanded.
FIRST_POINT: dict[Kind, FeedDecision] = {
    Kind.XZ_FAST: _XZ_MAX,
    Kind.XZ_VELOCITY: _XZ_CRUISE,
    Kind.XZC_FAST: RAPID_XZC,
    Kind.XZC_VELOCITY: RAPID_XZC,
    Kind.XZC_RPM: RAPID_XZC,
    Kind.TURN: SKIP,
}


def decide(kind: Kind, linear_moved: bool, spindle_moved: bool, first_point: bool) -> FeedDecision:
    """Look up the decision for one instruction.

    Parameters
    ----------
    kind : Kind
        Instruction kind.
    linear_moved, spindle_moved : bool
        Whether the quantized x/z or c target differs from the last one.
        Axes the kind does not command are ignored.
    first_point : bool
        True until the first positioning move has been emitted.
    """
    movement = Movement.classify(
        linear_moved and kind.uses_linear,
        spindle_moved and kind.uses_spindle,
    )
    if movement is Movement.NONE and first_point:
        return FIRST_POINT[kind]
    return TABLE[(kind, movement)]


def feed_rate(
    rate: Rate,
    feed: FeedConfig,
    dx: float,
    dz: float,
    dc: float,
    max_inverse: float,
) -> float | None:
    """Value of the ``f`` word for *rate*.

    Parameters
    ----------
    rate : Rate
        Rule from a :class:`FeedDecision`.
    feed : FeedConfig
        Cruise and limit feeds.
    dx, dz : float
        Absolute linear travel in inches.
    dc : float
        Absolute spindle travel in rotations.
    max_inverse : float
        Cap for inverse-time rates (moves/minute).

    Returns
    -------
    float | None
        ``None`` for ``Rate.NONE``.
    """
    if rate is Rate.NONE:
        return None
    if rate is Rate.MAX_VELOCITY:
        return feed.max_velocity
    if rate is Rate.CRUISE:
        return feed.velocity

    if rate is Rate.RPM_TURN:
        inverse = feed.rpm / dc
    else:
        spindle_limit = feed.max_rpm if rate is Rate.FAST_TIME else feed.rpm
        minutes = max(dx / feed.max_velocity, dz / feed.max_velocity, dc / spindle_limit)
        inverse = 1.0 / minutes
    return min(inverse, max_inverse)
