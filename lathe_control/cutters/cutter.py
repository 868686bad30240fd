"""Cutter description: frame, placement, size and tip profile."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field

from lathe_control.cutters.location import Frame, Location
from lathe_control.cutters.profiles import IDEAL, Profile

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 0.5
DEFAULT_TIP_WIDTH = 0.1875

_NAME_RE = re.compile(r"[A-Z0-9]*")


def filter_name(name: str) -> str:
    """Upper-case alphanumerics up to the first blank; ``"NEW"`` if none."""
    head = name.upper().split(" ", 1)[0]
    return "".join(_NAME_RE.findall(head)) or "NEW"


@dataclass(frozen=True, slots=True)
class Cutter:
    """One cutter mounted in a cutting frame.

    Parameters
    ----------
    name : str
        Label; normalized by :func:`filter_name`.
    frame : Frame
        Disc frames (HCF, UCF) cut with the rim of a spinning disc of
        ``radius``; pointed frames (DRILL, ECF) cut with a rod tip of
        ``tip_width`` shaped by ``profile``.
    location : Location
        Where the cutter works on the piece.
    radius : float
        Disc radius in inches, > 0.
    tip_width : float
        Rod diameter in inches, > 0.
    ucf_angle, ucf_rotate : float
        UCF tilt and rotation in degrees (carried for the operator, not used
        in path geometry).
    profile : Profile
        Tip profile for pointed frames.
    """

    name: str = "NEW"
    frame: Frame = Frame.HCF
    location: Location = Location.FRONT_INSIDE
    radius: float = DEFAULT_RADIUS
    tip_width: float = DEFAULT_TIP_WIDTH
    ucf_angle: float = 0.0
    ucf_rotate: float = 0.0
    profile: Profile = field(default=IDEAL)

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", filter_name(self.name))
        object.__setattr__(self, "frame", Frame(self.frame))
        object.__setattr__(self, "location", Location(self.location))
        if self.radius <= 0.0:
            raise ValueError(f"radius must be > 0, got {self.radius}")
        if self.tip_width <= 0.0:
            raise ValueError(f"tip_width must be > 0, got {self.tip_width}")

    @property
    def is_disc(self) -> bool:
        return self.frame.is_disc

    def width_of_cut(self, depth: float) -> float:
        """Width of the groove left at *depth* inches."""
        if depth <= 0.0:
            return 0.0
        if self.frame.is_disc:
            r = self.radius
            if depth >= r:
                return 2.0 * r
            return 2.0 * math.sqrt(r * r - (r - depth) * (r - depth))
        return self.profile.width_at_depth(depth, self.tip_width)
