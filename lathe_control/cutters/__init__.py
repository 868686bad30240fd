"""
Cutter models.

A cutter is a frozen description of the tool: which frame holds it, where
it works on the piece, its size and (for pointed frames) its tip profile.
"""

from lathe_control.cutters.cutter import Cutter, filter_name
from lathe_control.cutters.location import Frame, Location
from lathe_control.cutters.profiles import (
    BUILTIN_PROFILES,
    IDEAL,
    POINT160,
    ROUND,
    CustomProfile,
    CustomStyle,
    Profile,
    get_profile,
)

__all__ = [
    "BUILTIN_PROFILES",
    "Cutter",
    "CustomProfile",
    "CustomStyle",
    "Frame",
    "IDEAL",
    "Location",
    "POINT160",
    "Profile",
    "ROUND",
    "filter_name",
    "get_profile",
]
