"""
Cutter-path geometry.

Offsets a digitized surface into the path a cutter follows, and keeps the
outline (surface dots, thickness, resolution, safe retract path) the cut
strategies work from.
"""

from lathe_control.toolpath.offset import cutter_path, signed_offset
from lathe_control.toolpath.outline import Outline, OutlineError

__all__ = [
    "Outline",
    "OutlineError",
    "cutter_path",
    "signed_offset",
]
