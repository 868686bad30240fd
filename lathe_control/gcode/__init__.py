"""G-code compilation from motion instructions."""

from lathe_control.gcode.compiler import (
    GCodeCompiler,
    GCodeError,
    Quantizer,
    program_path,
    write_program,
)
from lathe_control.gcode.feed_modes import FeedDecision, Kind, Mode, Movement, Rate

__all__ = [
    "FeedDecision",
    "GCodeCompiler",
    "GCodeError",
    "Kind",
    "Mode",
    "Movement",
    "Quantizer",
    "Rate",
    "program_path",
    "write_program",
]
