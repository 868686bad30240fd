"""G-code compiler -- motion instructions to G-code text.

Single pass over a :class:`~lathe_control.job_ir.MotionList`.  The only
carried state is the last commanded position in controller steps and a
first-point flag: the true machine position is unknown when the program
starts, so the first positioning move is always emitted, even when it
matches the assumed origin of (0, 0, 0).

Quantization:
    Every target is rounded to whole controller steps and the value
    written to the program is the one those steps represent::

        steps = floor(value * steps_per_inch + 0.5)
        value = steps / steps_per_inch

    The spindle angle is quantized the same way in steps per rotation.
    Moves whose quantized target equals the last one are dropped.

Feed modes:
    Chosen by :mod:`lathe_control.gcode.feed_modes` from the instruction
    kind and which axes move.  Linear feeds are inches/minute (``g94``);
    inverse-time feeds (``g93``) are 1 / minutes for the move.

Spindle wrap:
    ``SpindleWrap`` re-bases the carried angle into [-180, 180) with a
    ``g92 c`` offset; nothing is written when it is already in range.
"""

from __future__ import annotations

import logging
import math
from io import StringIO
from pathlib import Path
from typing import Iterable

from lathe_control.configs.loader import MachineConfig
from lathe_control.gcode import feed_modes
from lathe_control.gcode.feed_modes import FeedDecision, Kind, Mode
from lathe_control.job_ir.instructions import (
    Comment,
    Instruction,
    MoveXZ,
    MoveXZC,
    MoveXZCFast,
    MoveXZCRpm,
    MoveXZCVelocity,
    MoveXZFast,
    MoveXZVelocity,
    SpindleWrap,
    Turn,
)
from lathe_control.utils.fs import atomic_write_text

logger = logging.getLogger(__name__)

PROGRAM_EXTENSION = "ngc"

_KINDS: dict[type, Kind] = {
    MoveXZFast: Kind.XZ_FAST,
    MoveXZVelocity: Kind.XZ_VELOCITY,
    MoveXZCFast: Kind.XZC_FAST,
    MoveXZCVelocity: Kind.XZC_VELOCITY,
    MoveXZCRpm: Kind.XZC_RPM,
    Turn: Kind.TURN,
}


class GCodeError(Exception):
    """Raised when an instruction cannot be compiled (producer bug)."""

    pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _num(value: float, places: int) -> str:
    """Fixed-point text; a value that rounds to zero prints without a sign."""
    text = f"{value:.{places}f}"
    if float(text) == 0.0:
        return f"{0.0:.{places}f}"
    return text


def _lin(value: float) -> str:
    return _num(value, 5)


def _ang(value: float) -> str:
    return _num(value, 2)


class Quantizer:
    """Round-trip between real coordinates and controller steps.

    Parameters
    ----------
    steps_per_inch : int
        Linear axis resolution.
    steps_per_rotation : int
        Spindle resolution.
    """

    def __init__(self, steps_per_inch: int, steps_per_rotation: int) -> None:
        if steps_per_inch <= 0 or steps_per_rotation <= 0:
            raise ValueError(
                f"Step counts must be positive, got {steps_per_inch}, {steps_per_rotation}"
            )
        self.steps_per_inch = steps_per_inch
        self.steps_per_rotation = steps_per_rotation

    def linear_steps(self, value: float) -> int:
        return math.floor(value * self.steps_per_inch + 0.5)

    def angle_steps(self, degrees: float) -> int:
        return math.floor(degrees / 360.0 * self.steps_per_rotation + 0.5)

    def linear_value(self, steps: int) -> float:
        return steps / self.steps_per_inch

    def angle_value(self, steps: int) -> float:
        return steps * 360.0 / self.steps_per_rotation

    def wrap_steps(self, steps: int) -> int:
        """Equivalent spindle position in [-half, half) of a rotation."""
        rev = self.steps_per_rotation
        half = rev / 2.0
        while steps >= half:
            steps -= rev
        while steps < -half:
            steps += rev
        return steps


# ---------------------------------------------------------------------------
# Compiler
# ---------------------------------------------------------------------------


class GCodeCompiler:
    """Convert motion instructions to G-code.

    Parameters
    ----------
    config : MachineConfig
        Validated machine configuration; supplies the step resolution, the
        feeds and the inverse-time cap.
    """

    def __init__(self, config: MachineConfig) -> None:
        self._cfg = config
        self._q = Quantizer(
            config.hardware.steps_per_inch, config.hardware.steps_per_rotation,
        )
        self._max_inverse = config.hardware.max_inverse_feed
        self._reset_state()

    @property
    def quantizer(self) -> Quantizer:
        return self._q

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def compile(self, instructions: Iterable[Instruction]) -> str:
        """Compile a complete program.

        Parameters
        ----------
        instructions : Iterable[Instruction]
            Instructions in execution order, usually a ``MotionList``.

        Returns
        -------
        str
            Program text including header and footer.

        Raises
        ------
        GCodeError
            If an instruction has a non-finite coordinate or a three-axis
            instruction has no spindle angle.
        """
        buf = StringIO()
        self._reset_state()
        self._write_header(buf)

        count = 0
        for inst in instructions:
            self._compile_one(inst, buf)
            count += 1

        self._write_footer(buf)
        text = buf.getvalue()
        logger.info(
            "Compiled %d instructions into %d lines", count, text.count("\n"),
        )
        return text

    # ------------------------------------------------------------------
    # Internal: per-instruction dispatch
    # ------------------------------------------------------------------

    def _reset_state(self) -> None:
        self._last_x = 0
        self._last_z = 0
        self._last_c = 0
        self._first_point = True

    def _compile_one(self, inst: Instruction, buf: StringIO) -> None:
        if isinstance(inst, Comment):
            buf.write(f"; {inst.text}\n")
        elif isinstance(inst, SpindleWrap):
            self._gen_wrap(buf)
        elif type(inst) in _KINDS:
            self._gen_motion(inst, _KINDS[type(inst)], buf)
        else:
            logger.warning("Unsupported instruction: %s", type(inst).__name__)

    def _targets(self, inst: Instruction, kind: Kind) -> tuple[int, int, int]:
        """Quantized (x, z, c) target; axes the kind does not command keep their last value."""
        name = type(inst).__name__
        x_steps, z_steps, c_steps = self._last_x, self._last_z, self._last_c

        if kind.uses_linear:
            for axis in ("x", "z"):
                v = getattr(inst, axis)
                if v is None or not math.isfinite(v):
                    raise GCodeError(f"{name} has a non-finite {axis}: {v!r}")
            x_steps = self._q.linear_steps(inst.x)
            z_steps = self._q.linear_steps(inst.z)

        if kind.uses_spindle:
            c = getattr(inst, "c", None)
            if c is None:
                raise GCodeError(f"{name} has no spindle angle")
            if not math.isfinite(c):
                raise GCodeError(f"{name} has a non-finite c: {c!r}")
            c_steps = self._q.angle_steps(c)
        return x_steps, z_steps, c_steps

    def _gen_motion(self, inst: Instruction, kind: Kind, buf: StringIO) -> None:
        x_steps, z_steps, c_steps = self._targets(inst, kind)
        linear_moved = (x_steps, z_steps) != (self._last_x, self._last_z)
        spindle_moved = c_steps != self._last_c

        decision = feed_modes.decide(kind, linear_moved, spindle_moved, self._first_point)
        if not decision.emits:
            logger.debug("Skipped %s: no movement", type(inst).__name__)
            return

        spi = self._q.steps_per_inch
        spr = self._q.steps_per_rotation
        rate = feed_modes.feed_rate(
            decision.rate,
            self._cfg.feed,
            dx=abs(x_steps - self._last_x) / spi,
            dz=abs(z_steps - self._last_z) / spi,
            dc=abs(c_steps - self._last_c) / spr,
            max_inverse=self._max_inverse,
        )
        buf.write(self._format_line(decision, x_steps, z_steps, c_steps, rate))

        if kind.uses_linear:
            self._last_x, self._last_z = x_steps, z_steps
            self._first_point = False
        if kind.uses_spindle:
            self._last_c = c_steps

    def _format_line(
        self,
        decision: FeedDecision,
        x_steps: int,
        z_steps: int,
        c_steps: int,
        rate: float | None,
    ) -> str:
        words = {
            Mode.LINEAR: ["g94", "g1"],
            Mode.INVERSE_TIME: ["g93", "g1"],
            Mode.RAPID: ["g0"],
        }[decision.mode]
        values = {
            "x": _lin(self._q.linear_value(x_steps)),
            "z": _lin(self._q.linear_value(z_steps)),
            "c": _ang(self._q.angle_value(c_steps)),
        }
        words.extend(f"{axis}{values[axis]}" for axis in decision.axes)
        if rate is not None:
            words.append(f"f{_ang(rate)}")
        return " ".join(words) + "\n"

    def _gen_wrap(self, buf: StringIO) -> None:
        wrapped = self._q.wrap_steps(self._last_c)
        if wrapped == self._last_c:
            return
        buf.write(f"g92 c{_ang(self._q.angle_value(wrapped))}\n")
        self._last_c = wrapped

    # ------------------------------------------------------------------
    # Header / footer
    # ------------------------------------------------------------------

    def _write_header(self, buf: StringIO) -> None:
        buf.write("; g-code generated by lathe_control\n")
        if self._cfg.output.program_comment:
            buf.write(f"; {self._cfg.output.program_comment}\n")
        buf.write("g20 (units are inches)\n")
        buf.write("g90 (absolute distance mode)\n")

    def _write_footer(self, buf: StringIO) -> None:
        buf.write("g92.1 (clear offsets)\n")
        buf.write("m2 (end of program)\n")


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def program_path(path: str | Path, extension: str = PROGRAM_EXTENSION) -> Path:
    """*path* with the program extension appended unless it already has it."""
    path = Path(path)
    suffix = "." + extension.lstrip(".")
    if path.suffix.lower() != suffix.lower():
        path = path.with_name(path.name + suffix)
    return path


def write_program(
    path: str | Path, text: str, extension: str = PROGRAM_EXTENSION,
) -> Path:
    """Write *text* atomically to *path* (extension forced); return the final path.

    Raises
    ------
    RuntimeError
        If the write fails; no partial file is left behind.
    """
    target = program_path(path, extension)
    atomic_write_text(target, text)
    logger.info("Wrote %s", target)
    return target
