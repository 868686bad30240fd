"""Job runner: job file in, G-code program out.

One generation request runs start to finish on the calling thread:

1. Build the outline and cutter from the validated job.
2. Check every operation against them.  Nothing is compiled if any
   operation cannot be cut.
3. Collect one ``MotionList`` per operation, in job order.
4. Compile them into a single program.
5. Write the program atomically (skipped on a dry run).
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from lathe_control.configs.loader import MachineConfig, load_config
from lathe_control.gcode.compiler import GCodeCompiler, write_program
from lathe_control.job_ir.instructions import MotionList
from lathe_control.jobs.schema import JobV1, load_job

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation request."""

    name: str
    program: str
    motion_lists: list[MotionList] = field(default_factory=list)
    path: Optional[Path] = None

    @property
    def instruction_count(self) -> int:
        return sum(len(ml) for ml in self.motion_lists)

    @property
    def line_count(self) -> int:
        return self.program.count("\n")


def generate(job: JobV1, config: MachineConfig) -> GenerationResult:
    """Compile *job* into program text.

    Raises
    ------
    StrategyError
        If any operation cannot be cut with the job's outline and cutter.
    GCodeError
        If an operation produced an instruction the compiler cannot encode.
    """
    config = config.with_feed(velocity=job.feed.velocity, rpm=job.feed.rpm)
    outline = job.outline.build(config.outline)
    cutter = job.cutter.build()
    coarse_fine = job.coarse_fine.build()
    strategies = [op.to_strategy() for op in job.operations]
    logger.info(
        "Job %s: %d operations, %s, cutter %s",
        job.name, len(strategies), outline, cutter.name,
    )

    for strategy in strategies:
        strategy.check(outline, cutter)

    spr = config.hardware.steps_per_rotation
    motion_lists = []
    for i, strategy in enumerate(strategies):
        ml = strategy.make_instructions(outline, cutter, coarse_fine, spr)
        logger.debug("Operation %d (%s): %d instructions", i, strategy.name, len(ml))
        motion_lists.append(ml)

    program = GCodeCompiler(config).compile(itertools.chain.from_iterable(motion_lists))
    return GenerationResult(name=job.name, program=program, motion_lists=motion_lists)


def output_path(
    job: JobV1,
    config: MachineConfig,
    job_path: Path,
    output: Optional[str | Path] = None,
) -> Path:
    """Where the program goes: *output*, else the job's own setting, else
    ``<output.directory>/<job name>``.  Relative job settings are taken from
    the job file's directory.
    """
    if output is not None:
        return Path(output)
    if job.output is not None:
        target = Path(job.output)
        return target if target.is_absolute() else job_path.parent / target
    return Path(config.output.directory) / job.name


def run_job(
    path: str | Path,
    config: Optional[MachineConfig] = None,
    output: Optional[str | Path] = None,
    dry_run: bool = False,
) -> GenerationResult:
    """Load, generate and write one job file.

    Parameters
    ----------
    path : str | Path
        Job YAML file.
    config : MachineConfig, optional
        Machine configuration; the packaged default when ``None``.
    output : str | Path, optional
        Program path overriding the job's own setting.
    dry_run : bool
        Generate but do not write.

    Returns
    -------
    GenerationResult
        ``path`` is set when the program was written.
    """
    path = Path(path)
    job = load_job(path)
    if config is None:
        config = load_config()

    result = generate(job, config)
    if dry_run:
        logger.info("Dry run: %d lines not written", result.line_count)
        return result

    target = output_path(job, config, path, output)
    result.path = write_program(target, result.program, config.output.extension)
    return result
