"""Job files: schema validation and the generate-and-write runner."""

from lathe_control.jobs.runner import GenerationResult, generate, output_path, run_job
from lathe_control.jobs.schema import JobV1, load_job

__all__ = [
    "GenerationResult",
    "JobV1",
    "generate",
    "load_job",
    "output_path",
    "run_job",
]
