"""
Lathe Control Package.

Toolpath and G-code generation for an ornamental lathe: digitized outlines
are turned into cutter paths, cut strategies turn those into motion
instructions, and the compiler writes them as a program for the machine
controller.

Subpackages:
    curves: Point-defined curves, sampling and offsets
    cutters: Cutter frames, locations and tip profiles
    toolpath: Outline and cutter-path geometry
    job_ir: Motion instructions shared by strategies and the compiler
    strategies: Rosette, contour and thread cuts
    gcode: G-code compilation and program output
    configs: Machine configuration loading and validation
    jobs: Job file schema and the generate-and-write runner
    utils: Atomic file output and logging setup
"""

__all__ = [
    "configs",
    "curves",
    "cutters",
    "gcode",
    "job_ir",
    "jobs",
    "strategies",
    "toolpath",
    "utils",
]
