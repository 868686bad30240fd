#!/usr/bin/env python3
"""
Generate G-code from a job file.

Usage:
    python -m lathe_control.scripts.generate_gcode --file bowl.yaml
    python -m lathe_control.scripts.generate_gcode -f bowl.yaml -o out/bowl.ngc
    python -m lathe_control.scripts.generate_gcode -f bowl.yaml --dry-run

Exit codes:
    0  program generated
    1  configuration or job file invalid
    2  an operation cannot be cut, or compilation failed
    3  the program could not be written
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from lathe_control.configs.loader import ConfigError, load_config
from lathe_control.gcode.compiler import GCodeError
from lathe_control.jobs.runner import run_job
from lathe_control.strategies.common import StrategyError
from lathe_control.utils.logging_config import install_excepthook, push_context, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate lathe G-code from a job file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--file",
        "-f",
        type=str,
        required=True,
        help="Job file (YAML format)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Machine configuration file path",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Program path (overrides the job file)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Generate G-code and print it instead of writing",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default from the machine configuration)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        setup_logging(args.log_level or "INFO", context={"app": "gcode"})
        logger.error("Error loading config: %s", e)
        return 1

    setup_logging(
        args.log_level or config.logging.level,
        config.logging.file,
        json=config.logging.json,
        context={"app": "gcode"},
    )
    install_excepthook()
    push_context(job=Path(args.file).stem)

    try:
        result = run_job(args.file, config, output=args.output, dry_run=args.dry_run)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Invalid job: %s", e)
        return 1
    except (StrategyError, GCodeError) as e:
        logger.error("Cannot generate %s: %s", args.file, e)
        return 2
    except RuntimeError as e:
        logger.error("%s", e)
        return 3

    if args.dry_run:
        sys.stdout.write(result.program)
    else:
        logger.info(
            "%s: %d instructions, %d lines -> %s",
            result.name, result.instruction_count, result.line_count, result.path,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
