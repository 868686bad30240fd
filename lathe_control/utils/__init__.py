"""Shared utilities: atomic file output, YAML loading, logging setup."""

from lathe_control.utils import fs, logging_config

__all__ = ["fs", "logging_config"]
