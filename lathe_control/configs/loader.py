"""Configuration loader for lathe control.

Loads and validates ``machine.yaml`` into typed, frozen dataclasses.
Controller resolution, feed limits and outline defaults come from the
config; the G-code compiler and the job runner read nothing else.

Linear values are **inches**, linear feeds **inches/minute**, spindle
speeds **rotations/minute**.

Usage::

    from lathe_control.configs.loader import load_config
    cfg = load_config()                       # default path
    cfg = load_config("/custom/machine.yaml") # explicit path
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from lathe_control.utils.fs import load_yaml

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HardwareConfig:
    """Controller resolution.

    ``steps_per_inch`` is motor steps × microsteps × lead-screw threads per
    inch; ``steps_per_rotation`` is motor steps × microsteps × the spindle
    worm ratio.
    """

    steps_per_inch: int
    steps_per_rotation: int
    max_instructions_per_second: int

    @property
    def max_inverse_feed(self) -> float:
        """Highest inverse-time feed (moves/minute) the controller keeps up with."""
        return 60.0 * self.max_instructions_per_second


@dataclass(frozen=True)
class FeedConfig:
    """Cruise and limit feeds.

    ``velocity`` / ``max_velocity`` / ``min_velocity`` are inches/minute;
    ``rpm`` / ``max_rpm`` / ``min_rpm`` are spindle rotations/minute.
    """

    velocity: float
    rpm: float
    max_velocity: float
    max_rpm: float
    min_velocity: float
    min_rpm: float

    def with_overrides(
        self, velocity: float | None = None, rpm: float | None = None,
    ) -> FeedConfig:
        """Copy with cruise values replaced and clamped into the limits."""
        new = self
        if velocity is not None:
            v = min(max(float(velocity), self.min_velocity), self.max_velocity)
            if v != velocity:
                logger.warning("Velocity %.3f clamped to %.3f", velocity, v)
            new = dataclasses.replace(new, velocity=v)
        if rpm is not None:
            r = min(max(float(rpm), self.min_rpm), self.max_rpm)
            if r != rpm:
                logger.warning("RPM %.3f clamped to %.3f", rpm, r)
            new = dataclasses.replace(new, rpm=r)
        return new


@dataclass(frozen=True)
class OutlineDefaults:
    """Defaults for outlines that do not set their own values (inches)."""

    thickness: float
    resolution: float
    min_resolution: float


@dataclass(frozen=True)
class OutputConfig:
    """Where and how programs are written."""

    directory: str
    extension: str
    program_comment: str = ""


@dataclass(frozen=True)
class LoggingSettings:
    """Defaults for :func:`lathe_control.utils.logging_config.setup_logging`."""

    level: str = "INFO"
    file: str | None = None
    json: bool = False


@dataclass(frozen=True)
class MachineConfig:
    """Complete machine configuration loaded from ``machine.yaml``."""

    hardware: HardwareConfig
    feed: FeedConfig
    outline: OutlineDefaults
    output: OutputConfig
    logging: LoggingSettings

    def with_feed(
        self, velocity: float | None = None, rpm: float | None = None,
    ) -> MachineConfig:
        """Copy with the cruise feeds overridden (see :meth:`FeedConfig.with_overrides`)."""
        return dataclasses.replace(
            self, feed=self.feed.with_overrides(velocity=velocity, rpm=rpm),
        )


# ---------------------------------------------------------------------------
# Internal parsing helpers
# ---------------------------------------------------------------------------


def _parse_hardware(data: dict[str, Any]) -> HardwareConfig:
    """Parse the ``hardware`` section."""
    return HardwareConfig(
        steps_per_inch=int(data["steps_per_inch"]),
        steps_per_rotation=int(data["steps_per_rotation"]),
        max_instructions_per_second=int(data["max_instructions_per_second"]),
    )


def _parse_feed(data: dict[str, Any]) -> FeedConfig:
    """Parse the ``feed`` section."""
    return FeedConfig(
        velocity=float(data["velocity"]),
        rpm=float(data["rpm"]),
        max_velocity=float(data["max_velocity"]),
        max_rpm=float(data["max_rpm"]),
        min_velocity=float(data.get("min_velocity", 0.1)),
        min_rpm=float(data.get("min_rpm", 0.1)),
    )


def _parse_logging(data: dict[str, Any] | None) -> LoggingSettings:
    """Parse the optional ``logging`` section."""
    if not data:
        return LoggingSettings()
    log_file = data.get("file")
    return LoggingSettings(
        level=str(data.get("level", "INFO")).upper(),
        file=str(log_file) if log_file else None,
        json=bool(data.get("json", False)),
    )


def _validate_config(cfg: MachineConfig) -> None:
    """Validate cross-field consistency.

    Raises
    ------
    ConfigError
        On any invalid combination.
    """
    # -- Controller resolution ----------------------------------------------
    hw = cfg.hardware
    if hw.steps_per_inch <= 0:
        raise ConfigError(f"steps_per_inch must be positive, got {hw.steps_per_inch}")
    if hw.steps_per_rotation <= 0:
        raise ConfigError(
            f"steps_per_rotation must be positive, got {hw.steps_per_rotation}"
        )
    if hw.max_instructions_per_second <= 0:
        raise ConfigError(
            f"max_instructions_per_second must be positive, "
            f"got {hw.max_instructions_per_second}"
        )
    if hw.steps_per_rotation % 2:
        logger.warning(
            "Odd steps_per_rotation (%d): spindle wrap cannot land on exactly 180 degrees",
            hw.steps_per_rotation,
        )

    # -- Feed limits ordered -------------------------------------------------
    f = cfg.feed
    if not (0.0 < f.min_velocity <= f.velocity <= f.max_velocity):
        raise ConfigError(
            f"Feed velocities must satisfy 0 < min <= cruise <= max, got "
            f"min={f.min_velocity}, cruise={f.velocity}, max={f.max_velocity}"
        )
    if not (0.0 < f.min_rpm <= f.rpm <= f.max_rpm):
        raise ConfigError(
            f"Spindle speeds must satisfy 0 < min <= cruise <= max, got "
            f"min={f.min_rpm}, cruise={f.rpm}, max={f.max_rpm}"
        )

    # -- Outline defaults ----------------------------------------------------
    o = cfg.outline
    if o.min_resolution <= 0.0:
        raise ConfigError(f"min_resolution must be positive, got {o.min_resolution}")
    if o.resolution < o.min_resolution:
        raise ConfigError(
            f"Outline resolution {o.resolution} is below min_resolution "
            f"{o.min_resolution}"
        )
    if o.thickness < 0.0:
        raise ConfigError(f"Outline thickness must be >= 0, got {o.thickness}")

    # -- Output --------------------------------------------------------------
    if not cfg.output.extension:
        raise ConfigError("output.extension must not be empty")

    # -- Logging -------------------------------------------------------------
    if cfg.logging.level not in _LOG_LEVELS:
        raise ConfigError(
            f"Unknown logging level '{cfg.logging.level}'. Expected one of {_LOG_LEVELS}"
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> MachineConfig:
    """Load and validate machine configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``machine.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    MachineConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "machine.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")

    try:
        hardware = _parse_hardware(data["hardware"])
        feed = _parse_feed(data["feed"])

        od = data["outline"]
        outline = OutlineDefaults(
            thickness=float(od.get("thickness", 0.1)),
            resolution=float(od.get("resolution", 0.01)),
            min_resolution=float(od.get("min_resolution", 0.001)),
        )

        out = data["output"]
        output = OutputConfig(
            directory=str(out["directory"]),
            extension=str(out.get("extension", "ngc")).lstrip("."),
            program_comment=str(out.get("program_comment", "") or ""),
        )

        config = MachineConfig(
            hardware=hardware,
            feed=feed,
            outline=outline,
            output=output,
            logging=_parse_logging(data.get("logging")),
        )

        _validate_config(config)
        logger.info("Configuration loaded successfully")
        return config

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError, AttributeError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc
