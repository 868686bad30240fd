"""Machine configuration loading and validation."""

from lathe_control.configs.loader import (
    ConfigError,
    FeedConfig,
    HardwareConfig,
    LoggingSettings,
    MachineConfig,
    OutlineDefaults,
    OutputConfig,
    load_config,
)

__all__ = [
    "ConfigError",
    "FeedConfig",
    "HardwareConfig",
    "LoggingSettings",
    "MachineConfig",
    "OutlineDefaults",
    "OutputConfig",
    "load_config",
]
