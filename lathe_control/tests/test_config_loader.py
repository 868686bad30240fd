"""Tests for machine configuration loading and validation."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pytest
import yaml

from lathe_control.configs.loader import (
    ConfigError,
    LoggingSettings,
    MachineConfig,
    load_config,
)

DEFAULT_YAML = Path(__file__).resolve().parents[1] / "configs" / "machine.yaml"


@pytest.fixture()
def raw() -> dict[str, Any]:
    with open(DEFAULT_YAML, encoding="utf-8") as f:
        return yaml.safe_load(f)


def write_config(tmp_path: Path, data: Any) -> Path:
    path = tmp_path / "machine.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Default config
# ---------------------------------------------------------------------------


class TestDefaults:
    def test_loads(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, MachineConfig)
        assert cfg.hardware.steps_per_inch == 4000
        assert cfg.hardware.steps_per_rotation == 2600
        assert cfg.hardware.max_inverse_feed == 6000.0
        assert cfg.feed.velocity == 4.0
        assert cfg.output.extension == "ngc"
        assert cfg.logging.level == "INFO"

    def test_is_frozen(self) -> None:
        cfg = load_config()
        with pytest.raises(AttributeError):
            cfg.feed.rpm = 5.0  # type: ignore[misc]

    def test_explicit_path(self, tmp_path: Path, raw: dict) -> None:
        raw["output"]["extension"] = ".tap"
        raw["output"]["program_comment"] = None
        cfg = load_config(write_config(tmp_path, raw))
        assert cfg.output.extension == "tap"
        assert cfg.output.program_comment == ""

    def test_optional_sections(self, tmp_path: Path, raw: dict) -> None:
        del raw["logging"]
        del raw["feed"]["min_rpm"]
        raw["outline"] = {}
        cfg = load_config(write_config(tmp_path, raw))
        assert cfg.logging == LoggingSettings()
        assert cfg.feed.min_rpm == 0.1
        assert cfg.outline.resolution == 0.01


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestValidation:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "machine.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(ConfigError, match="Empty"):
            load_config(path)

    def test_missing_key(self, tmp_path: Path, raw: dict) -> None:
        del raw["hardware"]["steps_per_inch"]
        with pytest.raises(ConfigError, match="Missing required configuration key"):
            load_config(write_config(tmp_path, raw))

    def test_bad_value(self, tmp_path: Path, raw: dict) -> None:
        raw["hardware"]["steps_per_rotation"] = "lots"
        with pytest.raises(ConfigError, match="Invalid configuration value"):
            load_config(write_config(tmp_path, raw))

    @pytest.mark.parametrize(
        ("section", "key", "value", "message"),
        [
            ("hardware", "steps_per_inch", 0, "steps_per_inch"),
            ("hardware", "max_instructions_per_second", -1, "max_instructions"),
            ("feed", "velocity", 20.0, "Feed velocities"),
            ("feed", "rpm", 0.05, "Spindle speeds"),
            ("outline", "resolution", 0.0005, "min_resolution"),
            ("outline", "thickness", -0.1, "thickness"),
            ("output", "extension", "", "extension"),
            ("logging", "level", "loud", "Unknown logging level"),
        ],
    )
    def test_invalid(
        self, tmp_path: Path, raw: dict, section: str, key: str, value: Any, message: str,
    ) -> None:
        data = copy.deepcopy(raw)
        data[section][key] = value
        with pytest.raises(ConfigError, match=message):
            load_config(write_config(tmp_path, data))

    def test_odd_spindle_steps_allowed(self, tmp_path: Path, raw: dict) -> None:
        raw["hardware"]["steps_per_rotation"] = 2601
        assert load_config(write_config(tmp_path, raw)).hardware.steps_per_rotation == 2601


# ---------------------------------------------------------------------------
# Feed overrides
# ---------------------------------------------------------------------------


class TestFeedOverrides:
    def test_within_limits(self) -> None:
        feed = load_config().feed.with_overrides(velocity=6.0, rpm=2.0)
        assert (feed.velocity, feed.rpm) == (6.0, 2.0)

    def test_clamped(self) -> None:
        feed = load_config().feed.with_overrides(velocity=100.0, rpm=0.0)
        assert feed.velocity == 15.0
        assert feed.rpm == 0.1

    def test_none_keeps_cruise(self) -> None:
        cfg = load_config()
        assert cfg.feed.with_overrides() is cfg.feed

    def test_with_feed_copies(self) -> None:
        cfg = load_config()
        fast = cfg.with_feed(velocity=10.0)
        assert fast.feed.velocity == 10.0
        assert cfg.feed.velocity == 4.0
        assert fast.hardware is cfg.hardware
