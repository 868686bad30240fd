"""Test logging setup.

Tests for lathe_control.utils.logging_config:
    - Repeated setup_logging calls replace handlers instead of stacking
    - JSON and human formats carry the contextual fields
    - push_context / pop_context
    - File rotation modes

Run:
    pytest tests/test_logging_config.py -v
"""

import json
import logging
import logging.handlers
import sys

import pytest

from lathe_control.utils import logging_config


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    logging_config.pop_context()
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)
    logging_config.pop_context()
    logging.captureWarnings(False)


def _file_logging(log_path, **kwargs):
    return logging_config.setup_logging(
        log_level="INFO", log_file=str(log_path), to_stderr=False, **kwargs,
    )


# ============================================================================
# SETUP
# ============================================================================

def test_logging_idempotency(tmp_path):
    """Test logging file output and idempotency."""
    log_path = tmp_path / "gcode.log"

    _file_logging(log_path, json=True, context={"app": "gcode"})
    logger = logging_config.get_logger("lathe_control.test")
    logger.info("hello")

    _file_logging(log_path, json=True, context={"app": "gcode"})
    logger.info("world")

    lines = log_path.read_text().strip().splitlines()
    assert len(lines) == 2

    rec = json.loads(lines[0])
    assert rec["msg"] == "hello"
    assert rec["lvl"] == "INFO"
    assert rec["name"] == "lathe_control.test"
    assert rec.get("app") == "gcode"


def test_handlers_returned(tmp_path):
    """Test console and file handlers are both installed."""
    result = logging_config.setup_logging(log_file=str(tmp_path / "a.log"))
    kinds = [type(h) for h in result["handlers"]]
    assert logging.StreamHandler in kinds
    assert logging.FileHandler in kinds


def test_level_filtering(tmp_path):
    """Test records below the configured level are dropped."""
    log_path = tmp_path / "gcode.log"
    logging_config.setup_logging(log_level="WARNING", log_file=str(log_path), to_stderr=False)
    logger = logging_config.get_logger("lathe_control.test")
    logger.info("skipped")
    logger.warning("kept")
    logging_config.set_level("DEBUG")
    logger.debug("now visible")

    text = log_path.read_text()
    assert "skipped" not in text
    assert "kept" in text
    assert "now visible" in text


# ============================================================================
# CONTEXT
# ============================================================================

def test_human_format_context(tmp_path):
    """Test the human format shows context fields before the message."""
    log_path = tmp_path / "gcode.log"
    _file_logging(log_path, context={"app": "gcode"})
    logging_config.push_context(job="bowl")
    logging_config.get_logger("lathe_control.test").info("Wrote bowl.ngc")

    line = log_path.read_text().strip()
    assert "| INFO     |" in line
    assert line.endswith("| app=gcode job=bowl | Wrote bowl.ngc")


def test_pop_context(tmp_path):
    """Test pop_context removes only the named keys."""
    log_path = tmp_path / "gcode.log"
    _file_logging(log_path, json=True, context={"app": "gcode"})
    logging_config.push_context(job="bowl", operation="thread")
    logging_config.pop_context(keys=["operation", "unknown"])
    logging_config.get_logger("lathe_control.test").info("x")

    rec = json.loads(log_path.read_text().strip())
    assert rec["job"] == "bowl"
    assert "operation" not in rec


def test_excepthook_logs_critical(tmp_path, monkeypatch):
    """Test uncaught exceptions are logged instead of printed."""
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    log_path = tmp_path / "gcode.log"
    _file_logging(log_path, json=True)
    logging_config.install_excepthook()

    err = RuntimeError("disk full")
    sys.excepthook(RuntimeError, err, err.__traceback__)

    rec = json.loads(log_path.read_text().strip().splitlines()[0])
    assert rec["lvl"] == "CRITICAL"
    assert rec["msg"] == "Uncaught exception"
    assert "RuntimeError: disk full" in rec["exc"]


def test_exception_in_json(tmp_path):
    """Test exc_info is serialised."""
    log_path = tmp_path / "gcode.log"
    _file_logging(log_path, json=True)
    try:
        raise ValueError("bad job")
    except ValueError:
        logging_config.get_logger("lathe_control.test").exception("failed")

    rec = json.loads(log_path.read_text().strip().splitlines()[0])
    assert "ValueError: bad job" in rec["exc"]


# ============================================================================
# FILE HANDLERS
# ============================================================================

def test_rotating_file_handler(tmp_path):
    """Test size and time rotation pick the matching handler."""
    size = _file_logging(tmp_path / "s.log", rotate={"mode": "size", "max_bytes": 1000})
    assert isinstance(size["handlers"][0], logging.handlers.RotatingFileHandler)

    timed = _file_logging(tmp_path / "t.log", rotate={"mode": "time", "when": "H"})
    assert isinstance(timed["handlers"][0], logging.handlers.TimedRotatingFileHandler)


def test_rotation_mode_rejected(tmp_path):
    """Test an unknown rotation mode raises ValueError."""
    with pytest.raises(ValueError, match="rotation mode"):
        _file_logging(tmp_path / "x.log", rotate={"mode": "weekly"})


def test_formatter_mode_rejected():
    """Test an unknown format mode raises ValueError."""
    with pytest.raises(ValueError, match="format mode"):
        logging_config.ContextFormatter("xml")
