"""Tests for logging setup."""

import logging
from unittest.mock import MagicMock

import pytest
import structlog

from herald.logging_config import LOGGER_PREFIX, SUBSYSTEMS, setup_logging


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield
    for name in (LOGGER_PREFIX, *(f"{LOGGER_PREFIX}.{s}" for s in SUBSYSTEMS)):
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
    for handler in root.handlers:
        if handler not in saved_handlers:
            handler.close()
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
    structlog.reset_defaults()


def _config(tmp_path, **overrides):
    config = MagicMock()
    config.log_dir = tmp_path / "logs"
    config.logging_level = overrides.get("level", "INFO")
    config.logging_subsystem_levels = overrides.get("subsystem_levels", {})
    config.logging_max_file_size_mb = 1
    config.logging_backup_count = 1
    return config


def test_creates_subsystem_log_files(tmp_path):
    setup_logging(_config(tmp_path))
    log_dir = tmp_path / "logs"
    logging.getLogger("herald.dispatch").warning("dispatch event")
    expected = {"herald.log"} | {f"{s}.log" for s in SUBSYSTEMS}
    assert expected <= {p.name for p in log_dir.iterdir()}
    assert "dispatch event" in (log_dir / "dispatch.log").read_text()
    assert "dispatch event" in (log_dir / "herald.log").read_text()


def test_structlog_events_written_as_plain_text(tmp_path):
    setup_logging(_config(tmp_path))
    structlog.get_logger("herald.dispatch").warning("command_registered_twice", command="x")
    text = (tmp_path / "logs" / "dispatch.log").read_text()
    assert "command_registered_twice" in text
    assert "command=x" in text
    assert "herald.dispatch" in text
    assert "\x1b[" not in text
    assert "_record" not in text
    assert "_from_structlog" not in text
    assert text.count("warning") == 1
    assert len(text.splitlines()) == 1


def test_stdlib_records_written_once_per_line(tmp_path):
    setup_logging(_config(tmp_path))
    logging.getLogger("herald.chat").error("adapter gone")
    text = (tmp_path / "logs" / "chat.log").read_text()
    assert "adapter gone" in text
    assert "\x1b[" not in text
    assert "_record" not in text
    assert text.count("error") == 1


def test_subsystem_level_override(tmp_path):
    setup_logging(_config(tmp_path, level="WARNING", subsystem_levels={"dispatch": "debug"}))
    assert logging.getLogger("herald.dispatch").level == logging.DEBUG
    assert logging.getLogger("herald.chat").level == logging.WARNING


def test_unwritable_log_dir_falls_back_to_console(tmp_path, capsys):
    blocker = tmp_path / "logs"
    blocker.write_text("not a directory")
    setup_logging(_config(tmp_path))
    assert "Falling back to console-only logging" in capsys.readouterr().err
    assert logging.getLogger(LOGGER_PREFIX).handlers == []
    assert len(logging.getLogger().handlers) == 1
