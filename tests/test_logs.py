"""Tests for log file setup and crash logs."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from gistdrop.logs import (
    LOG_FILENAME,
    configure_logging,
    reset_logging,
    set_log_level,
    write_crash_log,
)


def _flush() -> None:
    for handler in logging.getLogger("gistdrop").handlers:
        handler.flush()


class TestConfigureLogging:
    def test_writes_to_log_file(self, tmp_path: Path) -> None:
        log_path = configure_logging("INFO", tmp_path)
        logging.getLogger("gistdrop.gist").info("Created gist %s", "abc")
        _flush()

        assert log_path == tmp_path / LOG_FILENAME
        text = log_path.read_text(encoding="utf-8")
        assert "INFO" in text
        assert "gistdrop.gist: Created gist abc" in text

    def test_level_filters(self, tmp_path: Path) -> None:
        log_path = configure_logging("WARNING", tmp_path)
        logging.getLogger("gistdrop.auth").info("quiet")
        logging.getLogger("gistdrop.auth").warning("loud")
        _flush()

        text = log_path.read_text(encoding="utf-8")
        assert "quiet" not in text
        assert "loud" in text

    def test_unknown_level_falls_back_to_info(self, tmp_path: Path) -> None:
        configure_logging("CHATTY", tmp_path)
        assert logging.getLogger("gistdrop").level == logging.INFO

    @pytest.mark.parametrize("name", ["BASIC_FORMAT", "WARN", "root", "verbose"])
    def test_non_level_names_fall_back_to_info(self, tmp_path: Path, name: str) -> None:
        configure_logging("ERROR", tmp_path)
        set_log_level(name)
        assert logging.getLogger("gistdrop").level == logging.INFO

    def test_set_log_level_is_case_insensitive(self, tmp_path: Path) -> None:
        configure_logging("INFO", tmp_path)
        set_log_level("debug")
        assert logging.getLogger("gistdrop").level == logging.DEBUG

    def test_reconfigure_replaces_handler(self, tmp_path: Path) -> None:
        configure_logging("INFO", tmp_path / "a")
        configure_logging("INFO", tmp_path / "b")
        file_handlers = [
            h for h in logging.getLogger("gistdrop").handlers
            if isinstance(h, logging.FileHandler)
        ]
        assert len(file_handlers) == 1

    def test_reset(self, tmp_path: Path) -> None:
        configure_logging("INFO", tmp_path)
        reset_logging()
        assert not [
            h for h in logging.getLogger("gistdrop").handlers
            if isinstance(h, logging.FileHandler)
        ]

    def test_default_dir(self, isolated_config: Path) -> None:
        log_path = configure_logging()
        assert log_path == isolated_config / "data" / "gistdrop" / "logs" / LOG_FILENAME


def test_write_crash_log(tmp_path: Path) -> None:
    try:
        raise RuntimeError("kaboom")
    except RuntimeError:
        path = write_crash_log(tmp_path)

    text = Path(path).read_text(encoding="utf-8")
    assert Path(path).name.startswith("crash-")
    assert "RuntimeError: kaboom" in text
