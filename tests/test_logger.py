"""Tests for bridge_e2e.utils.logger."""

from __future__ import annotations

import pathlib

import pytest

from bridge_e2e.utils import logger


@pytest.fixture(autouse=True)
def fresh_buffer() -> None:
    logger.set_task_id("0")
    logger.clear_log_buffer()


class TestLogger:
    def test_line_carries_task_and_context(self) -> None:
        logger.set_task_id("42")
        logger.create_logger("Registry").info("Monitoring route")
        line = logger.get_log_buffer()[-1]
        assert "[TaskID: 42]" in line
        assert "[Registry]" in line
        assert "Monitoring route" in line

    def test_buffer_is_ansi_stripped(self) -> None:
        logger.create_logger("X").warn("careful", {"count": 2, "ok": True})
        line = logger.get_log_buffer()[-1]
        assert "\033[" not in line
        assert "count=2" in line
        assert "ok=True" in line

    def test_timer(self) -> None:
        log = logger.create_logger("Timer")
        log.start_timer("stage")
        duration = log.end_timer("stage", "Stage done")
        assert duration >= 0
        assert "Stage done" in logger.get_log_buffer()[-1]

    def test_unknown_timer_warns(self) -> None:
        assert logger.create_logger("Timer").end_timer("never-started") == 0.0
        assert 'Timer "never-started" was not started' in logger.get_log_buffer()[-1]

    def test_section(self) -> None:
        logger.create_logger("X").section("Bridge Operation")
        assert any("Bridge Operation" in line for line in logger.get_log_buffer())


class TestLogFile:
    def test_disabled_by_default(self, monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> None:
        monkeypatch.delenv("WRITE_TO_FILE", raising=False)
        assert logger.start_log_file("1", tmp_path) is None

    def test_writes_stripped_lines(self, monkeypatch: pytest.MonkeyPatch, tmp_path: pathlib.Path) -> None:
        monkeypatch.setenv("WRITE_TO_FILE", "true")
        path = logger.start_log_file("task/7", tmp_path)
        assert path is not None
        assert pathlib.Path(path).name.startswith("bridge-task_7_")
        try:
            logger.create_logger("File").error("route failed")
        finally:
            logger.end_log_file()

        content = pathlib.Path(path).read_text(encoding="utf-8")
        assert "Bridge Run Log - task task/7" in content
        assert "route failed" in content
        assert "\033[" not in content
