"""Tests for logging configuration."""

import logging

import structlog

from scanboard.logging import setup_logging


class TestSetupLogging:
    def test_explicit_level(self):
        setup_logging("debug", "console")
        assert logging.getLogger("scanboard").level == logging.DEBUG

    def test_environment_level(self, monkeypatch):
        monkeypatch.setenv("SCANBOARD_LOG_LEVEL", "error")
        setup_logging()
        assert logging.getLogger("scanboard").level == logging.ERROR

    def test_json_renderer_writes_to_stderr(self, capsys):
        setup_logging("INFO", "json")
        structlog.get_logger("scanboard.test").info("test.event", key="value")
        captured = capsys.readouterr()
        assert captured.out == ""
        assert '"event": "test.event"' in captured.err
        assert '"key": "value"' in captured.err
