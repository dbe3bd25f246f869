"""Tests for logging setup."""

import logging

import pytest

from offline_videos.config import Settings
from offline_videos.utils.logging import QUIET_LOGGERS, LogContext, get_logger, setup_logging


class TestSetupLogging:
    """Tests for setup_logging and the log level setting."""

    def test_log_level_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        assert Settings().log_level == "DEBUG"

    def test_invalid_log_level_rejected(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")
        with pytest.raises(ValueError):
            Settings()

    def test_third_party_loggers_quieted(self):
        setup_logging("debug")

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level >= logging.WARNING


class TestLogContext:
    """Tests for context-prefixed log messages."""

    def test_prefix(self, caplog):
        log = LogContext(get_logger("offline_videos.test"), video="1", url="http://example.com/video1.mp4")

        with caplog.at_level(logging.INFO, logger="offline_videos.test"):
            log.info("Serving from store")

        assert caplog.messages == [
            "[video=1] [url=http://example.com/video1.mp4] Serving from store"
        ]

    def test_respects_logger_level(self, caplog):
        log = LogContext(get_logger("offline_videos.test"), video="2")

        with caplog.at_level(logging.INFO, logger="offline_videos.test"):
            log.debug("Not stored")

        assert caplog.messages == []
