#!/usr/bin/env python3
"""Tests for the structured logger."""

import logging

import pytest

from pathsfilter.core.logging import LogLevel, Logger, get_logger, set_global_logger


class ListHandler(logging.Handler):
    """Collects formatted messages."""

    def __init__(self):
        super().__init__()
        self.messages = []

    def emit(self, record):
        self.messages.append((record.levelno, record.getMessage()))


@pytest.fixture
def handler():
    return ListHandler()


@pytest.fixture
def logger(handler):
    return Logger("pathsfilter.test_logging", level=LogLevel.DEBUG, handlers=[handler])


class TestLogger:
    """Tests for Logger."""

    def test_levels(self, logger, handler):
        logger.debug("d")
        logger.info("i")
        logger.warning("w")
        logger.error("e")

        assert handler.messages == [
            (logging.DEBUG, "d"),
            (logging.INFO, "i"),
            (logging.WARNING, "w"),
            (logging.ERROR, "e"),
        ]

    def test_level_filtering(self, logger, handler):
        logger.set_level("WARNING")
        logger.info("hidden")
        logger.warning("shown")

        assert handler.messages == [(logging.WARNING, "shown")]
        assert logger.get_level() == LogLevel.WARNING
        assert not logger.is_enabled_for("info")
        assert logger.is_enabled_for(LogLevel.ERROR)

    def test_context_is_appended(self, logger, handler):
        logger.info("Filters loaded", filters=3)
        assert handler.messages == [(logging.INFO, "Filters loaded | filters=3")]

    def test_add_context(self, logger, handler):
        with logger.add_context(filter="src"):
            logger.info("compiled", count=2)
        logger.info("after")

        assert handler.messages[0][1] == "compiled | filter=src count=2"
        assert handler.messages[1][1] == "after"

    def test_group_outside_actions(self, logger, handler, monkeypatch):
        monkeypatch.delenv("GITHUB_ACTIONS", raising=False)

        with logger.group("Filter src = true"):
            logger.info("src/a.py [added]")

        assert [m for _, m in handler.messages] == ["Filter src = true", "src/a.py [added]"]

    def test_group_in_actions(self, logger, handler, monkeypatch):
        monkeypatch.setenv("GITHUB_ACTIONS", "true")

        with logger.group("Filter src = true"):
            logger.info("src/a.py [added]")

        assert [m for _, m in handler.messages] == [
            "::group::Filter src = true",
            "src/a.py [added]",
            "::endgroup::",
        ]

    def test_exception(self, logger, handler):
        try:
            raise ValueError("boom")
        except ValueError as e:
            logger.exception("failed", e)

        level, message = handler.messages[0]
        assert level == logging.ERROR
        assert "exception_type=ValueError" in message
        assert "exception_message=boom" in message

    def test_file_handler(self, logger, temp_dir):
        log_file = temp_dir / "pathsfilter.log"
        file_handler = logger.create_file_handler(log_file)
        logger.add_handler(file_handler)

        logger.info("to file")
        file_handler.close()
        logger.remove_handler(file_handler)

        assert "INFO - to file" in log_file.read_text()


class TestGlobalLogger:
    def test_set_and_get(self):
        logger = Logger("pathsfilter.global")
        set_global_logger(logger)
        assert get_logger("pathsfilter.global") is logger

    def test_get_creates_logger_for_new_name(self):
        set_global_logger(Logger("pathsfilter.one"))
        assert get_logger("pathsfilter.two").name == "pathsfilter.two"
