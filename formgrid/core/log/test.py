"""Tests for core logging module."""

import logging
from io import StringIO

import pytest

from .lib import get_logger, resolve_level, setup_logging


@pytest.fixture
def restore_root_logging():
    """Put the root logger back the way pytest configured it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    """Tests for level resolution."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "level,expected",
        [
            (logging.DEBUG, logging.DEBUG),
            ("warning", logging.WARNING),
            ("ERROR", logging.ERROR),
            ("not-a-level", logging.INFO),
        ],
    )
    def test_names_and_numbers(self, level, expected):
        """Names are case-insensitive; unknown names fall back to INFO."""
        assert resolve_level(level) == expected

    @pytest.mark.unit
    def test_default_from_environment(self, monkeypatch):
        """Without a level, FORMGRID_LOG_LEVEL decides."""
        monkeypatch.setenv("FORMGRID_LOG_LEVEL", "debug")
        assert resolve_level(None) == logging.DEBUG


class TestLogging:
    """Tests for logger setup."""

    @pytest.mark.unit
    def test_get_logger(self):
        """Named loggers are returned as-is."""
        logger = get_logger("test")
        assert logger.name == "test"
        assert isinstance(logger, logging.Logger)

    @pytest.mark.unit
    def test_get_logger_default_name(self):
        """The default logger is the package logger."""
        assert get_logger().name == "formgrid"

    @pytest.mark.unit
    def test_setup_logging_writes_format(self, restore_root_logging):
        """Records reach the stream in the standard format."""
        stream = StringIO()
        setup_logging(level="info", stream=stream)
        get_logger("formgrid.test").info("hello")
        assert " - formgrid.test - INFO - hello" in stream.getvalue()
