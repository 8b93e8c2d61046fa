#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/unit/test_logging_utils.py
"""Tests for the command line logging setup.

Tests cover:
- Level resolution from names and numbers
- Plain and trace formats
- Trace mode limited to the mdxbridge loggers
- Teeing records to a log file

"""

import logging

import pytest

from mdxbridge.logging_utils import PACKAGE_LOGGER, configure_logging, resolve_log_level


@pytest.fixture(autouse=True)
def restore_logging():
    root_logger = logging.getLogger()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(root_logger.handlers)
    level = root_logger.level
    package_level = package_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    package_logger.setLevel(package_level)


def _record(name, level, message, lineno=1):
    return logging.LogRecord(name, level, __file__, lineno, message, None, None)


@pytest.mark.unit
class TestResolveLogLevel:
    """Tests for translating level names."""

    def test_names_and_numbers(self):
        assert resolve_log_level("debug") == logging.DEBUG
        assert resolve_log_level("WARNING") == logging.WARNING
        assert resolve_log_level(logging.ERROR) == logging.ERROR

    def test_unknown_name(self):
        assert resolve_log_level("chatty") == logging.INFO


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for installing the command line handlers."""

    def test_plain_mode(self):
        package_logger = configure_logging("WARNING")

        assert package_logger.name == PACKAGE_LOGGER
        assert not package_logger.isEnabledFor(logging.INFO)
        (handler,) = logging.getLogger().handlers
        assert handler.level == logging.WARNING
        formatted = handler.format(_record("mdxbridge.frontmatter", logging.WARNING, "Skipped line"))
        assert formatted == "mdxbridge: WARNING: Skipped line"

    def test_trace_mode_opens_package_loggers_only(self):
        configure_logging("WARNING", trace_mode=True)

        assert logging.getLogger("mdxbridge.renderers.markdown").isEnabledFor(logging.DEBUG)
        assert not logging.getLogger("some.library").isEnabledFor(logging.INFO)
        (handler,) = logging.getLogger().handlers
        assert handler.level == logging.DEBUG
        formatted = handler.format(_record("mdxbridge.renderers.markdown", logging.DEBUG, "No transformer", 175))
        assert "[DEBUG] [mdxbridge.renderers.markdown:175] No transformer" in formatted

    def test_plain_mode_after_trace(self):
        configure_logging("INFO", trace_mode=True)
        configure_logging("INFO")
        assert not logging.getLogger("mdxbridge.converter").isEnabledFor(logging.DEBUG)

    def test_log_file(self, tmp_path):
        log_path = tmp_path / "run.log"
        configure_logging("INFO", log_file=str(log_path))

        logging.getLogger("mdxbridge.converter").info("Converted %d blocks", 3)
        for handler in logging.getLogger().handlers:
            handler.flush()

        logged = log_path.read_text(encoding="utf-8")
        assert f"mdxbridge: INFO: Logging to file: {log_path}" in logged
        assert "mdxbridge: INFO: Converted 3 blocks" in logged

    def test_unwritable_log_file_keeps_console(self, tmp_path):
        configure_logging("WARNING", log_file=str(tmp_path / "missing" / "run.log"))
        assert len(logging.getLogger().handlers) == 1
