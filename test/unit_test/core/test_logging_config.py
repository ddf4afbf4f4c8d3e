"""Unit tests for logging configuration module.

Tests verify that setup_logging configures handlers, formats and module levels
from explicit arguments or from AgentSettings, and that importing the package
does not configure logging by itself.
"""

import logging
from pathlib import Path

import pytest

from bioagents.core.config import AgentSettings
from bioagents.core.logging_config import (
    DETAILED_FORMAT,
    JSON_FORMAT,
    LOG_FILE_NAME,
    MODULE_LOG_LEVELS,
    SIMPLE_FORMAT,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    module_levels = {name: logging.getLogger(name).level for name in MODULE_LOG_LEVELS}
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    for name, lvl in module_levels.items():
        logging.getLogger(name).setLevel(lvl)


@pytest.fixture
def settings(tmp_path: Path) -> AgentSettings:
    return AgentSettings(_env_file=None, log_file_dir=str(tmp_path / "logs"))


def _console_handler() -> logging.Handler:
    return next(
        h
        for h in logging.getLogger().handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    )


class TestSetupLoggingLevels:
    @pytest.mark.parametrize(
        "log_level,expected_level",
        [
            ("DEBUG", logging.DEBUG),
            ("INFO", logging.INFO),
            ("WARNING", logging.WARNING),
            ("error", logging.ERROR),
        ],
    )
    def test_console_level(self, settings, log_level, expected_level):
        setup_logging(log_level=log_level, enable_file=False, settings=settings)
        assert _console_handler().level == expected_level

    def test_level_comes_from_settings_when_not_given(self, tmp_path):
        settings = AgentSettings(_env_file=None, log_level="WARNING")
        setup_logging(enable_file=False, settings=settings)
        assert _console_handler().level == logging.WARNING

    def test_module_levels_applied(self, settings):
        setup_logging(enable_file=False, settings=settings)
        for name, level in MODULE_LOG_LEVELS.items():
            assert logging.getLogger(name).level == logging.getLevelName(level)


class TestSetupLoggingFormats:
    @pytest.mark.parametrize(
        "log_format,expected_format",
        [("simple", SIMPLE_FORMAT), ("detailed", DETAILED_FORMAT), ("json", JSON_FORMAT)],
    )
    def test_formats(self, settings, log_format, expected_format):
        setup_logging(log_format=log_format, enable_file=False, settings=settings)
        assert _console_handler().formatter._fmt == expected_format

    def test_default_is_detailed(self, settings):
        setup_logging(enable_file=False, settings=settings)
        formatter = _console_handler().formatter
        assert formatter._fmt == DETAILED_FORMAT
        assert formatter.datefmt == "%Y-%m-%d %H:%M:%S"


class TestSetupLoggingFileHandling:
    def test_file_handler_created_in_configured_dir(self, settings):
        setup_logging(log_level="ERROR", enable_file=True, settings=settings)

        file_handler = next(h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler))
        assert file_handler.level == logging.DEBUG
        assert Path(file_handler.baseFilename) == Path(settings.log_file_dir) / LOG_FILE_NAME
        assert Path(settings.log_file_dir).is_dir()

    def test_no_file_handler_when_disabled(self, settings):
        setup_logging(enable_file=False, settings=settings)
        assert not any(isinstance(h, logging.FileHandler) for h in logging.getLogger().handlers)

    def test_repeated_setup_does_not_duplicate_handlers(self, settings):
        setup_logging(enable_file=False, settings=settings)
        setup_logging(enable_file=False, settings=settings)
        assert len(logging.getLogger().handlers) == 1


def test_get_logger_returns_named_logger():
    logger = get_logger("bioagents.providers.dataverse")
    assert logger is logging.getLogger("bioagents.providers.dataverse")
