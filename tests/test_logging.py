"""Tests for logging setup."""

import logging

import pytest

from typed_llm_stream.config.config_schema import LoggingConfig
from typed_llm_stream.utils.logging import (
    PACKAGE_LOGGER,
    configure_logging,
    parse_verbosity,
    setup_logging,
)


@pytest.fixture
def clean_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    saved_handlers = list(logger.handlers)
    saved_level = logger.level
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers = saved_handlers
    logger.setLevel(saved_level)


@pytest.mark.parametrize(
    "verbosity,level",
    [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG)],
)
def test_console_level(clean_logger, tmp_path, verbosity, level):
    """Test console handler level per verbosity."""
    logger = setup_logging(verbosity=verbosity, log_file=str(tmp_path / "run.log"))

    assert logger is clean_logger
    console, file_handler = logger.handlers
    assert console.level == level
    assert file_handler.level == logging.DEBUG


def test_file_receives_debug(clean_logger, tmp_path):
    """Test that the log file captures debug output."""
    log_file = tmp_path / "nested" / "run.log"
    logger = setup_logging(verbosity=0, log_file=str(log_file))

    logging.getLogger(f"{PACKAGE_LOGGER}.parser").debug("parser detail")
    for handler in logger.handlers:
        handler.flush()

    assert "parser detail" in log_file.read_text(encoding="utf-8")


def test_configure_logging(clean_logger, tmp_path):
    """Test setup from a LoggingConfig."""
    logger = configure_logging(LoggingConfig(verbosity=1, log_file=str(tmp_path / "cfg.log")))

    assert logger.handlers[0].level == logging.INFO
    assert (tmp_path / "cfg.log").exists()


@pytest.mark.parametrize(
    "args,expected",
    [
        ([], 0),
        (["-v"], 1),
        (["run", "-vv"], 2),
        (["-vvv"], 3),
        (["--other"], 0),
    ],
)
def test_parse_verbosity(args, expected):
    """Test verbosity flags."""
    assert parse_verbosity(args) == expected
