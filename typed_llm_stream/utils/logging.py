"""Logging utility with verbosity levels and file logging."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config.config_schema import LoggingConfig

PACKAGE_LOGGER = "typed_llm_stream"


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging for the package with verbosity levels and file output.

    Args:
        verbosity: Verbosity level (0=WARNING, 1=INFO, 2=DEBUG, 3=DEBUG for all libraries)
        log_file: Optional log file path. If None, uses logs/stream_<timestamp>.log

    Returns:
        Configured package logger
    """
    if verbosity == 0:
        log_level = logging.WARNING
    elif verbosity == 1:
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    if log_file is None:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = logs_dir / f"stream_{timestamp}.log"
    else:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

    # At verbosity 3 third-party loggers are included as well
    logger = logging.getLogger() if verbosity >= 3 else logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(console_handler)

    # File handler always captures DEBUG
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(file_handler)

    logger.info(f"Logging initialized. Verbosity: {verbosity}, Log file: {log_path}")
    return logger


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Set up logging from the logging section of loaded settings."""
    return setup_logging(verbosity=config.verbosity, log_file=config.log_file)


def parse_verbosity(args: list) -> int:
    """
    Parse verbosity level from command line arguments.

    Args:
        args: Command line arguments

    Returns:
        Verbosity level (0-3)
    """
    verbosity = 0
    for arg in args:
        if arg == "-v":
            verbosity = 1
        elif arg == "-vv":
            verbosity = 2
        elif arg == "-vvv":
            verbosity = 3
    return verbosity
