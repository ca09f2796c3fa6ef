"""Utility helpers."""

from .logging import configure_logging, parse_verbosity, setup_logging

__all__ = ["configure_logging", "parse_verbosity", "setup_logging"]
