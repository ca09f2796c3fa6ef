"""Configuration management module."""

from .config_loader import ConfigLoader, load_config
from .config_schema import LoggingConfig, ParserOptions, PromptTemplate, SystemSettings

__all__ = [
    "ConfigLoader",
    "load_config",
    "LoggingConfig",
    "ParserOptions",
    "PromptTemplate",
    "SystemSettings",
]
