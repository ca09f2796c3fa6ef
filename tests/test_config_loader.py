"""Tests for configuration loader."""

import pytest
import yaml
from pathlib import Path
from tempfile import NamedTemporaryFile
from pydantic import ValidationError

from typed_llm_stream.config.config_loader import ConfigLoader, load_config
from typed_llm_stream.config.config_schema import (
    DEFAULT_SYSTEM_PREFIX,
    ParserOptions,
    SystemSettings,
)


def write_yaml(data) -> str:
    """Write data to a temporary YAML file and return its path."""
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        return f.name


def test_load_config_valid():
    """Test loading a valid configuration."""
    config_path = write_yaml({
        "parser": {"strict_mode": True, "max_tag_length": 64},
        "prompt": {"numbering": False, "section_separator": "\n---\n"},
        "logging": {"verbosity": 2},
        "global_context": {"project": "demo", "language": "python"},
        "disabled_tools": ["summary"],
    })

    try:
        settings = load_config(config_path)
        assert isinstance(settings, SystemSettings)
        assert settings.parser.strict_mode is True
        assert settings.parser.max_tag_length == 64
        assert settings.parser.lowercase is True
        assert settings.prompt.numbering is False
        assert settings.prompt.section_separator == "\n---\n"
        assert settings.prompt.system_prefix == DEFAULT_SYSTEM_PREFIX
        assert settings.logging.verbosity == 2
        assert settings.global_context == {"project": "demo", "language": "python"}
        assert settings.disabled_tools == ["summary"]
    finally:
        Path(config_path).unlink()


def test_load_config_missing_file():
    """Test loading a non-existent configuration file."""
    with pytest.raises(FileNotFoundError):
        load_config("nonexistent.yaml")


def test_load_config_empty_file():
    """Test loading an empty configuration file."""
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        config_path = f.name

    try:
        with pytest.raises(ValueError, match="empty"):
            ConfigLoader.load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_load_config_invalid():
    """Test loading an invalid configuration."""
    config_path = write_yaml({"parser": {"max_tag_length": 0}, "logging": {"verbosity": 9}})

    try:
        with pytest.raises(ValidationError):
            load_config(config_path)
    finally:
        Path(config_path).unlink()


def test_load_config_malformed_yaml(tmp_path):
    """Test that broken YAML is reported as ValueError."""
    config_path = tmp_path / "broken.yaml"
    config_path.write_text("parser: {strict_mode: true\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(config_path)


def test_load_config_not_a_mapping(tmp_path):
    """Test that a top-level list is rejected."""
    config_path = tmp_path / "list.yaml"
    config_path.write_text("- parser\n- prompt\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must be a mapping, got list"):
        load_config(config_path)


def test_load_string():
    """Test parsing settings from YAML text."""
    settings = ConfigLoader.load_string("prompt:\n  numbering: false\ndisabled_tools: [summary]\n")

    assert settings.prompt.numbering is False
    assert settings.disabled_tools == ["summary"]

    with pytest.raises(ValueError, match="empty: <string>"):
        ConfigLoader.load_string("")


def test_validate_config():
    """Test configuration validation."""
    settings = ConfigLoader.validate_config({"parser": {"normalize": True}})
    assert isinstance(settings, SystemSettings)
    assert settings.parser.normalize is True

    with pytest.raises(ValidationError):
        ConfigLoader.validate_config({"disabled_tools": ["a", "a"]})

    with pytest.raises(ValidationError):
        ConfigLoader.validate_config({"disabled_tools": [""]})


def test_defaults():
    """Test default settings."""
    settings = SystemSettings()

    assert settings.parser == ParserOptions()
    assert settings.parser.normalize is False
    assert settings.parser.max_tag_length == 256
    assert settings.prompt.numbering is True
    assert settings.prompt.include_tool_list is False
    assert settings.prompt.custom_formatting is None
    assert settings.logging.verbosity == 0
    assert settings.global_context == {}
    assert settings.disabled_tools == []
