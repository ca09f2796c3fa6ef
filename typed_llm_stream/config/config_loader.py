"""Read SystemSettings from YAML."""

import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .config_schema import SystemSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "typed_llm_stream.yaml"


class ConfigLoader:
    """Turn YAML documents into validated tool system settings."""

    @staticmethod
    def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> SystemSettings:
        """
        Load settings from a YAML file.

        Args:
            path: Path to the settings file

        Returns:
            Validated SystemSettings instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is empty, is not valid YAML, or does not
                hold a mapping at the top level
            pydantic.ValidationError: If a setting has a bad value
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        text = config_path.read_text(encoding="utf-8")
        logger.debug(f"Loading tool system settings from {config_path}")
        return ConfigLoader.load_string(text, source=str(config_path))

    @staticmethod
    def load_string(text: str, source: str = "<string>") -> SystemSettings:
        """Parse settings from YAML text. Raises like load_config."""
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {source}: {e}") from e

        if not document:
            raise ValueError(f"Configuration file is empty: {source}")
        if not isinstance(document, dict):
            raise ValueError(
                f"Configuration in {source} must be a mapping, got {type(document).__name__}"
            )

        return ConfigLoader.validate_config(document)

    @staticmethod
    def validate_config(config: Dict[str, Any]) -> SystemSettings:
        """
        Validate a settings mapping.

        Returns:
            The SystemSettings built from it

        Raises:
            pydantic.ValidationError: If a setting has a bad value
        """
        return SystemSettings(**config)


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> SystemSettings:
    """Module-level shortcut for ConfigLoader.load_config."""
    return ConfigLoader.load_config(path)
