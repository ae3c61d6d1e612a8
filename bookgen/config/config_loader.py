"""Configuration loader for YAML files."""

import os
from pathlib import Path

import yaml

from .config_schema import AppConfig

DEFAULT_CONFIG_PATH = "bookgen.yaml"


class ConfigLoader:
    """Load and validate configuration from YAML files."""

    @staticmethod
    def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
        """
        Load configuration from YAML file.

        Environment variables written as ``$NAME`` or ``${NAME}`` are expanded
        before parsing, so secrets like the Notion API key can stay out of
        the file.

        Args:
            path: Path to configuration file

        Returns:
            Validated AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(os.path.expandvars(f.read()))

        if not config_dict:
            raise ValueError("Configuration file is empty")

        return ConfigLoader.from_dict(config_dict)

    @staticmethod
    def from_dict(config: dict) -> AppConfig:
        """
        Build and validate configuration from a dictionary.

        Raises:
            ValueError: If config is invalid
        """
        app_config = AppConfig(**config)
        app_config.validate()
        return app_config


def load_config(path: str = DEFAULT_CONFIG_PATH) -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance
    """
    return ConfigLoader.load_config(path)
