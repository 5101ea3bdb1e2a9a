"""YAML configuration file loading with Pydantic validation."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import LogcastConfig

DEFAULT_CONFIG_PATH = Path.home() / ".logcast" / "config.yaml"


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""


def load_yaml(path: Path) -> dict:
    """Load a YAML file and return its contents as a dict.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}")
    return data


def load_config(path: Path | None = None) -> LogcastConfig:
    """Load and validate the logcast configuration.

    Args:
        path: Explicit config file. When omitted, ``~/.logcast/config.yaml``
            is used if it exists, otherwise defaults apply.

    Raises:
        ConfigError: If the file is missing (explicit path only), unreadable
            or fails validation.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return LogcastConfig()
        path = DEFAULT_CONFIG_PATH

    data = load_yaml(path)
    try:
        return LogcastConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed for {path}: {e}") from e
