"""Configuration loading for logcast."""

from .loader import ConfigError, load_config
from .models import LogcastConfig

__all__ = ["ConfigError", "LogcastConfig", "load_config"]
