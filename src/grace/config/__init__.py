"""Configuration for the grace serve runtime."""

from grace.config.loader import get_config, get_default_config_path, load_config_file
from grace.config.models import GraceConfig, LoggingConfig, ProbeConfig, ServerConfig

__all__ = [
    "GraceConfig",
    "LoggingConfig",
    "ProbeConfig",
    "ServerConfig",
    "get_config",
    "get_default_config_path",
    "load_config_file",
]
