"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to get_config)
2. Environment variables (GRACE_*)
3. Config file (~/.grace/config.toml)
4. Default values

Environment variables:
- GRACE_CONFIG_PATH: Path to config file (overrides default location)
- GRACE_BIND / GRACE_PORT: Listener address
- GRACE_SHUTDOWN_TIMEOUT: Drain deadline in seconds
- GRACE_HEALTH_PATHS: Comma-separated liveness probe paths
- GRACE_SIGNAL / GRACE_SIGNALS: Primary and additional termination signals
- GRACE_LOG_LEVEL / GRACE_LOG_FORMAT / GRACE_LOG_FILE: Logging overrides
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from grace.config.builder import (
    ConfigBuilder,
    ConfigSource,
    source_from_env,
    source_from_file,
)
from grace.config.env import EnvReader
from grace.config.models import GraceConfig
from grace.errors import ConfigFileError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".grace"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by GRACE_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("GRACE_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None, *, strict: bool = False) -> dict:
    """Load configuration from a TOML file.

    Args:
        path: Path to config file. If None, uses default location.
        strict: If True, raise ConfigFileError on parse failures.
                If False (default), return empty dict on errors.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigFileError: When strict=True and the file cannot be parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigFileError(f"Cannot parse config file {path}: {e}") from e
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    bind: str | None = None,
    port: int | None = None,
    shutdown_timeout: float | None = None,
    health_paths: list[str] | None = None,
    signals: list[str] | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
    # Optional dependency injection for testing
    env_reader: EnvReader | None = None,
    *,
    strict: bool = False,
) -> GraceConfig:
    """Get grace configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides GRACE_CONFIG_PATH).
        bind: CLI override for bind address.
        port: CLI override for port.
        shutdown_timeout: CLI override for the drain deadline.
        health_paths: CLI override for liveness probe paths.
        signals: CLI override for additional signals.
        log_level: CLI override for log level.
        log_format: CLI override for log format.
        env_reader: Optional EnvReader for testing (uses os.environ if None).
        strict: If True, raise ConfigFileError on config file parse failures.

    Returns:
        GraceConfig with merged configuration.

    Raises:
        ConfigFileError: When strict=True and the config file cannot be parsed.
        ValueError: When the merged configuration is invalid.
    """
    reader = env_reader or EnvReader()

    file_config: dict[str, Any] = load_config_file(config_path, strict=strict)

    cli_source = ConfigSource(
        server_bind=bind,
        server_port=port,
        server_shutdown_timeout=shutdown_timeout,
        # Empty tuples from click mean "not given"
        probes_health_paths=list(health_paths) if health_paths else None,
        probes_signals=list(signals) if signals else None,
        logging_level=log_level,
        logging_format=log_format,
    )

    builder = ConfigBuilder()
    builder.apply(source_from_file(file_config), source_name="file")
    builder.apply(source_from_env(reader), source_name="env")
    builder.apply(cli_source, source_name="cli")
    return builder.build()
