"""Configuration builder with explicit layering.

This module provides ConfigBuilder for building GraceConfig by composing
multiple configuration sources with explicit precedence handling.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from grace.config.env import EnvReader
from grace.config.models import GraceConfig, LoggingConfig, ProbeConfig, ServerConfig

logger = logging.getLogger(__name__)


@dataclass
class ConfigSource:
    """Configuration values from a single source.

    None values indicate "not specified in this source" and will not
    override values from lower-precedence sources.
    """

    # Server config
    server_bind: str | None = None
    server_port: int | None = None
    server_shutdown_timeout: float | None = None

    # Probe config
    probes_health_paths: list[str] | None = None
    probes_signal: str | None = None
    probes_signals: list[str] | None = None

    # Logging config
    logging_level: str | None = None
    logging_file: Path | None = None
    logging_format: str | None = None
    logging_include_stderr: bool | None = None
    logging_max_bytes: int | None = None
    logging_backup_count: int | None = None


class ConfigBuilder:
    """Builds GraceConfig by layering ConfigSources with precedence.

    Later sources override earlier ones (for non-None values).

    Example:
        builder = ConfigBuilder()
        builder.apply(source_from_file(file_config), source_name="file")
        builder.apply(source_from_env(reader), source_name="env")
        builder.apply(cli_source, source_name="cli")
        config = builder.build()
    """

    def __init__(self) -> None:
        """Initialize the builder with no values set."""
        self._values: dict[str, Any] = {}

    def apply(self, source: ConfigSource, source_name: str = "unknown") -> None:
        """Apply configuration source, overriding existing values.

        Args:
            source: Configuration source to apply.
            source_name: Label used in debug logging.
        """
        for field_obj in fields(source):
            value = getattr(source, field_obj.name)
            if value is not None:
                logger.debug("Config %s set from %s", field_obj.name, source_name)
                self._values[field_obj.name] = value

    def _get(self, key: str, default: Any) -> Any:
        return self._values.get(key, default)

    def build(self) -> GraceConfig:
        """Build the final GraceConfig with defaults for unset values.

        Raises:
            ValueError: If any resulting section fails validation.
        """
        server = ServerConfig(
            bind=self._get("server_bind", "127.0.0.1"),
            port=self._get("server_port", 8080),
            shutdown_timeout=self._get("server_shutdown_timeout", 1.0),
        )

        probes = ProbeConfig(
            health_paths=list(self._get("probes_health_paths", [])),
            signal=self._get("probes_signal", "SIGTERM"),
            signals=list(self._get("probes_signals", [])),
        )

        logging_config = LoggingConfig(
            level=self._get("logging_level", "info"),
            file=self._get("logging_file", None),
            format=self._get("logging_format", "text"),
            include_stderr=self._get("logging_include_stderr", False),
            max_bytes=self._get("logging_max_bytes", 10_485_760),
            backup_count=self._get("logging_backup_count", 5),
        )

        return GraceConfig(server=server, probes=probes, logging=logging_config)


def source_from_file(file_config: dict[str, Any]) -> ConfigSource:
    """Create ConfigSource from a parsed TOML config file.

    Args:
        file_config: Parsed configuration dictionary from TOML file.

    Returns:
        ConfigSource with values from the config file.
    """
    server = file_config.get("server", {})
    probes = file_config.get("probes", {})
    logging_conf = file_config.get("logging", {})

    log_file_str = logging_conf.get("file")
    log_file = Path(log_file_str).expanduser() if log_file_str else None

    return ConfigSource(
        # Server
        server_bind=server.get("bind"),
        server_port=server.get("port"),
        server_shutdown_timeout=server.get("shutdown_timeout"),
        # Probes
        probes_health_paths=probes.get("health_paths"),
        probes_signal=probes.get("signal"),
        probes_signals=probes.get("signals"),
        # Logging
        logging_level=logging_conf.get("level"),
        logging_file=log_file,
        logging_format=logging_conf.get("format"),
        logging_include_stderr=logging_conf.get("include_stderr"),
        logging_max_bytes=logging_conf.get("max_bytes"),
        logging_backup_count=logging_conf.get("backup_count"),
    )


def source_from_env(reader: EnvReader) -> ConfigSource:
    """Create ConfigSource from GRACE_* environment variables.

    Args:
        reader: EnvReader instance for reading environment variables.

    Returns:
        ConfigSource with values from environment variables.
    """
    return ConfigSource(
        # Server
        server_bind=reader.get_str("GRACE_BIND"),
        server_port=reader.get_int("GRACE_PORT"),
        server_shutdown_timeout=reader.get_float("GRACE_SHUTDOWN_TIMEOUT"),
        # Probes
        probes_health_paths=reader.get_list("GRACE_HEALTH_PATHS"),
        probes_signal=reader.get_str("GRACE_SIGNAL"),
        probes_signals=reader.get_list("GRACE_SIGNALS"),
        # Logging
        logging_level=reader.get_str("GRACE_LOG_LEVEL"),
        logging_file=reader.get_path("GRACE_LOG_FILE"),
        logging_format=reader.get_str("GRACE_LOG_FORMAT"),
        logging_include_stderr=reader.get_bool("GRACE_LOG_INCLUDE_STDERR"),
    )
