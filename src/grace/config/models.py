"""Configuration models for grace.

This module defines dataclasses for the `grace serve` runtime options.
"""

from dataclasses import dataclass, field
from pathlib import Path

from grace.signals import build_signal_set


@dataclass
class ServerConfig:
    """Configuration for the HTTP listener started by `grace serve`."""

    bind: str = "127.0.0.1"
    """Network address to bind to. Default localhost for safety."""

    port: int = 8080
    """Port number for the HTTP server."""

    shutdown_timeout: float = 1.0
    """Seconds to wait for in-flight requests before force-closing them."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 1 <= self.port <= 65535:
            raise ValueError(f"port must be 1-65535, got {self.port}")
        if self.shutdown_timeout <= 0:
            raise ValueError(
                f"shutdown_timeout must be positive, got {self.shutdown_timeout}"
            )


@dataclass
class ProbeConfig:
    """Health probe routes and termination signals."""

    # Paths answered by the built-in liveness probe
    health_paths: list[str] = field(default_factory=list)

    # Primary termination signal
    signal: str = "SIGTERM"

    # Additional signals that also start shutdown
    signals: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate configuration."""
        for path in self.health_paths:
            if not path.startswith("/"):
                raise ValueError(f"health path must start with '/', got {path!r}")
        # Raises ValueError for unknown signal names
        build_signal_set(self.signal, self.signals)


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


@dataclass
class GraceConfig:
    """Main configuration container for `grace serve`."""

    server: ServerConfig = field(default_factory=ServerConfig)
    probes: ProbeConfig = field(default_factory=ProbeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
