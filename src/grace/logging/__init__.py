"""Structured logging module for grace.

Provides configurable logging with JSON format support and file rotation,
plus an adapter that turns a standard logger into an orchestrator error
logger.
"""

from grace.logging.adapter import error_logger_for
from grace.logging.config import build_logging_config, configure_logging
from grace.logging.handlers import JSONFormatter

__all__ = [
    "JSONFormatter",
    "build_logging_config",
    "configure_logging",
    "error_logger_for",
]
