"""Bridge between the standard logging module and orchestrator error loggers."""

from __future__ import annotations

import logging

from grace.hooks import ErrorLogger


def error_logger_for(logger: logging.Logger) -> ErrorLogger:
    """Return an error logger that writes to a standard logger.

    Each failure is logged at ERROR level with the exception attached,
    so tracebacks end up in the configured handlers.

    Args:
        logger: Destination logger.

    Returns:
        Callable accepted as OrchestratorConfig.logger.
    """

    def log_error(message: str, error: BaseException) -> None:
        logger.error("%s: %s", message, error, exc_info=error)

    return log_error
