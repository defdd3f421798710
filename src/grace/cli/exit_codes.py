"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Validation errors (config, input)
    20-29: Target errors
    40-49: Operation errors

A shutdown hook failure always exits with GENERAL_ERROR. A clean shutdown
does not exit through these codes at all: the process ends from the
re-delivered termination signal.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for grace CLI commands."""

    # Success (0)
    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2  # Ctrl+C before or after the server started

    # Validation errors (10-19)
    CONFIG_ERROR = 11

    # Target errors (20-29)
    TARGET_ERROR = 20

    # Operation errors (40-49)
    BIND_ERROR = 40
