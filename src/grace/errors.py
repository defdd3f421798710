"""Exceptions raised by grace."""

from __future__ import annotations


class GraceError(Exception):
    """Base class for grace errors."""


class ConfigFileError(GraceError):
    """A config file exists but cannot be read or parsed."""


class TargetError(GraceError):
    """A `module:factory` target cannot be loaded or built."""


class ShutdownHookError(GraceError):
    """A hook in the shutdown chain raised.

    Attributes:
        hook: Name of the failing hook (before_shutdown, on_signal or
            on_shutdown).
        cause: The original exception.
    """

    def __init__(self, hook: str, cause: BaseException) -> None:
        self.hook = hook
        self.cause = cause
        super().__init__(f"{hook} failed: {cause}")
