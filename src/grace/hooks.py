"""Callable types shared by the interceptor and the sequencer."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

# Shutdown hooks and probes may be coroutine functions or plain callables
Hook = Callable[[], Awaitable[None] | None]
Probe = Callable[[], Awaitable[Any] | Any]

# Receives (message, error) for probe and shutdown hook failures
ErrorLogger = Callable[[str, BaseException], None]


async def noop_hook() -> None:
    """Hook that resolves immediately."""


def noop_logger(message: str, error: BaseException) -> None:
    """Error logger that discards everything."""


async def call_hook(fn: Callable[[], Any]) -> Any:
    """Call fn and await its result when it is awaitable."""
    result = fn()
    if inspect.isawaitable(result):
        result = await result
    return result
