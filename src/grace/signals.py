"""Process signal subscription.

The SignalBus protocol makes the dependency on process-wide signal state
explicit. LoopSignalBus is the production implementation: it installs a
single asyncio signal handler per signal and fans each delivery out to
every subscriber in registration order, so several orchestrators can
share one process.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import weakref
from collections.abc import Callable
from typing import Protocol

logger = logging.getLogger(__name__)

SignalHandler = Callable[[signal.Signals], None]


class SignalBus(Protocol):
    """Subscription point for process signals."""

    def subscribe(self, sig: signal.Signals, handler: SignalHandler) -> None:
        """Call handler each time sig is received."""
        ...

    def unsubscribe(self, sig: signal.Signals, handler: SignalHandler) -> None:
        """Stop calling handler for sig. Unknown handlers are ignored."""
        ...

    def deliver(self, sig: signal.Signals) -> None:
        """Send sig to the current process."""
        ...


class LoopSignalBus:
    """SignalBus backed by asyncio's loop signal handlers.

    The loop handler for a signal is installed with the first subscriber
    and removed with the last one. Removing it restores the default
    disposition (Python's default_int_handler for SIGINT, SIG_DFL for
    everything else).
    """

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._handlers: dict[signal.Signals, list[SignalHandler]] = {}

    def subscribe(self, sig: signal.Signals, handler: SignalHandler) -> None:
        handlers = self._handlers.setdefault(sig, [])
        handlers.append(handler)
        if len(handlers) > 1:
            return

        try:
            self._loop.add_signal_handler(sig, self._dispatch, sig)
            logger.debug("Registered handler for %s", sig.name)
        except (ValueError, RuntimeError, NotImplementedError) as e:
            # ValueError: not in main thread
            # NotImplementedError: no loop signal support (Windows)
            logger.warning("Failed to register handler for %s: %s", sig.name, e)

    def unsubscribe(self, sig: signal.Signals, handler: SignalHandler) -> None:
        handlers = self._handlers.get(sig)
        if not handlers or handler not in handlers:
            return

        handlers.remove(handler)
        if handlers:
            return

        del self._handlers[sig]
        try:
            self._loop.remove_signal_handler(sig)
            logger.debug("Removed handler for %s", sig.name)
        except (ValueError, RuntimeError, NotImplementedError):
            pass  # Handler may not have been registered

    def subscribers(self, sig: signal.Signals) -> tuple[SignalHandler, ...]:
        """Return the handlers currently subscribed to sig."""
        return tuple(self._handlers.get(sig, ()))

    def deliver(self, sig: signal.Signals) -> None:
        pid = os.getpid()
        logger.debug("Delivering %s to pid %d", sig.name, pid)
        os.kill(pid, sig)

    def _dispatch(self, sig: signal.Signals) -> None:
        """Fan a received signal out to a snapshot of the subscribers."""
        for handler in self.subscribers(sig):
            try:
                handler(sig)
            except Exception:
                logger.exception("Signal handler for %s failed", sig.name)


_buses: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, LoopSignalBus] = (
    weakref.WeakKeyDictionary()
)


def get_signal_bus(loop: asyncio.AbstractEventLoop | None = None) -> LoopSignalBus:
    """Return the signal bus for a loop, creating it on first use.

    Args:
        loop: Event loop to bind to. Defaults to the running loop.

    Returns:
        The single LoopSignalBus for that loop.

    Raises:
        RuntimeError: If no loop is given and none is running.
    """
    if loop is None:
        loop = asyncio.get_running_loop()

    bus = _buses.get(loop)
    if bus is None:
        bus = LoopSignalBus(loop)
        _buses[loop] = bus
    return bus


def resolve_signal(value: str | int | signal.Signals) -> signal.Signals:
    """Convert a signal name, number or member to signal.Signals.

    Args:
        value: "SIGTERM", "TERM", 15 or signal.SIGTERM.

    Returns:
        The matching signal.Signals member.

    Raises:
        ValueError: If the value names no known signal.
    """
    if isinstance(value, signal.Signals):
        return value
    if isinstance(value, int):
        try:
            return signal.Signals(value)
        except ValueError:
            raise ValueError(f"unknown signal number: {value}") from None

    name = value.strip().upper()
    if not name.startswith("SIG"):
        name = f"SIG{name}"
    try:
        return signal.Signals[name]
    except KeyError:
        raise ValueError(f"unknown signal: {value!r}") from None


def build_signal_set(
    primary: str | int | signal.Signals,
    extra: list[str | int | signal.Signals] | tuple[str | int | signal.Signals, ...],
) -> tuple[signal.Signals, ...]:
    """Merge the extra signals and the primary one, dropping duplicates.

    Extra signals keep their order; the primary signal is appended unless
    it is already listed.
    """
    merged: list[signal.Signals] = []
    for value in [*extra, primary]:
        sig = resolve_signal(value)
        if sig not in merged:
            merged.append(sig)
    return tuple(merged)
