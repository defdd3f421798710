"""Shutdown sequencing.

The sequencer subscribes to a set of termination signals. The first one
received flips the shared state, then runs the hook chain

    before_shutdown -> on_signal -> on_shutdown

strictly in order. When the chain completes the sequencer unsubscribes
and re-delivers the original signal, so the process terminates the way
it would have without us. If any hook fails the process exits with
status 1 and the signal is not re-delivered.
"""

from __future__ import annotations

import asyncio
import enum
import logging
import os
import signal
from collections.abc import Callable

from grace.errors import ShutdownHookError
from grace.hooks import ErrorLogger, Hook, call_hook, noop_hook, noop_logger
from grace.signals import SignalBus
from grace.state import OrchestratorState

logger = logging.getLogger(__name__)

HOOK_FAILURE_EXIT_STATUS = 1


def hard_exit(status: int) -> None:
    """Flush logging and terminate the process immediately."""
    logging.shutdown()
    os._exit(status)


class ShutdownPhase(enum.Enum):
    """Observable sequencer states."""

    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"


class ShutdownSequencer:
    """Runs the shutdown hook chain exactly once per orchestrator."""

    def __init__(
        self,
        state: OrchestratorState,
        signals: tuple[signal.Signals, ...],
        *,
        before_shutdown: Hook = noop_hook,
        on_signal: Hook = noop_hook,
        on_shutdown: Hook = noop_hook,
        timeout: float = 1.0,
        error_logger: ErrorLogger = noop_logger,
        terminate: Callable[[int], None] = hard_exit,
    ) -> None:
        self._state = state
        self._signals = signals
        self._hooks: tuple[tuple[str, Hook], ...] = (
            ("before_shutdown", before_shutdown),
            ("on_signal", on_signal),
            ("on_shutdown", on_shutdown),
        )
        self._timeout = timeout
        self._error_logger = error_logger
        self._terminate = terminate
        self._bus: SignalBus | None = None
        self._task: asyncio.Task[None] | None = None

    @property
    def signals(self) -> tuple[signal.Signals, ...]:
        """Signals this sequencer listens for."""
        return self._signals

    @property
    def timeout(self) -> float:
        """Drain deadline in seconds, for whoever performs the drain."""
        return self._timeout

    @property
    def phase(self) -> ShutdownPhase:
        if self._state.is_shutting_down:
            return ShutdownPhase.SHUTTING_DOWN
        return ShutdownPhase.RUNNING

    @property
    def task(self) -> asyncio.Task[None] | None:
        """The running hook chain, None until a signal is handled."""
        return self._task

    @property
    def subscribed(self) -> bool:
        return self._bus is not None

    def subscribe(self, bus: SignalBus) -> None:
        """Start listening for every signal in the signal set.

        Calling it again while subscribed does nothing.
        """
        if self._bus is not None:
            return
        for sig in self._signals:
            bus.subscribe(sig, self.handle_signal)
        self._bus = bus
        logger.debug(
            "Listening for %s", ", ".join(sig.name for sig in self._signals)
        )

    def unsubscribe(self) -> None:
        """Stop listening. Safe to call more than once."""
        bus, self._bus = self._bus, None
        if bus is None:
            return
        for sig in self._signals:
            bus.unsubscribe(sig, self.handle_signal)


    def handle_signal(self, sig: signal.Signals) -> None:
        """Signal callback: start the chain, or ignore if already started.

        The state flips before the chain task is scheduled, so any
        request dispatched after this call observes the shutdown.
        """
        if not self._state.begin_shutdown(sig):
            logger.debug(
                "Ignoring %s, shutdown already in progress",
                sig.name,
                extra={"signal": sig.name},
            )
            return

        logger.info(
            "Received %s, starting graceful shutdown",
            sig.name,
            extra={"signal": sig.name},
        )
        self._task = asyncio.ensure_future(self._run_chain(sig, self._bus))
        self._task.add_done_callback(self._on_chain_done)

    async def _run_chain(self, sig: signal.Signals, bus: SignalBus | None) -> None:
        for name, hook in self._hooks:
            logger.debug("Running %s", name, extra={"signal": sig.name, "hook": name})
            try:
                await call_hook(hook)
            except BaseException as e:
                # Cancellation and interrupts inside a hook abort the chain too
                self._abort(sig, ShutdownHookError(name, e))
                return

        self.unsubscribe()
        if bus is None:
            logger.warning(
                "No signal bus, not re-delivering %s",
                sig.name,
                extra={"signal": sig.name},
            )
            return

        logger.info(
            "Shutdown complete, re-delivering %s",
            sig.name,
            extra={"signal": sig.name},
        )
        bus.deliver(sig)

    def _abort(self, sig: signal.Signals, error: ShutdownHookError) -> None:
        logger.error(
            "Shutdown aborted: %s",
            error,
            extra={"signal": sig.name, "hook": error.hook},
        )
        self._error_logger("error happened during shutdown", error)
        self._terminate(HOOK_FAILURE_EXIT_STATUS)

    def _on_chain_done(self, task: asyncio.Task[None]) -> None:
        """Terminate if the chain ended without re-delivering or aborting.

        KeyboardInterrupt and SystemExit are the re-delivered signal doing
        its job and are left alone.
        """
        if task.cancelled():
            logger.error("Shutdown chain was cancelled before it ran")
            self._terminate(HOOK_FAILURE_EXIT_STATUS)
            return

        exc = task.exception()
        if isinstance(exc, Exception):
            logger.error("Shutdown chain failed: %s", exc, exc_info=exc)
            self._error_logger("error happened during shutdown", exc)
            self._terminate(HOOK_FAILURE_EXIT_STATUS)
