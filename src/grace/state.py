"""Shared shutdown state.

One OrchestratorState is created per orchestrator and handed by reference
to both the health-check interceptor (reader) and the shutdown sequencer
(the single writer).
"""

from __future__ import annotations

import signal
from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass
class OrchestratorState:
    """Tracks whether shutdown has begun."""

    is_shutting_down: bool = False
    """True once a tracked signal has been handled. Never reset."""

    initiated: datetime | None = None
    """UTC timestamp when shutdown began, None while running."""

    signal: signal.Signals | None = None
    """The signal that started shutdown."""

    def begin_shutdown(self, sig: signal.Signals) -> bool:
        """Flip the state to shutting down.

        Idempotent - only the first call has any effect.

        Args:
            sig: Signal that triggered the shutdown.

        Returns:
            True if this call started the shutdown, False if it was
            already in progress.
        """
        if self.is_shutting_down:
            return False

        self.is_shutting_down = True
        self.initiated = datetime.now(timezone.utc)
        self.signal = sig
        return True
