"""Unit tests for the shared shutdown state."""

import signal
from datetime import datetime, timezone

from grace.state import OrchestratorState


class TestOrchestratorState:
    """Tests for OrchestratorState."""

    def test_default_state_not_shutting_down(self) -> None:
        """A fresh state is running."""
        state = OrchestratorState()
        assert state.is_shutting_down is False
        assert state.initiated is None
        assert state.signal is None

    def test_begin_shutdown_flips_state(self) -> None:
        """The first call records the signal and a UTC timestamp."""
        state = OrchestratorState()
        before = datetime.now(timezone.utc)

        assert state.begin_shutdown(signal.SIGTERM) is True

        assert state.is_shutting_down is True
        assert state.signal is signal.SIGTERM
        assert state.initiated is not None
        assert state.initiated >= before

    def test_begin_shutdown_only_once(self) -> None:
        """Later calls report False and keep the first signal."""
        state = OrchestratorState()
        state.begin_shutdown(signal.SIGTERM)
        first_initiated = state.initiated

        assert state.begin_shutdown(signal.SIGINT) is False
        assert state.begin_shutdown(signal.SIGTERM) is False

        assert state.is_shutting_down is True
        assert state.signal is signal.SIGTERM
        assert state.initiated == first_initiated
