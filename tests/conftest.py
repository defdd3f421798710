"""Shared test fixtures for grace."""

from __future__ import annotations

import os
import signal
from collections.abc import Callable

import pytest


class FakeSignalBus:
    """In-memory SignalBus that records deliveries instead of killing."""

    def __init__(self) -> None:
        self.handlers: dict[signal.Signals, list[Callable]] = {}
        self.delivered: list[signal.Signals] = []

    def subscribe(self, sig: signal.Signals, handler: Callable) -> None:
        self.handlers.setdefault(sig, []).append(handler)

    def unsubscribe(self, sig: signal.Signals, handler: Callable) -> None:
        handlers = self.handlers.get(sig)
        if handlers and handler in handlers:
            handlers.remove(handler)
            if not handlers:
                del self.handlers[sig]

    def deliver(self, sig: signal.Signals) -> None:
        self.delivered.append(sig)

    def emit(self, sig: signal.Signals) -> None:
        """Simulate the process receiving sig."""
        for handler in list(self.handlers.get(sig, ())):
            handler(sig)


@pytest.fixture
def signal_bus() -> FakeSignalBus:
    """Signal bus that never touches process signal state."""
    return FakeSignalBus()


@pytest.fixture
def markers() -> list[str]:
    """Ordered record of which hooks ran."""
    return []


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Clear GRACE_* variables and point the config file at tmp_path."""
    for name in list(os.environ):
        if name.startswith("GRACE_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("GRACE_CONFIG_PATH", str(tmp_path / "missing.toml"))
