"""Graceful shutdown and health probes for aiohttp servers."""

from grace.drain import RunnerDrain
from grace.errors import ShutdownHookError
from grace.orchestrator import Orchestrator, OrchestratorConfig, attach
from grace.sequencer import ShutdownPhase, ShutdownSequencer
from grace.signals import LoopSignalBus, SignalBus, get_signal_bus
from grace.state import OrchestratorState

__version__ = "0.1.0"

__all__ = [
    "LoopSignalBus",
    "Orchestrator",
    "OrchestratorConfig",
    "OrchestratorState",
    "RunnerDrain",
    "ShutdownHookError",
    "ShutdownPhase",
    "ShutdownSequencer",
    "SignalBus",
    "attach",
    "get_signal_bus",
]
