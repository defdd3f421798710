"""Orchestrator wiring and the attach() entry point.

An Orchestrator owns one OrchestratorState and hands it to a
HealthCheckInterceptor and a ShutdownSequencer. attach() installs both on
an aiohttp Application:

    app = web.Application()
    app.router.add_get("/", index)
    attach(app, OrchestratorConfig(
        health_checks={"/healthz": check_database},
        on_signal=drain,
        timeout=5.0,
    ))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from signal import Signals

from aiohttp import web

from grace.health import Handler, HealthCheckInterceptor
from grace.hooks import ErrorLogger, Hook, Probe, noop_hook, noop_logger
from grace.sequencer import ShutdownSequencer, hard_exit
from grace.signals import SignalBus, build_signal_set, get_signal_bus
from grace.state import OrchestratorState

logger = logging.getLogger(__name__)

SignalSpec = str | int | Signals


@dataclass
class OrchestratorConfig:
    """Options accepted by attach()."""

    signal: SignalSpec = "SIGTERM"
    """Primary termination signal, always listened for."""

    signals: list[SignalSpec] = field(default_factory=list)
    """Additional signals, merged with `signal` without duplicates."""

    timeout: float = 1.0
    """Drain deadline in seconds, passed on to the drain collaborator."""

    health_checks: Mapping[str, Probe] = field(default_factory=dict)
    """Probe path -> probe callable. Empty means no interception."""

    before_shutdown: Hook | None = None
    on_signal: Hook | None = None
    on_sigterm: Hook | None = None
    """Legacy name for on_signal, used only when on_signal is unset."""

    on_shutdown: Hook | None = None

    logger: ErrorLogger | None = None
    """Receives (message, error) for probe and shutdown hook failures."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}")
        for path in self.health_checks:
            if not path.startswith("/"):
                raise ValueError(
                    f"health check path must start with '/', got {path!r}"
                )
        # Fail early on unknown signal names
        build_signal_set(self.signal, self.signals)

    @property
    def signal_set(self) -> tuple[Signals, ...]:
        """Ordered, duplicate-free signals to subscribe to."""
        return build_signal_set(self.signal, self.signals)


class Orchestrator:
    """Health probes plus exactly-once shutdown for one server."""

    def __init__(
        self,
        config: OrchestratorConfig | None = None,
        *,
        signal_bus: SignalBus | None = None,
        terminate: Callable[[int], None] = hard_exit,
    ) -> None:
        """Build the state cell and both components.

        Args:
            config: Orchestrator options. Defaults apply when None.
            signal_bus: Bus to subscribe to. Defaults to the bus of the
                loop running at subscription time.
            terminate: Called with the exit status when a shutdown hook
                fails.
        """
        self.config = config if config is not None else OrchestratorConfig()
        self.state = OrchestratorState()
        self._signal_bus = signal_bus

        error_logger = self.config.logger or noop_logger

        self.interceptor: HealthCheckInterceptor | None = None
        if self.config.health_checks:
            self.interceptor = HealthCheckInterceptor(
                self.config.health_checks, self.state, error_logger
            )

        self.sequencer = ShutdownSequencer(
            self.state,
            self.config.signal_set,
            before_shutdown=self.config.before_shutdown or noop_hook,
            on_signal=self.config.on_signal or self.config.on_sigterm or noop_hook,
            on_shutdown=self.config.on_shutdown or noop_hook,
            timeout=self.config.timeout,
            error_logger=error_logger,
            terminate=terminate,
        )

    @property
    def timeout(self) -> float:
        return self.sequencer.timeout

    @property
    def is_shutting_down(self) -> bool:
        return self.state.is_shutting_down

    def install(self, app: web.Application) -> None:
        """Decorate an application that has not started yet.

        Raises:
            RuntimeError: If the application is already frozen.
        """
        if app.frozen:
            raise RuntimeError("Cannot attach to an application that has started")

        if self.interceptor is not None:
            # First in the chain so probes never reach app middlewares
            app.middlewares.insert(0, self.interceptor.middleware)
            logger.debug(
                "Health checks installed on %s",
                ", ".join(sorted(self.interceptor.health_checks)),
            )

        app.on_startup.append(self._on_startup)
        app.on_cleanup.append(self._on_cleanup)
        app[ORCHESTRATOR_KEY] = self

    def wrap(self, handler: Handler) -> Handler:
        """Decorate a low-level handler; unchanged when there are no probes."""
        if self.interceptor is None:
            return handler
        return self.interceptor.wrap(handler)

    def subscribe(self, bus: SignalBus | None = None) -> None:
        """Start listening for the configured signals."""
        if bus is None:
            bus = self._signal_bus or get_signal_bus()
        self.sequencer.subscribe(bus)

    def unsubscribe(self) -> None:
        self.sequencer.unsubscribe()

    async def _on_startup(self, app: web.Application) -> None:
        self.subscribe()

    async def _on_cleanup(self, app: web.Application) -> None:
        # During shutdown the sequencer unsubscribes itself once the chain
        # completes; until then duplicate signals must still be absorbed.
        if not self.state.is_shutting_down:
            self.unsubscribe()


ORCHESTRATOR_KEY = web.AppKey("grace_orchestrator", Orchestrator)


def attach(
    app: web.Application,
    config: OrchestratorConfig | None = None,
    *,
    signal_bus: SignalBus | None = None,
) -> web.Application:
    """Add health probes and graceful shutdown to an application.

    Must be called before the application starts. Signal handlers are
    registered when the application starts up.

    Args:
        app: The aiohttp application to decorate.
        config: Orchestrator options.
        signal_bus: Optional bus, mainly for tests.

    Returns:
        The same application.
    """
    Orchestrator(config, signal_bus=signal_bus).install(app)
    return app
