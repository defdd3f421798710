"""CLI serve command.

This module provides the `grace serve` command that runs an aiohttp
application with health probes and graceful shutdown, suitable for
Kubernetes or systemd management.
"""

from __future__ import annotations

import asyncio
import errno
import importlib
import inspect
import logging
import os
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from aiohttp import web

from grace.cli.exit_codes import ExitCode
from grace.config import GraceConfig, get_config
from grace.errors import ConfigFileError, TargetError

logger = logging.getLogger(__name__)


def load_target(target: str) -> Callable[[], Any]:
    """Resolve a `module:attribute` string to an application factory.

    The attribute may be dotted (`pkg.app:factories.create`).

    Args:
        target: Import path of the factory.

    Returns:
        The factory callable.

    Raises:
        TargetError: If the string is malformed, the module cannot be
            imported, or the attribute is missing or not callable.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise TargetError(f"Target must look like 'module:factory', got {target!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise TargetError(f"Cannot import {module_name!r}: {e}") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError:
            raise TargetError(
                f"Module {module_name!r} has no attribute {attr_path!r}"
            ) from None

    if not callable(obj):
        raise TargetError(f"Target {target!r} is not callable")
    return obj


async def build_application(factory: Callable[[], Any]) -> web.Application:
    """Call a sync or async factory and check it returns an Application.

    Raises:
        TargetError: If the factory returns something else.
    """
    app = factory()
    if inspect.isawaitable(app):
        app = await app
    if not isinstance(app, web.Application):
        raise TargetError(
            f"Factory returned {type(app).__name__}, expected aiohttp Application"
        )
    return app


async def liveness_probe() -> None:
    """Probe that succeeds while the event loop is serving requests."""


async def run_server(factory: Callable[[], Any], config: GraceConfig) -> int:
    """Run the application until a termination signal ends the process.

    A clean shutdown never returns: the orchestrator drains the runner
    and re-delivers the signal. The function only returns on startup
    errors.

    Args:
        factory: Application factory from load_target().
        config: Merged runtime configuration.

    Returns:
        Exit code for startup failures.
    """
    from grace.drain import RunnerDrain
    from grace.logging import error_logger_for
    from grace.orchestrator import Orchestrator, OrchestratorConfig

    try:
        app = await build_application(factory)
    except TargetError as e:
        logger.error("%s", e)
        return ExitCode.TARGET_ERROR

    server = config.server
    health_checks = {path: liveness_probe for path in config.probes.health_paths}
    runner = web.AppRunner(app, shutdown_timeout=server.shutdown_timeout)

    orchestrator = Orchestrator(
        OrchestratorConfig(
            signal=config.probes.signal,
            signals=list(config.probes.signals),
            timeout=server.shutdown_timeout,
            health_checks=health_checks,
            on_signal=RunnerDrain(runner),
            logger=error_logger_for(logging.getLogger("grace")),
        )
    )
    orchestrator.install(app)

    await runner.setup()
    try:
        site = web.TCPSite(runner, server.bind, server.port)
        await site.start()
    except OSError as e:
        await runner.cleanup()
        if e.errno == errno.EADDRINUSE:
            logger.error("Port %d is already in use", server.port)
        elif e.errno == errno.EADDRNOTAVAIL:
            logger.error("Cannot bind to address %s", server.bind)
        else:
            logger.error("Server error: %s", e)
        return ExitCode.BIND_ERROR

    logger.info(
        "Serving on http://%s:%d (PID %d)", server.bind, server.port, os.getpid()
    )
    for path in config.probes.health_paths:
        logger.info("Health endpoint: http://%s:%d%s", server.bind, server.port, path)
    logger.info(
        "Send %s to stop",
        " or ".join(sig.name for sig in orchestrator.sequencer.signals),
    )

    # The re-delivered signal terminates the process
    await asyncio.Event().wait()
    return ExitCode.SUCCESS


@click.command("serve")
@click.argument("target")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.grace/config.toml).",
)
@click.option(
    "--bind",
    type=str,
    default=None,
    help="Address to bind to (default: 127.0.0.1).",
)
@click.option(
    "--port",
    "-p",
    type=int,
    default=None,
    help="Port to bind to (default: 8080).",
)
@click.option(
    "--timeout",
    "shutdown_timeout",
    type=float,
    default=None,
    help="Seconds to wait for in-flight requests on shutdown (default: 1.0).",
)
@click.option(
    "--signal",
    "signals",
    multiple=True,
    help="Extra signal that starts shutdown, e.g. SIGINT. Repeatable.",
)
@click.option(
    "--health-path",
    "health_paths",
    multiple=True,
    help="Path answered by a liveness probe, e.g. /healthz. Repeatable.",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default=None,
    help="Log format: text or json (default: text).",
)
def serve_command(
    target: str,
    config_path: Path | None,
    bind: str | None,
    port: int | None,
    shutdown_timeout: float | None,
    signals: tuple[str, ...],
    health_paths: tuple[str, ...],
    log_level: str | None,
    log_format: str | None,
) -> None:
    """Serve the aiohttp application built by TARGET (module:factory).

    Health paths answer 200 while running and 503 once shutdown starts.
    On SIGTERM (plus any --signal) the server stops accepting
    connections, waits up to --timeout for in-flight requests, then the
    signal is re-delivered so the process exits normally.

    Configuration precedence (highest to lowest):
      1. CLI flags
      2. Environment variables (GRACE_*)
      3. Config file (--config or ~/.grace/config.toml)
      4. Default values

    \b
    Examples:
        grace serve myapp.web:create_app
        grace serve myapp.web:create_app --health-path /healthz
        grace serve myapp.web:create_app --signal SIGINT --timeout 10
        grace serve myapp.web:create_app --log-format json
    """
    from grace.logging import build_logging_config, configure_logging

    try:
        config = get_config(
            config_path=config_path,
            bind=bind,
            port=port,
            shutdown_timeout=shutdown_timeout,
            health_paths=list(health_paths),
            signals=list(signals),
            log_level=log_level,
            log_format=log_format,
            strict=config_path is not None,
        )
    except (ConfigFileError, TypeError, ValueError) as e:
        # TypeError: a config file value of the wrong type, e.g. port = "80"
        click.echo(f"Error: invalid configuration: {e}", err=True)
        sys.exit(ExitCode.CONFIG_ERROR)

    # Always include stderr for daemon use (journald, container logs)
    configure_logging(build_logging_config(config.logging, include_stderr=True))

    # Targets are usually modules in the working directory
    if os.getcwd() not in sys.path:
        sys.path.insert(0, os.getcwd())

    try:
        factory = load_target(target)
    except TargetError as e:
        logger.error("%s", e)
        sys.exit(ExitCode.TARGET_ERROR)

    if config.server.port < 1024:
        logger.warning(
            "Port %d is privileged and may require root", config.server.port
        )

    logger.info(
        "Starting %s (bind=%s, port=%d, timeout=%.1fs)",
        target,
        config.server.bind,
        config.server.port,
        config.server.shutdown_timeout,
    )

    try:
        exit_code = asyncio.run(run_server(factory, config))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted")
        sys.exit(ExitCode.INTERRUPTED)
