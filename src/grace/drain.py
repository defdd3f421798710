"""Connection draining for aiohttp runners.

RunnerDrain is the drain collaborator the CLI hands to on_signal. Build
the runner with shutdown_timeout set to the orchestrator's timeout:

    runner = web.AppRunner(app, shutdown_timeout=orchestrator.timeout)
    config = OrchestratorConfig(on_signal=RunnerDrain(runner))
"""

from __future__ import annotations

import logging

from aiohttp import web

logger = logging.getLogger(__name__)


class RunnerDrain:
    """Async callable that drains an AppRunner.

    runner.cleanup() stops every site from accepting connections, waits
    up to the runner's shutdown_timeout for in-flight requests, then
    closes whatever connections remain and runs the app's cleanup hooks.
    """

    def __init__(self, runner: web.BaseRunner) -> None:
        self._runner = runner
        self._drained = False

    @property
    def drained(self) -> bool:
        return self._drained

    async def __call__(self) -> None:
        if self._drained:
            return
        self._drained = True

        sites = len(self._runner.sites)
        logger.info("Draining %d site(s)", sites)
        await self._runner.cleanup()
        logger.info("Drain complete")
