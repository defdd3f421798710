"""Unit tests for RunnerDrain."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import web

from grace.drain import RunnerDrain


@pytest.fixture
def runner() -> MagicMock:
    runner = MagicMock(spec=web.AppRunner)
    runner.sites = [MagicMock()]
    runner.cleanup = AsyncMock()
    return runner


class TestRunnerDrain:
    """Tests for RunnerDrain."""

    @pytest.mark.asyncio
    async def test_cleans_up_runner(self, runner: MagicMock) -> None:
        drain = RunnerDrain(runner)
        assert drain.drained is False

        await drain()

        runner.cleanup.assert_awaited_once()
        assert drain.drained is True

    @pytest.mark.asyncio
    async def test_second_call_is_noop(self, runner: MagicMock) -> None:
        drain = RunnerDrain(runner)

        await drain()
        await drain()

        runner.cleanup.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cleanup_errors_propagate(self, runner: MagicMock) -> None:
        """A failing drain surfaces to the sequencer as a hook failure."""
        runner.cleanup.side_effect = RuntimeError("stuck")

        with pytest.raises(RuntimeError, match="stuck"):
            await RunnerDrain(runner)()

    @pytest.mark.asyncio
    async def test_real_runner_stops_listening(self) -> None:
        app = web.Application()
        runner = web.AppRunner(app, shutdown_timeout=0.1)
        await runner.setup()
        site = web.TCPSite(runner, "127.0.0.1", 0)
        await site.start()
        assert runner.sites

        await RunnerDrain(runner)()

        assert not runner.sites
