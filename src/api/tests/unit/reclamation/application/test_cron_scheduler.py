"""Unit tests for CronSweepScheduler."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from reclamation.application.scheduler import CronSweepScheduler
from reclamation.application.strategies import CronStrategy
from reclamation.domain.value_objects import SweepResult
from reclamation.ports.exceptions import ProcessingError


@pytest.fixture
def mock_strategy() -> MagicMock:
    """Provide a strategy whose process() succeeds."""
    strategy = MagicMock(plugin_id="cron")
    strategy.process = AsyncMock(return_value=SweepResult(strategy="cron", finished=True))
    return strategy


@pytest.fixture
def mock_probe() -> MagicMock:
    """Provide a mock scheduler probe."""
    return MagicMock()


class TestRunOnce:
    """Tests for a single run."""

    @pytest.mark.asyncio
    async def test_returns_sweep_result(self, mock_strategy, mock_probe):
        """A successful run returns the strategy's result."""
        scheduler = CronSweepScheduler(mock_strategy, probe=mock_probe)

        result = await scheduler.run_once()

        assert result.finished
        mock_probe.run_failed.assert_not_called()

    @pytest.mark.asyncio
    async def test_processing_error_is_reported(self, mock_strategy, mock_probe):
        """A failed run is reported with the work it finished."""
        mock_strategy.process.side_effect = ProcessingError(
            "boom", SweepResult(strategy="cron", handled=3)
        )
        scheduler = CronSweepScheduler(mock_strategy, probe=mock_probe)

        assert await scheduler.run_once() is None
        mock_probe.run_failed.assert_called_once_with("cron", 3, "boom")

    @pytest.mark.asyncio
    async def test_queue_failure_is_reported(
        self, failing_queue, content_index, content_store, mock_probe
    ):
        """A queue failure before any reclaim is reported as a failed run."""
        strategy = CronStrategy(failing_queue, content_index, content_store)
        failing_queue.failing.add("claim")
        scheduler = CronSweepScheduler(strategy, probe=mock_probe)

        assert await scheduler.run_once() is None
        mock_probe.run_failed.assert_called_once()
        assert mock_probe.run_failed.call_args.args[:2] == ("cron", 0)


class TestLifecycle:
    """Tests for start and stop."""

    @pytest.mark.asyncio
    async def test_runs_until_stopped(self, mock_strategy, mock_probe):
        """The loop keeps running through failures until stopped."""
        mock_strategy.process.side_effect = [
            ProcessingError("queue down", SweepResult(strategy="cron")),
            SweepResult(strategy="cron"),
            SweepResult(strategy="cron"),
        ] + [SweepResult(strategy="cron", finished=True)] * 100
        scheduler = CronSweepScheduler(mock_strategy, interval_seconds=0.01, probe=mock_probe)

        await scheduler.start()
        assert scheduler.running
        for _ in range(100):
            if mock_strategy.process.await_count >= 3:
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()

        assert not scheduler.running
        assert mock_strategy.process.await_count >= 3
        mock_probe.scheduler_started.assert_called_once_with("cron", 0.01)
        mock_probe.scheduler_stopped.assert_called_once_with("cron")

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, mock_strategy, mock_probe):
        """Starting twice runs one loop."""
        scheduler = CronSweepScheduler(mock_strategy, interval_seconds=60, probe=mock_probe)

        await scheduler.start()
        await scheduler.start()
        await scheduler.stop()

        mock_probe.scheduler_started.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_without_start(self, mock_strategy, mock_probe):
        """Stopping an idle scheduler is harmless."""
        scheduler = CronSweepScheduler(mock_strategy, probe=mock_probe)

        await scheduler.stop()

        assert not scheduler.running
