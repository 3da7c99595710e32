"""Tests for the periodic background tasks and application lifecycle."""

import asyncio
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from linkhub.tasks.maintenance import rate_limit_cleanup_task, registry_stats_task
from tests.mocks.websocket_mocks import BROWSER_UA, create_mock_websocket


class TestRateLimitCleanupTask:
    """Tests for rate_limit_cleanup_task."""

    @pytest.mark.asyncio
    async def test_runs_cleanup_periodically(self):
        limiter = MagicMock()

        task = asyncio.create_task(rate_limit_cleanup_task(limiter, interval=0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        await task

        assert limiter.cleanup.call_count >= 2
        assert task.done()

    @pytest.mark.asyncio
    async def test_zero_interval_is_not_replaced_by_default(self):
        limiter = MagicMock()

        task = asyncio.create_task(rate_limit_cleanup_task(limiter, interval=0))
        await asyncio.sleep(0.01)
        task.cancel()
        await task

        assert limiter.cleanup.call_count >= 1

    @pytest.mark.asyncio
    async def test_survives_cleanup_errors(self, monkeypatch):
        monkeypatch.setattr(
            "linkhub.tasks.maintenance.TASK_ERROR_BACKOFF_SECONDS", 0.01
        )
        limiter = MagicMock()
        calls = []

        def cleanup():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("boom")
            return 0

        limiter.cleanup.side_effect = cleanup

        task = asyncio.create_task(rate_limit_cleanup_task(limiter, interval=0.01))
        await asyncio.sleep(0.08)
        task.cancel()
        await task

        assert limiter.cleanup.call_count >= 2


class TestRegistryStatsTask:
    """Tests for registry_stats_task."""

    @pytest.mark.asyncio
    async def test_stops_on_cancel(self, registry):
        registry.try_add("203.0.113.1", BROWSER_UA, create_mock_websocket())

        task = asyncio.create_task(registry_stats_task(registry, interval=0.01))
        await asyncio.sleep(0.03)
        task.cancel()
        await task

        assert task.done()
        assert not task.cancelled()

    @pytest.mark.asyncio
    async def test_zero_interval_is_not_replaced_by_default(self):
        registry = MagicMock()
        registry.__len__.return_value = 1

        task = asyncio.create_task(registry_stats_task(registry, interval=0))
        await asyncio.sleep(0.01)
        task.cancel()
        await task

        assert registry.__len__.call_count >= 1


class TestLifespan:
    """Tests for startup and shutdown wiring."""

    def test_startup_and_shutdown(self, app):
        with TestClient(app) as client:
            assert len(app.state.tasks) == 2
            assert client.get("/health").status_code == 200
            link = create_mock_websocket()
            app.state.registry.try_add("203.0.113.1", BROWSER_UA, link)
            app.state.rate_limiter.allow("203.0.113.1")

        assert all(task.done() for task in app.state.tasks)
        assert len(app.state.registry) == 0
        assert app.state.rate_limiter.tracked_addresses() == 0
        link.close.assert_awaited_once()
