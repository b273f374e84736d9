"""
Concurrency safety tests.

Demonstrates:
1. Distributed lock prevents two reminder sweeps running at once.
2. A sweep that loses the lock does nothing and still returns.
3. The worker loop honours the ``reminder_worker_enabled`` switch.
"""

from __future__ import annotations

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from airport_taxi.config import settings
from airport_taxi.domain.ports import NotificationEvent
from airport_taxi.infrastructure.locks import DistributedLock, LockNotAcquired
from airport_taxi.infrastructure.repositories import OrderRepository
from airport_taxi.workers import reminders as worker


class TestDistributedLock:
    """Tests the Redis distributed lock logic (mocked Redis)."""

    @pytest.mark.asyncio
    async def test_acquire_succeeds(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)

        lock = DistributedLock(mock_redis, "order_reminders", ttl_seconds=60)
        assert await lock.acquire() is True
        mock_redis.set.assert_awaited_once_with(
            "lock:order_reminders", lock.token, nx=True, ex=60
        )

    @pytest.mark.asyncio
    async def test_acquire_fails_if_held(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=None)

        lock = DistributedLock(mock_redis, "order_reminders")
        assert await lock.acquire() is False

    @pytest.mark.asyncio
    async def test_release_calls_eval_with_own_token(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=True)
        mock_redis.eval = AsyncMock(return_value=1)

        lock = DistributedLock(mock_redis, "order_reminders")
        await lock.acquire()
        await lock.release()

        args = mock_redis.eval.await_args.args
        assert args[1:] == (1, "lock:order_reminders", lock.token)

    @pytest.mark.asyncio
    async def test_two_holders_get_distinct_tokens(self):
        redis = AsyncMock()
        assert DistributedLock(redis, "k").token != DistributedLock(redis, "k").token

    @pytest.mark.asyncio
    async def test_context_manager_acquire_fail_raises(self):
        mock_redis = AsyncMock()
        mock_redis.set = AsyncMock(return_value=False)

        lock = DistributedLock(mock_redis, "order_reminders")
        with pytest.raises(LockNotAcquired, match="Could not acquire lock"):
            async with lock:
                pass
        mock_redis.eval.assert_not_awaited()


# ── Reminder cycle ────────────────────────────────────────────────────


class TestReminderCycle:
    @pytest.mark.asyncio
    async def test_skipped_when_lock_is_held(self, session_factory, notifier):
        redis = AsyncMock()
        redis.set = AsyncMock(return_value=False)

        with (
            patch.object(worker, "get_redis", AsyncMock(return_value=redis)),
            patch.object(worker, "async_session_factory", session_factory),
            patch.object(worker, "build_notifier", return_value=notifier),
        ):
            reports = await worker.run_reminder_cycle()

        assert reports == {}
        assert notifier.sent == []
        redis.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_runs_both_sweeps_and_releases_lock(
        self, db_tables, session_factory, notifier, lifecycle, order_input
    ):
        # A confirmed order whose pickup is already in the past
        created = (await lifecycle.create(order_input(date="2020-01-01"), "en")).order
        confirmed = (await lifecycle.confirm(created.id, created.confirmation_token)).order
        async with session_factory() as session:
            await OrderRepository(session).save(confirmed)

        redis = AsyncMock()
        redis.set = AsyncMock(return_value=True)
        notifier.sent.clear()

        with (
            patch.object(worker, "get_redis", AsyncMock(return_value=redis)),
            patch.object(worker, "async_session_factory", session_factory),
            patch.object(worker, "build_notifier", return_value=notifier),
        ):
            reports = await worker.run_reminder_cycle()

        assert set(reports) == {"completion", "customer"}
        assert reports["completion"].sent == 1
        assert reports["customer"].sent == 0
        assert notifier.events == [NotificationEvent.COMPLETION_REMINDER_OPERATOR]
        redis.eval.assert_awaited_once()

        async with session_factory() as session:
            stored = await OrderRepository(session).load(confirmed.id)
        assert isinstance(stored.completion_reminder_sent_at, datetime)

    @pytest.mark.asyncio
    async def test_lock_released_when_sweep_fails(self, notifier):
        redis = AsyncMock()
        redis.set = AsyncMock(return_value=True)
        broken_factory = MagicMock(side_effect=ConnectionError("database down"))

        with (
            patch.object(worker, "get_redis", AsyncMock(return_value=redis)),
            patch.object(worker, "async_session_factory", broken_factory),
            patch.object(worker, "build_notifier", return_value=notifier),
        ):
            reports = await worker.run_reminder_cycle()

        assert reports == {}
        redis.eval.assert_awaited_once()


# ── Worker switch ─────────────────────────────────────────────────────


class TestWorkerSwitch:
    @pytest.mark.asyncio
    async def test_disabled_worker_starts_nothing(self, monkeypatch):
        monkeypatch.setattr(settings, "reminder_worker_enabled", False)

        await worker.start_reminder_loop()
        assert worker._task is None

        await worker.stop_reminder_loop()

    @pytest.mark.asyncio
    async def test_start_then_stop(self, monkeypatch):
        monkeypatch.setattr(settings, "reminder_worker_enabled", True)
        cycle = AsyncMock(return_value={})

        with patch.object(worker, "run_reminder_cycle", cycle):
            await worker.start_reminder_loop()
            assert worker._task is not None
            await worker.stop_reminder_loop()

        assert worker._task is None
