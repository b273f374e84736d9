"""
Background Reminder Worker
==========================

Runs every ``REMINDER_INTERVAL_SECONDS`` (default 300 s).

Concurrency safety
------------------
* **Redis distributed lock** ensures only one instance sweeps per interval
  across multiple API processes.
* **SELECT … FOR UPDATE** re-read per order inside ``ReminderScheduler``
  makes a sweep safe against a request changing the same order.

Work per cycle
--------------
1. Completion reminders: confirmed orders whose pickup time has passed.
2. Customer reminders: confirmed orders picked up within the next 24 h.

Can also be run once from cron::

    python -m airport_taxi.workers.reminders --once
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from airport_taxi.config import settings
from airport_taxi.domain.reminders import ReminderScheduler, SweepReport
from airport_taxi.infrastructure.database import async_session_factory
from airport_taxi.infrastructure.locks import DistributedLock, LockNotAcquired
from airport_taxi.infrastructure.redis_client import get_redis
from airport_taxi.infrastructure.repositories import OrderRepository
from airport_taxi.notifications.email import build_notifier

logger = logging.getLogger(__name__)

LOCK_KEY = "order_reminders"

_task: asyncio.Task | None = None
_stop_event: asyncio.Event | None = None


# ── Public API ────────────────────────────────────────────────────────


async def start_reminder_loop() -> None:
    global _task, _stop_event
    if not settings.reminder_worker_enabled:
        logger.info("Reminder worker disabled")
        return
    _stop_event = asyncio.Event()
    _task = asyncio.create_task(_loop())
    logger.info(
        "Reminder worker started (interval=%ds)", settings.reminder_interval_seconds
    )


async def stop_reminder_loop() -> None:
    global _task, _stop_event
    if _stop_event:
        _stop_event.set()
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
        logger.info("Reminder worker stopped")
    _task = None
    _stop_event = None


# ── Internals ─────────────────────────────────────────────────────────


async def _loop() -> None:
    """Periodic loop: run a reminder cycle then sleep."""
    assert _stop_event is not None
    while not _stop_event.is_set():
        try:
            await run_reminder_cycle()
        except Exception:
            logger.exception("Unhandled error in reminder cycle")
        # Wait for the interval or until stop is signalled
        try:
            await asyncio.wait_for(
                _stop_event.wait(), timeout=settings.reminder_interval_seconds
            )
            break
        except asyncio.TimeoutError:
            pass  # next cycle


async def run_reminder_cycle() -> dict[str, SweepReport]:
    """Run both sweeps once.  Returns the per-sweep reports (empty if skipped)."""
    redis = await get_redis()
    lock = DistributedLock(
        redis, LOCK_KEY, ttl_seconds=max(60, settings.reminder_interval_seconds)
    )

    reports: dict[str, SweepReport] = {}
    try:
        async with lock, async_session_factory() as session:
            scheduler = ReminderScheduler(
                OrderRepository(session),
                build_notifier(settings),
                timezone=settings.timezone,
            )
            reports["completion"] = await scheduler.send_completion_reminders()
            reports["customer"] = await scheduler.send_customer_reminders()
    except LockNotAcquired:
        logger.debug("Lock held by another worker – skipping cycle")
    except Exception:
        logger.exception("Error in reminder cycle")

    return reports


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Send due order reminders.")
    parser.add_argument(
        "--once", action="store_true", help="run a single cycle and exit"
    )
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)

    async def _run() -> None:
        if args.once:
            reports = await run_reminder_cycle()
            for name, report in reports.items():
                logger.info(
                    "%s: examined=%d sent=%d skipped=%d",
                    name, report.examined, report.sent, report.skipped,
                )
            return
        await start_reminder_loop()
        if _task is not None:
            await _task

    asyncio.run(_run())


if __name__ == "__main__":
    main()
