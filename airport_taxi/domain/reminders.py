"""
Reminder sweeps
===============

Two independent scans over confirmed orders, each meant to be run
periodically:

* **completion reminder** -- once the pickup time has passed, ask the
  operator to mark the ride completed or failed.
* **customer reminder** -- within the 24 h before pickup, remind the customer.

Idempotency
-----------
Each reminder is guarded by a nullable timestamp on the order that only ever
goes ``None -> timestamp``.  For every candidate the sweep re-reads the
order under a row lock, re-checks status and stamp, commits the stamp and
only then sends.  A crash between commit and send loses that reminder
instead of sending it twice.

Orders whose pickup time does not parse, or that were changed or deleted
by a concurrent request between the scan and the re-read, are skipped and
counted, as are orders whose re-read or save fails; they never abort the
sweep.

Complexity: O(N) store round-trips for N confirmed, un-stamped orders.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from airport_taxi.domain.entities import Order
from airport_taxi.domain.enums import OrderStatus
from airport_taxi.domain.ports import NotificationEvent, Notifier, OrderStore, ReminderStamp

logger = logging.getLogger(__name__)

CUSTOMER_REMINDER_WINDOW = timedelta(hours=24)
UTC = ZoneInfo("UTC")
_PICKUP_TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")


@dataclass
class SweepReport:
    examined: int = 0
    sent: int = 0
    skipped: int = 0


def pickup_instant(order: Order, tz: ZoneInfo) -> Optional[datetime]:
    """``date`` + ``pickup_time`` in *tz*, or ``None`` if the time is malformed."""
    match = _PICKUP_TIME_RE.match(order.content.pickup_time or "")
    if not match:
        return None
    try:
        at = time(int(match.group(1)), int(match.group(2)))
    except ValueError:
        return None
    return datetime.combine(order.content.date, at, tzinfo=tz)


class ReminderScheduler:
    def __init__(
        self,
        store: OrderStore,
        notifier: Notifier,
        timezone: str = "Europe/Warsaw",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.tz = ZoneInfo(timezone)
        self.clock = clock or (lambda: datetime.now(self.tz))

    def now(self) -> datetime:
        current = self.clock()
        if current.tzinfo is None:
            return current.replace(tzinfo=self.tz)
        return current.astimezone(self.tz)

    @staticmethod
    def _stamp_value(now: datetime) -> datetime:
        # Stored as naive local time with second precision
        return now.replace(tzinfo=None, microsecond=0)

    async def send_completion_reminders(self) -> SweepReport:
        return await self._sweep(
            ReminderStamp.COMPLETION,
            NotificationEvent.COMPLETION_REMINDER_OPERATOR,
            lambda pickup, now: pickup <= now,
        )

    async def send_customer_reminders(self) -> SweepReport:
        return await self._sweep(
            ReminderStamp.CUSTOMER,
            NotificationEvent.CUSTOMER_REMINDER,
            lambda pickup, now: pickup - CUSTOMER_REMINDER_WINDOW <= now < pickup,
        )

    async def _sweep(
        self,
        stamp: ReminderStamp,
        event: NotificationEvent,
        is_due: Callable[[datetime, datetime], bool],
    ) -> SweepReport:
        now = self.now()
        report = SweepReport()
        candidates = await self.store.find_by_status(
            OrderStatus.CONFIRMED, missing_stamp=stamp
        )

        for candidate in candidates:
            report.examined += 1
            pickup = pickup_instant(candidate, self.tz)
            if pickup is None:
                logger.warning(
                    "Order %s has unparseable pickup time %r, skipping",
                    candidate.id, candidate.content.pickup_time,
                )
                report.skipped += 1
                continue
            # UTC instants: the window is 24 real hours, also across DST changes
            if not is_due(pickup.astimezone(UTC), now.astimezone(UTC)):
                continue

            try:
                order = await self._stamp(candidate.id, stamp, now)
            except Exception:
                logger.exception(
                    "Could not stamp order %s during %s sweep, skipping",
                    candidate.id, stamp.name.lower(),
                )
                report.skipped += 1
                continue
            if order is None:
                logger.info("Order %s changed during %s sweep, skipping", candidate.id, stamp.name.lower())
                report.skipped += 1
                continue

            try:
                await self.notifier.notify(event, order)
            except Exception:
                logger.exception("Reminder %s failed for order %s", event.value, order.id)
            report.sent += 1

        if report.sent:
            logger.info(
                "%s sweep: %d sent, %d skipped of %d examined",
                stamp.name.capitalize(), report.sent, report.skipped, report.examined,
            )
        return report

    async def _stamp(
        self, order_id: str, stamp: ReminderStamp, now: datetime
    ) -> Optional[Order]:
        """Re-read under lock and persist the stamp; ``None`` if the race was lost."""
        order = await self.store.load(order_id, for_update=True)
        if (
            order is None
            or order.status is not OrderStatus.CONFIRMED
            or getattr(order, stamp.value) is not None
        ):
            return None
        if stamp is ReminderStamp.COMPLETION:
            order = order.mark_completion_reminder_sent(self._stamp_value(now))
        else:
            order = order.mark_customer_reminder_sent(self._stamp_value(now))
        await self.store.save(order)
        return order
