"""Interfaces the domain needs from persistence and notification adapters."""

from __future__ import annotations

import enum
from typing import Any, Mapping, Optional, Protocol

from airport_taxi.domain.entities import Order
from airport_taxi.domain.enums import OrderStatus


class NotificationEvent(str, enum.Enum):
    ORDER_CREATED_CUSTOMER = "order-created-customer"
    ORDER_CREATED_OPERATOR = "order-created-operator"
    ORDER_UPDATED_OPERATOR = "order-updated-operator"
    ORDER_CONFIRMED_CUSTOMER = "order-confirmed-customer"
    ORDER_REJECTED_CUSTOMER = "order-rejected-customer"
    ORDER_CANCELLED_CUSTOMER = "order-cancelled-customer"
    ORDER_CANCELLED_OPERATOR = "order-cancelled-operator"
    PRICE_PROPOSED_CUSTOMER = "price-proposed-customer"
    COMPLETION_REMINDER_OPERATOR = "completion-reminder-operator"
    CUSTOMER_REMINDER = "customer-reminder"
    UPDATE_REQUESTED_CUSTOMER = "update-requested-customer"
    CUSTOMER_UPDATED_REQUEST_OPERATOR = "customer-updated-request-operator"


class ReminderStamp(str, enum.Enum):
    """Nullable one-way timestamp columns guarding reminder idempotency."""

    COMPLETION = "completion_reminder_sent_at"
    CUSTOMER = "customer_reminder_sent_at"


class OrderStore(Protocol):
    async def load(self, order_id: str, *, for_update: bool = False) -> Optional[Order]: ...

    async def save(self, order: Order) -> None: ...

    async def delete(self, order_id: str) -> None: ...

    async def exists_by_generated_id(self, code: str) -> bool: ...

    async def find_by_status(
        self, status: OrderStatus, missing_stamp: Optional[ReminderStamp] = None
    ) -> list[Order]: ...

    async def list_all(self) -> list[Order]: ...


class Notifier(Protocol):
    """Must never raise: delivery failures are logged and swallowed."""

    async def notify(
        self,
        event: NotificationEvent,
        order: Order,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None: ...
