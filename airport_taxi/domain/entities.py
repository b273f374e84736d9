"""
Domain entities with business logic.

Patterns used
-------------
- **State Pattern** on ``Order``: enforces valid lifecycle transitions
  (PENDING -> CONFIRMED | PRICE_PROPOSED | REJECTED,
  CONFIRMED -> PENDING | COMPLETED | FAILED, PRICE_PROPOSED -> CONFIRMED).
- ``Order`` is immutable: every transition returns a new instance and the
  caller persists it explicitly.
- ``OrderContent`` is a validated value object for the customer-editable part
  of a booking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Optional

from airport_taxi.domain.enums import (
    DEFAULT_LOCALE,
    EDITABLE_STATUSES,
    ORDER_TRANSITIONS,
    SUPPORTED_LOCALES,
    UPDATE_REQUEST_FIELDS,
    CarType,
    OrderStatus,
)

PICKUP_TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")
PHONE_RE = re.compile(r"^\+?[0-9]{7,15}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class InvalidStateTransition(Exception):
    """Raised when an order status change violates the state machine."""

    def __init__(self, current: OrderStatus, message: str):
        super().__init__(message)
        self.current = current


class OrderValidationError(ValueError):
    """Raised for malformed booking content, before anything is mutated."""


# ── Validation helpers ────────────────────────────────────────────────


def _required(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise OrderValidationError(f'Field "{name}" must be a string.')
    value = value.strip()
    if not value:
        raise OrderValidationError(f'Field "{name}" cannot be empty.')
    return value


def normalize_phone(value: Any) -> str:
    phone = re.sub(r"[\s\-()]", "", _required(value, "phoneNumber"))
    if phone.startswith("00"):
        phone = "+" + phone[2:]
    if not PHONE_RE.match(phone):
        raise OrderValidationError('Invalid "phoneNumber" value.')
    return phone


def normalize_locale(value: Any) -> str:
    locale = _required(value, "locale").lower()
    if locale not in SUPPORTED_LOCALES:
        raise OrderValidationError('Invalid "locale" value.')
    return locale


def locale_from_accept_language(header: Optional[str]) -> str:
    """Pick a supported locale from the first ``Accept-Language`` entry."""
    if not header:
        return DEFAULT_LOCALE
    first = header.split(",")[0].split(";")[0].strip().lower()
    if first.startswith(("nb", "nn")):
        return "no"
    for locale in SUPPORTED_LOCALES:
        if first.startswith(locale):
            return locale
    return DEFAULT_LOCALE


def normalize_update_fields(fields: Any) -> list[str]:
    """Keep known field names, lower-cased, de-duplicated, in request order."""
    if not isinstance(fields, (list, tuple)):
        return []
    normalized: list[str] = []
    for item in fields:
        if not isinstance(item, str):
            continue
        value = item.strip().lower()
        if value in UPDATE_REQUEST_FIELDS and value not in normalized:
            normalized.append(value)
    return normalized


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(_required(value, "date")[:10])
    except ValueError:
        raise OrderValidationError('Invalid "date" value.') from None


def _parse_car_type(value: Any) -> CarType:
    try:
        return CarType(int(value))
    except (TypeError, ValueError):
        raise OrderValidationError('Invalid "carType" value.') from None


# ── Value Object ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class OrderContent:
    car_type: CarType
    pickup_address: str
    proposed_price: str
    date: date
    pickup_time: str
    flight_number: str
    full_name: str
    email_address: str
    phone_number: str
    additional_notes: str = ""

    @classmethod
    def create(
        cls,
        *,
        car_type: Any,
        pickup_address: Any,
        proposed_price: Any,
        date: Any,
        pickup_time: Any,
        flight_number: Any,
        full_name: Any,
        email_address: Any,
        phone_number: Any,
        additional_notes: Any = "",
    ) -> OrderContent:
        """Validate and normalise raw input. Raises ``OrderValidationError``."""
        pickup_time = _required(pickup_time, "pickupTime")
        if not PICKUP_TIME_RE.match(pickup_time):
            raise OrderValidationError("Pickup time must be in HH:MM format.")

        email_address = _required(email_address, "emailAddress")
        if not EMAIL_RE.match(email_address):
            raise OrderValidationError('Invalid "emailAddress" value.')

        if additional_notes is None:
            additional_notes = ""
        if not isinstance(additional_notes, str):
            raise OrderValidationError('Field "additionalNotes" must be a string.')

        return cls(
            car_type=_parse_car_type(car_type),
            pickup_address=_required(pickup_address, "pickupAddress"),
            proposed_price=_required(proposed_price, "proposedPrice"),
            date=_parse_date(date),
            pickup_time=pickup_time,
            flight_number=_required(flight_number, "flightNumber"),
            full_name=_required(full_name, "fullName"),
            email_address=email_address,
            phone_number=normalize_phone(phone_number),
            additional_notes=additional_notes.strip(),
        )


# ── Entity ────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Order:
    id: str
    generated_id: str
    content: OrderContent
    confirmation_token: str
    customer_access_token: str
    locale: str = DEFAULT_LOCALE
    status: OrderStatus = OrderStatus.PENDING
    pending_price: Optional[str] = None
    price_proposal_token: Optional[str] = None
    rejection_reason: Optional[str] = None
    completion_reminder_sent_at: Optional[datetime] = None
    customer_reminder_sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = field(default=None, compare=False)

    def _require(self, *sources: OrderStatus) -> None:
        if self.status not in sources:
            raise InvalidStateTransition(
                self.status,
                f"Operation not allowed in status {self.status.value}",
            )

    def transition_to(self, new_status: OrderStatus, **changes: Any) -> Order:
        """Return a copy in *new_status* if the transition is legal, else raise."""
        allowed = ORDER_TRANSITIONS.get(self.status, set())
        if new_status not in allowed:
            raise InvalidStateTransition(
                self.status,
                f"Cannot transition from {self.status.value} to {new_status.value}",
            )
        return replace(self, status=new_status, **changes)

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    # ── Transitions ───────────────────────────────────────────────

    def with_content(
        self,
        content: OrderContent,
        *,
        locale: Optional[str] = None,
        demote: bool = False,
    ) -> Order:
        """Overwrite booking content; a demoted confirmed order goes back to pending."""
        if not self.is_editable:
            raise InvalidStateTransition(
                self.status, "This order can no longer be edited."
            )
        updated = replace(
            self, content=content, locale=locale or self.locale
        )
        if demote and self.status is OrderStatus.CONFIRMED:
            updated = updated.transition_to(OrderStatus.PENDING)
        return updated

    def confirm(self) -> Order:
        self._require(OrderStatus.PENDING)
        return self.transition_to(OrderStatus.CONFIRMED)

    def reject(self, reason: str) -> Order:
        self._require(OrderStatus.PENDING)
        return self.transition_to(OrderStatus.REJECTED, rejection_reason=reason)

    def propose_price(self, price: str, token: str) -> Order:
        self._require(OrderStatus.PENDING)
        return self.transition_to(
            OrderStatus.PRICE_PROPOSED,
            pending_price=price,
            price_proposal_token=token,
        )

    def accept_proposed_price(self) -> Order:
        self._require(OrderStatus.PRICE_PROPOSED)
        return self.transition_to(
            OrderStatus.CONFIRMED,
            content=replace(self.content, proposed_price=self.pending_price),
            pending_price=None,
            price_proposal_token=None,
        )

    def mark_completed(self) -> Order:
        self._require(OrderStatus.CONFIRMED)
        return self.transition_to(OrderStatus.COMPLETED)

    def mark_failed(self) -> Order:
        self._require(OrderStatus.CONFIRMED)
        return self.transition_to(OrderStatus.FAILED)

    # ── Reminder stamps (one-way) ─────────────────────────────────

    def mark_completion_reminder_sent(self, at: datetime) -> Order:
        if self.completion_reminder_sent_at is not None:
            return self
        return replace(self, completion_reminder_sent_at=at)

    def mark_customer_reminder_sent(self, at: datetime) -> Order:
        if self.customer_reminder_sent_at is not None:
            return self
        return replace(self, customer_reminder_sent_at=at)
