"""Order summary block appended to every e-mail."""

from __future__ import annotations

import json
from typing import Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from airport_taxi.domain.entities import Order
from airport_taxi.notifications.translations import translate

CURRENCY = "PLN"


class RouteNotes(BaseModel):
    from_: str = Field("", alias="from")
    to: str = ""

    model_config = {"populate_by_name": True, "extra": "ignore"}


class BookingNotes(BaseModel):
    """The structured part of ``additional_notes`` written by the booking form."""

    passengers: Optional[Union[int, str]] = None
    notes: Optional[str] = None
    route: Optional[RouteNotes] = None
    pickupType: Optional[str] = None
    signService: Optional[str] = None
    signFee: Optional[Union[int, str]] = None
    signText: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("notes", "signService", "signText", "pickupType")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @classmethod
    def parse(cls, raw: str) -> "BookingNotes":
        """Keep every key that validates on its own; drop the rest."""
        if not raw:
            return cls()
        try:
            data = json.loads(raw)
        except ValueError:
            return cls()
        if not isinstance(data, dict):
            return cls()

        valid = {}
        for name in cls.model_fields:
            if name not in data:
                continue
            try:
                cls.model_validate({name: data[name]})
            except ValidationError:
                continue
            valid[name] = data[name]
        return cls.model_validate(valid)

    @property
    def is_airport_pickup(self) -> bool:
        return self.pickupType == "airport"

    @property
    def sign_fee(self) -> Optional[int]:
        try:
            fee = int(self.signFee) if self.signFee is not None else 0
        except ValueError:
            return None
        return fee if fee > 0 else None


def order_details_lines(order: Order, locale: str) -> list[str]:
    def label(key: str) -> str:
        return translate(locale, f"detail_{key}")

    content = order.content
    notes = BookingNotes.parse(content.additional_notes)
    lines = [
        f"{label('order_number')}: {order.generated_id}",
        f"{label('order_id')}: {order.id}",
        f"{label('customer')}: {content.full_name}",
        f"{label('customer_email')}: {content.email_address}",
        f"{label('phone')}: {content.phone_number}",
        f"{label('pickup_address')}: {content.pickup_address}",
        f"{label('date')}: {content.date.isoformat()}",
        f"{label('pickup_time')}: {content.pickup_time}",
        f"{label('price')}: {content.proposed_price} {CURRENCY}",
    ]
    if notes.is_airport_pickup:
        lines.append(f"{label('flight_number')}: {content.flight_number}")
    if notes.passengers not in (None, ""):
        lines.append(f"{label('passengers')}: {notes.passengers}")
    if order.pending_price is not None:
        lines.append(f"{label('pending_price')}: {order.pending_price} {CURRENCY}")
    if notes.notes:
        lines.append(f"{label('customer_message')}: {notes.notes}")
    if notes.is_airport_pickup:
        if notes.signService:
            service = "sign_service_sign" if notes.signService == "sign" else "sign_service_self"
            lines.append(f"{label('sign_service')}: {label(service)}")
        if notes.sign_fee:
            lines.append(f"{label('sign_fee')}: {notes.sign_fee} {CURRENCY}")
        if notes.signText:
            lines.append(f"{label('sign_text')}: {notes.signText}")
    if notes.route and notes.route.from_ and notes.route.to:
        lines.append(f"{label('route')}: {notes.route.from_} → {notes.route.to}")
    return lines
