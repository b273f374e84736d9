"""Pydantic request / response schemas for the REST API.

Field names are camelCase on the wire.  Request models only check shape;
content rules (phone format, HH:MM pickup time, known locale) are enforced
by ``OrderContent.create`` so they come back as 400, not 422.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from airport_taxi.domain.entities import Order

CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


# ── Requests ──────────────────────────────────────────────────────────


class OrderContentRequest(BaseModel):
    car_type: Union[int, str]
    pickup_address: str
    proposed_price: Union[str, int, float]
    date: str
    pickup_time: str
    flight_number: str
    full_name: str
    email_address: str
    phone_number: str
    additional_notes: Optional[str] = ""

    model_config = CAMEL

    def content_fields(self) -> dict[str, Any]:
        data = self.model_dump(
            include=set(OrderContentRequest.model_fields), by_alias=False
        )
        data["proposed_price"] = str(data["proposed_price"])
        return data


class OrderCreateRequest(OrderContentRequest):
    locale: Optional[str] = None


class CustomerEditRequest(OrderContentRequest):
    access_token: str
    locale: Optional[str] = None
    update_request_fields: Optional[list[str]] = None


class AccessRequest(BaseModel):
    access_token: str

    model_config = CAMEL


class DecisionRequest(BaseModel):
    action: Literal["confirm", "reject", "price"]
    message: Optional[str] = None
    price: Optional[Union[str, int, float]] = None


class FulfillmentRequest(BaseModel):
    action: Literal["completed", "failed"]


class UpdateRequestBody(BaseModel):
    fields: list[str] = Field(default_factory=list)


# ── Responses ─────────────────────────────────────────────────────────


class OrderCreatedResponse(BaseModel):
    id: str
    generated_id: str
    access_token: str

    model_config = CAMEL


class OrderResponse(BaseModel):
    id: str
    generated_id: str
    status: str
    car_type: int
    pickup_address: str
    proposed_price: str
    date: dt.date
    pickup_time: str
    flight_number: str
    full_name: str
    email_address: str
    phone_number: str
    additional_notes: str
    locale: str
    pending_price: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[dt.datetime] = None

    model_config = CAMEL

    @classmethod
    def from_order(cls, order: Order, **extra: Any) -> "OrderResponse":
        content = order.content
        return cls(
            id=order.id,
            generated_id=order.generated_id,
            status=order.status.value,
            car_type=int(content.car_type),
            pickup_address=content.pickup_address,
            proposed_price=content.proposed_price,
            date=content.date,
            pickup_time=content.pickup_time,
            flight_number=content.flight_number,
            full_name=content.full_name,
            email_address=content.email_address,
            phone_number=content.phone_number,
            additional_notes=content.additional_notes,
            locale=order.locale,
            pending_price=order.pending_price,
            rejection_reason=order.rejection_reason,
            created_at=order.created_at,
            **extra,
        )


class AdminOrderResponse(OrderResponse):
    can_view_all: bool = False


class HealthResponse(BaseModel):
    status: str = "ok"
    database: bool = True
    redis: bool = True


class ExchangeRateResponse(BaseModel):
    rate: float
    base: str = "PLN"
    target: str = "EUR"
    cached_for_seconds: int

    model_config = CAMEL
