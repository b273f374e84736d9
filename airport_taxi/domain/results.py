"""Tagged outcomes returned by every lifecycle operation.

Benign results such as "already processed" are values, not exceptions, so
callers branch on ``outcome`` instead of catching by exception class.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from airport_taxi.domain.entities import Order
from airport_taxi.domain.enums import OrderStatus


class Outcome(str, enum.Enum):
    OK = "ok"
    ALREADY_PROCESSED = "already_processed"
    INVALID_TRANSITION = "invalid_transition"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    VALIDATION_FAILURE = "validation_failure"


@dataclass(frozen=True)
class OperationResult:
    outcome: Outcome
    order: Optional[Order] = None
    status: Optional[OrderStatus] = None
    detail: str = ""
    orders: tuple[Order, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def success(cls, order: Optional[Order] = None) -> OperationResult:
        return cls(Outcome.OK, order=order, status=order.status if order else None)

    @classmethod
    def listing(cls, orders: list[Order]) -> OperationResult:
        return cls(Outcome.OK, orders=tuple(orders))

    @classmethod
    def already_processed(cls, order: Order) -> OperationResult:
        return cls(
            Outcome.ALREADY_PROCESSED,
            order=order,
            status=order.status,
            detail="Order is already processed.",
        )

    @classmethod
    def invalid_transition(cls, status: OrderStatus, detail: str = "") -> OperationResult:
        return cls(
            Outcome.INVALID_TRANSITION,
            status=status,
            detail=detail or f"Order is {status.value}.",
        )

    @classmethod
    def unauthorized(cls) -> OperationResult:
        # Never say which scope failed
        return cls(Outcome.UNAUTHORIZED, detail="Invalid token.")

    @classmethod
    def not_found(cls, order_id: str) -> OperationResult:
        return cls(Outcome.NOT_FOUND, detail=f'Order "{order_id}" not found.')

    @classmethod
    def validation_failure(cls, detail: str) -> OperationResult:
        return cls(Outcome.VALIDATION_FAILURE, detail=detail)
