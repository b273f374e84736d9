"""Domain enumerations and state-transition rules."""

import enum


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PRICE_PROPOSED = "price_proposed"
    REJECTED = "rejected"
    COMPLETED = "completed"
    FAILED = "failed"


# State machine: maps current status -> set of valid next statuses.
# Deletion (cancel, rejected price proposal) is not a status and is not listed.
ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {
        OrderStatus.CONFIRMED,
        OrderStatus.PRICE_PROPOSED,
        OrderStatus.REJECTED,
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.PENDING,
        OrderStatus.COMPLETED,
        OrderStatus.FAILED,
    },
    OrderStatus.PRICE_PROPOSED: {OrderStatus.CONFIRMED},
    OrderStatus.REJECTED: set(),
    OrderStatus.COMPLETED: set(),
    OrderStatus.FAILED: set(),
}

EDITABLE_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.PENDING, OrderStatus.CONFIRMED}
)


class CarType(int, enum.Enum):
    BUS = 1
    STANDARD = 2


class Actor(str, enum.Enum):
    """Who initiated a change; decides authorization scope and side effects."""

    CUSTOMER = "customer"
    OPERATOR = "operator"


SUPPORTED_LOCALES: tuple[str, ...] = ("en", "pl", "de", "fi", "no", "sv", "da")
DEFAULT_LOCALE = "en"

# Fields an operator may ask the customer to correct
UPDATE_REQUEST_FIELDS: tuple[str, ...] = ("phone", "email", "flight")
