"""
Shared test fixtures.

Lifecycle and reminder tests run against ``InMemoryOrderStore`` and
``RecordingNotifier``.  Repository and API tests use an in-memory SQLite
database (via aiosqlite) built from the production ``OrderModel`` so they
run without Docker / PostgreSQL / Redis.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, AsyncGenerator, Mapping, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from airport_taxi.domain.entities import Order
from airport_taxi.domain.enums import OrderStatus
from airport_taxi.domain.generated_id import GeneratedIdConflict
from airport_taxi.domain.lifecycle import OrderLifecycle
from airport_taxi.domain.ports import NotificationEvent, ReminderStamp
from airport_taxi.domain.tokens import TokenAuthority
from airport_taxi.infrastructure.database import Base
from airport_taxi.infrastructure import models  # noqa: F401  (registers OrderModel)
from airport_taxi.notifications.translations import default_rejection_reason

MASTER_TOKEN = "master-secret-token"


# ── Test DB (SQLite in-memory) ────────────────────────────────────────

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

test_engine = create_async_engine(
    TEST_DB_URL,
    echo=False,
    poolclass=StaticPool,
    connect_args={"check_same_thread": False},
)
TestSessionFactory = async_sessionmaker(
    test_engine, class_=AsyncSession, expire_on_commit=False
)


@pytest_asyncio.fixture
async def db_tables() -> AsyncGenerator[None, None]:
    """Create tables, yield, then drop everything."""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_factory() -> async_sessionmaker:
    return TestSessionFactory


@pytest_asyncio.fixture
async def db_session(db_tables) -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session


# ── In-memory collaborators ───────────────────────────────────────────


class InMemoryOrderStore:
    """``OrderStore`` backed by a dict; enforces the unique generated id."""

    def __init__(self):
        self.orders: dict[str, Order] = {}
        self.saves = 0
        self.locked_loads: list[str] = []

    async def load(self, order_id: str, *, for_update: bool = False) -> Optional[Order]:
        if for_update:
            self.locked_loads.append(order_id)
        return self.orders.get(order_id)

    async def save(self, order: Order) -> None:
        for other in self.orders.values():
            if other.id != order.id and other.generated_id == order.generated_id:
                raise GeneratedIdConflict(order.generated_id)
        self.orders[order.id] = order
        self.saves += 1

    async def delete(self, order_id: str) -> None:
        self.orders.pop(order_id, None)

    async def exists_by_generated_id(self, code: str) -> bool:
        return any(o.generated_id == code for o in self.orders.values())

    async def find_by_status(
        self, status: OrderStatus, missing_stamp: Optional[ReminderStamp] = None
    ) -> list[Order]:
        return [
            o
            for o in self.orders.values()
            if o.status is status
            and (missing_stamp is None or getattr(o, missing_stamp.value) is None)
        ]

    async def list_all(self) -> list[Order]:
        return sorted(self.orders.values(), key=lambda o: o.content.date, reverse=True)

    def put(self, order: Order, **changes: Any) -> Order:
        """Store *order* directly, bypassing the lifecycle."""
        order = replace(order, **changes) if changes else order
        self.orders[order.id] = order
        return order


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.sent: list[tuple[NotificationEvent, Order, dict]] = []
        self.fail = fail

    async def notify(
        self,
        event: NotificationEvent,
        order: Order,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.sent.append((event, order, dict(extra or {})))
        if self.fail:
            raise ConnectionError("SMTP unavailable")

    @property
    def events(self) -> list[NotificationEvent]:
        return [event for event, _, _ in self.sent]

    def count(self, event: NotificationEvent) -> int:
        return self.events.count(event)


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest.fixture
def order_input():
    """Factory for raw booking content, as the API passes it."""

    def _make(**overrides: Any) -> dict[str, Any]:
        data = {
            "car_type": 2,
            "pickup_address": "Gdańsk Lech Wałęsa Airport",
            "proposed_price": "120",
            "date": "2026-03-01",
            "pickup_time": "14:00",
            "flight_number": "LO3821",
            "full_name": "Anna Kowalska",
            "email_address": "anna@example.com",
            "phone_number": "+48 600 100 200",
            "additional_notes": "",
        }
        data.update(overrides)
        return data

    return _make


@pytest.fixture
def store() -> InMemoryOrderStore:
    return InMemoryOrderStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)


@pytest.fixture
def tokens() -> TokenAuthority:
    return TokenAuthority(MASTER_TOKEN)


@pytest.fixture
def lifecycle(store, notifier, tokens) -> OrderLifecycle:
    return OrderLifecycle(
        store, notifier, tokens, default_rejection_reason=default_rejection_reason
    )


@pytest_asyncio.fixture
async def pending_order(lifecycle, order_input) -> Order:
    result = await lifecycle.create(order_input(), "pl")
    return result.order


@pytest_asyncio.fixture
async def confirmed_order(lifecycle, pending_order) -> Order:
    result = await lifecycle.confirm(pending_order.id, pending_order.confirmation_token)
    return result.order
