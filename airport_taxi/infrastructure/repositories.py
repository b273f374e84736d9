"""
Repository Pattern -- abstracts DB access so domain logic stays DB-agnostic.

``OrderRepository`` receives an ``AsyncSession`` (unit-of-work) and
implements the ``OrderStore`` port: it converts between the ``OrderModel``
row and the immutable ``Order`` entity and commits on every write.
"""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from airport_taxi.infrastructure.models import OrderModel
from airport_taxi.domain.entities import Order, OrderContent
from airport_taxi.domain.enums import CarType, OrderStatus
from airport_taxi.domain.generated_id import GeneratedIdConflict
from airport_taxi.domain.ports import ReminderStamp


def to_entity(row: OrderModel) -> Order:
    return Order(
        id=str(row.id),
        generated_id=row.generated_id,
        content=OrderContent(
            car_type=CarType(row.car_type),
            pickup_address=row.pickup_address,
            proposed_price=row.proposed_price,
            date=row.date,
            pickup_time=row.pickup_time,
            flight_number=row.flight_number,
            full_name=row.full_name,
            email_address=row.email_address,
            phone_number=row.phone_number,
            additional_notes=row.additional_notes or "",
        ),
        confirmation_token=row.confirmation_token,
        customer_access_token=row.customer_access_token,
        locale=row.locale,
        status=OrderStatus(row.status),
        pending_price=row.pending_price,
        price_proposal_token=row.price_proposal_token,
        rejection_reason=row.rejection_reason,
        completion_reminder_sent_at=row.completion_reminder_sent_at,
        customer_reminder_sent_at=row.customer_reminder_sent_at,
        created_at=row.created_at,
    )


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


def to_row_values(order: Order) -> dict:
    content = order.content
    return {
        "id": order.id,
        "generated_id": order.generated_id,
        "status": order.status.value,
        "car_type": int(content.car_type),
        "pickup_address": content.pickup_address,
        "proposed_price": content.proposed_price,
        "date": content.date,
        "pickup_time": content.pickup_time,
        "flight_number": content.flight_number,
        "full_name": content.full_name,
        "email_address": content.email_address,
        "phone_number": content.phone_number,
        "additional_notes": content.additional_notes,
        "locale": order.locale,
        "pending_price": order.pending_price,
        "rejection_reason": order.rejection_reason,
        "confirmation_token": order.confirmation_token,
        "customer_access_token": order.customer_access_token,
        "price_proposal_token": order.price_proposal_token,
        "completion_reminder_sent_at": order.completion_reminder_sent_at,
        "customer_reminder_sent_at": order.customer_reminder_sent_at,
    }


class OrderRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def load(self, order_id: str, *, for_update: bool = False) -> Optional[Order]:
        if not _is_uuid(order_id):
            return None
        query = (
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            # SELECT ... FOR UPDATE, released by the commit in save/delete
            query = query.with_for_update()
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError:
            await self.session.rollback()
            raise
        row = result.scalar_one_or_none()
        return to_entity(row) if row is not None else None

    async def save(self, order: Order) -> None:
        """Insert or update *order* and commit.

        A unique violation on ``generated_id`` means another request took
        the code between allocation and insert; it surfaces as
        ``GeneratedIdConflict`` so the caller can draw again.
        """
        row = await self.session.get(OrderModel, order.id)
        values = to_row_values(order)
        if row is None:
            self.session.add(OrderModel(**values))
        else:
            for key, value in values.items():
                setattr(row, key, value)
        try:
            await self.session.commit()
        except IntegrityError as exc:
            await self.session.rollback()
            raise GeneratedIdConflict(
                f"Generated id {order.generated_id} already in use"
            ) from exc
        except SQLAlchemyError:
            await self.session.rollback()
            raise

    async def delete(self, order_id: str) -> None:
        if not _is_uuid(order_id):
            return
        await self.session.execute(
            delete(OrderModel).where(OrderModel.id == order_id)
        )
        await self.session.commit()

    async def exists_by_generated_id(self, code: str) -> bool:
        result = await self.session.execute(
            select(OrderModel.id).where(OrderModel.generated_id == code).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def find_by_status(
        self, status: OrderStatus, missing_stamp: Optional[ReminderStamp] = None
    ) -> list[Order]:
        query = select(OrderModel).where(OrderModel.status == status.value)
        if missing_stamp is not None:
            query = query.where(getattr(OrderModel, missing_stamp.value).is_(None))
        result = await self.session.execute(query.order_by(OrderModel.date))
        return [to_entity(row) for row in result.scalars().all()]

    async def list_all(self) -> list[Order]:
        result = await self.session.execute(
            select(OrderModel).order_by(
                OrderModel.date.desc(), OrderModel.pickup_time.desc()
            )
        )
        return [to_entity(row) for row in result.scalars().all()]
