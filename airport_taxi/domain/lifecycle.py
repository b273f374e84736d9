"""
Order lifecycle
===============

Command side of the booking service.  Each operation:

1. loads one order (row-locked when it will write),
2. authorizes the presented capability token,
3. validates input,
4. asks the immutable ``Order`` entity for the next state,
5. saves it through the store (which commits),
6. and only then fires notifications.

Checks run in that order so that nothing is written when any of them fails.
Every operation returns an ``OperationResult``; only ``IdSpaceExhausted``
escapes as an exception because it is fatal for creation.

State machine
-------------
::

    pending --confirm--> confirmed --mark--> completed | failed
       |  \\--reject---> rejected
       |   \\-propose--> price_proposed --accept--> confirmed
       |                       \\--reject price--> (deleted)
    confirmed --customer edit--> pending

Cancellation deletes the order from any status.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Mapping, Optional, Union

from airport_taxi.domain.entities import (
    InvalidStateTransition,
    Order,
    OrderContent,
    OrderValidationError,
    normalize_locale,
    normalize_update_fields,
)
from airport_taxi.domain.enums import Actor, OrderStatus
from airport_taxi.domain.generated_id import GeneratedIdAllocator, GeneratedIdConflict, IdSpaceExhausted
from airport_taxi.domain.ports import NotificationEvent, Notifier, OrderStore
from airport_taxi.domain.results import OperationResult
from airport_taxi.domain.tokens import TokenAuthority

logger = logging.getLogger(__name__)

# Re-allocation attempts when two creations race for the same free code
CREATE_ATTEMPTS = 3

ContentInput = Union[OrderContent, Mapping[str, Any]]


def _content_from(content: ContentInput) -> OrderContent:
    if isinstance(content, OrderContent):
        return content
    return OrderContent.create(**content)


class OrderLifecycle:
    def __init__(
        self,
        store: OrderStore,
        notifier: Notifier,
        tokens: Optional[TokenAuthority] = None,
        allocator: Optional[GeneratedIdAllocator] = None,
        default_rejection_reason: Optional[Callable[[str], str]] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.tokens = tokens or TokenAuthority()
        self.allocator = allocator or GeneratedIdAllocator(store)
        # locale -> reason text used when the operator gives none
        self.default_rejection_reason = default_rejection_reason

    # ── Helpers ───────────────────────────────────────────────────

    async def _notify(
        self,
        event: NotificationEvent,
        order: Order,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        try:
            await self.notifier.notify(event, order, extra)
        except Exception:
            logger.exception(
                "Notification %s failed for order %s", event.value, order.id
            )

    def _authorized(self, actor: Actor, order: Order, token: Optional[str]) -> bool:
        if actor is Actor.OPERATOR:
            return self.tokens.authorize_operator(order, token)
        return self.tokens.authorize_customer(order, token)

    # ── Create ────────────────────────────────────────────────────

    async def create(self, content: ContentInput, locale: str) -> OperationResult:
        try:
            validated = _content_from(content)
            locale = normalize_locale(locale)
        except OrderValidationError as exc:
            return OperationResult.validation_failure(str(exc))

        for attempt in range(1, CREATE_ATTEMPTS + 1):
            order = Order(
                id=str(uuid.uuid4()),
                generated_id=await self.allocator.allocate(),
                content=validated,
                confirmation_token=self.tokens.issue(),
                customer_access_token=self.tokens.issue(),
                locale=locale,
            )
            try:
                await self.store.save(order)
            except GeneratedIdConflict:
                logger.warning(
                    "Generated id %s taken concurrently (attempt %d/%d)",
                    order.generated_id, attempt, CREATE_ATTEMPTS,
                )
                continue
            break
        else:
            raise IdSpaceExhausted("Unable to store an order with a unique number.")

        logger.info("Order %s (#%s) created", order.id, order.generated_id)
        await self._notify(NotificationEvent.ORDER_CREATED_CUSTOMER, order)
        await self._notify(NotificationEvent.ORDER_CREATED_OPERATOR, order)
        return OperationResult.success(order)

    # ── Edit ──────────────────────────────────────────────────────

    async def edit(
        self,
        order_id: str,
        content: ContentInput,
        *,
        actor: Actor,
        token: Optional[str],
        locale: Optional[str] = None,
        update_request_fields: Optional[list[str]] = None,
    ) -> OperationResult:
        order = await self.store.load(order_id, for_update=True)
        if order is None:
            return OperationResult.not_found(order_id)
        if not self._authorized(actor, order, token):
            return OperationResult.unauthorized()

        try:
            validated = _content_from(content)
            if locale is not None:
                locale = normalize_locale(locale)
        except OrderValidationError as exc:
            return OperationResult.validation_failure(str(exc))

        was_confirmed = order.status is OrderStatus.CONFIRMED
        try:
            updated = order.with_content(
                validated, locale=locale, demote=actor is Actor.CUSTOMER
            )
        except InvalidStateTransition as exc:
            return OperationResult.invalid_transition(exc.current, str(exc))

        await self.store.save(updated)

        if was_confirmed and updated.status is OrderStatus.PENDING:
            logger.info("Order %s edited by customer, needs reconfirmation", order_id)
            await self._notify(NotificationEvent.ORDER_UPDATED_OPERATOR, updated)
        elif actor is Actor.CUSTOMER and update_request_fields is not None:
            await self._notify(
                NotificationEvent.CUSTOMER_UPDATED_REQUEST_OPERATOR,
                updated,
                {"fields": normalize_update_fields(update_request_fields)},
            )
        return OperationResult.success(updated)

    # ── Operator decisions ────────────────────────────────────────

    async def confirm(self, order_id: str, token: Optional[str]) -> OperationResult:
        order = await self.store.load(order_id, for_update=True)
        if order is None:
            return OperationResult.not_found(order_id)
        if not self.tokens.authorize_operator(order, token):
            return OperationResult.unauthorized()

        # Operators click stale e-mail links; that is not an error
        if order.status is not OrderStatus.PENDING:
            return OperationResult.already_processed(order)

        confirmed = order.confirm()
        await self.store.save(confirmed)
        logger.info("Order %s confirmed", order_id)
        await self._notify(NotificationEvent.ORDER_CONFIRMED_CUSTOMER, confirmed)
        return OperationResult.success(confirmed)

    async def reject(
        self, order_id: str, token: Optional[str], reason: Optional[str] = None
    ) -> OperationResult:
        order = await self.store.load(order_id, for_update=True)
        if order is None:
            return OperationResult.not_found(order_id)
        if not self.tokens.authorize_operator(order, token):
            return OperationResult.unauthorized()

        reason = (reason or "").strip()
        if not reason:
            if self.default_rejection_reason is None:
                return OperationResult.validation_failure("Missing rejection reason.")
            reason = self.default_rejection_reason(order.locale)
        try:
            rejected = order.reject(reason)
        except InvalidStateTransition as exc:
            return OperationResult.invalid_transition(exc.current, str(exc))

        await self.store.save(rejected)
        logger.info("Order %s rejected", order_id)
        await self._notify(
            NotificationEvent.ORDER_REJECTED_CUSTOMER, rejected, {"reason": reason}
        )
        return OperationResult.success(rejected)

    async def propose_price(
        self, order_id: str, token: Optional[str], price: Optional[str]
    ) -> OperationResult:
        order = await self.store.load(order_id, for_update=True)
        if order is None:
            return OperationResult.not_found(order_id)
        if not self.tokens.authorize_operator(order, token):
            return OperationResult.unauthorized()

        price = (price or "").strip() if isinstance(price, str) else ""
        if not price:
            return OperationResult.validation_failure("Missing price.")

        try:
            # A fresh token invalidates links from any earlier proposal
            proposed = order.propose_price(price, self.tokens.issue())
        except InvalidStateTransition as exc:
            return OperationResult.invalid_transition(exc.current, str(exc))

        await self.store.save(proposed)
        logger.info("Order %s: price %s proposed", order_id, price)
        await self._notify(
            NotificationEvent.PRICE_PROPOSED_CUSTOMER, proposed, {"price": price}
        )
        return OperationResult.success(proposed)

    async def _fulfil(self, order_id: str, token: Optional[str], completed: bool) -> OperationResult:
        order = await self.store.load(order_id, for_update=True)
        if order is None:
            return OperationResult.not_found(order_id)
        if not self.tokens.authorize_operator(order, token):
            return OperationResult.unauthorized()

        try:
            updated = order.mark_completed() if completed else order.mark_failed()
        except InvalidStateTransition as exc:
            return OperationResult.invalid_transition(exc.current, "Order is not confirmed.")

        await self.store.save(updated)
        logger.info("Order %s marked %s", order_id, updated.status.value)
        return OperationResult.success(updated)

    async def mark_completed(self, order_id: str, token: Optional[str]) -> OperationResult:
        return await self._fulfil(order_id, token, completed=True)

    async def mark_failed(self, order_id: str, token: Optional[str]) -> OperationResult:
        return await self._fulfil(order_id, token, completed=False)

    # ── Customer answers to a price proposal ──────────────────────

    async def _load_proposal(self, order_id: str, token: Optional[str]):
        order = await self.store.load(order_id, for_update=True)
        if order is None:
            return None, OperationResult.not_found(order_id)
        if not self.tokens.authorize_price_proposal(order, token):
            return None, OperationResult.unauthorized()
        if order.status is not OrderStatus.PRICE_PROPOSED:
            return None, OperationResult.invalid_transition(order.status)
        return order, None

    async def accept_proposed_price(self, order_id: str, token: Optional[str]) -> OperationResult:
        order, failure = await self._load_proposal(order_id, token)
        if failure is not None:
            return failure

        accepted = order.accept_proposed_price()
        await self.store.save(accepted)
        logger.info("Order %s: proposed price accepted", order_id)
        await self._notify(NotificationEvent.ORDER_CONFIRMED_CUSTOMER, accepted)
        return OperationResult.success(accepted)

    async def reject_proposed_price(self, order_id: str, token: Optional[str]) -> OperationResult:
        order, failure = await self._load_proposal(order_id, token)
        if failure is not None:
            return failure

        # Declining the counter-offer is the same as the customer cancelling
        await self.store.delete(order_id)
        logger.info("Order %s: proposed price rejected, order deleted", order_id)
        await self._notify(NotificationEvent.ORDER_CANCELLED_CUSTOMER, order)
        await self._notify(NotificationEvent.ORDER_CANCELLED_OPERATOR, order)
        return OperationResult.success(order)

    # ── Cancel ────────────────────────────────────────────────────

    async def cancel(self, order_id: str, token: Optional[str]) -> OperationResult:
        """Delete the order for a customer or operator token holder."""
        order = await self.store.load(order_id, for_update=True)
        if order is None:
            return OperationResult.not_found(order_id)
        if not (
            self.tokens.authorize_customer(order, token)
            or self.tokens.authorize_operator(order, token)
        ):
            return OperationResult.unauthorized()

        await self.store.delete(order_id)
        logger.info("Order %s cancelled", order_id)
        await self._notify(NotificationEvent.ORDER_CANCELLED_CUSTOMER, order)
        await self._notify(NotificationEvent.ORDER_CANCELLED_OPERATOR, order)
        return OperationResult.success(order)

    # ── Reads and operator requests ───────────────────────────────

    async def view_for_customer(self, order_id: str, token: Optional[str]) -> OperationResult:
        order = await self.store.load(order_id)
        if order is None:
            return OperationResult.not_found(order_id)
        if not self.tokens.authorize_customer(order, token):
            return OperationResult.unauthorized()
        return OperationResult.success(order)

    async def view_for_operator(self, order_id: str, token: Optional[str]) -> OperationResult:
        order = await self.store.load(order_id)
        if order is None:
            return OperationResult.not_found(order_id)
        if not self.tokens.authorize_operator(order, token):
            return OperationResult.unauthorized()
        return OperationResult.success(order)

    async def list_for_operator(self, token: Optional[str]) -> OperationResult:
        if not self.tokens.is_master(token):
            return OperationResult.unauthorized()
        return OperationResult.listing(await self.store.list_all())

    async def request_update(
        self, order_id: str, token: Optional[str], fields: Any
    ) -> OperationResult:
        """Ask the customer to correct some booking details. No state change."""
        order = await self.store.load(order_id)
        if order is None:
            return OperationResult.not_found(order_id)
        if not self.tokens.is_master(token):
            return OperationResult.unauthorized()

        normalized = normalize_update_fields(fields)
        if not normalized:
            return OperationResult.validation_failure("Missing fields.")

        await self._notify(
            NotificationEvent.UPDATE_REQUESTED_CUSTOMER, order, {"fields": normalized}
        )
        return OperationResult.success(order)
