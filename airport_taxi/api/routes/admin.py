"""
Operator endpoints
==================

Every route takes the operator token as ``?token=``: either the per-order
confirmation token from the e-mail or the configured master token.

GET    /api/v1/admin/orders                          -- list (master token only)
GET    /api/v1/admin/orders/{order_id}               -- view
POST   /api/v1/admin/orders/{order_id}/decision      -- confirm | reject | price
POST   /api/v1/admin/orders/{order_id}/fulfillment   -- completed | failed
POST   /api/v1/admin/orders/{order_id}/request-update -- ask customer to fix fields
PUT    /api/v1/admin/orders/{order_id}               -- operator edit
DELETE /api/v1/admin/orders/{order_id}               -- operator cancel
GET    /api/v1/admin/health                          -- database and Redis reachability
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from airport_taxi.api.dependencies import get_db, get_lifecycle, get_tokens
from airport_taxi.api.middleware import DEFAULT_RATE, limiter
from airport_taxi.api.outcomes import ensure_ok
from airport_taxi.api.schemas import (
    AdminOrderResponse,
    DecisionRequest,
    FulfillmentRequest,
    HealthResponse,
    OrderCreateRequest,
    UpdateRequestBody,
)
from airport_taxi.domain.entities import Order
from airport_taxi.domain.enums import Actor
from airport_taxi.domain.lifecycle import OrderLifecycle
from airport_taxi.domain.tokens import TokenAuthority
from airport_taxi.infrastructure.database import database_ok
from airport_taxi.infrastructure.redis_client import ping

router = APIRouter(prefix="/admin", tags=["admin"])


def _admin_view(order: Order, tokens: TokenAuthority, token: Optional[str]) -> AdminOrderResponse:
    return AdminOrderResponse.from_order(order, can_view_all=tokens.is_master(token))


@router.get(
    "/orders",
    response_model=list[AdminOrderResponse],
    summary="List all bookings",
)
@limiter.limit(DEFAULT_RATE)
async def list_orders(
    request: Request,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    tokens: TokenAuthority = Depends(get_tokens),
):
    result = ensure_ok(await lifecycle.list_for_operator(token))
    return [_admin_view(order, tokens, token) for order in result.orders]


@router.get(
    "/orders/{order_id}",
    response_model=AdminOrderResponse,
    summary="View one booking",
)
@limiter.limit(DEFAULT_RATE)
async def get_order(
    request: Request,
    order_id: str,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    tokens: TokenAuthority = Depends(get_tokens),
):
    result = ensure_ok(await lifecycle.view_for_operator(order_id, token))
    return _admin_view(result.order, tokens, token)


@router.post(
    "/orders/{order_id}/decision",
    response_model=AdminOrderResponse,
    summary="Confirm, reject or propose a new price for a pending booking",
)
@limiter.limit(DEFAULT_RATE)
async def decide(
    request: Request,
    order_id: str,
    body: DecisionRequest,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    tokens: TokenAuthority = Depends(get_tokens),
):
    if body.action == "confirm":
        result = await lifecycle.confirm(order_id, token)
    elif body.action == "reject":
        result = await lifecycle.reject(order_id, token, body.message)
    else:
        price = None if body.price is None else str(body.price)
        result = await lifecycle.propose_price(order_id, token, price)
    return _admin_view(ensure_ok(result).order, tokens, token)


@router.post(
    "/orders/{order_id}/fulfillment",
    response_model=AdminOrderResponse,
    summary="Mark a confirmed booking completed or failed",
)
@limiter.limit(DEFAULT_RATE)
async def fulfil(
    request: Request,
    order_id: str,
    body: FulfillmentRequest,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    tokens: TokenAuthority = Depends(get_tokens),
):
    if body.action == "completed":
        result = await lifecycle.mark_completed(order_id, token)
    else:
        result = await lifecycle.mark_failed(order_id, token)
    return _admin_view(ensure_ok(result).order, tokens, token)


@router.post(
    "/orders/{order_id}/request-update",
    response_model=AdminOrderResponse,
    summary="Ask the customer to correct phone, e-mail or flight number",
)
@limiter.limit(DEFAULT_RATE)
async def request_update(
    request: Request,
    order_id: str,
    body: UpdateRequestBody,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    tokens: TokenAuthority = Depends(get_tokens),
):
    result = ensure_ok(await lifecycle.request_update(order_id, token, body.fields))
    return _admin_view(result.order, tokens, token)


@router.put(
    "/orders/{order_id}",
    response_model=AdminOrderResponse,
    summary="Edit a booking as operator",
    description="Operator edits never send a confirmed order back to pending.",
)
@limiter.limit(DEFAULT_RATE)
async def edit_order(
    request: Request,
    order_id: str,
    body: OrderCreateRequest,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    tokens: TokenAuthority = Depends(get_tokens),
):
    result = await lifecycle.edit(
        order_id,
        body.content_fields(),
        actor=Actor.OPERATOR,
        token=token,
        locale=body.locale,
    )
    return _admin_view(ensure_ok(result).order, tokens, token)


@router.delete(
    "/orders/{order_id}",
    status_code=204,
    response_class=Response,
    summary="Cancel a booking as operator",
)
@limiter.limit(DEFAULT_RATE)
async def cancel_order(
    request: Request,
    order_id: str,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    ensure_ok(await lifecycle.cancel(order_id, token))
    return Response(status_code=204)


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(db: AsyncSession = Depends(get_db)):
    database = await database_ok(db)
    redis = await ping()
    status = "ok" if database and redis else "degraded"
    return HealthResponse(status=status, database=database, redis=redis)
