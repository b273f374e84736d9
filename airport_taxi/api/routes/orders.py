"""
Customer order endpoints
========================

POST   /api/v1/orders                      -- create a booking (201)
POST   /api/v1/orders/{order_id}/access    -- view with the customer access token
PUT    /api/v1/orders/{order_id}           -- customer edit (204)
DELETE /api/v1/orders/{order_id}           -- customer cancel (204)
GET    /api/v1/orders/{order_id}/price/accept?token=  -- e-mail link, 303
GET    /api/v1/orders/{order_id}/price/reject?token=  -- e-mail link, 303
GET    /api/v1/orders/{order_id}/confirm?token=       -- operator e-mail link, 303
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import RedirectResponse

from airport_taxi.api.dependencies import get_lifecycle, get_links
from airport_taxi.api.middleware import DEFAULT_RATE, limiter
from airport_taxi.api.outcomes import ensure_ok
from airport_taxi.api.schemas import (
    AccessRequest,
    CustomerEditRequest,
    OrderCreatedResponse,
    OrderCreateRequest,
    OrderResponse,
)
from airport_taxi.domain.entities import locale_from_accept_language
from airport_taxi.domain.enums import Actor
from airport_taxi.domain.generated_id import IdSpaceExhausted
from airport_taxi.domain.lifecycle import OrderLifecycle
from airport_taxi.domain.results import Outcome
from airport_taxi.notifications.links import LinkBuilder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post(
    "",
    status_code=201,
    response_model=OrderCreatedResponse,
    summary="Create a booking",
    responses={503: {"description": "No free 4-digit order number."}},
)
@limiter.limit(DEFAULT_RATE)
async def create_order(
    request: Request,
    body: OrderCreateRequest,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    locale = body.locale or locale_from_accept_language(
        request.headers.get("accept-language")
    )
    try:
        result = await lifecycle.create(body.content_fields(), locale)
    except IdSpaceExhausted as exc:
        logger.error("Order creation failed: %s", exc)
        raise HTTPException(status_code=503, detail=str(exc)) from exc

    order = ensure_ok(result).order
    return OrderCreatedResponse(
        id=order.id,
        generated_id=order.generated_id,
        access_token=order.customer_access_token,
    )


@router.post(
    "/{order_id}/access",
    response_model=OrderResponse,
    summary="View a booking with the customer access token",
)
@limiter.limit(DEFAULT_RATE)
async def access_order(
    request: Request,
    order_id: str,
    body: AccessRequest,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    result = ensure_ok(await lifecycle.view_for_customer(order_id, body.access_token))
    return OrderResponse.from_order(result.order)


@router.put(
    "/{order_id}",
    status_code=204,
    response_class=Response,
    summary="Edit a booking",
    description=(
        "Overwrites the booking content. Editing a confirmed order sends it "
        "back to pending for operator reconfirmation."
    ),
)
@limiter.limit(DEFAULT_RATE)
async def edit_order(
    request: Request,
    order_id: str,
    body: CustomerEditRequest,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    ensure_ok(
        await lifecycle.edit(
            order_id,
            body.content_fields(),
            actor=Actor.CUSTOMER,
            token=body.access_token,
            locale=body.locale,
            update_request_fields=body.update_request_fields,
        )
    )
    return Response(status_code=204)


@router.delete(
    "/{order_id}",
    status_code=204,
    response_class=Response,
    summary="Cancel a booking",
)
@limiter.limit(DEFAULT_RATE)
async def cancel_order(
    request: Request,
    order_id: str,
    body: AccessRequest,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
):
    ensure_ok(await lifecycle.cancel(order_id, body.access_token))
    return Response(status_code=204)


# ── E-mail links ──────────────────────────────────────────────────────


@router.get(
    "/{order_id}/price/accept",
    status_code=303,
    response_class=RedirectResponse,
    summary="Accept a proposed price",
)
@limiter.limit(DEFAULT_RATE)
async def accept_price(
    request: Request,
    order_id: str,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    links: LinkBuilder = Depends(get_links),
):
    order = ensure_ok(await lifecycle.accept_proposed_price(order_id, token)).order
    return RedirectResponse(
        links.customer_manage(order, price="accepted"), status_code=303
    )


@router.get(
    "/{order_id}/price/reject",
    status_code=303,
    response_class=RedirectResponse,
    summary="Reject a proposed price (cancels the booking)",
)
@limiter.limit(DEFAULT_RATE)
async def reject_price(
    request: Request,
    order_id: str,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    links: LinkBuilder = Depends(get_links),
):
    order = ensure_ok(await lifecycle.reject_proposed_price(order_id, token)).order
    return RedirectResponse(
        f"{links.customer_base(order)}/?cancelled=1", status_code=303
    )


@router.get(
    "/{order_id}/confirm",
    status_code=303,
    response_class=RedirectResponse,
    summary="Confirm a booking from the operator e-mail",
)
@limiter.limit(DEFAULT_RATE)
async def confirm_from_email(
    request: Request,
    order_id: str,
    token: Optional[str] = None,
    lifecycle: OrderLifecycle = Depends(get_lifecycle),
    links: LinkBuilder = Depends(get_links),
):
    result = await lifecycle.confirm(order_id, token)
    if result.outcome is Outcome.ALREADY_PROCESSED:
        target = links.admin_manage(result.order, token=token, status="processed")
    else:
        target = links.admin_manage(ensure_ok(result).order, token=token)
    return RedirectResponse(target, status_code=303)
