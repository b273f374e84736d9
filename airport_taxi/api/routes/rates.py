"""
Exchange rate endpoint
======================

GET /api/v1/eur-rate   -- PLN -> EUR rate for the booking form (503 when unknown)
"""

from __future__ import annotations

import httpx
import redis.asyncio as aioredis
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from airport_taxi.api.dependencies import get_http_client
from airport_taxi.api.middleware import DEFAULT_RATE, limiter
from airport_taxi.api.schemas import ExchangeRateResponse
from airport_taxi.config import settings
from airport_taxi.infrastructure import exchange_rates
from airport_taxi.infrastructure.redis_client import get_redis

router = APIRouter(tags=["rates"])


@router.get(
    "/eur-rate",
    response_model=ExchangeRateResponse,
    summary="Current PLN to EUR exchange rate",
    responses={503: {"description": "No provider returned a rate."}},
)
@limiter.limit(DEFAULT_RATE)
async def eur_rate(
    request: Request,
    redis: aioredis.Redis = Depends(get_redis),
    client: httpx.AsyncClient = Depends(get_http_client),
):
    rate = await exchange_rates.eur_rate(redis, client, settings)
    if rate is None:
        return JSONResponse({"rate": None}, status_code=503)
    return ExchangeRateResponse(
        rate=rate, cached_for_seconds=settings.exchange_rate_cache_seconds
    )
