"""
PLN -> EUR exchange rate.

The booking form shows prices in euro next to the złoty amount.  Providers
are asked in order and the first usable rate is cached in Redis for
``exchange_rate_cache_seconds``.  A failed lookup is not cached, so the next
request tries the providers again.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import httpx
import redis.asyncio as aioredis

from airport_taxi.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

CACHE_KEY = "eur_rate_pln"


def _rate_from(payload: Any) -> Optional[float]:
    rates = payload.get("rates") if isinstance(payload, dict) else None
    value = rates.get("EUR") if isinstance(rates, dict) else None
    if isinstance(value, bool):
        return None
    try:
        rate = float(value)
    except (TypeError, ValueError):
        return None
    return rate if rate > 0 else None


async def fetch_eur_rate(client: httpx.AsyncClient, urls: Iterable[str]) -> Optional[float]:
    """First positive ``rates.EUR`` returned by *urls*, or ``None``."""
    for url in urls:
        try:
            response = await client.get(url)
        except httpx.HTTPError as exc:
            logger.warning("Exchange rate provider %s failed: %s", url, exc)
            continue
        if response.status_code != 200:
            logger.warning(
                "Exchange rate provider %s answered %d", url, response.status_code
            )
            continue
        try:
            rate = _rate_from(response.json())
        except ValueError:
            rate = None
        if rate is None:
            logger.warning("Exchange rate provider %s sent no EUR rate", url)
            continue
        return rate
    return None


async def eur_rate(
    redis: aioredis.Redis,
    client: httpx.AsyncClient,
    config: Optional[Settings] = None,
) -> Optional[float]:
    config = config or default_settings
    try:
        cached = await redis.get(CACHE_KEY)
    except aioredis.RedisError:
        logger.warning("Exchange rate cache unavailable", exc_info=True)
        cached = None
    if cached is not None:
        return float(cached)

    rate = await fetch_eur_rate(client, config.exchange_rate_urls)
    if rate is None:
        return None
    try:
        await redis.set(CACHE_KEY, str(rate), ex=config.exchange_rate_cache_seconds)
    except aioredis.RedisError:
        logger.warning("Could not cache exchange rate", exc_info=True)
    return rate
