"""
Redis connection pool.

Only the reminder worker lock lives in Redis; the API reports its
reachability on ``/admin/health``.
"""

import redis.asyncio as aioredis

from airport_taxi.config import settings

_pool = aioredis.ConnectionPool.from_url(
    settings.redis_url, decode_responses=True
)


async def get_redis() -> aioredis.Redis:
    """Return a Redis client backed by the shared connection pool."""
    return aioredis.Redis(connection_pool=_pool)


async def ping() -> bool:
    try:
        return bool(await (await get_redis()).ping())
    except (aioredis.RedisError, OSError):
        return False


async def close_redis() -> None:
    await _pool.disconnect()
