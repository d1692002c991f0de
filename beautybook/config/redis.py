"""
Redis connection for the notification broker.

The API itself keeps no state in Redis; it only needs to know whether
notifications queued through Celery can reach the broker.
"""
from functools import lru_cache

import redis.asyncio as redis

from beautybook.config.settings import get_settings


@lru_cache()
def get_redis_pool() -> redis.ConnectionPool:
    settings = get_settings()
    return redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        socket_connect_timeout=2,
        retry_on_timeout=True,
    )


async def get_redis() -> redis.Redis:
    """Client sharing the module pool; callers close it with ``aclose()``"""
    return redis.Redis(connection_pool=get_redis_pool())


async def ping_redis() -> bool:
    client = await get_redis()
    try:
        return bool(await client.ping())
    finally:
        await client.aclose()
