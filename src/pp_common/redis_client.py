"""Redis connection for the oracle price hash.

Only the price feed talks to Redis: the oracle (or POST /admin/oracle/price)
writes the hash and PredictionEngine reads it when a round opens or closes.
Socket timeouts are short so an unreachable Redis surfaces as
PriceFeedUnavailableError and aborts the advance, instead of holding the
engine lock.
"""

import redis.asyncio as aioredis

from config.settings import settings

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Lazily create the shared client; the first command opens the pool."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        )
    return _redis_pool


async def close_redis() -> None:
    """Close the client at shutdown; a later get_redis() starts a new one."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None
