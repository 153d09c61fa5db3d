"""Price feed backed by a Redis hash.

The oracle hash at settings.PRICE_FEED_KEY holds two fields:

    price       integer quote in the feed's fixed-point units
    updated_at  epoch seconds of the last push

Reads fail with PriceFeedUnavailableError when Redis is unreachable, the
hash is missing or malformed, the price is not positive, or the quote is
older than PRICE_MAX_AGE_SECONDS. Writers are the admin API (set_price) or
an external oracle process updating the same hash.
"""

import logging
from typing import Protocol

from redis.asyncio import Redis
from redis.exceptions import RedisError

from config.settings import settings
from src.pp_common.datetime_utils import Clock, now_ts
from src.pp_common.errors import InvalidPriceError, PriceFeedUnavailableError

logger = logging.getLogger(__name__)


class PriceFeedProtocol(Protocol):
    async def get_price(self) -> int: ...


class RedisPriceFeed:
    def __init__(
        self,
        redis: Redis,
        key: str | None = None,
        max_age_seconds: int | None = None,
        clock: Clock = now_ts,
    ) -> None:
        self._redis = redis
        self._key = key or settings.PRICE_FEED_KEY
        self._max_age = (
            settings.PRICE_MAX_AGE_SECONDS if max_age_seconds is None else max_age_seconds
        )
        self._clock = clock

    async def get_price(self) -> int:
        try:
            raw = await self._redis.hgetall(self._key)
        except RedisError as exc:
            logger.warning("Price feed read failed: %s", exc)
            raise PriceFeedUnavailableError(str(exc)) from exc

        if not raw:
            raise PriceFeedUnavailableError("no price has been published")
        try:
            price = int(_field(raw, "price"))
            updated_at = int(_field(raw, "updated_at"))
        except (KeyError, ValueError) as exc:
            raise PriceFeedUnavailableError(f"malformed quote: {exc}") from exc
        if price <= 0:
            raise PriceFeedUnavailableError(f"non-positive price {price}")

        age = self._clock() - updated_at
        if self._max_age > 0 and age > self._max_age:
            raise PriceFeedUnavailableError(f"quote is {age}s old")
        return price

    async def set_price(self, price: int, now: int) -> None:
        if price <= 0:
            raise InvalidPriceError(price)
        try:
            await self._redis.hset(self._key, mapping={"price": price, "updated_at": now})
        except RedisError as exc:
            raise PriceFeedUnavailableError(str(exc)) from exc
        logger.info("Oracle price set to %d at %d", price, now)


def _field(raw: dict, name: str) -> str:
    # decode_responses may be off: accept bytes keys and values
    value = raw.get(name, raw.get(name.encode()))
    if value is None:
        raise KeyError(name)
    return value.decode() if isinstance(value, bytes) else str(value)
