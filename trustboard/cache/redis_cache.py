"""Redis-backed result cache."""

import logging
from typing import Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from .base import ResultCache

logger = logging.getLogger(__name__)


class RedisResultCache(ResultCache):
    """
    Result cache stored in Redis with ``SET ... PX`` expiry.

    Redis failures degrade to a miss on read and a skipped write, so the
    leaderboard keeps serving from the ledgers when Redis is down.
    """

    def __init__(self, client: Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisResultCache":
        return cls(Redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._client.get(key)
        except RedisError as e:
            logger.warning(f"Redis GET {key} failed, treating as miss: {e}")
            return None

    async def set(self, key: str, payload: str, ttl: float) -> None:
        try:
            await self._client.set(key, payload, px=max(1, int(ttl * 1000)))
        except RedisError as e:
            logger.warning(f"Redis SET {key} failed, result not cached: {e}")

    async def close(self) -> None:
        await self._client.aclose()
