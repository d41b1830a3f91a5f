"""Redis-backed cache for provider responses."""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from redis.exceptions import RedisError

from pricing.models import Coordinates

if TYPE_CHECKING:
    import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


def directions_key(origin: Coordinates, destination: Coordinates) -> str:
    return f"directions:{origin.as_key()}:{destination.as_key()}"


def weather_key(origin: Coordinates) -> str:
    return f"weather:{origin.as_key()}"


def tolls_key(origin: Coordinates, destination: Coordinates) -> str:
    return f"tolls:{origin.as_key()}:{destination.as_key()}"


class ProviderCache:
    """Caches JSON-serializable provider results with a per-key TTL.

    Redis failures never fail the caller: reads fall through to ``fetch``
    and writes are skipped, both with an error log.
    """

    def __init__(self, client: aioredis.Redis | None, enabled: bool = True):
        self._client = client
        self.enabled = enabled and client is not None
        self.hits = 0
        self.misses = 0

    async def get_or_fetch(
        self, key: str, ttl: int, fetch: Callable[[], Awaitable[Any]]
    ) -> Any:
        if not self.enabled:
            return await fetch()

        cached = await self._get(key)
        if cached is not None:
            self.hits += 1
            logger.debug(f"Cache hit for {key}")
            return cached

        self.misses += 1
        value = await fetch()
        await self._set(key, ttl, value)
        return value

    async def _get(self, key: str) -> Any:
        assert self._client is not None
        try:
            raw = await self._client.get(key)
        except RedisError as e:
            logger.error(f"Failed to read cache key {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, ValueError):
            logger.warning(f"Discarding unreadable cache entry {key}")
            return None

    async def _set(self, key: str, ttl: int, value: Any) -> None:
        assert self._client is not None
        try:
            await self._client.setex(key, ttl, json.dumps(value))
        except RedisError as e:
            logger.error(f"Failed to store cache key {key}: {e}")

    def get_cache_stats(self) -> dict[str, float | int]:
        requests = self.hits + self.misses
        return {
            "requests": requests,
            "hits": self.hits,
            "misses": self.misses,
            "hit_rate": self.hits / requests if requests > 0 else 0.0,
        }
