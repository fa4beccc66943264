"""RedisViewCacheStore: concrete implementation of ViewCacheStoreProtocol.

Values are JSON strings written with SET ... EX, so every entry carries its
own TTL. Bulk removal uses SCAN (never KEYS) and deletes in batches.
"""

from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis

from config.settings import settings
from src.us_cache.domain.keys import ViewKind, build_key
from src.us_common.redis_client import get_redis

_SCAN_COUNT = 100
_DELETE_BATCH = 500


class RedisViewCacheStore:
    def __init__(
        self,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
        prefix: str | None = None,
    ) -> None:
        self._redis_factory = redis_factory
        self._prefix = prefix or settings.CACHE_KEY_PREFIX

    @property
    def prefix(self) -> str:
        return self._prefix

    def _key(self, kind: ViewKind, entity_id: int) -> str:
        return build_key(self._prefix, kind, entity_id)

    async def get(self, kind: ViewKind, entity_id: int) -> str | None:
        redis = await self._redis_factory()
        value = await redis.get(self._key(kind, entity_id))
        return value if value is None else str(value)

    async def put(self, kind: ViewKind, entity_id: int, value: str, ttl_seconds: int) -> None:
        redis = await self._redis_factory()
        await redis.set(self._key(kind, entity_id), value, ex=ttl_seconds)

    async def evict(self, kind: ViewKind, entity_id: int) -> None:
        redis = await self._redis_factory()
        await redis.delete(self._key(kind, entity_id))

    async def scan_keys(self, pattern: str) -> list[str]:
        redis = await self._redis_factory()
        return [str(key) async for key in redis.scan_iter(match=pattern, count=_SCAN_COUNT)]

    async def evict_matching(self, pattern: str) -> int:
        redis = await self._redis_factory()
        keys = await self.scan_keys(pattern)
        deleted = 0
        for start in range(0, len(keys), _DELETE_BATCH):
            deleted += await redis.delete(*keys[start:start + _DELETE_BATCH])
        return deleted
