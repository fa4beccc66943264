"""CacheAdminService: operational view of the shared cache.

Stats, clear-one-user, clear-all and log-state. These are conveniences for
operators, not part of the consistency contract; a Redis outage yields empty
stats rather than an error.
"""

import logging

from pydantic import BaseModel
from redis.exceptions import RedisError

from src.us_cache.application.invalidator import CacheInvalidator
from src.us_cache.domain.keys import ViewKind, kind_of_key, namespace_pattern
from src.us_cache.domain.store import ViewCacheStoreProtocol
from src.us_cache.infrastructure.redis_store import RedisViewCacheStore

logger = logging.getLogger(__name__)


class CacheStatsResponse(BaseModel):
    counts: dict[str, int]
    total_keys: int
    details: dict[str, list[str]]


class CacheAdminService:
    def __init__(self, store: ViewCacheStoreProtocol | None = None) -> None:
        self._store: ViewCacheStoreProtocol = store or RedisViewCacheStore()
        self._invalidator = CacheInvalidator(self._store)

    async def stats(self) -> CacheStatsResponse:
        details: dict[str, list[str]] = {kind.value: [] for kind in ViewKind}
        pattern = namespace_pattern(self._store.prefix)
        try:
            keys = await self._store.scan_keys(pattern)
        except RedisError:
            logger.warning("Cache stats scan failed for %s", pattern, exc_info=True)
            keys = []

        for key in sorted(keys):
            kind = kind_of_key(self._store.prefix, key)
            if kind is None:
                logger.debug("Key doesn't match any view kind: %s", key)
                continue
            details[kind.value].append(key)

        counts = {kind: len(kind_keys) for kind, kind_keys in details.items()}
        return CacheStatsResponse(
            counts=counts,
            total_keys=sum(counts.values()),
            details=details,
        )

    async def clear_user(self, user_id: int) -> list[str]:
        logger.info("Clearing cache for user %s", user_id)
        return await self._invalidator.evict_user_views(user_id)

    async def clear_all(self) -> int:
        logger.info("Clearing all cache keys")
        return await self._invalidator.evict_all()

    async def log_state(self) -> CacheStatsResponse:
        stats = await self.stats()
        logger.info("=== CURRENT CACHE STATE ===")
        for kind, kind_keys in stats.details.items():
            logger.info("%s keys (%d): %s", kind, len(kind_keys), kind_keys)
        logger.info("=== TOTAL KEYS: %d ===", stats.total_keys)
        return stats
