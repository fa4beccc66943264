"""CacheInvalidator: the single owner of "which keys does a mutation stale".

Policy: every mutation that can change a cached view evicts every key of
every view embedding the mutated data, synchronously, after the store
transaction commits and before the service call returns. Entries are never
rewritten in place; the next read repopulates them.

Eviction is best-effort. A Redis failure is logged and swallowed: the write
already committed, and a stale entry is bounded by the cache TTL.
"""

import logging

from redis.exceptions import RedisError

from src.us_cache.domain.keys import (
    CARD_OWNER_VIEW_KINDS,
    USER_VIEW_KINDS,
    ViewKind,
    build_key,
    namespace_pattern,
)
from src.us_cache.domain.store import ViewCacheStoreProtocol

logger = logging.getLogger(__name__)


class CacheInvalidator:
    def __init__(self, store: ViewCacheStoreProtocol) -> None:
        self._store = store

    async def evict_user_views(self, user_id: int) -> list[str]:
        """After any mutation of the user row (or the user's deletion)."""
        return await self._evict(USER_VIEW_KINDS, user_id)

    async def evict_card_owner_views(self, owner_id: int) -> list[str]:
        """After any mutation of one of the owner's cards."""
        return await self._evict(CARD_OWNER_VIEW_KINDS, owner_id)

    async def evict_all(self) -> int:
        pattern = namespace_pattern(self._store.prefix)
        try:
            deleted = await self._store.evict_matching(pattern)
        except RedisError:
            logger.warning("Cache clear-all failed for pattern %s", pattern, exc_info=True)
            return 0
        logger.info("Evicted %d cache keys matching %s", deleted, pattern)
        return deleted

    async def _evict(self, kinds: tuple[ViewKind, ...], entity_id: int) -> list[str]:
        keys: list[str] = []
        for kind in kinds:
            key = build_key(self._store.prefix, kind, entity_id)
            keys.append(key)
            try:
                await self._store.evict(kind, entity_id)
            except RedisError:
                logger.warning("Cache eviction failed for %s", key, exc_info=True)
        logger.debug("Evicted cache keys %s", keys)
        return keys
