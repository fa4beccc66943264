"""Read-through helper for cached views.

    cache hit   → decode and return
    cache miss  → load from the store, populate the cache, return
    cache error → log, load from the store, return

The cache is advisory: nothing here ever turns a cache problem into a
request failure. Errors raised by the loader (UserNotFoundError, ...) pass
through untouched and nothing is cached for them.

Known staleness windows, both bounded by the entry TTL:
  - a writer commits but dies (or Redis is down) before evicting;
  - a reader's loader fetches the old row, a writer commits and evicts, and
    the reader then populates the old value after the eviction.
SET NX would not close the second one since the key is already gone when
the late populate runs. Keep CACHE_TTL_SECONDS short if that matters.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from config.settings import settings
from src.us_cache.domain.keys import ViewKind
from src.us_cache.domain.store import ViewCacheStoreProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReadThroughCache:
    def __init__(self, store: ViewCacheStoreProtocol, ttl_seconds: int | None = None) -> None:
        self._store = store
        self._ttl = ttl_seconds if ttl_seconds is not None else settings.CACHE_TTL_SECONDS

    async def get_or_load(
        self,
        kind: ViewKind,
        entity_id: int,
        adapter: TypeAdapter[T],
        loader: Callable[[], Awaitable[T]],
    ) -> T:
        cached = await self._lookup(kind, entity_id, adapter)
        if cached is not None:
            return cached

        value = await loader()
        await self._populate(kind, entity_id, adapter, value)
        return value

    async def _lookup(self, kind: ViewKind, entity_id: int, adapter: TypeAdapter[T]) -> T | None:
        try:
            raw = await self._store.get(kind, entity_id)
        except RedisError:
            logger.warning("Cache read failed for %s:%s, falling back to store",
                           kind.value, entity_id, exc_info=True)
            return None
        if raw is None:
            logger.debug("Cache miss: %s:%s", kind.value, entity_id)
            return None
        try:
            value = adapter.validate_json(raw)
        except ValidationError:
            # Stale shape from an older deploy; overwritten by the reload below
            logger.warning("Undecodable cache entry %s:%s, reloading", kind.value, entity_id)
            return None
        logger.debug("Cache hit: %s:%s", kind.value, entity_id)
        return value

    async def _populate(self, kind: ViewKind, entity_id: int, adapter: TypeAdapter[T], value: T) -> None:
        try:
            await self._store.put(kind, entity_id, adapter.dump_json(value).decode(), self._ttl)
        except RedisError:
            logger.warning("Cache populate failed for %s:%s", kind.value, entity_id, exc_info=True)
