"""Cache store Protocol: dependency inversion for testability.

Unit tests inject an in-memory fake that conforms to this Protocol.
Infrastructure layer provides the Redis implementation.

Implementations raise `redis.RedisError` (or a subclass) when the backend is
unavailable; callers in the application layer decide whether to swallow it.
"""

from typing import Protocol

from src.us_cache.domain.keys import ViewKind


class ViewCacheStoreProtocol(Protocol):
    @property
    def prefix(self) -> str: ...

    async def get(self, kind: ViewKind, entity_id: int) -> str | None: ...

    async def put(self, kind: ViewKind, entity_id: int, value: str, ttl_seconds: int) -> None: ...

    async def evict(self, kind: ViewKind, entity_id: int) -> None: ...

    async def evict_matching(self, pattern: str) -> int: ...

    async def scan_keys(self, pattern: str) -> list[str]: ...
