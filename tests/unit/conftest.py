"""In-memory fakes for the repository and cache Protocols.

Service tests run against these instead of PostgreSQL/Redis: the fakes keep
real state, so multi-step scenarios (create, read, mutate, re-read) behave
like the store would. The DB session itself is a MagicMock; the fakes ignore
it and only commit/rollback are observed.
"""

from dataclasses import replace
from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from src.us_cache.domain.keys import ViewKind, build_key
from src.us_card.application.service import PaymentCardService
from src.us_card.domain.models import CardFields, CardFilter, PaymentCard
from src.us_common.errors import PaymentCardNotFoundError, UserNotFoundError
from src.us_common.pagination import PageRequest
from src.us_user.application.service import UserAccountService
from src.us_user.domain.models import User, UserFields, UserFilter

TODAY = date(2026, 10, 18)


def _page(items: list, page: PageRequest) -> tuple[list, int]:
    return items[page.offset:page.offset + page.size], len(items)


def _contains(value: str, needle: str | None) -> bool:
    return needle is None or not needle.strip() or needle.lower() in value.lower()


class InMemoryUserRepository:
    def __init__(self) -> None:
        self.rows: dict[int, User] = {}
        self.locked: list[int] = []
        self._next_id = 1

    async def get_by_id(self, db, user_id: int) -> User | None:
        user = self.rows.get(user_id)
        return replace(user) if user else None

    async def lock_by_id(self, db, user_id: int) -> User | None:
        self.locked.append(user_id)
        return await self.get_by_id(db, user_id)

    async def get_by_email(self, db, email: str) -> User | None:
        for user in self.rows.values():
            if user.email == email:
                return replace(user)
        return None

    async def exists_by_email(self, db, email: str) -> bool:
        return await self.get_by_email(db, email) is not None

    async def insert(self, db, fields: UserFields) -> User:
        now = datetime.now(UTC)
        user = User(
            id=self._next_id,
            name=fields.name,
            surname=fields.surname,
            email=fields.email,
            birth_date=fields.birth_date,
            active=True,
            created_at=now,
            updated_at=now,
        )
        self.rows[user.id] = user
        self._next_id += 1
        return replace(user)

    async def update(self, db, user_id: int, fields: UserFields) -> User:
        if user_id not in self.rows:
            raise UserNotFoundError(user_id)
        user = replace(
            self.rows[user_id],
            name=fields.name,
            surname=fields.surname,
            email=fields.email,
            birth_date=fields.birth_date,
            updated_at=datetime.now(UTC),
        )
        self.rows[user_id] = user
        return replace(user)

    async def update_active(self, db, user_id: int, active: bool) -> None:
        if user_id in self.rows:
            self.rows[user_id] = replace(self.rows[user_id], active=active)

    async def delete(self, db, user_id: int) -> None:
        self.rows.pop(user_id, None)

    async def find_page(self, db, filters: UserFilter, page: PageRequest) -> tuple[list[User], int]:
        matched = [
            replace(u)
            for u in sorted(self.rows.values(), key=lambda u: u.id)
            if _contains(u.name, filters.name)
            and _contains(u.surname, filters.surname)
            and (filters.active is None or u.active == filters.active)
            and (
                filters.born_before is None
                or (u.birth_date is not None and u.birth_date < filters.born_before)
            )
        ]
        return _page(matched, page)


class InMemoryCardRepository:
    def __init__(self) -> None:
        self.rows: dict[int, PaymentCard] = {}
        self._next_id = 1

    async def get_by_id(self, db, card_id: int) -> PaymentCard | None:
        card = self.rows.get(card_id)
        return replace(card) if card else None

    async def get_by_id_for_user(self, db, card_id: int, user_id: int) -> PaymentCard | None:
        card = self.rows.get(card_id)
        return replace(card) if card and card.user_id == user_id else None

    async def get_by_number(self, db, number: str) -> PaymentCard | None:
        for card in self.rows.values():
            if card.number == number:
                return replace(card)
        return None

    async def exists_by_number(self, db, number: str) -> bool:
        return await self.get_by_number(db, number) is not None

    async def count_for_user(self, db, user_id: int) -> int:
        return sum(1 for c in self.rows.values() if c.user_id == user_id)

    async def list_for_user(self, db, user_id: int) -> list[PaymentCard]:
        return [replace(c) for c in sorted(self.rows.values(), key=lambda c: c.id)
                if c.user_id == user_id]

    async def insert(self, db, user_id: int, fields: CardFields) -> PaymentCard:
        now = datetime.now(UTC)
        card = PaymentCard(
            id=self._next_id,
            user_id=user_id,
            number=fields.number,
            holder=fields.holder,
            expiration_date=fields.expiration_date,
            active=True,
            created_at=now,
            updated_at=now,
        )
        self.rows[card.id] = card
        self._next_id += 1
        return replace(card)

    async def update(self, db, card_id: int, fields: CardFields) -> PaymentCard:
        if card_id not in self.rows:
            raise PaymentCardNotFoundError(card_id)
        card = replace(
            self.rows[card_id],
            number=fields.number,
            holder=fields.holder,
            expiration_date=fields.expiration_date,
            updated_at=datetime.now(UTC),
        )
        self.rows[card_id] = card
        return replace(card)

    async def update_active(self, db, card_id: int, active: bool) -> None:
        if card_id in self.rows:
            self.rows[card_id] = replace(self.rows[card_id], active=active)

    async def delete(self, db, card_id: int) -> None:
        self.rows.pop(card_id, None)

    async def delete_for_user(self, db, user_id: int) -> int:
        doomed = [cid for cid, c in self.rows.items() if c.user_id == user_id]
        for cid in doomed:
            del self.rows[cid]
        return len(doomed)

    async def find_page(
        self, db, filters: CardFilter, page: PageRequest
    ) -> tuple[list[PaymentCard], int]:
        matched = [
            replace(c)
            for c in sorted(self.rows.values(), key=lambda c: c.id)
            if _contains(c.holder, filters.holder)
            and (filters.active is None or c.active == filters.active)
            and (filters.user_id is None or c.user_id == filters.user_id)
        ]
        return _page(matched, page)


class InMemoryViewCacheStore:
    """Dict-backed cache store; `failing = True` makes every call raise."""

    def __init__(self, prefix: str = "test-service") -> None:
        self._prefix = prefix
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.evicted: list[str] = []
        self.failing = False

    @property
    def prefix(self) -> str:
        return self._prefix

    def key(self, kind: ViewKind, entity_id: int) -> str:
        return build_key(self._prefix, kind, entity_id)

    def _check(self) -> None:
        if self.failing:
            raise RedisConnectionError("cache unavailable")

    async def get(self, kind: ViewKind, entity_id: int) -> str | None:
        self._check()
        return self.data.get(self.key(kind, entity_id))

    async def put(self, kind: ViewKind, entity_id: int, value: str, ttl_seconds: int) -> None:
        self._check()
        key = self.key(kind, entity_id)
        self.data[key] = value
        self.ttls[key] = ttl_seconds

    async def evict(self, kind: ViewKind, entity_id: int) -> None:
        self._check()
        key = self.key(kind, entity_id)
        self.evicted.append(key)
        self.data.pop(key, None)

    async def scan_keys(self, pattern: str) -> list[str]:
        self._check()
        head = pattern.rstrip("*")
        return [k for k in self.data if k.startswith(head)]

    async def evict_matching(self, pattern: str) -> int:
        keys = await self.scan_keys(pattern)
        for key in keys:
            del self.data[key]
        return len(keys)


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
def user_repo() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def card_repo() -> InMemoryCardRepository:
    return InMemoryCardRepository()


@pytest.fixture
def cache_store() -> InMemoryViewCacheStore:
    return InMemoryViewCacheStore()


@pytest.fixture
def user_service(user_repo, card_repo, cache_store) -> UserAccountService:
    return UserAccountService(repo=user_repo, card_repo=card_repo, cache_store=cache_store)


@pytest.fixture
def card_service(user_repo, card_repo, cache_store) -> PaymentCardService:
    return PaymentCardService(
        repo=card_repo, user_repo=user_repo, cache_store=cache_store, today=lambda: TODAY
    )


@pytest.fixture
def today() -> date:
    return TODAY
