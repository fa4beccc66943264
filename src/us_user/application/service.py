"""UserAccountService: user lifecycle plus the user-side cache contract.

Reads of single users go through the read-through cache:
    get_user            → (user-by-id, id)
    get_user_with_cards → (user-with-cards-by-id, id)
    get_user_cards      → (cards-of-user, id)
List/search reads hit the store directly and are never cached.

Every successful mutation (update, activate, deactivate, delete) commits and
then evicts all three views of the user. create_user evicts nothing: no
existing key can refer to an id that did not exist yet.
"""

import logging
from datetime import date

from pydantic import TypeAdapter
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_cache.application.invalidator import CacheInvalidator
from src.us_cache.application.read_through import ReadThroughCache
from src.us_cache.domain.keys import ViewKind
from src.us_cache.domain.store import ViewCacheStoreProtocol
from src.us_cache.infrastructure.redis_store import RedisViewCacheStore
from src.us_card.application.schemas import CardResponse
from src.us_card.domain.repository import PaymentCardRepositoryProtocol
from src.us_card.infrastructure.persistence import PaymentCardRepository
from src.us_common.errors import DuplicateEmailError, InvalidArgumentError, UserNotFoundError
from src.us_common.pagination import Page, PageRequest
from src.us_common.transaction import write_transaction
from src.us_user.application.schemas import UserRequest, UserResponse, UserWithCardsResponse
from src.us_user.domain.models import User, UserFilter
from src.us_user.domain.repository import UserRepositoryProtocol
from src.us_user.infrastructure.persistence import UserRepository

logger = logging.getLogger(__name__)

_USER_VIEW = TypeAdapter(UserResponse)
_USER_WITH_CARDS_VIEW = TypeAdapter(UserWithCardsResponse)
_CARDS_VIEW = TypeAdapter(list[CardResponse])


class UserAccountService:
    def __init__(
        self,
        repo: UserRepositoryProtocol | None = None,
        card_repo: PaymentCardRepositoryProtocol | None = None,
        cache_store: ViewCacheStoreProtocol | None = None,
    ) -> None:
        self._repo: UserRepositoryProtocol = repo or UserRepository()
        self._card_repo: PaymentCardRepositoryProtocol = card_repo or PaymentCardRepository()
        store = cache_store or RedisViewCacheStore()
        self._views = ReadThroughCache(store)
        self._invalidator = CacheInvalidator(store)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_user(self, db: AsyncSession, request: UserRequest) -> UserResponse:
        fields = request.to_fields()
        logger.info("Creating user with email: %s", fields.email)
        async with write_transaction(db, email=fields.email):
            if await self._repo.exists_by_email(db, fields.email):
                logger.warning("Duplicate email attempt: %s", fields.email)
                raise DuplicateEmailError(fields.email)
            user = await self._repo.insert(db, fields)
        logger.info("User created with id: %s", user.id)
        return UserResponse.from_domain(user)

    async def update_user(
        self, db: AsyncSession, user_id: int, request: UserRequest
    ) -> UserResponse:
        fields = request.to_fields()
        logger.info("Updating user with id: %s", user_id)
        async with write_transaction(db, email=fields.email):
            current = await self._require_user(db, user_id)
            # Uniqueness is only re-checked when the email actually changes
            if current.email != fields.email and await self._repo.exists_by_email(db, fields.email):
                logger.warning("Duplicate email attempt during update for user id: %s", user_id)
                raise DuplicateEmailError(fields.email)
            user = await self._repo.update(db, user_id, fields)
        await self._invalidator.evict_user_views(user_id)
        logger.info("User updated with id: %s", user_id)
        return UserResponse.from_domain(user)

    async def activate_user(self, db: AsyncSession, user_id: int) -> None:
        await self._set_active(db, user_id, True)

    async def deactivate_user(self, db: AsyncSession, user_id: int) -> None:
        await self._set_active(db, user_id, False)

    async def delete_user(self, db: AsyncSession, user_id: int) -> None:
        """Delete the user and all of its cards in one transaction."""
        logger.info("Deleting user with id: %s", user_id)
        async with write_transaction(db):
            await self._require_user(db, user_id)
            removed = await self._card_repo.delete_for_user(db, user_id)
            await self._repo.delete(db, user_id)
        await self._invalidator.evict_user_views(user_id)
        logger.info("User deleted with id: %s (%d cards removed)", user_id, removed)

    async def _set_active(self, db: AsyncSession, user_id: int, active: bool) -> None:
        action = "Activating" if active else "Deactivating"
        logger.info("%s user with id: %s", action, user_id)
        async with write_transaction(db):
            await self._require_user(db, user_id)
            await self._repo.update_active(db, user_id, active)
        await self._invalidator.evict_user_views(user_id)

    # ------------------------------------------------------------------
    # Cached reads
    # ------------------------------------------------------------------

    async def get_user(self, db: AsyncSession, user_id: int) -> UserResponse:
        async def load() -> UserResponse:
            return UserResponse.from_domain(await self._require_user(db, user_id))

        return await self._views.get_or_load(ViewKind.USER_BY_ID, user_id, _USER_VIEW, load)

    async def get_user_with_cards(self, db: AsyncSession, user_id: int) -> UserWithCardsResponse:
        async def load() -> UserWithCardsResponse:
            user = await self._require_user(db, user_id)
            # Cards come straight from the store, never from the cards-of-user view
            cards = await self._card_repo.list_for_user(db, user_id)
            return UserWithCardsResponse.compose(
                user, [CardResponse.from_domain(c) for c in cards]
            )

        return await self._views.get_or_load(
            ViewKind.USER_WITH_CARDS_BY_ID, user_id, _USER_WITH_CARDS_VIEW, load
        )

    async def get_user_cards(self, db: AsyncSession, user_id: int) -> list[CardResponse]:
        async def load() -> list[CardResponse]:
            await self._require_user(db, user_id)
            cards = await self._card_repo.list_for_user(db, user_id)
            return [CardResponse.from_domain(c) for c in cards]

        return await self._views.get_or_load(ViewKind.CARDS_OF_USER, user_id, _CARDS_VIEW, load)

    # ------------------------------------------------------------------
    # Uncached reads
    # ------------------------------------------------------------------

    async def get_user_by_email(self, db: AsyncSession, email: str) -> UserResponse:
        if not email.strip():
            raise InvalidArgumentError("Email must not be blank")
        user = await self._repo.get_by_email(db, email)
        if user is None:
            raise UserNotFoundError(email=email)
        return UserResponse.from_domain(user)

    async def list_users(
        self, db: AsyncSession, filters: UserFilter, page: PageRequest
    ) -> Page[UserResponse]:
        users, total = await self._repo.find_page(db, filters, page)
        return Page[UserResponse].build([UserResponse.from_domain(u) for u in users], page, total)

    async def list_active_users(self, db: AsyncSession, page: PageRequest) -> Page[UserResponse]:
        return await self.list_users(db, UserFilter(active=True), page)

    async def search_by_name_surname(
        self, db: AsyncSession, name: str | None, surname: str | None, page: PageRequest
    ) -> Page[UserResponse]:
        return await self.list_users(db, UserFilter(name=name, surname=surname), page)

    async def list_active_users_born_before(
        self, db: AsyncSession, born_before: date, page: PageRequest
    ) -> Page[UserResponse]:
        return await self.list_users(
            db, UserFilter(active=True, born_before=born_before), page
        )

    async def _require_user(self, db: AsyncSession, user_id: int) -> User:
        user = await self._repo.get_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user
