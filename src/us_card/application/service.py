"""PaymentCardService: card lifecycle and the card-side cache contract.

Card reads are never cached here; only the owner's composite views
(`cards-of-user`, `user-with-cards-by-id`) hold cards, and every successful
card mutation evicts exactly those two keys for the owning user after commit.

create_card order of operations (all inside one transaction):
  1. SELECT ... FOR UPDATE on the owning user row  → UserNotFoundError
  2. Expiration strictly after today                → InvalidExpirationDateError
  3. Count cards and apply the per-user limit       → CardLimitExceededError
  4. Number uniqueness pre-check                    → DuplicateCardNumberError
  5. INSERT ... RETURNING, then commit
Concurrent creates for the same user serialise on step 1, so the count seen
in step 3 cannot be stale when the insert commits.
"""

import logging
from collections.abc import Callable
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.us_cache.application.invalidator import CacheInvalidator
from src.us_cache.domain.store import ViewCacheStoreProtocol
from src.us_cache.infrastructure.redis_store import RedisViewCacheStore
from src.us_card.application.schemas import CardRequest, CardResponse
from src.us_card.domain.invariants import ensure_card_capacity, ensure_expiration_in_future
from src.us_card.domain.models import CardFilter, PaymentCard
from src.us_card.domain.repository import PaymentCardRepositoryProtocol
from src.us_card.infrastructure.persistence import PaymentCardRepository
from src.us_common.datetime_utils import utc_today
from src.us_common.errors import (
    DuplicateCardNumberError,
    InvalidArgumentError,
    PaymentCardNotFoundError,
    UserNotFoundError,
)
from src.us_common.pagination import Page, PageRequest
from src.us_common.transaction import write_transaction
from src.us_user.domain.repository import UserRepositoryProtocol
from src.us_user.infrastructure.persistence import UserRepository

logger = logging.getLogger(__name__)


class PaymentCardService:
    def __init__(
        self,
        repo: PaymentCardRepositoryProtocol | None = None,
        user_repo: UserRepositoryProtocol | None = None,
        cache_store: ViewCacheStoreProtocol | None = None,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self._repo: PaymentCardRepositoryProtocol = repo or PaymentCardRepository()
        self._user_repo: UserRepositoryProtocol = user_repo or UserRepository()
        self._invalidator = CacheInvalidator(cache_store or RedisViewCacheStore())
        self._today = today

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_card(
        self, db: AsyncSession, request: CardRequest, user_id: int
    ) -> CardResponse:
        fields = request.to_fields()
        logger.info("Creating payment card for user id: %s", user_id)
        async with write_transaction(db):
            if await self._user_repo.lock_by_id(db, user_id) is None:
                raise UserNotFoundError(user_id)
            ensure_expiration_in_future(fields.expiration_date, self._today())
            count = await self._repo.count_for_user(db, user_id)
            ensure_card_capacity(user_id, count)
            if await self._repo.exists_by_number(db, fields.number):
                logger.warning("Duplicate card number attempt for user id: %s", user_id)
                raise DuplicateCardNumberError()
            card = await self._repo.insert(db, user_id, fields)

        await self._invalidator.evict_card_owner_views(user_id)
        logger.info("Payment card created with id: %s for user id: %s", card.id, user_id)
        return CardResponse.from_domain(card)

    async def update_card(
        self, db: AsyncSession, card_id: int, request: CardRequest
    ) -> CardResponse:
        fields = request.to_fields()
        logger.info("Updating payment card with id: %s", card_id)
        async with write_transaction(db):
            current = await self._require_card(db, card_id)
            ensure_expiration_in_future(fields.expiration_date, self._today())
            if current.number != fields.number:
                holder = await self._repo.get_by_number(db, fields.number)
                if holder is not None and holder.id != card_id:
                    logger.warning("Duplicate card number attempt during update for card id: %s",
                                   card_id)
                    raise DuplicateCardNumberError()
            card = await self._repo.update(db, card_id, fields)

        await self._invalidator.evict_card_owner_views(card.user_id)
        logger.info("Payment card updated with id: %s", card_id)
        return CardResponse.from_domain(card)

    async def activate_card(self, db: AsyncSession, card_id: int) -> None:
        await self._set_active(db, card_id, True)

    async def deactivate_card(self, db: AsyncSession, card_id: int) -> None:
        await self._set_active(db, card_id, False)

    async def delete_card(self, db: AsyncSession, card_id: int) -> None:
        logger.info("Deleting payment card with id: %s", card_id)
        async with write_transaction(db):
            # Owner id must be read before the row is gone
            owner_id = (await self._require_card(db, card_id)).user_id
            await self._repo.delete(db, card_id)

        await self._invalidator.evict_card_owner_views(owner_id)
        logger.info("Payment card deleted with id: %s", card_id)

    async def _set_active(self, db: AsyncSession, card_id: int, active: bool) -> None:
        action = "Activating" if active else "Deactivating"
        logger.info("%s payment card with id: %s", action, card_id)
        async with write_transaction(db):
            owner_id = (await self._require_card(db, card_id)).user_id
            await self._repo.update_active(db, card_id, active)
        await self._invalidator.evict_card_owner_views(owner_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_card(self, db: AsyncSession, card_id: int) -> CardResponse:
        return CardResponse.from_domain(await self._require_card(db, card_id))

    async def get_card_by_number(self, db: AsyncSession, number: str) -> CardResponse:
        if not number.strip():
            raise InvalidArgumentError("Card number must not be blank")
        card = await self._repo.get_by_number(db, number)
        if card is None:
            raise PaymentCardNotFoundError(number=number)
        return CardResponse.from_domain(card)

    async def get_card_for_user(
        self, db: AsyncSession, user_id: int, card_id: int
    ) -> CardResponse:
        card = await self._repo.get_by_id_for_user(db, card_id, user_id)
        if card is None:
            raise PaymentCardNotFoundError(card_id, user_id=user_id)
        return CardResponse.from_domain(card)

    async def list_cards(
        self, db: AsyncSession, filters: CardFilter, page: PageRequest
    ) -> Page[CardResponse]:
        cards, total = await self._repo.find_page(db, filters, page)
        return Page[CardResponse].build([CardResponse.from_domain(c) for c in cards], page, total)

    async def list_active_cards(self, db: AsyncSession, page: PageRequest) -> Page[CardResponse]:
        return await self.list_cards(db, CardFilter(active=True), page)

    async def list_cards_for_user(
        self, db: AsyncSession, user_id: int, page: PageRequest
    ) -> Page[CardResponse]:
        return await self.list_cards(db, CardFilter(user_id=user_id), page)

    async def list_active_cards_for_user(
        self, db: AsyncSession, user_id: int, page: PageRequest
    ) -> Page[CardResponse]:
        return await self.list_cards(db, CardFilter(user_id=user_id, active=True), page)

    async def _require_card(self, db: AsyncSession, card_id: int) -> PaymentCard:
        card = await self._repo.get_by_id(db, card_id)
        if card is None:
            raise PaymentCardNotFoundError(card_id)
        return card
