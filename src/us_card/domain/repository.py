"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.us_card.domain.models import CardFields, CardFilter, PaymentCard
from src.us_common.pagination import PageRequest


class PaymentCardRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, card_id: int) -> PaymentCard | None: ...

    async def get_by_id_for_user(
        self, db: AsyncSession, card_id: int, user_id: int
    ) -> PaymentCard | None: ...

    async def get_by_number(self, db: AsyncSession, number: str) -> PaymentCard | None: ...

    async def exists_by_number(self, db: AsyncSession, number: str) -> bool: ...

    async def count_for_user(self, db: AsyncSession, user_id: int) -> int: ...

    async def list_for_user(self, db: AsyncSession, user_id: int) -> list[PaymentCard]: ...

    async def insert(self, db: AsyncSession, user_id: int, fields: CardFields) -> PaymentCard: ...

    async def update(self, db: AsyncSession, card_id: int, fields: CardFields) -> PaymentCard: ...

    async def update_active(self, db: AsyncSession, card_id: int, active: bool) -> None: ...

    async def delete(self, db: AsyncSession, card_id: int) -> None: ...

    async def delete_for_user(self, db: AsyncSession, user_id: int) -> int: ...

    async def find_page(
        self, db: AsyncSession, filters: CardFilter, page: PageRequest
    ) -> tuple[list[PaymentCard], int]: ...
