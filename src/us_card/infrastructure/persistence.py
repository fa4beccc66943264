"""PaymentCardRepository: concrete implementation of PaymentCardRepositoryProtocol.

Writes use INSERT/UPDATE ... RETURNING so the server-managed columns
(id, created_at, updated_at) come back in the same round trip.

Transaction ownership: the CALLER (application service) commits or rolls
back. Nothing here commits.
"""

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_card.domain.models import CardFields, CardFilter, PaymentCard
from src.us_card.infrastructure.db_models import PaymentCardORM
from src.us_card.infrastructure.filters import build_card_predicate
from src.us_common.errors import InternalError, PaymentCardNotFoundError
from src.us_common.pagination import PageRequest

_CARD_COLUMNS = (
    PaymentCardORM.id,
    PaymentCardORM.user_id,
    PaymentCardORM.number,
    PaymentCardORM.holder,
    PaymentCardORM.expiration_date,
    PaymentCardORM.active,
    PaymentCardORM.created_at,
    PaymentCardORM.updated_at,
)


def _row_to_card(row: object) -> PaymentCard:
    return PaymentCard(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        number=row.number,  # type: ignore[attr-defined]
        holder=row.holder,  # type: ignore[attr-defined]
        expiration_date=row.expiration_date,  # type: ignore[attr-defined]
        active=row.active,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class PaymentCardRepository:
    async def get_by_id(self, db: AsyncSession, card_id: int) -> PaymentCard | None:
        result = await db.execute(select(*_CARD_COLUMNS).where(PaymentCardORM.id == card_id))
        row = result.fetchone()
        return _row_to_card(row) if row else None

    async def get_by_id_for_user(
        self, db: AsyncSession, card_id: int, user_id: int
    ) -> PaymentCard | None:
        result = await db.execute(
            select(*_CARD_COLUMNS).where(
                PaymentCardORM.id == card_id, PaymentCardORM.user_id == user_id
            )
        )
        row = result.fetchone()
        return _row_to_card(row) if row else None

    async def get_by_number(self, db: AsyncSession, number: str) -> PaymentCard | None:
        result = await db.execute(select(*_CARD_COLUMNS).where(PaymentCardORM.number == number))
        row = result.fetchone()
        return _row_to_card(row) if row else None

    async def exists_by_number(self, db: AsyncSession, number: str) -> bool:
        result = await db.execute(
            select(PaymentCardORM.id).where(PaymentCardORM.number == number).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def count_for_user(self, db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(PaymentCardORM)
            .where(PaymentCardORM.user_id == user_id)
        )
        return int(result.scalar_one())

    async def list_for_user(self, db: AsyncSession, user_id: int) -> list[PaymentCard]:
        result = await db.execute(
            select(*_CARD_COLUMNS)
            .where(PaymentCardORM.user_id == user_id)
            .order_by(PaymentCardORM.id)
        )
        return [_row_to_card(row) for row in result.fetchall()]

    async def insert(self, db: AsyncSession, user_id: int, fields: CardFields) -> PaymentCard:
        result = await db.execute(
            insert(PaymentCardORM)
            .values(
                user_id=user_id,
                number=fields.number,
                holder=fields.holder,
                expiration_date=fields.expiration_date,
                active=True,
            )
            .returning(*_CARD_COLUMNS)
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Card insert returned no rows: this should never happen")
        return _row_to_card(row)

    async def update(self, db: AsyncSession, card_id: int, fields: CardFields) -> PaymentCard:
        result = await db.execute(
            update(PaymentCardORM)
            .where(PaymentCardORM.id == card_id)
            .values(
                number=fields.number,
                holder=fields.holder,
                expiration_date=fields.expiration_date,
                updated_at=func.now(),
            )
            .returning(*_CARD_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = result.fetchone()
        if row is None:
            raise PaymentCardNotFoundError(card_id)
        return _row_to_card(row)

    async def update_active(self, db: AsyncSession, card_id: int, active: bool) -> None:
        await db.execute(
            update(PaymentCardORM)
            .where(PaymentCardORM.id == card_id)
            .values(active=active, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )

    async def delete(self, db: AsyncSession, card_id: int) -> None:
        await db.execute(
            delete(PaymentCardORM)
            .where(PaymentCardORM.id == card_id)
            .execution_options(synchronize_session=False)
        )

    async def delete_for_user(self, db: AsyncSession, user_id: int) -> int:
        result = await db.execute(
            delete(PaymentCardORM)
            .where(PaymentCardORM.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    async def find_page(
        self, db: AsyncSession, filters: CardFilter, page: PageRequest
    ) -> tuple[list[PaymentCard], int]:
        predicate = build_card_predicate(filters)
        count_result = await db.execute(
            select(func.count()).select_from(PaymentCardORM).where(predicate)
        )
        total = int(count_result.scalar_one())
        result = await db.execute(
            select(*_CARD_COLUMNS)
            .where(predicate)
            .order_by(PaymentCardORM.id)
            .offset(page.offset)
            .limit(page.size)
        )
        return [_row_to_card(row) for row in result.fetchall()], total
