"""UserRepository: concrete implementation of UserRepositoryProtocol.

Writes use INSERT/UPDATE ... RETURNING so the server-managed columns
(id, created_at, updated_at) come back in the same round trip.

Transaction ownership: the CALLER (application service) commits or rolls
back. Nothing here commits.
"""

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_common.errors import InternalError, UserNotFoundError
from src.us_common.pagination import PageRequest
from src.us_user.domain.models import User, UserFields, UserFilter
from src.us_user.infrastructure.db_models import UserORM
from src.us_user.infrastructure.filters import build_user_predicate

_USER_COLUMNS = (
    UserORM.id,
    UserORM.name,
    UserORM.surname,
    UserORM.email,
    UserORM.birth_date,
    UserORM.active,
    UserORM.created_at,
    UserORM.updated_at,
)


def _row_to_user(row: object) -> User:
    return User(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        surname=row.surname,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        birth_date=row.birth_date,  # type: ignore[attr-defined]
        active=row.active,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


class UserRepository:
    async def get_by_id(self, db: AsyncSession, user_id: int) -> User | None:
        result = await db.execute(select(*_USER_COLUMNS).where(UserORM.id == user_id))
        row = result.fetchone()
        return _row_to_user(row) if row else None

    async def lock_by_id(self, db: AsyncSession, user_id: int) -> User | None:
        """SELECT ... FOR UPDATE: holds the user row until the transaction ends."""
        result = await db.execute(
            select(*_USER_COLUMNS).where(UserORM.id == user_id).with_for_update()
        )
        row = result.fetchone()
        return _row_to_user(row) if row else None

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None:
        result = await db.execute(select(*_USER_COLUMNS).where(UserORM.email == email))
        row = result.fetchone()
        return _row_to_user(row) if row else None

    async def exists_by_email(self, db: AsyncSession, email: str) -> bool:
        result = await db.execute(select(UserORM.id).where(UserORM.email == email).limit(1))
        return result.scalar_one_or_none() is not None

    async def insert(self, db: AsyncSession, fields: UserFields) -> User:
        result = await db.execute(
            insert(UserORM)
            .values(
                name=fields.name,
                surname=fields.surname,
                email=fields.email,
                birth_date=fields.birth_date,
                active=True,
            )
            .returning(*_USER_COLUMNS)
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("User insert returned no rows: this should never happen")
        return _row_to_user(row)

    async def update(self, db: AsyncSession, user_id: int, fields: UserFields) -> User:
        result = await db.execute(
            update(UserORM)
            .where(UserORM.id == user_id)
            .values(
                name=fields.name,
                surname=fields.surname,
                email=fields.email,
                birth_date=fields.birth_date,
                updated_at=func.now(),
            )
            .returning(*_USER_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        row = result.fetchone()
        if row is None:
            raise UserNotFoundError(user_id)
        return _row_to_user(row)

    async def update_active(self, db: AsyncSession, user_id: int, active: bool) -> None:
        await db.execute(
            update(UserORM)
            .where(UserORM.id == user_id)
            .values(active=active, updated_at=func.now())
            .execution_options(synchronize_session=False)
        )

    async def delete(self, db: AsyncSession, user_id: int) -> None:
        await db.execute(
            delete(UserORM)
            .where(UserORM.id == user_id)
            .execution_options(synchronize_session=False)
        )

    async def find_page(
        self, db: AsyncSession, filters: UserFilter, page: PageRequest
    ) -> tuple[list[User], int]:
        predicate = build_user_predicate(filters)
        count_result = await db.execute(
            select(func.count()).select_from(UserORM).where(predicate)
        )
        total = int(count_result.scalar_one())
        result = await db.execute(
            select(*_USER_COLUMNS)
            .where(predicate)
            .order_by(UserORM.id)
            .offset(page.offset)
            .limit(page.size)
        )
        return [_row_to_user(row) for row in result.fetchall()], total
