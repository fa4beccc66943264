"""Repository Protocol: dependency inversion for testability.

Unit tests inject a fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.us_common.pagination import PageRequest
from src.us_user.domain.models import User, UserFields, UserFilter


class UserRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, user_id: int) -> User | None: ...

    async def lock_by_id(self, db: AsyncSession, user_id: int) -> User | None: ...

    async def get_by_email(self, db: AsyncSession, email: str) -> User | None: ...

    async def exists_by_email(self, db: AsyncSession, email: str) -> bool: ...

    async def insert(self, db: AsyncSession, fields: UserFields) -> User: ...

    async def update(self, db: AsyncSession, user_id: int, fields: UserFields) -> User: ...

    async def update_active(self, db: AsyncSession, user_id: int, active: bool) -> None: ...

    async def delete(self, db: AsyncSession, user_id: int) -> None: ...

    async def find_page(
        self, db: AsyncSession, filters: UserFilter, page: PageRequest
    ) -> tuple[list[User], int]: ...
