"""Write-transaction scope for application services.

    async with write_transaction(db, email=...):
        ...store mutations...
    # committed here; evict caches after this point

Commits on success. On any failure rolls back and re-raises; a UNIQUE
violation that slipped past the service pre-checks is re-raised as the
matching ConflictError.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.us_common.integrity import translate_integrity_error


@asynccontextmanager
async def write_transaction(
    db: AsyncSession, *, email: str | None = None
) -> AsyncIterator[None]:
    try:
        yield
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        translated = translate_integrity_error(exc, email)
        if translated is exc:
            raise
        raise translated from exc
    except Exception:
        await db.rollback()
        raise
