"""Domain models for us_user: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class User:
    id: int
    name: str
    surname: str
    email: str
    birth_date: date | None = None
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class UserFields:
    """Client-writable columns of a user row (insert and full update)."""

    name: str
    surname: str
    email: str
    birth_date: date | None = None


@dataclass(frozen=True)
class UserFilter:
    """Optional list filters; a None (or blank text) field does not filter."""

    name: str | None = None
    surname: str | None = None
    active: bool | None = None
    born_before: date | None = None
