"""Domain models for us_card: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass
class PaymentCard:
    id: int
    user_id: int             # owning user; the card never outlives it
    number: str              # opaque digit string, unique across all cards
    holder: str
    expiration_date: date
    active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class CardFields:
    """Client-writable columns of a card row (insert and full update)."""

    number: str
    holder: str
    expiration_date: date


@dataclass(frozen=True)
class CardFilter:
    """Optional list filters; a None (or blank text) field does not filter."""

    holder: str | None = None
    active: bool | None = None
    user_id: int | None = None
