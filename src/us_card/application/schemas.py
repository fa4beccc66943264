"""Pydantic request/response schemas for us_card.

All responses are wrapped in ApiResponse at the router layer. CardResponse is
also the shape cached inside the `cards-of-user` and
`user-with-cards-by-id` views.

The "expiration strictly in the future" rule is a domain invariant enforced by
PaymentCardService (InvalidExpirationDateError), not a schema constraint.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

from src.us_card.domain.models import CardFields, PaymentCard


class CardRequest(BaseModel):
    number: str = Field(..., min_length=13, max_length=19, pattern=r"^[0-9]+$")
    holder: str = Field(..., min_length=1, max_length=255)
    expiration_date: date

    def to_fields(self) -> CardFields:
        return CardFields(
            number=self.number,
            holder=self.holder.strip(),
            expiration_date=self.expiration_date,
        )


class CardResponse(BaseModel):
    id: int
    user_id: int
    number: str
    holder: str
    expiration_date: date
    active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, card: PaymentCard) -> "CardResponse":
        return cls(
            id=card.id,
            user_id=card.user_id,
            number=card.number,
            holder=card.holder,
            expiration_date=card.expiration_date,
            active=card.active,
            created_at=card.created_at,
            updated_at=card.updated_at,
        )
