"""Pydantic request/response schemas for us_user.

UserResponse and UserWithCardsResponse are the shapes stored in the
`user-by-id` and `user-with-cards-by-id` cache views, so changing a field
here changes what old cache entries decode to (undecodable entries are
treated as misses).
"""

from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.us_card.application.schemas import CardResponse
from src.us_common.datetime_utils import utc_today
from src.us_user.domain.models import User, UserFields


class UserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    surname: str = Field(..., min_length=1, max_length=255)
    birth_date: date | None = None
    email: EmailStr = Field(..., max_length=255)

    @field_validator("name", "surname")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()

    @field_validator("birth_date")
    @classmethod
    def birth_date_in_past(cls, v: date | None) -> date | None:
        if v is not None and v >= utc_today():
            raise ValueError("Birth date must be in the past")
        return v

    def to_fields(self) -> UserFields:
        return UserFields(
            name=self.name,
            surname=self.surname,
            email=str(self.email),
            birth_date=self.birth_date,
        )


class UserResponse(BaseModel):
    id: int
    name: str
    surname: str
    birth_date: date | None
    email: str
    active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            surname=user.surname,
            birth_date=user.birth_date,
            email=user.email,
            active=user.active,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class UserWithCardsResponse(UserResponse):
    payment_cards: list[CardResponse]

    @classmethod
    def compose(cls, user: User, cards: list[CardResponse]) -> "UserWithCardsResponse":
        return cls(**UserResponse.from_domain(user).model_dump(), payment_cards=cards)
