"""SQLAlchemy ORM model for the payment_cards table.

Table is created by Alembic migration: alembic/versions/001_create_users_and_cards.py
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import date, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Identity,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.us_common.database import Base
from src.us_common.integrity import CARDS_NUMBER_CONSTRAINT
from src.us_user.infrastructure.db_models import UserORM


class PaymentCardORM(Base):
    __tablename__ = "payment_cards"
    __table_args__ = (UniqueConstraint("number", name=CARDS_NUMBER_CONSTRAINT),)

    id: Mapped[int] = mapped_column(BigInteger, Identity(), primary_key=True)
    # ON DELETE CASCADE mirrors the explicit card delete done by UserAccountService
    user_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey(UserORM.id, ondelete="CASCADE"), nullable=False, index=True
    )
    number: Mapped[str] = mapped_column(String(19), nullable=False)
    holder: Mapped[str] = mapped_column(String(255), nullable=False)
    expiration_date: Mapped[date] = mapped_column(Date, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
