"""Composable WHERE-clause builder for payment card list queries.

Same folding rule as the user filters: absent filter → TRUE.
"""

from sqlalchemy import ColumnElement, and_, func, true

from src.us_card.domain.models import CardFilter
from src.us_card.infrastructure.db_models import PaymentCardORM


def build_card_predicate(filters: CardFilter) -> ColumnElement[bool]:
    clauses: list[ColumnElement[bool]] = []
    if filters.holder is not None and filters.holder.strip():
        clauses.append(
            func.lower(PaymentCardORM.holder).contains(filters.holder.lower(), autoescape=True)
        )
    if filters.active is not None:
        clauses.append(PaymentCardORM.active == filters.active)
    if filters.user_id is not None:
        clauses.append(PaymentCardORM.user_id == filters.user_id)
    return and_(true(), *clauses)
