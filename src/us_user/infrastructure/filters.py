"""Composable WHERE-clause builder for user list queries.

Only the filters that are present contribute a clause; an absent filter is an
unconditional TRUE, never "compare against a default value". Text filters are
case-insensitive substring matches with LIKE wildcards escaped; a blank
string counts as absent.
"""

from sqlalchemy import ColumnElement, and_, func, true

from src.us_user.domain.models import UserFilter
from src.us_user.infrastructure.db_models import UserORM


def build_user_predicate(filters: UserFilter) -> ColumnElement[bool]:
    clauses: list[ColumnElement[bool]] = []
    if filters.name is not None and filters.name.strip():
        clauses.append(func.lower(UserORM.name).contains(filters.name.lower(), autoescape=True))
    if filters.surname is not None and filters.surname.strip():
        clauses.append(
            func.lower(UserORM.surname).contains(filters.surname.lower(), autoescape=True)
        )
    if filters.active is not None:
        clauses.append(UserORM.active == filters.active)
    if filters.born_before is not None:
        clauses.append(UserORM.birth_date < filters.born_before)
    return and_(true(), *clauses)
