"""Re-classify store constraint violations as domain conflicts.

The application-level uniqueness pre-checks are racy: two requests can both
pass `exists_by_email` and the second insert then trips the UNIQUE
constraint. That IntegrityError must surface as the matching ConflictError,
never as a raw driver error.
"""

from sqlalchemy.exc import IntegrityError

from src.us_common.errors import DuplicateCardNumberError, DuplicateEmailError

USERS_EMAIL_CONSTRAINT = "uq_users_email"
CARDS_NUMBER_CONSTRAINT = "uq_payment_cards_number"


def constraint_name(exc: IntegrityError) -> str | None:
    """Best-effort constraint name of a violated constraint.

    asyncpg exposes `constraint_name` on the driver exception chained behind
    the DBAPI adapter; other drivers only carry it in the message text.
    """
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return str(name)
    text_ = str(orig)
    for known in (USERS_EMAIL_CONSTRAINT, CARDS_NUMBER_CONSTRAINT):
        if known in text_:
            return known
    return None


def translate_integrity_error(exc: IntegrityError, email: str | None = None) -> Exception:
    """Return the domain error for a known constraint, else the original error."""
    name = constraint_name(exc)
    if name == USERS_EMAIL_CONSTRAINT:
        return DuplicateEmailError(email)
    if name == CARDS_NUMBER_CONSTRAINT:
        return DuplicateCardNumberError()
    return exc
