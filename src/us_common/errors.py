"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: User
  2xxx: Payment card
  9xxx: Request / system

Category bases map to HTTP statuses:
  NotFoundError → 404, ConflictError → 409,
  InvariantViolationError → 400, ValidationFailedError → 400.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class NotFoundError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class ConflictError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class InvariantViolationError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 400)


# --- 1xxx: User ---

class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: int | None = None, email: str | None = None) -> None:
        self.user_id = user_id
        if email is not None:
            message = f"User not found with email: {email}"
        else:
            message = f"User not found with id: {user_id}"
        super().__init__(1001, message)


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str | None = None) -> None:
        detail = f"User with email {email} already exists" if email else "Email already exists"
        super().__init__(1002, detail)


# --- 2xxx: Payment card ---

class PaymentCardNotFoundError(NotFoundError):
    """Scoped lookups (card of a given user) carry the owning user id."""

    def __init__(
        self,
        card_id: int | None = None,
        user_id: int | None = None,
        number: str | None = None,
    ) -> None:
        self.card_id = card_id
        self.user_id = user_id
        if number is not None:
            message = f"Card not found with number: {number}"
        else:
            message = f"Payment card not found with id: {card_id}"
            if user_id is not None:
                message += f" for user: {user_id}"
        super().__init__(2001, message)


class DuplicateCardNumberError(ConflictError):
    def __init__(self) -> None:
        super().__init__(2002, "Card with this number already exists")


class CardLimitExceededError(InvariantViolationError):
    def __init__(self, user_id: int, limit: int) -> None:
        self.user_id = user_id
        self.limit = limit
        super().__init__(2003, f"User cannot have more than {limit} payment cards")


class InvalidExpirationDateError(InvariantViolationError):
    def __init__(self, expiration: object) -> None:
        super().__init__(2004, f"Expiration date must be in the future: {expiration}")


# --- 9xxx: Request / system ---

class InvalidArgumentError(InvariantViolationError):
    def __init__(self, detail: str) -> None:
        super().__init__(9001, detail)


class ValidationFailedError(AppError):
    """Field-level request validation failure; `errors` maps field → message."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        super().__init__(9002, "Validation failed", 400)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9003, detail, 500)
