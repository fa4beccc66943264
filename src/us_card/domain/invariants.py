"""Payment card invariants, checked in the service layer before any write.

CARD-LIMIT: a user holds at most `max_cards` cards (default 5). The check
is only sound while the owning user row is locked (see
PaymentCardService.create_card).
CARD-EXPIRY: expiration_date is strictly after today at create/update time;
a card expiring today is rejected.
"""

import logging
from datetime import date

from config.settings import settings
from src.us_common.errors import CardLimitExceededError, InvalidExpirationDateError

logger = logging.getLogger(__name__)


def ensure_card_capacity(user_id: int, current_count: int, max_cards: int | None = None) -> None:
    limit = settings.MAX_CARDS_PER_USER if max_cards is None else max_cards
    if current_count >= limit:
        logger.warning("Card limit reached: user=%s, cards=%d, limit=%d",
                       user_id, current_count, limit)
        raise CardLimitExceededError(user_id, limit)


def ensure_expiration_in_future(expiration: date, today: date) -> None:
    if expiration <= today:
        raise InvalidExpirationDateError(expiration)
