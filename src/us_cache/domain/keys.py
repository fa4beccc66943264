"""Cache view kinds and the key format shared with every service instance.

Key layout: "<prefix>:<view-kind>::<entity-id>", e.g.
    user-service:user-by-id::42
    user-service:user-with-cards-by-id::42
    user-service:cards-of-user::42
"""

from enum import Enum


class ViewKind(str, Enum):
    USER_BY_ID = "user-by-id"
    USER_WITH_CARDS_BY_ID = "user-with-cards-by-id"
    CARDS_OF_USER = "cards-of-user"


# Every view that embeds a user's own fields or the list of the user's cards.
USER_VIEW_KINDS: tuple[ViewKind, ...] = (
    ViewKind.USER_BY_ID,
    ViewKind.USER_WITH_CARDS_BY_ID,
    ViewKind.CARDS_OF_USER,
)

# Views of the owning user that embed card data. `user-by-id` carries no card
# fields, so card mutations leave it alone.
CARD_OWNER_VIEW_KINDS: tuple[ViewKind, ...] = (
    ViewKind.CARDS_OF_USER,
    ViewKind.USER_WITH_CARDS_BY_ID,
)


def build_key(prefix: str, kind: ViewKind, entity_id: int | str) -> str:
    return f"{prefix}:{kind.value}::{entity_id}"


def namespace_pattern(prefix: str) -> str:
    """SCAN pattern matching every key this service owns."""
    return f"{prefix}:*"


def kind_of_key(prefix: str, key: str) -> ViewKind | None:
    """Classify a raw key by view kind, None for foreign or malformed keys."""
    head = f"{prefix}:"
    if not key.startswith(head):
        return None
    kind_part, sep, _ = key[len(head):].partition("::")
    if not sep:
        return None
    try:
        return ViewKind(kind_part)
    except ValueError:
        return None
