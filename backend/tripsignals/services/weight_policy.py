"""Weight policy — maps interaction kinds and star ratings to preference deltas.

Adding an interaction kind is a single edit to INTERACTION_WEIGHTS.
"""

from tripsignals.errors import InvalidRating, UnknownInteractionKind

INTERACTION_WEIGHTS = {
    "view": 1.0,
    "swipe_right": 1.0,
    "click": 2.0,
    "save": 3.0,
    "message": 4.0,
    "share": 5.0,
    "book": 10.0,
    "swipe_left": -2.0,
}

RATING_CENTER = 3
RATING_MIN, RATING_MAX = 1, 5
DEFAULT_RATING_WEIGHT = 1.0

# Adding a target to a trip is a smaller bump than a 5-star rating
TRIP_ADD_DELTA = 0.75


def normalize_kind(kind: str) -> str:
    """Canonical spelling of an interaction kind ("swipe-left" -> "swipe_left")."""
    return str(kind).strip().lower().replace("-", "_")


def weight_of(kind: str) -> float:
    """Return the fixed weight for an interaction kind."""
    key = normalize_kind(kind)
    try:
        return INTERACTION_WEIGHTS[key]
    except KeyError:
        raise UnknownInteractionKind(f"Unknown interaction kind: {kind!r}") from None


def swipe_kind(direction: str) -> str:
    """Map a swipe direction (left/right) to its interaction kind."""
    kind = f"swipe_{str(direction).strip().lower()}"
    if kind not in INTERACTION_WEIGHTS:
        raise UnknownInteractionKind(f"Unknown swipe direction: {direction!r}")
    return kind


def validate_rating(rating) -> int:
    """Return the rating if it is an integer in [1, 5], else raise InvalidRating."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRating(f"Rating must be an integer, got {rating!r}")
    if not RATING_MIN <= rating <= RATING_MAX:
        raise InvalidRating(f"Rating must be between {RATING_MIN} and {RATING_MAX}, got {rating}")
    return rating


def rating_delta(rating: int, rating_weight: float = DEFAULT_RATING_WEIGHT) -> float:
    """Preference delta for a star rating.

    A 3-star rating is neutral; 5 stars gives +2 and 1 star gives -2 at the
    default weight.
    """
    return (validate_rating(rating) - RATING_CENTER) * rating_weight
