"""Overall rating of a review."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from .exceptions import InvalidRating

MIN_RATING = 1
MAX_RATING = 5
RATING_CATEGORIES = (
    'cleanliness_rating',
    'maintenance_rating',
    'communication_rating',
    'convenience_rating',
    'accuracy_rating',
)


def validate_rating(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidRating()
    if not MIN_RATING <= value <= MAX_RATING:
        raise InvalidRating()
    return value


def calculate_overall_rating(ratings: Iterable[int]) -> Decimal:
    """
    Arithmetic mean of the category ratings, one decimal place, half-up.

    >>> calculate_overall_rating([5, 4, 3, 5, 4])
    Decimal('4.2')
    """
    values = [validate_rating(value) for value in ratings]
    if len(values) != len(RATING_CATEGORIES):
        raise InvalidRating(f'Expected {len(RATING_CATEGORIES)} category ratings, got {len(values)}.')
    mean = Decimal(sum(values)) / Decimal(len(values))
    return mean.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP)
