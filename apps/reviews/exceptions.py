"""Review submission errors.

They share ``BookingError`` as a base so the API renders them with the
same error body and status mapping as booking errors.
"""

from __future__ import annotations

from apps.bookings.domain.exceptions import BookingError


class ReviewNotAllowed(BookingError):
    code = 'review_not_allowed'
    default_message = 'Only the renter of a completed booking can review it.'


class DuplicateReview(BookingError):
    code = 'duplicate_review'
    default_message = 'You have already reviewed this booking.'


class InvalidRating(BookingError):
    code = 'invalid_rating'
    default_message = 'All ratings must be whole numbers between 1 and 5.'
