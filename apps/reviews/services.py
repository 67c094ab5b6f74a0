"""Review submission and eligibility queries."""

from __future__ import annotations

import logging
from typing import Mapping

from django.db import IntegrityError, transaction  # type: ignore
from django.db.models import Exists, OuterRef, QuerySet  # type: ignore

from apps.bookings.domain.exceptions import Forbidden
from apps.bookings.models import Booking

from .exceptions import DuplicateReview, ReviewNotAllowed
from .models import Review
from .ratings import RATING_CATEGORIES, calculate_overall_rating

logger = logging.getLogger(__name__)


def pending_reviewable_bookings(renter_id) -> QuerySet:
    """Completed bookings of ``renter_id`` that this renter has not reviewed yet."""

    already_reviewed = Review.objects.filter(booking=OuterRef("pk"), reviewer_id=renter_id)
    return (
        Booking.objects.filter(renter_id=renter_id, status=Booking.Status.COMPLETED)
        .exclude(Exists(already_reviewed))
        .select_related("vehicle")
        .order_by("-end_date")
    )


def published_reviews_for_vehicle(vehicle_id) -> QuerySet:
    return Review.objects.filter(vehicle_id=vehicle_id, is_published=True).select_related("reviewer")


@transaction.atomic
def submit_review(booking_id, reviewer, ratings: Mapping[str, int], comment: str = "") -> Review:
    """
    Record a review for a completed booking.

    Raises:
        Forbidden: the booking does not exist or ``reviewer`` is not a party to it
        ReviewNotAllowed: the reviewer is not the renter, or the booking is not completed
        DuplicateReview: the reviewer already reviewed this booking
        InvalidRating: a category rating is missing or outside 1..5
    """
    booking = (
        Booking.objects.select_for_update()
        .select_related("vehicle")
        .filter(pk=booking_id)
        .first()
    )
    if booking is None or not booking.is_party(reviewer):
        raise Forbidden()
    if booking.renter_id != reviewer.pk:
        raise ReviewNotAllowed("Only the renter can review this booking.")
    if booking.status != Booking.Status.COMPLETED:
        raise ReviewNotAllowed("Can only review completed bookings.")
    if Review.objects.filter(booking=booking, reviewer=reviewer).exists():
        raise DuplicateReview()

    category_ratings = {category: ratings.get(category) for category in RATING_CATEGORIES}
    overall = calculate_overall_rating(category_ratings.values())

    try:
        with transaction.atomic():
            review = Review.objects.create(
                booking=booking,
                vehicle_id=booking.vehicle_id,
                reviewer=reviewer,
                owner_id=booking.vehicle.owner_id,
                overall_rating=overall,
                comment=comment,
                **category_ratings,
            )
    except IntegrityError as exc:
        raise DuplicateReview() from exc

    logger.info(
        f"Review {review.pk} submitted for booking {booking.booking_reference} "
        f"(overall {overall})"
    )
    return review
