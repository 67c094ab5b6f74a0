"""Models for the review domain.

Defines the ``Review`` entity: feedback left by a renter for a vehicle
after a completed booking. Each review carries five category ratings,
the derived overall rating and an optional comment. One reviewer can
leave at most one review per booking.
"""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.core.validators import MaxValueValidator, MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from .ratings import MAX_RATING, MIN_RATING


def _category_rating(help_text):
    return models.PositiveSmallIntegerField(
        validators=[MinValueValidator(MIN_RATING), MaxValueValidator(MAX_RATING)],
        help_text=help_text,
    )


class Review(models.Model):
    """Represents a review left by a renter for a vehicle."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking = models.ForeignKey(
        'bookings.Booking', on_delete=models.PROTECT, related_name='reviews'
    )
    vehicle = models.ForeignKey(
        'vehicles.Vehicle', on_delete=models.PROTECT, related_name='reviews'
    )
    reviewer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='reviews_written'
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='reviews_received'
    )

    overall_rating = models.DecimalField(max_digits=2, decimal_places=1)
    cleanliness_rating = _category_rating(_('Cleanliness of the vehicle'))
    maintenance_rating = _category_rating(_('Mechanical condition'))
    communication_rating = _category_rating(_('Communication with the owner'))
    convenience_rating = _category_rating(_('Pickup and drop-off convenience'))
    accuracy_rating = _category_rating(_('Accuracy of the listing'))
    comment = models.TextField(blank=True)

    is_published = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['booking', 'reviewer'], name='review_unique_booking_reviewer'),
        ]
        indexes = [
            models.Index(fields=['vehicle', '-created_at'], name='review_vehicle_idx'),
            models.Index(fields=['owner'], name='review_owner_idx'),
        ]

    def __str__(self) -> str:
        return f"Review by {self.reviewer_id} for vehicle {self.vehicle_id} (Rating: {self.overall_rating})"
