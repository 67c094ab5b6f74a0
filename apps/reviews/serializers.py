"""Serializers for reviews.

Rating range checks are repeated here so malformed input is rejected
with field-level errors before it reaches ``submit_review``.
"""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.models import Booking

from .models import Review
from .ratings import MAX_RATING, MIN_RATING


def _rating_field():
    return serializers.IntegerField(min_value=MIN_RATING, max_value=MAX_RATING)


class ReviewCreateSerializer(serializers.Serializer):
    """Serializer for creating a new review."""

    booking = serializers.UUIDField()
    cleanliness_rating = _rating_field()
    maintenance_rating = _rating_field()
    communication_rating = _rating_field()
    convenience_rating = _rating_field()
    accuracy_rating = _rating_field()
    comment = serializers.CharField(max_length=2000, required=False, allow_blank=True, default='')


class ReviewSerializer(serializers.ModelSerializer):
    """Read serializer for reviews including related ids."""

    booking_reference = serializers.ReadOnlyField(source='booking.booking_reference')
    reviewer_name = serializers.SerializerMethodField()

    class Meta:
        model = Review
        fields = [
            'id',
            'booking',
            'booking_reference',
            'vehicle',
            'reviewer',
            'reviewer_name',
            'owner',
            'overall_rating',
            'cleanliness_rating',
            'maintenance_rating',
            'communication_rating',
            'convenience_rating',
            'accuracy_rating',
            'comment',
            'is_published',
            'created_at',
        ]
        read_only_fields = fields

    def get_reviewer_name(self, obj: Review) -> str:
        return obj.reviewer.get_full_name() or obj.reviewer.get_username()


class PendingReviewSerializer(serializers.ModelSerializer):
    """A completed booking still waiting for the renter's review."""

    booking_id = serializers.UUIDField(source='id', read_only=True)
    vehicle_name = serializers.ReadOnlyField(source='vehicle.display_name')

    class Meta:
        model = Booking
        fields = ['booking_id', 'booking_reference', 'vehicle_name', 'end_date']
