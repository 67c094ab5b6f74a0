"""Serializers for the booking domain."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.state_machine import PaymentType

from .models import Booking


class BookingCreateSerializer(serializers.Serializer):
    """Booking request made by a renter.

    Only shape is checked here; date rules, availability and pricing
    belong to the booking engine.
    """

    vehicle = serializers.UUIDField()
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    includes_chauffeur = serializers.BooleanField(default=False)
    pickup_address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    dropoff_address = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")


class BookingSerializer(serializers.ModelSerializer):
    """Read representation of a booking with its price snapshot."""

    vehicle_id = serializers.ReadOnlyField(source="vehicle.id")
    vehicle_name = serializers.ReadOnlyField(source="vehicle.display_name")
    owner_id = serializers.ReadOnlyField(source="vehicle.owner_id")
    renter_id = serializers.ReadOnlyField(source="renter.id")

    class Meta:
        model = Booking
        fields = [
            "id",
            "booking_reference",
            "vehicle_id",
            "vehicle_name",
            "owner_id",
            "renter_id",
            "start_date",
            "end_date",
            "actual_return_date",
            "includes_chauffeur",
            "pickup_location_id",
            "dropoff_location_id",
            "pickup_address",
            "dropoff_address",
            "daily_rate",
            "total_days",
            "chauffeur_fee",
            "subtotal",
            "platform_fee_rate",
            "platform_fee",
            "security_deposit",
            "total_amount",
            "host_payout_amount",
            "currency_code",
            "status",
            "payment_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=[
            BookingStatus.CONFIRMED.value,
            BookingStatus.CANCELLED.value,
            BookingStatus.ACTIVE.value,
            BookingStatus.COMPLETED.value,
        ]
    )
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class BookingCancelSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")


class PaymentConfirmationSerializer(serializers.Serializer):
    payment_type = serializers.ChoiceField(
        choices=[payment_type.value for payment_type in PaymentType],
        default=PaymentType.DEPOSIT.value,
    )


class BookedDateRangeSerializer(serializers.Serializer):
    start_date = serializers.DateField(source="dates.start_date")
    end_date = serializers.DateField(source="dates.end_date")
    status = serializers.CharField(source="status.value")


class DashboardSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    requested = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    pending_deposit = serializers.IntegerField()
