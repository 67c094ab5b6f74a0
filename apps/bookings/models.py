"""Booking persistence model.

The ORM row behind the ``Booking`` aggregate. Business rules live in
``apps.bookings.domain``; this model only stores the snapshot and
carries the database-level guards (valid dates, unique reference and,
on PostgreSQL, the range exclusion added by migration 0002).
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore

from apps.bookings.domain.entities import BookingStatus as DomainStatus
from apps.bookings.domain.entities import PaymentStatus as DomainPaymentStatus


class Booking(models.Model):
    """A vehicle reservation."""

    class Status(models.TextChoices):
        REQUESTED = DomainStatus.REQUESTED.value, _("Requested")
        CONFIRMED = DomainStatus.CONFIRMED.value, _("Confirmed")
        ACTIVE = DomainStatus.ACTIVE.value, _("Active")
        COMPLETED = DomainStatus.COMPLETED.value, _("Completed")
        CANCELLED = DomainStatus.CANCELLED.value, _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING_DEPOSIT = DomainPaymentStatus.PENDING_DEPOSIT.value, _("Pending deposit")
        DEPOSIT_PAID = DomainPaymentStatus.DEPOSIT_PAID.value, _("Deposit paid")
        FULLY_PAID = DomainPaymentStatus.FULLY_PAID.value, _("Fully paid")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    booking_reference = models.CharField(max_length=32, unique=True, editable=False)
    vehicle = models.ForeignKey(
        "vehicles.Vehicle",
        on_delete=models.PROTECT,
        related_name="bookings",
    )
    renter = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="rentals",
    )
    start_date = models.DateField()
    end_date = models.DateField()
    actual_return_date = models.DateTimeField(null=True, blank=True)

    includes_chauffeur = models.BooleanField(default=False)
    pickup_location_id = models.PositiveIntegerField(null=True, blank=True)
    dropoff_location_id = models.PositiveIntegerField(null=True, blank=True)
    pickup_address = models.CharField(max_length=255, blank=True)
    dropoff_address = models.CharField(max_length=255, blank=True)

    daily_rate = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text=_("Daily rate snapshot taken when the booking was created."),
    )
    total_days = models.PositiveIntegerField()
    chauffeur_fee = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    subtotal = models.DecimalField(max_digits=14, decimal_places=2)
    platform_fee_rate = models.DecimalField(max_digits=5, decimal_places=4)
    platform_fee = models.DecimalField(max_digits=14, decimal_places=2)
    security_deposit = models.DecimalField(max_digits=14, decimal_places=2)
    total_amount = models.DecimalField(max_digits=14, decimal_places=2)
    host_payout_amount = models.DecimalField(max_digits=14, decimal_places=2)
    currency_code = models.CharField(max_length=3)

    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.REQUESTED,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING_DEPOSIT,
    )
    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_date__gt=models.F("start_date")),
                name="booking_valid_dates",
            ),
        ]
        indexes = [
            models.Index(fields=["vehicle", "start_date", "end_date"], name="booking_vehicle_dates_idx"),
            models.Index(fields=["status"], name="booking_status_idx"),
            models.Index(fields=["renter", "-created_at"], name="booking_renter_idx"),
        ]

    def __str__(self) -> str:
        return f"Booking #{self.booking_reference} for {self.vehicle_id}"

    def is_party(self, user) -> bool:
        """Renter or owner of the booked vehicle"""
        return user.pk in (self.renter_id, self.vehicle.owner_id)
