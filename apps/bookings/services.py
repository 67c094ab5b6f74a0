"""Read-side queries for booking workflows."""

from __future__ import annotations

from datetime import date
from typing import List

from django.db.models import Count, Q, QuerySet  # type: ignore

from apps.bookings.domain.availability import calendar_ranges
from apps.bookings.domain.entities import BookedRange
from apps.bookings.infrastructure.repositories import DjangoBookingRepository

from .models import Booking


def _with_relations(queryset: QuerySet) -> QuerySet:
    return queryset.select_related("vehicle", "vehicle__owner", "renter")


def bookings_for_renter(renter) -> QuerySet:
    """Bookings made by ``renter``, newest first."""

    return _with_relations(Booking.objects.filter(renter=renter)).order_by("-created_at")


def booking_requests_for_owner(owner) -> QuerySet:
    """Bookings of vehicles listed by ``owner``, newest first."""

    return _with_relations(Booking.objects.filter(vehicle__owner=owner)).order_by("-created_at")


def bookings_visible_to(user) -> QuerySet:
    qs = _with_relations(Booking.objects.all())
    if user.is_staff:
        return qs
    return qs.filter(Q(renter=user) | Q(vehicle__owner=user))


def booked_date_ranges(vehicle_id, today: date | None = None) -> List[BookedRange]:
    """Blocked ranges for the availability calendar, ending today or later."""

    existing = DjangoBookingRepository().existing_bookings(vehicle_id)
    return calendar_ranges(existing, today or date.today())


def dashboard_counters() -> dict[str, int]:
    return Booking.objects.aggregate(
        total=Count("id"),
        requested=Count("id", filter=Q(status=Booking.Status.REQUESTED)),
        confirmed=Count("id", filter=Q(status=Booking.Status.CONFIRMED)),
        pending_deposit=Count("id", filter=Q(payment_status=Booking.PaymentStatus.PENDING_DEPOSIT)),
    )
