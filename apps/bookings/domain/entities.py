"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: Main aggregate representing a vehicle reservation
- BookingStatus: operational lifecycle of a booking
- PaymentStatus: financial settlement of a booking
- BookedRange: the slice of a booking the availability calendar needs
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from shared.domain.base import Aggregate, ValueObject, utcnow
from shared.domain.value_objects import DateRange, Money

from apps.bookings.domain.pricing import PriceBreakdown


class BookingStatus(Enum):
    """
    Booking lifecycle

    State transitions:
    - REQUESTED -> CONFIRMED (owner accepts)
    - REQUESTED -> CANCELLED (renter cancels or owner rejects)
    - CONFIRMED -> CANCELLED (renter or owner cancels)
    - CONFIRMED -> ACTIVE (deposit paid)
    - ACTIVE -> COMPLETED (vehicle returned)
    """
    REQUESTED = 'requested'
    CONFIRMED = 'confirmed'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'     # terminal, kept for audit; frees the dates


class PaymentStatus(Enum):
    """Payment settlement tracking"""
    PENDING_DEPOSIT = 'pending_deposit'
    DEPOSIT_PAID = 'deposit_paid'
    FULLY_PAID = 'fully_paid'


@dataclass(frozen=True)
class BookedRange(ValueObject):
    """A date range held on a vehicle's calendar by one booking"""
    vehicle_id: Any
    dates: DateRange
    status: BookingStatus
    booking_id: UUID | None = None

    @property
    def blocks_dates(self) -> bool:
        return self.status != BookingStatus.CANCELLED


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Represents a renter's reservation of a vehicle for specific dates.

    Key invariants:
    - dates.start_date < dates.end_date
    - the price snapshot is fixed at creation and never recomputed
    - payment status is frozen once the booking is cancelled or completed
    - only non-cancelled bookings hold dates on the vehicle's calendar
    """

    booking_reference: str

    # References
    vehicle_id: Any
    renter_id: Any

    dates: DateRange
    price: PriceBreakdown

    includes_chauffeur: bool = False
    pickup_address: str = ''
    dropoff_address: str = ''
    pickup_location_id: int | None = None
    dropoff_location_id: int | None = None

    status: BookingStatus = BookingStatus.REQUESTED
    payment_status: PaymentStatus = PaymentStatus.PENDING_DEPOSIT
    actual_return_date: datetime | None = None

    # Optimistic concurrency token, bumped by the repository on every save
    version: int = 0

    def transition_to(self, target: BookingStatus, role):
        """
        Move to ``target`` on behalf of an actor with ``role``.

        Raises IllegalTransition or Forbidden and leaves the booking
        untouched when the move is not allowed.
        """
        from apps.bookings.domain.state_machine import check_status_transition

        check_status_transition(self.status, self.payment_status, target, role)

        now = utcnow()
        self.status = target
        if target == BookingStatus.COMPLETED:
            self.actual_return_date = now
        self.touch(now)

    def confirm_payment(self, payment_type, role) -> bool:
        """
        Record a confirmed payment.

        Returns True when the payment also advanced the booking status.
        """
        from apps.bookings.domain.state_machine import next_payment_status, reconcile_after_payment

        payment_status = next_payment_status(self.status, self.payment_status, payment_type, role)
        status = reconcile_after_payment(self.status, payment_status)

        advanced = status != self.status
        self.payment_status = payment_status
        self.status = status
        self.touch()
        return advanced

    def can_be_cancelled(self) -> bool:
        from apps.bookings.domain.state_machine import CANCELLABLE_STATUSES

        return self.status in CANCELLABLE_STATUSES

    def blocks_dates(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    def as_booked_range(self) -> BookedRange:
        return BookedRange(
            vehicle_id=self.vehicle_id,
            dates=self.dates,
            status=self.status,
            booking_id=self.id,
        )

    @property
    def total_days(self) -> int:
        return self.price.total_days

    @property
    def currency_code(self) -> str:
        return self.price.currency

    @property
    def total_amount(self) -> Money:
        return self.price.total_amount

    def __str__(self):
        return f"Booking {self.booking_reference} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, booking_reference={self.booking_reference}, "
            f"status={self.status.value}, payment_status={self.payment_status.value}, "
            f"dates={self.dates})"
        )
