"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
These are published after successful transaction commits and consumed
by the notification collaborator. Every event carries enough context to
render a message without another database round trip.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any
from uuid import UUID

from shared.domain.base import DomainEvent


@dataclass(kw_only=True)
class BookingEvent(DomainEvent):
    """Common payload of every booking event"""
    booking_id: UUID
    booking_reference: str
    vehicle_id: Any
    vehicle_description: str
    renter_id: Any
    owner_id: Any
    start_date: date
    end_date: date

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'booking_id': str(self.booking_id),
            'booking_reference': self.booking_reference,
            'vehicle_id': str(self.vehicle_id),
            'vehicle_description': self.vehicle_description,
            'renter_id': self.renter_id,
            'owner_id': self.owner_id,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
        })
        return data


@dataclass(kw_only=True)
class BookingRequested(BookingEvent):
    """
    Event: A renter requested a booking

    Triggers:
    - Notify the vehicle owner that a request awaits their answer
    """
    total_amount: str
    currency_code: str

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({'total_amount': self.total_amount, 'currency_code': self.currency_code})
        return data


@dataclass(kw_only=True)
class BookingConfirmed(BookingEvent):
    """
    Event: The owner accepted the request (REQUESTED -> CONFIRMED)

    Triggers:
    - Tell the renter the booking is confirmed and the deposit is due
    """


@dataclass(kw_only=True)
class BookingCancelled(BookingEvent):
    """
    Event: Booking was cancelled by the renter, rejected by the owner,
    or expired by the platform

    Triggers:
    - Notify the other party
    - The dates are free again
    """
    cancelled_by: str
    previous_status: str
    reason: str = ''

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'cancelled_by': self.cancelled_by,
            'previous_status': self.previous_status,
            'reason': self.reason,
        })
        return data


@dataclass(kw_only=True)
class PaymentConfirmed(BookingEvent):
    """
    Event: The platform confirmed a deposit or full payment

    Triggers:
    - Receipt to the renter
    - When ``activated`` is set the rental has started
    """
    payment_type: str
    payment_status: str
    activated: bool = False

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'payment_type': self.payment_type,
            'payment_status': self.payment_status,
            'activated': self.activated,
        })
        return data


@dataclass(kw_only=True)
class BookingActivated(BookingEvent):
    """Event: The platform started the rental (CONFIRMED -> ACTIVE)"""


@dataclass(kw_only=True)
class BookingCompleted(BookingEvent):
    """
    Event: The vehicle was returned (ACTIVE -> COMPLETED)

    Triggers:
    - Ask the renter for a review
    - Host payout becomes due
    """
    host_payout_amount: str = ''

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['host_payout_amount'] = self.host_payout_amount
        return data
