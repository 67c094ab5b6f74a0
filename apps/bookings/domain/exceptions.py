"""
Booking Domain Errors

Every failure the booking engine reports is a ``BookingError`` subclass
with a stable ``code``. Callers branch on the class (or the code when the
error crossed a serialization boundary); anything that is not a
``BookingError`` is an unexpected infrastructure fault.
"""

from __future__ import annotations


class BookingError(Exception):
    """Base class for booking engine errors."""

    code = 'booking_error'
    default_message = 'Booking operation failed.'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'code': self.code, 'detail': self.message}


# ===== Caller input =====

class InvalidDateRange(BookingError):
    code = 'invalid_date_range'
    default_message = 'The end date must be after the start date and the start date cannot be in the past.'


class InvalidDuration(BookingError):
    code = 'invalid_duration'
    default_message = 'A booking must last at least one day.'


# ===== Missing entities =====

class VehicleNotFound(BookingError):
    code = 'vehicle_not_found'
    default_message = 'Vehicle not found or not available for booking.'


class BookingNotFound(BookingError):
    code = 'booking_not_found'
    default_message = 'Booking not found.'


# ===== Authorization =====

class SelfBookingForbidden(BookingError):
    code = 'self_booking_forbidden'
    default_message = 'You cannot book your own vehicle.'


class Forbidden(BookingError):
    code = 'forbidden'
    default_message = 'You do not have permission to perform this action.'


# ===== Business rules =====

class DateRangeUnavailable(BookingError):
    code = 'date_range_unavailable'
    default_message = 'The vehicle is not available for the selected dates.'


class StateError(BookingError):
    """A request that does not fit the booking's current state."""

    def __init__(
        self,
        message: str | None = None,
        *,
        current_status=None,
        current_payment_status=None,
    ):
        super().__init__(message)
        self.current_status = current_status
        self.current_payment_status = current_payment_status

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['current_status'] = getattr(self.current_status, 'value', self.current_status)
        data['current_payment_status'] = getattr(
            self.current_payment_status, 'value', self.current_payment_status
        )
        return data


class IllegalTransition(StateError):
    code = 'illegal_transition'
    default_message = 'This status change is not allowed from the current booking state.'


class InvalidState(StateError):
    code = 'invalid_state'
    default_message = 'Cannot cancel a booking that is already active, completed or cancelled.'


# ===== Infrastructure-shaped =====

class ReferenceCollision(BookingError):
    """Raised by repositories; retried by the orchestrator, never surfaced."""

    code = 'reference_collision'
    default_message = 'Booking reference already in use.'


class TransientFailure(BookingError):
    code = 'transient_failure'
    default_message = 'The booking could not be processed right now. Please retry.'
