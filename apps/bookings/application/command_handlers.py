"""
Booking Command Handlers

These are the use cases for the booking domain (the reservation
orchestrator). They orchestrate domain operations within transactions.

Commands:
- CreateBookingCommand: Renter requests a vehicle for a date range
- ChangeBookingStatusCommand: Owner/platform moves a booking through its lifecycle
- ConfirmPaymentCommand: Platform records a deposit or full payment
- CancelBookingCommand: Renter cancels their own booking
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable
from uuid import UUID, uuid4
import logging

from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import utcnow
from shared.domain.value_objects import DateRange

from apps.bookings.application.ports import (
    AbstractBookingRepository,
    AbstractVehicleCatalog,
    VehicleSnapshot,
)
from apps.bookings.domain.availability import has_conflict
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.events import (
    BookingActivated,
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingRequested,
    PaymentConfirmed,
)
from apps.bookings.domain.exceptions import (
    BookingNotFound,
    DateRangeUnavailable,
    Forbidden,
    InvalidDateRange,
    InvalidState,
    ReferenceCollision,
    SelfBookingForbidden,
    TransientFailure,
    VehicleNotFound,
)
from apps.bookings.domain.pricing import PriceBreakdown, calculate_price
from apps.bookings.domain.references import DEFAULT_PREFIX, new_reference
from apps.bookings.domain.state_machine import Actor, ActorRole, PaymentType, authorize_actor

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    This is the primary entry point for creating bookings.
    """
    vehicle_id: Any
    renter_id: Any
    start_date: date
    end_date: date
    includes_chauffeur: bool = False
    pickup_address: str = ''
    dropoff_address: str = ''


@dataclass
class ChangeBookingStatusCommand:
    """Command to move a booking to another status on behalf of an actor"""
    booking_id: UUID
    actor_id: Any
    actor_role: ActorRole
    target_status: BookingStatus
    reason: str = ''


@dataclass
class ConfirmPaymentCommand:
    """Command to record a payment collected by the platform"""
    booking_id: UUID
    actor_id: Any
    payment_type: PaymentType = PaymentType.DEPOSIT
    actor_role: ActorRole = ActorRole.ADMIN


@dataclass
class CancelBookingCommand:
    """Command for a renter cancelling their own booking"""
    booking_id: UUID
    renter_id: Any
    reason: str = ''


def _event_context(booking: Booking, vehicle: VehicleSnapshot | None) -> dict:
    return {
        'aggregate_id': booking.id,
        'booking_id': booking.id,
        'booking_reference': booking.booking_reference,
        'vehicle_id': booking.vehicle_id,
        'vehicle_description': vehicle.description if vehicle else '',
        'renter_id': booking.renter_id,
        'owner_id': vehicle.owner_id if vehicle else None,
        'start_date': booking.dates.start_date,
        'end_date': booking.dates.end_date,
    }


# ===== Command Handlers =====

class CreateBookingHandler:
    """
    Handler for CreateBooking command

    Double booking prevention:
    1. Start the unit of work (one database transaction)
    2. Take the vehicle's calendar lock (bounded wait)
    3. Re-read the vehicle's non-cancelled bookings and run the conflict check
    4. Insert the booking while the lock is still held
    5. Commit, then publish BookingRequested
    A storage-level exclusion constraint, where available, backs step 3.

    Reference collisions roll the attempt back and retry with a new id;
    after ``max_reference_attempts`` the request fails as transient.
    """

    def __init__(
        self,
        booking_repo: AbstractBookingRepository,
        vehicle_catalog: AbstractVehicleCatalog,
        uow_factory: Callable = DjangoUnitOfWork,
        *,
        reference_prefix: str = DEFAULT_PREFIX,
        max_reference_attempts: int = 3,
        lock_timeout: float = 5.0,
        today: Callable[[], date] = date.today,
    ):
        self.booking_repo = booking_repo
        self.vehicle_catalog = vehicle_catalog
        self.uow_factory = uow_factory
        self.reference_prefix = reference_prefix
        self.max_reference_attempts = max_reference_attempts
        self.lock_timeout = lock_timeout
        self.today = today

    def __call__(self, command: CreateBookingCommand) -> Booking:
        return self.handle(command)

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Handle booking creation

        Returns: Created Booking aggregate, status REQUESTED / PENDING_DEPOSIT

        Raises:
            VehicleNotFound, SelfBookingForbidden, InvalidDateRange,
            DateRangeUnavailable, TransientFailure
        """
        logger.info(
            f"Creating booking for vehicle {command.vehicle_id}, "
            f"renter {command.renter_id}, dates {command.start_date} - {command.end_date}"
        )

        vehicle = self.vehicle_catalog.get_bookable_vehicle(command.vehicle_id)
        if vehicle is None:
            raise VehicleNotFound()

        if command.renter_id == vehicle.owner_id:
            raise SelfBookingForbidden()

        dates = self._validate_dates(command.start_date, command.end_date)

        price = calculate_price(
            vehicle.daily_rate,
            dates.days,
            chauffeur_requested=command.includes_chauffeur,
            chauffeur_available=vehicle.chauffeur_available,
            chauffeur_daily_fee=vehicle.chauffeur_daily_fee,
        )

        for attempt in range(1, self.max_reference_attempts + 1):
            try:
                booking = self._reserve(command, vehicle, dates, price)
            except ReferenceCollision:
                logger.warning(
                    f"Booking reference collision for vehicle {vehicle.vehicle_id} "
                    f"(attempt {attempt}/{self.max_reference_attempts})"
                )
                continue

            logger.info(
                f"Booking created successfully: {booking.booking_reference} "
                f"(ID: {booking.id})"
            )
            return booking

        logger.error(
            f"Giving up on booking for vehicle {vehicle.vehicle_id} after "
            f"{self.max_reference_attempts} reference collisions"
        )
        raise TransientFailure("Could not allocate a booking reference. Please retry.")

    def _validate_dates(self, start_date: date, end_date: date) -> DateRange:
        if start_date < self.today():
            raise InvalidDateRange("Start date cannot be in the past.")
        if end_date <= start_date:
            raise InvalidDateRange("End date must be after start date.")
        return DateRange(start_date, end_date)

    def _reserve(
        self,
        command: CreateBookingCommand,
        vehicle: VehicleSnapshot,
        dates: DateRange,
        price: PriceBreakdown,
    ) -> Booking:
        booking_id = uuid4()
        created_at = utcnow()
        reference = new_reference(created_at.date(), booking_id, self.reference_prefix)

        with self.uow_factory() as uow:
            with self.booking_repo.calendar_lock(vehicle.vehicle_id, self.lock_timeout):
                existing = self.booking_repo.existing_bookings(vehicle.vehicle_id)
                if has_conflict(vehicle.vehicle_id, dates, existing):
                    logger.info(f"Vehicle {vehicle.vehicle_id} is not available for {dates}")
                    raise DateRangeUnavailable()

                booking = Booking(
                    id=booking_id,
                    created_at=created_at,
                    updated_at=created_at,
                    booking_reference=reference,
                    vehicle_id=vehicle.vehicle_id,
                    renter_id=command.renter_id,
                    dates=dates,
                    price=price,
                    includes_chauffeur=command.includes_chauffeur and vehicle.chauffeur_available,
                    pickup_address=command.pickup_address,
                    dropoff_address=command.dropoff_address,
                    pickup_location_id=vehicle.location_id,
                    dropoff_location_id=vehicle.location_id,
                )
                booking.add_event(BookingRequested(
                    **_event_context(booking, vehicle),
                    total_amount=str(price.total_amount.amount),
                    currency_code=price.currency,
                ))

                self.booking_repo.add(booking)
                uow.collect_events(booking)

        return booking


class _BookingLifecycleHandler:
    """Loads a booking under a row lock and checks who is asking"""

    def __init__(
        self,
        booking_repo: AbstractBookingRepository,
        vehicle_catalog: AbstractVehicleCatalog,
        uow_factory: Callable = DjangoUnitOfWork,
    ):
        self.booking_repo = booking_repo
        self.vehicle_catalog = vehicle_catalog
        self.uow_factory = uow_factory

    def __call__(self, command):
        return self.handle(command)

    def _load_for(self, booking_id, actor: Actor) -> tuple[Booking, VehicleSnapshot | None]:
        booking = self.booking_repo.get_by_id(booking_id, lock=True)
        if booking is None:
            # Non-party callers must not learn whether the id exists
            if actor.is_platform:
                raise BookingNotFound()
            raise Forbidden()

        vehicle = self.vehicle_catalog.get_vehicle(booking.vehicle_id)
        authorize_actor(actor, booking.renter_id, vehicle.owner_id if vehicle else None)
        return booking, vehicle


class ChangeBookingStatusHandler(_BookingLifecycleHandler):
    """Handler for owner confirm/reject and platform activate/complete/expire"""

    def handle(self, command: ChangeBookingStatusCommand) -> Booking:
        actor = Actor(command.actor_id, command.actor_role)
        logger.info(
            f"{actor.role.value} {actor.actor_id} requests booking {command.booking_id} "
            f"-> {command.target_status.value}"
        )

        with self.uow_factory() as uow:
            booking, vehicle = self._load_for(command.booking_id, actor)
            previous_status = booking.status

            booking.transition_to(command.target_status, actor.role)
            booking.add_event(self._event_for(booking, vehicle, previous_status, actor, command.reason))

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(
            f"Booking {booking.booking_reference}: "
            f"{previous_status.value} -> {booking.status.value}"
        )
        return booking

    @staticmethod
    def _event_for(booking, vehicle, previous_status, actor, reason):
        context = _event_context(booking, vehicle)
        if booking.status == BookingStatus.CONFIRMED:
            return BookingConfirmed(**context)
        if booking.status == BookingStatus.CANCELLED:
            return BookingCancelled(
                **context,
                cancelled_by=actor.role.value,
                previous_status=previous_status.value,
                reason=reason,
            )
        if booking.status == BookingStatus.ACTIVE:
            return BookingActivated(**context)
        return BookingCompleted(
            **context,
            host_payout_amount=str(booking.price.host_payout.amount),
        )


class ConfirmPaymentHandler(_BookingLifecycleHandler):
    """Handler for platform payment confirmations"""

    def handle(self, command: ConfirmPaymentCommand) -> Booking:
        actor = Actor(command.actor_id, command.actor_role)
        logger.info(
            f"Confirming {command.payment_type.value} payment for booking {command.booking_id}"
        )

        with self.uow_factory() as uow:
            booking, vehicle = self._load_for(command.booking_id, actor)

            activated = booking.confirm_payment(command.payment_type, actor.role)
            booking.add_event(PaymentConfirmed(
                **_event_context(booking, vehicle),
                payment_type=command.payment_type.value,
                payment_status=booking.payment_status.value,
                activated=activated,
            ))

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(
            f"Admin confirmed {command.payment_type.value} payment for booking "
            f"{booking.booking_reference} ({booking.status.value}/{booking.payment_status.value})"
        )
        return booking


class CancelBookingHandler(_BookingLifecycleHandler):
    """Handler for a renter cancelling their own booking"""

    def handle(self, command: CancelBookingCommand) -> Booking:
        actor = Actor(command.renter_id, ActorRole.RENTER)
        logger.info(f"Cancelling booking {command.booking_id}, reason: {command.reason}")

        with self.uow_factory() as uow:
            booking, vehicle = self._load_for(command.booking_id, actor)

            if not booking.can_be_cancelled():
                raise InvalidState(
                    current_status=booking.status,
                    current_payment_status=booking.payment_status,
                )

            previous_status = booking.status
            booking.transition_to(BookingStatus.CANCELLED, actor.role)
            booking.add_event(BookingCancelled(
                **_event_context(booking, vehicle),
                cancelled_by=actor.role.value,
                previous_status=previous_status.value,
                reason=command.reason,
            ))

            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(f"Booking {booking.booking_reference} cancelled successfully")
        return booking
