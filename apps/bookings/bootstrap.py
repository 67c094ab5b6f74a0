"""
Wiring of booking command handlers to the message bus.

Called from ``BookingsConfig.ready()``. Views and tasks dispatch commands
through ``message_bus.handle_command`` and never build handlers themselves.
"""

import logging

from django.conf import settings  # type: ignore

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
    ConfirmPaymentCommand,
    ConfirmPaymentHandler,
    CreateBookingCommand,
    CreateBookingHandler,
)
from apps.bookings.domain.references import DEFAULT_PREFIX
from apps.bookings.infrastructure.repositories import BookingUnitOfWork, DjangoBookingRepository
from apps.vehicles.services import DjangoVehicleCatalog

logger = logging.getLogger(__name__)


def build_handlers(booking_repo=None, vehicle_catalog=None) -> dict:
    lock_timeout = float(getattr(settings, "BOOKING_LOCK_TIMEOUT_SECONDS", 5))
    booking_repo = booking_repo or DjangoBookingRepository(lock_timeout=lock_timeout)
    vehicle_catalog = vehicle_catalog or DjangoVehicleCatalog()

    create_handler = CreateBookingHandler(
        booking_repo,
        vehicle_catalog,
        BookingUnitOfWork,
        reference_prefix=getattr(settings, "BOOKING_REFERENCE_PREFIX", DEFAULT_PREFIX),
        max_reference_attempts=getattr(settings, "BOOKING_REFERENCE_MAX_ATTEMPTS", 3),
        lock_timeout=lock_timeout,
    )
    return {
        CreateBookingCommand: create_handler,
        ChangeBookingStatusCommand: ChangeBookingStatusHandler(booking_repo, vehicle_catalog, BookingUnitOfWork),
        ConfirmPaymentCommand: ConfirmPaymentHandler(booking_repo, vehicle_catalog, BookingUnitOfWork),
        CancelBookingCommand: CancelBookingHandler(booking_repo, vehicle_catalog, BookingUnitOfWork),
    }


def register_command_handlers(bus) -> None:
    for command_type, handler in build_handlers().items():
        if bus.has_command_handler(command_type):
            continue
        bus.register_command_handler(command_type, handler)
    logger.debug("Booking command handlers registered")
