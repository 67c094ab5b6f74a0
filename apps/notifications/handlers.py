"""Message bus subscriptions for booking events."""

from __future__ import annotations

import logging

from apps.bookings.domain.events import (
    BookingActivated,
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingEvent,
    BookingRequested,
    PaymentConfirmed,
)

from .tasks import deliver_booking_notification

logger = logging.getLogger(__name__)

NOTIFIED_EVENTS = (
    BookingRequested,
    BookingConfirmed,
    BookingCancelled,
    PaymentConfirmed,
    BookingActivated,
    BookingCompleted,
)


def enqueue_booking_notification(event: BookingEvent) -> None:
    """Hand the event to Celery; delivery happens outside the request."""

    try:
        deliver_booking_notification.delay(event.to_dict())
    except Exception as e:
        logger.error(
            f"Could not enqueue notification for {event.event_type} "
            f"on booking {event.booking_reference}: {e}",
            exc_info=True,
        )
        return
    logger.debug(f"Queued notification for {event.event_type} on booking {event.booking_reference}")


def register_event_handlers(bus) -> None:
    for event_type in NOTIFIED_EVENTS:
        bus.register_event_handler(event_type, enqueue_booking_notification)
