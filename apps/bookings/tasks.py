"""Celery tasks for the booking domain."""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task  # type: ignore
from django.conf import settings  # type: ignore
from django.utils import timezone  # type: ignore

from shared.application.message_bus import message_bus

from apps.bookings.application.command_handlers import ChangeBookingStatusCommand
from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.exceptions import BookingError
from apps.bookings.domain.state_machine import ActorRole

from .models import Booking

logger = logging.getLogger(__name__)

EXPIRY_REASON = "Request expired without an answer from the owner"


@shared_task(name="bookings.expire_stale_requests")
def expire_stale_requests() -> dict[str, int]:
    """
    Cancel REQUESTED bookings left unanswered for too long.

    Disabled unless ``BOOKING_REQUEST_EXPIRY_HOURS`` is set. Each booking
    is cancelled by the SYSTEM actor through the regular transition path,
    so it is locked, versioned and announced like any other cancellation.

    Returns:
        dict: {"expired": number of cancelled bookings, "skipped": number left alone}
    """
    expiry_hours = getattr(settings, "BOOKING_REQUEST_EXPIRY_HOURS", None)
    if not expiry_hours:
        return {"expired": 0, "skipped": 0}

    cutoff = timezone.now() - timedelta(hours=expiry_hours)
    stale_ids = list(
        Booking.objects.filter(
            status=Booking.Status.REQUESTED,
            created_at__lte=cutoff,
        ).values_list("id", flat=True)
    )

    expired_count = 0
    skipped_count = 0
    for booking_id in stale_ids:
        try:
            message_bus.handle_command(
                ChangeBookingStatusCommand(
                    booking_id=booking_id,
                    actor_id=None,
                    actor_role=ActorRole.SYSTEM,
                    target_status=BookingStatus.CANCELLED,
                    reason=EXPIRY_REASON,
                )
            )
        except BookingError as exc:
            # Answered or cancelled between the query and the transition
            logger.info(f"Skipped expiring booking {booking_id}: {exc.code}")
            skipped_count += 1
            continue
        expired_count += 1

    if expired_count > 0:
        logger.info(f"Expired {expired_count} stale booking requests")

    return {"expired": expired_count, "skipped": skipped_count}
