"""Celery tasks delivering booking notifications."""

from __future__ import annotations

import logging

from celery import shared_task  # type: ignore
from django.contrib.auth import get_user_model  # type: ignore

from .services import OWNER, RENTER, recipient_parties, render_booking_message, send_email_notification

logger = logging.getLogger(__name__)


@shared_task(name="notifications.deliver_booking_notification")
def deliver_booking_notification(payload: dict) -> dict[str, int]:
    """
    Mail the parties concerned by one booking event.

    ``payload`` is ``BookingEvent.to_dict()``. Users without an e-mail
    address are skipped.

    Returns:
        dict: {"sent": delivered messages, "failed": rejected by the backend}
    """
    party_ids = {RENTER: payload.get("renter_id"), OWNER: payload.get("owner_id")}
    user_ids = [party_ids[party] for party in recipient_parties(payload) if party_ids[party] is not None]
    if not user_ids:
        logger.warning(f"No recipients for {payload.get('event_type')} on {payload.get('booking_reference')}")
        return {"sent": 0, "failed": 0}

    subject, message = render_booking_message(payload)
    sent = failed = 0
    for user in get_user_model().objects.filter(pk__in=user_ids).exclude(email=""):
        if send_email_notification(user.email, subject, message):
            sent += 1
        else:
            failed += 1

    return {"sent": sent, "failed": failed}
