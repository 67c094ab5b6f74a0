"""Notification services: message rendering and e-mail delivery."""

from __future__ import annotations

import logging

from django.conf import settings  # type: ignore
from django.core.mail import send_mail  # type: ignore
from django.utils.html import strip_tags  # type: ignore

logger = logging.getLogger(__name__)

RENTER = "renter"
OWNER = "owner"

# event_type -> parties to notify
RECIPIENTS = {
    "BookingRequested": (OWNER,),
    "BookingConfirmed": (RENTER,),
    "PaymentConfirmed": (RENTER,),
    "BookingActivated": (RENTER, OWNER),
    "BookingCompleted": (RENTER, OWNER),
}


# ============================================================================
# EMAIL NOTIFICATIONS
# ============================================================================

def send_email_notification(
    recipient_email: str,
    subject: str,
    message: str,
    *,
    html_message: str | None = None,
) -> bool:
    """
    Send one notification e-mail.

    Returns:
        bool: True if the message was handed to the mail backend
    """
    if html_message and not message:
        message = strip_tags(html_message)

    try:
        send_mail(
            subject=subject,
            message=message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient_email],
            html_message=html_message,
            fail_silently=False,
        )
    except Exception as e:
        logger.error(f"Failed to send email to {recipient_email}: {e}", exc_info=True)
        return False

    logger.info(f"Email sent successfully to {recipient_email}: {subject}")
    return True


def recipient_parties(payload: dict) -> tuple[str, ...]:
    """Which parties hear about the event described by ``payload``."""

    event_type = payload["event_type"]
    if event_type == "BookingCancelled":
        cancelled_by = payload.get("cancelled_by")
        if cancelled_by == RENTER:
            return (OWNER,)
        if cancelled_by == OWNER:
            return (RENTER,)
        return (RENTER, OWNER)
    return RECIPIENTS.get(event_type, ())


def render_booking_message(payload: dict) -> tuple[str, str]:
    """Subject and plain-text body for a booking event payload."""

    reference = payload["booking_reference"]
    vehicle = payload.get("vehicle_description") or "your vehicle"
    dates = f"{payload['start_date']} to {payload['end_date']}"
    event_type = payload["event_type"]

    if event_type == "BookingRequested":
        subject = f"New booking request {reference}"
        body = (
            f"A renter requested {vehicle} from {dates}. "
            f"Total: {payload['total_amount']} {payload['currency_code']}. "
            "Please confirm or decline the request."
        )
    elif event_type == "BookingConfirmed":
        subject = f"Booking {reference} confirmed"
        body = (
            f"Your booking of {vehicle} from {dates} was confirmed by the owner. "
            "The security deposit is now due."
        )
    elif event_type == "BookingCancelled":
        subject = f"Booking {reference} cancelled"
        body = f"The booking of {vehicle} from {dates} was cancelled by the {payload['cancelled_by']}."
        if payload.get("reason"):
            body += f" Reason: {payload['reason']}"
    elif event_type == "PaymentConfirmed":
        subject = f"Payment received for booking {reference}"
        body = (
            f"We confirmed your {payload['payment_type']} payment for {vehicle} "
            f"({dates}). Payment status: {payload['payment_status']}."
        )
        if payload.get("activated"):
            body += " Your rental is now active."
    elif event_type == "BookingActivated":
        subject = f"Booking {reference} is active"
        body = f"The rental of {vehicle} from {dates} has started."
    elif event_type == "BookingCompleted":
        subject = f"Booking {reference} completed"
        body = f"The rental of {vehicle} from {dates} is complete. Thank you for using GMoP."
    else:
        subject = f"Update on booking {reference}"
        body = f"Your booking of {vehicle} from {dates} was updated."

    return subject, body
