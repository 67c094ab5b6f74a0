"""DRF exception handler translating booking engine errors to HTTP."""

import structlog
from rest_framework import status  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from apps.bookings.domain.exceptions import BookingError

logger = structlog.get_logger(__name__)

STATUS_BY_CODE = {
    'invalid_date_range': status.HTTP_400_BAD_REQUEST,
    'invalid_duration': status.HTTP_400_BAD_REQUEST,
    'invalid_rating': status.HTTP_400_BAD_REQUEST,
    'review_not_allowed': status.HTTP_400_BAD_REQUEST,
    'vehicle_not_found': status.HTTP_404_NOT_FOUND,
    'booking_not_found': status.HTTP_404_NOT_FOUND,
    'self_booking_forbidden': status.HTTP_403_FORBIDDEN,
    'forbidden': status.HTTP_403_FORBIDDEN,
    'date_range_unavailable': status.HTTP_409_CONFLICT,
    'illegal_transition': status.HTTP_409_CONFLICT,
    'invalid_state': status.HTTP_409_CONFLICT,
    'duplicate_review': status.HTTP_409_CONFLICT,
    'transient_failure': status.HTTP_503_SERVICE_UNAVAILABLE,
}


def booking_exception_handler(exc, context):
    if not isinstance(exc, BookingError):
        return drf_exception_handler(exc, context)

    http_status = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    view = context.get('view')
    logger.info(
        'booking.request_rejected',
        code=exc.code,
        status=http_status,
        view=view.__class__.__name__ if view else None,
    )

    headers = {}
    if http_status == status.HTTP_503_SERVICE_UNAVAILABLE:
        headers['Retry-After'] = '1'
    return Response(exc.to_dict(), status=http_status, headers=headers)
