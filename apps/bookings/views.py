"""API views for the booking domain.

Views translate HTTP into booking commands dispatched through the message
bus. Booking engine errors are rendered by
``shared.infrastructure.exception_handler``.
"""

from __future__ import annotations

import uuid

import structlog
from rest_framework import mixins, permissions, status, viewsets  # type: ignore
from rest_framework.decorators import action  # type: ignore
from rest_framework.exceptions import NotFound  # type: ignore
from rest_framework.response import Response  # type: ignore
from rest_framework.views import APIView  # type: ignore

from shared.application.message_bus import message_bus

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    ChangeBookingStatusCommand,
    ConfirmPaymentCommand,
    CreateBookingCommand,
)
from apps.bookings.domain.entities import BookingStatus
from apps.bookings.domain.state_machine import ActorRole, PaymentType

from . import services
from .models import Booking
from .serializers import (
    BookedDateRangeSerializer,
    BookingCancelSerializer,
    BookingCreateSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    DashboardSerializer,
    PaymentConfirmationSerializer,
)

logger = structlog.get_logger(__name__)


def resolve_actor_role(user, booking_id) -> ActorRole:
    """Role claim of ``user`` for one booking: staff act as admin."""

    if user.is_staff:
        return ActorRole.ADMIN
    owner_id = (
        Booking.objects.filter(pk=booking_id)
        .values_list("vehicle__owner_id", flat=True)
        .first()
    )
    if owner_id is not None and owner_id == user.pk:
        return ActorRole.OWNER
    return ActorRole.RENTER


class BookingViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    """Create bookings and drive them through their lifecycle."""

    serializer_class = BookingSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status", "payment_status", "vehicle"]

    def get_queryset(self):  # type: ignore
        return services.bookings_visible_to(self.request.user)

    def get_serializer_class(self):  # type: ignore
        if self.action == "create":
            return BookingCreateSerializer
        return BookingSerializer

    def _booking_id(self) -> uuid.UUID:
        try:
            return uuid.UUID(str(self.kwargs["pk"]))
        except ValueError:
            raise NotFound() from None

    def _respond(self, booking, http_status=status.HTTP_200_OK) -> Response:
        row = services.bookings_visible_to(self.request.user).get(pk=booking.id)
        return Response(BookingSerializer(row, context=self.get_serializer_context()).data, status=http_status)

    def create(self, request, *args, **kwargs):  # type: ignore
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        booking = message_bus.handle_command(
            CreateBookingCommand(
                vehicle_id=data["vehicle"],
                renter_id=request.user.pk,
                start_date=data["start_date"],
                end_date=data["end_date"],
                includes_chauffeur=data["includes_chauffeur"],
                pickup_address=data["pickup_address"],
                dropoff_address=data["dropoff_address"],
            )
        )
        logger.info("booking.created", booking_reference=booking.booking_reference, renter_id=request.user.pk)
        return self._respond(booking, status.HTTP_201_CREATED)

    @action(detail=False, methods=["get"], url_path="my-bookings")
    def my_bookings(self, request):  # type: ignore
        queryset = self.filter_queryset(services.bookings_for_renter(request.user))
        return self._paginated(queryset)

    @action(detail=False, methods=["get"], url_path="owner-requests")
    def owner_requests(self, request):  # type: ignore
        queryset = self.filter_queryset(services.booking_requests_for_owner(request.user))
        return self._paginated(queryset)

    def _paginated(self, queryset) -> Response:
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = BookingSerializer(page, many=True, context=self.get_serializer_context())
            return self.get_paginated_response(serializer.data)
        serializer = BookingSerializer(queryset, many=True, context=self.get_serializer_context())
        return Response(serializer.data)

    @action(detail=True, methods=["put", "post"], url_path="status")
    def change_status(self, request, pk=None):  # type: ignore
        booking_id = self._booking_id()
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = message_bus.handle_command(
            ChangeBookingStatusCommand(
                booking_id=booking_id,
                actor_id=request.user.pk,
                actor_role=resolve_actor_role(request.user, booking_id),
                target_status=BookingStatus(serializer.validated_data["status"]),
                reason=serializer.validated_data["reason"],
            )
        )
        return self._respond(booking)

    @action(detail=True, methods=["put", "post"])
    def cancel(self, request, pk=None):  # type: ignore
        booking_id = self._booking_id()
        serializer = BookingCancelSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = message_bus.handle_command(
            CancelBookingCommand(
                booking_id=booking_id,
                renter_id=request.user.pk,
                reason=serializer.validated_data["reason"],
            )
        )
        return self._respond(booking)

    @action(
        detail=True,
        methods=["put", "post"],
        url_path="confirm-payment",
        permission_classes=[permissions.IsAdminUser],
    )
    def confirm_payment(self, request, pk=None):  # type: ignore
        booking_id = self._booking_id()
        serializer = PaymentConfirmationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = message_bus.handle_command(
            ConfirmPaymentCommand(
                booking_id=booking_id,
                actor_id=request.user.pk,
                payment_type=PaymentType(serializer.validated_data["payment_type"]),
                actor_role=ActorRole.ADMIN,
            )
        )
        return self._respond(booking)

    @action(detail=True, methods=["put", "post"], permission_classes=[permissions.IsAdminUser])
    def complete(self, request, pk=None):  # type: ignore
        booking = message_bus.handle_command(
            ChangeBookingStatusCommand(
                booking_id=self._booking_id(),
                actor_id=request.user.pk,
                actor_role=ActorRole.ADMIN,
                target_status=BookingStatus.COMPLETED,
            )
        )
        return self._respond(booking)

    @action(detail=False, methods=["get"], permission_classes=[permissions.IsAdminUser])
    def dashboard(self, request):  # type: ignore
        return Response(DashboardSerializer(services.dashboard_counters()).data)


class BookedDatesView(APIView):
    """Blocked date ranges of a vehicle for the availability calendar."""

    permission_classes = [permissions.AllowAny]

    def get(self, request, vehicle_id):  # type: ignore
        ranges = services.booked_date_ranges(vehicle_id)
        return Response(BookedDateRangeSerializer(ranges, many=True).data)
