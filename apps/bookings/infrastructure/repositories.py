"""
Django Booking Repository

Maps the ``Booking`` aggregate to the ``bookings.Booking`` row and
provides the vehicle calendar lock used during creation.

Strategy (defense in depth):
1. Pessimistic lock: SELECT ... FOR UPDATE on the vehicle row, with a
   bounded ``lock_timeout`` on PostgreSQL. SQLite has no row locks; there
   the transaction itself opens with BEGIN IMMEDIATE (see DATABASES
   OPTIONS) and waits at most the connection ``timeout``
2. Domain validation: the conflict check runs while the lock is held
3. Database constraint: PostgreSQL EXCLUDE constraint (migration 0002)
Status updates use compare-and-swap on ``version``.
Lock waits that run out surface as ``TransientFailure``.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, List
import logging

from django.db import DatabaseError, IntegrityError, OperationalError, transaction  # type: ignore
from django.db.models import F  # type: ignore
from django.db.utils import NotSupportedError  # type: ignore

from shared.application.uow import DjangoUnitOfWork
from shared.domain.value_objects import DateRange, Money

from apps.bookings.application.ports import AbstractBookingRepository
from apps.bookings.domain.entities import BookedRange, Booking, BookingStatus, PaymentStatus
from apps.bookings.domain.exceptions import (
    DateRangeUnavailable,
    ReferenceCollision,
    TransientFailure,
)
from apps.bookings.domain.pricing import PriceBreakdown
from apps.bookings.models import Booking as BookingModel
from apps.vehicles.models import Vehicle

logger = logging.getLogger(__name__)

EXCLUSION_CONSTRAINT = "booking_no_overlapping_ranges"


def _lock_queryset_if_possible(queryset):
    """Apply select_for_update when inside transaction.atomic()."""

    if not transaction.get_connection().in_atomic_block:
        return queryset

    try:
        return queryset.select_for_update()
    except NotSupportedError:
        return queryset


def to_domain(row: BookingModel) -> Booking:
    currency = row.currency_code

    def money(amount) -> Money:
        return Money(amount, currency)

    price = PriceBreakdown(
        daily_rate=money(row.daily_rate),
        total_days=row.total_days,
        chauffeur_fee=money(row.chauffeur_fee),
        subtotal=money(row.subtotal),
        platform_fee_rate=row.platform_fee_rate,
        platform_fee=money(row.platform_fee),
        security_deposit=money(row.security_deposit),
        total_amount=money(row.total_amount),
        host_payout=money(row.host_payout_amount),
    )
    return Booking(
        id=row.pk,
        created_at=row.created_at,
        updated_at=row.updated_at,
        booking_reference=row.booking_reference,
        vehicle_id=row.vehicle_id,
        renter_id=row.renter_id,
        dates=DateRange(row.start_date, row.end_date),
        price=price,
        includes_chauffeur=row.includes_chauffeur,
        pickup_address=row.pickup_address,
        dropoff_address=row.dropoff_address,
        pickup_location_id=row.pickup_location_id,
        dropoff_location_id=row.dropoff_location_id,
        status=BookingStatus(row.status),
        payment_status=PaymentStatus(row.payment_status),
        actual_return_date=row.actual_return_date,
        version=row.version,
    )


def to_row_fields(booking: Booking) -> dict:
    price = booking.price
    return {
        "id": booking.id,
        "booking_reference": booking.booking_reference,
        "vehicle_id": booking.vehicle_id,
        "renter_id": booking.renter_id,
        "start_date": booking.dates.start_date,
        "end_date": booking.dates.end_date,
        "actual_return_date": booking.actual_return_date,
        "includes_chauffeur": booking.includes_chauffeur,
        "pickup_location_id": booking.pickup_location_id,
        "dropoff_location_id": booking.dropoff_location_id,
        "pickup_address": booking.pickup_address,
        "dropoff_address": booking.dropoff_address,
        "daily_rate": price.daily_rate.amount,
        "total_days": price.total_days,
        "chauffeur_fee": price.chauffeur_fee.amount,
        "subtotal": price.subtotal.amount,
        "platform_fee_rate": price.platform_fee_rate,
        "platform_fee": price.platform_fee.amount,
        "security_deposit": price.security_deposit.amount,
        "total_amount": price.total_amount.amount,
        "host_payout_amount": price.host_payout.amount,
        "currency_code": price.currency,
        "status": booking.status.value,
        "payment_status": booking.payment_status.value,
        "version": booking.version,
        "created_at": booking.created_at,
        "updated_at": booking.updated_at,
    }


class BookingUnitOfWork(DjangoUnitOfWork):
    """Unit of work whose lock contention surfaces as ``TransientFailure``."""

    def __enter__(self):
        try:
            return super().__enter__()
        except OperationalError as exc:
            logger.warning(f"Could not open a booking transaction: {exc}")
            raise TransientFailure() from exc

    def __exit__(self, exc_type, exc_val, exc_tb):
        try:
            return super().__exit__(exc_type, exc_val, exc_tb)
        except OperationalError as exc:
            if exc is exc_val:
                raise
            logger.warning(f"Could not commit a booking transaction: {exc}")
            raise TransientFailure() from exc


class DjangoBookingRepository(AbstractBookingRepository):

    def __init__(self, lock_timeout: float = 5.0):
        self.lock_timeout = lock_timeout

    @staticmethod
    def _bound_lock_wait(connection, timeout: float) -> None:
        if connection.vendor == "postgresql":
            with connection.cursor() as cursor:
                cursor.execute(
                    "SELECT set_config('lock_timeout', %s, true)",
                    [f"{int(timeout * 1000)}ms"],
                )

    @contextmanager
    def calendar_lock(self, vehicle_id, timeout: float) -> Iterator[None]:
        connection = transaction.get_connection()
        if not connection.in_atomic_block:
            raise RuntimeError("The vehicle calendar lock must be taken inside a transaction")

        try:
            self._bound_lock_wait(connection, timeout)
            list(
                _lock_queryset_if_possible(Vehicle.objects.filter(pk=vehicle_id))
                .values_list("pk", flat=True)
            )
        except DatabaseError as exc:
            logger.warning(f"Timed out waiting for the calendar lock of vehicle {vehicle_id}: {exc}")
            raise TransientFailure() from exc

        yield

    def existing_bookings(self, vehicle_id) -> List[BookedRange]:
        rows = (
            BookingModel.objects.filter(vehicle_id=vehicle_id)
            .exclude(status=BookingModel.Status.CANCELLED)
            .values_list("id", "start_date", "end_date", "status")
        )
        return [
            BookedRange(
                vehicle_id=vehicle_id,
                dates=DateRange(start_date, end_date),
                status=BookingStatus(status),
                booking_id=booking_id,
            )
            for booking_id, start_date, end_date, status in rows
        ]

    def add(self, booking: Booking) -> None:
        try:
            with transaction.atomic():
                BookingModel.objects.create(**to_row_fields(booking))
        except IntegrityError as exc:
            message = str(exc)
            if "booking_reference" in message:
                raise ReferenceCollision() from exc
            if EXCLUSION_CONSTRAINT in message:
                logger.info(f"Exclusion constraint rejected booking {booking.booking_reference}")
                raise DateRangeUnavailable() from exc
            raise
        except OperationalError as exc:
            logger.warning(f"Could not insert booking {booking.booking_reference}: {exc}")
            raise TransientFailure() from exc

    def get_by_id(self, booking_id, lock: bool = False) -> Booking | None:
        queryset = BookingModel.objects.filter(pk=booking_id)
        if not lock:
            row = queryset.first()
            return to_domain(row) if row else None

        try:
            self._bound_lock_wait(transaction.get_connection(), self.lock_timeout)
            row = _lock_queryset_if_possible(queryset).first()
        except DatabaseError as exc:
            logger.warning(f"Timed out waiting for the row lock of booking {booking_id}: {exc}")
            raise TransientFailure() from exc
        return to_domain(row) if row else None

    def save(self, booking: Booking) -> None:
        updated = BookingModel.objects.filter(pk=booking.id, version=booking.version).update(
            status=booking.status.value,
            payment_status=booking.payment_status.value,
            actual_return_date=booking.actual_return_date,
            updated_at=booking.updated_at,
            version=F("version") + 1,
        )
        if not updated:
            logger.warning(
                f"Booking {booking.booking_reference} changed concurrently "
                f"(expected version {booking.version})"
            )
            raise TransientFailure("The booking was modified concurrently. Please retry.")
        booking.version += 1
