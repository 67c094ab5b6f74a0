"""Shared fixtures: in-memory collaborators for the booking engine and a listed vehicle."""

from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from django.contrib.auth import get_user_model

from shared.domain.value_objects import Money

from apps.bookings.application.ports import (
    AbstractBookingRepository,
    AbstractVehicleCatalog,
    VehicleSnapshot,
)
from apps.bookings.domain.exceptions import ReferenceCollision, TransientFailure


class InMemoryVehicleCatalog(AbstractVehicleCatalog):

    def __init__(self):
        self.vehicles = {}
        self.bookable = set()

    def add(self, snapshot: VehicleSnapshot, bookable: bool = True) -> VehicleSnapshot:
        self.vehicles[snapshot.vehicle_id] = snapshot
        if bookable:
            self.bookable.add(snapshot.vehicle_id)
        return snapshot

    def get_bookable_vehicle(self, vehicle_id):
        if vehicle_id not in self.bookable:
            return None
        return self.vehicles.get(vehicle_id)

    def get_vehicle(self, vehicle_id):
        return self.vehicles.get(vehicle_id)


class InMemoryBookingRepository(AbstractBookingRepository):
    """Stores copies of aggregates; one ``threading.Lock`` per vehicle calendar."""

    def __init__(self):
        self.rows = {}
        self.forced_collisions = 0
        self._locks = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, vehicle_id) -> threading.Lock:
        with self._registry_lock:
            return self._locks.setdefault(vehicle_id, threading.Lock())

    @contextmanager
    def calendar_lock(self, vehicle_id, timeout: float):
        lock = self._lock_for(vehicle_id)
        if not lock.acquire(timeout=timeout):
            raise TransientFailure()
        try:
            yield
        finally:
            lock.release()

    def existing_bookings(self, vehicle_id):
        return [
            booking.as_booked_range()
            for booking in list(self.rows.values())
            if booking.vehicle_id == vehicle_id and booking.blocks_dates()
        ]

    def add(self, booking):
        if self.forced_collisions > 0:
            self.forced_collisions -= 1
            raise ReferenceCollision()
        if any(row.booking_reference == booking.booking_reference for row in self.rows.values()):
            raise ReferenceCollision()
        stored = copy.deepcopy(booking)
        stored.clear_events()
        self.rows[booking.id] = stored

    def get_by_id(self, booking_id, lock: bool = False):
        booking = self.rows.get(booking_id)
        return copy.deepcopy(booking) if booking else None

    def save(self, booking):
        stored = self.rows.get(booking.id)
        if stored is None or stored.version != booking.version:
            raise TransientFailure("The booking was modified concurrently. Please retry.")
        booking.version += 1
        saved = copy.deepcopy(booking)
        saved.clear_events()
        self.rows[booking.id] = saved


class RecordingUnitOfWork:
    """Publishes collected events into ``published`` when the block succeeds."""

    def __init__(self, published: list):
        self.published = published
        self._events = []

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.published.extend(self._events)
        self._events = []
        return False

    def collect_events(self, aggregate):
        self._events.extend(aggregate.events)
        aggregate.clear_events()


@pytest.fixture
def vehicle_catalog():
    return InMemoryVehicleCatalog()


@pytest.fixture
def booking_repo():
    return InMemoryBookingRepository()


@pytest.fixture
def published_events():
    return []


@pytest.fixture
def uow_factory(published_events):
    return lambda: RecordingUnitOfWork(published_events)


@pytest.fixture
def today():
    return date(2024, 5, 1)


@pytest.fixture
def owner_id():
    return 101


@pytest.fixture
def renter_id():
    return 202


@pytest.fixture
def vehicle(vehicle_catalog, owner_id):
    return vehicle_catalog.add(
        VehicleSnapshot(
            vehicle_id=uuid4(),
            owner_id=owner_id,
            daily_rate=Money(Decimal('100000'), 'GNF'),
            chauffeur_available=True,
            chauffeur_daily_fee=Money(Decimal('50000'), 'GNF'),
            location_id=7,
            description='2019 Toyota Land Cruiser',
        )
    )


@pytest.fixture
def make_booking(renter_id):
    """Build a persisted-looking Booking aggregate in any state."""

    from shared.domain.value_objects import DateRange

    from apps.bookings.domain.entities import Booking, BookingStatus, PaymentStatus
    from apps.bookings.domain.pricing import calculate_price

    def factory(
        status=BookingStatus.REQUESTED,
        payment_status=PaymentStatus.PENDING_DEPOSIT,
        vehicle_id=None,
        start=date(2024, 5, 7),
        end=date(2024, 5, 10),
    ):
        dates = DateRange(start, end)
        return Booking(
            booking_reference=f"GMoP-20240501-{uuid4().hex[:6].upper()}",
            vehicle_id=vehicle_id or uuid4(),
            renter_id=renter_id,
            dates=dates,
            price=calculate_price(Money(Decimal('100000'), 'GNF'), dates.days),
            status=status,
            payment_status=payment_status,
        )

    return factory


# ===== Database fixtures =====

@pytest.fixture
def users(db):
    User = get_user_model()
    return {
        "owner": User.objects.create_user(username="owner", email="owner@example.com", password="x"),
        "renter": User.objects.create_user(username="renter", email="renter@example.com", password="x"),
    }


@pytest.fixture
def listed_vehicle(users):
    from apps.vehicles.models import Vehicle

    return Vehicle.objects.create(
        owner=users["owner"],
        make="Toyota",
        model_name="Hilux",
        year=2021,
        daily_rate=Decimal("100000"),
        listing_status=Vehicle.ListingStatus.ACTIVE,
        location_id=7,
    )
