"""
Booking Engine Collaborators

Abstract boundaries the orchestrator talks to. Django implementations
live in ``apps.bookings.infrastructure`` and ``apps.vehicles.services``.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from dataclasses import dataclass
from typing import Any, List

from shared.domain.value_objects import Money

from apps.bookings.domain.entities import BookedRange, Booking


@dataclass(frozen=True)
class VehicleSnapshot:
    """What the booking engine needs to know about a vehicle listing"""
    vehicle_id: Any
    owner_id: Any
    daily_rate: Money
    chauffeur_available: bool = False
    chauffeur_daily_fee: Money | None = None
    location_id: int | None = None
    description: str = ''

    @property
    def currency_code(self) -> str:
        return self.daily_rate.currency


class AbstractVehicleCatalog(ABC):

    @abstractmethod
    def get_bookable_vehicle(self, vehicle_id) -> VehicleSnapshot | None:
        """Vehicle in a bookable listing state, or None"""

    @abstractmethod
    def get_vehicle(self, vehicle_id) -> VehicleSnapshot | None:
        """Vehicle regardless of listing state, or None"""


class AbstractBookingRepository(ABC):
    """
    Persistence boundary for bookings.

    ``calendar_lock`` is the mutual exclusion primitive over one vehicle's
    calendar. It must be entered inside the unit of work that performs the
    insert, and it must give up after ``timeout`` seconds by raising
    ``TransientFailure``.
    """

    @abstractmethod
    def calendar_lock(self, vehicle_id, timeout: float) -> AbstractContextManager:
        ...

    @abstractmethod
    def existing_bookings(self, vehicle_id) -> List[BookedRange]:
        """Non-cancelled bookings of the vehicle"""

    @abstractmethod
    def add(self, booking: Booking) -> None:
        """
        Insert a new booking.

        Raises:
            ReferenceCollision: booking_reference already taken
            DateRangeUnavailable: a storage-level exclusion rejected the range
        """

    @abstractmethod
    def get_by_id(self, booking_id, lock: bool = False) -> Booking | None:
        ...

    @abstractmethod
    def save(self, booking: Booking) -> None:
        """
        Persist status fields if ``booking.version`` is still current,
        then bump the version.

        Raises:
            TransientFailure: a concurrent writer got there first
        """
