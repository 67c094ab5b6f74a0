"""Vehicle lookup for the booking engine."""

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError  # type: ignore

from shared.domain.value_objects import Money

from apps.bookings.application.ports import AbstractVehicleCatalog, VehicleSnapshot

from .models import Vehicle

logger = logging.getLogger(__name__)


def to_snapshot(vehicle: Vehicle) -> VehicleSnapshot:
    currency = vehicle.currency_code
    fee = vehicle.chauffeur_daily_fee
    return VehicleSnapshot(
        vehicle_id=vehicle.pk,
        owner_id=vehicle.owner_id,
        daily_rate=Money(vehicle.daily_rate, currency),
        chauffeur_available=vehicle.chauffeur_available,
        chauffeur_daily_fee=Money(fee, currency) if fee is not None else None,
        location_id=vehicle.location_id,
        description=vehicle.display_name,
    )


class DjangoVehicleCatalog(AbstractVehicleCatalog):
    """Reads vehicle listings through the ORM."""

    def _fetch(self, **filters) -> VehicleSnapshot | None:
        try:
            vehicle = Vehicle.objects.filter(**filters).first()
        except ValidationError:
            # Malformed UUID coming from the outside
            logger.debug(f"Rejected vehicle lookup with filters {filters}")
            return None
        return to_snapshot(vehicle) if vehicle else None

    def get_bookable_vehicle(self, vehicle_id) -> VehicleSnapshot | None:
        return self._fetch(pk=vehicle_id, listing_status=Vehicle.ListingStatus.ACTIVE)

    def get_vehicle(self, vehicle_id) -> VehicleSnapshot | None:
        return self._fetch(pk=vehicle_id)
