"""
Vehicle Availability

The conflict predicate behind double-booking prevention. Two ranges
[s1, e1) and [s2, e2) conflict iff s1 < e2 and s2 < e1, so a booking
ending on the 10th and another starting on the 10th do not conflict.

This module only encodes the predicate. Atomicity under concurrent
creation comes from the repository's calendar lock, which must be held
while the existing bookings are read and the new one is inserted.
"""

from datetime import date
from typing import Any, Iterable, List

from shared.domain.value_objects import DateRange

from apps.bookings.domain.entities import BookedRange


def conflicting_ranges(
    vehicle_id: Any,
    candidate: DateRange,
    existing: Iterable[BookedRange],
) -> List[BookedRange]:
    """Existing non-cancelled ranges on ``vehicle_id`` that overlap ``candidate``"""
    return [
        booked for booked in existing
        if booked.vehicle_id == vehicle_id
        and booked.blocks_dates
        and booked.dates.overlaps_with(candidate)
    ]


def has_conflict(
    vehicle_id: Any,
    candidate: DateRange,
    existing: Iterable[BookedRange],
) -> bool:
    """True if ``candidate`` overlaps any non-cancelled booking of the vehicle"""
    return bool(conflicting_ranges(vehicle_id, candidate, existing))


def calendar_ranges(existing: Iterable[BookedRange], today: date) -> List[BookedRange]:
    """Ranges to show on the availability calendar: held and not yet over"""
    return sorted(
        (booked for booked in existing if booked.blocks_dates and booked.dates.end_date >= today),
        key=lambda booked: booked.dates.start_date,
    )
