"""Reservation orchestrator against in-memory collaborators."""

import threading
from datetime import date, timedelta
from decimal import Decimal
from itertools import combinations
from uuid import uuid4

import pytest

from shared.domain.value_objects import Money

from apps.bookings.application.command_handlers import (
    CancelBookingCommand,
    CancelBookingHandler,
    ChangeBookingStatusCommand,
    ChangeBookingStatusHandler,
    ConfirmPaymentCommand,
    ConfirmPaymentHandler,
    CreateBookingCommand,
    CreateBookingHandler,
)
from apps.bookings.application.ports import VehicleSnapshot
from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.events import (
    BookingCancelled,
    BookingCompleted,
    BookingConfirmed,
    BookingRequested,
    PaymentConfirmed,
)
from apps.bookings.domain.exceptions import (
    BookingNotFound,
    DateRangeUnavailable,
    Forbidden,
    IllegalTransition,
    InvalidDateRange,
    InvalidState,
    SelfBookingForbidden,
    TransientFailure,
    VehicleNotFound,
)
from apps.bookings.domain.references import is_valid_reference
from apps.bookings.domain.state_machine import ActorRole, PaymentType


@pytest.fixture
def create_handler(booking_repo, vehicle_catalog, uow_factory, today):
    return CreateBookingHandler(
        booking_repo,
        vehicle_catalog,
        uow_factory,
        lock_timeout=0.2,
        today=lambda: today,
    )


@pytest.fixture
def status_handler(booking_repo, vehicle_catalog, uow_factory):
    return ChangeBookingStatusHandler(booking_repo, vehicle_catalog, uow_factory)


@pytest.fixture
def payment_handler(booking_repo, vehicle_catalog, uow_factory):
    return ConfirmPaymentHandler(booking_repo, vehicle_catalog, uow_factory)


@pytest.fixture
def cancel_handler(booking_repo, vehicle_catalog, uow_factory):
    return CancelBookingHandler(booking_repo, vehicle_catalog, uow_factory)


@pytest.fixture
def stored_booking(booking_repo, make_booking, vehicle):
    """Put a booking for ``vehicle`` in the repository and return its id."""

    def store(status=BookingStatus.REQUESTED, payment_status=PaymentStatus.PENDING_DEPOSIT):
        booking = make_booking(status=status, payment_status=payment_status, vehicle_id=vehicle.vehicle_id)
        booking_repo.add(booking)
        return booking.id

    return store


def request(vehicle, renter_id, start, end, **kwargs):
    return CreateBookingCommand(
        vehicle_id=vehicle.vehicle_id,
        renter_id=renter_id,
        start_date=start,
        end_date=end,
        **kwargs,
    )


# ===== Creation =====

def test_create_booking_snapshots_price_and_announces_request(
    create_handler, booking_repo, vehicle, renter_id, owner_id, published_events
):
    booking = create_handler(request(vehicle, renter_id, date(2024, 5, 7), date(2024, 5, 10)))

    assert booking.status == BookingStatus.REQUESTED
    assert booking.payment_status == PaymentStatus.PENDING_DEPOSIT
    assert booking.price.total_amount == Money(Decimal('336000'), 'GNF')
    assert booking.price.host_payout == Money(Decimal('264000'), 'GNF')
    assert booking.pickup_location_id == 7
    assert booking.dropoff_location_id == 7
    assert is_valid_reference(booking.booking_reference)
    assert booking.booking_reference.endswith(booking.id.hex[:6].upper())
    assert booking.id in booking_repo.rows

    [event] = published_events
    assert isinstance(event, BookingRequested)
    assert event.booking_reference == booking.booking_reference
    assert event.owner_id == owner_id
    assert event.vehicle_description == '2019 Toyota Land Cruiser'
    assert event.total_amount == '336000'


def test_chauffeur_is_priced_when_the_vehicle_offers_one(create_handler, vehicle, renter_id):
    booking = create_handler(
        request(vehicle, renter_id, date(2024, 5, 7), date(2024, 5, 10), includes_chauffeur=True)
    )

    assert booking.includes_chauffeur is True
    assert booking.price.chauffeur_fee == Money(Decimal('150000'), 'GNF')


def test_chauffeur_request_on_vehicle_without_one_is_free(create_handler, vehicle_catalog, owner_id, renter_id):
    plain = vehicle_catalog.add(
        VehicleSnapshot(vehicle_id=uuid4(), owner_id=owner_id, daily_rate=Money(Decimal('80000'), 'GNF'))
    )

    booking = create_handler(
        request(plain, renter_id, date(2024, 5, 7), date(2024, 5, 9), includes_chauffeur=True)
    )

    assert booking.includes_chauffeur is False
    assert booking.price.chauffeur_fee == Money.zero('GNF')


def test_owner_cannot_book_own_vehicle_even_with_bad_dates(create_handler, vehicle, owner_id, booking_repo):
    with pytest.raises(SelfBookingForbidden):
        create_handler(request(vehicle, owner_id, date(2020, 1, 10), date(2020, 1, 1)))

    assert booking_repo.rows == {}


def test_unknown_or_unlisted_vehicle_is_not_found(create_handler, vehicle_catalog, owner_id, renter_id):
    draft = vehicle_catalog.add(
        VehicleSnapshot(vehicle_id=uuid4(), owner_id=owner_id, daily_rate=Money(Decimal('1000'), 'GNF')),
        bookable=False,
    )

    with pytest.raises(VehicleNotFound):
        create_handler(CreateBookingCommand(uuid4(), renter_id, date(2024, 5, 7), date(2024, 5, 8)))
    with pytest.raises(VehicleNotFound):
        create_handler(request(draft, renter_id, date(2024, 5, 7), date(2024, 5, 8)))


@pytest.mark.parametrize(
    'start, end',
    [
        (date(2024, 4, 30), date(2024, 5, 3)),
        (date(2024, 5, 7), date(2024, 5, 7)),
        (date(2024, 5, 7), date(2024, 5, 6)),
    ],
)
def test_invalid_date_ranges_are_rejected(create_handler, vehicle, renter_id, start, end):
    with pytest.raises(InvalidDateRange):
        create_handler(request(vehicle, renter_id, start, end))


def test_booking_can_start_today(create_handler, vehicle, renter_id, today):
    booking = create_handler(request(vehicle, renter_id, today, today + timedelta(days=1)))

    assert booking.total_days == 1


def test_overlapping_request_is_unavailable_and_leaves_no_trace(
    create_handler, booking_repo, vehicle, renter_id, published_events
):
    create_handler(request(vehicle, renter_id, date(2024, 5, 7), date(2024, 5, 10)))

    with pytest.raises(DateRangeUnavailable):
        create_handler(request(vehicle, 303, date(2024, 5, 9), date(2024, 5, 12)))

    assert len(booking_repo.rows) == 1
    assert len(published_events) == 1


def test_back_to_back_bookings_are_allowed(create_handler, booking_repo, vehicle, renter_id):
    create_handler(request(vehicle, renter_id, date(2024, 5, 7), date(2024, 5, 10)))
    create_handler(request(vehicle, 303, date(2024, 5, 10), date(2024, 5, 12)))

    assert len(booking_repo.rows) == 2


def test_cancelled_booking_frees_its_dates(create_handler, cancel_handler, booking_repo, vehicle, renter_id):
    first = create_handler(request(vehicle, renter_id, date(2024, 5, 7), date(2024, 5, 10)))
    cancel_handler(CancelBookingCommand(first.id, renter_id))

    second = create_handler(request(vehicle, 303, date(2024, 5, 7), date(2024, 5, 10)))

    assert second.status == BookingStatus.REQUESTED


def test_reference_collisions_are_retried_with_fresh_references(create_handler, booking_repo, vehicle, renter_id):
    booking_repo.forced_collisions = 2

    booking = create_handler(request(vehicle, renter_id, date(2024, 5, 7), date(2024, 5, 10)))

    assert list(booking_repo.rows) == [booking.id]


def test_exhausted_reference_retries_fail_as_transient(
    create_handler, booking_repo, vehicle, renter_id, published_events
):
    booking_repo.forced_collisions = 3

    with pytest.raises(TransientFailure):
        create_handler(request(vehicle, renter_id, date(2024, 5, 7), date(2024, 5, 10)))

    assert booking_repo.rows == {}
    assert published_events == []


def test_busy_calendar_lock_times_out_as_transient(create_handler, booking_repo, vehicle, renter_id):
    lock = booking_repo._lock_for(vehicle.vehicle_id)
    lock.acquire()
    try:
        with pytest.raises(TransientFailure):
            create_handler(request(vehicle, renter_id, date(2024, 5, 7), date(2024, 5, 10)))
    finally:
        lock.release()

    assert booking_repo.rows == {}


def test_concurrent_overlapping_requests_never_double_book(create_handler, booking_repo, vehicle):
    create_handler.lock_timeout = 5.0
    ranges = [
        (date(2024, 5, 7), date(2024, 5, 10)),
        (date(2024, 5, 8), date(2024, 5, 11)),
        (date(2024, 5, 9), date(2024, 5, 12)),
        (date(2024, 5, 5), date(2024, 5, 8)),
        (date(2024, 5, 10), date(2024, 5, 13)),
        (date(2024, 5, 6), date(2024, 5, 14)),
    ] * 2
    barrier = threading.Barrier(len(ranges))
    outcomes = []
    outcomes_lock = threading.Lock()

    def attempt(renter, start, end):
        barrier.wait()
        try:
            create_handler(request(vehicle, renter, start, end))
            result = 'created'
        except DateRangeUnavailable:
            result = 'unavailable'
        with outcomes_lock:
            outcomes.append(result)

    threads = [
        threading.Thread(target=attempt, args=(1000 + index, start, end))
        for index, (start, end) in enumerate(ranges)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(outcomes) == len(ranges)
    assert outcomes.count('created') >= 1
    held = [booking.dates for booking in booking_repo.rows.values() if booking.blocks_dates()]
    assert len(held) == outcomes.count('created')
    assert all(not a.overlaps_with(b) for a, b in combinations(held, 2))


# ===== Lifecycle =====

def test_owner_confirms_request(status_handler, stored_booking, booking_repo, owner_id, published_events):
    booking_id = stored_booking()

    booking = status_handler(
        ChangeBookingStatusCommand(booking_id, owner_id, ActorRole.OWNER, BookingStatus.CONFIRMED)
    )

    assert booking.status == BookingStatus.CONFIRMED
    assert booking_repo.rows[booking_id].status == BookingStatus.CONFIRMED
    assert booking_repo.rows[booking_id].version == 1
    assert isinstance(published_events[-1], BookingConfirmed)


def test_owner_rejects_request(status_handler, stored_booking, owner_id, published_events):
    booking_id = stored_booking()

    booking = status_handler(
        ChangeBookingStatusCommand(
            booking_id, owner_id, ActorRole.OWNER, BookingStatus.CANCELLED, reason='Vehicle in repair'
        )
    )

    assert booking.status == BookingStatus.CANCELLED
    event = published_events[-1]
    assert isinstance(event, BookingCancelled)
    assert event.cancelled_by == 'owner'
    assert event.previous_status == 'requested'
    assert event.reason == 'Vehicle in repair'


def test_renter_cannot_confirm(status_handler, stored_booking, booking_repo, renter_id, published_events):
    booking_id = stored_booking()

    with pytest.raises(Forbidden):
        status_handler(
            ChangeBookingStatusCommand(booking_id, renter_id, ActorRole.OWNER, BookingStatus.CONFIRMED)
        )

    assert booking_repo.rows[booking_id].status == BookingStatus.REQUESTED
    assert published_events == []


def test_strangers_cannot_tell_missing_bookings_from_foreign_ones(status_handler, stored_booking):
    booking_id = stored_booking()

    with pytest.raises(Forbidden):
        status_handler(ChangeBookingStatusCommand(booking_id, 999, ActorRole.RENTER, BookingStatus.CANCELLED))
    with pytest.raises(Forbidden):
        status_handler(ChangeBookingStatusCommand(uuid4(), 999, ActorRole.RENTER, BookingStatus.CANCELLED))


def test_platform_sees_missing_bookings_as_not_found(status_handler):
    with pytest.raises(BookingNotFound):
        status_handler(ChangeBookingStatusCommand(uuid4(), 1, ActorRole.ADMIN, BookingStatus.COMPLETED))


def test_illegal_transition_reports_current_state(status_handler, stored_booking):
    booking_id = stored_booking(status=BookingStatus.REQUESTED)

    with pytest.raises(IllegalTransition) as excinfo:
        status_handler(ChangeBookingStatusCommand(booking_id, 1, ActorRole.ADMIN, BookingStatus.COMPLETED))

    assert excinfo.value.to_dict()['current_status'] == 'requested'
    assert excinfo.value.to_dict()['current_payment_status'] == 'pending_deposit'


def test_admin_completes_active_booking(status_handler, stored_booking, published_events):
    booking_id = stored_booking(status=BookingStatus.ACTIVE, payment_status=PaymentStatus.DEPOSIT_PAID)

    booking = status_handler(ChangeBookingStatusCommand(booking_id, 1, ActorRole.ADMIN, BookingStatus.COMPLETED))

    assert booking.status == BookingStatus.COMPLETED
    assert booking.actual_return_date is not None
    assert isinstance(published_events[-1], BookingCompleted)
    assert published_events[-1].host_payout_amount == '264000'


def test_deposit_on_confirmed_booking_activates_it(payment_handler, stored_booking, booking_repo, published_events):
    booking_id = stored_booking(status=BookingStatus.CONFIRMED)

    booking = payment_handler(ConfirmPaymentCommand(booking_id, 1, PaymentType.DEPOSIT))

    assert (booking.status, booking.payment_status) == (BookingStatus.ACTIVE, PaymentStatus.DEPOSIT_PAID)
    stored = booking_repo.rows[booking_id]
    assert (stored.status, stored.payment_status) == (BookingStatus.ACTIVE, PaymentStatus.DEPOSIT_PAID)
    event = published_events[-1]
    assert isinstance(event, PaymentConfirmed)
    assert event.activated is True


def test_deposit_on_requested_booking_keeps_status(payment_handler, stored_booking):
    booking_id = stored_booking(status=BookingStatus.REQUESTED)

    booking = payment_handler(ConfirmPaymentCommand(booking_id, 1, PaymentType.DEPOSIT))

    assert (booking.status, booking.payment_status) == (BookingStatus.REQUESTED, PaymentStatus.DEPOSIT_PAID)


def test_renter_cancels_confirmed_booking(cancel_handler, stored_booking, renter_id, published_events):
    booking_id = stored_booking(status=BookingStatus.CONFIRMED)

    booking = cancel_handler(CancelBookingCommand(booking_id, renter_id, reason='Plans changed'))

    assert booking.status == BookingStatus.CANCELLED
    assert published_events[-1].cancelled_by == 'renter'


@pytest.mark.parametrize('status', [BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.ACTIVE])
def test_cancelling_closed_or_running_booking_is_invalid_state(
    cancel_handler, stored_booking, booking_repo, renter_id, published_events, status
):
    booking_id = stored_booking(status=status, payment_status=PaymentStatus.DEPOSIT_PAID)
    before = repr(booking_repo.rows[booking_id])

    with pytest.raises(InvalidState) as excinfo:
        cancel_handler(CancelBookingCommand(booking_id, renter_id))

    assert excinfo.value.current_status == status
    assert repr(booking_repo.rows[booking_id]) == before
    assert booking_repo.rows[booking_id].version == 0
    assert published_events == []


def test_renter_cannot_cancel_someone_elses_booking(cancel_handler, stored_booking):
    booking_id = stored_booking()

    with pytest.raises(Forbidden):
        cancel_handler(CancelBookingCommand(booking_id, 999))
