"""Booking status and payment status transitions."""

import pytest

from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.exceptions import Forbidden, IllegalTransition
from apps.bookings.domain.state_machine import (
    Actor,
    ActorRole,
    PaymentType,
    authorize_actor,
    check_status_transition,
    reachable_statuses,
)

S = BookingStatus
P = PaymentStatus


def test_requested_only_reaches_confirmed_or_cancelled():
    assert reachable_statuses(S.REQUESTED) == {S.CONFIRMED, S.CANCELLED}


def test_terminal_statuses_reach_nothing():
    assert reachable_statuses(S.COMPLETED) == set()
    assert reachable_statuses(S.CANCELLED) == set()


def test_completed_is_unreachable_from_requested(make_booking):
    booking = make_booking()

    with pytest.raises(IllegalTransition) as excinfo:
        booking.transition_to(S.COMPLETED, ActorRole.ADMIN)

    assert excinfo.value.current_status == S.REQUESTED
    assert booking.status == S.REQUESTED


def test_owner_confirms_a_request(make_booking):
    booking = make_booking()
    before = booking.updated_at

    booking.transition_to(S.CONFIRMED, ActorRole.OWNER)

    assert booking.status == S.CONFIRMED
    assert booking.updated_at >= before


def test_renter_cannot_confirm_their_own_request(make_booking):
    booking = make_booking()

    with pytest.raises(Forbidden):
        booking.transition_to(S.CONFIRMED, ActorRole.RENTER)

    assert booking.status == S.REQUESTED


@pytest.mark.parametrize('role', [ActorRole.RENTER, ActorRole.OWNER])
@pytest.mark.parametrize('status', [S.REQUESTED, S.CONFIRMED])
def test_parties_can_cancel_requested_or_confirmed(make_booking, role, status):
    booking = make_booking(status=status)

    booking.transition_to(S.CANCELLED, role)

    assert booking.status == S.CANCELLED


def test_active_booking_cannot_be_cancelled(make_booking):
    booking = make_booking(status=S.ACTIVE, payment_status=P.DEPOSIT_PAID)

    with pytest.raises(IllegalTransition):
        booking.transition_to(S.CANCELLED, ActorRole.RENTER)


def test_activation_requires_a_settled_deposit():
    with pytest.raises(IllegalTransition):
        check_status_transition(S.CONFIRMED, P.PENDING_DEPOSIT, S.ACTIVE, ActorRole.ADMIN)

    check_status_transition(S.CONFIRMED, P.FULLY_PAID, S.ACTIVE, ActorRole.ADMIN)


def test_only_platform_activates_and_completes():
    with pytest.raises(Forbidden):
        check_status_transition(S.CONFIRMED, P.DEPOSIT_PAID, S.ACTIVE, ActorRole.OWNER)
    with pytest.raises(Forbidden):
        check_status_transition(S.ACTIVE, P.DEPOSIT_PAID, S.COMPLETED, ActorRole.RENTER)


def test_completion_records_the_return_time(make_booking):
    booking = make_booking(status=S.ACTIVE, payment_status=P.DEPOSIT_PAID)

    booking.transition_to(S.COMPLETED, ActorRole.ADMIN)

    assert booking.status == S.COMPLETED
    assert booking.actual_return_date is not None


def test_deposit_on_confirmed_booking_activates_it(make_booking):
    booking = make_booking(status=S.CONFIRMED)

    advanced = booking.confirm_payment(PaymentType.DEPOSIT, ActorRole.ADMIN)

    assert advanced is True
    assert (booking.status, booking.payment_status) == (S.ACTIVE, P.DEPOSIT_PAID)


def test_deposit_on_requested_booking_does_not_advance_status(make_booking):
    booking = make_booking(status=S.REQUESTED)

    advanced = booking.confirm_payment(PaymentType.DEPOSIT, ActorRole.ADMIN)

    assert advanced is False
    assert (booking.status, booking.payment_status) == (S.REQUESTED, P.DEPOSIT_PAID)


def test_full_payment_settles_without_activating(make_booking):
    booking = make_booking(status=S.CONFIRMED)

    advanced = booking.confirm_payment(PaymentType.FULL, ActorRole.ADMIN)

    assert advanced is False
    assert (booking.status, booking.payment_status) == (S.CONFIRMED, P.FULLY_PAID)


def test_full_payment_after_deposit_on_active_booking(make_booking):
    booking = make_booking(status=S.ACTIVE, payment_status=P.DEPOSIT_PAID)

    booking.confirm_payment(PaymentType.FULL, ActorRole.ADMIN)

    assert (booking.status, booking.payment_status) == (S.ACTIVE, P.FULLY_PAID)


@pytest.mark.parametrize(
    'payment_status, payment_type',
    [
        (P.DEPOSIT_PAID, PaymentType.DEPOSIT),
        (P.FULLY_PAID, PaymentType.DEPOSIT),
    ],
)
def test_deposit_never_moves_payment_backwards_or_repeats(make_booking, payment_status, payment_type):
    booking = make_booking(status=S.CONFIRMED, payment_status=payment_status)

    with pytest.raises(IllegalTransition):
        booking.confirm_payment(payment_type, ActorRole.ADMIN)

    assert booking.payment_status == payment_status


@pytest.mark.parametrize('status', [S.CONFIRMED, S.ACTIVE])
def test_repeated_full_payment_is_accepted_without_advancing(make_booking, status):
    booking = make_booking(status=status, payment_status=P.FULLY_PAID)

    advanced = booking.confirm_payment(PaymentType.FULL, ActorRole.ADMIN)

    assert advanced is False
    assert (booking.status, booking.payment_status) == (status, P.FULLY_PAID)


@pytest.mark.parametrize('status', [S.CANCELLED, S.COMPLETED])
def test_payment_status_is_frozen_on_closed_bookings(make_booking, status):
    booking = make_booking(status=status)

    with pytest.raises(IllegalTransition):
        booking.confirm_payment(PaymentType.FULL, ActorRole.ADMIN)

    assert booking.payment_status == P.PENDING_DEPOSIT


def test_only_platform_confirms_payments(make_booking):
    booking = make_booking(status=S.CONFIRMED)

    with pytest.raises(Forbidden):
        booking.confirm_payment(PaymentType.DEPOSIT, ActorRole.OWNER)


def test_actor_identity_must_match_claimed_role():
    authorize_actor(Actor(1, ActorRole.RENTER), renter_id=1, owner_id=2)
    authorize_actor(Actor(2, ActorRole.OWNER), renter_id=1, owner_id=2)
    authorize_actor(Actor(99, ActorRole.ADMIN), renter_id=1, owner_id=2)

    with pytest.raises(Forbidden):
        authorize_actor(Actor(3, ActorRole.RENTER), renter_id=1, owner_id=2)
    with pytest.raises(Forbidden):
        authorize_actor(Actor(1, ActorRole.OWNER), renter_id=1, owner_id=2)
