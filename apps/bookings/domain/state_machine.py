"""
Booking State Machine

Two independent axes describe a booking:

    BookingStatus:  REQUESTED -> CONFIRMED -> ACTIVE -> COMPLETED
                    REQUESTED/CONFIRMED -> CANCELLED
    PaymentStatus:  PENDING_DEPOSIT -> DEPOSIT_PAID -> FULLY_PAID

Status transitions are gated by the role of the actor requesting them.
Payment transitions are driven by explicit payment confirmations. The
only coupling between the axes is ``reconcile_after_payment``: a deposit
landing on a CONFIRMED booking activates it.

Wrong actor raises ``Forbidden``; wrong state raises ``IllegalTransition``.
Functions here only compute and validate, they never mutate.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Set

from apps.bookings.domain.entities import BookingStatus, PaymentStatus
from apps.bookings.domain.exceptions import Forbidden, IllegalTransition


class ActorRole(Enum):
    RENTER = 'renter'
    OWNER = 'owner'
    ADMIN = 'admin'
    SYSTEM = 'system'   # scheduled jobs acting on the platform's behalf


class PaymentType(Enum):
    DEPOSIT = 'deposit'
    FULL = 'full'


@dataclass(frozen=True)
class Actor:
    """Pre-authenticated caller identity and the role it claims"""
    actor_id: Any
    role: ActorRole

    @property
    def is_platform(self) -> bool:
        return self.role in PLATFORM_ROLES


PLATFORM_ROLES: FrozenSet[ActorRole] = frozenset({ActorRole.ADMIN, ActorRole.SYSTEM})

# (from, to) -> roles allowed to request it
STATUS_TRANSITIONS = {
    (BookingStatus.REQUESTED, BookingStatus.CONFIRMED): frozenset({ActorRole.OWNER}),
    (BookingStatus.REQUESTED, BookingStatus.CANCELLED): frozenset(
        {ActorRole.RENTER, ActorRole.OWNER, ActorRole.SYSTEM}
    ),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED): frozenset(
        {ActorRole.RENTER, ActorRole.OWNER, ActorRole.SYSTEM}
    ),
    (BookingStatus.CONFIRMED, BookingStatus.ACTIVE): PLATFORM_ROLES,
    (BookingStatus.ACTIVE, BookingStatus.COMPLETED): PLATFORM_ROLES,
}

CANCELLABLE_STATUSES = frozenset({BookingStatus.REQUESTED, BookingStatus.CONFIRMED})

# Payment status is frozen once the booking is cancelled or completed
PAYMENT_OPEN_STATUSES = frozenset(
    {BookingStatus.REQUESTED, BookingStatus.CONFIRMED, BookingStatus.ACTIVE}
)

DEPOSIT_SETTLED = frozenset({PaymentStatus.DEPOSIT_PAID, PaymentStatus.FULLY_PAID})


def allowed_roles(current: BookingStatus, target: BookingStatus) -> FrozenSet[ActorRole]:
    return STATUS_TRANSITIONS.get((current, target), frozenset())


def reachable_statuses(current: BookingStatus) -> Set[BookingStatus]:
    """Statuses reachable from ``current`` in a single transition"""
    return {target for (source, target) in STATUS_TRANSITIONS if source == current}


def authorize_actor(actor: Actor, renter_id: Any, owner_id: Any) -> None:
    """
    Check that the presented identity matches the role it claims for
    this booking. Platform roles are trusted as pre-validated claims.
    """
    if actor.role == ActorRole.RENTER and actor.actor_id == renter_id:
        return
    if actor.role == ActorRole.OWNER and actor.actor_id == owner_id:
        return
    if actor.is_platform:
        return
    raise Forbidden()


def check_status_transition(
    status: BookingStatus,
    payment_status: PaymentStatus,
    target: BookingStatus,
    role: ActorRole,
) -> None:
    """
    Validate a status change request.

    Raises:
        IllegalTransition: no such edge from ``status``, or its precondition is unmet
        Forbidden: the edge exists but ``role`` may not trigger it
    """
    roles = allowed_roles(status, target)
    if not roles:
        raise IllegalTransition(
            f"Cannot change booking status from {status.value} to {target.value}.",
            current_status=status,
            current_payment_status=payment_status,
        )
    if role not in roles:
        raise Forbidden(
            f"A {role.value} cannot change booking status from {status.value} to {target.value}."
        )
    if target == BookingStatus.ACTIVE and payment_status not in DEPOSIT_SETTLED:
        raise IllegalTransition(
            "A booking can only become active once the deposit is paid.",
            current_status=status,
            current_payment_status=payment_status,
        )


def next_payment_status(
    status: BookingStatus,
    payment_status: PaymentStatus,
    payment_type: PaymentType,
    role: ActorRole,
) -> PaymentStatus:
    """
    Payment status after a confirmed payment of ``payment_type``.

    Deposit confirmations only move PENDING_DEPOSIT forward; full payment
    always lands on FULLY_PAID, so repeating it changes nothing. Nothing
    ever moves backwards.
    """
    if role not in PLATFORM_ROLES:
        raise Forbidden("Only the platform can confirm payments.")
    if status not in PAYMENT_OPEN_STATUSES:
        raise IllegalTransition(
            f"Payments cannot be recorded on a {status.value} booking.",
            current_status=status,
            current_payment_status=payment_status,
        )
    if payment_type == PaymentType.DEPOSIT and payment_status == PaymentStatus.PENDING_DEPOSIT:
        return PaymentStatus.DEPOSIT_PAID
    if payment_type == PaymentType.FULL:
        return PaymentStatus.FULLY_PAID
    raise IllegalTransition(
        f"A {payment_type.value} payment cannot be applied while payment is {payment_status.value}.",
        current_status=status,
        current_payment_status=payment_status,
    )


def reconcile_after_payment(status: BookingStatus, payment_status: PaymentStatus) -> BookingStatus:
    """The single cross-axis rule: a paid deposit activates a confirmed booking."""
    if status == BookingStatus.CONFIRMED and payment_status == PaymentStatus.DEPOSIT_PAID:
        return BookingStatus.ACTIVE
    return status
