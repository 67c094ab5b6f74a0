"""
Booking Price Calculator

Pure computation of a reservation's financial breakdown. The breakdown
is snapshotted onto the booking at creation and never recomputed.

Rounding path: the platform fee is rounded half-up to the currency's
minor unit first, and the host payout is ``subtotal - platform_fee``, so
``total_amount == subtotal + platform_fee`` and
``host_payout + platform_fee == subtotal`` hold exactly.
"""

from dataclasses import dataclass
from decimal import Decimal

from shared.domain.base import ValueObject
from shared.domain.value_objects import Money

from apps.bookings.domain.exceptions import InvalidDuration

PLATFORM_FEE_RATE = Decimal('0.12')
SECURITY_DEPOSIT_DAYS = 2


@dataclass(frozen=True)
class PriceBreakdown(ValueObject):
    daily_rate: Money
    total_days: int
    chauffeur_fee: Money
    subtotal: Money
    platform_fee_rate: Decimal
    platform_fee: Money
    security_deposit: Money
    total_amount: Money
    host_payout: Money

    @property
    def currency(self) -> str:
        return self.daily_rate.currency


def calculate_price(
    daily_rate: Money,
    days: int,
    chauffeur_requested: bool = False,
    chauffeur_available: bool = False,
    chauffeur_daily_fee: Money | None = None,
) -> PriceBreakdown:
    """
    Compute the price breakdown for renting at ``daily_rate`` for ``days``.

    A chauffeur requested on a vehicle that does not offer one costs
    nothing; the request is not rejected.

    Raises:
        InvalidDuration: if ``days`` is not a positive integer
    """
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise InvalidDuration(f"Rental duration must be a positive number of days, got {days!r}")

    currency = daily_rate.currency

    if chauffeur_requested and chauffeur_available and chauffeur_daily_fee is not None:
        chauffeur_fee = chauffeur_daily_fee * days
    else:
        chauffeur_fee = Money.zero(currency)

    subtotal = daily_rate * days + chauffeur_fee
    platform_fee = (subtotal * PLATFORM_FEE_RATE).quantize()

    return PriceBreakdown(
        daily_rate=daily_rate,
        total_days=days,
        chauffeur_fee=chauffeur_fee,
        subtotal=subtotal,
        platform_fee_rate=PLATFORM_FEE_RATE,
        platform_fee=platform_fee,
        security_deposit=daily_rate * SECURITY_DEPOSIT_DAYS,
        total_amount=subtotal + platform_fee,
        host_payout=subtotal - platform_fee,
    )
