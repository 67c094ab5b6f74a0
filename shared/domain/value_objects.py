"""
Common Value Objects

Value objects used across multiple domains:
- Money: Fixed-point monetary amount rounded at the currency's minor unit
- DateRange: Represents a half-open range of dates (start to end)
"""

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from shared.domain.base import ValueObject

# Decimal places of each supported currency's minor unit
CURRENCY_MINOR_UNITS = {
    'GNF': 0,
    'XOF': 0,
    'USD': 2,
    'EUR': 2,
}

DEFAULT_CURRENCY = 'GNF'


def minor_unit_exponent(currency: str) -> Decimal:
    """Quantization exponent for a currency, e.g. Decimal('1') for GNF"""
    try:
        places = CURRENCY_MINOR_UNITS[currency]
    except KeyError:
        raise ValueError(f"Unsupported currency: {currency}") from None
    return Decimal(1).scaleb(-places)


@dataclass(frozen=True)
class Money(ValueObject):
    """
    Money value object

    Represents a monetary amount with currency.
    Immutable and supports arithmetic operations. Binary floats are
    rejected everywhere so that amounts never pick up rounding drift.
    """
    amount: Decimal
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self):
        if isinstance(self.amount, float) or isinstance(self.amount, bool):
            raise TypeError("Money amount must be Decimal or int, not float")
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', Decimal(self.amount))
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")
        if not self.currency:
            raise ValueError("Currency is required")
        if self.currency not in CURRENCY_MINOR_UNITS:
            raise ValueError(f"Unsupported currency: {self.currency}")

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> 'Money':
        return cls(Decimal(0), currency)

    def __add__(self, other: 'Money') -> 'Money':
        """Add two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only add Money to Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot add different currencies: {self.currency} and {other.currency}")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        """Subtract two money objects"""
        if not isinstance(other, Money):
            raise TypeError("Can only subtract Money from Money")
        if self.currency != other.currency:
            raise ValueError(f"Cannot subtract different currencies: {self.currency} and {other.currency}")
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: int | Decimal) -> 'Money':
        """Multiply money by an integer or Decimal factor (result is not rounded)"""
        if isinstance(factor, bool) or not isinstance(factor, (int, Decimal)):
            raise TypeError("Can only multiply Money by int or Decimal")
        return Money(self.amount * factor, self.currency)

    __rmul__ = __mul__

    def quantize(self) -> 'Money':
        """Round half-up to the currency's minor unit"""
        exponent = minor_unit_exponent(self.currency)
        return Money(self.amount.quantize(exponent, rounding=ROUND_HALF_UP), self.currency)

    def fits_minor_unit(self) -> bool:
        """True when the amount has no digits below the currency's minor unit"""
        return self.amount == self.quantize().amount

    def __str__(self):
        places = CURRENCY_MINOR_UNITS[self.currency]
        return f"{self.amount:,.{places}f} {self.currency}"

    def __repr__(self):
        return f"Money({self.amount}, '{self.currency}')"


@dataclass(frozen=True)
class DateRange(ValueObject):
    """
    Date range value object

    Represents a range from start_date (inclusive) to end_date (exclusive).
    Used for booking periods and availability checks.
    """
    start_date: date
    end_date: date

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise ValueError(f"Start date ({self.start_date}) must be before end date ({self.end_date})")

    def overlaps_with(self, other: 'DateRange') -> bool:
        """
        Check if this range overlaps with another

        Two ranges overlap if they share any dates.
        Note: end_date is exclusive, so adjacent ranges don't overlap.

        Examples:
            - DateRange(25, 28) overlaps with DateRange(27, 30) -> True
            - DateRange(25, 28) overlaps with DateRange(28, 31) -> False (adjacent)
        """
        if not isinstance(other, DateRange):
            raise TypeError("Can only check overlap with another DateRange")

        return (self.start_date < other.end_date and
                other.start_date < self.end_date)

    def contains(self, check_date: date) -> bool:
        """
        Check if a date is within this range

        Note: start_date is inclusive, end_date is exclusive
        """
        return self.start_date <= check_date < self.end_date

    @property
    def days(self) -> int:
        """Number of rental days in this range"""
        return (self.end_date - self.start_date).days

    def __str__(self):
        return f"{self.start_date.isoformat()} - {self.end_date.isoformat()}"

    def __repr__(self):
        return f"DateRange({self.start_date}, {self.end_date})"
