"""Fixed-point currency amounts.

Money keeps an integer count of minor units (hundredths) plus a currency
code, so sums and comparisons are exact. Amounts enter the system as
``Decimal``, ``int`` or numeric strings; floats are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from services.errors import InvalidAmount

DEFAULT_CURRENCY = "IDR"
MINOR_UNITS = 100

Amount = Union[Decimal, int, str]


def _to_decimal(value: Amount) -> Decimal:
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmount(f"Money cannot be built from {type(value).__name__} {value!r}")
    try:
        result = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmount(f"Not a valid amount: {value!r}") from None
    if not result.is_finite():
        raise InvalidAmount(f"Not a valid amount: {value!r}")
    return result


def round_half_up(value: Decimal) -> int:
    """Round a Decimal to the nearest integer, halves away from zero."""
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Money:
    cents: int
    currency: str = DEFAULT_CURRENCY

    def __post_init__(self) -> None:
        if isinstance(self.cents, bool) or not isinstance(self.cents, int):
            raise InvalidAmount(f"Minor units must be an int, got {type(self.cents).__name__}")

    @classmethod
    def of(cls, value: Amount, currency: str = DEFAULT_CURRENCY, signed: bool = False) -> Money:
        """Build from a major-unit amount such as ``"15000"`` or ``Decimal("12.50")``.

        Negative amounts raise InvalidAmount unless ``signed`` is set. Digits past
        the second decimal place are rounded half-up.
        """
        amount = _to_decimal(value)
        if amount < 0 and not signed:
            raise InvalidAmount(f"Amount must not be negative: {value}")
        return cls(round_half_up(amount * MINOR_UNITS), currency)

    @classmethod
    def zero(cls, currency: str = DEFAULT_CURRENCY) -> Money:
        return cls(0, currency)

    @property
    def amount(self) -> Decimal:
        return (Decimal(self.cents) / MINOR_UNITS).quantize(Decimal("0.01"))

    def is_zero(self) -> bool:
        return self.cents == 0

    def is_negative(self) -> bool:
        return self.cents < 0

    def ensure_non_negative(self) -> Money:
        if self.cents < 0:
            raise InvalidAmount(f"Amount must not be negative: {self}")
        return self

    # --- arithmetic ---

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.cents + other.cents, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.cents - other.cents, self.currency)

    def __mul__(self, factor: int) -> Money:
        if isinstance(factor, Money):
            raise TypeError("Cannot multiply Money by Money")
        if isinstance(factor, bool) or not isinstance(factor, int):
            raise TypeError(f"Money can only be multiplied by an int quantity, got {type(factor).__name__}")
        return Money(self.cents * factor, self.currency)

    __rmul__ = __mul__

    def percent(self, rate: Amount) -> Money:
        """Return ``rate`` percent of this amount, rounded half-up to the minor unit."""
        if isinstance(rate, Money):
            raise TypeError("Percentage rate must be a number, not Money")
        rate = _to_decimal(rate)
        if rate < 0:
            raise InvalidAmount(f"Percentage rate must not be negative: {rate}")
        portion = Decimal(self.cents) * rate / 100
        return Money(round_half_up(portion), self.currency)

    def min(self, other: Money) -> Money:
        return self if self <= other else other

    def max(self, other: Money) -> Money:
        return self if self >= other else other

    # --- comparison ---

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.cents < other.cents

    def __le__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.cents <= other.cents

    def __gt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.cents > other.cents

    def __ge__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.cents >= other.cents

    # --- display ---

    def format(self) -> str:
        sign = "-" if self.cents < 0 else ""
        return f"{sign}{self.currency} {abs(self.amount):,.2f}"

    def __str__(self) -> str:
        return self.format()

    def _check_currency(self, other: Money) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Expected Money, got {type(other).__name__}")
        if self.currency != other.currency:
            raise InvalidAmount(f"Cannot combine {self.currency} with {other.currency}")
