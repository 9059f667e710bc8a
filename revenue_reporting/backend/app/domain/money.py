# backend/app/domain/money.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_CENT = Decimal("0.01")


def round_half_up(value: Any) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Accepts ints, Decimals, floats (via their repr, so 2.675 stays 2.675) and numeric strings.
    """
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
        return int(d.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    except (InvalidOperation, ValueError, TypeError):
        return 0


def div_round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half-up; 0 when the denominator is 0."""
    if not denominator:
        return 0
    return round_half_up(Decimal(int(numerator)) / Decimal(int(denominator)))


@dataclass(frozen=True, order=True)
class Money:
    """
    Integer-cents amount.

    Financial sums stay exact; conversion to/from currency units happens
    only at the edges (from_decimal / to_decimal / format).
    """

    cents: int = 0

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @classmethod
    def of(cls, cents: Any) -> "Money":
        if isinstance(cents, Money):
            return cents
        return cls(round_half_up(cents))

    @classmethod
    def from_decimal(cls, amount: Any) -> "Money":
        """Currency units (e.g. 1000.005 dollars) -> cents, rounded half-up."""
        if amount is None or amount == "":
            return cls(0)
        try:
            d = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except (InvalidOperation, ValueError, TypeError):
            return cls(0)
        return cls(round_half_up(d * 100))

    def to_decimal(self) -> Decimal:
        return (Decimal(self.cents) / 100).quantize(_CENT)

    def format(self) -> str:
        """Two-decimal currency text, e.g. Money(54839).format() == '548.39'."""
        return f"{self.to_decimal():.2f}"

    def prorate(self, part: int, whole: int) -> "Money":
        """self * part / whole, rounded half-up to the cent."""
        return Money(div_round_half_up(self.cents * int(part), int(whole)))

    def __add__(self, other: Any) -> "Money":
        if isinstance(other, Money):
            return Money(self.cents + other.cents)
        if isinstance(other, int):
            return Money(self.cents + other)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: Any) -> "Money":
        if isinstance(other, Money):
            return Money(self.cents - other.cents)
        if isinstance(other, int):
            return Money(self.cents - other)
        return NotImplemented

    def __neg__(self) -> "Money":
        return Money(-self.cents)

    def __abs__(self) -> "Money":
        return Money(abs(self.cents))

    def __bool__(self) -> bool:
        return self.cents != 0

    def __int__(self) -> int:
        return self.cents

    def __str__(self) -> str:
        return self.format()


def money_sum(values) -> Money:
    total = Money.zero()
    for v in values:
        total = total + v
    return total
