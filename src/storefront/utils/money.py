"""
Integer-cent money arithmetic.

Every amount handled by the cart is an integer number of minor currency
units. Divisions (tax extraction) are the only operations that can produce
fractions of a cent, and they all go through ``round_half_up`` so that line
and cart totals never drift apart.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")
ONE = Decimal("1")
HUNDRED = Decimal("100")

Number = Union[int, float, str, Decimal]


def to_decimal(value: Number) -> Decimal:
    """Decimal from a DB/JSON value; floats go through str() to keep 5.5 as 5.5"""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Decimal) -> int:
    return int(value.quantize(ONE, rounding=ROUND_HALF_UP))


def to_cents(amount: Number) -> int:
    """
    Convert a major-unit amount to cents

    Examples:
        to_cents("8.00") -> 800
        to_cents(2.675) -> 268
    """
    return round_half_up(to_decimal(amount) * HUNDRED)


def cents_to_decimal(cents: int) -> Decimal:
    return (Decimal(cents) / HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)


def pre_tax_cents(tax_inclusive_cents: int, tax_rate_percent: Number) -> int:
    """
    Extract the pre-tax (HT) part of a tax-inclusive (TTC) amount

    Examples:
        pre_tax_cents(2400, 5.5) -> 2275   (24.00 TTC at 5.5% -> 22.75 HT)
        pre_tax_cents(1200, 20) -> 1000
    """
    rate = to_decimal(tax_rate_percent)
    return round_half_up(Decimal(tax_inclusive_cents) * HUNDRED / (HUNDRED + rate))
