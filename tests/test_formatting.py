from decimal import Decimal

import pytest

from storefront.schemas.common_schemas import MoneyField
from storefront.utils.formatting_utils import FormattingUtils
from storefront.utils.money import pre_tax_cents, to_cents


@pytest.mark.parametrize("cents,expected", [
    (2400, "24.00€"),
    (5, "0.05€"),
    (123456, "1,234.56€"),
])
def test_format_euros(cents, expected):
    assert FormattingUtils.format_money(cents) == expected


def test_symbol_before_for_dollars():
    assert FormattingUtils.format_money(129999, "USD") == "$1,299.99"


@pytest.mark.parametrize("rate,expected", [(5.5, "5.5%"), (Decimal("20.00"), "20%"), ("10", "10%")])
def test_format_tax_rate(rate, expected):
    assert FormattingUtils.format_tax_rate(rate) == expected


def test_badge_count():
    assert FormattingUtils.format_badge_count(99) == "99"
    assert FormattingUtils.format_badge_count(100) == "99+"


def test_to_cents_rounds_half_up():
    assert to_cents("8.00") == 800
    assert to_cents("0.125") == 13


def test_pre_tax_extraction():
    assert pre_tax_cents(2400, Decimal("5.5")) == 2275
    assert pre_tax_cents(1200, 20) == 1000
    assert pre_tax_cents(0, 10) == 0


def test_money_field_serialisation():
    money = MoneyField(cents=2275, currency="eur")

    assert money.model_dump() == {"cents": 2275, "currency": "EUR", "amount": 22.75, "display": "22.75€"}


def test_money_field_rejects_negative():
    with pytest.raises(ValueError):
        MoneyField(cents=-1)
