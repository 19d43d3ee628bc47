from decimal import Decimal
from typing import Union

from storefront.utils.money import to_decimal


class FormattingUtils:
    """
    Display formatting for money and tax rates

    Features:
    - Money formatting with currency support
    - Percentage formatting for VAT bands
    - Cart badge counters
    """

    # Currency symbols and formatting rules
    CURRENCY_FORMATS = {
        'EUR': {'symbol': '€', 'decimal_places': 2, 'symbol_position': 'after'},
        'USD': {'symbol': '$', 'decimal_places': 2, 'symbol_position': 'before'},
        'GBP': {'symbol': '£', 'decimal_places': 2, 'symbol_position': 'before'},
        'CHF': {'symbol': 'CHF', 'decimal_places': 2, 'symbol_position': 'after'},
    }

    @classmethod
    def format_money(
        cls,
        amount_cents: int,
        currency: str = 'EUR',
        include_symbol: bool = True,
        include_currency_code: bool = False
    ) -> str:
        """
        Format money amount for display

        Args:
            amount_cents: Amount in cents
            currency: Currency code (EUR, USD, etc.)
            include_symbol: Whether to include currency symbol
            include_currency_code: Whether to include currency code

        Examples:
            format_money(2400) -> "24.00€"
            format_money(129999, 'USD') -> "$1,299.99"
            format_money(2400, include_currency_code=True) -> "24.00€ EUR"
        """
        currency_config = cls.CURRENCY_FORMATS.get(currency, cls.CURRENCY_FORMATS['EUR'])

        decimal_places = currency_config['decimal_places']
        amount = Decimal(amount_cents) / (10 ** decimal_places)
        formatted_amount = f"{amount:,.{decimal_places}f}"

        result = formatted_amount

        if include_symbol:
            symbol = currency_config['symbol']
            if currency_config['symbol_position'] == 'before':
                result = f"{symbol}{formatted_amount}"
            else:
                result = f"{formatted_amount}{symbol}"

        if include_currency_code:
            result = f"{result} {currency}"

        return result

    @classmethod
    def format_tax_rate(cls, rate_percent: Union[int, float, str, Decimal]) -> str:
        """
        Format a VAT rate stored as a percentage

        Examples:
            format_tax_rate(5.5) -> "5.5%"
            format_tax_rate(Decimal("20.00")) -> "20%"
        """
        rate = to_decimal(rate_percent).normalize()
        return f"{rate:f}%"

    @classmethod
    def format_badge_count(cls, count: int, cap: int = 99) -> str:
        """Navbar cart badge: "99+" once the count exceeds the cap"""
        return f"{cap}+" if count > cap else str(count)
