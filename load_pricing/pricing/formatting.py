"""Amount formatting in Turkish notation (1.234,56)."""

import re
from decimal import Decimal
from typing import Any, Dict, Optional

from .line_calculator import round_money
from .number_normalizer import coerce_decimal

_THOUSANDS = re.compile(r"\B(?=(\d{3})+$)")

CURRENCY_SYMBOLS: Dict[str, str] = {
    "TRY": "₺",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "CHF": "CHF",
    "CAD": "C$",
    "AUD": "A$",
    "CNY": "¥",
    "RUB": "₽",
    "SEK": "kr",
    "NOK": "kr",
    "DKK": "kr",
    "PLN": "zł",
    "SAR": "SR",
    "AED": "AED",
}


def get_currency_symbol(currency: str, symbols: Optional[Dict[str, str]] = None) -> str:
    """Return display symbol for currency code, or the code itself."""
    if symbols and currency in symbols:
        return symbols[currency]
    return CURRENCY_SYMBOLS.get(currency, currency)


def format_amount(amount: Any, decimals: int = 2) -> str:
    """Format absolute amount with dot thousands and comma decimals.

    >>> format_amount(Decimal("1234.5"))
    '1.234,50'
    """
    value = coerce_decimal(amount).copy_abs()
    quantum = Decimal(1).scaleb(-decimals) if decimals > 0 else Decimal(1)
    text = f"{round_money(value, quantum):f}"
    integer_part, _, decimal_part = text.partition(".")
    integer_part = _THOUSANDS.sub(".", integer_part)
    if decimals <= 0:
        return integer_part
    return f"{integer_part},{decimal_part}"


def format_currency(
    amount: Any,
    symbol: str = "₺",
    show_sign: bool = False,
    decimals: int = 2,
    symbol_position: str = "before",
) -> str:
    """Format amount with currency symbol, e.g. '₺ 1.234,56' or '-$ 500,00'."""
    value = coerce_decimal(amount)
    formatted = format_amount(value, decimals)

    sign = ""
    if value < 0:
        sign = "-"
    elif show_sign and value > 0:
        sign = "+"

    if symbol_position == "after":
        return f"{sign}{formatted} {symbol}"
    return f"{sign}{symbol} {formatted}"
