"""Line calculator: derive subtotal, VAT and total for one pricing line.

All amounts are converted to base currency with the line's exchange rate.
Intermediate values keep full Decimal precision; only the three outputs are
rounded, half-up, to two fractional digits.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Context, Decimal, MAX_EMAX, MAX_PREC, MIN_EMIN, ROUND_HALF_UP, localcontext
from typing import Any

from .number_normalizer import ZERO, coerce_decimal

TWOPLACES = Decimal("0.01")
HUNDRED = Decimal("100")

# Every step is a product, a sum or a division by 100, so results are exact
# and no magnitude of finite input can overflow or exhaust the precision.
EXACT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineAmounts:
    """Derived amounts of one line, in base currency."""

    sub_total: Decimal
    vat_amount: Decimal
    total: Decimal


def round_money(value: Decimal, places: Decimal = TWOPLACES) -> Decimal:
    return value.quantize(places, rounding=ROUND_HALF_UP, context=EXACT)


def resolve_discount(
    line_total_base: Decimal,
    exchange_rate: Decimal,
    discount_rate: Decimal,
    discount_amount: Decimal,
) -> Decimal:
    """Return the discount in base currency.

    A positive rate always wins; the amount (given in line currency) is only
    used when no rate is set. At most one of the two is ever applied.
    """
    if discount_rate > 0:
        return line_total_base * (discount_rate / HUNDRED)
    if discount_amount > 0:
        return discount_amount * exchange_rate
    return ZERO


def calculate_line(
    quantity: Any,
    unit_price: Any,
    exchange_rate: Any,
    vat_rate: Any = ZERO,
    discount_rate: Any = ZERO,
    discount_amount: Any = ZERO,
) -> LineAmounts:
    """Calculate derived amounts for one line.

    Args:
        quantity: Quantity in the line's unit
        unit_price: Price per unit in line currency
        exchange_rate: Multiplier from line currency to base currency
        vat_rate: VAT percentage (20 means 20%)
        discount_rate: Discount percentage
        discount_amount: Discount in line currency, ignored when discount_rate > 0

    Returns:
        LineAmounts with sub_total, vat_amount and total rounded to 0.01

    Never raises: malformed values count as 0, any finite magnitude is computed
    exactly, and a negative subtotal (discount larger than the line) is passed
    through unclamped.
    """
    quantity = coerce_decimal(quantity)
    unit_price = coerce_decimal(unit_price)
    exchange_rate = coerce_decimal(exchange_rate)
    vat_rate = coerce_decimal(vat_rate)
    discount_rate = coerce_decimal(discount_rate)
    discount_amount = coerce_decimal(discount_amount)

    with localcontext(EXACT):
        line_total_base = quantity * unit_price * exchange_rate
        discount = resolve_discount(line_total_base, exchange_rate, discount_rate, discount_amount)
        sub_total = line_total_base - discount
        vat_amount = sub_total * (vat_rate / HUNDRED)
        total = sub_total + vat_amount

    return LineAmounts(
        sub_total=round_money(sub_total),
        vat_amount=round_money(vat_amount),
        total=round_money(total),
    )
