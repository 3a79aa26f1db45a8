"""Totals data model representing aggregate amounts of a pricing ledger."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Dict, Iterable, TYPE_CHECKING

from ..pricing.formatting import format_currency
from ..pricing.line_calculator import EXACT

if TYPE_CHECKING:
    from .pricing_line import PricingLine


@dataclass(frozen=True)
class Totals:
    """Aggregate amounts across all lines, in base currency.

    Attributes:
        sub_total: Sum of line subtotals
        vat_amount: Sum of line VAT amounts
        grand_total: Sum of line totals
        line_count: Number of lines aggregated
    """

    sub_total: Decimal = Decimal("0.00")
    vat_amount: Decimal = Decimal("0.00")
    grand_total: Decimal = Decimal("0.00")
    line_count: int = 0

    @classmethod
    def from_lines(cls, lines: Iterable[PricingLine]) -> Totals:
        """Sum the stored derived amounts of lines."""
        sub_total = Decimal("0.00")
        vat_amount = Decimal("0.00")
        grand_total = Decimal("0.00")
        count = 0
        with localcontext(EXACT):
            for line in lines:
                sub_total += line.sub_total
                vat_amount += line.vat_amount
                grand_total += line.total
                count += 1
        return cls(
            sub_total=sub_total,
            vat_amount=vat_amount,
            grand_total=grand_total,
            line_count=count,
        )

    def format(self, symbol: str = "₺") -> Dict[str, str]:
        """Render totals for display, e.g. {'sub_total': '₺ 5.400,00', ...}."""
        return {
            "sub_total": format_currency(self.sub_total, symbol),
            "vat_amount": format_currency(self.vat_amount, symbol),
            "grand_total": format_currency(self.grand_total, symbol),
        }
