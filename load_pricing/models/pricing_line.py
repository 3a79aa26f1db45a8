"""PricingLine data model representing one cost row of a quote or load."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from ..pricing.line_calculator import calculate_line
from .product import ProductSnapshot

# Raw fields that feed the line calculator
CALCULABLE_FIELDS = (
    "quantity",
    "unit_price",
    "exchange_rate",
    "vat_rate",
    "discount_rate",
    "discount_amount",
)

# Raw fields that can be set without affecting any amount
PLAIN_FIELDS = (
    "description",
    "unit",
    "product_ref",
    "product_snapshot",
)


def _new_key() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class PricingLine:
    """Represents one pricing line (cost or product entry).

    Important: sub_total, vat_amount and total are DERIVED. They cannot be
    passed to the constructor and are recomputed from the raw fields every
    time a line is built, so a line never carries stale amounts. Mutation
    goes through dataclasses.replace(), which rebuilds the derived fields.

    Attributes:
        description: Free text description (product name after selection)
        quantity: Quantity in unit
        unit: Unit code (e.g., "NIU", "SET", "KGM")
        unit_price: Price per unit in line currency
        currency: Line currency code (e.g., "TRY", "USD")
        exchange_rate: Multiplier from currency to base currency (> 0)
        vat_rate: VAT percentage
        discount_rate: Discount percentage (wins over discount_amount)
        discount_amount: Discount in line currency
        product_ref: Catalog product id, None for a manual line
        product_snapshot: Copy of catalog metadata taken at selection time
        sort_order: Display/persistence order assigned on append
        id: Id of the saved record this line was loaded from, if any
        is_active: Saved-record flag, carried through untouched
        key: Stable identity of the line within its ledger
    """

    description: str = ""
    quantity: Decimal = Decimal("1")
    unit: str = "SET"
    unit_price: Decimal = Decimal("0")
    currency: str = "TRY"
    exchange_rate: Decimal = Decimal("1")
    vat_rate: Decimal = Decimal("0")
    discount_rate: Decimal = Decimal("0")
    discount_amount: Decimal = Decimal("0")
    product_ref: Optional[int] = None
    product_snapshot: Optional[ProductSnapshot] = None
    sort_order: int = 0
    id: Optional[int] = None
    is_active: bool = True
    key: str = field(default_factory=_new_key, compare=False, repr=False)

    sub_total: Decimal = field(init=False)
    vat_amount: Decimal = field(init=False)
    total: Decimal = field(init=False)

    def __post_init__(self):
        """Derive amounts from the raw fields."""
        amounts = calculate_line(
            self.quantity,
            self.unit_price,
            self.exchange_rate,
            self.vat_rate,
            self.discount_rate,
            self.discount_amount,
        )
        object.__setattr__(self, "sub_total", amounts.sub_total)
        object.__setattr__(self, "vat_amount", amounts.vat_amount)
        object.__setattr__(self, "total", amounts.total)

    @property
    def has_snapshot(self) -> bool:
        return self.product_snapshot is not None

    @property
    def needs_snapshot(self) -> bool:
        """True for a line loaded with a product reference but no snapshot."""
        return self.product_ref is not None and self.product_snapshot is None
