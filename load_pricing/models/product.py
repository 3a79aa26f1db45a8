"""Product data models used by product selection and snapshot back-fill."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class ProductSnapshot:
    """Point-in-time copy of catalog fields embedded in a pricing line.

    The snapshot is independent of the live catalog once taken: later catalog
    edits never reach a line through it.

    Attributes:
        id: Catalog product id the snapshot was taken from
        code: Product code (shown as subtitle in the picker)
        name: Product name
        unit: Unit code (e.g., "NIU", "KGM")
        vat_rate: VAT percentage as stored in the catalog
    """

    id: int
    code: str
    name: str
    unit: str
    vat_rate: Decimal


@dataclass(frozen=True)
class ProductOption:
    """Search candidate returned by the product catalog.

    price is optional; when absent or blank selecting the option keeps the
    line's current unit price. A zero price is applied like any other.
    """

    id: int
    name: str
    code: str = ""
    unit: Optional[str] = None
    vat_rate: Optional[Decimal] = None
    price: Optional[Decimal] = None


@dataclass(frozen=True)
class Product:
    """Catalog product as returned by a fetch by id."""

    id: int
    code: str
    name: str
    unit: Optional[str] = None
    vat_rate: Optional[Decimal] = None
