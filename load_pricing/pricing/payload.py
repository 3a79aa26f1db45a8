"""Conversion between pricing lines and saved quote/load record dicts."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, Optional

from ..models.pricing_line import PricingLine
from ..models.product import ProductSnapshot
from .number_normalizer import coerce_decimal, coerce_rate

logger = logging.getLogger(__name__)


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-integer id in saved pricing item: {value!r}")
        return None


def snapshot_from_dict(data: Any) -> Optional[ProductSnapshot]:
    """Build a snapshot from an embedded product object, if it has an id."""
    if not isinstance(data, dict):
        return None
    product_id = _optional_int(data.get("id"))
    if product_id is None:
        return None
    return ProductSnapshot(
        id=product_id,
        code=str(data.get("code") or ""),
        name=str(data.get("name") or ""),
        unit=str(data.get("unit") or ""),
        vat_rate=coerce_decimal(data.get("vat_rate")),
    )


def line_from_payload(
    data: Dict[str, Any],
    position: int = 0,
    default_unit: str = "SET",
    base_currency: str = "TRY",
) -> PricingLine:
    """Restore a line from a saved pricing item.

    Stored sub_total/vat_amount/total are ignored; the line recomputes them
    from its raw fields. Missing numeric fields take the default-line values.

    Args:
        data: Saved pricing item dict
        position: Fallback sort_order when the item carries none
        default_unit: Unit for items without one
        base_currency: Currency for items without one
    """
    snapshot = snapshot_from_dict(data.get("product"))
    product_ref = _optional_int(data.get("product_id"))
    if product_ref is None and snapshot is not None:
        product_ref = snapshot.id

    sort_order = _optional_int(data.get("sort_order"))

    return PricingLine(
        description=str(data.get("description") or ""),
        quantity=coerce_decimal(data.get("quantity"), Decimal("1")),
        unit=str(data.get("unit") or default_unit),
        unit_price=coerce_decimal(data.get("unit_price")),
        currency=str(data.get("currency") or base_currency).upper(),
        exchange_rate=coerce_rate(data.get("exchange_rate")),
        vat_rate=coerce_decimal(data.get("vat_rate")),
        discount_rate=coerce_decimal(data.get("discount_rate")),
        discount_amount=coerce_decimal(data.get("discount_amount")),
        product_ref=product_ref,
        product_snapshot=snapshot,
        sort_order=position if sort_order is None else sort_order,
        id=_optional_int(data.get("id")),
        is_active=bool(data.get("is_active", True)),
    )


def line_to_payload(line: PricingLine) -> Dict[str, Any]:
    """Serialize a line for the quote/load API. Numbers are sent as strings."""
    payload: Dict[str, Any] = {
        "product_id": line.product_ref,
        "description": line.description,
        "quantity": str(line.quantity),
        "unit": line.unit,
        "unit_price": str(line.unit_price),
        "currency": line.currency,
        "exchange_rate": str(line.exchange_rate),
        "vat_rate": str(line.vat_rate),
        "vat_amount": str(line.vat_amount),
        "discount_rate": str(line.discount_rate),
        "discount_amount": str(line.discount_amount),
        "sub_total": str(line.sub_total),
        "total": str(line.total),
        "sort_order": line.sort_order,
        "is_active": line.is_active,
    }
    if line.id is not None:
        payload["id"] = line.id
    return payload
