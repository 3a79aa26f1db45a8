"""Pricing ledger: the ordered pricing lines of one quote/load being edited.

The ledger is the only write path for its lines. Every mutation replaces the
affected line with a rebuilt PricingLine in a single assignment, so derived
amounts are never stale and readers never see a partial update.

Two operations suspend: select_currency (exchange-rate lookup) and
reconcile_missing_snapshot (product fetch). Their results are applied by line
identity and only while they are the latest request for that line; see
LatestOnly.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..config import get_base_currency, get_profile
from ..models.pricing_line import CALCULABLE_FIELDS, PLAIN_FIELDS, PricingLine
from ..models.product import ProductOption, ProductSnapshot
from ..models.totals import Totals
from .formatting import get_currency_symbol
from .interfaces import ExchangeRateLookup, ProductCatalog
from .latest_only import LatestOnly
from .number_normalizer import ONE, ZERO, coerce_decimal, coerce_rate
from .payload import line_from_payload, line_to_payload

logger = logging.getLogger(__name__)

LinesObserver = Callable[[List[PricingLine]], Any]


class PricingLedger:
    """Owns the line sequence of one form session.

    Create a fresh instance per quote/load being edited; do not share one
    across sessions.

    Args:
        lines: Initial lines (e.g., restored from a saved record)
        catalog: Product catalog used to back-fill missing snapshots
        rates: Exchange-rate lookup used by select_currency
        base_currency: Base currency code (default: configured base currency)
        default_unit: Unit of new lines (default: active profile's default unit)
    """

    def __init__(
        self,
        lines: Optional[Iterable[PricingLine]] = None,
        catalog: Optional[ProductCatalog] = None,
        rates: Optional[ExchangeRateLookup] = None,
        base_currency: Optional[str] = None,
        default_unit: Optional[str] = None,
    ):
        self.base_currency = (base_currency or get_base_currency()).upper()
        self.default_unit = default_unit or get_profile().default_unit
        self.catalog = catalog
        self.rates = rates
        self._lines: List[PricingLine] = list(lines or [])
        self._observers: List[LinesObserver] = []
        self._rate_requests = LatestOnly("exchange_rate")
        self._snapshot_requests = LatestOnly("product_snapshot")

    @classmethod
    def from_payload(
        cls,
        items: Iterable[Dict[str, Any]],
        catalog: Optional[ProductCatalog] = None,
        rates: Optional[ExchangeRateLookup] = None,
        base_currency: Optional[str] = None,
        default_unit: Optional[str] = None,
    ) -> PricingLedger:
        """Build a ledger from the pricing items of a saved quote/load."""
        ledger = cls(
            catalog=catalog,
            rates=rates,
            base_currency=base_currency,
            default_unit=default_unit,
        )
        ledger._lines = [
            line_from_payload(
                item,
                position=position,
                default_unit=ledger.default_unit,
                base_currency=ledger.base_currency,
            )
            for position, item in enumerate(items)
        ]
        return ledger

    def to_payload(self) -> List[Dict[str, Any]]:
        """Serialize lines for persistence by the form."""
        return [line_to_payload(line) for line in self._lines]

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    @property
    def lines(self) -> List[PricingLine]:
        """Current lines in order (a copy; lines themselves are immutable)."""
        return list(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def totals(self) -> Totals:
        """Aggregate subtotal, VAT and grand total, recomputed on every call."""
        return Totals.from_lines(self._lines)

    def formatted_totals(self) -> Dict[str, str]:
        """Totals rendered with the base currency symbol, e.g. {'grand_total': '₺ 6.480,00'}.

        Symbols configured in the active profile win over the built-in table.
        """
        symbol = get_currency_symbol(self.base_currency, get_profile().currency_symbols)
        return self.totals().format(symbol)

    def subscribe(self, callback: LinesObserver) -> Callable[[], None]:
        """Register callback(lines) for every applied mutation.

        Returns:
            Callable that unsubscribes callback
        """
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        lines = self.lines
        for callback in list(self._observers):
            callback(lines)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _line_at(self, index: int) -> Optional[PricingLine]:
        if not isinstance(index, int) or not 0 <= index < len(self._lines):
            logger.warning(f"Pricing line index out of range: {index!r} (lines: {len(self._lines)})")
            return None
        return self._lines[index]

    def _index_of(self, key: str) -> Optional[int]:
        for index, line in enumerate(self._lines):
            if line.key == key:
                return index
        return None

    def _apply(self, index: int, **changes: Any) -> PricingLine:
        """Replace line at index with changes applied; derived amounts follow."""
        updated = replace(self._lines[index], **changes)
        self._lines[index] = updated
        self._notify()
        return updated

    def new_line(self) -> PricingLine:
        """Default line: one unit at zero price in base currency, no VAT or discount."""
        return PricingLine(
            description="",
            quantity=ONE,
            unit=self.default_unit,
            unit_price=ZERO,
            currency=self.base_currency,
            exchange_rate=ONE,
            vat_rate=ZERO,
            discount_rate=ZERO,
            discount_amount=ZERO,
            sort_order=len(self._lines),
        )

    # ------------------------------------------------------------------
    # Synchronous mutations
    # ------------------------------------------------------------------

    def add_line(self) -> List[PricingLine]:
        """Append a default line with sort_order = current line count."""
        self._lines.append(self.new_line())
        self._notify()
        return self.lines

    def remove_line(self, index: int) -> List[PricingLine]:
        """Delete line at index. Remaining sort_order values are kept as they are."""
        line = self._line_at(index)
        if line is None:
            return self.lines
        del self._lines[index]
        self._rate_requests.discard(line.key)
        self._snapshot_requests.discard(line.key)
        self._notify()
        return self.lines

    def update_field(self, index: int, field: str, value: Any) -> List[PricingLine]:
        """Set a field that does not take part in calculation.

        Raises:
            ValueError: If field is not one of description, unit, product_ref,
                product_snapshot
        """
        if field not in PLAIN_FIELDS:
            raise ValueError(
                f"update_field() does not accept {field!r}; "
                f"expected one of {', '.join(PLAIN_FIELDS)}"
            )
        if field == "product_snapshot" and value is not None and not isinstance(value, ProductSnapshot):
            raise ValueError(f"product_snapshot must be a ProductSnapshot or None, got {type(value).__name__}")

        if self._line_at(index) is None:
            return self.lines

        if field in ("description", "unit"):
            value = "" if value is None else str(value)
        self._apply(index, **{field: value})
        return self.lines

    def update_calculable_field(self, index: int, field: str, value: Any) -> List[PricingLine]:
        """Set quantity, unit_price, exchange_rate, vat_rate, discount_rate or
        discount_amount and recompute the line's amounts in the same step.

        Malformed numbers count as 0 (exchange_rate falls back to 1). A manual
        exchange rate supersedes any rate lookup still in flight for the line.

        Raises:
            ValueError: If field is not a calculable field
        """
        if field not in CALCULABLE_FIELDS:
            raise ValueError(
                f"update_calculable_field() does not accept {field!r}; "
                f"expected one of {', '.join(CALCULABLE_FIELDS)}"
            )
        line = self._line_at(index)
        if line is None:
            return self.lines

        if field == "exchange_rate":
            self._rate_requests.issue(line.key)
            parsed = coerce_rate(value)
        else:
            parsed = coerce_decimal(value)
        self._apply(index, **{field: parsed})
        return self.lines

    def select_product(self, index: int, option: Optional[ProductOption]) -> List[PricingLine]:
        """Link line to a catalog product, or unlink it when option is None.

        Selecting copies code/name/unit/VAT into a fresh snapshot, overwrites
        the line's unit, vat_rate and description (and unit_price when the
        option carries a non-empty price) and recomputes once. Clearing only
        drops product_ref and snapshot.
        """
        line = self._line_at(index)
        if line is None:
            return self.lines

        # A live choice wins over any back-fill still in flight
        self._snapshot_requests.issue(line.key)

        if option is None:
            self._apply(index, product_ref=None, product_snapshot=None)
            return self.lines

        unit = option.unit or self.default_unit
        vat_rate = coerce_decimal(option.vat_rate)
        changes: Dict[str, Any] = {
            "product_ref": option.id,
            "product_snapshot": ProductSnapshot(
                id=option.id,
                code=option.code or "",
                name=option.name,
                unit=unit,
                vat_rate=vat_rate,
            ),
            "unit": unit,
            "vat_rate": vat_rate,
            "description": option.name,
        }
        # Any non-empty price is taken, a zero price included
        if option.price is not None and str(option.price).strip():
            changes["unit_price"] = coerce_decimal(option.price)

        self._apply(index, **changes)
        return self.lines

    # ------------------------------------------------------------------
    # Asynchronous mutations
    # ------------------------------------------------------------------

    async def _fetch_rate(self, currency: str) -> Decimal:
        if self.rates is None:
            logger.warning(f"No exchange-rate lookup configured; using 1 for {currency}")
            return ONE
        try:
            rate = await self.rates.get_rate(currency)
        except Exception as e:
            logger.warning(f"Exchange rate lookup failed for {currency}: {e}; using 1")
            return ONE
        return coerce_rate(rate)

    async def select_currency(self, index: int, currency: str) -> List[PricingLine]:
        """Switch line currency and resolve its exchange rate.

        The base currency gets rate 1 immediately. Any other currency is
        looked up; a failed lookup yields 1. The rate is applied only if the
        line still exists and no newer currency/rate change was made to it
        while the lookup was running.
        """
        line = self._line_at(index)
        if line is None:
            return self.lines

        code = (currency or "").strip().upper()
        key = line.key

        if code == self.base_currency:
            self._rate_requests.issue(key)
            self._apply(index, currency=code, exchange_rate=ONE)
            return self.lines

        self._apply(index, currency=code)
        applied, rate = await self._rate_requests.run(key, lambda: self._fetch_rate(code))
        if not applied:
            return self.lines

        position = self._index_of(key)
        if position is None:
            logger.debug(f"Line {key} removed before {code} rate arrived")
            return self.lines

        self._apply(position, exchange_rate=rate)
        return self.lines

    async def _reconcile_line(self, key: str) -> bool:
        index = self._index_of(key)
        if index is None:
            return False
        line = self._lines[index]
        if not line.needs_snapshot:
            return False
        if self.catalog is None:
            logger.warning(f"No product catalog configured; cannot fetch product {line.product_ref}")
            return False

        product_ref = line.product_ref

        async def fetch():
            try:
                return await self.catalog.get(product_ref)
            except Exception as e:
                logger.warning(f"Error fetching product {product_ref}: {e}")
                return None

        applied, product = await self._snapshot_requests.run(key, fetch)
        if not applied or product is None:
            return False

        index = self._index_of(key)
        if index is None:
            return False
        current = self._lines[index]
        if current.product_ref != product_ref or current.product_snapshot is not None:
            return False

        # Display metadata only: the saved unit, vat_rate, description and
        # unit_price stay authoritative even when the catalog disagrees.
        snapshot = ProductSnapshot(
            id=product_ref,
            code=product.code or "",
            name=product.name,
            unit=product.unit or "",
            vat_rate=coerce_decimal(product.vat_rate),
        )
        self._apply(index, product_snapshot=snapshot)
        return True

    async def reconcile_missing_snapshot(self, index: int) -> bool:
        """Back-fill the snapshot of a line loaded with only a product reference.

        Returns:
            True if a snapshot was filled, False if nothing was needed, the
            fetch failed, or the line changed while the fetch was running
        """
        line = self._line_at(index)
        if line is None:
            return False
        return await self._reconcile_line(line.key)

    async def attach(self) -> int:
        """Reconcile every line that has a product reference but no snapshot.

        Returns:
            Number of snapshots filled
        """
        keys = [line.key for line in self._lines if line.needs_snapshot]
        if not keys:
            return 0
        results = await asyncio.gather(*(self._reconcile_line(key) for key in keys))
        filled = sum(1 for result in results if result)
        logger.info(f"Attached pricing ledger: {filled}/{len(keys)} product snapshots filled")
        return filled
