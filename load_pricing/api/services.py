"""Async catalog and exchange-rate services for the pricing ledger.

The HTTP client is blocking; calls run in a worker thread so a pending lookup
never blocks further edits to the ledger.
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..config import get_base_currency, get_fx_rates_table, get_profile
from ..models.product import Product, ProductOption
from ..pricing.interfaces import ExchangeRateLookup, ProductCatalog
from ..pricing.number_normalizer import ONE, coerce_decimal
from .client import ApiClient, PricingApiError

logger = logging.getLogger(__name__)


class ApiProductCatalog(ProductCatalog):
    """Product catalog backed by the /products endpoints."""

    def __init__(self, client: ApiClient, search_limit: Optional[int] = None):
        self.client = client
        self.search_limit = search_limit or get_profile().product_search_limit

    async def search(self, query: str) -> List[ProductOption]:
        try:
            return await asyncio.to_thread(self.client.search_products, query, self.search_limit)
        except PricingApiError as e:
            logger.warning(f"Error loading products for {query!r}: {e}")
            return []

    async def get(self, product_id: int) -> Product:
        return await asyncio.to_thread(self.client.get_product, product_id)


class ApiExchangeRateLookup(ExchangeRateLookup):
    """Exchange rates from /exchange-rates/current/{currency}."""

    def __init__(self, client: ApiClient, base_currency: Optional[str] = None):
        self.client = client
        self.base_currency = (base_currency or get_base_currency()).upper()

    async def get_rate(self, currency: str) -> Decimal:
        code = currency.strip().upper()
        if code == self.base_currency:
            return ONE
        return await asyncio.to_thread(self.client.get_exchange_rate, code)


class EnvExchangeRateLookup(ExchangeRateLookup):
    """Offline exchange rates from a static table.

    Reads LOAD_PRICING_FX_RATES when no table is given, e.g.
    LOAD_PRICING_FX_RATES='{"USD": 30.5, "EUR": 33.1}'
    """

    def __init__(
        self,
        table: Optional[Dict[str, Any]] = None,
        base_currency: Optional[str] = None,
    ):
        source = get_fx_rates_table() if table is None else table
        self.table = {str(code).upper(): rate for code, rate in source.items()}
        self.base_currency = (base_currency or get_base_currency()).upper()

    async def get_rate(self, currency: str) -> Decimal:
        code = currency.strip().upper()
        if code == self.base_currency:
            return ONE
        rate = coerce_decimal(self.table.get(code))
        if rate <= 0:
            raise LookupError(f"No exchange rate configured for {code}")
        return rate
