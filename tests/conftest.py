"""Shared fixtures: anyio backend, clean configuration and fake collaborators."""

import asyncio
from decimal import Decimal
from typing import Dict, List, Optional

import pytest

from load_pricing.config.profile_manager import reset_profile
from load_pricing.models.product import Product, ProductOption
from load_pricing.pricing.interfaces import ExchangeRateLookup, ProductCatalog
from load_pricing.pricing.ledger import PricingLedger


@pytest.fixture
def anyio_backend():
    # Only asyncio, no trio
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_config(monkeypatch, tmp_path):
    """Isolate tests from the developer's environment and saved config."""
    for name in (
        "LOAD_PRICING_API_ENDPOINT",
        "LOAD_PRICING_API_KEY",
        "LOAD_PRICING_API_TIMEOUT",
        "LOAD_PRICING_BASE_CURRENCY",
        "LOAD_PRICING_FX_RATES",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LOAD_PRICING_API_CONFIG", str(tmp_path / "api_config.json"))
    reset_profile()
    yield
    reset_profile()


class ControlledRates(ExchangeRateLookup):
    """Exchange-rate lookup whose answers are released by the test."""

    def __init__(self):
        self.calls: List[str] = []
        self.pending: Dict[str, asyncio.Future] = {}

    async def get_rate(self, currency: str) -> Decimal:
        self.calls.append(currency)
        future = asyncio.get_running_loop().create_future()
        self.pending[currency] = future
        return await future

    def resolve(self, currency: str, rate) -> None:
        self.pending[currency].set_result(rate)

    def fail(self, currency: str, error: Exception) -> None:
        self.pending[currency].set_exception(error)


class StaticRates(ExchangeRateLookup):
    """Exchange-rate lookup answering immediately from a table."""

    def __init__(self, table: Dict[str, Decimal]):
        self.table = table
        self.calls: List[str] = []

    async def get_rate(self, currency: str) -> Decimal:
        self.calls.append(currency)
        if currency not in self.table:
            raise LookupError(f"no rate for {currency}")
        return self.table[currency]


class FakeCatalog(ProductCatalog):
    """Product catalog with optional manual release of fetches."""

    def __init__(self, products: Optional[Dict[int, Product]] = None, manual: bool = False):
        self.products = products or {}
        self.manual = manual
        self.fetched: List[int] = []
        self.pending: Dict[int, asyncio.Future] = {}

    async def search(self, query: str) -> List[ProductOption]:
        return [
            ProductOption(id=p.id, name=p.name, code=p.code, unit=p.unit, vat_rate=p.vat_rate)
            for p in self.products.values()
            if query.lower() in p.name.lower()
        ]

    async def get(self, product_id: int) -> Product:
        self.fetched.append(product_id)
        if self.manual:
            future = asyncio.get_running_loop().create_future()
            self.pending[product_id] = future
            return await future
        if product_id not in self.products:
            raise LookupError(f"product {product_id} not found")
        return self.products[product_id]

    def release(self, product_id: int) -> None:
        self.pending[product_id].set_result(self.products[product_id])


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run up to their next suspension point."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def ledger():
    """Empty ledger with TRY base currency and SET default unit."""
    return PricingLedger(base_currency="TRY", default_unit="SET")
