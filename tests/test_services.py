"""Unit tests for async catalog and exchange-rate services."""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from load_pricing.api.client import ApiClient, ApiConnectionError
from load_pricing.api.services import ApiExchangeRateLookup, ApiProductCatalog, EnvExchangeRateLookup
from load_pricing.models.product import Product, ProductOption
from load_pricing.pricing.ledger import PricingLedger

pytestmark = pytest.mark.anyio


class TestApiProductCatalog:
    """Catalog over the HTTP client."""

    async def test_search_uses_profile_limit(self):
        client = Mock(spec=ApiClient)
        client.search_products.return_value = [ProductOption(id=1, name="Forklift")]

        catalog = ApiProductCatalog(client)
        options = await catalog.search("fork")

        assert options == [ProductOption(id=1, name="Forklift")]
        client.search_products.assert_called_once_with("fork", 20)

    async def test_search_failure_is_empty(self):
        client = Mock(spec=ApiClient)
        client.search_products.side_effect = ApiConnectionError("offline")

        assert await ApiProductCatalog(client, search_limit=5).search("fork") == []

    async def test_get_propagates_errors(self):
        client = Mock(spec=ApiClient)
        client.get_product.side_effect = ApiConnectionError("offline")

        with pytest.raises(ApiConnectionError):
            await ApiProductCatalog(client).get(1)

    async def test_get(self):
        client = Mock(spec=ApiClient)
        client.get_product.return_value = Product(id=1, code="A", name="Alpha")

        assert (await ApiProductCatalog(client).get(1)).name == "Alpha"


class TestApiExchangeRateLookup:
    """Exchange rates over the HTTP client."""

    async def test_base_currency_without_request(self):
        client = Mock(spec=ApiClient)

        assert await ApiExchangeRateLookup(client, base_currency="TRY").get_rate("try") == Decimal("1")
        client.get_exchange_rate.assert_not_called()

    async def test_foreign_currency(self):
        client = Mock(spec=ApiClient)
        client.get_exchange_rate.return_value = Decimal("30.25")

        rate = await ApiExchangeRateLookup(client, base_currency="TRY").get_rate("usd")

        assert rate == Decimal("30.25")
        client.get_exchange_rate.assert_called_once_with("USD")

    async def test_ledger_falls_back_to_one_on_api_error(self):
        client = Mock(spec=ApiClient)
        client.get_exchange_rate.side_effect = ApiConnectionError("offline")
        ledger = PricingLedger(rates=ApiExchangeRateLookup(client), base_currency="TRY", default_unit="SET")
        ledger.add_line()

        line = (await ledger.select_currency(0, "USD"))[0]

        assert line.currency == "USD"
        assert line.exchange_rate == Decimal("1")


class TestEnvExchangeRateLookup:
    """Offline rate table."""

    async def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LOAD_PRICING_FX_RATES", '{"USD": 30.5, "eur": "33,10"}')
        lookup = EnvExchangeRateLookup()

        assert await lookup.get_rate("USD") == Decimal("30.5")
        assert await lookup.get_rate("EUR") == Decimal("33.10")
        assert await lookup.get_rate("TRY") == Decimal("1")

    @pytest.mark.parametrize("table", [{}, {"USD": 0}, {"USD": "abc"}])
    async def test_unknown_rate_raises(self, table):
        with pytest.raises(LookupError):
            await EnvExchangeRateLookup(table, base_currency="TRY").get_rate("USD")

    async def test_drives_ledger_worked_example(self):
        ledger = PricingLedger(
            rates=EnvExchangeRateLookup({"USD": "30"}, base_currency="TRY"),
            base_currency="TRY",
            default_unit="SET",
        )
        ledger.add_line()
        ledger.update_calculable_field(0, "quantity", "2")
        ledger.update_calculable_field(0, "unit_price", "100")
        ledger.update_calculable_field(0, "vat_rate", "20")
        ledger.update_calculable_field(0, "discount_rate", "10")

        await ledger.select_currency(0, "USD")

        totals = ledger.totals()
        assert totals.sub_total == Decimal("5400.00")
        assert totals.vat_amount == Decimal("1080.00")
        assert totals.grand_total == Decimal("6480.00")
