"""Unit tests for saved pricing item conversion."""

from decimal import Decimal

from load_pricing.models.product import ProductSnapshot
from load_pricing.pricing.ledger import PricingLedger
from load_pricing.pricing.payload import line_from_payload, line_to_payload, snapshot_from_dict


class TestLineFromPayload:
    """Restoring lines from saved records."""

    def test_recomputes_derived_amounts(self):
        line = line_from_payload(
            {
                "id": 11,
                "product_id": 4,
                "description": "Navlun",
                "quantity": "2",
                "unit": "SET",
                "unit_price": "100",
                "currency": "usd",
                "exchange_rate": "30",
                "vat_rate": "20",
                "discount_rate": "10",
                "sub_total": "1",
                "vat_amount": "1",
                "total": "1",
                "sort_order": 3,
            }
        )

        assert line.id == 11
        assert line.product_ref == 4
        assert line.product_snapshot is None
        assert line.currency == "USD"
        assert line.sort_order == 3
        assert line.sub_total == Decimal("5400.00")
        assert line.total == Decimal("6480.00")

    def test_missing_fields_take_defaults(self):
        line = line_from_payload({}, position=2, default_unit="NIU", base_currency="EUR")

        assert line.quantity == Decimal("1")
        assert line.unit == "NIU"
        assert line.currency == "EUR"
        assert line.exchange_rate == Decimal("1")
        assert line.sort_order == 2
        assert line.id is None
        assert line.is_active is True

    def test_numeric_values_from_json_numbers(self):
        line = line_from_payload({"quantity": 3, "unit_price": 12.5, "vat_rate": 20})

        assert line.unit_price == Decimal("12.5")
        assert line.total == Decimal("45.00")

    def test_unusable_exchange_rate_is_one(self):
        assert line_from_payload({"exchange_rate": "0"}).exchange_rate == Decimal("1")
        assert line_from_payload({"exchange_rate": "abc"}).exchange_rate == Decimal("1")

    def test_embedded_product_becomes_snapshot(self):
        line = line_from_payload(
            {"product": {"id": 9, "code": "P9", "name": "Vinç", "unit": "HUR", "vat_rate": "20"}}
        )

        assert line.product_ref == 9
        assert line.product_snapshot == ProductSnapshot(
            id=9, code="P9", name="Vinç", unit="HUR", vat_rate=Decimal("20")
        )
        assert line.needs_snapshot is False

    def test_large_saved_values(self):
        ledger = PricingLedger.from_payload(
            [{"quantity": 1e27, "unit_price": "10", "vat_rate": "20"}], base_currency="TRY", default_unit="SET"
        )

        assert ledger.lines[0].sub_total == Decimal("1E+28")
        assert ledger.totals().grand_total == Decimal("1.2E+28")

    def test_bad_product_id_is_ignored(self):
        assert line_from_payload({"product_id": "x"}).product_ref is None


def test_snapshot_from_dict_requires_id():
    assert snapshot_from_dict({"name": "No id"}) is None
    assert snapshot_from_dict(None) is None


class TestLineToPayload:
    """Serializing lines for persistence."""

    def test_numbers_as_strings(self):
        line = line_from_payload({"quantity": "2", "unit_price": "10.5", "vat_rate": "20", "product_id": 4})

        payload = line_to_payload(line)

        assert payload["product_id"] == 4
        assert payload["quantity"] == "2"
        assert payload["unit_price"] == "10.5"
        assert payload["sub_total"] == "21.00"
        assert payload["vat_amount"] == "4.20"
        assert payload["total"] == "25.20"
        assert "id" not in payload

    def test_includes_id_of_saved_line(self):
        assert line_to_payload(line_from_payload({"id": 5}))["id"] == 5


def test_ledger_payload_round_trip():
    items = [
        {"id": 1, "description": "A", "quantity": "2", "unit_price": "100", "vat_rate": "20", "sort_order": 0},
        {"id": 2, "description": "B", "unit_price": "50", "currency": "EUR", "exchange_rate": "35", "sort_order": 1},
    ]
    ledger = PricingLedger.from_payload(items, base_currency="TRY", default_unit="SET")

    restored = PricingLedger.from_payload(ledger.to_payload(), base_currency="TRY", default_unit="SET")

    assert restored.totals() == ledger.totals()
    assert restored.totals().grand_total == Decimal("1990.00")
    assert [line.id for line in restored.lines] == [1, 2]
