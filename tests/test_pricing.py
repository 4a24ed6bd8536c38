"""Tests for order totals."""

from decimal import Decimal

import pytest

from storefront.services.pricing import PricingEngine, compute_totals, round_currency
from tests.conftest import make_item


class TestComputeTotals:
    def test_single_item_above_free_shipping_threshold(self):
        totals = compute_totals([make_item(price="2499")])

        assert totals.subtotal == Decimal("2499")
        assert totals.shipping == Decimal("0")
        assert totals.tax == Decimal("150")
        assert totals.discount == Decimal("0")
        assert totals.total == Decimal("2649")

    def test_single_item_below_threshold_pays_shipping(self):
        totals = compute_totals([make_item(item_id=7, price="699")])

        assert totals.subtotal == Decimal("699")
        assert totals.shipping == Decimal("99")
        assert totals.tax == Decimal("42")
        assert totals.total == Decimal("840")

    def test_ten_percent_discount(self):
        items = [make_item(item_id=3, price="1000")]

        totals = compute_totals(items, Decimal("0.10"))

        assert totals.subtotal == Decimal("1000")
        assert totals.shipping == Decimal("0")
        assert totals.tax == Decimal("60")
        assert totals.discount == Decimal("100")
        assert totals.total == Decimal("960")

    def test_quantities_multiply_unit_price(self):
        totals = compute_totals([make_item(price="799", quantity=2), make_item(item_id=2, price="899")])

        assert totals.subtotal == Decimal("2497")

    def test_empty_cart_has_no_shipping(self):
        totals = compute_totals([])

        assert totals.subtotal == Decimal("0")
        assert totals.shipping == Decimal("0")
        assert totals.total == Decimal("0")

    def test_subtotal_at_threshold_still_pays_shipping(self):
        totals = compute_totals([make_item(item_id=2, price="899")])

        assert totals.shipping == Decimal("99")

    def test_subtotal_just_above_threshold_ships_free(self):
        totals = compute_totals([make_item(price="900")])

        assert totals.shipping == Decimal("0")

    @pytest.mark.parametrize("fraction", ["-0.1", "1.5"])
    def test_discount_fraction_out_of_range(self, fraction):
        with pytest.raises(ValueError):
            compute_totals([make_item()], Decimal(fraction))

    def test_is_idempotent(self):
        items = [make_item(price="1799"), make_item(item_id=9, price="1499", quantity=3)]

        assert compute_totals(items, Decimal("0.10")) == compute_totals(items, Decimal("0.10"))

    @pytest.mark.parametrize("price", ["1", "17", "499", "699", "898", "899", "900", "1050", "2499", "12345"])
    def test_shipping_and_tax_rules(self, price):
        subtotal = Decimal(price)

        totals = compute_totals([make_item(price=price)])

        assert totals.tax == round_currency(subtotal * Decimal("0.06"))
        assert totals.shipping == (Decimal("0") if subtotal > 899 else Decimal("99"))
        assert totals.total == totals.subtotal + totals.shipping + totals.tax - totals.discount

    def test_tax_rounds_half_up(self):
        # 25 * 0.06 = 1.5
        totals = compute_totals([make_item(price="25")])

        assert totals.tax == Decimal("2")


class TestPricingEngine:
    def test_uses_configured_rules(self):
        engine = PricingEngine(free_shipping_threshold=500, shipping_fee=49, tax_rate="0.18")

        totals = engine.compute_totals([make_item(price="400")])

        assert totals.shipping == Decimal("49")
        assert totals.tax == Decimal("72")
        assert totals.total == Decimal("521")

    def test_from_settings(self):
        class FakeSettings:
            free_shipping_threshold = 899
            shipping_fee = 99
            tax_rate = 0.06

        engine = PricingEngine.from_settings(FakeSettings())

        assert engine.tax_rate == Decimal("0.06")
        assert engine.compute_totals([make_item(item_id=7, price="699")]).total == Decimal("840")
