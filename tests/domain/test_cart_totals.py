"""Unit tests for derived cart totals, including the end-to-end pricing scenarios."""

from decimal import Decimal

import pytest

from posengine.domain.model.cart import Cart
from posengine.domain.model.product import Product
from posengine.domain.service.totals import calculate_totals

RATE = Decimal("0.15")


def _product(pid: str, price: str, exempt: bool = False) -> Product:
    return Product(id=pid, name=f"Product {pid}", unit_price=Decimal(price), is_gct_exempt=exempt)


def _cart(*lines: tuple[Product, int]) -> Cart:
    cart = Cart()
    for product, qty in lines:
        cart = cart.add_item(product, qty)
    return cart


class TestScenarios:

    def test_single_taxable_item(self):
        totals = calculate_totals(_cart((_product("1", "1000"), 3)), RATE)
        assert totals.subtotal == Decimal("3000")
        assert totals.gct_amount == Decimal("450")
        assert totals.total == Decimal("3450")
        assert totals.item_count == 3

    def test_percent_discount_applies_to_pre_tax_subtotal(self):
        cart = _cart((_product("1", "1000"), 3)).set_order_discount("percent", "10")
        totals = calculate_totals(cart, RATE)
        assert totals.discount_amount == Decimal("300")
        assert totals.gct_amount == Decimal("450")
        assert totals.total == Decimal("3150")

    def test_mixed_exempt_and_taxable(self):
        cart = _cart((_product("1", "2000", exempt=True), 1), (_product("2", "1000"), 1))
        totals = calculate_totals(cart, RATE)
        assert totals.exempt_amount == Decimal("2000")
        assert totals.taxable_amount == Decimal("1000")
        assert totals.gct_amount == Decimal("150")
        assert totals.subtotal == Decimal("3000")
        assert totals.total == Decimal("3150")


class TestProperties:

    @pytest.mark.parametrize(
        "discount",
        [None, ("percent", "0"), ("amount", "0"), ("percent", "12.5"), ("amount", "99.99")],
    )
    @pytest.mark.parametrize("exempt_second", [True, False])
    def test_total_formula(self, discount, exempt_second):
        cart = _cart((_product("1", "19.99"), 3), (_product("2", "7.25", exempt_second), 2))
        if discount:
            cart = cart.set_order_discount(*discount)
        t = calculate_totals(cart, RATE)
        assert t.total == t.subtotal - t.discount_amount + t.gct_amount
        assert t.taxable_amount + t.exempt_amount == t.subtotal

    def test_zero_discount_either_type(self):
        cart = _cart((_product("1", "500"), 2))
        percent = calculate_totals(cart.set_order_discount("percent", 0), RATE)
        amount = calculate_totals(cart.set_order_discount("amount", 0), RATE)
        assert percent.discount_amount == 0
        assert amount.discount_amount == 0

    def test_large_flat_discount_goes_negative(self):
        cart = _cart((_product("1", "100"), 1)).set_order_discount("amount", "500")
        totals = calculate_totals(cart, RATE)
        assert totals.total == Decimal("-385")

    def test_line_discounts_do_not_enter_totals(self):
        cart = _cart((_product("1", "1000"), 1))
        line = cart.items[0]
        discounted = cart.update_item(line.temp_id, discount_type="percent", discount_value="50")
        assert calculate_totals(discounted, RATE) == calculate_totals(cart, RATE)

    def test_empty_cart(self):
        totals = calculate_totals(Cart(), RATE)
        assert totals.total == 0
        assert totals.item_count == 0
