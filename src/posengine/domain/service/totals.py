"""Derived cart totals.

Recomputed from the cart and the GCT rate on every read; never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from posengine.domain.model.cart import Cart
from posengine.domain.model.value_objects import ZERO
from posengine.domain.service import discount_resolver, tax_calculator


@dataclass(frozen=True)
class CartTotals:
    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    exempt_amount: Decimal
    gct_amount: Decimal
    total: Decimal
    item_count: Decimal


def calculate_totals(cart: Cart, gct_rate: Decimal) -> CartTotals:
    """Compute every total for ``cart``.

    ``total`` is not clamped at zero: a flat discount larger than the
    subtotal plus tax yields a negative total, which the register refuses
    to submit.
    """
    subtotal = sum((item.line_subtotal for item in cart.items), ZERO)
    tax = tax_calculator.aggregate(cart.items, gct_rate)
    discount = discount_resolver.resolve(
        subtotal, cart.order_discount_type, cart.order_discount_value
    )
    return CartTotals(
        subtotal=subtotal,
        discount_amount=discount,
        taxable_amount=tax.taxable_amount,
        exempt_amount=tax.exempt_amount,
        gct_amount=tax.gct_amount,
        total=subtotal - discount + tax.gct_amount,
        item_count=sum((item.quantity for item in cart.items), ZERO),
    )
