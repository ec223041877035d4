"""Domain service: order-level discount amount.

Applied once, against the pre-tax subtotal.  A flat amount is taken
verbatim and may exceed the subtotal.
"""

from __future__ import annotations

from decimal import Decimal

from posengine.domain.model.value_objects import ZERO, DiscountType

_HUNDRED = Decimal("100")


def resolve(
    subtotal: Decimal,
    discount_type: DiscountType | None,
    discount_value: Decimal | None,
) -> Decimal:
    if discount_type is None or not discount_value:
        return ZERO
    if discount_type is DiscountType.PERCENT:
        return subtotal * (discount_value / _HUNDRED)
    return discount_value
