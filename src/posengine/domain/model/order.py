"""Order records exchanged with the backend.

``OrderRequest`` is the cart snapshot the register submits; ``Order`` and
``Payment`` are what the backend returns.  Orders carry their lines so a
held order can be loaded back into a cart.  The backend recomputes totals on
its side, and its ``Order.total`` is the amount actually charged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal

from posengine.domain.model.cart import MIN_QUANTITY, WALK_IN, Cart, LineItem, new_temp_id
from posengine.domain.model.value_objects import DiscountType, OrderStatus, PaymentMethod

DEFAULT_HOLD_REASON = "Parked from POS"
PAYMENT_COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class OrderRequest:
    customer_name: str
    items: tuple[LineItem, ...]
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    customer_id: str | None = None
    order_discount_type: DiscountType | None = None
    order_discount_value: Decimal | None = None
    order_discount_reason: str | None = None
    notes: str | None = None
    session_id: str | None = None

    @staticmethod
    def from_cart(
        cart: Cart,
        session_id: str | None = None,
        status: OrderStatus = OrderStatus.PENDING_PAYMENT,
    ) -> OrderRequest:
        return OrderRequest(
            customer_id=cart.customer_id,
            customer_name=cart.customer_name,
            items=cart.items,
            status=status,
            order_discount_type=cart.order_discount_type,
            order_discount_value=cart.order_discount_value,
            order_discount_reason=cart.order_discount_reason,
            notes=cart.notes,
            session_id=session_id,
        )


@dataclass(frozen=True)
class Order:
    id: str
    order_number: str
    total: Decimal
    created_at: datetime
    status: OrderStatus = OrderStatus.PENDING_PAYMENT
    held_reason: str | None = None
    session_id: str | None = None
    customer_id: str | None = None
    customer_name: str = WALK_IN
    items: tuple[LineItem, ...] = ()
    order_discount_type: DiscountType | None = None
    order_discount_value: Decimal | None = None
    order_discount_reason: str | None = None
    notes: str | None = None

    def to_cart(self) -> Cart:
        """Rebuild an editable cart from this order, with fresh line ids."""
        return Cart(
            items=tuple(
                replace(item, temp_id=new_temp_id(), quantity=max(MIN_QUANTITY, item.quantity))
                for item in self.items
            ),
            customer_id=self.customer_id,
            customer_name=self.customer_name or WALK_IN,
            order_discount_type=self.order_discount_type,
            order_discount_value=self.order_discount_value,
            order_discount_reason=self.order_discount_reason,
            notes=self.notes,
        )


@dataclass(frozen=True)
class Payment:
    id: str
    order_id: str
    method: PaymentMethod
    amount: Decimal
    amount_tendered: Decimal | None = None
    status: str = PAYMENT_COMPLETED
