"""Application service: submit a cart snapshot as a backend order.

Shared by checkout and hold.  The order is always created in
PENDING_PAYMENT and bound to the open session when there is one.
"""

from __future__ import annotations

import logging

from posengine.domain.exceptions import CheckoutStepError, GatewayError
from posengine.domain.gateway.pos_gateway import PosGateway
from posengine.domain.model.cart import Cart
from posengine.domain.model.order import Order, OrderRequest
from posengine.domain.model.session import Session

logger = logging.getLogger(__name__)


class OrderSubmitter:

    def __init__(self, gateway: PosGateway) -> None:
        self._gateway = gateway

    def submit(self, cart: Cart, session: Session | None = None) -> Order:
        request = OrderRequest.from_cart(cart, session_id=session.id if session else None)
        try:
            order = self._gateway.create_order(request)
        except GatewayError as exc:
            logger.error(f"Order creation failed for {len(cart.items)} line(s): {exc}")
            raise CheckoutStepError("create_order", exc) from exc

        logger.info(f"Order {order.order_number} created (total={order.total})")
        return order
