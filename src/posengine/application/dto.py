"""Data Transfer Objects returned by the register's use cases."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from posengine.domain.model.order import Order, Payment
from posengine.domain.model.receipt import ReceiptDocument


@dataclass(frozen=True)
class CheckoutResult:
    """Output of a completed checkout: what was created, charged and printed."""

    order: Order
    payment: Payment
    receipt: ReceiptDocument
    change: Decimal
