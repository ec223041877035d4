"""Print-ready receipt document.

The document holds raw Decimal amounts; rounding and currency formatting
are left to whoever renders it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from posengine.domain.model.value_objects import ZERO, PaymentMethod


@dataclass(frozen=True)
class Tender:
    """How the customer paid: method, charged amount, cash handed over, change."""

    method: PaymentMethod
    amount: Decimal
    amount_tendered: Decimal | None = None
    change: Decimal = ZERO


@dataclass(frozen=True)
class ReceiptHeader:
    business_name: str
    address: str | None = None
    phone: str | None = None
    trn: str | None = None
    gct_registration_number: str | None = None
    show_logo: bool = False
    logo_url: str | None = None


@dataclass(frozen=True)
class ReceiptLine:
    name: str
    quantity: Decimal
    unit_price: Decimal
    line_total: Decimal
    is_gct_exempt: bool = False
    uom_code: str = "EA"


@dataclass(frozen=True)
class ReceiptSummary:
    subtotal: Decimal
    discount_amount: Decimal
    discount_label: str
    taxable_amount: Decimal
    exempt_amount: Decimal
    gct_rate: Decimal
    gct_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class ReceiptPayment:
    method: PaymentMethod
    amount: Decimal
    amount_tendered: Decimal | None = None
    change: Decimal = ZERO

    @property
    def label(self) -> str:
        return self.method.label


@dataclass(frozen=True)
class ReceiptDocument:
    header: ReceiptHeader
    order_number: str
    date: datetime
    customer_name: str
    lines: tuple[ReceiptLine, ...]
    summary: ReceiptSummary
    payments: tuple[ReceiptPayment, ...]
    footer: str | None = None

    @property
    def change_given(self) -> Decimal:
        return sum((p.change for p in self.payments), ZERO)
