"""Domain service: turn a completed sale into a ReceiptDocument.

Pure transform.  Printing, extra copies and e-mail are the printer's job.
"""

from __future__ import annotations

from decimal import Decimal

from posengine.domain.model.cart import Cart, LineItem
from posengine.domain.model.order import Order
from posengine.domain.model.pos_settings import PosSettings
from posengine.domain.model.receipt import (
    ReceiptDocument,
    ReceiptHeader,
    ReceiptLine,
    ReceiptPayment,
    ReceiptSummary,
    Tender,
)
from posengine.domain.service.totals import CartTotals

_ONE = Decimal("1")


def build(
    order: Order,
    cart: Cart,
    totals: CartTotals,
    tender: Tender,
    settings: PosSettings,
) -> ReceiptDocument:
    header = ReceiptHeader(
        business_name=settings.business_name,
        address=settings.business_address,
        phone=settings.business_phone,
        trn=settings.business_trn,
        gct_registration_number=settings.gct_registration_number,
        show_logo=settings.show_logo,
        logo_url=settings.business_logo if settings.show_logo else None,
    )

    summary = ReceiptSummary(
        subtotal=totals.subtotal,
        discount_amount=totals.discount_amount,
        discount_label=_discount_label(cart),
        taxable_amount=totals.taxable_amount,
        exempt_amount=totals.exempt_amount,
        gct_rate=settings.gct_rate,
        gct_amount=totals.gct_amount,
        total=totals.total,
    )

    payment = ReceiptPayment(
        method=tender.method,
        amount=tender.amount,
        amount_tendered=tender.amount_tendered if tender.method.is_cash else None,
        change=tender.change,
    )

    return ReceiptDocument(
        header=header,
        order_number=order.order_number,
        date=order.created_at,
        customer_name=cart.customer_name,
        lines=tuple(_receipt_line(item, settings.gct_rate) for item in cart.items),
        summary=summary,
        payments=(payment,),
        footer=settings.receipt_footer,
    )


def _receipt_line(item: LineItem, gct_rate: Decimal) -> ReceiptLine:
    multiplier = _ONE if item.is_gct_exempt else _ONE + gct_rate
    return ReceiptLine(
        name=item.name,
        quantity=item.quantity,
        unit_price=item.unit_price,
        line_total=item.unit_price * item.quantity * multiplier,
        is_gct_exempt=item.is_gct_exempt,
        uom_code=item.uom_code,
    )


def _discount_label(cart: Cart) -> str:
    if cart.order_discount_reason:
        return f"Discount ({cart.order_discount_reason})"
    return "Discount"
