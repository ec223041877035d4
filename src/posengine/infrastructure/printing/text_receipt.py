"""Plain-text receipt rendering for thermal printers and terminals.

Thermal paper fits 32 columns on 58mm rolls and 42 columns on 80mm rolls.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable

import click

from posengine.domain.gateway.peripherals import ReceiptPrinter
from posengine.domain.model.cart import WALK_IN
from posengine.domain.model.receipt import ReceiptDocument
from posengine.domain.model.value_objects import ZERO, format_jmd

NARROW_WIDTH = 32
WIDE_WIDTH = 42
DEFAULT_FOOTER = "Thank you for your purchase!"


def render_receipt(receipt: ReceiptDocument, width: int = WIDE_WIDTH) -> str:
    """Lay out one copy of ``receipt`` as fixed-width text."""
    lines: list[str] = []
    rule = "-" * width
    double_rule = "=" * width

    header = receipt.header
    lines.append(header.business_name.center(width).rstrip())
    if header.address:
        lines.append(header.address.center(width).rstrip())
    if header.phone:
        lines.append(f"Tel: {header.phone}".center(width).rstrip())
    if header.trn:
        lines.append(f"TRN: {header.trn}".center(width).rstrip())
    if header.gct_registration_number:
        lines.append(f"GCT Reg: {header.gct_registration_number}".center(width).rstrip())
    lines.append(rule)

    lines.append(f"Receipt #: {receipt.order_number}")
    lines.append(f"Date: {receipt.date:%d %b %Y %H:%M}")
    if receipt.customer_name and receipt.customer_name != WALK_IN:
        lines.append(f"Customer: {receipt.customer_name}")
    lines.append(rule)

    for item in receipt.lines:
        name = item.name + (" (E)" if item.is_gct_exempt else "")
        lines.append(name[:width])
        detail = f"  {_quantity(item.quantity)} x {format_jmd(item.unit_price)}"
        lines.append(_columns(detail, format_jmd(item.line_total), width))
    lines.append(rule)

    summary = receipt.summary
    lines.append(_columns("Subtotal", format_jmd(summary.subtotal), width))
    if summary.discount_amount > ZERO:
        lines.append(
            _columns(summary.discount_label, f"-{format_jmd(summary.discount_amount)}", width)
        )
    if summary.taxable_amount > ZERO:
        lines.append(_columns("Taxable", format_jmd(summary.taxable_amount), width))
    if summary.exempt_amount > ZERO:
        lines.append(_columns("Exempt (E)", format_jmd(summary.exempt_amount), width))
    gct_label = f"GCT ({_percent(summary.gct_rate)})" if summary.gct_rate else "GCT"
    lines.append(_columns(gct_label, format_jmd(summary.gct_amount), width))
    lines.append(_columns("TOTAL", format_jmd(summary.total), width))

    if receipt.payments:
        lines.append(rule)
        lines.append("Payment")
        for payment in receipt.payments:
            lines.append(_columns(payment.label, format_jmd(payment.amount), width))
            if payment.amount_tendered:
                lines.append(_columns("  Tendered", format_jmd(payment.amount_tendered), width))

    if receipt.change_given > ZERO:
        lines.append(double_rule)
        lines.append(_columns("CHANGE", format_jmd(receipt.change_given), width))

    lines.append(double_rule)
    for footer_line in (receipt.footer or DEFAULT_FOOTER).splitlines():
        lines.append(footer_line.center(width).rstrip())
    if header.gct_registration_number:
        lines.append("GCT included where applicable".center(width).rstrip())

    return "\n".join(lines) + "\n"


class TextReceiptPrinter(ReceiptPrinter):
    """Writes rendered receipts through ``echo`` (stdout by default)."""

    def __init__(
        self,
        width: int = WIDE_WIDTH,
        echo: Callable[[str], None] = click.echo,
    ) -> None:
        self._width = width
        self._echo = echo

    def print_receipt(self, receipt: ReceiptDocument, copies: int = 1) -> None:
        text = render_receipt(receipt, self._width)
        for copy in range(max(1, copies)):
            if copy:
                # Form feed: cut between copies.
                self._echo("\f")
            self._echo(text)


def _columns(left: str, right: str, width: int) -> str:
    space = width - len(right) - 1
    return f"{left[:space]:<{space}} {right}"


def _quantity(quantity: Decimal) -> str:
    if quantity == quantity.to_integral_value():
        return str(int(quantity))
    return str(quantity.normalize())


def _percent(rate: Decimal) -> str:
    return f"{(rate * 100).normalize():f}%"
