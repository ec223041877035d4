"""Tests for fixed-width receipt rendering."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from posengine.domain.model.receipt import (
    ReceiptDocument,
    ReceiptHeader,
    ReceiptLine,
    ReceiptPayment,
    ReceiptSummary,
)
from posengine.domain.model.value_objects import PaymentMethod
from posengine.infrastructure.printing.text_receipt import TextReceiptPrinter, render_receipt


def _receipt(
    payment: ReceiptPayment | None = None,
    customer: str = "Walk-in",
    gct_reg: str | None = None,
    footer: str | None = None,
) -> ReceiptDocument:
    return ReceiptDocument(
        header=ReceiptHeader(
            business_name="Island Grocers",
            phone="876-555-0100",
            trn="123-456-789",
            gct_registration_number=gct_reg,
        ),
        order_number="POS-2026-000001",
        date=datetime(2026, 3, 1, 10, 30, tzinfo=timezone.utc),
        customer_name=customer,
        lines=(
            ReceiptLine("Rice", Decimal("1"), Decimal("2000"), Decimal("2000"), is_gct_exempt=True),
            ReceiptLine("Soap", Decimal("2"), Decimal("500"), Decimal("1150")),
        ),
        summary=ReceiptSummary(
            subtotal=Decimal("3000"),
            discount_amount=Decimal("0"),
            discount_label="Discount",
            taxable_amount=Decimal("1000"),
            exempt_amount=Decimal("2000"),
            gct_rate=Decimal("0.15"),
            gct_amount=Decimal("150"),
            total=Decimal("3150"),
        ),
        payments=(
            payment
            or ReceiptPayment(
                PaymentMethod.CASH, Decimal("3150"), Decimal("4000"), Decimal("850")
            ),
        ),
        footer=footer,
    )


class TestRenderReceipt:

    @pytest.mark.parametrize("width", [32, 42])
    def test_lines_fit_paper(self, width):
        text = render_receipt(_receipt(gct_reg="GCT-0042"), width)
        assert all(len(line) <= width for line in text.splitlines())

    def test_content(self):
        text = render_receipt(_receipt())
        assert "Receipt #: POS-2026-000001" in text
        assert "Date: 01 Mar 2026 10:30" in text
        assert "Rice (E)" in text
        assert "  2 x J$500.00" in text
        assert "GCT (15%)" in text
        assert "Exempt (E)" in text
        assert "J$3,150.00" in text
        assert "Tendered" in text
        assert "CHANGE" in text
        assert "Thank you for your purchase!" in text

    def test_walk_in_customer_not_printed(self):
        assert "Customer:" not in render_receipt(_receipt())
        assert "Customer: Alice" in render_receipt(_receipt(customer="Alice"))

    def test_non_cash_has_no_change(self):
        payment = ReceiptPayment(PaymentMethod.JAM_DEX, Decimal("3150"))
        text = render_receipt(_receipt(payment=payment))
        assert "JAM-DEX" in text
        assert "CHANGE" not in text
        assert "Tendered" not in text

    def test_custom_footer_and_gct_notice(self):
        text = render_receipt(_receipt(gct_reg="GCT-0042", footer="Come again!"))
        assert "Come again!" in text
        assert "GCT Reg: GCT-0042" in text
        assert "GCT included where applicable" in text


class TestTextReceiptPrinter:

    def test_copies_separated_by_form_feed(self):
        printed: list[str] = []
        printer = TextReceiptPrinter(width=32, echo=printed.append)

        printer.print_receipt(_receipt(), copies=2)

        assert len(printed) == 3
        assert printed[1] == "\f"
        assert printed[0] == printed[2]
