"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from posengine.domain.exceptions import ValidationError
from posengine.domain.model.value_objects import (
    DiscountType,
    OrderStatus,
    PaymentMethod,
    format_jmd,
    round_money,
    to_decimal,
)


# ── Decimal coercion ─────────────────────────────────────────────────────────


class TestToDecimal:

    def test_from_string(self):
        assert to_decimal("25.99") == Decimal("25.99")

    def test_from_float_avoids_binary_expansion(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_none_and_blank_use_default(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("", default=Decimal("0.15")) == Decimal("0.15")

    def test_garbage_rejected(self):
        with pytest.raises(ValidationError, match="Invalid decimal"):
            to_decimal("abc")

    def test_bool_rejected(self):
        with pytest.raises(ValidationError):
            to_decimal(True)


class TestMoneyFormatting:

    def test_round_half_up(self):
        assert round_money(Decimal("2.345")) == Decimal("2.35")

    def test_format_jmd(self):
        assert format_jmd(Decimal("3450")) == "J$3,450.00"

    def test_format_negative(self):
        assert format_jmd(Decimal("-12.5")) == "-J$12.50"


# ── Payment methods ──────────────────────────────────────────────────────────


class TestPaymentMethod:

    @pytest.mark.parametrize(
        "ui,api",
        [
            ("cash", "CASH"),
            ("jam_dex", "JAM_DEX"),
            ("lynk_wallet", "LYNK_WALLET"),
            ("wipay", "WIPAY"),
            ("card_visa", "CARD_VISA"),
            ("card_mastercard", "CARD_MASTERCARD"),
            ("bank_transfer", "BANK_TRANSFER"),
        ],
    )
    def test_maps_both_directions(self, ui, api):
        assert PaymentMethod.parse(ui).api_value == api
        assert PaymentMethod.parse(api).value == ui

    def test_parse_is_case_insensitive(self):
        assert PaymentMethod.parse("Card_Visa") is PaymentMethod.CARD_VISA

    def test_unknown_rejected(self):
        with pytest.raises(ValidationError, match="Unknown payment method"):
            PaymentMethod.parse("cheque")

    def test_only_cash_is_cash(self):
        assert PaymentMethod.CASH.is_cash
        assert not PaymentMethod.WIPAY.is_cash

    def test_labels(self):
        assert PaymentMethod.JAM_DEX.label == "JAM-DEX"
        assert PaymentMethod.CARD_MASTERCARD.label == "Mastercard"


# ── Discount type / order status ─────────────────────────────────────────────


class TestDiscountType:

    def test_api_values(self):
        assert DiscountType.PERCENT.api_value == "PERCENTAGE"
        assert DiscountType.AMOUNT.api_value == "FIXED"

    def test_parse_accepts_both_forms(self):
        assert DiscountType.parse("PERCENTAGE") is DiscountType.PERCENT
        assert DiscountType.parse("fixed") is DiscountType.AMOUNT
        assert DiscountType.parse("amount") is DiscountType.AMOUNT
        assert DiscountType.parse(None) is None

    def test_unknown_rejected(self):
        with pytest.raises(ValidationError):
            DiscountType.parse("bogo")


class TestOrderStatus:

    def test_parse_lowercase(self):
        assert OrderStatus.parse("held") is OrderStatus.HELD
