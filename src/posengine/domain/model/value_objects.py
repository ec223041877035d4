"""Value Objects shared across the domain.

Value Objects are immutable and compared by value, not identity.
Monetary amounts are plain ``Decimal`` values; nothing is rounded until it
is displayed, so per-line rounding error never compounds across a cart.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from posengine.domain.exceptions import ValidationError

ZERO = Decimal("0")
CENTS = Decimal("0.01")


def to_decimal(value: str | float | int | Decimal | None, default: Decimal = ZERO) -> Decimal:
    """Coerce a wire or user value to Decimal safely.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its binary expansion.
    """
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValidationError(f"Invalid decimal value: {value!r}")
    try:
        return Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"Invalid decimal value: {value!r}") from exc


def round_money(amount: Decimal) -> Decimal:
    """Round to cents, half-up. Presentation only."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_jmd(amount: Decimal) -> str:
    """Format an amount as Jamaican dollars, e.g. ``J$3,450.00``."""
    rounded = round_money(amount)
    sign = "-" if rounded < ZERO else ""
    return f"{sign}J${abs(rounded):,.2f}"


class PaymentMethod(Enum):
    """Tender types accepted at the register.

    The value is the lowercase UI form; ``api_value`` is the upper-snake form
    the backend speaks.
    """

    CASH = "cash"
    JAM_DEX = "jam_dex"
    LYNK_WALLET = "lynk_wallet"
    WIPAY = "wipay"
    CARD_VISA = "card_visa"
    CARD_MASTERCARD = "card_mastercard"
    BANK_TRANSFER = "bank_transfer"

    @property
    def api_value(self) -> str:
        return self.value.upper()

    @property
    def is_cash(self) -> bool:
        return self is PaymentMethod.CASH

    @property
    def label(self) -> str:
        return _PAYMENT_LABELS[self]

    @staticmethod
    def parse(raw: str | PaymentMethod) -> PaymentMethod:
        """Accept either wire form, case-insensitively."""
        if isinstance(raw, PaymentMethod):
            return raw
        try:
            return PaymentMethod(str(raw).strip().lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown payment method: {raw!r}") from exc


_PAYMENT_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.JAM_DEX: "JAM-DEX",
    PaymentMethod.LYNK_WALLET: "Lynk Wallet",
    PaymentMethod.WIPAY: "WiPay",
    PaymentMethod.CARD_VISA: "Visa",
    PaymentMethod.CARD_MASTERCARD: "Mastercard",
    PaymentMethod.BANK_TRANSFER: "Bank Transfer",
}


class DiscountType(Enum):
    PERCENT = "percent"
    AMOUNT = "amount"

    @property
    def api_value(self) -> str:
        return "PERCENTAGE" if self is DiscountType.PERCENT else "FIXED"

    @staticmethod
    def parse(raw: str | DiscountType | None) -> DiscountType | None:
        if raw is None or isinstance(raw, DiscountType):
            return raw
        key = str(raw).strip().lower()
        if key in ("percent", "percentage"):
            return DiscountType.PERCENT
        if key in ("amount", "fixed"):
            return DiscountType.AMOUNT
        raise ValidationError(f"Unknown discount type: {raw!r}")


class OrderStatus(Enum):
    PENDING_PAYMENT = "PENDING_PAYMENT"
    HELD = "HELD"
    COMPLETED = "COMPLETED"
    VOIDED = "VOIDED"

    @staticmethod
    def parse(raw: str) -> OrderStatus:
        try:
            return OrderStatus(str(raw).strip().upper())
        except ValueError as exc:
            raise ValidationError(f"Unknown order status: {raw!r}") from exc
