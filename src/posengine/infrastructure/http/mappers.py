"""API boundary adapters: raw camelCase JSON <-> domain records.

All defaulting of missing or loosely typed backend fields happens here, once,
so the engine only ever sees fully populated records.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from posengine.domain.model.cart import WALK_IN, LineItem, new_temp_id
from posengine.domain.model.order import Order, OrderRequest, Payment
from posengine.domain.model.pos_settings import DEFAULT_GCT_RATE, PosSettings
from posengine.domain.model.product import DEFAULT_UOM, Customer, Product
from posengine.domain.model.session import SESSION_OPEN, Session, Terminal
from posengine.domain.model.value_objects import (
    DiscountType,
    OrderStatus,
    PaymentMethod,
    to_decimal,
)

GCT_EXEMPT_SENTINEL = "exempt"


# --- Inbound ------------------------------------------------------------------


def unwrap_list(payload: Any) -> list[dict]:
    """Paginated endpoints return ``{"data": [...]}``; others a bare list."""
    if isinstance(payload, dict):
        return list(payload.get("data") or [])
    return list(payload or [])


def _is_exempt(raw: dict) -> bool:
    gct_rate = raw.get("gctRate")
    return bool(raw.get("isGctExempt")) or (
        isinstance(gct_rate, str) and gct_rate.strip().lower() == GCT_EXEMPT_SENTINEL
    )


def product_from_api(raw: dict) -> Product:
    return Product(
        id=str(raw["id"]),
        name=raw.get("name") or "",
        sku=raw.get("sku") or "",
        unit_price=to_decimal(raw.get("unitPrice")),
        stock_quantity=to_decimal(raw.get("quantity")),
        category=raw.get("category") or None,
        uom_code=raw.get("unit") or raw.get("uomCode") or DEFAULT_UOM,
        is_gct_exempt=_is_exempt(raw),
    )


def customer_from_api(raw: dict) -> Customer:
    return Customer(
        id=str(raw["id"]),
        name=raw.get("name") or raw.get("companyName") or "",
        email=raw.get("email") or None,
        phone=raw.get("phone") or None,
    )


def settings_from_api(raw: dict) -> PosSettings:
    return PosSettings(
        gct_rate=to_decimal(raw.get("gctRate"), default=DEFAULT_GCT_RATE),
        require_open_session=bool(raw.get("requireOpenSession", False)),
        business_name=raw.get("businessName") or "",
        business_address=raw.get("businessAddress") or None,
        business_phone=raw.get("businessPhone") or None,
        business_trn=raw.get("businessTRN") or None,
        gct_registration_number=raw.get("gctRegistrationNumber") or None,
        receipt_footer=raw.get("receiptFooter") or None,
        show_logo=bool(raw.get("showLogo", False)),
        business_logo=raw.get("businessLogo") or None,
    )


def terminal_from_api(raw: dict) -> Terminal:
    return Terminal(
        id=str(raw["id"]),
        name=raw.get("name") or "",
        is_active=bool(raw.get("isActive", True)),
        location=raw.get("location") or None,
    )


def session_from_api(raw: dict) -> Session:
    terminal = raw.get("terminal") or {}
    return Session(
        id=str(raw["id"]),
        terminal_id=str(raw.get("terminalId") or terminal.get("id") or ""),
        terminal_name=raw.get("terminalName") or terminal.get("name") or "",
        cashier_name=raw.get("cashierName") or "",
        opening_cash=to_decimal(raw.get("openingCash")),
        status=(raw.get("status") or SESSION_OPEN).upper(),
        opened_at=parse_timestamp(raw.get("openedAt")),
    )


def line_item_from_api(raw: dict) -> LineItem:
    """Order lines come back without register ids; each gets a fresh one."""
    discount_type = raw.get("discountType")
    discount_value = raw.get("discountValue")
    product_id = raw.get("productId")
    return LineItem(
        temp_id=new_temp_id(),
        name=raw.get("name") or raw.get("productName") or "",
        quantity=to_decimal(raw.get("quantity")),
        unit_price=to_decimal(raw.get("unitPrice")),
        product_id=str(product_id) if product_id else None,
        uom_code=raw.get("uomCode") or raw.get("unit") or DEFAULT_UOM,
        is_gct_exempt=_is_exempt(raw),
        discount_type=DiscountType.parse(discount_type) if discount_type else None,
        discount_value=(
            to_decimal(discount_value) if discount_type and discount_value is not None else None
        ),
        notes=raw.get("notes") or None,
    )


def order_from_api(raw: dict) -> Order:
    discount_type = raw.get("orderDiscountType")
    return Order(
        id=str(raw["id"]),
        order_number=raw.get("orderNumber") or str(raw["id"]),
        total=to_decimal(raw.get("total")),
        created_at=parse_timestamp(raw.get("createdAt")) or datetime.now(timezone.utc),
        status=OrderStatus.parse(raw.get("status") or OrderStatus.PENDING_PAYMENT.value),
        held_reason=raw.get("heldReason") or None,
        session_id=raw.get("sessionId") or None,
        customer_id=raw.get("customerId") or None,
        customer_name=raw.get("customerName") or WALK_IN,
        items=tuple(line_item_from_api(item) for item in raw.get("items") or []),
        order_discount_type=DiscountType.parse(discount_type) if discount_type else None,
        order_discount_value=(
            to_decimal(raw.get("orderDiscountValue")) if discount_type else None
        ),
        order_discount_reason=raw.get("orderDiscountReason") or None,
        notes=raw.get("notes") or None,
    )


def payment_from_api(raw: dict) -> Payment:
    tendered = raw.get("amountTendered")
    return Payment(
        id=str(raw["id"]),
        order_id=str(raw.get("orderId") or ""),
        method=PaymentMethod.parse(raw["method"]),
        amount=to_decimal(raw.get("amount")),
        amount_tendered=to_decimal(tendered) if tendered is not None else None,
        status=(raw.get("status") or "COMPLETED").upper(),
    )


def parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    # fromisoformat() only accepts a trailing "Z" from Python 3.11 on.
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


# --- Outbound -----------------------------------------------------------------


def to_number(value: Decimal) -> int | float:
    """JSON has no decimal type; integral amounts stay ints."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def order_request_to_api(request: OrderRequest) -> dict:
    body: dict[str, Any] = {
        "customerId": request.customer_id,
        "customerName": request.customer_name,
        "status": request.status.value,
        "items": [
            {
                "productId": item.product_id,
                "name": item.name,
                "quantity": to_number(item.quantity),
                "uomCode": item.uom_code,
                "unitPrice": to_number(item.unit_price),
                "isGctExempt": item.is_gct_exempt,
                "discountType": item.discount_type.api_value if item.discount_type else None,
                "discountValue": (
                    to_number(item.discount_value) if item.discount_value is not None else None
                ),
                "notes": item.notes,
            }
            for item in request.items
        ],
    }
    if request.order_discount_type is not None:
        body["orderDiscountType"] = request.order_discount_type.api_value
        body["orderDiscountValue"] = to_number(request.order_discount_value or Decimal("0"))
        if request.order_discount_reason:
            body["orderDiscountReason"] = request.order_discount_reason
    if request.notes:
        body["notes"] = request.notes
    if request.session_id:
        body["sessionId"] = request.session_id
    return body
