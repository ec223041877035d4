"""JSON-file-backed implementation of PosGateway.

Stands in for the REST backend when the register runs standalone.  Each
collection lives in its own file under the data directory, stored in the
same camelCase shape the API uses, so the HTTP boundary mappers read both.
Like the real backend, it recomputes order totals itself.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Callable

from posengine.domain.exceptions import GatewayError
from posengine.domain.gateway.pos_gateway import PosGateway
from posengine.domain.model.cart import Cart
from posengine.domain.model.order import Order, OrderRequest, Payment
from posengine.domain.model.pos_settings import PosSettings
from posengine.domain.model.product import Customer, Product
from posengine.domain.model.session import SESSION_OPEN, Session, Terminal
from posengine.domain.model.value_objects import (
    OrderStatus,
    PaymentMethod,
    round_money,
)
from posengine.domain.service.totals import calculate_totals
from posengine.infrastructure.http import mappers

logger = logging.getLogger(__name__)

ORDER_PREFIX = "POS-"

_OPEN_STATUSES = (OrderStatus.PENDING_PAYMENT.value, OrderStatus.HELD.value)

_COLLECTIONS = ("products", "customers", "terminals", "sessions", "orders", "payments")


class JsonPosGateway(PosGateway):

    def __init__(
        self,
        data_dir: Path,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._data_dir = data_dir
        self._clock = clock
        self._ensure_files()

    # --- Catalog --------------------------------------------------------------

    def list_active_products(
        self, query: str | None = None, category: str | None = None
    ) -> list[Product]:
        needle = (query or "").strip().lower()
        products = []
        for raw in self._load("products"):
            if (raw.get("status") or "ACTIVE").upper() != "ACTIVE":
                continue
            if category and raw.get("category") != category:
                continue
            if needle and needle not in raw.get("name", "").lower() and needle not in (
                raw.get("sku") or ""
            ).lower():
                continue
            products.append(mappers.product_from_api(raw))
        return products

    def list_customers(self, query: str | None = None) -> list[Customer]:
        needle = (query or "").strip().lower()
        customers = [mappers.customer_from_api(raw) for raw in self._load("customers")]
        if not needle:
            return customers
        return [
            c
            for c in customers
            if needle in c.name.lower()
            or needle in (c.email or "").lower()
            or needle in (c.phone or "")
        ]

    # --- Settings and sessions ------------------------------------------------

    def get_pos_settings(self) -> PosSettings:
        return mappers.settings_from_api(self._load_settings())

    def list_open_sessions(self) -> list[Session]:
        return [
            mappers.session_from_api(raw)
            for raw in self._load("sessions")
            if (raw.get("status") or "").upper() == SESSION_OPEN
        ]

    def list_terminals(self, active_only: bool = True) -> list[Terminal]:
        terminals = [mappers.terminal_from_api(raw) for raw in self._load("terminals")]
        if active_only:
            terminals = [t for t in terminals if t.is_active]
        return terminals

    def create_session(
        self, terminal_id: str, cashier_name: str, opening_cash: Decimal
    ) -> Session:
        terminal = next((t for t in self.list_terminals(False) if t.id == terminal_id), None)
        if terminal is None:
            raise GatewayError(f"Terminal {terminal_id} not found", status_code=404)

        sessions = self._load("sessions")
        for raw in sessions:
            if raw.get("terminalId") == terminal_id and raw.get("status") == SESSION_OPEN:
                raise GatewayError(
                    f"Terminal {terminal.name} already has an open session", status_code=409
                )

        raw = {
            "id": uuid.uuid4().hex,
            "terminalId": terminal_id,
            "terminalName": terminal.name,
            "cashierName": cashier_name,
            "openingCash": str(opening_cash),
            "status": SESSION_OPEN,
            "openedAt": self._clock().isoformat(),
        }
        sessions.append(raw)
        self._persist("sessions", sessions)
        return mappers.session_from_api(raw)

    # --- Orders ---------------------------------------------------------------

    def create_order(self, request: OrderRequest) -> Order:
        if not request.items:
            raise GatewayError("Order must contain at least one item", status_code=400)

        settings = self.get_pos_settings()
        cart = Cart(
            items=request.items,
            customer_id=request.customer_id,
            customer_name=request.customer_name,
            order_discount_type=request.order_discount_type,
            order_discount_value=request.order_discount_value,
            order_discount_reason=request.order_discount_reason,
            notes=request.notes,
        )
        totals = calculate_totals(cart, settings.gct_rate)

        orders = self._load("orders")
        now = self._clock()
        raw = {
            "id": uuid.uuid4().hex,
            "orderNumber": self._next_order_number(orders, now.year),
            "sessionId": request.session_id,
            "customerId": request.customer_id,
            "customerName": request.customer_name,
            "status": request.status.value,
            "heldReason": None,
            "items": mappers.order_request_to_api(request)["items"],
            "subtotal": str(round_money(totals.subtotal)),
            "orderDiscountType": (
                request.order_discount_type.api_value if request.order_discount_type else None
            ),
            "orderDiscountValue": (
                str(request.order_discount_value)
                if request.order_discount_value is not None
                else None
            ),
            "orderDiscountReason": request.order_discount_reason,
            "orderDiscountAmount": str(round_money(totals.discount_amount)),
            "taxableAmount": str(round_money(totals.taxable_amount)),
            "exemptAmount": str(round_money(totals.exempt_amount)),
            "gctRate": str(settings.gct_rate),
            "gctAmount": str(round_money(totals.gct_amount)),
            "total": str(round_money(totals.total)),
            "notes": request.notes,
            "createdAt": now.isoformat(),
        }
        orders.append(raw)
        self._persist("orders", orders)
        return mappers.order_from_api(raw)

    def add_payment(
        self,
        order_id: str,
        method: PaymentMethod,
        amount: Decimal,
        amount_tendered: Decimal | None = None,
        status: str = "COMPLETED",
    ) -> Payment:
        orders = self._load("orders")
        raw_order = self._find_order(orders, order_id)
        if raw_order["status"] not in _OPEN_STATUSES:
            raise GatewayError(
                f"Order {raw_order['orderNumber']} is {raw_order['status']}, not payable",
                status_code=409,
            )

        total = Decimal(raw_order["total"])
        if amount < total:
            raise GatewayError(
                f"Payment {amount} does not cover order total {total}", status_code=400
            )

        payments = self._load("payments")
        raw_payment = {
            "id": uuid.uuid4().hex,
            "orderId": order_id,
            "method": method.api_value,
            "amount": str(amount),
            "amountTendered": str(amount_tendered) if amount_tendered is not None else None,
            "status": status,
            "createdAt": self._clock().isoformat(),
        }
        payments.append(raw_payment)

        raw_order["status"] = OrderStatus.COMPLETED.value
        raw_order["heldReason"] = None
        raw_order["amountPaid"] = str(amount)
        if amount_tendered is not None:
            raw_order["changeGiven"] = str(max(Decimal("0"), amount_tendered - total))

        self._persist("payments", payments)
        self._persist("orders", orders)
        return mappers.payment_from_api(raw_payment)

    def hold_order(self, order_id: str, held_reason: str) -> Order:
        orders = self._load("orders")
        raw_order = self._find_order(orders, order_id)
        if raw_order["status"] not in _OPEN_STATUSES:
            raise GatewayError(
                f"Order {raw_order['orderNumber']} is {raw_order['status']}, cannot hold",
                status_code=409,
            )
        raw_order["status"] = OrderStatus.HELD.value
        raw_order["heldReason"] = held_reason
        self._persist("orders", orders)
        return mappers.order_from_api(raw_order)

    def list_held_orders(self) -> list[Order]:
        return [
            mappers.order_from_api(raw)
            for raw in self._load("orders")
            if raw.get("status") == OrderStatus.HELD.value
        ]

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _find_order(orders: list[dict], order_id: str) -> dict:
        for raw in orders:
            if raw["id"] == order_id:
                return raw
        raise GatewayError(f"Order {order_id} not found", status_code=404)

    @staticmethod
    def _next_order_number(orders: list[dict], year: int) -> str:
        prefix = f"{ORDER_PREFIX}{year}-"
        sequence = max(
            (int(o["orderNumber"][len(prefix):]) for o in orders if o["orderNumber"].startswith(prefix)),
            default=0,
        )
        return f"{prefix}{sequence + 1:06d}"

    # --- File helpers ---------------------------------------------------------

    def _path(self, name: str) -> Path:
        return self._data_dir / f"{name}.json"

    def _load(self, name: str) -> list[dict]:
        return json.loads(self._path(name).read_text(encoding="utf-8"))

    def _load_settings(self) -> dict:
        return json.loads(self._path("settings").read_text(encoding="utf-8"))

    def _persist(self, name: str, rows: list[dict]) -> None:
        self._path(name).write_text(json.dumps(rows, indent=2) + "\n", encoding="utf-8")

    def _ensure_files(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        for name in _COLLECTIONS:
            if not self._path(name).exists():
                self._path(name).write_text("[]", encoding="utf-8")
        if not self._path("settings").exists():
            logger.info(f"Initialising POS settings in {self._data_dir}")
            self._path("settings").write_text("{}", encoding="utf-8")
