"""Tests for the HTTP gateway, driven through httpx.MockTransport."""

import json
from decimal import Decimal

import httpx
import pytest

from posengine.application.register import CheckoutState, Register
from posengine.domain.exceptions import CheckoutStepError, GatewayError
from posengine.domain.model.cart import Cart
from posengine.domain.model.order import OrderRequest
from posengine.domain.model.pos_settings import PosSettings
from posengine.domain.model.product import Product
from posengine.domain.model.value_objects import OrderStatus, PaymentMethod
from posengine.infrastructure.http.api_client import HttpPosGateway


def _gateway(handler) -> tuple[HttpPosGateway, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    gateway = HttpPosGateway(
        "https://pos.example.test/",
        api_token="secret",
        transport=httpx.MockTransport(record),
    )
    return gateway, seen


class TestReads:

    def test_products_query(self):
        gateway, seen = _gateway(
            lambda r: httpx.Response(
                200, json={"data": [{"id": "p1", "name": "Soap", "unitPrice": 250}]}
            )
        )

        products = gateway.list_active_products(query="soap")

        assert [p.name for p in products] == ["Soap"]
        request = seen[0]
        assert request.url.path == "/api/v1/products"
        assert request.url.params["status"] == "ACTIVE"
        assert request.url.params["search"] == "soap"
        assert "category" not in request.url.params
        assert request.headers["Authorization"] == "Bearer secret"

    def test_settings(self):
        gateway, _ = _gateway(
            lambda r: httpx.Response(200, json={"gctRate": 0.15, "requireOpenSession": True})
        )
        settings = gateway.get_pos_settings()
        assert settings.require_open_session is True
        assert settings.gct_rate == Decimal("0.15")

    def test_open_sessions(self):
        gateway, seen = _gateway(
            lambda r: httpx.Response(
                200,
                json=[{"id": "s1", "terminalId": "t1", "cashierName": "Maya", "openingCash": 0}],
            )
        )
        sessions = gateway.list_open_sessions()
        assert sessions[0].id == "s1"
        assert seen[0].url.params["status"] == "OPEN"

    def test_inactive_terminals_filtered(self):
        gateway, _ = _gateway(
            lambda r: httpx.Response(
                200,
                json={"data": [{"id": "t1", "isActive": True}, {"id": "t2", "isActive": False}]},
            )
        )
        assert [t.id for t in gateway.list_terminals()] == ["t1"]


class TestWrites:

    def test_create_order(self):
        gateway, seen = _gateway(
            lambda r: httpx.Response(
                201,
                json={
                    "id": "o1",
                    "orderNumber": "POS-2026-000001",
                    "total": 3450,
                    "status": "PENDING_PAYMENT",
                    "createdAt": "2026-03-01T10:30:00Z",
                },
            )
        )
        cart = Cart().add_item(Product(id="p1", name="Widget", unit_price=Decimal("1000")), 3)

        order = gateway.create_order(OrderRequest.from_cart(cart))

        assert order.total == Decimal("3450")
        assert order.status is OrderStatus.PENDING_PAYMENT
        body = json.loads(seen[0].content)
        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/v1/pos/orders"
        assert body["items"][0]["quantity"] == 3

    def test_add_cash_payment(self):
        gateway, seen = _gateway(
            lambda r: httpx.Response(
                201,
                json={
                    "payment": {"id": "p1", "method": "CASH", "amount": 3450, "amountTendered": 4000},
                    "order": {"id": "o1"},
                },
            )
        )

        payment = gateway.add_payment("o1", PaymentMethod.CASH, Decimal("3450"), Decimal("4000"))

        assert payment.order_id == "o1"
        assert payment.amount_tendered == Decimal("4000")
        assert seen[0].url.path == "/api/v1/pos/orders/o1/payments"
        assert json.loads(seen[0].content) == {
            "method": "CASH",
            "amount": 3450,
            "status": "COMPLETED",
            "amountTendered": 4000,
        }

    def test_add_card_payment_omits_tendered(self):
        gateway, seen = _gateway(
            lambda r: httpx.Response(201, json={"id": "p1", "method": "CARD_VISA", "amount": 10.5})
        )
        gateway.add_payment("o1", PaymentMethod.CARD_VISA, Decimal("10.50"))
        assert "amountTendered" not in json.loads(seen[0].content)

    def test_hold_order(self):
        gateway, seen = _gateway(
            lambda r: httpx.Response(
                200,
                json={"id": "o1", "total": 100, "status": "HELD", "heldReason": "Lunch"},
            )
        )
        order = gateway.hold_order("o1", "Lunch")
        assert order.status is OrderStatus.HELD
        assert seen[0].url.path == "/api/v1/pos/orders/o1/hold"
        assert json.loads(seen[0].content) == {"heldReason": "Lunch"}

    def test_list_held_orders(self):
        gateway, seen = _gateway(
            lambda r: httpx.Response(
                200,
                json={
                    "data": [
                        {
                            "id": "o7",
                            "orderNumber": "POS-2026-000007",
                            "total": 2300,
                            "status": "HELD",
                            "customerName": "Alice",
                            "items": [
                                {"productId": "p1", "name": "Widget", "quantity": 2, "unitPrice": 1000}
                            ],
                        }
                    ]
                },
            )
        )

        (order,) = gateway.list_held_orders()

        assert order.order_number == "POS-2026-000007"
        assert order.customer_name == "Alice"
        assert order.items[0].quantity == 2
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/api/v1/pos/orders"
        assert seen[0].url.params["status"] == "HELD"

    def test_create_session(self):
        gateway, seen = _gateway(
            lambda r: httpx.Response(
                201,
                json={"id": "s1", "terminalId": "t1", "cashierName": "Maya", "openingCash": 5000},
            )
        )
        session = gateway.create_session("t1", "Maya", Decimal("5000"))
        assert session.opening_cash == Decimal("5000")
        assert json.loads(seen[0].content) == {
            "terminalId": "t1",
            "cashierName": "Maya",
            "openingCash": 5000,
        }


class TestErrors:

    def test_http_error_message(self):
        gateway, _ = _gateway(lambda r: httpx.Response(422, json={"error": "Order is empty"}))
        with pytest.raises(GatewayError, match=r"Order is empty \(HTTP 422\)") as exc_info:
            gateway.hold_order("o1", "x")
        assert exc_info.value.status_code == 422

    def test_http_error_without_body(self):
        gateway, _ = _gateway(lambda r: httpx.Response(503, text="upstream down"))
        with pytest.raises(GatewayError, match="returned HTTP 503"):
            gateway.get_pos_settings()

    def test_transport_error(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        gateway, _ = _gateway(refuse)
        with pytest.raises(GatewayError, match="Could not reach") as exc_info:
            gateway.list_customers()
        assert exc_info.value.status_code is None

    def test_invalid_json(self):
        gateway, _ = _gateway(lambda r: httpx.Response(200, text="<html>"))
        with pytest.raises(GatewayError, match="Invalid JSON"):
            gateway.get_pos_settings()

    def test_unknown_order_status(self):
        gateway, _ = _gateway(
            lambda r: httpx.Response(201, json={"id": "o1", "total": 1150, "status": "DRAFT"})
        )
        cart = Cart().add_item(Product(id="p1", name="Widget", unit_price=Decimal("1000")))
        with pytest.raises(GatewayError, match="Unexpected response from /api/v1/pos/orders"):
            gateway.create_order(OrderRequest.from_cart(cart))

    def test_payment_body_missing_id(self):
        gateway, _ = _gateway(lambda r: httpx.Response(201, json={"payment": {"method": "CASH"}}))
        with pytest.raises(GatewayError, match="Unexpected response"):
            gateway.add_payment("o1", PaymentMethod.CASH, Decimal("100"))

    def test_hold_body_not_an_object(self):
        gateway, _ = _gateway(lambda r: httpx.Response(200, json=["HELD"]))
        with pytest.raises(GatewayError, match="Unexpected response"):
            gateway.hold_order("o1", "Lunch")


class TestLifecycle:

    def test_context_manager_closes_client(self):
        gateway, _ = _gateway(lambda r: httpx.Response(200, json=[]))
        with gateway as entered:
            assert entered is gateway
            entered.list_customers()
        assert gateway._http_client.is_closed


class TestRegisterOverHttp:

    def test_malformed_order_keeps_checkout_recoverable(self):
        def backend(request):
            if request.url.path == "/api/v1/pos/orders":
                return httpx.Response(201, json={"id": "o1", "total": 1150, "status": "DRAFT"})
            return httpx.Response(500)

        gateway, seen = _gateway(backend)
        reg = Register(gateway, PosSettings())
        reg.add_item(Product(id="p1", name="Widget", unit_price=Decimal("1000")))
        reg.begin_checkout()
        reg.set_cash_tendered("2000")

        with pytest.raises(CheckoutStepError) as exc_info:
            reg.confirm()

        assert exc_info.value.step == "create_order"
        assert reg.state is CheckoutState.METHOD_SELECTION
        assert not reg.in_flight
        assert len(reg.cart.items) == 1
        assert [r.url.path for r in seen] == ["/api/v1/pos/orders"]
