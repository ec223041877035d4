"""
POS API Client

HTTP implementation of PosGateway for the REST backend.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Callable, Optional, TypeVar

import httpx

from posengine.domain.exceptions import GatewayError, ValidationError
from posengine.domain.gateway.pos_gateway import PosGateway
from posengine.domain.model.order import Order, OrderRequest, Payment
from posengine.domain.model.pos_settings import PosSettings
from posengine.domain.model.product import Customer, Product
from posengine.domain.model.session import Session, Terminal
from posengine.domain.model.value_objects import PaymentMethod
from posengine.infrastructure.http import mappers

logger = logging.getLogger(__name__)

T = TypeVar("T")


class HttpPosGateway(PosGateway):
    """
    Client for the POS backend API.

    All failures (transport errors, 4xx/5xx, unparseable or malformed bodies)
    are raised as GatewayError so the register never sees httpx types.
    """

    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: Base URL of the backend, e.g. https://books.example.com
            api_token: Bearer token sent with every request
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"

        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.Client(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        """Close HTTP client"""
        self._http_client.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        body: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request and return the decoded JSON body"""
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = self._http_client.request(method, path, params=params, json=body)
        except httpx.HTTPError as exc:
            logger.error(f"Request failed: {method} {path} - {exc}")
            raise GatewayError(f"Could not reach the POS backend: {exc}") from exc

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise GatewayError(_error_message(response), status_code=response.status_code)

        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"Invalid JSON from {method} {path}") from exc

    def _parse(self, path: str, mapper: Callable[[Any], T], raw: Any) -> T:
        """Map a decoded body, reporting a malformed one as a backend failure"""
        try:
            return mapper(raw)
        except (KeyError, TypeError, ValueError, AttributeError, ValidationError) as exc:
            logger.error(f"Unexpected response from {path}: {exc!r}")
            raise GatewayError(f"Unexpected response from {path}: {exc}") from exc

    def _parse_list(self, path: str, mapper: Callable[[Any], T], payload: Any) -> list[T]:
        return self._parse(
            path, lambda body: [mapper(raw) for raw in mappers.unwrap_list(body)], payload
        )

    # ==================== Catalog APIs ====================

    def list_active_products(
        self, query: str | None = None, category: str | None = None
    ) -> list[Product]:
        path = "/api/v1/products"
        payload = self._request(
            "GET", path, params={"status": "ACTIVE", "search": query, "category": category}
        )
        return self._parse_list(path, mappers.product_from_api, payload)

    def list_customers(self, query: str | None = None) -> list[Customer]:
        path = "/api/v1/customers"
        payload = self._request("GET", path, params={"search": query})
        return self._parse_list(path, mappers.customer_from_api, payload)

    # ==================== Settings / Session APIs ====================

    def get_pos_settings(self) -> PosSettings:
        path = "/api/v1/pos/settings"
        return self._parse(path, mappers.settings_from_api, self._request("GET", path))

    def list_open_sessions(self) -> list[Session]:
        path = "/api/v1/pos/sessions"
        payload = self._request("GET", path, params={"status": "OPEN"})
        return self._parse_list(path, mappers.session_from_api, payload)

    def list_terminals(self, active_only: bool = True) -> list[Terminal]:
        path = "/api/v1/pos/terminals"
        params = {"isActive": "true"} if active_only else None
        payload = self._request("GET", path, params=params)
        terminals = self._parse_list(path, mappers.terminal_from_api, payload)
        if active_only:
            terminals = [t for t in terminals if t.is_active]
        return terminals

    def create_session(
        self, terminal_id: str, cashier_name: str, opening_cash: Decimal
    ) -> Session:
        path = "/api/v1/pos/sessions"
        payload = self._request(
            "POST",
            path,
            body={
                "terminalId": terminal_id,
                "cashierName": cashier_name,
                "openingCash": mappers.to_number(opening_cash),
            },
        )
        return self._parse(path, mappers.session_from_api, payload)

    # ==================== Order APIs ====================

    def create_order(self, request: OrderRequest) -> Order:
        path = "/api/v1/pos/orders"
        payload = self._request("POST", path, body=mappers.order_request_to_api(request))
        return self._parse(path, mappers.order_from_api, payload)

    def add_payment(
        self,
        order_id: str,
        method: PaymentMethod,
        amount: Decimal,
        amount_tendered: Decimal | None = None,
        status: str = "COMPLETED",
    ) -> Payment:
        path = f"/api/v1/pos/orders/{order_id}/payments"
        body: dict[str, Any] = {
            "method": method.api_value,
            "amount": mappers.to_number(amount),
            "status": status,
        }
        if amount_tendered is not None:
            body["amountTendered"] = mappers.to_number(amount_tendered)

        payload = self._request("POST", path, body=body)
        return self._parse(path, lambda raw: _payment_from_response(order_id, raw), payload)

    def hold_order(self, order_id: str, held_reason: str) -> Order:
        path = f"/api/v1/pos/orders/{order_id}/hold"
        payload = self._request("POST", path, body={"heldReason": held_reason})
        return self._parse(path, mappers.order_from_api, payload)

    def list_held_orders(self) -> list[Order]:
        path = "/api/v1/pos/orders"
        payload = self._request("GET", path, params={"status": "HELD"})
        return self._parse_list(path, mappers.order_from_api, payload)


def _payment_from_response(order_id: str, payload: Any) -> Payment:
    # The endpoint answers {payment, order}; older deployments return the bare payment.
    raw_payment = payload.get("payment", payload)
    return mappers.payment_from_api({"orderId": order_id, **raw_payment})


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        detail = data.get("error") or data.get("message") or data.get("detail")
        if isinstance(detail, dict):
            detail = detail.get("message")
        if detail:
            return f"{detail} (HTTP {response.status_code})"
    return f"POS backend returned HTTP {response.status_code}"
