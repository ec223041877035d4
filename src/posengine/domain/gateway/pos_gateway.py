"""Abstract data-access interface to the POS backend.

The register depends only on this port.  Implementations translate to and
from the wire format and raise ``GatewayError`` for any backend failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from posengine.domain.model.order import Order, OrderRequest, Payment
from posengine.domain.model.pos_settings import PosSettings
from posengine.domain.model.product import Customer, Product
from posengine.domain.model.session import Session, Terminal
from posengine.domain.model.value_objects import PaymentMethod


class PosGateway(ABC):

    def close(self) -> None:
        """Release backend resources; nothing to release by default."""

    def __enter__(self) -> PosGateway:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @abstractmethod
    def list_active_products(
        self, query: str | None = None, category: str | None = None
    ) -> list[Product]:
        """Return active catalog products, optionally filtered."""

    @abstractmethod
    def list_customers(self, query: str | None = None) -> list[Customer]:
        """Return customers, optionally filtered by name/email/phone."""

    @abstractmethod
    def get_pos_settings(self) -> PosSettings:
        """Return the business's POS configuration."""

    @abstractmethod
    def list_open_sessions(self) -> list[Session]:
        """Return currently open register sessions."""

    @abstractmethod
    def list_terminals(self, active_only: bool = True) -> list[Terminal]:
        """Return configured terminals."""

    @abstractmethod
    def create_session(
        self, terminal_id: str, cashier_name: str, opening_cash: Decimal
    ) -> Session:
        """Open a new register session with an opening float."""

    @abstractmethod
    def create_order(self, request: OrderRequest) -> Order:
        """Create an order; the backend computes the authoritative total."""

    @abstractmethod
    def add_payment(
        self,
        order_id: str,
        method: PaymentMethod,
        amount: Decimal,
        amount_tendered: Decimal | None = None,
        status: str = "COMPLETED",
    ) -> Payment:
        """Record a payment against an existing order."""

    @abstractmethod
    def hold_order(self, order_id: str, held_reason: str) -> Order:
        """Park an order for later retrieval."""

    @abstractmethod
    def list_held_orders(self) -> list[Order]:
        """Return parked orders, lines included, oldest first."""
