"""Application service: Open Register Session use case.

Opening a session only needs a configured terminal; it is not subject to
the session gate.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from posengine.domain.exceptions import EntityNotFoundError, ValidationError
from posengine.domain.gateway.pos_gateway import PosGateway
from posengine.domain.model.session import Session
from posengine.domain.model.value_objects import ZERO, format_jmd, to_decimal

logger = logging.getLogger(__name__)


class OpenSessionHandler:

    def __init__(self, gateway: PosGateway) -> None:
        self._gateway = gateway

    def handle(
        self,
        terminal_id: str,
        cashier_name: str,
        opening_cash: str | int | Decimal,
    ) -> Session:
        """Open a session on ``terminal_id`` with an opening float.

        Steps:
        1. Require at least one active terminal and that ``terminal_id`` is one.
        2. Validate cashier name and float.
        3. Create the session on the backend.
        """
        terminals = self._gateway.list_terminals(active_only=True)
        if not terminals:
            raise ValidationError("No terminals are configured; add a terminal first")
        if not any(t.id == terminal_id for t in terminals):
            raise EntityNotFoundError(f"Terminal not found: '{terminal_id}'")

        if not cashier_name or not cashier_name.strip():
            raise ValidationError("Cashier name is required")

        float_amount = to_decimal(opening_cash)
        if float_amount < ZERO:
            raise ValidationError("Opening cash cannot be negative")

        session = self._gateway.create_session(terminal_id, cashier_name.strip(), float_amount)
        logger.info(
            f"Session {session.id} opened on terminal {terminal_id} by {session.cashier_name} "
            f"with float {format_jmd(float_amount)}"
        )
        return session
