"""Application service: build a ready-to-use Register from backend state."""

from __future__ import annotations

import logging

from posengine.application.register import Register
from posengine.domain.gateway.peripherals import CashDrawer
from posengine.domain.gateway.pos_gateway import PosGateway

logger = logging.getLogger(__name__)


def load_register(gateway: PosGateway, cash_drawer: CashDrawer | None = None) -> Register:
    settings = gateway.get_pos_settings()
    open_sessions = [s for s in gateway.list_open_sessions() if s.is_open]
    session = open_sessions[0] if open_sessions else None

    if session is None and settings.require_open_session:
        logger.warning("No open session; sales are blocked until one is opened")

    return Register(gateway, settings, session=session, cash_drawer=cash_drawer)
