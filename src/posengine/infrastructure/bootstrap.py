"""Composition root: picks the backend and peripherals from settings.

Commands get their gateway, printer and register from here and never
construct infrastructure classes themselves.  Gateways are context managers;
commands close them when done.
"""

from __future__ import annotations

from posengine.application.load_register import load_register
from posengine.application.register import Register
from posengine.domain.gateway.peripherals import CashDrawer, ReceiptPrinter
from posengine.domain.gateway.pos_gateway import PosGateway
from posengine.infrastructure.config import get_settings
from posengine.infrastructure.http.api_client import HttpPosGateway
from posengine.infrastructure.persistence.json_pos_gateway import JsonPosGateway
from posengine.infrastructure.printing.cash_drawer import EscPosCashDrawer
from posengine.infrastructure.printing.text_receipt import TextReceiptPrinter


def pos_gateway() -> PosGateway:
    settings = get_settings()
    if settings.backend == "http":
        return HttpPosGateway(
            settings.api_base_url,
            api_token=settings.api_token,
            timeout=settings.timeout_seconds,
        )
    return JsonPosGateway(settings.data_dir)


def cash_drawer() -> CashDrawer | None:
    device = get_settings().cash_drawer_device
    return EscPosCashDrawer(device) if device else None


def receipt_printer() -> ReceiptPrinter:
    return TextReceiptPrinter(width=get_settings().receipt_width)


def register(gateway: PosGateway) -> Register:
    return load_register(gateway, cash_drawer=cash_drawer())
