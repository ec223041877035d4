"""Integration tests for opening register sessions and loading the register."""

from decimal import Decimal

import pytest

from posengine.application.load_register import load_register
from posengine.application.open_session import OpenSessionHandler
from posengine.domain.exceptions import EntityNotFoundError, ValidationError
from posengine.domain.model.pos_settings import PosSettings
from posengine.domain.model.session import Session, Terminal
from tests.fakes import FakePosGateway, FakeCashDrawer


def _gateway(**kwargs) -> FakePosGateway:
    terminals = [
        Terminal(id="t1", name="Front Till"),
        Terminal(id="t2", name="Old Till", is_active=False),
    ]
    return FakePosGateway(terminals=terminals, **kwargs)


class TestOpenSession:

    def test_open_session(self):
        gateway = _gateway()
        session = OpenSessionHandler(gateway).handle("t1", "  Maya  ", "5000")

        assert session.terminal_id == "t1"
        assert session.cashier_name == "Maya"
        assert session.opening_cash == Decimal("5000")
        assert session.is_open
        assert gateway.calls == ["list_terminals", "create_session"]

    def test_no_terminals_configured(self):
        gateway = FakePosGateway()
        with pytest.raises(ValidationError, match="No terminals are configured"):
            OpenSessionHandler(gateway).handle("t1", "Maya", "0")

    def test_unknown_terminal(self):
        with pytest.raises(EntityNotFoundError, match="Terminal not found"):
            OpenSessionHandler(_gateway()).handle("t9", "Maya", "0")

    def test_inactive_terminal_not_selectable(self):
        with pytest.raises(EntityNotFoundError):
            OpenSessionHandler(_gateway()).handle("t2", "Maya", "0")

    def test_cashier_required(self):
        with pytest.raises(ValidationError, match="Cashier name is required"):
            OpenSessionHandler(_gateway()).handle("t1", "   ", "0")

    def test_negative_float_rejected(self):
        gateway = _gateway()
        with pytest.raises(ValidationError, match="cannot be negative"):
            OpenSessionHandler(gateway).handle("t1", "Maya", "-100")
        assert "create_session" not in gateway.calls


class TestLoadRegister:

    def test_picks_up_open_session(self):
        session = Session(id="s1", terminal_id="t1", cashier_name="Maya", opening_cash=Decimal("0"))
        gateway = _gateway(sessions=[session], settings=PosSettings(require_open_session=True))

        reg = load_register(gateway)

        assert reg.session is session
        assert not reg.is_blocked

    def test_no_open_session_blocks_when_required(self):
        closed = Session(
            id="s1", terminal_id="t1", cashier_name="Maya", opening_cash=Decimal("0"), status="CLOSED"
        )
        gateway = _gateway(sessions=[closed], settings=PosSettings(require_open_session=True))

        reg = load_register(gateway)

        assert reg.session is None
        assert reg.is_blocked

    def test_settings_come_from_backend(self):
        gateway = _gateway(settings=PosSettings(gct_rate=Decimal("0.165"), business_name="Shop"))
        reg = load_register(gateway, cash_drawer=FakeCashDrawer())
        assert reg.settings.gct_rate == Decimal("0.165")
        assert reg.settings.business_name == "Shop"
