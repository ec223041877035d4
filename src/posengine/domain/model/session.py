"""Register session and terminal records.

Sessions are owned by the backend.  The engine only reads whether one is
open; opening goes through ``OpenSessionHandler``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

SESSION_OPEN = "OPEN"


@dataclass(frozen=True)
class Terminal:
    id: str
    name: str
    is_active: bool = True
    location: str | None = None


@dataclass(frozen=True)
class Session:
    id: str
    terminal_id: str
    cashier_name: str
    opening_cash: Decimal
    status: str = SESSION_OPEN
    terminal_name: str = ""
    opened_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status.upper() == SESSION_OPEN
