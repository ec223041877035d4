"""Business configuration that drives tax, gating and receipt headers."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

DEFAULT_GCT_RATE = Decimal("0.15")


@dataclass(frozen=True)
class PosSettings:
    gct_rate: Decimal = DEFAULT_GCT_RATE
    require_open_session: bool = False
    business_name: str = ""
    business_address: str | None = None
    business_phone: str | None = None
    business_trn: str | None = None
    gct_registration_number: str | None = None
    receipt_footer: str | None = None
    show_logo: bool = False
    business_logo: str | None = None
