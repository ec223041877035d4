"""Domain service: block sales when an open register session is required."""

from __future__ import annotations

from posengine.domain.exceptions import SessionRequiredError
from posengine.domain.model.session import Session


def is_blocked(require_open_session: bool, current_session: Session | None) -> bool:
    if not require_open_session:
        return False
    return current_session is None or not current_session.is_open


def ensure_not_blocked(require_open_session: bool, current_session: Session | None) -> None:
    if is_blocked(require_open_session, current_session):
        raise SessionRequiredError("Open a register session before taking sales")
