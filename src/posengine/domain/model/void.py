"""Voiding an un-submitted cart.

No order exists yet, so a void is a local clear plus an audit note.  The
operator must pick a reason from a closed list; "Other" requires free text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal

from posengine.domain.exceptions import ValidationError

OTHER_REASON = "Other"
VOID_REASONS = (
    "Customer cancelled",
    "Wrong items",
    "Duplicate order",
    OTHER_REASON,
)


def resolve_void_reason(reason: str | None, detail: str | None = None) -> str:
    """Return the reason to record, or raise if the selection is invalid."""
    if not reason:
        raise ValidationError("A void reason is required")

    selected = next((r for r in VOID_REASONS if r.lower() == reason.strip().lower()), None)
    if selected is None:
        raise ValidationError(
            f"Unknown void reason {reason!r}; choose one of: {', '.join(VOID_REASONS)}"
        )

    if selected == OTHER_REASON:
        if not detail or not detail.strip():
            raise ValidationError("Please specify the reason when selecting 'Other'")
        return detail.strip()
    return selected


@dataclass(frozen=True)
class VoidRecord:
    reason: str
    line_count: int
    item_count: Decimal
    total: Decimal
    customer_name: str
    session_id: str | None = None
    voided_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
