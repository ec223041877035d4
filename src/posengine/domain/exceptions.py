"""Domain-level exceptions.

All business rule violations are expressed as subclasses of DomainException
so the CLI layer can catch them uniformly and display user-friendly messages.
"""

from __future__ import annotations


class DomainException(Exception):
    """Base class for all domain errors."""


class ValidationError(DomainException):
    """A business rule or invariant was violated."""


class EntityNotFoundError(DomainException):
    """A requested entity does not exist."""


class InvalidTransitionError(DomainException):
    """An operation was attempted in a checkout state that does not allow it."""


class SessionRequiredError(DomainException):
    """The business requires an open register session and none is open."""


class GatewayError(DomainException):
    """A backend call failed (network error, 4xx or 5xx)."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CheckoutStepError(DomainException):
    """A backend failure attached to the checkout step that produced it.

    ``step`` is one of ``create_order``, ``add_payment`` or ``hold_order`` so
    callers can tell "order creation failed" apart from "payment failed".
    """

    def __init__(self, step: str, cause: GatewayError) -> None:
        super().__init__(f"{step.replace('_', ' ')} failed: {cause}")
        self.step = step
        self.cause = cause
