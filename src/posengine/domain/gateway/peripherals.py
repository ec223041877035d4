"""Ports for register hardware: cash drawer and receipt printer."""

from __future__ import annotations

from abc import ABC, abstractmethod

from posengine.domain.exceptions import DomainException
from posengine.domain.model.receipt import ReceiptDocument


class PeripheralError(DomainException):
    """A drawer or printer could not be reached."""


class CashDrawer(ABC):

    @abstractmethod
    def pulse(self) -> None:
        """Kick the drawer open."""


class ReceiptPrinter(ABC):

    @abstractmethod
    def print_receipt(self, receipt: ReceiptDocument, copies: int = 1) -> None:
        """Print ``copies`` copies of the receipt."""
