"""Catalog and customer records as the register sees them.

These are read-only snapshots fetched through the gateway.  Defaulting of
missing fields (unit of measure, the ``"exempt"`` GCT sentinel) happens once
at the API boundary, never inside the engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from posengine.domain.model.value_objects import ZERO

DEFAULT_UOM = "EA"


@dataclass(frozen=True)
class Product:
    """A sellable catalog entry.

    ``unit_price`` is the price at the moment the product was fetched; a
    cart line copies it, so later catalog price changes do not affect an
    in-progress sale.
    """

    id: str
    name: str
    unit_price: Decimal
    sku: str = ""
    stock_quantity: Decimal = ZERO
    category: str | None = None
    uom_code: str = DEFAULT_UOM
    is_gct_exempt: bool = False


@dataclass(frozen=True)
class Customer:
    id: str
    name: str
    email: str | None = None
    phone: str | None = None
