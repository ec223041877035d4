"""Domain service: GCT per line and across a cart.

A line is either wholly taxable or wholly exempt.  Nothing is rounded here;
summing unrounded line taxes keeps the aggregate equal to
``taxable_amount * rate`` regardless of item order.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from posengine.domain.model.cart import LineItem
from posengine.domain.model.value_objects import ZERO


@dataclass(frozen=True)
class LineTax:
    taxable: Decimal
    exempt: Decimal
    tax: Decimal


@dataclass(frozen=True)
class TaxSummary:
    taxable_amount: Decimal
    exempt_amount: Decimal
    gct_amount: Decimal


def compute_line(item: LineItem, rate: Decimal) -> LineTax:
    subtotal = item.line_subtotal
    if item.is_gct_exempt:
        return LineTax(taxable=ZERO, exempt=subtotal, tax=ZERO)
    return LineTax(taxable=subtotal, exempt=ZERO, tax=subtotal * rate)


def aggregate(items: Iterable[LineItem], rate: Decimal) -> TaxSummary:
    taxable = exempt = tax = ZERO
    for item in items:
        line = compute_line(item, rate)
        taxable += line.taxable
        exempt += line.exempt
        tax += line.tax
    return TaxSummary(taxable_amount=taxable, exempt_amount=exempt, gct_amount=tax)
