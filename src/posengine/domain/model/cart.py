"""Cart aggregate: the in-progress order at the register.

The Cart is an immutable value.  Every operation returns a new Cart, so a
caller can tell whether anything changed with an identity check
(``new_cart is old_cart``) and derived totals can be cached against it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from decimal import Decimal

from posengine.domain.exceptions import ValidationError
from posengine.domain.model.product import DEFAULT_UOM, Product
from posengine.domain.model.value_objects import ZERO, DiscountType, to_decimal

WALK_IN = "Walk-in"
MIN_QUANTITY = Decimal("1")

_PATCHABLE_FIELDS = frozenset(
    {
        "name",
        "quantity",
        "unit_price",
        "uom_code",
        "is_gct_exempt",
        "discount_type",
        "discount_value",
        "notes",
    }
)


def new_temp_id() -> str:
    return uuid.uuid4().hex


def _floor_quantity(quantity: Decimal) -> Decimal:
    # Removal is explicit; a line never reaches zero through an update.
    return max(MIN_QUANTITY, quantity)


@dataclass(frozen=True)
class LineItem:
    """One product or service line.

    ``discount_type``/``discount_value`` are carried to the backend with the
    order but do not enter the local totals.
    """

    temp_id: str
    name: str
    quantity: Decimal
    unit_price: Decimal
    product_id: str | None = None
    uom_code: str = DEFAULT_UOM
    is_gct_exempt: bool = False
    discount_type: DiscountType | None = None
    discount_value: Decimal | None = None
    notes: str | None = None

    @property
    def line_subtotal(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class Cart:
    items: tuple[LineItem, ...] = ()
    customer_id: str | None = None
    customer_name: str = WALK_IN
    order_discount_type: DiscountType | None = None
    order_discount_value: Decimal | None = None
    order_discount_reason: str | None = None
    notes: str | None = None

    # --- Queries --------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return not self.items

    def find(self, temp_id: str) -> LineItem | None:
        for item in self.items:
            if item.temp_id == temp_id:
                return item
        return None

    # --- Line operations ------------------------------------------------------

    def add_item(self, product: Product, quantity_delta: int | Decimal = 1) -> Cart:
        """Add a catalog product, merging into an existing line for it."""
        delta = to_decimal(quantity_delta)
        for item in self.items:
            if item.product_id is not None and item.product_id == product.id:
                merged = replace(item, quantity=_floor_quantity(item.quantity + delta))
                return self._with_line(merged)

        line = LineItem(
            temp_id=new_temp_id(),
            product_id=product.id,
            name=product.name,
            quantity=_floor_quantity(delta),
            unit_price=product.unit_price,
            uom_code=product.uom_code or DEFAULT_UOM,
            is_gct_exempt=product.is_gct_exempt,
        )
        return replace(self, items=self.items + (line,))

    def add_custom_item(
        self,
        name: str,
        unit_price: str | int | Decimal,
        quantity: str | int | Decimal = 1,
        is_gct_exempt: bool = False,
        uom_code: str = DEFAULT_UOM,
    ) -> Cart:
        """Add an ad-hoc line with no catalog reference (never merged)."""
        if not name or not name.strip():
            raise ValidationError("Item name is required")
        price = to_decimal(unit_price)
        if price < ZERO:
            raise ValidationError("Unit price cannot be negative")
        line = LineItem(
            temp_id=new_temp_id(),
            name=name.strip(),
            quantity=_floor_quantity(to_decimal(quantity)),
            unit_price=price,
            uom_code=uom_code or DEFAULT_UOM,
            is_gct_exempt=is_gct_exempt,
        )
        return replace(self, items=self.items + (line,))

    def update_item(self, temp_id: str, /, **patch: object) -> Cart:
        """Merge ``patch`` into the matching line.

        Quantities below 1 are clamped to 1.  Unknown temp ids are a no-op.
        """
        unknown = set(patch) - _PATCHABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update line field(s): {', '.join(sorted(unknown))}")

        item = self.find(temp_id)
        if item is None:
            return self

        changes = dict(patch)
        if "name" in changes:
            if not isinstance(changes["name"], str) or not changes["name"].strip():
                raise ValidationError("Item name is required")
            changes["name"] = changes["name"].strip()
        if "is_gct_exempt" in changes and not isinstance(changes["is_gct_exempt"], bool):
            raise ValidationError("is_gct_exempt must be true or false")
        if "uom_code" in changes:
            changes["uom_code"] = changes["uom_code"] or DEFAULT_UOM
        if "quantity" in changes:
            changes["quantity"] = _floor_quantity(to_decimal(changes["quantity"]))
        if "unit_price" in changes:
            changes["unit_price"] = to_decimal(changes["unit_price"])
            if changes["unit_price"] < ZERO:
                raise ValidationError("Unit price cannot be negative")
        if "discount_type" in changes:
            changes["discount_type"] = DiscountType.parse(changes["discount_type"])
        if changes.get("discount_value") is not None:
            changes["discount_value"] = to_decimal(changes["discount_value"])
            if changes["discount_value"] < ZERO:
                raise ValidationError("Discount value cannot be negative")

        return self._with_line(replace(item, **changes))

    def increment(self, temp_id: str) -> Cart:
        item = self.find(temp_id)
        if item is None:
            return self
        return self.update_item(temp_id, quantity=item.quantity + 1)

    def decrement(self, temp_id: str) -> Cart:
        item = self.find(temp_id)
        if item is None:
            return self
        return self.update_item(temp_id, quantity=item.quantity - 1)

    def remove_item(self, temp_id: str) -> Cart:
        if self.find(temp_id) is None:
            return self
        return replace(self, items=tuple(i for i in self.items if i.temp_id != temp_id))

    def clear(self) -> Cart:
        return Cart()

    # --- Order-level fields ---------------------------------------------------

    def set_customer(self, customer_id: str | None, customer_name: str | None = None) -> Cart:
        if not customer_id:
            return replace(self, customer_id=None, customer_name=WALK_IN)
        return replace(self, customer_id=customer_id, customer_name=customer_name or WALK_IN)

    def set_order_discount(
        self,
        discount_type: str | DiscountType | None,
        value: str | int | Decimal | None,
        reason: str | None = None,
    ) -> Cart:
        kind = DiscountType.parse(discount_type)
        if kind is None:
            return self.clear_order_discount()

        amount = to_decimal(value)
        if amount < ZERO:
            raise ValidationError("Discount value cannot be negative")
        if kind is DiscountType.PERCENT and amount > Decimal("100"):
            raise ValidationError("Percentage discount cannot exceed 100%")

        return replace(
            self,
            order_discount_type=kind,
            order_discount_value=amount,
            order_discount_reason=reason,
        )

    def clear_order_discount(self) -> Cart:
        return replace(
            self,
            order_discount_type=None,
            order_discount_value=None,
            order_discount_reason=None,
        )

    def set_notes(self, notes: str | None) -> Cart:
        return replace(self, notes=notes or None)

    # --- Internal helpers -----------------------------------------------------

    def _with_line(self, line: LineItem) -> Cart:
        return replace(
            self,
            items=tuple(line if i.temp_id == line.temp_id else i for i in self.items),
        )
