"""Application service: the register.

The Register owns the in-progress cart and the checkout state machine for
one till.  All state lives on the instance; nothing is global.

    IDLE --begin_checkout--> METHOD_SELECTION --confirm (non-cash)--> AWAITING_TERMINAL
    METHOD_SELECTION --confirm (cash)--> SUBMITTING
    AWAITING_TERMINAL --payment_confirmed / confirm--> SUBMITTING
    AWAITING_TERMINAL --payment_failed--> METHOD_SELECTION
    SUBMITTING --success--> COMPLETED   (cart cleared, receipt ready)
    SUBMITTING --failure--> METHOD_SELECTION   (cart kept, error raised)

Hold and void short-circuit from IDLE and never touch payment.  A held
order resumed into an unchanged cart is paid or re-held in place.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable

from posengine.application.dto import CheckoutResult
from posengine.application.submit_order import OrderSubmitter
from posengine.domain.exceptions import (
    CheckoutStepError,
    GatewayError,
    InvalidTransitionError,
    ValidationError,
)
from posengine.domain.gateway.peripherals import CashDrawer, PeripheralError
from posengine.domain.gateway.pos_gateway import PosGateway
from posengine.domain.model.cart import Cart
from posengine.domain.model.order import (
    DEFAULT_HOLD_REASON,
    PAYMENT_COMPLETED,
    Order,
    Payment,
)
from posengine.domain.model.pos_settings import PosSettings
from posengine.domain.model.product import Customer, Product
from posengine.domain.model.receipt import Tender
from posengine.domain.model.session import Session
from posengine.domain.model.value_objects import (
    ZERO,
    OrderStatus,
    PaymentMethod,
    format_jmd,
    round_money,
    to_decimal,
)
from posengine.domain.model.void import VoidRecord, resolve_void_reason
from posengine.domain.service import receipt_builder, session_gate
from posengine.domain.service.totals import CartTotals, calculate_totals

logger = logging.getLogger(__name__)


class CheckoutState(Enum):
    IDLE = "idle"
    METHOD_SELECTION = "method_selection"
    AWAITING_TERMINAL = "awaiting_terminal"
    SUBMITTING = "submitting"
    COMPLETED = "completed"


# States in which the cart may still be edited.
_EDITABLE_STATES = (CheckoutState.IDLE, CheckoutState.METHOD_SELECTION, CheckoutState.COMPLETED)


@dataclass
class CheckoutContext:
    """Ephemeral state for one checkout attempt."""

    payment_method: PaymentMethod = PaymentMethod.CASH
    cash_tendered: Decimal | None = None
    awaiting_terminal: bool = False
    order: Order | None = None
    submitted_cart: Cart | None = None


class Register:

    def __init__(
        self,
        gateway: PosGateway,
        settings: PosSettings,
        session: Session | None = None,
        cash_drawer: CashDrawer | None = None,
    ) -> None:
        self._gateway = gateway
        self._submitter = OrderSubmitter(gateway)
        self._cash_drawer = cash_drawer
        self.settings = settings
        self.session = session
        self.cart = Cart()
        self.state = CheckoutState.IDLE
        self.context: CheckoutContext | None = None
        self.last_error: CheckoutStepError | None = None
        self.last_result: CheckoutResult | None = None
        self._in_flight = False
        self._totals_cache: tuple[Cart, Decimal, CartTotals] | None = None
        # Backend order already created for an exact cart value.
        self._submitted: tuple[Cart, Order] | None = None

    # --- Derived state --------------------------------------------------------

    @property
    def totals(self) -> CartTotals:
        cached = self._totals_cache
        if cached and cached[0] is self.cart and cached[1] == self.settings.gct_rate:
            return cached[2]
        totals = calculate_totals(self.cart, self.settings.gct_rate)
        self._totals_cache = (self.cart, self.settings.gct_rate, totals)
        return totals

    @property
    def is_blocked(self) -> bool:
        return session_gate.is_blocked(self.settings.require_open_session, self.session)

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def attach_session(self, session: Session | None) -> None:
        self.session = session

    # --- Catalog lookups ------------------------------------------------------

    def find_products(self, query: str | None = None, category: str | None = None) -> list[Product]:
        return self._gateway.list_active_products(query=query, category=category)

    def find_customers(self, query: str | None = None) -> list[Customer]:
        return self._gateway.list_customers(query=query)

    def held_orders(self) -> list[Order]:
        return self._gateway.list_held_orders()

    # --- Cart operations ------------------------------------------------------

    def add_item(self, product: Product, quantity_delta: int | Decimal = 1) -> Cart:
        return self._mutate(lambda cart: cart.add_item(product, quantity_delta))

    def add_custom_item(self, name: str, unit_price, quantity=1, is_gct_exempt: bool = False) -> Cart:
        return self._mutate(
            lambda cart: cart.add_custom_item(name, unit_price, quantity, is_gct_exempt)
        )

    def update_item(self, temp_id: str, /, **patch: object) -> Cart:
        return self._mutate(lambda cart: cart.update_item(temp_id, **patch))

    def increment(self, temp_id: str) -> Cart:
        return self._mutate(lambda cart: cart.increment(temp_id))

    def decrement(self, temp_id: str) -> Cart:
        return self._mutate(lambda cart: cart.decrement(temp_id))

    def remove_item(self, temp_id: str) -> Cart:
        return self._mutate(lambda cart: cart.remove_item(temp_id))

    def clear_cart(self) -> Cart:
        return self._mutate(lambda cart: cart.clear())

    def set_customer(self, customer_id: str | None, customer_name: str | None = None) -> Cart:
        return self._mutate(lambda cart: cart.set_customer(customer_id, customer_name))

    def set_order_discount(self, discount_type, value, reason: str | None = None) -> Cart:
        return self._mutate(lambda cart: cart.set_order_discount(discount_type, value, reason))

    def clear_order_discount(self) -> Cart:
        return self._mutate(lambda cart: cart.clear_order_discount())

    def set_notes(self, notes: str | None) -> Cart:
        return self._mutate(lambda cart: cart.set_notes(notes))

    # --- Checkout state machine -----------------------------------------------

    def begin_checkout(self) -> bool:
        """Open payment method selection.

        Returns False, without changing state, when the cart is empty.
        """
        session_gate.ensure_not_blocked(self.settings.require_open_session, self.session)
        self._require_state(CheckoutState.IDLE, CheckoutState.COMPLETED, action="start checkout")
        if self.cart.is_empty:
            return False

        self.context = CheckoutContext()
        existing = self._existing_order()
        if existing is not None:
            self.context.order = existing
            self.context.submitted_cart = self.cart
        self.last_error = None
        self._transition(CheckoutState.METHOD_SELECTION)
        return True

    def select_method(self, method: str | PaymentMethod) -> None:
        self._require_state(CheckoutState.METHOD_SELECTION, action="select a payment method")
        ctx = self._context()
        ctx.payment_method = PaymentMethod.parse(method)
        ctx.awaiting_terminal = False
        if not ctx.payment_method.is_cash:
            ctx.cash_tendered = None

    def set_cash_tendered(self, amount: str | int | Decimal) -> None:
        self._require_state(CheckoutState.METHOD_SELECTION, action="enter cash tendered")
        ctx = self._context()
        if not ctx.payment_method.is_cash:
            raise ValidationError("Cash tendered only applies to cash payments")
        tendered = to_decimal(amount)
        if tendered < ZERO:
            raise ValidationError("Cash tendered cannot be negative")
        ctx.cash_tendered = tendered

    def confirm(self) -> CheckoutResult | None:
        """Advance the checkout.

        The first confirm of a non-cash payment only arms the terminal wait
        and returns None.  Otherwise the sale is submitted.
        """
        if self.state is CheckoutState.AWAITING_TERMINAL:
            return self._submit()

        self._require_state(CheckoutState.METHOD_SELECTION, action="confirm payment")
        ctx = self._context()
        if not ctx.payment_method.is_cash:
            self._require_items()
            self._require_non_negative_total()
            ctx.awaiting_terminal = True
            self._transition(CheckoutState.AWAITING_TERMINAL)
            return None

        self._validate_tender(ctx)
        return self._submit()

    def payment_confirmed(self) -> CheckoutResult:
        self._require_state(CheckoutState.AWAITING_TERMINAL, action="confirm terminal payment")
        return self._submit()

    def payment_failed(self) -> None:
        self._require_state(CheckoutState.AWAITING_TERMINAL, action="report a failed payment")
        self._context().awaiting_terminal = False
        logger.info("Terminal reported payment failure; back to method selection")
        self._transition(CheckoutState.METHOD_SELECTION)

    def cancel(self) -> None:
        self._require_state(
            CheckoutState.METHOD_SELECTION,
            CheckoutState.AWAITING_TERMINAL,
            action="cancel checkout",
        )
        ctx = self._context()
        if ctx.order is not None:
            logger.warning(
                f"Checkout cancelled; order {ctx.order.order_number} "
                f"remains {ctx.order.status.value}"
            )
        self.context = None
        self._transition(CheckoutState.IDLE)

    # --- Hold and void --------------------------------------------------------

    def hold(self, reason: str | None = None) -> Order:
        """Park the cart as a held order and start a fresh cart."""
        session_gate.ensure_not_blocked(self.settings.require_open_session, self.session)
        self._require_state(CheckoutState.IDLE, CheckoutState.COMPLETED, action="hold the order")
        self._require_items()
        self._require_non_negative_total()
        self._claim_flight()

        try:
            order = self._existing_order()
            if order is None:
                order = self._submit_cart()
            else:
                logger.info(f"Reusing order {order.order_number} for hold")
            try:
                held = self._gateway.hold_order(order.id, reason or DEFAULT_HOLD_REASON)
            except GatewayError as exc:
                logger.error(f"Hold failed for order {order.order_number}: {exc}")
                raise CheckoutStepError("hold_order", exc) from exc
        except CheckoutStepError as exc:
            self.last_error = exc
            raise
        finally:
            self._in_flight = False

        held_reason = held.held_reason or reason or DEFAULT_HOLD_REASON
        logger.info(f"Order {held.order_number} held ({held_reason})")
        self.cart = Cart()
        self._submitted = None
        self.last_error = None
        self._transition(CheckoutState.IDLE)
        return held

    def void(self, reason: str, detail: str | None = None) -> VoidRecord:
        """Discard an un-submitted cart, recording why."""
        session_gate.ensure_not_blocked(self.settings.require_open_session, self.session)
        self._require_state(*_EDITABLE_STATES, action="void the order")
        submitted = self.context.order if self.context is not None else None
        submitted = submitted or self._existing_order()
        if submitted is not None:
            raise InvalidTransitionError(
                f"Order {submitted.order_number} was already submitted and "
                "cannot be voided from the register"
            )
        self._require_items()

        totals = self.totals
        record = VoidRecord(
            reason=resolve_void_reason(reason, detail),
            line_count=len(self.cart.items),
            item_count=totals.item_count,
            total=totals.total,
            customer_name=self.cart.customer_name,
            session_id=self.session.id if self.session else None,
        )
        logger.info(
            f"Cart voided: {record.line_count} line(s), {format_jmd(record.total)}, "
            f"reason={record.reason!r}, session={record.session_id}"
        )

        self.cart = Cart()
        self.context = None
        self._transition(CheckoutState.IDLE)
        return record

    def resume_held(self, order: Order) -> Cart:
        """Load a held order back into the cart.

        Lines get fresh temp ids.  While the cart is left unchanged, checkout
        pays the held order itself instead of creating a new one.
        """
        self._require_state(CheckoutState.IDLE, action="resume a held order")
        if not self.cart.is_empty:
            raise ValidationError("Hold or clear the current cart before resuming another order")
        if order.status is not OrderStatus.HELD:
            raise ValidationError(
                f"Order {order.order_number} is {order.status.value}, not held"
            )
        if not order.items:
            raise ValidationError(f"Held order {order.order_number} has no items")

        self.cart = order.to_cart()
        self._submitted = (self.cart, order)
        self.last_error = None
        logger.info(f"Resumed held order {order.order_number} ({len(order.items)} line(s))")
        return self.cart

    # --- Submission -----------------------------------------------------------

    def _submit(self) -> CheckoutResult:
        self._require_items()
        self._require_non_negative_total()
        self._claim_flight()
        ctx = self._context()
        totals = self.totals
        self._transition(CheckoutState.SUBMITTING)

        try:
            order = self._order_for_payment(ctx)
            payment = self._record_payment(order, ctx)
        except CheckoutStepError as exc:
            self.last_error = exc
            self._back_to_method_selection(ctx)
            raise
        except Exception:
            logger.exception("Checkout submission failed unexpectedly")
            self._back_to_method_selection(ctx)
            raise
        finally:
            self._in_flight = False

        change = ZERO
        if ctx.payment_method.is_cash and ctx.cash_tendered is not None:
            change = max(ZERO, ctx.cash_tendered - order.total)

        tender = Tender(
            method=ctx.payment_method,
            amount=order.total,
            amount_tendered=ctx.cash_tendered if ctx.payment_method.is_cash else None,
            change=change,
        )
        receipt = receipt_builder.build(order, self.cart, totals, tender, self.settings)

        if ctx.payment_method.is_cash:
            self._open_drawer()

        result = CheckoutResult(order=order, payment=payment, receipt=receipt, change=change)
        self.cart = Cart()
        self._submitted = None
        self.context = None
        self.last_error = None
        self.last_result = result
        self._transition(CheckoutState.COMPLETED)
        return result

    def _order_for_payment(self, ctx: CheckoutContext) -> Order:
        # A retry after a failed payment reuses the order already created for
        # this exact cart instead of creating a duplicate.
        if ctx.order is not None and ctx.submitted_cart is self.cart:
            logger.info(f"Reusing order {ctx.order.order_number} for payment")
            return ctx.order
        if ctx.order is not None:
            logger.warning(
                f"Cart changed after order {ctx.order.order_number} was created; "
                "submitting a new order"
            )

        order = self._submit_cart()
        ctx.order = order
        ctx.submitted_cart = self.cart
        return order

    def _submit_cart(self) -> Order:
        order = self._submitter.submit(self.cart, self.session)
        self._submitted = (self.cart, order)
        return order

    def _existing_order(self) -> Order | None:
        """The backend order already created for the current cart, if any."""
        if self._submitted is not None and self._submitted[0] is self.cart:
            return self._submitted[1]
        return None

    def _back_to_method_selection(self, ctx: CheckoutContext) -> None:
        ctx.awaiting_terminal = False
        self._transition(CheckoutState.METHOD_SELECTION)

    def _record_payment(self, order: Order, ctx: CheckoutContext) -> Payment:
        # The charge is the backend's total, never the locally computed one.
        try:
            payment = self._gateway.add_payment(
                order_id=order.id,
                method=ctx.payment_method,
                amount=order.total,
                amount_tendered=ctx.cash_tendered if ctx.payment_method.is_cash else None,
                status=PAYMENT_COMPLETED,
            )
        except GatewayError as exc:
            logger.error(f"Payment failed for order {order.order_number}: {exc}")
            raise CheckoutStepError("add_payment", exc) from exc

        logger.info(
            f"Payment recorded for order {order.order_number}: "
            f"{ctx.payment_method.label} {format_jmd(payment.amount)}"
        )
        return payment

    def _open_drawer(self) -> None:
        if self._cash_drawer is None:
            return
        try:
            self._cash_drawer.pulse()
        except PeripheralError as exc:
            logger.warning(f"Cash drawer did not open: {exc}")

    # --- Guards ---------------------------------------------------------------

    def _validate_tender(self, ctx: CheckoutContext) -> None:
        # Compare against the amount the operator sees on screen.
        total = round_money(self.totals.total)
        if ctx.cash_tendered is None:
            raise ValidationError("Enter the cash tendered")
        if ctx.cash_tendered < total:
            raise ValidationError(
                f"Cash tendered {format_jmd(ctx.cash_tendered)} is less than "
                f"the total {format_jmd(total)}"
            )

    def _require_items(self) -> None:
        if self.cart.is_empty:
            raise ValidationError("Cart is empty")

    def _require_non_negative_total(self) -> None:
        if self.totals.total < ZERO:
            raise ValidationError(
                f"Order total {format_jmd(self.totals.total)} is negative; reduce the discount"
            )

    def _require_state(self, *allowed: CheckoutState, action: str) -> None:
        if self.state not in allowed:
            raise InvalidTransitionError(
                f"Cannot {action} while checkout is {self.state.value.replace('_', ' ')}"
            )

    def _claim_flight(self) -> None:
        if self._in_flight:
            raise InvalidTransitionError("A submission is already in progress")
        self._in_flight = True

    def _context(self) -> CheckoutContext:
        if self.context is None:
            raise InvalidTransitionError("No checkout in progress")
        return self.context

    def _mutate(self, change: Callable[[Cart], Cart]) -> Cart:
        self._require_state(*_EDITABLE_STATES, action="edit the cart")
        self.cart = change(self.cart)
        if self.state is CheckoutState.COMPLETED:
            self._transition(CheckoutState.IDLE)
        return self.cart

    def _transition(self, new_state: CheckoutState) -> None:
        if new_state is not self.state:
            logger.debug(f"Checkout {self.state.value} -> {new_state.value}")
        self.state = new_state
