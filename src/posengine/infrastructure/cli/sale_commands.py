"""CLI commands for ringing up sales."""

from __future__ import annotations

from decimal import Decimal

import click

from posengine.application.dto import CheckoutResult
from posengine.application.register import Register
from posengine.domain.exceptions import DomainException
from posengine.domain.model.value_objects import PaymentMethod, format_jmd, round_money
from posengine.domain.model.void import VOID_REASONS
from posengine.infrastructure.bootstrap import pos_gateway, receipt_printer, register
from posengine.infrastructure.config import get_settings


def _parse_items(raw: str) -> list[tuple[str, str]]:
    """Parse 'SKU-1:3,Widget:2' into (sku-or-name, quantity) pairs."""
    specs: list[tuple[str, str]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if not pair:
            continue
        if ":" not in pair:
            specs.append((pair, "1"))
            continue
        key, qty = pair.rsplit(":", 1)
        specs.append((key.strip(), qty.strip()))
    if not specs:
        raise click.BadParameter("At least one item is required.")
    return specs


def _parse_discount(raw: str) -> tuple[str, str]:
    """'10%' is a percentage discount, '500' a flat amount."""
    raw = raw.strip()
    if raw.endswith("%"):
        return "percent", raw[:-1]
    return "amount", raw


def _ring_up(
    reg: Register,
    items: str,
    customer: str | None = None,
    discount: str | None = None,
    discount_reason: str | None = None,
    notes: str | None = None,
) -> None:
    catalog = reg.find_products()
    for key, qty in _parse_items(items):
        product = next(
            (
                p
                for p in catalog
                if p.sku.lower() == key.lower() or p.name.lower() == key.lower()
            ),
            None,
        )
        if product is None:
            raise click.ClickException(f"Product not found: '{key}'")
        try:
            quantity = Decimal(qty)
        except ArithmeticError:
            raise click.BadParameter(f"Invalid quantity '{qty}' for product '{key}'.")
        reg.add_item(product, quantity)

    if customer:
        match = next(
            (c for c in reg.find_customers(customer) if c.name.lower() == customer.lower()),
            None,
        )
        if match is None:
            raise click.ClickException(f"Customer not found: '{customer}'")
        reg.set_customer(match.id, match.name)

    if discount:
        kind, value = _parse_discount(discount)
        reg.set_order_discount(kind, value, discount_reason)

    if notes:
        reg.set_notes(notes)


def _display_cart(reg: Register) -> None:
    """Shared formatting for displaying the cart and its totals."""
    click.echo(f"Customer: {reg.cart.customer_name}")
    click.echo()
    click.echo(f"  {'Product':<22} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*58}")
    for item in reg.cart.items:
        name = item.name + (" (E)" if item.is_gct_exempt else "")
        click.echo(
            f"  {name:<22} {item.quantity:>5} {format_jmd(item.unit_price):>14} "
            f"{format_jmd(item.line_subtotal):>14}"
        )
    click.echo(f"  {'-'*58}")

    totals = reg.totals
    click.echo(f"  {'Subtotal':<42} {format_jmd(totals.subtotal):>14}")
    if totals.discount_amount:
        click.echo(f"  {'Discount':<42} {'-' + format_jmd(totals.discount_amount):>14}")
    click.echo(f"  {'GCT':<42} {format_jmd(totals.gct_amount):>14}")
    click.echo(f"  {'Total':<42} {format_jmd(totals.total):>14}")


def _take_payment(
    reg: Register, method: str, tendered: str | None, terminal_result: str
) -> CheckoutResult:
    """Run the checkout state machine from the current cart to a completed sale."""
    if not reg.begin_checkout():
        raise click.ClickException("Cart is empty.")
    reg.select_method(method)
    if reg.context.payment_method.is_cash:
        reg.set_cash_tendered(tendered or round_money(reg.totals.total))

    result = reg.confirm()
    if result is None:
        click.echo(f"Waiting for {reg.context.payment_method.label} terminal...")
        if terminal_result == "declined":
            reg.payment_failed()
            raise click.ClickException("Terminal declined the payment; nothing was charged.")
        result = reg.payment_confirmed()
    return result


def _finish_sale(result: CheckoutResult, copies: int | None) -> None:
    receipt_printer().print_receipt(
        result.receipt, copies=copies or get_settings().receipt_copies
    )
    click.echo(f"Order {result.order.order_number} completed.")
    if result.change:
        click.echo(f"Change due: {format_jmd(result.change)}")


_PAYMENT_OPTIONS = (
    click.option(
        "--method",
        default="cash",
        type=click.Choice([m.value for m in PaymentMethod], case_sensitive=False),
        help="Payment method.",
    ),
    click.option("--tendered", default=None, help="Cash handed over (cash only)."),
    click.option(
        "--terminal-result",
        default="approved",
        type=click.Choice(["approved", "declined"]),
        help="Outcome reported by the card/mobile terminal (non-cash only).",
    ),
    click.option("--copies", default=None, type=int, help="Receipt copies to print."),
)


def _payment_options(command):
    """Attach the options shared by every command that takes payment."""
    for option in reversed(_PAYMENT_OPTIONS):
        command = option(command)
    return command


@click.command("quote")
@click.option("--items", required=True, help="Items as 'SKU:Qty,SKU:Qty'.")
@click.option("--customer", default=None, help="Customer name.")
@click.option("--discount", default=None, help="Order discount, e.g. '10%' or '500'.")
def sale_quote(items: str, customer: str | None, discount: str | None) -> None:
    """Price a cart without submitting it."""
    try:
        with pos_gateway() as gateway:
            reg = register(gateway)
            _ring_up(reg, items, customer, discount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_cart(reg)


@click.command("checkout")
@click.option("--items", required=True, help="Items as 'SKU:Qty,SKU:Qty'.")
@_payment_options
@click.option("--customer", default=None, help="Customer name.")
@click.option("--discount", default=None, help="Order discount, e.g. '10%' or '500'.")
@click.option("--discount-reason", default=None, help="Reason printed with the discount.")
@click.option("--notes", default=None, help="Order notes.")
def sale_checkout(
    items: str,
    method: str,
    tendered: str | None,
    terminal_result: str,
    copies: int | None,
    customer: str | None,
    discount: str | None,
    discount_reason: str | None,
    notes: str | None,
) -> None:
    """Ring up a sale, take payment and print the receipt."""
    try:
        with pos_gateway() as gateway:
            reg = register(gateway)
            _ring_up(reg, items, customer, discount, discount_reason, notes)
            result = _take_payment(reg, method, tendered, terminal_result)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _finish_sale(result, copies)


@click.command("hold")
@click.option("--items", required=True, help="Items as 'SKU:Qty,SKU:Qty'.")
@click.option("--customer", default=None, help="Customer name.")
@click.option("--reason", default=None, help="Why the order is parked.")
def sale_hold(items: str, customer: str | None, reason: str | None) -> None:
    """Park a sale for later."""
    try:
        with pos_gateway() as gateway:
            reg = register(gateway)
            _ring_up(reg, items, customer)
            order = reg.hold(reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Order {order.order_number} held ({order.held_reason}).")


@click.command("held")
def sale_held() -> None:
    """List parked sales."""
    try:
        with pos_gateway() as gateway:
            orders = gateway.list_held_orders()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No held orders.")
        return
    for o in orders:
        click.echo(
            f"{o.order_number}  {o.customer_name}  {len(o.items)} line(s)  "
            f"{format_jmd(o.total)}  {o.held_reason or ''}".rstrip()
        )


@click.command("resume")
@click.argument("order_number")
@_payment_options
def sale_resume(
    order_number: str,
    method: str,
    tendered: str | None,
    terminal_result: str,
    copies: int | None,
) -> None:
    """Load a held sale back into the register and take payment."""
    try:
        with pos_gateway() as gateway:
            reg = register(gateway)
            order = next(
                (o for o in reg.held_orders() if o.order_number == order_number), None
            )
            if order is None:
                raise click.ClickException(f"Held order not found: '{order_number}'")
            reg.resume_held(order)
            click.echo(f"Resumed {order.order_number} for {reg.cart.customer_name}.")
            result = _take_payment(reg, method, tendered, terminal_result)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _finish_sale(result, copies)


@click.command("void")
@click.option("--items", required=True, help="Items as 'SKU:Qty,SKU:Qty'.")
@click.option(
    "--reason",
    required=True,
    type=click.Choice(list(VOID_REASONS), case_sensitive=False),
    help="Void reason.",
)
@click.option("--detail", default=None, help="Free-text reason when --reason is Other.")
def sale_void(items: str, reason: str, detail: str | None) -> None:
    """Void an un-submitted sale."""
    try:
        with pos_gateway() as gateway:
            reg = register(gateway)
            _ring_up(reg, items)
            record = reg.void(reason, detail)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Voided {record.line_count} line(s), {format_jmd(record.total)}: {record.reason}."
    )
