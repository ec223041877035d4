"""CLI commands for the product catalog."""

from __future__ import annotations

import click

from posengine.domain.exceptions import DomainException
from posengine.domain.model.value_objects import format_jmd
from posengine.infrastructure.bootstrap import pos_gateway


@click.command("list")
@click.option("--search", default=None, help="Match name or SKU.")
@click.option("--category", default=None, help="Only this category.")
def product_list(search: str | None, category: str | None) -> None:
    """List active products."""
    try:
        with pos_gateway() as gateway:
            products = gateway.list_active_products(query=search, category=category)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not products:
        click.echo("No products found.")
        return

    click.echo(f"  {'SKU':<12} {'Product':<24} {'Price':>14} {'Stock':>7} {'GCT':>7}")
    click.echo(f"  {'-'*68}")
    for p in products:
        gct = "exempt" if p.is_gct_exempt else "yes"
        click.echo(
            f"  {p.sku:<12} {p.name:<24} {format_jmd(p.unit_price):>14} "
            f"{p.stock_quantity:>7} {gct:>7}"
        )
