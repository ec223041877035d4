import logging

import click

from posengine.infrastructure.cli.product_commands import product_list
from posengine.infrastructure.cli.sale_commands import (
    sale_checkout,
    sale_held,
    sale_hold,
    sale_quote,
    sale_resume,
    sale_void,
)
from posengine.infrastructure.cli.session_commands import session_list, session_open, terminal_list
from posengine.infrastructure.config import get_settings


@click.group()
def cli() -> None:
    """POS: point-of-sale register"""
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.group()
def product() -> None:
    """Browse the catalog."""


@cli.group()
def session() -> None:
    """Manage register sessions."""


@cli.group()
def sale() -> None:
    """Ring up, hold, resume and void sales."""


# Register subcommands
product.add_command(product_list)
session.add_command(session_list)
session.add_command(session_open)
session.add_command(terminal_list)
sale.add_command(sale_quote)
sale.add_command(sale_checkout)
sale.add_command(sale_hold)
sale.add_command(sale_held)
sale.add_command(sale_resume)
sale.add_command(sale_void)
