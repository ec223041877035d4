"""CLI commands for register sessions and terminals."""

from __future__ import annotations

import click

from posengine.application.open_session import OpenSessionHandler
from posengine.domain.exceptions import DomainException
from posengine.domain.model.value_objects import format_jmd
from posengine.infrastructure.bootstrap import pos_gateway


@click.command("list")
def session_list() -> None:
    """Show open sessions."""
    try:
        with pos_gateway() as gateway:
            sessions = gateway.list_open_sessions()
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not sessions:
        click.echo("No open sessions.")
        return
    for s in sessions:
        click.echo(
            f"{s.id}  terminal={s.terminal_name or s.terminal_id}  "
            f"cashier={s.cashier_name}  float={format_jmd(s.opening_cash)}"
        )


@click.command("terminals")
def terminal_list() -> None:
    """Show active terminals."""
    try:
        with pos_gateway() as gateway:
            terminals = gateway.list_terminals(active_only=True)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not terminals:
        click.echo("No terminals configured.")
        return
    for t in terminals:
        click.echo(f"{t.id}  {t.name}" + (f"  ({t.location})" if t.location else ""))


@click.command("open")
@click.option("--terminal", "terminal_id", required=True, help="Terminal ID.")
@click.option("--cashier", required=True, help="Cashier name.")
@click.option("--float", "opening_cash", default="0", help="Opening cash float.")
def session_open(terminal_id: str, cashier: str, opening_cash: str) -> None:
    """Open a register session on a terminal."""
    try:
        with pos_gateway() as gateway:
            session = OpenSessionHandler(gateway).handle(terminal_id, cashier, opening_cash)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Session {session.id} opened with a float of {format_jmd(session.opening_cash)}."
    )
