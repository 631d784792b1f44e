"""
CLI entry point for parceltrack.

This module provides the Typer-based command-line interface for parceltrack.

Commands:
    init          Create the parcel table
    register      Register a new parcel for a client
    show          Show one parcel
    list          List a client's parcels
    next-status   Advance a parcel along registered -> sent -> delivered
    set-status    Force a parcel's status
    set-address   Change the address of a registered parcel
    delete        Delete a registered parcel

The CLI only parses arguments and renders results; all storage work goes
through ParcelService and ParcelStore.
"""

import logging
import sqlite3
from collections.abc import Generator
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from parceltrack import __version__
from parceltrack.errors import ParcelNotFoundError, ParcelTrackError
from parceltrack.schema import Parcel, ParcelStatus, Settings, load_settings
from parceltrack.service import ParcelService
from parceltrack.store import ParcelStore, connect, init_schema

app = typer.Typer(
    name="parceltrack",
    help="Track parcels in a local SQLite database.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

logger = logging.getLogger(__name__)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]parceltrack[/bold] version {__version__}")
        raise typer.Exit()


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    config: Annotated[
        Optional[Path],
        typer.Option(
            "--config",
            "-c",
            help="Path to a YAML settings file.",
            resolve_path=True,
        ),
    ] = None,
    db: Annotated[
        Optional[Path],
        typer.Option(
            "--db",
            help="Path to the SQLite database. Overrides the settings file.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            help="Log every statement sent to the database.",
        ),
    ] = False,
) -> None:
    """
    parceltrack - register parcels and follow them until delivery.
    """
    try:
        settings = load_settings(config) if config else Settings()
    except ParcelTrackError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    if db is not None:
        settings = settings.model_copy(update={"db_path": db})

    _configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


@contextmanager
def _service(ctx: typer.Context) -> Generator[ParcelService, None, None]:
    """Open the configured database and yield a service bound to it."""
    settings: Settings = ctx.obj
    logger.debug("Using database %s", settings.db_path)
    try:
        with closing(connect(settings.db_path, timeout=settings.timeout)) as conn:
            init_schema(conn)
            yield ParcelService(ParcelStore(conn))
    except ParcelNotFoundError as e:
        console.print(f"[red]{escape(e.message)}[/red]")
        raise typer.Exit(code=1)
    except (ParcelTrackError, sqlite3.Error) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def _status_display(status: str) -> str:
    if status == ParcelStatus.DELIVERED.value:
        return f"[green]{status}[/green]"
    if status == ParcelStatus.SENT.value:
        return f"[cyan]{status}[/cyan]"
    return f"[yellow]{status}[/yellow]"


def _parcel_table(parcels: list[Parcel]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Number", style="cyan", justify="right")
    table.add_column("Client", justify="right")
    table.add_column("Address")
    table.add_column("Status", width=10)
    table.add_column("Created")

    for p in parcels:
        table.add_row(
            str(p.number),
            str(p.client),
            escape(p.address),
            _status_display(p.status),
            p.created_at,
        )
    return table


@app.command()
def init(ctx: typer.Context) -> None:
    """
    Create the parcel table if it doesn't exist.

    Example:
        $ parceltrack --db tracker.db init
    """
    with _service(ctx):
        pass
    console.print(f"[green]✓[/green] Database ready: {ctx.obj.db_path}")


@app.command()
def register(
    ctx: typer.Context,
    client: Annotated[int, typer.Argument(help="Client identifier.")],
    address: Annotated[str, typer.Argument(help="Delivery address.")],
) -> None:
    """
    Register a new parcel.

    Example:
        $ parceltrack register 1000 "Pushkin st. 10"
    """
    with _service(ctx) as service:
        parcel = service.register(client, address)
    console.print(
        f"[green]✓[/green] Registered parcel [bold]{parcel.number}[/bold] "
        f"for client {parcel.client}"
    )


@app.command()
def show(
    ctx: typer.Context,
    number: Annotated[int, typer.Argument(help="Parcel number.")],
) -> None:
    """Show a single parcel."""
    with _service(ctx) as service:
        parcel = service.store.get(number)
    console.print(_parcel_table([parcel]))


@app.command("list")
def list_parcels(
    ctx: typer.Context,
    client: Annotated[int, typer.Argument(help="Client identifier.")],
) -> None:
    """
    List all parcels of a client.

    Example:
        $ parceltrack list 1000
    """
    with _service(ctx) as service:
        parcels = service.client_parcels(client)

    if not parcels:
        console.print(f"[dim]No parcels found for client {client}.[/dim]")
        raise typer.Exit(code=0)

    parcels.sort(key=lambda p: p.number)
    console.print(_parcel_table(parcels))


@app.command("next-status")
def next_status(
    ctx: typer.Context,
    number: Annotated[int, typer.Argument(help="Parcel number.")],
) -> None:
    """Advance a parcel to its next status."""
    with _service(ctx) as service:
        status = service.next_status(number)
    console.print(f"Parcel [bold]{number}[/bold] is now {_status_display(status)}")


@app.command("set-status")
def set_status(
    ctx: typer.Context,
    number: Annotated[int, typer.Argument(help="Parcel number.")],
    status: Annotated[ParcelStatus, typer.Argument(help="New status.")],
) -> None:
    """Set a parcel's status without checking the current one."""
    with _service(ctx) as service:
        service.store.set_status(number, status)
    console.print(f"Parcel [bold]{number}[/bold] set to {_status_display(status.value)}")


@app.command("set-address")
def set_address(
    ctx: typer.Context,
    number: Annotated[int, typer.Argument(help="Parcel number.")],
    address: Annotated[str, typer.Argument(help="New delivery address.")],
) -> None:
    """
    Change the address of a parcel.

    Only registered parcels are changed; others are left as they are.
    """
    with _service(ctx) as service:
        service.change_address(number, address)
        parcel = service.store.get(number)

    if parcel.status == ParcelStatus.REGISTERED.value:
        console.print(
            f"[green]✓[/green] Parcel {number} will be delivered to {escape(address)}"
        )
    else:
        console.print(
            f"[yellow]Parcel {number} is {escape(parcel.status)}; "
            "address unchanged[/yellow]"
        )


@app.command()
def delete(
    ctx: typer.Context,
    number: Annotated[int, typer.Argument(help="Parcel number.")],
) -> None:
    """Delete a parcel. Only registered parcels are removed."""
    with _service(ctx) as service:
        service.delete(number)
    console.print(f"Delete requested for parcel {number}")


if __name__ == "__main__":
    app()
