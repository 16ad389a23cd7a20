"""Mini README: Entry point CLI for the team fines ledger.

This script exposes a Typer CLI that starts the FastAPI service with
configurable host, port and production flags, and offers quick terminal
views of the standings and match history. Settings come from environment
variables (``FINESLEDGER_*``) when available.
"""

from __future__ import annotations

import typer
import uvicorn

from finesledger.configuration import get_settings
from finesledger.controller import LedgerController
from finesledger.leaderboard import build_standings, summarise_history
from finesledger.logging_utils import configure_root_logger
from finesledger.store import create_store

cli = typer.Typer(help="Run and inspect the team fines ledger.")


def _controller() -> LedgerController:
    configure_root_logger()
    return LedgerController(create_store(get_settings()))


@cli.command()
def run(
    host: str = typer.Option(None, help="Host interface to bind."),
    port: int = typer.Option(None, help="Port to listen on."),
    production: bool = typer.Option(
        False, help="Use production server settings (disable auto-reload)."
    ),
) -> None:
    """Start the FastAPI application using uvicorn."""

    settings = get_settings()
    effective_host = host or settings.interface_host
    effective_port = port or settings.interface_port
    configure_root_logger()

    # Browsers cannot open the 0.0.0.0 bind address, so point them at localhost.
    browser_host = "127.0.0.1" if effective_host in {"0.0.0.0", "::"} else effective_host
    typer.echo(
        f"Starting fines ledger on {effective_host}:{effective_port}.\n"
        f"Open your browser at http://{browser_host}:{effective_port}/leaderboard"
    )
    uvicorn.run(
        "finesledger.interface.web_app:create_application",
        host=effective_host,
        port=effective_port,
        factory=True,
        reload=not production,
    )


@cli.command()
def standings() -> None:
    """Print the leaderboard ordered by balance owed."""

    settings = get_settings()
    board = build_standings(
        _controller().players,
        high_debt_threshold=settings.high_debt_threshold,
        symbol=settings.currency_symbol,
    )
    if not board["players"]:
        typer.echo("No players found. Add them from the admin panel.")
        return
    for entry in board["players"]:
        flag = " !" if entry["high_debt"] else ""
        typer.echo(f"{entry['rank']:>3}. {entry['name']:<24} {entry['display']:>10}{flag}")
    typer.echo(f"Outstanding balance: {board['total_debt_display']}")


@cli.command()
def history() -> None:
    """Print the match history, newest first."""

    records = summarise_history(_controller().history, symbol=get_settings().currency_symbol)
    if not records:
        typer.echo("No match history available.")
        return
    for record in records:
        typer.echo(
            f"{record['date']}  vs {record['opponent']:<20} "
            f"{record['total_fines_display']:>10}  ({record['player_count']} players)"
        )


@cli.command()
def seed() -> None:
    """Load the demo roster into an empty ledger."""

    added = _controller().seed_demo_roster()
    typer.echo(f"Added {added} demo players." if added else "Roster already populated; nothing seeded.")


if __name__ == "__main__":
    cli()
