"""Portfolio Dashboard CLI: main entry point."""

import logging

import typer
from rich.logging import RichHandler

from ..data.database import get_db
from .commands import accounts, config, dashboard, history, holdings

app = typer.Typer(
    name="pd",
    help="Multi-currency portfolio dashboard: allocation, goals, rebalancing and history",
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.add_typer(accounts.app, name="account", help="Manage accounts")
app.add_typer(holdings.app, name="holding", help="Manage holdings")
app.add_typer(dashboard.app, name="dashboard", help="Allocation, goals, rebalancing")
app.add_typer(history.app, name="history", help="Portfolio value history")
app.add_typer(config.app, name="config", help="Base currency, targets, goals")


@app.callback()
def startup(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")):
    """Configure logging and initialize the database on first run."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
    )
    get_db()


if __name__ == "__main__":
    app()
