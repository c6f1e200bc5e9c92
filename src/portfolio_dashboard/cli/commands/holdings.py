"""Holdings management commands."""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...core.exceptions import InvalidHoldingError
from ...core.models import AssetType, Holding, RegionWeight
from ...data.repositories.accounts_repo import AccountsRepository
from ...data.repositories.holdings_repo import HoldingsRepository
from ..context import parse_asset_type, parse_decimal, parse_pairs

app = typer.Typer(help="Manage holdings")
console = Console()
accounts_repo = AccountsRepository()
repo = HoldingsRepository()

ASSET_TYPES = [t.name.lower() for t in AssetType]


def _display_name(h: Holding) -> str:
    """Return best available display name for a holding."""
    if h.asset_type.is_cash_like:
        return f"{h.description or 'Cash'} ({h.currency})"
    if h.symbol and h.description:
        return f"{h.description} ({h.short_symbol})"
    return h.display_name or "—"


def _region_weights(pairs: Optional[list[str]]) -> tuple[RegionWeight, ...]:
    return tuple(
        RegionWeight(region=region, weight=weight)
        for region, weight in parse_pairs(pairs, "--region").items()
    )


@app.command("add")
def add(
    account_id: int = typer.Argument(..., help="Account ID"),
    asset_type: str = typer.Argument(..., help=f"Asset type: {', '.join(ASSET_TYPES)}"),
    currency: str = typer.Argument(..., help="Currency code (e.g. EUR, USD, BTC)"),
    quantity: str = typer.Argument(..., help="Units held, or the amount for cash"),
    price: str = typer.Option("", "--price", "-p", help="Unit price in the holding's currency"),
    description: str = typer.Option("", "--desc", "-d", help="Description (e.g. 'Vanguard FTSE All-World')"),
    symbol: str = typer.Option("", "--symbol", "-s", help="Ticker, optionally with exchange (e.g. 'XETRA:VWCE')"),
    region: Optional[list[str]] = typer.Option(None, "--region", "-r", help="REGION=WEIGHT, repeatable (stocks/bonds)"),
):
    """Add a holding to an account."""
    a = accounts_repo.get_by_id(account_id)
    if not a:
        console.print(f"[red]Account {account_id} not found[/red]")
        raise typer.Exit(1)

    atype = parse_asset_type(asset_type)
    qty = parse_decimal(quantity, "quantity")
    unit_price = parse_decimal(price, "price") if price else None
    weights = _region_weights(region)
    if weights and not (atype.is_stock_like or atype.is_bond_like):
        console.print("[yellow]Region weights are only used for stocks and bonds; ignoring[/yellow]")
        weights = ()

    try:
        h = repo.create(Holding(
            account_id=account_id, asset_type=atype, currency=currency, quantity=qty,
            price=unit_price, description=description, symbol=symbol, region_weights=weights,
        ))
    except InvalidHoldingError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Added {_display_name(h)} to '{a.name}' (Holding ID: {h.id})[/green]")


@app.command("update")
def update(
    holding_id: int = typer.Argument(..., help="Holding ID"),
    quantity: str = typer.Argument(..., help="Units held, or the amount for cash"),
    price: str = typer.Option("", "--price", "-p", help="Unit price in the holding's currency"),
):
    """Update a holding's quantity and price."""
    h = repo.get_by_id(holding_id)
    if not h:
        console.print(f"[red]Holding {holding_id} not found[/red]")
        raise typer.Exit(1)
    unit_price = parse_decimal(price, "price") if price else h.price
    try:
        h = repo.update_valuation(holding_id, parse_decimal(quantity, "quantity"), unit_price)
    except InvalidHoldingError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Updated {_display_name(h)}: {h.current_value:,.2f} {h.currency}[/green]")


@app.command("regions")
def regions(
    holding_id: int = typer.Argument(..., help="Holding ID"),
    region: Optional[list[str]] = typer.Option(None, "--region", "-r", help="REGION=WEIGHT, repeatable; none clears"),
):
    """Replace the geographic weights of a stock or bond holding."""
    h = repo.get_by_id(holding_id)
    if not h:
        console.print(f"[red]Holding {holding_id} not found[/red]")
        raise typer.Exit(1)
    if not (h.asset_type.is_stock_like or h.asset_type.is_bond_like):
        console.print("[red]Region weights are only used for stocks and bonds[/red]")
        raise typer.Exit(1)
    try:
        repo.set_regions(holding_id, _region_weights(region))
    except InvalidHoldingError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Updated regions of {_display_name(h)}[/green]")


@app.command("list")
def list_holdings(account_id: int = typer.Argument(..., help="Account ID")):
    """List all holdings in an account."""
    a = accounts_repo.get_by_id(account_id)
    if not a:
        console.print(f"[red]Account {account_id} not found[/red]")
        raise typer.Exit(1)

    holdings = repo.list_by_account(account_id)
    if not holdings:
        console.print(f"[yellow]No holdings in '{a.name}'. Add one with: pd holding add {account_id} <TYPE> <CURRENCY> <QTY>[/yellow]")  # noqa: E501
        return

    table = Table(title=f"Holdings: {a.name}")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Holding", style="bold")
    table.add_column("Type")
    table.add_column("Currency")
    table.add_column("Quantity", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Value", justify="right")
    table.add_column("Regions")

    for h in holdings:
        regions = ", ".join(f"{w.region} {w.weight * 100:.0f}%" for w in h.region_weights)
        table.add_row(
            str(h.id),
            _display_name(h),
            h.asset_type.name.lower(),
            h.currency,
            f"{h.quantity:,.4f}",
            f"{h.price:,.4f}" if h.price is not None else "—",
            f"{h.current_value:,.2f}",
            regions or "—",
        )

    console.print(table)


@app.command("remove")
def remove(
    holding_id: int = typer.Argument(..., help="Holding ID"),
    force: bool = typer.Option(False, "--force", "-f"),
):
    """Remove a holding from its account."""
    h = repo.get_by_id(holding_id)
    if not h:
        console.print(f"[red]Holding {holding_id} not found[/red]")
        raise typer.Exit(1)

    if not force and not typer.confirm(f"Remove {_display_name(h)}?"):
        console.print("Cancelled.")
        return

    repo.delete(holding_id)
    console.print(f"[green]Removed {_display_name(h)}[/green]")
