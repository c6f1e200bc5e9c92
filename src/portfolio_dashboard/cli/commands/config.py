"""Configuration commands: base currency, withdrawal rate, targets, goals, history window."""

from decimal import Decimal

import typer
from rich.console import Console
from rich.table import Table

from ...core.config import Goal, PortfolioConfig
from ...core.exceptions import PersistenceError
from ...core.models import ASSET_TYPE_LABELS
from ...core.windowing import TimeFrame
from ..context import config_store, parse_asset_type, parse_decimal

app = typer.Typer(help="Portfolio configuration")
console = Console()


def _save(cfg: PortfolioConfig) -> None:
    try:
        config_store.save(cfg)
    except PersistenceError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command("show")
def show():
    """Show the current configuration."""
    cfg = config_store.load()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Label", style="dim")
    table.add_column("Value")
    table.add_row("Base currency", cfg.base_currency)
    table.add_row("Withdrawal rate", f"{cfg.withdrawal_rate * 100:.2f}%")
    table.add_row("History time frame", cfg.history_time_frame.value)
    console.print(table)

    if cfg.target_allocation:
        targets = Table(title="Target Allocation", title_justify="left")
        targets.add_column("Asset Type", style="bold")
        targets.add_column("Target %", justify="right")
        for asset_type, fraction in cfg.target_allocation.items():
            targets.add_row(ASSET_TYPE_LABELS[asset_type], f"{fraction * 100:.2f}%")
        total = sum(cfg.target_allocation.values(), Decimal("0"))
        targets.add_row("[dim]Total[/dim]", f"[dim]{total * 100:.2f}%[/dim]")
        console.print(targets)

    if cfg.goals:
        goals = Table(title="Goals", title_justify="left")
        goals.add_column("#", style="cyan", justify="right")
        goals.add_column("Goal", style="bold")
        goals.add_column("Value", justify="right")
        for i, g in enumerate(cfg.goals, 1):
            goals.add_row(str(i), g.title, f"{g.value:,.2f} {cfg.base_currency}")
        console.print(goals)


@app.command("base-currency")
def base_currency(currency: str = typer.Argument(..., help="Currency code (e.g. EUR)")):
    """Set the currency all values are converted into."""
    cfg = config_store.load()
    cfg.base_currency = currency.upper()
    _save(cfg)
    console.print(f"[green]Base currency set to {cfg.base_currency}[/green]")


@app.command("withdrawal-rate")
def withdrawal_rate(percent: str = typer.Argument(..., help="Yearly withdrawal rate in percent (e.g. 4)")):
    """Set the yearly withdrawal rate used for the monthly spend limit."""
    pct = parse_decimal(percent, "percent")
    if pct < 0 or pct > 100:
        raise typer.BadParameter("Must be between 0 and 100")
    cfg = config_store.load()
    cfg.withdrawal_rate = pct / 100
    _save(cfg)
    console.print(f"[green]Withdrawal rate set to {pct}%[/green]")


@app.command("target")
def target(
    asset_type: str = typer.Argument(..., help="Broad asset type (stock, bond, commodity, ...)"),
    percent: str = typer.Argument(..., help="Target percent of the portfolio; 0 removes the target"),
):
    """Set the target allocation for one asset type."""
    atype = parse_asset_type(asset_type).broad_type
    pct = parse_decimal(percent, "percent")
    if pct < 0 or pct > 100:
        raise typer.BadParameter("Must be between 0 and 100")
    if atype.is_cash_like:
        console.print("[yellow]Cash is never rebalanced; its target only affects the other types' totals[/yellow]")

    cfg = config_store.load()
    if pct == 0:
        cfg.target_allocation.pop(atype, None)
    else:
        cfg.target_allocation[atype] = pct / 100
    _save(cfg)

    total = sum(cfg.target_allocation.values(), Decimal("0"))
    console.print(f"[green]Target for {ASSET_TYPE_LABELS[atype]} set to {pct}%[/green]")
    if total != 1:
        console.print(f"[yellow]Warning: targets sum to {total * 100:.2f}%, not 100%[/yellow]")


@app.command("goal-add")
def goal_add(
    title: str = typer.Argument(..., help="Goal title"),
    value: str = typer.Argument(..., help="Target portfolio value in base currency"),
):
    """Add a savings goal."""
    amount = parse_decimal(value, "value")
    cfg = config_store.load()
    cfg.goals.append(Goal(title=title, value=amount))
    _save(cfg)
    console.print(f"[green]Goal '{title}' added ({amount:,.2f} {cfg.base_currency})[/green]")


@app.command("goal-remove")
def goal_remove(index: int = typer.Argument(..., help="Goal number as shown by 'pd config show'")):
    """Remove a savings goal."""
    cfg = config_store.load()
    if index < 1 or index > len(cfg.goals):
        console.print(f"[red]No goal #{index}[/red]")
        raise typer.Exit(1)
    goal = cfg.goals.pop(index - 1)
    _save(cfg)
    console.print(f"[green]Removed goal '{goal.title}'[/green]")


@app.command("time-frame")
def time_frame(frame: TimeFrame = typer.Argument(..., help="All, YTD, 1Y, 5Y or 10Y")):
    """Set the default history window."""
    cfg = config_store.load()
    cfg.history_time_frame = frame
    _save(cfg)
    console.print(f"[green]History time frame set to {frame.value}[/green]")
