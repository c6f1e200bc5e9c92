"""Dashboard commands: totals, allocation, goals, rebalancing and history."""

import asyncio
from decimal import Decimal
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ...core.models import ASSET_TYPE_LABELS, HistoryChart
from ...core.rebalancer import Rebalancer
from ...core.windowing import TimeFrame
from ...services.dashboard import DashboardService, DashboardSnapshot
from ..context import build_service, config_store

app = typer.Typer(help="Portfolio dashboard")
console = Console()

RATES_HELP = "Exchange-rate source: frankfurter, yahoo or static"
RATE_HELP = "Fixed rate CUR=RATE (base units per 1 CUR), repeatable"


async def _refresh(service: DashboardService) -> Optional[DashboardSnapshot]:
    snapshot = await service.refresh()
    await service.history.flush()
    return snapshot


def _allocation_table(title: str, rows: list[tuple[str, Decimal]]) -> Table:
    table = Table(title=title, title_justify="left")
    table.add_column("Name", style="bold")
    table.add_column("%", justify="right")
    for label, pct in rows:
        table.add_row(label, f"{pct:.2f}%")
    return table


def print_history_chart(chart: HistoryChart, currency: str, time_frame: TimeFrame) -> None:
    if not chart.labels:
        console.print(f"[yellow]No history for time frame {time_frame.value}[/yellow]")
        return
    table = Table(title=f"Portfolio History ({time_frame.value}, {currency})", title_justify="left")
    table.add_column("Date", style="dim")
    for asset_type in chart.series:
        table.add_column(ASSET_TYPE_LABELS[asset_type], justify="right")
    table.add_column("Total", justify="right", style="bold")
    for i, label in enumerate(chart.labels):
        values = [chart.series[t][i] for t in chart.series]
        table.add_row(label, *(f"{v:,.2f}" for v in values), f"{sum(values, Decimal('0')):,.2f}")
    console.print(table)


@app.command("show")
def show(
    rates: str = typer.Option("frankfurter", "--rates", help=RATES_HELP),
    rate: Optional[list[str]] = typer.Option(None, "--rate", help=RATE_HELP),
    time_frame: Optional[TimeFrame] = typer.Option(None, "--time-frame", "-t", help="History window"),
    include_unheld: bool = typer.Option(False, "--include-unheld", help="Suggest buys for targeted types not held yet"),
):
    """Compute the dashboard and record today's portfolio value."""
    cfg = config_store.load()
    if time_frame is not None:
        cfg.history_time_frame = time_frame
    service = build_service(rates, rate, cfg, include_unheld=include_unheld)
    snap = asyncio.run(_refresh(service))
    if snap is None:
        console.print("[red]No data, see the log above (missing exchange rate or unreadable accounts)[/red]")
        raise typer.Exit(1)

    cur = snap.base_currency
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("Label", style="dim")
    summary.add_column("Value", justify="right")
    summary.add_row("[bold]Portfolio Value[/bold]", f"[bold]{snap.total_value:,.2f} {cur}[/bold]")
    summary.add_row(
        f"Monthly spend limit ({cfg.withdrawal_rate * 100:.1f}%/yr)",
        f"{snap.monthly_spend_limit:,.2f} {cur}",
    )
    console.print()
    console.print(summary)
    console.print()

    if snap.goals:
        goals = Table(title="Goals", title_justify="left")
        goals.add_column("Goal", style="bold")
        goals.add_column("Target", justify="right")
        goals.add_column("Completed", justify="right", style="green")
        goals.add_column("Remaining", justify="right")
        for g in snap.goals:
            goals.add_row(g.title, f"{g.target_value:,.2f}", f"{g.completed_pct:.2f}%", f"{g.remaining_pct:.2f}%")
        console.print(goals)

    console.print(_allocation_table("Asset Allocation", snap.asset_allocation))
    console.print(_allocation_table("Currency Allocation", snap.currency_allocation))
    for asset_type, rows in snap.currency_by_asset.items():
        if rows:
            console.print(_allocation_table(f"{ASSET_TYPE_LABELS[asset_type]} by Currency", rows))
    for asset_type, rows in snap.regions_by_asset.items():
        if rows:
            console.print(_allocation_table(f"{ASSET_TYPE_LABELS[asset_type]} by Region", rows))
    for asset_type, rows in snap.holdings_by_asset.items():
        if rows:
            console.print(_allocation_table(f"{ASSET_TYPE_LABELS[asset_type]} by Holding", rows))

    if snap.rebalancing_setup:
        _print_steps(snap, cur)
    else:
        console.print("[dim]No target allocation set. Run: pd config target <type> <percent>[/dim]")

    print_history_chart(snap.history_chart, cur, snap.time_frame)


def _print_steps(snap: DashboardSnapshot, cur: str) -> None:
    if not snap.rebalance_steps:
        console.print("[green]Portfolio matches the target allocation.[/green]")
        return
    table = Table(title="Rebalancing", title_justify="left")
    table.add_column("Action", style="bold")
    table.add_column("Asset")
    table.add_column(f"Value ({cur})", justify="right")
    table.add_column("% of holding", justify="right")
    for s in snap.rebalance_steps:
        color = "green" if s.action == "buy" else "red"
        pct = f"{abs(s.percentage) * 100:.2f}%" if s.percentage is not None else "new"
        table.add_row(f"[{color}]{s.action.upper()}[/{color}]", s.asset_name, f"{abs(s.value):,.2f}", pct)
    console.print(table)


@app.command("rebalance")
def rebalance(
    rates: str = typer.Option("frankfurter", "--rates", help=RATES_HELP),
    rate: Optional[list[str]] = typer.Option(None, "--rate", help=RATE_HELP),
    include_unheld: bool = typer.Option(False, "--include-unheld", help="Suggest buys for targeted types not held yet"),
):
    """Check deviation from the target allocation and suggest trades."""
    cfg = config_store.load()
    if not cfg.target_allocation:
        console.print("[yellow]No target allocations set. Run: pd config target <type> <percent>[/yellow]")
        return

    service = build_service(rates, rate, cfg, include_unheld=include_unheld)
    snap = asyncio.run(_refresh(service))
    if snap is None:
        console.print("[red]No data, see the log above[/red]")
        raise typer.Exit(1)

    totals = snap.totals
    deviations = Rebalancer(totals.by_asset_type, totals.total_value, cfg.target_allocation).check_deviation()
    table = Table(title="Allocation Check")
    table.add_column("Asset Type", style="bold")
    table.add_column("Current %", justify="right")
    table.add_column("Target %", justify="right")
    table.add_column("Deviation", justify="right")
    for asset_type, info in deviations.items():
        dev = info["deviation"] * 100
        color = "dim" if not info["rebalanceable"] else ("red" if dev else "green")
        table.add_row(
            ASSET_TYPE_LABELS[asset_type],
            f"{info['current'] * 100:.2f}%",
            f"{info['target'] * 100:.2f}%",
            f"[{color}]{dev:+.2f}%[/{color}]",
        )
    console.print(table)
    _print_steps(snap, snap.base_currency)
