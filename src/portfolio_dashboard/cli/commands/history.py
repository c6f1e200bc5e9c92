"""History commands: manual backfill, display, export and import of the daily value series."""

import asyncio
import datetime
import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ...core.exceptions import PersistenceError
from ...core.history import HistoryManager, history_from_wire, history_to_wire
from ...core.models import AssetValue, HistoryEntry
from ...core.windowing import TimeFrame, project
from ...data.repositories.history_repo import HistoryRepository
from ..context import config_store, parse_asset_type, parse_decimal, parse_pairs
from .dashboard import print_history_chart

app = typer.Typer(help="Portfolio value history")
console = Console()


async def _load_manager() -> HistoryManager:
    manager = HistoryManager(HistoryRepository())
    await manager.load()
    return manager


@app.command("add")
def add(
    date: str = typer.Argument(..., help="Date YYYY-MM-DD"),
    value: str = typer.Argument(..., help="Total portfolio value in base currency"),
    asset: Optional[list[str]] = typer.Option(None, "--asset", "-a", help="TYPE=VALUE per asset type, repeatable"),
):
    """Add or correct the portfolio value for a past day."""
    try:
        day = datetime.date.fromisoformat(date)
    except ValueError:
        raise typer.BadParameter(f"Invalid date {date!r}, expected YYYY-MM-DD")
    entry = HistoryEntry(
        date=day,
        value=parse_decimal(value, "value"),
        assets=tuple(
            AssetValue(asset_type=parse_asset_type(t).broad_type, value=v)
            for t, v in parse_pairs(asset, "--asset").items()
        ),
    )

    async def run():
        manager = await _load_manager()
        replaced = any(e.date == day for e in manager.entries)
        manager.insert_manual_entry(entry)
        await manager.flush()
        return replaced

    replaced = asyncio.run(run())
    verb = "Replaced" if replaced else "Added"
    console.print(f"[green]{verb} history entry for {day.isoformat()}: {entry.value:,.2f}[/green]")


@app.command("show")
def show(
    time_frame: Optional[TimeFrame] = typer.Option(None, "--time-frame", "-t", help="History window"),
):
    """Show stored history per asset type for a time window."""
    cfg = config_store.load()
    tf = time_frame or cfg.history_time_frame
    manager = asyncio.run(_load_manager())
    print_history_chart(project(manager.history, tf), cfg.base_currency, tf)


@app.command("export")
def export(path: Path = typer.Argument(..., help="Output JSON file")):
    """Export the history series as JSON."""
    manager = asyncio.run(_load_manager())
    path.write_text(json.dumps(history_to_wire(manager.history), indent=2), encoding="utf-8")
    console.print(f"[green]Exported {len(manager.entries)} entries to {path}[/green]")


@app.command("import")
def import_history(path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file to import")):
    """Merge entries from a JSON export; imported days replace stored ones."""
    try:
        imported = history_from_wire(json.loads(path.read_text(encoding="utf-8")))
    except (ValueError, PersistenceError) as e:
        console.print(f"[red]Cannot import {path}: {e}[/red]")
        raise typer.Exit(1)

    async def run():
        manager = await _load_manager()
        for entry in imported.entries:
            manager.insert_manual_entry(entry)
        await manager.flush()

    asyncio.run(run())
    console.print(f"[green]Imported {len(imported.entries)} entries from {path}[/green]")
