"""Account management commands."""

import typer
from rich.console import Console
from rich.table import Table

from ...core.models import Account
from ...data.repositories.accounts_repo import AccountsRepository

app = typer.Typer(help="Manage accounts")
console = Console()
repo = AccountsRepository()


@app.command("add")
def add(
    name: str = typer.Argument(..., help="Account name (e.g. 'Broker', 'Savings')"),
    description: str = typer.Option("", "--desc", "-d", help="Description"),
):
    """Create a new account."""
    if repo.get_by_name(name):
        console.print(f"[red]Account '{name}' already exists[/red]")
        raise typer.Exit(1)
    a = repo.create(Account(name=name, description=description))
    console.print(f"[green]Account '{a.name}' created (ID: {a.id})[/green]")


@app.command("list")
def list_accounts():
    """List all accounts with their number of holdings."""
    accounts = repo.get_accounts()
    if not accounts:
        console.print("[yellow]No accounts yet. Create one with: pd account add <name>[/yellow]")
        return

    table = Table(title="Accounts")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Holdings", justify="right")

    for a in accounts:
        table.add_row(str(a.id), a.name, a.description, str(len(a.holdings)))

    console.print(table)


@app.command("remove")
def remove(
    account_id: int = typer.Argument(..., help="Account ID"),
    force: bool = typer.Option(False, "--force", "-f"),
):
    """Remove an account and all its holdings."""
    a = repo.get_by_id(account_id)
    if not a:
        console.print(f"[red]Account {account_id} not found[/red]")
        raise typer.Exit(1)

    if not force and not typer.confirm(f"Remove account '{a.name}' and all its holdings?"):
        console.print("Cancelled.")
        return

    repo.delete(account_id)
    console.print(f"[green]Removed account '{a.name}'[/green]")
