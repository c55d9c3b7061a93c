"""Command: orgdash users search - Find users to add as members."""

import typer
from rich.console import Console
from rich.table import Table

from orgdash.core.constants import DEFAULT_USER_SEARCH_LIMIT
from orgdash.utils import run_command


console = Console()

app = typer.Typer(help="Find users.", no_args_is_help=True)


@app.command(name="search")
def search_users(
    term: str = typer.Argument(..., help="Name or email to search for"),
    limit: int = typer.Option(
        DEFAULT_USER_SEARCH_LIMIT, "--limit", "-l", min=1, help="Maximum results"
    ),
) -> None:
    """Search users by name or email."""
    users = run_command(console, lambda service: service.search_users(term, limit))

    if not users:
        console.print("[yellow]No matching users.[/yellow]")
        return

    table = Table(title=f"Users matching '{term}'", show_header=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    for user in users:
        table.add_row(user.id, user.display_name, user.email)

    console.print()
    console.print(table)
    console.print()
