"""Main orgdash CLI application."""

import typer
from rich.console import Console

from orgdash import __version__
from orgdash.commands import members, orgs, users
from orgdash.config import get_settings
from orgdash.core.logging import configure_logging


console = Console()

app = typer.Typer(
    name="orgdash",
    help="Inspect and manage organizations through the admin API.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Register command groups
app.add_typer(orgs.app, name="orgs")
app.add_typer(members.app, name="members")
app.add_typer(users.app, name="users")


@app.callback(invoke_without_command=True)
def main_callback(
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit."
    ),
) -> None:
    """orgdash - organization metrics and management."""
    if version:
        console.print(f"[bold cyan]orgdash[/bold cyan] version {__version__}")
        raise typer.Exit()
    configure_logging(get_settings())


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
