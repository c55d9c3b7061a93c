"""Commands: orgdash members - View and manage organization members."""

import typer
from rich.console import Console
from rich.table import Table

from orgdash.modules.organizations.schemas import MemberRole
from orgdash.utils import run_command


console = Console()

app = typer.Typer(help="View and manage organization members.", no_args_is_help=True)


@app.command(name="list")
def list_members(
    organization_id: str = typer.Argument(..., help="Organization ID"),
) -> None:
    """Show the current members of an organization."""
    detail = run_command(console, lambda service: service.get_members(organization_id))

    if not detail.members:
        console.print(f"[yellow]{detail.name} has no members.[/yellow]")
        return

    table = Table(title=f"Members of {detail.name}", show_header=True)
    table.add_column("User ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    table.add_column("Role", style="green", no_wrap=True)
    table.add_column("Joined", no_wrap=True)

    for member in detail.members:
        table.add_row(
            member.user.id,
            member.user.display_name,
            member.user.email,
            str(member.role),
            member.joined_at.date().isoformat() if member.joined_at else "-",
        )

    console.print()
    console.print(table)
    console.print()


@app.command(name="add")
def add_member(
    organization_id: str = typer.Argument(..., help="Organization ID"),
    user_id: str = typer.Argument(..., help="User ID to add"),
    role: MemberRole = typer.Option(
        MemberRole.MEMBER, "--role", "-r", case_sensitive=False, help="Member role"
    ),
) -> None:
    """Add a user to an organization."""
    membership_id = run_command(
        console, lambda service: service.add_member(organization_id, user_id, role)
    )
    console.print(
        f"[green]✓[/green] Added {user_id} to {organization_id} as {role.value} "
        f"(membership {membership_id})"
    )


@app.command(name="remove")
def remove_member(
    organization_id: str = typer.Argument(..., help="Organization ID"),
    user_id: str = typer.Argument(..., help="User ID to remove"),
) -> None:
    """Remove a user from an organization."""
    run_command(console, lambda service: service.remove_member(organization_id, user_id))
    console.print(f"[green]✓[/green] Removed {user_id} from {organization_id}")


@app.command(name="role")
def change_role(
    organization_id: str = typer.Argument(..., help="Organization ID"),
    user_id: str = typer.Argument(..., help="User ID"),
    role: MemberRole = typer.Argument(..., case_sensitive=False, help="New role"),
) -> None:
    """Change a member's role."""
    run_command(
        console,
        lambda service: service.update_member_role(organization_id, user_id, role),
    )
    console.print(f"[green]✓[/green] {user_id} is now {role.value} in {organization_id}")
