"""Commands: orgdash orgs - List, inspect and edit organizations."""

import typer
from rich.console import Console
from rich.table import Table

from orgdash.modules.organizations.schemas import DerivedMetrics, Organization
from orgdash.modules.organizations.services import OrganizationService
from orgdash.utils import run_command


console = Console()

app = typer.Typer(help="List, inspect and edit organizations.", no_args_is_help=True)


def _organizations_table(organizations: tuple[Organization, ...]) -> Table:
    table = Table(title="Organizations", show_header=True)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    table.add_column("Slug", no_wrap=True)
    table.add_column("Plan", style="green", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Members", justify="right")
    table.add_column("Created", no_wrap=True)

    for org in organizations:
        status = org.subscription.status if org.subscription else None
        members = str(org.membership_count)
        if org.membership_count_stale:
            members += " [yellow](stale)[/yellow]"
        table.add_row(
            org.id,
            org.name,
            org.slug,
            str(org.plan),
            str(status or "-"),
            members,
            org.created_at.date().isoformat(),
        )
    return table


def _print_metrics(metrics: DerivedMetrics) -> None:
    aggregate = metrics.aggregate

    summary = Table(title="Organization Metrics", show_header=False)
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", justify="right")
    summary.add_row("Total organizations", str(aggregate.total_organizations))
    summary.add_row("Active organizations", str(aggregate.active_organizations))
    summary.add_row("New organizations", str(aggregate.new_organizations))
    summary.add_row("Total members", str(aggregate.total_members))
    summary.add_row("Average members per org", str(aggregate.average_members_per_org))
    summary.add_row("Estimated monthly revenue", f"${aggregate.total_revenue:,.0f}")

    plans = Table(title="By Plan", show_header=True)
    plans.add_column("Plan", style="green")
    plans.add_column("Organizations", justify="right")
    plans.add_column("Revenue", justify="right")
    for entry in metrics.plan_breakdown:
        plans.add_row(entry.plan, str(entry.count), f"${entry.revenue:,.0f}")

    sizes = Table(title="By Size", show_header=True)
    sizes.add_column("Size")
    sizes.add_column("Organizations", justify="right")
    for bucket in metrics.size_histogram:
        sizes.add_row(bucket.size, str(bucket.count))

    for table in (summary, plans, sizes):
        console.print()
        console.print(table)
    console.print()


@app.command(name="list")
def list_organizations() -> None:
    """List the newest organizations."""
    organizations = run_command(console, lambda service: service.fetch_all())

    if not organizations:
        console.print("[yellow]No organizations found.[/yellow]")
        return

    console.print()
    console.print(_organizations_table(organizations))
    console.print()


@app.command(name="metrics")
def show_metrics() -> None:
    """Show aggregate counts, plan breakdown and size distribution."""

    async def _load(service: OrganizationService) -> DerivedMetrics:
        await service.fetch_all()
        return service.metrics()

    _print_metrics(run_command(console, _load))


@app.command(name="create")
def create_organization(
    name: str = typer.Argument(..., help="Organization name"),
    domain: str | None = typer.Option(None, "--domain", "-d", help="Primary domain"),
    website: str | None = typer.Option(None, "--website", "-w", help="Website URL"),
) -> None:
    """Create an organization."""
    data = {"name": name, "domain": domain, "website": website}
    org = run_command(console, lambda service: service.create(data))
    console.print(f"[green]✓[/green] Created organization: {org.name} ({org.id})")


@app.command(name="update")
def update_organization(
    organization_id: str = typer.Argument(..., help="Organization ID"),
    name: str | None = typer.Option(None, "--name", "-n", help="New name"),
    domain: str | None = typer.Option(None, "--domain", "-d", help="New domain"),
    website: str | None = typer.Option(None, "--website", "-w", help="New website URL"),
) -> None:
    """Update an organization's name, domain or website."""
    data = {"name": name, "domain": domain, "website": website}
    org = run_command(console, lambda service: service.update(organization_id, data))
    console.print(f"[green]✓[/green] Updated organization: {org.name} ({org.id})")


@app.command(name="delete")
def delete_organization(
    organization_id: str = typer.Argument(..., help="Organization ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
) -> None:
    """Delete an organization."""
    if not force:
        confirm = typer.confirm(
            f"Are you sure you want to delete organization '{organization_id}'?\n"
            "This cannot be undone."
        )
        if not confirm:
            console.print("[yellow]Cancelled.[/yellow]")
            raise typer.Exit(0)

    run_command(console, lambda service: service.delete(organization_id))
    console.print(f"[green]✓[/green] Deleted organization: {organization_id}")

