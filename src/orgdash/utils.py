"""Helpers shared by the CLI commands."""

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

import typer
from rich.console import Console

from orgdash.config import Settings, get_settings
from orgdash.core.errors import OrgDashError
from orgdash.core.graphql import GraphQLClient
from orgdash.modules.organizations.services import OrganizationService
from orgdash.modules.organizations.store import OrganizationStore


T = TypeVar("T")


def build_client(settings: Settings) -> GraphQLClient:
    """Create the GraphQL client used by CLI commands."""
    return GraphQLClient.from_settings(settings)


@asynccontextmanager
async def open_service(
    settings: Settings | None = None,
) -> AsyncIterator[OrganizationService]:
    """Yield a service with a fresh, empty store for one command."""
    settings = settings or get_settings()
    async with build_client(settings) as client:
        yield OrganizationService.from_settings(client, OrganizationStore(), settings)


def run_command(
    console: Console,
    action: Callable[[OrganizationService], Awaitable[T]],
) -> T:
    """Run an async action against a new service, exiting 1 on console errors."""

    async def _run() -> T:
        async with open_service() as service:
            return await action(service)

    try:
        return asyncio.run(_run())
    except OrgDashError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e
