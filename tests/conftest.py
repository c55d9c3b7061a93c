"""Pytest configuration and shared fixtures."""

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
import structlog

from orgdash.config import get_settings
from orgdash.core.graphql import GraphQLClient
from orgdash.modules.organizations.services import OrganizationService
from orgdash.modules.organizations.store import OrganizationStore


@pytest.fixture(autouse=True)
def reset_logging_and_settings() -> Generator[None, None, None]:
    """Give every test default structlog config and freshly read settings."""
    get_settings.cache_clear()
    yield
    structlog.reset_defaults()
    get_settings.cache_clear()


@pytest.fixture
def mock_client() -> AsyncMock:
    """A GraphQL client whose ``execute`` is an AsyncMock."""
    return AsyncMock(spec=GraphQLClient)


@pytest.fixture
def store() -> OrganizationStore:
    """An empty organization store."""
    return OrganizationStore()


@pytest.fixture
def service(mock_client: AsyncMock, store: OrganizationStore) -> OrganizationService:
    """Service wired to the mock client and the empty store."""
    return OrganizationService(client=mock_client, store=store)
