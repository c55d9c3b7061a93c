"""Tests for orgdash CLI commands."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from typer.testing import CliRunner

from orgdash import __version__
from orgdash.cli import app
from orgdash.core.graphql import GraphQLClient
from tests.factories.organization import list_response, organization_payload


runner = CliRunner()

Responder = Callable[[dict[str, Any]], httpx.Response]


class FakeAPI:
    """Answers GraphQL requests by operation name and records them."""

    def __init__(self, responders: dict[str, Responder | dict[str, Any]]) -> None:
        self.responders = responders
        self.requests: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        responder = self.responders[body["operationName"]]
        if callable(responder):
            return responder(body)
        return httpx.Response(200, json={"data": responder})

    @property
    def operations(self) -> list[str]:
        return [r["operationName"] for r in self.requests]


@pytest.fixture
def fake_api(monkeypatch: pytest.MonkeyPatch) -> Callable[..., FakeAPI]:
    """Route every command's GraphQL client through an in-memory API."""

    def install(**responders: Responder | dict[str, Any]) -> FakeAPI:
        api = FakeAPI(responders)

        def build_client(settings):
            http_client = httpx.AsyncClient(transport=httpx.MockTransport(api))
            return GraphQLClient("http://testserver/graphql", "test-token", http_client=http_client)

        monkeypatch.setattr("orgdash.utils.build_client", build_client)
        return api

    return install


class TestRootCommand:
    """Tests for the top-level app."""

    def test_version(self) -> None:
        """--version prints the package version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestOrgsCommands:
    """Tests for orgdash orgs."""

    def test_list_shows_organizations(self, fake_api) -> None:
        """Organizations from the API are shown in a table."""
        fake_api(
            Orgs=list_response(
                organization_payload("1", name="Acme", slug="acme"),
                organization_payload("2", name="Globex", slug="globex"),
            )
        )

        result = runner.invoke(app, ["orgs", "list"])

        assert result.exit_code == 0, result.stdout
        assert "Acme" in result.stdout
        assert "Globex" in result.stdout

    def test_list_empty(self, fake_api) -> None:
        """An empty result says so."""
        fake_api(Orgs=list_response())

        result = runner.invoke(app, ["orgs", "list"])

        assert result.exit_code == 0
        assert "No organizations found." in result.stdout

    def test_metrics(self, fake_api) -> None:
        """Metrics show the aggregate, plan and size tables."""
        fake_api(
            Orgs=list_response(
                organization_payload(
                    "1",
                    membershipCount=12,
                    subscription={"plan": "STARTER", "status": "ACTIVE"},
                ),
                organization_payload("2", membershipCount=3),
            )
        )

        result = runner.invoke(app, ["orgs", "metrics"])

        assert result.exit_code == 0, result.stdout
        assert "Organization Metrics" in result.stdout
        assert "STARTER" in result.stdout
        assert "FREE" in result.stdout
        assert "$29" in result.stdout
        assert "6-15 members" in result.stdout
        assert "50+ members" in result.stdout

    def test_api_error_exits_1(self, fake_api) -> None:
        """A failed request prints the server message and exits 1."""
        fake_api(
            Orgs=lambda body: httpx.Response(
                500, json={"errors": [{"message": "Database unavailable"}]}
            )
        )

        result = runner.invoke(app, ["orgs", "list"])

        assert result.exit_code == 1
        assert "Database unavailable" in result.stdout

    def test_create(self, fake_api) -> None:
        """Create sends the cleaned input and confirms."""
        api = fake_api(
            CreateOrg={"createOrganization": organization_payload("9", name="Acme", slug="acme")}
        )

        result = runner.invoke(app, ["orgs", "create", "Acme", "--domain", "acme.io"])

        assert result.exit_code == 0, result.stdout
        assert "Created organization: Acme (9)" in result.stdout
        assert api.requests[0]["variables"] == {"input": {"name": "Acme", "domain": "acme.io"}}

    def test_create_blank_name_never_calls_api(self, fake_api) -> None:
        """Validation errors are reported without a request."""
        api = fake_api()

        result = runner.invoke(app, ["orgs", "create", "   "])

        assert result.exit_code == 1
        assert "Error:" in result.stdout
        assert api.requests == []

    def test_update_requires_a_field(self, fake_api) -> None:
        """An update with no options is refused."""
        api = fake_api()

        result = runner.invoke(app, ["orgs", "update", "1"])

        assert result.exit_code == 1
        assert "At least one field" in result.stdout
        assert api.requests == []

    def test_update(self, fake_api) -> None:
        """Update confirms with the server's record."""
        api = fake_api(
            UpdateOrg={"updateOrganization": organization_payload("1", name="Renamed")}
        )

        result = runner.invoke(app, ["orgs", "update", "1", "--name", "Renamed"])

        assert result.exit_code == 0, result.stdout
        assert "Updated organization: Renamed (1)" in result.stdout
        assert api.requests[0]["variables"] == {"id": "1", "input": {"name": "Renamed"}}

    def test_delete_cancelled(self, fake_api) -> None:
        """Answering no to the prompt deletes nothing."""
        api = fake_api()

        result = runner.invoke(app, ["orgs", "delete", "1"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled." in result.stdout
        assert api.requests == []

    def test_delete_forced(self, fake_api) -> None:
        """--force skips the prompt."""
        api = fake_api(DeleteOrg={"deleteOrganization": True})

        result = runner.invoke(app, ["orgs", "delete", "1", "--force"])

        assert result.exit_code == 0, result.stdout
        assert "Deleted organization: 1" in result.stdout
        assert api.operations == ["DeleteOrg"]


class TestMembersCommands:
    """Tests for orgdash members."""

    def test_list(self, fake_api) -> None:
        """Members are listed with their roles."""
        fake_api(
            OrgMembers={
                "organization": organization_payload(
                    "1",
                    name="Acme",
                    members=[
                        {
                            "role": "OWNER",
                            "joinedAt": "2024-01-01T00:00:00Z",
                            "user": {"id": "u-1", "email": "ada@example.com", "firstName": "Ada"},
                        }
                    ],
                )
            }
        )

        result = runner.invoke(app, ["members", "list", "1"])

        assert result.exit_code == 0, result.stdout
        assert "Members of Acme" in result.stdout
        assert "OWNER" in result.stdout

    def test_list_unknown_org(self, fake_api) -> None:
        """A missing organization is an error."""
        fake_api(OrgMembers={"organization": None})

        result = runner.invoke(app, ["members", "list", "nope"])

        assert result.exit_code == 1
        assert "Organization not found" in result.stdout

    def test_add_with_role(self, fake_api) -> None:
        """Role names are case-insensitive."""
        api = fake_api(AddMember={"addOrganizationMember": {"id": "m-1"}})

        result = runner.invoke(app, ["members", "add", "1", "u-1", "--role", "admin"])

        assert result.exit_code == 0, result.stdout
        assert "membership m-1" in result.stdout
        assert api.requests[0]["variables"]["role"] == "ADMIN"

    def test_remove(self, fake_api) -> None:
        """Remove confirms the removal."""
        fake_api(RemoveMember={"removeOrganizationMember": True})

        result = runner.invoke(app, ["members", "remove", "1", "u-1"])

        assert result.exit_code == 0, result.stdout
        assert "Removed u-1 from 1" in result.stdout

    def test_role(self, fake_api) -> None:
        """Role changes confirm the new role."""
        fake_api(UpdateMemberRole={"updateOrganizationMemberRole": True})

        result = runner.invoke(app, ["members", "role", "1", "u-1", "owner"])

        assert result.exit_code == 0, result.stdout
        assert "u-1 is now OWNER in 1" in result.stdout


class TestUsersCommands:
    """Tests for orgdash users."""

    def test_search(self, fake_api) -> None:
        """Matching users are listed."""
        api = fake_api(
            SearchUsers={
                "users": {
                    "edges": [
                        {"node": {"id": "u-1", "email": "ada@example.com", "firstName": "Ada", "lastName": "Lovelace"}}
                    ]
                }
            }
        )

        result = runner.invoke(app, ["users", "search", "ada", "--limit", "3"])

        assert result.exit_code == 0, result.stdout
        assert "Ada Lovelace" in result.stdout
        assert api.requests[0]["variables"] == {"search": "ada", "limit": 3}

    def test_search_no_results(self, fake_api) -> None:
        """No matches prints a notice."""
        fake_api(SearchUsers={"users": {"edges": []}})

        result = runner.invoke(app, ["users", "search", "zzz"])

        assert result.exit_code == 0
        assert "No matching users." in result.stdout
