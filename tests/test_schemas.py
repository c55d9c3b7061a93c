"""Tests for orgdash.modules.organizations.schemas."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from orgdash.modules.organizations.schemas import (
    Member,
    Organization,
    OrganizationCreate,
    OrganizationDetail,
    OrganizationUpdate,
    Plan,
    Subscription,
    UserSummary,
)
from tests.factories.organization import organization_payload


class TestOrganization:
    """Tests for the Organization wire model."""

    def test_parses_camel_case_payload(self) -> None:
        """API payloads use camelCase keys."""
        org = Organization.model_validate(
            organization_payload(
                "1",
                membershipCount=7,
                subscription={"plan": "BUSINESS", "status": "ACTIVE", "monthlyRevenue": 199},
            )
        )

        assert org.membership_count == 7
        assert org.created_at == datetime(2024, 5, 1, 12, tzinfo=UTC)
        assert org.plan == Plan.BUSINESS
        assert org.subscription.monthly_revenue == 199
        assert org.is_active is True

    def test_no_subscription_is_free_and_inactive(self) -> None:
        """A missing subscription means the FREE plan."""
        org = Organization.model_validate(organization_payload())

        assert org.plan == "FREE"
        assert org.is_active is False

    def test_null_membership_count_is_zero(self) -> None:
        """A null count is read as zero."""
        org = Organization.model_validate(organization_payload(membershipCount=None))

        assert org.membership_count == 0

    def test_negative_membership_count_rejected(self) -> None:
        """Counts are never negative."""
        with pytest.raises(ValidationError):
            Organization.model_validate(organization_payload(membershipCount=-1))

    def test_naive_timestamps_are_utc(self) -> None:
        """Timestamps without an offset are taken as UTC."""
        org = Organization.model_validate(
            organization_payload(createdAt="2024-01-02T03:04:05")
        )

        assert org.created_at.tzinfo is not None
        assert org.created_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)

    @pytest.mark.parametrize("plan", [None, ""])
    def test_missing_plan_is_free(self, plan) -> None:
        """A null or empty plan on a subscription means FREE."""
        sub = Subscription.model_validate({"plan": plan, "status": "ACTIVE"})

        assert sub.plan == Plan.FREE

    def test_unknown_plan_and_status_accepted(self) -> None:
        """Values the console does not know are kept as strings."""
        sub = Subscription.model_validate({"plan": "LEGACY", "status": "PAUSED"})

        assert sub.plan == "LEGACY"
        assert sub.is_active is False

    def test_is_frozen(self) -> None:
        """Records are immutable once parsed."""
        org = Organization.model_validate(organization_payload())

        with pytest.raises(ValidationError):
            org.name = "changed"

    def test_stale_flag_not_serialized(self) -> None:
        """The local stale flag never goes back over the wire."""
        org = Organization.model_validate(organization_payload())
        stale = org.model_copy(update={"membership_count_stale": True})

        assert "membership_count_stale" not in stale.model_dump()
        assert stale.membership_count_stale is True


class TestOrganizationCreate:
    """Tests for OrganizationCreate."""

    def test_strips_name_and_blank_optionals(self) -> None:
        """The name is trimmed; blank domain and website become None."""
        data = OrganizationCreate(name="  Acme ", domain=" ", website="")

        assert data.name == "Acme"
        assert data.domain is None
        assert data.website is None

    @pytest.mark.parametrize("name", ["", "   "])
    def test_blank_name_rejected(self, name: str) -> None:
        """A name is required."""
        with pytest.raises(ValidationError):
            OrganizationCreate(name=name)


class TestOrganizationUpdate:
    """Tests for OrganizationUpdate."""

    def test_requires_a_field(self) -> None:
        """An update that changes nothing is refused."""
        with pytest.raises(ValidationError, match="At least one field"):
            OrganizationUpdate()

    def test_partial_dump(self) -> None:
        """Only given fields are sent."""
        data = OrganizationUpdate(website="https://acme.io")

        assert data.model_dump(exclude_none=True) == {"website": "https://acme.io"}

    def test_blank_name_rejected(self) -> None:
        """A whitespace name is not a valid rename."""
        with pytest.raises(ValidationError):
            OrganizationUpdate(name="   ")


class TestMembers:
    """Tests for membership schemas."""

    def test_display_name_falls_back_to_email(self) -> None:
        """Users without a name are shown by email."""
        assert UserSummary(id="u", email="a@b.c").display_name == "a@b.c"
        assert (
            UserSummary(id="u", email="a@b.c", first_name="Ada").display_name == "Ada"
        )

    def test_detail_summary_counts_members(self) -> None:
        """The summary record uses the length of the member list."""
        member = {"role": "ADMIN", "user": {"id": "u-1", "email": "a@b.c"}}
        detail = OrganizationDetail.model_validate(
            organization_payload("1", membershipCount=9, members=[member, member])
        )

        summary = detail.summary()

        assert type(summary) is Organization
        assert summary.membership_count == 2
        assert summary.id == "1"
        assert isinstance(detail.members[0], Member)
        assert detail.members[0].role == "ADMIN"
