"""Pydantic schemas for organizations, memberships and derived metrics."""

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from orgdash.core.constants import MAX_DOMAIN_LENGTH, MAX_NAME_LENGTH, MAX_URL_LENGTH


# ============================================================
# Enumerations
# ============================================================


class Plan(StrEnum):
    """Subscription plan tier."""

    FREE = "FREE"
    STARTER = "STARTER"
    PROFESSIONAL = "PROFESSIONAL"
    BUSINESS = "BUSINESS"
    ENTERPRISE = "ENTERPRISE"


class SubscriptionStatus(StrEnum):
    """Known subscription states. The server may send others."""

    ACTIVE = "ACTIVE"
    TRIALING = "TRIALING"
    PAST_DUE = "PAST_DUE"
    CANCELLED = "CANCELLED"
    INCOMPLETE = "INCOMPLETE"
    UNPAID = "UNPAID"


ACTIVE_STATUSES = frozenset(
    {SubscriptionStatus.ACTIVE.value, SubscriptionStatus.TRIALING.value}
)


class MemberRole(StrEnum):
    """Role of a user inside an organization."""

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class WireModel(BaseModel):
    """Base for models read from the API (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ============================================================
# Organization Schemas
# ============================================================


class Subscription(WireModel):
    """Subscription attached to an organization."""

    plan: Plan | str = Plan.FREE
    status: SubscriptionStatus | str | None = None
    monthly_revenue: float | None = None
    trial_end: datetime | None = None
    current_period_end: datetime | None = None

    @field_validator("plan", mode="before")
    @classmethod
    def default_missing_plan(cls, v: str | None) -> str:
        """Treat a null or empty plan as FREE."""
        return v or Plan.FREE

    @property
    def is_active(self) -> bool:
        """Whether this subscription counts toward active organizations."""
        return self.status in ACTIVE_STATUSES


class Organization(WireModel):
    """One tenant as held by the organization store.

    ``membership_count`` is denormalized by the server. Membership mutations
    do not touch it; they set ``membership_count_stale`` instead, and the flag
    is cleared by the next fetch of this organization.
    """

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1)
    domain: str | None = None
    website: str | None = None
    logo: str | None = None
    created_at: datetime
    updated_at: datetime
    subscription: Subscription | None = None
    membership_count: int = Field(0, ge=0)
    membership_count_stale: bool = Field(False, exclude=True)

    @field_validator("membership_count", mode="before")
    @classmethod
    def default_missing_count(cls, v: int | None) -> int:
        """Treat a null membership count as zero."""
        return 0 if v is None else v

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Server timestamps without an offset are UTC."""
        return v if v.tzinfo is not None else v.replace(tzinfo=UTC)

    @property
    def plan(self) -> str:
        """Plan tier, with no subscription meaning FREE."""
        if self.subscription is None:
            return Plan.FREE
        return self.subscription.plan

    @property
    def is_active(self) -> bool:
        """Whether the subscription status is ACTIVE or TRIALING."""
        return self.subscription is not None and self.subscription.is_active


class OrganizationCreate(BaseModel):
    """Input for createOrganization."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    domain: str | None = Field(None, max_length=MAX_DOMAIN_LENGTH)
    website: str | None = Field(None, max_length=MAX_URL_LENGTH)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        """Strip the name and reject whitespace-only values."""
        v = v.strip()
        if not v:
            raise ValueError("Organization name is required")
        return v

    @field_validator("domain", "website")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Drop empty optional fields instead of sending empty strings."""
        if v is None:
            return None
        return v.strip() or None


class OrganizationUpdate(BaseModel):
    """Partial input for updateOrganization. At least one field must be set."""

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    domain: str | None = Field(None, max_length=MAX_DOMAIN_LENGTH)
    website: str | None = Field(None, max_length=MAX_URL_LENGTH)
    logo: str | None = Field(None, max_length=MAX_URL_LENGTH)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str | None) -> str | None:
        """Reject a name that is only whitespace."""
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Organization name cannot be blank")
        return v

    @model_validator(mode="after")
    def require_any_field(self) -> "OrganizationUpdate":
        """Reject an update that changes nothing."""
        if all(getattr(self, name) is None for name in type(self).model_fields):
            raise ValueError("At least one field must be provided")
        return self


# ============================================================
# Membership Schemas
# ============================================================


class UserSummary(WireModel):
    """A user as returned by search and membership queries."""

    id: str
    email: str
    first_name: str | None = None
    last_name: str | None = None

    @property
    def display_name(self) -> str:
        """First and last name, falling back to the email address."""
        full = " ".join(p for p in (self.first_name, self.last_name) if p)
        return full or self.email


class Member(WireModel):
    """A membership of one user in one organization."""

    user: UserSummary
    role: MemberRole | str = MemberRole.MEMBER
    joined_at: datetime | None = None


class OrganizationDetail(Organization):
    """An organization with its full membership list (member view)."""

    members: list[Member] = Field(default_factory=list)

    def summary(self) -> Organization:
        """The store record for this organization, with a fresh member count."""
        data = self.model_dump(exclude={"members"})
        data["membership_count"] = len(self.members)
        return Organization.model_validate(data)


# ============================================================
# Derived Metrics Schemas
# ============================================================


class AggregateMetrics(BaseModel):
    """Headline counts for the organizations dashboard."""

    model_config = ConfigDict(frozen=True)

    total_organizations: int = 0
    active_organizations: int = 0
    new_organizations: int = 0
    total_members: int = 0
    average_members_per_org: int = 0
    total_revenue: float = 0


class PlanBreakdownEntry(BaseModel):
    """Organization count and estimated revenue for one plan."""

    model_config = ConfigDict(frozen=True)

    plan: str
    count: int
    revenue: float


class SizeBucket(BaseModel):
    """Organizations whose member count falls in [min_members, max_members]."""

    model_config = ConfigDict(frozen=True)

    size: str
    min_members: int
    max_members: int | None = Field(None, description="None means unbounded")
    count: int = 0


class DerivedMetrics(BaseModel):
    """All three derived views computed from one store snapshot."""

    model_config = ConfigDict(frozen=True)

    aggregate: AggregateMetrics
    plan_breakdown: list[PlanBreakdownEntry]
    size_histogram: list[SizeBucket]
