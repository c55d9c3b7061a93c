"""Organization store, derived metrics and the service that keeps them in sync."""

from orgdash.modules.organizations.metrics import (
    PLAN_PRICES,
    SIZE_RANGES,
    MetricsView,
    aggregate_metrics,
    derive,
    plan_breakdown,
    size_histogram,
)
from orgdash.modules.organizations.schemas import (
    AggregateMetrics,
    DerivedMetrics,
    Member,
    MemberRole,
    Organization,
    OrganizationCreate,
    OrganizationDetail,
    OrganizationUpdate,
    Plan,
    PlanBreakdownEntry,
    SizeBucket,
    Subscription,
    SubscriptionStatus,
    UserSummary,
)
from orgdash.modules.organizations.services import OrganizationService
from orgdash.modules.organizations.store import OrganizationStore


__all__ = [
    "PLAN_PRICES",
    "SIZE_RANGES",
    "AggregateMetrics",
    "DerivedMetrics",
    "Member",
    "MemberRole",
    "MetricsView",
    "Organization",
    "OrganizationCreate",
    "OrganizationDetail",
    "OrganizationService",
    "OrganizationStore",
    "OrganizationUpdate",
    "Plan",
    "PlanBreakdownEntry",
    "SizeBucket",
    "Subscription",
    "SubscriptionStatus",
    "UserSummary",
    "aggregate_metrics",
    "derive",
    "plan_breakdown",
    "size_histogram",
]
