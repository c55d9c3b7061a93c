"""Derived organization metrics.

Pure functions over a sequence of organizations: no I/O, no hidden state and
no mutation of their inputs. Calling them twice on the same snapshot gives
identical results.

Revenue figures use a static plan price table, not real billing data. They
are an estimate for the dashboard and diverge from actual revenue whenever an
organization has custom pricing.
"""

import math
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import NamedTuple

from orgdash.core.constants import NEW_ORGANIZATION_WINDOW_DAYS
from orgdash.modules.organizations.schemas import (
    AggregateMetrics,
    DerivedMetrics,
    Organization,
    Plan,
    PlanBreakdownEntry,
    SizeBucket,
)
from orgdash.modules.organizations.store import OrganizationStore


# Assumed monthly price per plan, in USD
PLAN_PRICES: Mapping[str, float] = {
    Plan.FREE.value: 0,
    Plan.STARTER.value: 29,
    Plan.PROFESSIONAL.value: 99,
    Plan.BUSINESS.value: 199,
    Plan.ENTERPRISE.value: 499,
}


class SizeRange(NamedTuple):
    label: str
    min_members: int
    max_members: int | None


# Inclusive, non-overlapping member-count ranges; None is unbounded
SIZE_RANGES: tuple[SizeRange, ...] = (
    SizeRange("1-5 members", 1, 5),
    SizeRange("6-15 members", 6, 15),
    SizeRange("16-30 members", 16, 30),
    SizeRange("31-50 members", 31, 50),
    SizeRange("50+ members", 51, None),
)


def plan_price(plan: str, prices: Mapping[str, float] = PLAN_PRICES) -> float:
    """Monthly price for a plan; unknown plans are free."""
    return prices.get(str(plan), 0)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going up."""
    return math.floor(value + 0.5)


def aggregate_metrics(
    organizations: Sequence[Organization],
    now: datetime | None = None,
    prices: Mapping[str, float] = PLAN_PRICES,
    window_days: int = NEW_ORGANIZATION_WINDOW_DAYS,
) -> AggregateMetrics:
    """Headline counts.

    Args:
        organizations: Store snapshot
        now: Reference time for "new" organizations (defaults to current UTC time)
        prices: Plan price table
        window_days: Length of the trailing window for "new" organizations

    Returns:
        Totals, active and new counts, member totals and estimated revenue
    """
    now = now or datetime.now(UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    cutoff = now - timedelta(days=window_days)

    total = len(organizations)
    total_members = sum(org.membership_count for org in organizations)

    return AggregateMetrics(
        total_organizations=total,
        active_organizations=sum(1 for org in organizations if org.is_active),
        new_organizations=sum(1 for org in organizations if org.created_at >= cutoff),
        total_members=total_members,
        average_members_per_org=round_half_up(total_members / total) if total else 0,
        total_revenue=sum(plan_price(org.plan, prices) for org in organizations),
    )


def plan_breakdown(
    organizations: Sequence[Organization],
    prices: Mapping[str, float] = PLAN_PRICES,
) -> list[PlanBreakdownEntry]:
    """Count and estimated revenue per plan, in order of first appearance.

    Organizations without a subscription count as FREE.
    """
    counts: dict[str, int] = {}
    for org in organizations:
        plan = str(org.plan)
        counts[plan] = counts.get(plan, 0) + 1

    return [
        PlanBreakdownEntry(plan=plan, count=count, revenue=count * plan_price(plan, prices))
        for plan, count in counts.items()
    ]


def size_bucket_for(membership_count: int) -> SizeRange | None:
    """The range containing this member count, or None below the first range."""
    for size_range in SIZE_RANGES:
        upper_ok = size_range.max_members is None or membership_count <= size_range.max_members
        if membership_count >= size_range.min_members and upper_ok:
            return size_range
    return None


def size_histogram(organizations: Sequence[Organization]) -> list[SizeBucket]:
    """Organizations per member-count range.

    Always returns one bucket per range. Organizations with zero members are
    in no bucket.
    """
    counts = dict.fromkeys((r.label for r in SIZE_RANGES), 0)
    for org in organizations:
        size_range = size_bucket_for(org.membership_count)
        if size_range is not None:
            counts[size_range.label] += 1

    return [
        SizeBucket(
            size=r.label,
            min_members=r.min_members,
            max_members=r.max_members,
            count=counts[r.label],
        )
        for r in SIZE_RANGES
    ]


def derive(
    organizations: Sequence[Organization],
    now: datetime | None = None,
    prices: Mapping[str, float] = PLAN_PRICES,
    window_days: int = NEW_ORGANIZATION_WINDOW_DAYS,
) -> DerivedMetrics:
    """Compute all three derived views from one snapshot."""
    return DerivedMetrics(
        aggregate=aggregate_metrics(organizations, now, prices, window_days),
        plan_breakdown=plan_breakdown(organizations, prices),
        size_histogram=size_histogram(organizations),
    )


class MetricsView:
    """Derived metrics for a store, recomputed only when its version changes.

    The "new organizations" count depends on the reference time, so a cached
    value is only reused for the same ``now`` argument.
    """

    def __init__(
        self,
        store: OrganizationStore,
        prices: Mapping[str, float] = PLAN_PRICES,
        window_days: int = NEW_ORGANIZATION_WINDOW_DAYS,
    ) -> None:
        self.store = store
        self.prices = prices
        self.window_days = window_days
        self._cached: tuple[int, datetime, DerivedMetrics] | None = None

    def current(self, now: datetime | None = None) -> DerivedMetrics:
        """Metrics for the store as it is now.

        Without an explicit ``now`` the result depends on the clock, so it is
        recomputed on every call.
        """
        if now is None:
            return derive(self.store.organizations, None, self.prices, self.window_days)
        if self._cached is not None:
            version, cached_now, metrics = self._cached
            if version == self.store.version and now == cached_now:
                return metrics

        metrics = derive(self.store.organizations, now, self.prices, self.window_days)
        self._cached = (self.store.version, now, metrics)
        return metrics
