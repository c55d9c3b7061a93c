"""Organization service: fetches, mutations and store reconciliation.

Every write is applied to the store only after the server confirms it. If a
call raises, the store is exactly as it was before the call.

Concurrent calls are not queued or coalesced. Two overlapping updates of the
same organization apply in the order their responses arrive, so the last
response wins; pass ``expected_updated_at`` to ``update`` to reject a write
made against a stale copy instead. A fetch that was overtaken by a newer one
still replaces the store when it completes.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from orgdash.config import Settings
from orgdash.core.constants import (
    DEFAULT_PAGE_SIZE,
    DEFAULT_USER_SEARCH_LIMIT,
    NEW_ORGANIZATION_WINDOW_DAYS,
    ORGANIZATION_SORT_FIELD,
    ORGANIZATION_SORT_ORDER,
)
from orgdash.core.errors import (
    ConflictError,
    GraphQLResponseError,
    NotFoundError,
    OrgDashError,
    ValidationError,
)
from orgdash.core.graphql import GraphQLClient
from orgdash.modules.organizations import queries
from orgdash.modules.organizations.metrics import MetricsView
from orgdash.modules.organizations.schemas import (
    DerivedMetrics,
    MemberRole,
    Organization,
    OrganizationCreate,
    OrganizationDetail,
    OrganizationUpdate,
    UserSummary,
)
from orgdash.modules.organizations.store import OrganizationStore


logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


def _require_id(value: str | None, field: str) -> str:
    """Reject a missing or blank identifier before any network call."""
    if value is None or not str(value).strip():
        raise ValidationError(
            f"{field} is required",
            errors=[{"field": field, "message": "must not be empty"}],
        )
    return str(value).strip()


def _coerce_input(model: type[ModelT], data: ModelT | Mapping[str, Any]) -> ModelT:
    """Validate user input, raising the console's ValidationError."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc


def _coerce_role(role: MemberRole | str) -> MemberRole:
    try:
        return MemberRole(str(role).upper())
    except ValueError as exc:
        allowed = ", ".join(r.value for r in MemberRole)
        raise ValidationError(
            f"Invalid role '{role}'. Expected one of: {allowed}",
            errors=[{"field": "role", "message": f"must be one of {allowed}"}],
        ) from exc


def _parse_response(model: type[ModelT], payload: Any, what: str) -> ModelT:
    """Validate a server payload; a bad shape is a response error."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise GraphQLResponseError(
            f"Malformed {what} in API response",
            details={"errors": exc.errors(include_url=False)},
        ) from exc


def _field(data: Mapping[str, Any], key: str) -> Any:
    if not isinstance(data, Mapping) or key not in data:
        raise GraphQLResponseError(f"API response is missing '{key}'")
    return data[key]


class OrganizationService:
    """Owns reads and writes of organizations for one store.

    The store and client are injected; the service keeps no state of its own
    beyond the in-flight fetch counter that drives ``store.loading``.
    """

    def __init__(
        self,
        client: GraphQLClient,
        store: OrganizationStore,
        page_size: int = DEFAULT_PAGE_SIZE,
        refetch_after_membership_change: bool = False,
        new_org_window_days: int = NEW_ORGANIZATION_WINDOW_DAYS,
    ) -> None:
        """Initialize the service.

        Args:
            client: GraphQL client used for every call
            store: Store this service reconciles
            page_size: Number of organizations requested by ``fetch_all``
            refetch_after_membership_change: Re-fetch the affected organization
                after each membership mutation instead of leaving it marked stale
            new_org_window_days: Trailing window for the "new organizations" count
        """
        self.client = client
        self.store = store
        self.page_size = page_size
        self.refetch_after_membership_change = refetch_after_membership_change
        self.metrics_view = MetricsView(store, window_days=new_org_window_days)
        self._fetches_in_flight = 0

    @classmethod
    def from_settings(
        cls, client: GraphQLClient, store: OrganizationStore, settings: Settings
    ) -> "OrganizationService":
        """Build a service configured from console settings."""
        return cls(
            client,
            store,
            page_size=settings.page_size,
            refetch_after_membership_change=settings.refetch_after_membership_change,
            new_org_window_days=settings.new_org_window_days,
        )

    def metrics(self, now: datetime | None = None) -> DerivedMetrics:
        """Derived views for the current store contents."""
        return self.metrics_view.current(now)

    # ============================================================
    # Fetching
    # ============================================================

    async def fetch_all(self) -> tuple[Organization, ...]:
        """Load the newest organizations and replace the whole store.

        Returns:
            The new store contents

        Raises:
            OrgDashError: On any failure; the store keeps its previous records
                and ``store.last_error`` holds the message
        """
        self._fetches_in_flight += 1
        self.store.loading = True
        try:
            data = await self.client.execute(
                queries.LIST_ORGANIZATIONS,
                {
                    "limit": self.page_size,
                    "offset": 0,
                    "sortBy": ORGANIZATION_SORT_FIELD,
                    "sortOrder": ORGANIZATION_SORT_ORDER,
                },
            )
            connection = _field(data, "organizations")
            edges = _field(connection, "edges") or []
            organizations = [
                _parse_response(Organization, _field(edge, "node"), "organization")
                for edge in edges
            ]
            self.store.replace_all(organizations)
        except OrgDashError as exc:
            self.store.last_error = exc.message
            logger.warning("organizations_fetch_failed", error=exc.message)
            raise
        finally:
            self._fetches_in_flight -= 1
            self.store.loading = self._fetches_in_flight > 0

        self.store.last_error = None
        total = (connection.get("pageInfo") or {}).get("totalCount")
        logger.info(
            "organizations_fetched",
            count=len(organizations),
            total_count=total,
            version=self.store.version,
        )
        if isinstance(total, int) and total > len(organizations):
            logger.warning(
                "organizations_truncated", loaded=len(organizations), total_count=total
            )
        return self.store.organizations

    async def refresh_all(self) -> tuple[Organization, ...]:
        """Re-run ``fetch_all``; the only way records disappear or reorder."""
        return await self.fetch_all()

    async def refresh_organization(self, organization_id: str) -> Organization:
        """Re-fetch one organization and replace it in the store if present.

        Clears the record's stale membership flag.

        Raises:
            NotFoundError: If the server does not know the organization
        """
        organization_id = _require_id(organization_id, "organization_id")
        data = await self.client.execute(queries.GET_ORGANIZATION, {"id": organization_id})
        payload = _field(data, "organization")
        if payload is None:
            raise NotFoundError(
                "Organization not found",
                resource="organization",
                resource_id=organization_id,
            )
        organization = _parse_response(Organization, payload, "organization")
        if organization.id in self.store:
            self.store.replace(organization)
        logger.info("organization_refreshed", organization_id=organization.id)
        return organization

    async def get_members(self, organization_id: str) -> OrganizationDetail:
        """Fetch an organization with its full member list.

        Members are never cached; each call asks the server. If the store's
        copy of the organization is marked stale, its member count is updated
        from the fetched list.

        Raises:
            NotFoundError: If the server does not know the organization
        """
        organization_id = _require_id(organization_id, "organization_id")
        data = await self.client.execute(
            queries.GET_ORGANIZATION_MEMBERS, {"id": organization_id}
        )
        payload = _field(data, "organization")
        if payload is None:
            raise NotFoundError(
                "Organization not found",
                resource="organization",
                resource_id=organization_id,
            )
        detail = _parse_response(OrganizationDetail, payload, "organization")

        current = self.store.get(detail.id)
        if current is not None and current.membership_count_stale:
            self.store.replace(detail.summary())
            logger.info(
                "membership_count_refreshed",
                organization_id=detail.id,
                membership_count=len(detail.members),
            )
        return detail

    async def search_users(
        self, term: str, limit: int = DEFAULT_USER_SEARCH_LIMIT
    ) -> list[UserSummary]:
        """Find users by name or email, e.g. to add one as a member."""
        term = (term or "").strip()
        if not term:
            return []
        data = await self.client.execute(
            queries.SEARCH_USERS, {"search": term, "limit": limit}
        )
        edges = _field(_field(data, "users"), "edges") or []
        return [_parse_response(UserSummary, _field(e, "node"), "user") for e in edges]

    # ============================================================
    # Organization mutations
    # ============================================================

    async def create(
        self, data: OrganizationCreate | Mapping[str, Any]
    ) -> Organization:
        """Create an organization and append it to the store.

        Raises:
            ValidationError: If the name is missing or blank
        """
        payload = _coerce_input(OrganizationCreate, data)
        result = await self.client.execute(
            queries.CREATE_ORGANIZATION,
            {"input": payload.model_dump(exclude_none=True)},
        )
        organization = _parse_response(
            Organization, _field(result, "createOrganization"), "organization"
        )
        self.store.append(organization)
        logger.info(
            "organization_created",
            organization_id=organization.id,
            slug=organization.slug,
        )
        return organization

    async def update(
        self,
        organization_id: str,
        data: OrganizationUpdate | Mapping[str, Any],
        expected_updated_at: datetime | None = None,
    ) -> Organization:
        """Update an organization and replace the store record in place.

        Args:
            organization_id: Organization to update
            data: Fields to change (at least one)
            expected_updated_at: If given, the write is refused unless the
                store's copy still has this ``updated_at``

        Raises:
            ValidationError: If the id is blank or no field is given
            ConflictError: If ``expected_updated_at`` does not match
        """
        organization_id = _require_id(organization_id, "organization_id")
        payload = _coerce_input(OrganizationUpdate, data)

        if expected_updated_at is not None:
            current = self.store.get(organization_id)
            if current is None:
                raise NotFoundError(
                    "Organization not found",
                    resource="organization",
                    resource_id=organization_id,
                )
            if current.updated_at != expected_updated_at:
                logger.warning(
                    "organization_update_conflict",
                    organization_id=organization_id,
                    expected_updated_at=expected_updated_at.isoformat(),
                    actual_updated_at=current.updated_at.isoformat(),
                )
                raise ConflictError(
                    "Organization was modified since it was loaded",
                    details={
                        "organization_id": organization_id,
                        "expected_updated_at": expected_updated_at.isoformat(),
                        "actual_updated_at": current.updated_at.isoformat(),
                    },
                )

        result = await self.client.execute(
            queries.UPDATE_ORGANIZATION,
            {"id": organization_id, "input": payload.model_dump(exclude_none=True)},
        )
        organization = _parse_response(
            Organization, _field(result, "updateOrganization"), "organization"
        )
        if organization.id in self.store:
            self.store.replace(organization)
        else:
            logger.info("organization_updated_not_in_store", organization_id=organization.id)
        logger.info("organization_updated", organization_id=organization.id)
        return organization

    async def delete(self, organization_id: str) -> None:
        """Delete an organization and remove it from the store.

        Asking the user to confirm is the caller's job.
        """
        organization_id = _require_id(organization_id, "organization_id")
        result = await self.client.execute(
            queries.DELETE_ORGANIZATION, {"id": organization_id}
        )
        if _field(result, "deleteOrganization") is not True:
            raise GraphQLResponseError("Organization could not be deleted")
        self.store.remove(organization_id)
        logger.info("organization_deleted", organization_id=organization_id)

    # ============================================================
    # Membership mutations
    # ============================================================

    async def add_member(
        self,
        organization_id: str,
        user_id: str,
        role: MemberRole | str = MemberRole.MEMBER,
    ) -> str:
        """Add a user to an organization.

        The stored member count is not patched; the record is marked stale.

        Returns:
            The new membership id
        """
        organization_id = _require_id(organization_id, "organization_id")
        user_id = _require_id(user_id, "user_id")
        member_role = _coerce_role(role)

        result = await self.client.execute(
            queries.ADD_MEMBER,
            {"organizationId": organization_id, "userId": user_id, "role": member_role.value},
        )
        membership = _field(result, "addOrganizationMember")
        membership_id = membership.get("id") if isinstance(membership, Mapping) else None
        if not membership_id:
            raise GraphQLResponseError("Member could not be added")

        logger.info(
            "organization_member_added",
            organization_id=organization_id,
            user_id=user_id,
            role=member_role.value,
        )
        await self._after_membership_change(organization_id)
        return str(membership_id)

    async def remove_member(self, organization_id: str, user_id: str) -> None:
        """Remove a user from an organization. The stored count is not patched."""
        organization_id = _require_id(organization_id, "organization_id")
        user_id = _require_id(user_id, "user_id")

        result = await self.client.execute(
            queries.REMOVE_MEMBER,
            {"organizationId": organization_id, "userId": user_id},
        )
        if _field(result, "removeOrganizationMember") is not True:
            raise GraphQLResponseError("Member could not be removed")

        logger.info(
            "organization_member_removed",
            organization_id=organization_id,
            user_id=user_id,
        )
        await self._after_membership_change(organization_id)

    async def update_member_role(
        self, organization_id: str, user_id: str, role: MemberRole | str
    ) -> None:
        """Change a member's role. Visible only after the member view is re-fetched."""
        organization_id = _require_id(organization_id, "organization_id")
        user_id = _require_id(user_id, "user_id")
        member_role = _coerce_role(role)

        result = await self.client.execute(
            queries.UPDATE_MEMBER_ROLE,
            {"organizationId": organization_id, "userId": user_id, "role": member_role.value},
        )
        if _field(result, "updateOrganizationMemberRole") is not True:
            raise GraphQLResponseError("Member role could not be updated")

        logger.info(
            "organization_member_role_updated",
            organization_id=organization_id,
            user_id=user_id,
            role=member_role.value,
        )

    async def _after_membership_change(self, organization_id: str) -> None:
        """Mark the record stale, then optionally re-fetch it.

        The mutation has already succeeded at this point, so a failed
        follow-up fetch leaves the record marked stale rather than failing
        the whole operation.
        """
        if not self.store.mark_membership_stale(organization_id):
            return
        if not self.refetch_after_membership_change:
            return
        try:
            await self.refresh_organization(organization_id)
        except OrgDashError as exc:
            logger.warning(
                "membership_refetch_failed",
                organization_id=organization_id,
                error=exc.message,
            )
