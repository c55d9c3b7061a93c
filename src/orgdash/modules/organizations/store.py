"""In-memory organization store.

The store is the single source of truth the console renders from after the
initial load. It is a plain object owned by whoever builds it (one per screen
or CLI invocation), never module state.

Every write happens in one synchronous step, so on a single event loop no
reader ever observes a half-applied change. ``version`` increases by one for
each change that should re-derive metrics.
"""

from collections import Counter
from collections.abc import Callable, Iterable, Iterator

import structlog

from orgdash.core.errors import NotFoundError, ValidationError
from orgdash.modules.organizations.schemas import Organization


logger = structlog.get_logger()

StoreListener = Callable[["OrganizationStore"], None]


class OrganizationStore:
    """Ordered collection of organizations keyed by id."""

    def __init__(self, organizations: Iterable[Organization] = ()) -> None:
        """Initialize the store.

        Args:
            organizations: Optional initial records (must have unique ids)
        """
        self._records: tuple[Organization, ...] = ()
        self._version = 0
        self._listeners: list[StoreListener] = []
        self.loading = False
        self.last_error: str | None = None
        initial = tuple(organizations)
        if initial:
            self._check_unique(initial)
            self._records = initial

    # ============================================================
    # Reads
    # ============================================================

    @property
    def organizations(self) -> tuple[Organization, ...]:
        """Immutable snapshot of the current records, in store order."""
        return self._records

    @property
    def version(self) -> int:
        """Counter bumped on every change that affects derived metrics."""
        return self._version

    def get(self, organization_id: str) -> Organization | None:
        """Return the record with this id, or None."""
        for org in self._records:
            if org.id == organization_id:
                return org
        return None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Organization]:
        return iter(self._records)

    def __contains__(self, organization_id: object) -> bool:
        return any(org.id == organization_id for org in self._records)

    # ============================================================
    # Writes
    # ============================================================

    def replace_all(self, organizations: Iterable[Organization]) -> None:
        """Atomically replace every record.

        Raises:
            ValidationError: If the new records contain duplicate ids; the
                store is left unchanged
        """
        records = tuple(organizations)
        self._check_unique(records)
        self._commit(records)

    def append(self, organization: Organization) -> None:
        """Add a record at the end, or replace it in place if the id is known.

        A refresh that finished before a create can already hold the new
        record; replacing keeps ids unique.
        """
        if organization.id in self:
            self.replace(organization)
            return
        self._commit((*self._records, organization))

    def replace(self, organization: Organization) -> None:
        """Replace the record with the same id, keeping its position.

        Raises:
            NotFoundError: If no record has this id
        """
        index = self._index(organization.id)
        records = list(self._records)
        records[index] = organization
        self._commit(tuple(records))

    def remove(self, organization_id: str) -> bool:
        """Remove the record with this id.

        Returns:
            True if a record was removed, False if the id was not present
        """
        records = tuple(org for org in self._records if org.id != organization_id)
        if len(records) == len(self._records):
            return False
        self._commit(records)
        return True

    def mark_membership_stale(self, organization_id: str) -> bool:
        """Flag a record's membership count as out of date.

        This does not bump ``version``: the count itself has not changed, so
        derived metrics are not recomputed.

        Returns:
            True if the record exists
        """
        try:
            index = self._index(organization_id)
        except NotFoundError:
            return False
        records = list(self._records)
        records[index] = records[index].model_copy(
            update={"membership_count_stale": True}
        )
        self._records = tuple(records)
        return True

    # ============================================================
    # Listeners
    # ============================================================

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a callback run after every versioned change.

        Returns:
            A function that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ============================================================
    # Internals
    # ============================================================

    def _index(self, organization_id: str) -> int:
        for index, org in enumerate(self._records):
            if org.id == organization_id:
                return index
        raise NotFoundError(
            "Organization not found",
            resource="organization",
            resource_id=organization_id,
        )

    def _commit(self, records: tuple[Organization, ...]) -> None:
        self._records = records
        self._version += 1
        logger.debug("organization_store_changed", version=self._version, size=len(records))
        for listener in list(self._listeners):
            listener(self)

    @staticmethod
    def _check_unique(records: tuple[Organization, ...]) -> None:
        counts = Counter(org.id for org in records)
        duplicates = sorted(org_id for org_id, n in counts.items() if n > 1)
        if duplicates:
            raise ValidationError(
                "Duplicate organization ids in response",
                errors=[{"field": "id", "message": f"duplicate id {d}"} for d in duplicates],
            )
