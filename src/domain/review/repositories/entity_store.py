"""
EntityStore Interface

Repository pattern interface for the document store the review pipeline
persists to. Defines the contract only; adapters live in the Infrastructure
Layer (in-memory, Redis).

Responsibility:
    - Define data access contract (create, put, update, get, query, subscribe)
    - Define the query vocabulary (FieldFilter, OrderBy, Collection)
    - Enable Dependency Inversion (Domain defines, Infrastructure implements)

Architecture Notes:
    - Protocol-based interface (structural typing)
    - Async methods for every request/response call (I/O boundary)
    - subscribe() is synchronous registration; deliveries are pushed later
    - Records are plain dicts; entities are built by the caller

Snapshot semantics:
    Every upstream change re-delivers the complete current result set of the
    subscribed query, never a diff. Consumers treat every delivery as a
    replacement. Cost is O(n) per change, not O(changed).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Protocol


class Collection(str, Enum):
    """Collections used by the review pipeline."""

    APPLICATIONS = "applications"
    REVIEWS = "reviews"
    USERS = "users"


class FilterOp(str, Enum):
    """Comparison operators a store must evaluate server-side."""

    EQ = "=="
    IN = "in"


@dataclass(frozen=True)
class FieldFilter:
    """
    Single-field predicate evaluated by the store.

    Examples:
        >>> FieldFilter("applicant_id", FilterOp.EQ, "u1").matches({"applicant_id": "u1"})
        True
        >>> FieldFilter("status", FilterOp.IN, ("pending",)).matches({"status": "accepted"})
        False
    """

    field: str
    op: FilterOp
    value: Any

    def matches(self, record: dict[str, Any]) -> bool:
        actual = record.get(self.field)
        if self.op == FilterOp.EQ:
            return actual == self.value
        if self.op == FilterOp.IN:
            return actual in self.value
        raise ValueError(f"Unsupported filter operator: {self.op}")

    @classmethod
    def eq(cls, field: str, value: Any) -> "FieldFilter":
        return cls(field, FilterOp.EQ, value)

    @classmethod
    def is_in(cls, field: str, values: Iterable[Any]) -> "FieldFilter":
        return cls(field, FilterOp.IN, tuple(values))


@dataclass(frozen=True)
class OrderBy:
    """
    Sort key of a query. Default is newest first by creation time.

    Records missing the field sort last regardless of direction.
    """

    field: str = "created_at"
    descending: bool = True

    def sort(self, records: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        records = list(records)
        present = [r for r in records if r.get(self.field) is not None]
        missing = [r for r in records if r.get(self.field) is None]
        present.sort(key=lambda r: r[self.field], reverse=self.descending)
        return present + missing


NEWEST_FIRST = OrderBy("created_at", descending=True)


def matches_all(record: dict[str, Any], predicates: Iterable[FieldFilter]) -> bool:
    """True when record satisfies every predicate (AND semantics)."""
    return all(p.matches(record) for p in predicates)


SnapshotCallback = Callable[[list[dict[str, Any]]], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class EntityStoreProtocol(Protocol):
    """
    Protocol defining the contract for the review pipeline's document store.

    Implemented in the Infrastructure Layer:
        - InMemoryEntityStore: single process, synchronous push (tests, dev)
        - RedisEntityStore: shared Redis, push via pub/sub

    Error contract:
        - Driver I/O failures surface as StoreUnavailableError
        - update() on a missing id raises NotFoundError
        - update() with an unmet precondition raises WriteConflictError

    Usage:
        Injected into Application Layer services at construction:

        >>> class StatusStateMachine:
        ...     def __init__(self, store: EntityStoreProtocol, guard: RoleAccessGuard):
        ...         self.store = store
    """

    async def create(self, collection: Collection, data: dict[str, Any]) -> str:
        """
        Insert a new record and return its store-assigned id.

        The store sets ``id``, ``created_at`` and ``updated_at``.
        """
        ...

    async def put(self, collection: Collection, entity_id: str, data: dict[str, Any]) -> None:
        """
        Insert or replace a record under a caller-chosen id.

        Used for user profiles, which are keyed by identity-provider id.
        ``created_at`` is kept when the record already exists.
        """
        ...

    async def update(
        self,
        collection: Collection,
        entity_id: str,
        partial: dict[str, Any],
        precondition: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Merge ``partial`` into an existing record and refresh ``updated_at``.

        Args:
            collection: Target collection
            entity_id: Record id
            partial: Fields to overwrite
            precondition: Field values the stored record must still have for
                the write to apply (conditional update); None for last write wins
        """
        ...

    async def get_by_id(self, collection: Collection, entity_id: str) -> Optional[dict[str, Any]]:
        """Return the record or None when absent."""
        ...

    async def query(
        self,
        collection: Collection,
        predicates: Iterable[FieldFilter] = (),
        order_by: OrderBy = NEWEST_FIRST,
    ) -> list[dict[str, Any]]:
        """One-shot query returning every matching record in order."""
        ...

    def subscribe(
        self,
        collection: Collection,
        predicates: Iterable[FieldFilter],
        order_by: OrderBy,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        """
        Open a live query.

        The current result set is delivered once immediately, then again after
        every write to ``collection``. The returned callable detaches the
        subscription; it is idempotent and no delivery happens after it returns.
        """
        ...

    async def close(self) -> None:
        """Release connections and stop every live subscription."""
        ...
