"""
RealtimeFeed Application Service

Maintains a live, role-filtered, ordered view of applications per subscriber.

Responsibility:
    - Open a live store subscription on the applications collection
    - Push store-side filters down, apply client-side filters after delivery
    - Guarantee created_at-descending order within each snapshot
    - Attach DashboardStats to every snapshot
    - Surface store errors to the subscriber
    - Detach on cancel (idempotent), with no delivery after cancel returns

Snapshot semantics:
    Every delivery is the complete current result set. Subscribers replace
    their view with it; they never patch. Each upstream change costs O(n) in
    the size of the result set.

Architecture Notes:
    - Part of Application Layer
    - Consumers: HTTP WebSocket endpoint, tests, any in-process dashboard
    - Deliveries may arrive on a store listener thread (Redis adapter);
      FeedSubscription serializes delivery and cancellation with a lock and
      stream() hops back to the consumer's event loop
"""

import asyncio
import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Iterable, Optional

from src.domain.review.entities.application import Application
from src.domain.review.entities.user import User
from src.domain.review.repositories.entity_store import (
    NEWEST_FIRST,
    Collection,
    EntityStoreProtocol,
    FieldFilter,
    OrderBy,
    Unsubscribe,
)
from src.domain.review.services.role_access_guard import (
    ApplicationPredicate,
    RoleAccessGuard,
)
from src.domain.review.services.stats_calculator import StatsCalculator
from src.domain.review.value_objects.dashboard_stats import DashboardStats

logger = logging.getLogger(__name__)

_subscription_ids = itertools.count(1)
_CLOSED = object()


@dataclass(frozen=True)
class FeedSnapshot:
    """
    One complete delivery of a feed.

    Attributes:
        applications: Visible applications, created_at descending
        stats: DashboardStats computed over ``applications``
        sequence: 1 for the initial delivery, +1 for each following one
    """

    applications: tuple[Application, ...]
    stats: DashboardStats
    sequence: int


SnapshotHandler = Callable[[FeedSnapshot], None]
ErrorHandler = Callable[[Exception], None]


def _newest_first(applications: Iterable[Application]) -> list[Application]:
    dated = [a for a in applications if a.created_at is not None]
    undated = [a for a in applications if a.created_at is None]
    dated.sort(key=lambda a: a.created_at, reverse=True)
    return dated + undated


class FeedSubscription:
    """
    Handle of one live feed subscription.

    Use ``cancel()`` when the consumer stops needing updates; a subscription
    that is never cancelled keeps delivering for the life of the store.

    Attributes:
        subscription_id: Process-unique number, for logs
        latest: Most recent snapshot (None until the first delivery)
        last_error: Most recent store error (None if none occurred)
    """

    def __init__(
        self,
        on_snapshot: Optional[SnapshotHandler],
        on_error: Optional[ErrorHandler],
        client_filter: Optional[ApplicationPredicate],
        stats_calculator: StatsCalculator,
    ) -> None:
        self.subscription_id = next(_subscription_ids)
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._client_filter = client_filter
        self._stats = stats_calculator
        self._lock = threading.RLock()
        self._unsubscribe: Optional[Unsubscribe] = None
        self._active = True
        self._sequence = 0
        self._listeners: list[Callable[[Any], None]] = []
        self.latest: Optional[FeedSnapshot] = None
        self.last_error: Optional[Exception] = None

    @property
    def active(self) -> bool:
        return self._active

    def _attach(self, unsubscribe: Unsubscribe) -> None:
        with self._lock:
            self._unsubscribe = unsubscribe
            cancelled_early = not self._active
        if cancelled_early:
            unsubscribe()

    def _deliver(self, records: list[dict[str, Any]]) -> None:
        """Store callback: build, filter, order and publish one snapshot."""
        with self._lock:
            if not self._active:
                return

            applications = [Application.from_dict(r) for r in records]
            if self._client_filter is not None:
                applications = [a for a in applications if self._client_filter(a)]
            ordered = tuple(_newest_first(applications))

            self._sequence += 1
            snapshot = FeedSnapshot(
                applications=ordered,
                stats=self._stats.compute(ordered),
                sequence=self._sequence,
            )
            self.latest = snapshot
            logger.debug(
                f"Feed {self.subscription_id}: snapshot #{snapshot.sequence} "
                f"with {len(ordered)} applications"
            )

            for push in list(self._listeners):
                push(snapshot)
            if self._on_snapshot is not None:
                self._on_snapshot(snapshot)

    def _fail(self, error: Exception) -> None:
        """Store callback: surface an upstream error to the subscriber."""
        with self._lock:
            if not self._active:
                return
            self.last_error = error

            for push in list(self._listeners):
                push(error)

            if self._on_error is not None:
                self._on_error(error)
            elif not self._listeners:
                logger.error(
                    f"Feed {self.subscription_id}: store error with no error handler "
                    f"attached: {error}"
                )

    def cancel(self) -> None:
        """
        Detach from the upstream subscription.

        Idempotent. Once this returns, neither callback is invoked again and
        every stream() iterator ends.
        """
        with self._lock:
            if not self._active:
                return
            self._active = False
            unsubscribe = self._unsubscribe
            for push in list(self._listeners):
                push(_CLOSED)

        if unsubscribe is not None:
            unsubscribe()
        logger.debug(f"Feed {self.subscription_id}: cancelled")

    async def stream(self) -> AsyncIterator[FeedSnapshot]:
        """
        Iterate over snapshots as they arrive.

        Yields the latest snapshot first (if any), then every following one.
        Store errors are raised from the iterator; cancel() ends it.

        Examples:
            >>> subscription = feed.subscribe_for(user)
            >>> async for snapshot in subscription.stream():
            ...     render(snapshot.applications, snapshot.stats)
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()

        def push(item: Any) -> None:
            loop.call_soon_threadsafe(queue.put_nowait, item)

        with self._lock:
            if not self._active:
                return
            self._listeners.append(push)
            initial = self.latest

        try:
            if initial is not None:
                yield initial
            while True:
                item = await queue.get()
                if item is _CLOSED:
                    return
                if isinstance(item, Exception):
                    raise item
                if initial is not None and item.sequence <= initial.sequence:
                    continue
                yield item
        finally:
            with self._lock:
                if push in self._listeners:
                    self._listeners.remove(push)


class RealtimeFeed:
    """
    Factory of live application feeds.

    Examples:
        >>> feed = RealtimeFeed(store, RoleAccessGuard())
        >>> subscription = feed.subscribe_for(reviewer, on_snapshot=print)
        >>> ...
        >>> subscription.cancel()
    """

    def __init__(
        self,
        store: EntityStoreProtocol,
        guard: RoleAccessGuard,
        stats_calculator: Optional[StatsCalculator] = None,
    ) -> None:
        self.store = store
        self.guard = guard
        self.stats_calculator = stats_calculator or StatsCalculator()

    def subscribe(
        self,
        on_snapshot: Optional[SnapshotHandler] = None,
        predicates: Iterable[FieldFilter] = (),
        client_filter: Optional[ApplicationPredicate] = None,
        order_by: OrderBy = NEWEST_FIRST,
        on_error: Optional[ErrorHandler] = None,
    ) -> FeedSubscription:
        """
        Open a live subscription on the applications collection.

        The initial snapshot is delivered before this method returns.

        Args:
            on_snapshot: Called with every FeedSnapshot (optional when
                consuming via stream())
            predicates: Store-side filters, e.g. applicant_id == X
            client_filter: Predicate applied to entities after delivery
            order_by: Store-side order; snapshots are always re-ordered by
                created_at descending
            on_error: Called with StoreUnavailableError and other store errors

        Returns:
            FeedSubscription; the caller must cancel() it when done
        """
        subscription = FeedSubscription(
            on_snapshot=on_snapshot,
            on_error=on_error,
            client_filter=client_filter,
            stats_calculator=self.stats_calculator,
        )
        unsubscribe = self.store.subscribe(
            Collection.APPLICATIONS,
            tuple(predicates),
            order_by,
            subscription._deliver,
            subscription._fail,
        )
        subscription._attach(unsubscribe)
        logger.info(f"Feed {subscription.subscription_id}: subscribed")
        return subscription

    def subscribe_for(
        self,
        user: User,
        on_snapshot: Optional[SnapshotHandler] = None,
        on_error: Optional[ErrorHandler] = None,
    ) -> FeedSubscription:
        """
        Open the feed a principal is allowed to see.

        applicant -> own applications (store-side filter)
        reviewer  -> pending and in-review applications (client-side filter)
        admin     -> every application
        """
        feed_filter = self.guard.feed_filter(user.role, user.id)
        logger.debug(f"Opening {user.role.value} feed for user {user.id}")
        return self.subscribe(
            on_snapshot=on_snapshot,
            predicates=feed_filter.predicates,
            client_filter=feed_filter.client_filter,
            on_error=on_error,
        )
