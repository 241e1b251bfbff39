"""
In-Memory Entity Store

Single-process implementation of EntityStoreProtocol. Default backend for
development and the test suite.

Responsibility:
    - Hold the three collections as dicts of records
    - Assign ids and created_at/updated_at timestamps
    - Apply conditional updates (precondition) atomically
    - Push full result-set snapshots to live subscribers after every write

Architecture Notes:
    - Infrastructure Layer (implements Domain EntityStoreProtocol)
    - Deliveries are synchronous: by the time a write coroutine returns, every
      matching subscriber has received the new snapshot
    - Records are deep-copied in and out; callers never share state with the store
    - created_at values are strictly increasing within one store, so
      created_at ordering is total even for writes in the same microsecond
"""

import copy
import itertools
import logging
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Iterable, Optional

from src.domain.review.repositories.entity_store import (
    NEWEST_FIRST,
    Collection,
    ErrorCallback,
    FieldFilter,
    OrderBy,
    SnapshotCallback,
    Unsubscribe,
    matches_all,
)
from src.domain.shared.exceptions import NotFoundError, WriteConflictError
from src.shared.utils.timestamps import to_iso, utc_now

logger = logging.getLogger(__name__)


@dataclass
class _LiveQuery:
    collection: Collection
    predicates: tuple[FieldFilter, ...]
    order_by: OrderBy
    on_snapshot: SnapshotCallback
    on_error: Optional[ErrorCallback]
    active: bool = True


class InMemoryEntityStore:
    """
    Dict-backed entity store with synchronous snapshot push.

    Examples:
        >>> store = InMemoryEntityStore()
        >>> app_id = await store.create(Collection.APPLICATIONS, {"applicant_id": "u1"})
        >>> unsubscribe = store.subscribe(
        ...     Collection.APPLICATIONS, (), NEWEST_FIRST, lambda records: print(len(records))
        ... )
        1
        >>> unsubscribe()
    """

    def __init__(self) -> None:
        self._records: dict[Collection, dict[str, dict[str, Any]]] = {
            collection: {} for collection in Collection
        }
        self._live_queries: dict[int, _LiveQuery] = {}
        self._query_ids = itertools.count(1)
        self._lock = threading.RLock()
        self._last_timestamp: Optional[datetime] = None

    def _next_timestamp(self) -> str:
        now = utc_now()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return to_iso(now)

    def _require(self, collection: Collection, entity_id: str) -> dict[str, Any]:
        record = self._records[collection].get(entity_id)
        if record is None:
            raise NotFoundError(
                f"{collection.value} record {entity_id} not found",
                collection=collection.value,
                entity_id=entity_id,
            )
        return record

    async def create(self, collection: Collection, data: dict[str, Any]) -> str:
        collection = Collection(collection)
        entity_id = uuid.uuid4().hex
        with self._lock:
            timestamp = self._next_timestamp()
            record = copy.deepcopy(data)
            record.update({"id": entity_id, "created_at": timestamp, "updated_at": timestamp})
            self._records[collection][entity_id] = record
        logger.debug(f"Created {collection.value}/{entity_id}")
        self._publish(collection)
        return entity_id

    async def put(self, collection: Collection, entity_id: str, data: dict[str, Any]) -> None:
        collection = Collection(collection)
        with self._lock:
            timestamp = self._next_timestamp()
            existing = self._records[collection].get(entity_id)
            record = copy.deepcopy(data)
            record.update(
                {
                    "id": entity_id,
                    "created_at": existing["created_at"] if existing else timestamp,
                    "updated_at": timestamp,
                }
            )
            self._records[collection][entity_id] = record
        logger.debug(f"Stored {collection.value}/{entity_id}")
        self._publish(collection)

    async def update(
        self,
        collection: Collection,
        entity_id: str,
        partial: dict[str, Any],
        precondition: Optional[dict[str, Any]] = None,
    ) -> None:
        collection = Collection(collection)
        with self._lock:
            record = self._require(collection, entity_id)
            for field_name, expected in (precondition or {}).items():
                if record.get(field_name) != expected:
                    raise WriteConflictError(
                        f"{collection.value} record {entity_id}: expected "
                        f"{field_name}={expected!r}, found {record.get(field_name)!r}",
                        collection=collection.value,
                        entity_id=entity_id,
                    )
            record.update(copy.deepcopy(partial))
            record["id"] = entity_id
            record["updated_at"] = self._next_timestamp()
        logger.debug(f"Updated {collection.value}/{entity_id}: {sorted(partial)}")
        self._publish(collection)

    async def get_by_id(self, collection: Collection, entity_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            record = self._records[Collection(collection)].get(entity_id)
            return copy.deepcopy(record) if record is not None else None

    async def query(
        self,
        collection: Collection,
        predicates: Iterable[FieldFilter] = (),
        order_by: OrderBy = NEWEST_FIRST,
    ) -> list[dict[str, Any]]:
        return self._select(Collection(collection), tuple(predicates), order_by)

    def _select(
        self,
        collection: Collection,
        predicates: tuple[FieldFilter, ...],
        order_by: OrderBy,
    ) -> list[dict[str, Any]]:
        with self._lock:
            matching = [
                copy.deepcopy(record)
                for record in self._records[collection].values()
                if matches_all(record, predicates)
            ]
        return order_by.sort(matching)

    def subscribe(
        self,
        collection: Collection,
        predicates: Iterable[FieldFilter],
        order_by: OrderBy,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        live_query = _LiveQuery(
            collection=Collection(collection),
            predicates=tuple(predicates),
            order_by=order_by,
            on_snapshot=on_snapshot,
            on_error=on_error,
        )
        query_id = next(self._query_ids)
        with self._lock:
            self._live_queries[query_id] = live_query
        logger.debug(f"Live query {query_id} opened on {live_query.collection.value}")

        self._deliver(query_id, live_query)

        def unsubscribe() -> None:
            with self._lock:
                live_query.active = False
                removed = self._live_queries.pop(query_id, None)
            if removed is not None:
                logger.debug(f"Live query {query_id} closed")

        return unsubscribe

    def _publish(self, collection: Collection) -> None:
        with self._lock:
            targets = [
                (query_id, live_query)
                for query_id, live_query in self._live_queries.items()
                if live_query.collection == collection
            ]
        for query_id, live_query in targets:
            self._deliver(query_id, live_query)

    def _deliver(self, query_id: int, live_query: _LiveQuery) -> None:
        if not live_query.active:
            return
        snapshot = self._select(live_query.collection, live_query.predicates, live_query.order_by)
        try:
            live_query.on_snapshot(snapshot)
        except Exception:
            logger.exception(f"Live query {query_id}: snapshot callback raised")

    async def close(self) -> None:
        with self._lock:
            for live_query in self._live_queries.values():
                live_query.active = False
            count = len(self._live_queries)
            self._live_queries.clear()
        logger.info(f"In-memory entity store closed ({count} live queries dropped)")
