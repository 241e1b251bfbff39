"""
Redis Entity Store.

Shared-storage implementation of EntityStoreProtocol. Several API processes
pointed at the same Redis see each other's writes and receive live snapshots.

Storage Layout:
    {prefix}:{collection}:rec:{id}       - JSON record (string)
    {prefix}:{collection}:meta:ids       - SET of record ids
    {prefix}:{collection}:meta:changes   - pub/sub channel, message = changed id

    Records and bookkeeping keys live under separate segments, so no
    caller-supplied id can address the id set.

Responsibility:
    - CRUD on JSON records with id/created_at/updated_at maintenance
    - Conditional updates via WATCH/MULTI (optimistic locking)
    - Live queries: re-run the query on every change message and push the
      full result set to the subscriber
    - Map RedisError to StoreUnavailableError

Architecture Notes:
    - Infrastructure Layer (implements Domain EntityStoreProtocol)
    - Synchronous redis-py client called from async methods
    - Each live query owns a PubSub worker thread (run_in_thread); snapshots
      are delivered on that thread
    - Filtering and ordering happen in this process after MGET; collections
      are expected to stay small (hundreds to low thousands of records)
"""

import json
import logging
import os
import threading
import uuid
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from redis import Redis
from redis.client import PubSub, PubSubWorkerThread
from redis.exceptions import RedisError, WatchError

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
from src.domain.shared.exceptions import (
    NotFoundError,
    StoreUnavailableError,
    WriteConflictError,
)
from src.shared.utils.timestamps import to_iso, utc_now

logger = logging.getLogger(__name__)

MAX_WATCH_RETRIES = 5


class _RedisLiveQuery:
    """One subscriber: its query, its PubSub worker and its delivery lock."""

    def __init__(
        self,
        query_id: str,
        collection: Collection,
        predicates: tuple[FieldFilter, ...],
        order_by: OrderBy,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback],
    ) -> None:
        self.query_id = query_id
        self.collection = collection
        self.predicates = predicates
        self.order_by = order_by
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.lock = threading.RLock()
        self.active = True
        self.pubsub: Optional[PubSub] = None
        self.worker: Optional[PubSubWorkerThread] = None

    def stop(self) -> None:
        with self.lock:
            if not self.active:
                return
            self.active = False
            worker = self.worker
        if worker is not None:
            worker.stop()
        elif self.pubsub is not None:
            self.pubsub.close()


class RedisEntityStore:
    """
    Entity store backed by Redis strings, sets and pub/sub.

    Examples:
        >>> store = RedisEntityStore(create_redis_client(), key_prefix="review")
        >>> user_id = await store.create(Collection.USERS, {"email": "a@b.c"})
        >>> await store.get_by_id(Collection.USERS, user_id)
        {'email': 'a@b.c', 'id': '...', 'created_at': '...', 'updated_at': '...'}
    """

    def __init__(
        self,
        client: Redis,
        key_prefix: Optional[str] = None,
        poll_interval: float = 0.05,
    ) -> None:
        """
        Args:
            client: Redis client created with decode_responses=True
            key_prefix: Namespace of every key (default from env:
                REDIS_KEY_PREFIX or "review")
            poll_interval: Sleep of the PubSub worker loop in seconds
        """
        self.redis = client
        self.key_prefix = key_prefix or os.getenv("REDIS_KEY_PREFIX", "review")
        self.poll_interval = poll_interval
        self._live_queries: dict[str, _RedisLiveQuery] = {}
        self._lock = threading.Lock()

    # ========================================================================
    # KEYS
    # ========================================================================

    def _record_key(self, collection: Collection, entity_id: str) -> str:
        return f"{self.key_prefix}:{collection.value}:rec:{entity_id}"

    def _ids_key(self, collection: Collection) -> str:
        return f"{self.key_prefix}:{collection.value}:meta:ids"

    def _channel(self, collection: Collection) -> str:
        return f"{self.key_prefix}:{collection.value}:meta:changes"

    @contextmanager
    def _redis_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except RedisError as e:
            logger.error(f"Redis {operation} failed: {e}")
            raise StoreUnavailableError(f"Entity store {operation} failed", original_error=e) from e

    # ========================================================================
    # WRITES
    # ========================================================================

    async def create(self, collection: Collection, data: dict[str, Any]) -> str:
        collection = Collection(collection)
        entity_id = uuid.uuid4().hex
        timestamp = to_iso(utc_now())
        record = {**data, "id": entity_id, "created_at": timestamp, "updated_at": timestamp}

        with self._redis_errors(f"create in {collection.value}"):
            pipe = self.redis.pipeline()
            pipe.set(self._record_key(collection, entity_id), json.dumps(record))
            pipe.sadd(self._ids_key(collection), entity_id)
            pipe.publish(self._channel(collection), entity_id)
            pipe.execute()

        logger.debug(f"Created {collection.value}/{entity_id}")
        return entity_id

    async def put(self, collection: Collection, entity_id: str, data: dict[str, Any]) -> None:
        collection = Collection(collection)
        key = self._record_key(collection, entity_id)

        def build(existing: Optional[dict[str, Any]]) -> dict[str, Any]:
            timestamp = to_iso(utc_now())
            return {
                **data,
                "id": entity_id,
                "created_at": existing["created_at"] if existing else timestamp,
                "updated_at": timestamp,
            }

        with self._redis_errors(f"put in {collection.value}"):
            self._watched_write(collection, entity_id, key, build)
        logger.debug(f"Stored {collection.value}/{entity_id}")

    async def update(
        self,
        collection: Collection,
        entity_id: str,
        partial: dict[str, Any],
        precondition: Optional[dict[str, Any]] = None,
    ) -> None:
        collection = Collection(collection)
        key = self._record_key(collection, entity_id)

        def build(existing: Optional[dict[str, Any]]) -> dict[str, Any]:
            if existing is None:
                raise NotFoundError(
                    f"{collection.value} record {entity_id} not found",
                    collection=collection.value,
                    entity_id=entity_id,
                )
            for field_name, expected in (precondition or {}).items():
                if existing.get(field_name) != expected:
                    raise WriteConflictError(
                        f"{collection.value} record {entity_id}: expected "
                        f"{field_name}={expected!r}, found {existing.get(field_name)!r}",
                        collection=collection.value,
                        entity_id=entity_id,
                    )
            return {**existing, **partial, "id": entity_id, "updated_at": to_iso(utc_now())}

        with self._redis_errors(f"update in {collection.value}"):
            self._watched_write(collection, entity_id, key, build)
        logger.debug(f"Updated {collection.value}/{entity_id}: {sorted(partial)}")

    def _watched_write(self, collection: Collection, entity_id: str, key: str, build) -> None:
        """
        Read-modify-write of one record under WATCH.

        ``build`` receives the current record (or None) and returns the record
        to store; it may raise to abort. A concurrent write to the key restarts
        the cycle, so preconditions are always checked against the value that
        is overwritten.

        Raises:
            WriteConflictError: Key kept changing for MAX_WATCH_RETRIES attempts
        """
        with self.redis.pipeline() as pipe:
            for attempt in range(MAX_WATCH_RETRIES):
                try:
                    pipe.watch(key)
                    raw = pipe.get(key)
                    record = build(json.loads(raw) if raw else None)

                    pipe.multi()
                    pipe.set(key, json.dumps(record))
                    pipe.sadd(self._ids_key(collection), entity_id)
                    pipe.publish(self._channel(collection), entity_id)
                    pipe.execute()
                    return

                except WatchError:
                    logger.debug(
                        f"{collection.value}/{entity_id} changed during write "
                        f"(attempt {attempt + 1}/{MAX_WATCH_RETRIES}), retrying"
                    )

        raise WriteConflictError(
            f"{collection.value} record {entity_id} kept changing; write abandoned",
            collection=collection.value,
            entity_id=entity_id,
        )

    # ========================================================================
    # READS
    # ========================================================================

    async def get_by_id(self, collection: Collection, entity_id: str) -> Optional[dict[str, Any]]:
        collection = Collection(collection)
        with self._redis_errors(f"get from {collection.value}"):
            raw = self.redis.get(self._record_key(collection, entity_id))
        return json.loads(raw) if raw else None

    async def query(
        self,
        collection: Collection,
        predicates: Iterable[FieldFilter] = (),
        order_by: OrderBy = NEWEST_FIRST,
    ) -> list[dict[str, Any]]:
        collection = Collection(collection)
        with self._redis_errors(f"query on {collection.value}"):
            return self._select(collection, tuple(predicates), order_by)

    def _select(
        self,
        collection: Collection,
        predicates: tuple[FieldFilter, ...],
        order_by: OrderBy,
    ) -> list[dict[str, Any]]:
        """Load every record of a collection, filter and order. Raises RedisError."""
        ids = sorted(self.redis.smembers(self._ids_key(collection)))
        if not ids:
            return []
        raws = self.redis.mget([self._record_key(collection, i) for i in ids])
        records = [json.loads(raw) for raw in raws if raw]
        return order_by.sort(r for r in records if matches_all(r, predicates))

    # ========================================================================
    # LIVE QUERIES
    # ========================================================================

    def subscribe(
        self,
        collection: Collection,
        predicates: Iterable[FieldFilter],
        order_by: OrderBy,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Unsubscribe:
        collection = Collection(collection)
        live_query = _RedisLiveQuery(
            query_id=uuid.uuid4().hex[:8],
            collection=collection,
            predicates=tuple(predicates),
            order_by=order_by,
            on_snapshot=on_snapshot,
            on_error=on_error,
        )

        try:
            pubsub = self.redis.pubsub(ignore_subscribe_messages=True)
            pubsub.subscribe(**{self._channel(collection): lambda _message: self._refresh(live_query)})
        except RedisError as e:
            self._report(live_query, e)
            return live_query.stop

        live_query.pubsub = pubsub
        with self._lock:
            self._live_queries[live_query.query_id] = live_query

        # Initial snapshot; the channel is already subscribed so no change is missed.
        self._refresh(live_query)

        def on_worker_error(error: BaseException, _pubsub: PubSub, worker: PubSubWorkerThread) -> None:
            worker.stop()
            self._report(live_query, error)

        with live_query.lock:
            if live_query.active:
                live_query.worker = pubsub.run_in_thread(
                    sleep_time=self.poll_interval,
                    daemon=True,
                    exception_handler=on_worker_error,
                )
        logger.info(f"Live query {live_query.query_id} opened on {collection.value}")

        def unsubscribe() -> None:
            live_query.stop()
            with self._lock:
                self._live_queries.pop(live_query.query_id, None)
            logger.debug(f"Live query {live_query.query_id} closed")

        return unsubscribe

    def _refresh(self, live_query: _RedisLiveQuery) -> None:
        """Re-run a live query and push the result set (listener thread)."""
        with live_query.lock:
            if not live_query.active:
                return
            try:
                snapshot = self._select(live_query.collection, live_query.predicates, live_query.order_by)
            except RedisError as e:
                self._report(live_query, e)
                return
            try:
                live_query.on_snapshot(snapshot)
            except Exception:
                logger.exception(f"Live query {live_query.query_id}: snapshot callback raised")

    def _report(self, live_query: _RedisLiveQuery, error: BaseException) -> None:
        logger.error(f"Live query {live_query.query_id} on {live_query.collection.value} failed: {error}")
        with live_query.lock:
            if not live_query.active or live_query.on_error is None:
                return
            wrapped = StoreUnavailableError(
                f"Live query on {live_query.collection.value} failed",
                original_error=error if isinstance(error, Exception) else None,
            )
            try:
                live_query.on_error(wrapped)
            except Exception:
                logger.exception(f"Live query {live_query.query_id}: error callback raised")

    async def close(self) -> None:
        with self._lock:
            live_queries = list(self._live_queries.values())
            self._live_queries.clear()
        for live_query in live_queries:
            live_query.stop()
        self.redis.close()
        logger.info(f"Redis entity store closed ({len(live_queries)} live queries stopped)")
