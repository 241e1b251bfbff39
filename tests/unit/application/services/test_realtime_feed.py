"""
Tests for RealtimeFeed Application Service.

Tests cover:
- Role-filtered snapshots (applicant, reviewer, admin)
- Ordering and stats attached to every snapshot
- Re-delivery after writes, no delivery after cancel
- Store errors surfaced to the subscriber
- stream() async iteration
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, Mock

import pytest

from src.application.services.realtime_feed import RealtimeFeed
from src.domain.review.entities.application import ApplicationStatus
from src.domain.review.entities.user import User, UserRole
from src.domain.review.repositories.entity_store import Collection, FieldFilter
from src.domain.shared.exceptions import StoreUnavailableError
from src.shared.utils.timestamps import to_iso

BASE_TIME = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def feed(store, guard):
    return RealtimeFeed(store, guard)


@pytest.fixture
def capturing_store():
    """
    Store double that keeps the callbacks handed to subscribe().

    captured["on_snapshot"] / captured["on_error"] let a test drive
    deliveries by hand; captured["unsubscribe"] is the returned detach mock.
    """
    captured = {}
    mock = MagicMock()

    def _subscribe(collection, predicates, order_by, on_snapshot, on_error=None):
        captured.update(
            collection=collection,
            predicates=predicates,
            on_snapshot=on_snapshot,
            on_error=on_error,
            unsubscribe=Mock(),
        )
        on_snapshot([])
        return captured["unsubscribe"]

    mock.subscribe.side_effect = _subscribe
    mock.captured = captured
    return mock


def _record(app_id, status, minutes, applicant_id="u1"):
    return {
        "id": app_id,
        "applicant_id": applicant_id,
        "status": status,
        "created_at": to_iso(BASE_TIME + timedelta(minutes=minutes)),
    }


# ============================================================================
# ROLE FILTER TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_reviewer_sees_only_pending_and_in_review(
    feed, store, seed_user, seed_application
):
    reviewer = await seed_user("r1", UserRole.REVIEWER)
    pending_id = await seed_application(status=ApplicationStatus.PENDING)
    in_review_id = await seed_application(status=ApplicationStatus.IN_REVIEW)
    await seed_application(status=ApplicationStatus.ACCEPTED)
    await seed_application(status=ApplicationStatus.REJECTED)

    subscription = feed.subscribe_for(reviewer)

    ids = [a.id for a in subscription.latest.applications]
    assert ids == [in_review_id, pending_id]
    assert subscription.latest.stats.total_applications == 2
    subscription.cancel()


@pytest.mark.asyncio
async def test_reviewer_feed_drops_application_once_decided(
    feed, store, seed_user, seed_application
):
    """Test that an accepted application disappears from the reviewer feed."""
    reviewer = await seed_user("r1", UserRole.REVIEWER)
    app_id = await seed_application(status=ApplicationStatus.PENDING)
    snapshots = []
    subscription = feed.subscribe_for(reviewer, on_snapshot=snapshots.append)

    await store.update(Collection.APPLICATIONS, app_id, {"status": "accepted"})

    assert [len(s.applications) for s in snapshots] == [1, 0]
    assert [s.sequence for s in snapshots] == [1, 2]
    subscription.cancel()


@pytest.mark.asyncio
async def test_one_decision_updates_reviewer_and_admin_feeds_differently(
    feed, store, seed_user, seed_application
):
    """Test that the same write is filtered per role for concurrent subscribers."""
    reviewer = await seed_user("r1", UserRole.REVIEWER)
    admin = await seed_user("a1", UserRole.ADMIN)
    app_id = await seed_application(status=ApplicationStatus.PENDING)
    reviewer_snapshots, admin_snapshots = [], []
    reviewer_feed = feed.subscribe_for(reviewer, on_snapshot=reviewer_snapshots.append)
    admin_feed = feed.subscribe_for(admin, on_snapshot=admin_snapshots.append)

    await store.update(Collection.APPLICATIONS, app_id, {"status": "accepted"})

    assert [a.id for a in reviewer_snapshots[0].applications] == [app_id]
    assert reviewer_feed.latest.applications == ()
    assert [a.id for a in admin_feed.latest.applications] == [app_id]
    assert admin_feed.latest.applications[0].status == ApplicationStatus.ACCEPTED
    assert admin_feed.latest.stats.accepted_applications == 1
    assert len(admin_snapshots) == 2
    reviewer_feed.cancel()
    admin_feed.cancel()


@pytest.mark.asyncio
async def test_applicant_sees_only_own_applications(feed, seed_user, seed_application):
    applicant = await seed_user("u1", UserRole.APPLICANT)
    own_id = await seed_application(applicant_id="u1", status=ApplicationStatus.REJECTED)
    await seed_application(applicant_id="u2")

    subscription = feed.subscribe_for(applicant)

    assert [a.id for a in subscription.latest.applications] == [own_id]
    subscription.cancel()


@pytest.mark.asyncio
async def test_admin_sees_everything_newest_first(feed, seed_user, seed_application):
    admin = await seed_user("a1", UserRole.ADMIN)
    created = [
        await seed_application(applicant_id=f"u{i}", status=status)
        for i, status in enumerate(ApplicationStatus)
    ]

    subscription = feed.subscribe_for(admin)

    assert [a.id for a in subscription.latest.applications] == list(reversed(created))
    stats = subscription.latest.stats
    assert stats.total_applications == 4
    assert stats.acceptance_rate == 25
    subscription.cancel()


def test_applicant_filter_is_pushed_to_store(capturing_store, guard):
    """Test that applicant filtering happens store-side, reviewer filtering client-side."""
    feed = RealtimeFeed(capturing_store, guard)

    feed.subscribe_for(User(id="u1", email="", name="", role=UserRole.APPLICANT))
    assert capturing_store.captured["predicates"] == (FieldFilter.eq("applicant_id", "u1"),)

    feed.subscribe_for(User(id="r1", email="", name="", role=UserRole.REVIEWER))
    assert capturing_store.captured["predicates"] == ()
    assert capturing_store.captured["collection"] == Collection.APPLICATIONS


def test_snapshots_are_reordered_newest_first(capturing_store, guard):
    """Test ordering even when the store delivers records out of order."""
    feed = RealtimeFeed(capturing_store, guard)
    subscription = feed.subscribe()

    capturing_store.captured["on_snapshot"](
        [
            _record("old", "pending", 1),
            _record("newest", "pending", 3),
            {"id": "undated", "applicant_id": "u1", "status": "pending"},
            _record("middle", "accepted", 2),
        ]
    )

    ids = [a.id for a in subscription.latest.applications]
    assert ids == ["newest", "middle", "old", "undated"]


# ============================================================================
# CANCEL TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_no_delivery_after_cancel(feed, seed_application):
    snapshots = []
    subscription = feed.subscribe(on_snapshot=snapshots.append)

    subscription.cancel()
    await seed_application()

    assert len(snapshots) == 1
    assert not subscription.active


def test_cancel_is_idempotent(capturing_store, guard):
    feed = RealtimeFeed(capturing_store, guard)
    on_snapshot = Mock()
    subscription = feed.subscribe(on_snapshot=on_snapshot)

    subscription.cancel()
    subscription.cancel()
    capturing_store.captured["on_snapshot"]([_record("late", "pending", 1)])

    capturing_store.captured["unsubscribe"].assert_called_once()
    assert on_snapshot.call_count == 1


# ============================================================================
# ERROR TESTS
# ============================================================================


def test_store_error_reaches_on_error(capturing_store, guard):
    feed = RealtimeFeed(capturing_store, guard)
    on_error = Mock()
    subscription = feed.subscribe(on_error=on_error)
    error = StoreUnavailableError("listener died")

    capturing_store.captured["on_error"](error)

    on_error.assert_called_once_with(error)
    assert subscription.last_error is error


def test_store_error_after_cancel_is_ignored(capturing_store, guard):
    feed = RealtimeFeed(capturing_store, guard)
    on_error = Mock()
    subscription = feed.subscribe(on_error=on_error)

    subscription.cancel()
    capturing_store.captured["on_error"](StoreUnavailableError("late"))

    on_error.assert_not_called()
    assert subscription.last_error is None


# ============================================================================
# STREAM TESTS
# ============================================================================


@pytest.mark.asyncio
async def test_stream_yields_latest_then_updates_until_cancel(feed, seed_application):
    subscription = feed.subscribe()
    stream = subscription.stream()

    first = await asyncio.wait_for(stream.__anext__(), timeout=1)
    await seed_application()
    second = await asyncio.wait_for(stream.__anext__(), timeout=1)
    subscription.cancel()

    assert (first.sequence, len(first.applications)) == (1, 0)
    assert (second.sequence, len(second.applications)) == (2, 1)
    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(stream.__anext__(), timeout=1)


@pytest.mark.asyncio
async def test_stream_raises_store_errors(capturing_store, guard):
    feed = RealtimeFeed(capturing_store, guard)
    subscription = feed.subscribe()
    stream = subscription.stream()
    await stream.__anext__()

    capturing_store.captured["on_error"](StoreUnavailableError("gone"))

    with pytest.raises(StoreUnavailableError):
        await asyncio.wait_for(stream.__anext__(), timeout=1)
    subscription.cancel()


@pytest.mark.asyncio
async def test_stream_of_cancelled_subscription_is_empty(feed):
    subscription = feed.subscribe()
    subscription.cancel()

    assert [snapshot async for snapshot in subscription.stream()] == []
