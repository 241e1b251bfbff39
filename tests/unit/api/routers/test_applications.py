"""
Tests for the applications router.

Covers:
- POST /api/applications (applicant submission)
- GET /api/applications and /api/applications/{id} (role filtering)
- POST /api/applications/{id}/status (transitions per role)
- WS /api/applications/stream (live snapshots, auth, store errors)
"""

import pytest
from fastapi import status
from starlette.websockets import WebSocketDisconnect

from src.domain.shared.exceptions import StoreUnavailableError


# ============================================================================
# SUBMISSION TESTS
# ============================================================================


def test_submit_application(client, applicant):
    response = client.post(
        "/api/applications",
        json={
            "personal_info": {"first_name": "Ada", "email": "ada@example.com"},
            "project_details": {
                "title": "Solar roof",
                "budget": 12000,
                "objectives": ["Install", " ", "Measure"],
            },
            "file_urls": ["https://files.example.com/applications/1-cv.pdf"],
        },
        headers=applicant,
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "pending"

    stored = client.get(f"/api/applications/{data['application_id']}", headers=applicant).json()
    assert stored["applicant_id"] == "applicant-1"
    assert stored["project_details"]["objectives"] == ["Install", "Measure"]
    assert stored["file_urls"] == ["https://files.example.com/applications/1-cv.pdf"]


def test_submitted_status_cannot_be_chosen(client, applicant):
    """Test that a status in the body does not reach the store."""
    response = client.post(
        "/api/applications",
        json={"project_details": {"title": "Sneaky"}, "status": "accepted"},
        headers=applicant,
    )

    assert response.json()["status"] == "pending"


def test_submit_requires_title(client, applicant):
    response = client.post(
        "/api/applications", json={"project_details": {"title": "  "}}, headers=applicant
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_submit_rejects_negative_budget(client, applicant):
    response = client.post(
        "/api/applications",
        json={"project_details": {"title": "x", "budget": -1}},
        headers=applicant,
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_reviewers_cannot_submit(client, reviewer):
    response = client.post(
        "/api/applications", json={"project_details": {"title": "x"}}, headers=reviewer
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN


# ============================================================================
# LIST / GET TESTS
# ============================================================================


def test_list_is_role_filtered(client, make_user, applicant, reviewer, admin, submit_application):
    other = make_user("applicant-2")
    own_id = submit_application(applicant, "Mine")
    other_id = submit_application(other, "Theirs")
    client.post(f"/api/applications/{other_id}/status", json={"status": "accepted"}, headers=admin)

    own = [a["id"] for a in client.get("/api/applications", headers=applicant).json()]
    reviewable = [a["id"] for a in client.get("/api/applications", headers=reviewer).json()]
    everything = [a["id"] for a in client.get("/api/applications", headers=admin).json()]

    assert own == [own_id]
    assert reviewable == [own_id]
    assert everything == [other_id, own_id]


def test_list_with_status_filter(client, applicant, admin, submit_application):
    first = submit_application(applicant, "First")
    submit_application(applicant, "Second")
    client.post(f"/api/applications/{first}/status", json={"status": "rejected"}, headers=admin)

    response = client.get("/api/applications", params={"status": "rejected"}, headers=admin)

    assert [a["id"] for a in response.json()] == [first]


def test_list_with_unknown_status_filter(client, admin):
    response = client.get("/api/applications", params={"status": "archived"}, headers=admin)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_other_applicants_application_is_404(client, make_user, applicant, submit_application):
    other = make_user("applicant-2")
    other_id = submit_application(other)

    response = client.get(f"/api/applications/{other_id}", headers=applicant)

    assert response.status_code == status.HTTP_404_NOT_FOUND


# ============================================================================
# STATUS TRANSITION TESTS
# ============================================================================


@pytest.mark.parametrize("target", ["in-review", "accepted", "rejected"])
def test_reviewer_moves_pending_application(client, applicant, reviewer, submit_application, target):
    app_id = submit_application(applicant)

    response = client.post(
        f"/api/applications/{app_id}/status", json={"status": target}, headers=reviewer
    )

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"application_id": app_id, "status": target}


def test_applicant_cannot_change_status(client, applicant, submit_application):
    app_id = submit_application(applicant)

    response = client.post(
        f"/api/applications/{app_id}/status", json={"status": "accepted"}, headers=applicant
    )

    assert response.status_code == status.HTTP_403_FORBIDDEN
    stored = client.get(f"/api/applications/{app_id}", headers=applicant).json()
    assert stored["status"] == "pending"


def test_terminal_status_cannot_change(client, applicant, admin, submit_application):
    app_id = submit_application(applicant)
    client.post(f"/api/applications/{app_id}/status", json={"status": "accepted"}, headers=admin)

    response = client.post(
        f"/api/applications/{app_id}/status", json={"status": "pending"}, headers=admin
    )

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["code"] == "INVALID_TRANSITION"


def test_status_of_unknown_application(client, admin):
    response = client.post(
        "/api/applications/missing/status", json={"status": "accepted"}, headers=admin
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND


# ============================================================================
# WEBSOCKET FEED TESTS
# ============================================================================


def test_stream_sends_initial_and_updated_snapshots(client, applicant, reviewer, submit_application):
    first_id = submit_application(applicant, "First")

    with client.websocket_connect("/api/applications/stream?user_id=reviewer-1") as websocket:
        initial = websocket.receive_json()
        second_id = submit_application(applicant, "Second")
        updated = websocket.receive_json()

    assert initial["type"] == "snapshot"
    assert initial["sequence"] == 1
    assert [a["id"] for a in initial["applications"]] == [first_id]
    assert updated["sequence"] == 2
    assert [a["id"] for a in updated["applications"]] == [second_id, first_id]
    assert updated["stats"]["total_applications"] == 2
    assert updated["stats"]["pending_applications"] == 2


def test_stream_accepts_identity_header(client, admin):
    with client.websocket_connect("/api/applications/stream", headers=admin) as websocket:
        snapshot = websocket.receive_json()

    assert snapshot["applications"] == []
    assert snapshot["stats"]["acceptance_rate"] == 0


def test_stream_applicant_sees_own_only(client, make_user, applicant, submit_application):
    other = make_user("applicant-2")
    submit_application(other, "Theirs")
    own_id = submit_application(applicant, "Mine")

    with client.websocket_connect("/api/applications/stream?user_id=applicant-1") as websocket:
        snapshot = websocket.receive_json()

    assert [a["id"] for a in snapshot["applications"]] == [own_id]


@pytest.mark.parametrize("query", ["", "?user_id=ghost"])
def test_stream_rejects_unknown_identity(client, query):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(f"/api/applications/stream{query}") as websocket:
            websocket.receive_json()

    assert exc_info.value.code == status.WS_1008_POLICY_VIOLATION


def test_stream_reports_store_failure(client, container, admin, monkeypatch):
    """Test that a store error is sent as an error message before closing with 1011."""
    subscriptions = []
    subscribe_for = container.feed.subscribe_for

    def capturing_subscribe_for(user, *args, **kwargs):
        subscription = subscribe_for(user, *args, **kwargs)
        subscriptions.append(subscription)
        return subscription

    monkeypatch.setattr(container.feed, "subscribe_for", capturing_subscribe_for)

    with client.websocket_connect("/api/applications/stream", headers=admin) as websocket:
        websocket.receive_json()
        subscriptions[0]._fail(StoreUnavailableError("listener lost"))
        error = websocket.receive_json()
        with pytest.raises(WebSocketDisconnect) as exc_info:
            websocket.receive_json()

    assert error["type"] == "error"
    assert error["code"] == "STOREUNAVAILABLE"
    assert "listener lost" in error["message"]
    assert exc_info.value.code == status.WS_1011_INTERNAL_ERROR
    assert not subscriptions[0].active


def test_stream_cancels_subscription_on_disconnect(client, container, admin, monkeypatch):
    subscriptions = []
    subscribe_for = container.feed.subscribe_for

    def capturing_subscribe_for(user, *args, **kwargs):
        subscription = subscribe_for(user, *args, **kwargs)
        subscriptions.append(subscription)
        return subscription

    monkeypatch.setattr(container.feed, "subscribe_for", capturing_subscribe_for)

    with client.websocket_connect("/api/applications/stream", headers=admin) as websocket:
        websocket.receive_json()

    assert not subscriptions[0].active
