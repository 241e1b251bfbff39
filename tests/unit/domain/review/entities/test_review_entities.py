"""
Tests for Application, Review and User entities.
Covers: store record parsing, serialization, status helpers.
"""

from datetime import datetime, timezone

import pytest

from src.domain.review.entities.application import Application, ApplicationStatus
from src.domain.review.entities.review import Review
from src.domain.review.entities.user import User, UserRole
from src.domain.review.value_objects.review_score import ReviewScore
from src.domain.shared.exceptions import InvalidScoreError


# ============================================================================
# APPLICATION STATUS TESTS
# ============================================================================


@pytest.mark.parametrize(
    "status,terminal",
    [
        (ApplicationStatus.PENDING, False),
        (ApplicationStatus.IN_REVIEW, False),
        (ApplicationStatus.ACCEPTED, True),
        (ApplicationStatus.REJECTED, True),
    ],
)
def test_terminal_statuses(status, terminal):
    assert status.is_terminal is terminal


def test_in_review_wire_value_is_hyphenated():
    assert ApplicationStatus("in-review") is ApplicationStatus.IN_REVIEW


# ============================================================================
# APPLICATION TESTS
# ============================================================================


def test_application_from_store_record():
    """Test building an Application from a store record."""
    record = {
        "id": "a1",
        "applicant_id": "u1",
        "status": "in-review",
        "personal_info": {"first_name": "Ada", "email": "ada@example.com"},
        "project_details": {"title": "Solar", "objectives": ["Build", "Ship"]},
        "file_urls": ["file:///blobs/applications/1-cv.pdf"],
        "created_at": "2024-06-10T12:00:00.000000+00:00",
    }

    application = Application.from_dict(record)

    assert application.status == ApplicationStatus.IN_REVIEW
    assert application.personal_info.email == "ada@example.com"
    assert application.project_details.objectives == ("Build", "Ship")
    assert application.created_at == datetime(2024, 6, 10, 12, tzinfo=timezone.utc)
    assert application.updated_at is None
    assert application.is_reviewable()
    assert application.is_owned_by("u1")
    assert not application.is_owned_by("u2")


def test_application_to_dict_round_trips():
    record = {
        "id": "a1",
        "applicant_id": "u1",
        "status": "accepted",
        "file_urls": [],
        "created_at": "2024-06-10T12:00:00.000000+00:00",
    }
    application = Application.from_dict(record)

    data = application.to_dict()

    assert data["status"] == "accepted"
    assert data["created_at"] == "2024-06-10T12:00:00.000000+00:00"
    assert Application.from_dict(data) == application
    assert not application.is_reviewable()


def test_application_with_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        Application.from_dict({"id": "a1", "applicant_id": "u1", "status": "archived"})


# ============================================================================
# REVIEW TESTS
# ============================================================================


def test_review_from_store_record():
    review = Review.from_dict(
        {
            "id": "r1",
            "application_id": "a1",
            "reviewer_id": "u9",
            "reviewer_name": "Rita",
            "score": 8,
            "comments": "Strong",
            "created_at": "2024-06-10T12:00:00Z",
        }
    )

    assert review.score == ReviewScore(8)
    assert review.private_notes == ""
    assert review.to_dict()["score"] == 8


def test_review_with_stored_invalid_score_fails():
    with pytest.raises(InvalidScoreError):
        Review.from_dict(
            {"id": "r1", "application_id": "a1", "reviewer_id": "u9", "score": 42}
        )


# ============================================================================
# USER TESTS
# ============================================================================


def test_user_defaults_to_applicant():
    user = User.from_dict({"id": "u1", "email": "a@b.c", "name": "Ada"})
    assert user.role == UserRole.APPLICANT


def test_user_to_dict():
    user = User(id="u1", email="a@b.c", name="Ada", role=UserRole.ADMIN)

    assert user.to_dict() == {
        "id": "u1",
        "email": "a@b.c",
        "name": "Ada",
        "role": "admin",
        "created_at": None,
        "updated_at": None,
    }
