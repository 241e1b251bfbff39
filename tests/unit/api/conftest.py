"""
Common fixtures for API unit tests.

Provides shared test utilities:
- Service container around an InMemoryEntityStore and a tmp_path blob store
- FastAPI TestClient bound to that container
- Identity headers for one applicant, one reviewer and one admin
- Helper submitting an application through the API
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from src.api.container import ReviewPipelineContainer
from src.api.dependencies import USER_ID_HEADER
from src.api.main import create_app
from src.domain.review.entities.user import UserRole
from src.infrastructure.file_storage import LocalBlobStorage
from src.infrastructure.persistence.memory import InMemoryEntityStore


def auth(user_id: str) -> dict[str, str]:
    """Identity header forwarded by the upstream identity provider."""
    return {USER_ID_HEADER: user_id}


@pytest.fixture
def container(tmp_path):
    return ReviewPipelineContainer(
        store=InMemoryEntityStore(),
        blob_storage=LocalBlobStorage(
            base_dir=str(tmp_path / "blobs"), base_url="https://files.example.com"
        ),
    )


@pytest.fixture
def client(container):
    """
    FastAPI TestClient for testing endpoints.

    Returns TestClient configured with an app around the test container.
    """
    return TestClient(create_app(container))


@pytest.fixture
def make_user(container):
    """Store a profile with any role; returns the identity headers."""

    def _make(user_id: str, role: UserRole = UserRole.APPLICANT, name: str = "") -> dict[str, str]:
        asyncio.run(
            container.users.create_profile(
                user_id, f"{user_id}@example.com", name or user_id.title(), role
            )
        )
        return auth(user_id)

    return _make


@pytest.fixture
def applicant(make_user):
    return make_user("applicant-1", UserRole.APPLICANT, "Ada Applicant")


@pytest.fixture
def reviewer(make_user):
    return make_user("reviewer-1", UserRole.REVIEWER, "Rita Reviewer")


@pytest.fixture
def admin(make_user):
    return make_user("admin-1", UserRole.ADMIN, "Alan Admin")


@pytest.fixture
def submit_application(client):
    """POST /api/applications as the given principal; returns the new id."""

    def _submit(headers: dict[str, str], title: str = "Solar roof for the library") -> str:
        response = client.post(
            "/api/applications",
            json={
                "personal_info": {"first_name": "Ada", "last_name": "Lovelace"},
                "project_details": {"title": title, "budget": 5000, "objectives": ["Install"]},
            },
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return response.json()["application_id"]

    return _submit
